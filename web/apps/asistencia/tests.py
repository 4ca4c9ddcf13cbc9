"""
Tests para el tablero de asistencia
Valida las reglas de clasificación, la sincronización y la API
"""

import io
import itertools
import json
from datetime import date, datetime, time
from unittest.mock import MagicMock, Mock, patch

import requests
from django.contrib.auth.models import User
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook

from apps.users.models import PerfilUsuario

from . import config
from .hikvision import HikvisionError, HikvisionService
from .logger import SincronizacionLogger
from .models import EventoAsistencia, UsuarioHikvision
from .rate_limit import LimitadorSolicitudes
from .reglas import resumen
from .reglas.alcance import Rol, alcance_para, normalizar_rol
from .reglas.almuerzo import EstadoAlmuerzo, analizar_almuerzo, formatear_duracion
from .reglas.campanas import (
    CAMPANAS,
    es_campana_ventas,
    nombre_canonico,
    subcampanas_team_leader,
    variantes_busqueda,
)
from .reglas.clasificador import Estado, Gravedad, clasificar, clasificar_subtipo
from .reglas.marcaciones import Marcacion, RegistroAsistencia
from .reglas.normalizacion import normalizar
from .reglas.rangos import RangoInvalido, resolver_rango
from .sincronizador import SincronizadorEventos, SincronizadorUsuarios, datos_usuario, determinar_tipo

SUBCAMPANAS = ['Campana SAV', 'Campana REFI', 'Campana PL']


# ========== REGLAS ==========

class NormalizarTest(SimpleTestCase):
    """Tests para la función normalizar"""

    def test_quita_tildes_y_espacios(self):
        """'Campaña SAV' debe normalizar a 'campana_sav'"""
        self.assertEqual(normalizar('Campaña SAV'), 'campana_sav')

    def test_mayusculas(self):
        self.assertEqual(normalizar('CAMPANA_SAV'), 'campana_sav')

    def test_espacios_repetidos(self):
        """'  Teams   Leaders ' debe normalizar a 'teams_leaders'"""
        self.assertEqual(normalizar('  Teams   Leaders '), 'teams_leaders')

    def test_vacios(self):
        self.assertIsNone(normalizar(None))
        self.assertIsNone(normalizar(''))
        self.assertIsNone(normalizar('   '))

    def test_solo_simbolos(self):
        """Un texto que no deja nada retorna None"""
        self.assertIsNone(normalizar('!!!'))

    def test_numero(self):
        self.assertEqual(normalizar(5757), '5757')

    def test_idempotente(self):
        for texto in ['Campaña SAV', 'ventas consolidado', 'TI', 'a-b c', '!!!', 'Ñandú 2']:
            self.assertEqual(normalizar(normalizar(texto)), normalizar(texto))


class CampanasTest(SimpleTestCase):
    """Tests para la resolución de campañas"""

    def test_variantes_de_escritura(self):
        for codigo in ['campaña_sav', 'campana_sav', 'CAMPANA_SAV', 'SAV', 'sav', 'Campana SAV']:
            self.assertEqual(nombre_canonico(codigo), 'Campana SAV', codigo)

    def test_parlo_con_tilde_y_mayusculas(self):
        self.assertEqual(nombre_canonico('CAMPAÑA_PARLO'), 'Campana PARLO')

    def test_vacio_es_sin_grupo(self):
        self.assertEqual(nombre_canonico(None), 'Sin grupo')
        self.assertEqual(nombre_canonico(''), 'Sin grupo')

    def test_desconocida_se_conserva(self):
        self.assertEqual(nombre_canonico('Bodega Norte'), 'Bodega Norte')

    def test_sinonimos_ventas(self):
        for codigo in ['campaña_ventas', 'Campana Ventas', 'ventas', 'SALES',
                       'campana_ventas_casa', 'Ventas Consolidado']:
            self.assertTrue(es_campana_ventas(codigo), codigo)
            self.assertEqual(nombre_canonico(codigo), config.CAMPANA_VENTAS)

    def test_no_es_ventas(self):
        """Ningún nombre visual distinto de ventas cuenta como ventas"""
        nombres = ['Campana 5757', 'Campana SAV', 'Campana REFI', 'Campana PL',
                   'Campana PARLO', 'TI', 'Teams Leaders', 'Administrativo']
        for nombre in nombres:
            self.assertFalse(es_campana_ventas(nombre), nombre)
            self.assertEqual(nombre_canonico(nombre), nombre)
        self.assertEqual(set(CAMPANAS.values()) - {config.CAMPANA_VENTAS}, set(nombres))
        self.assertFalse(es_campana_ventas(None))

    def test_subcampanas_team_leader(self):
        self.assertEqual(subcampanas_team_leader('campaña_ventas'), SUBCAMPANAS)
        self.assertEqual(subcampanas_team_leader('campana_5757'), ['Campana 5757'])
        self.assertEqual(subcampanas_team_leader(None), [])

    def test_variantes_busqueda(self):
        variantes = variantes_busqueda('SAV')
        self.assertEqual(variantes[0], 'SAV')
        self.assertEqual(variantes[-1], 'Campana SAV')
        self.assertIn('campaña_sav', variantes)
        self.assertIn('CAMPANA_SAV', variantes)
        self.assertEqual(len(variantes), len(set(variantes)))

    def test_variantes_desconocida_y_vacia(self):
        self.assertEqual(variantes_busqueda('xyz'), ['xyz'])
        self.assertEqual(variantes_busqueda(None), [])


class ClasificarTest(SimpleTestCase):
    """Tests para la tabla de decisión de estados"""

    COMPLETO = {
        'hora_entrada': '08:00',
        'hora_salida_almuerzo': '12:00',
        'hora_entrada_almuerzo': '12:45',
        'hora_salida': '17:00',
    }

    def test_cuatro_marcaciones(self):
        estado = clasificar(self.COMPLETO, es_hoy=False)
        self.assertEqual(estado.estado, Estado.COMPLETO)
        self.assertEqual(estado.gravedad, Gravedad.NINGUNA)
        self.assertEqual(estado.faltantes, ())
        self.assertEqual(estado.color, '#28a745')

    def test_entrada_y_salida_sin_almuerzo(self):
        estado = clasificar({'hora_entrada': '08:00', 'hora_salida': '17:00'}, es_hoy=False)
        self.assertEqual(estado.estado, Estado.COMPLETO)
        self.assertEqual(estado.descripcion, 'Sin almuerzo registrado')
        self.assertEqual(estado.faltantes, (Marcacion.SALIDA_ALMUERZO, Marcacion.ENTRADA_ALMUERZO))

    def test_solo_entrada_hoy_es_pendiente(self):
        estado = clasificar({'hora_entrada': '08:00'}, es_hoy=True)
        self.assertEqual(estado.estado, Estado.PENDIENTE)
        self.assertEqual(estado.gravedad, Gravedad.MEDIA)

    def test_solo_entrada_otro_dia_es_incompleto(self):
        estado = clasificar({'hora_entrada': '08:00'}, es_hoy=False)
        self.assertEqual(estado.estado, Estado.INCOMPLETO)
        self.assertEqual(estado.gravedad, Gravedad.MEDIA)

    def test_solo_salida_es_alta(self):
        estado = clasificar({'hora_salida': '17:00'}, es_hoy=True)
        self.assertEqual(estado.estado, Estado.PENDIENTE)
        self.assertEqual(estado.gravedad, Gravedad.ALTA)

    def test_solo_almuerzo(self):
        estado = clasificar({'hora_salida_almuerzo': '12:00'}, es_hoy=True)
        self.assertEqual(estado.estado, Estado.INCOMPLETO)
        self.assertEqual(estado.descripcion, 'Solo almuerzo')

    def test_sin_marcaciones(self):
        estado = clasificar({}, es_hoy=False)
        self.assertEqual(estado.estado, Estado.SIN_REGISTRO)
        self.assertEqual(estado.gravedad, Gravedad.ALTA)
        self.assertEqual(len(estado.faltantes), 4)

    def test_almuerzo_parcial(self):
        registro = {'hora_entrada': '08:00', 'hora_salida': '17:00', 'hora_salida_almuerzo': '12:00'}
        estado = clasificar(registro, es_hoy=False)
        self.assertEqual(estado.estado, Estado.INCOMPLETO)
        self.assertEqual(estado.faltantes, (Marcacion.ENTRADA_ALMUERZO,))

    def test_misma_hora_es_error(self):
        registro = {'hora_entrada': '08:00', 'subtipo_evento': 'ERROR - Misma hora'}
        estado = clasificar(registro, es_hoy=True)
        self.assertEqual(estado.estado, Estado.ERROR)
        self.assertEqual(estado.gravedad, Gravedad.ALTA)

    def test_hora_vacia_cuenta_como_ausente(self):
        estado = clasificar({'hora_entrada': '--:--', 'hora_salida': '17:00'}, es_hoy=False)
        self.assertEqual(estado.estado, Estado.INCOMPLETO)
        self.assertEqual(estado.gravedad, Gravedad.ALTA)

    def test_acepta_dataclass(self):
        registro = RegistroAsistencia(
            documento='1', fecha=date(2024, 5, 15),
            hora_entrada=time(8, 0), hora_salida=time(17, 0),
        )
        self.assertEqual(clasificar(registro, es_hoy=False).estado, Estado.COMPLETO)

    def test_a_dict(self):
        datos = clasificar({'hora_entrada': '08:00'}, es_hoy=True).a_dict()
        self.assertEqual(datos['estado'], 'PENDIENTE')
        self.assertEqual(datos['gravedad'], 'MEDIA')
        self.assertEqual(datos['faltantes'], ['Salida', 'Salida Almuerzo', 'Entrada Almuerzo'])

    def test_orden_gravedad(self):
        self.assertLess(Gravedad.NINGUNA, Gravedad.BAJA)
        self.assertLess(Gravedad.MEDIA, Gravedad.ALTA)

    def test_todas_las_combinaciones(self):
        """Las 16 combinaciones de marcaciones, para hoy y para otro día"""
        campos = ['hora_entrada', 'hora_salida', 'hora_salida_almuerzo', 'hora_entrada_almuerzo']
        orden = [Marcacion.ENTRADA, Marcacion.SALIDA,
                 Marcacion.SALIDA_ALMUERZO, Marcacion.ENTRADA_ALMUERZO]

        for horas, es_hoy in itertools.product(
            itertools.product([None, '08:00'], repeat=4), [True, False]
        ):
            entrada, salida, salida_alm, entrada_alm = (h is not None for h in horas)
            pendiente = Estado.PENDIENTE if es_hoy else Estado.INCOMPLETO

            if entrada and salida and salida_alm == entrada_alm:
                esperado = (Estado.COMPLETO, Gravedad.NINGUNA)
            elif entrada and salida:
                esperado = (Estado.INCOMPLETO, Gravedad.MEDIA)
            elif entrada:
                esperado = (pendiente, Gravedad.MEDIA)
            elif salida:
                esperado = (pendiente, Gravedad.ALTA)
            elif salida_alm or entrada_alm:
                esperado = (Estado.INCOMPLETO, Gravedad.MEDIA)
            else:
                esperado = (Estado.SIN_REGISTRO, Gravedad.ALTA)

            estado = clasificar(dict(zip(campos, horas)), es_hoy=es_hoy)
            contexto = f"{horas} es_hoy={es_hoy}"
            self.assertEqual((estado.estado, estado.gravedad), esperado, contexto)
            self.assertEqual(
                estado.faltantes,
                tuple(m for m, h in zip(orden, horas) if h is None),
                contexto,
            )
            self.assertEqual(estado.tiene_problemas, estado.estado != Estado.COMPLETO, contexto)

    def test_misma_hora_gana_sobre_todo(self):
        for horas in itertools.product([None, '08:00'], repeat=4):
            registro = dict(zip(
                ['hora_entrada', 'hora_salida', 'hora_salida_almuerzo', 'hora_entrada_almuerzo'],
                horas,
            ))
            registro['subtipo_evento'] = config.SUBTIPOS['MISMA_HORA']
            self.assertEqual(clasificar(registro, es_hoy=True).estado, Estado.ERROR, horas)


class ClasificarSubtipoTest(SimpleTestCase):

    def test_subtipo_conocido(self):
        self.assertEqual(clasificar_subtipo('Jornada completa', False).estado, Estado.COMPLETO)

    def test_subtipo_depende_del_dia(self):
        self.assertEqual(clasificar_subtipo('Solo entrada', True).estado, Estado.PENDIENTE)
        self.assertEqual(clasificar_subtipo('Solo entrada', False).estado, Estado.INCOMPLETO)

    def test_subtipo_desconocido(self):
        estado = clasificar_subtipo('algo raro', False)
        self.assertEqual(estado.estado, Estado.DESCONOCIDO)
        self.assertEqual(estado.gravedad, Gravedad.BAJA)
        self.assertEqual(clasificar_subtipo(None, False).estado, Estado.DESCONOCIDO)


class AnalizarAlmuerzoTest(SimpleTestCase):
    """Tests para la función analizar_almuerzo"""

    def test_normal(self):
        analisis = analizar_almuerzo('12:00', '12:45')
        self.assertEqual(analisis.estado, EstadoAlmuerzo.NORMAL)
        self.assertEqual(analisis.duracion, 45)
        self.assertFalse(analisis.tiene_problema)

    def test_limites_son_normales(self):
        self.assertEqual(analizar_almuerzo('12:00', '12:30').estado, EstadoAlmuerzo.NORMAL)
        self.assertEqual(analizar_almuerzo('12:00', '14:00').estado, EstadoAlmuerzo.NORMAL)

    def test_corto(self):
        self.assertEqual(analizar_almuerzo('12:00', '12:20').estado, EstadoAlmuerzo.CORTO)

    def test_largo(self):
        analisis = analizar_almuerzo('12:00', '14:30')
        self.assertEqual(analisis.estado, EstadoAlmuerzo.LARGO)
        self.assertEqual(analisis.duracion, 150)

    def test_no_registrado(self):
        analisis = analizar_almuerzo(None, None)
        self.assertEqual(analisis.estado, EstadoAlmuerzo.NO_REGISTRADO)
        self.assertTrue(analisis.tiene_problema)

    def test_incompleto_indica_lado_faltante(self):
        self.assertEqual(analizar_almuerzo('12:00', None).lado_faltante, Marcacion.ENTRADA_ALMUERZO)
        self.assertEqual(analizar_almuerzo(None, '13:00').lado_faltante, Marcacion.SALIDA_ALMUERZO)

    def test_hora_invalida_es_error(self):
        self.assertEqual(analizar_almuerzo('xx', '13:00').estado, EstadoAlmuerzo.ERROR)

    def test_regreso_antes_de_salida_es_error(self):
        analisis = analizar_almuerzo('13:00', '12:00')
        self.assertEqual(analisis.estado, EstadoAlmuerzo.ERROR)
        self.assertEqual(analisis.duracion, -60)
        self.assertFalse(analisis.completo)

    def test_formatos_de_hora(self):
        self.assertEqual(analizar_almuerzo(time(12, 0), time(12, 45)).duracion, 45)
        self.assertEqual(analizar_almuerzo('12:00 PM', '12:45 PM').duracion, 45)
        self.assertEqual(analizar_almuerzo('12:00:30', '12:45:10').duracion, 45)

    def test_formatear_duracion(self):
        self.assertEqual(formatear_duracion(45), '45m')
        self.assertEqual(formatear_duracion(65), '1h 5m')
        self.assertIsNone(formatear_duracion(None))

    def test_a_dict(self):
        datos = analizar_almuerzo('12:00', '13:05').a_dict()
        self.assertEqual(datos['duracion_texto'], '1h 5m')
        self.assertEqual(datos['estado'], 'NORMAL')


class AlcanceTest(SimpleTestCase):
    """Tests para el alcance por rol y campaña"""

    def test_roles_que_ven_todo(self):
        for rol in ['TI', 'IT', 'Admin', 'administrador', 'Administrador']:
            self.assertTrue(alcance_para(rol, None).ver_todas, rol)

    def test_team_leader_ventas(self):
        alcance = alcance_para('Team Leader', 'campaña_ventas')
        self.assertEqual(list(alcance.campanas), SUBCAMPANAS)
        self.assertTrue(alcance.permite('campana_refi'))
        self.assertFalse(alcance.permite('Campana 5757'))

    def test_agente_campana_conocida(self):
        alcance = alcance_para('Agente', 'campana_5757')
        self.assertEqual(alcance.campanas, ('Campana 5757',))
        self.assertTrue(alcance.permite('Campana 5757'))
        self.assertFalse(alcance.permite('Campana SAV'))

    def test_sin_campana_o_desconocida_es_vacio(self):
        self.assertTrue(alcance_para('Agente', None).vacio)
        self.assertTrue(alcance_para('Supervisor', 'Bodega Norte').vacio)
        self.assertFalse(alcance_para('Agente', None).permite('Sin grupo'))

    def test_rol_desconocido_con_ventas(self):
        self.assertEqual(list(alcance_para('Invitado', 'ventas').campanas), SUBCAMPANAS)

    def test_normalizar_rol(self):
        self.assertEqual(normalizar_rol('TeamLeader'), Rol.TEAM_LEADER)
        self.assertEqual(normalizar_rol('team leader'), Rol.TEAM_LEADER)
        self.assertEqual(normalizar_rol('Agent'), Rol.AGENTE)
        self.assertIsNone(normalizar_rol('Invitado'))


class ResolverRangoTest(SimpleTestCase):
    HOY = date(2024, 5, 15)

    def test_hoy(self):
        rango = resolver_rango('hoy', self.HOY)
        self.assertEqual((rango.inicio, rango.fin), (self.HOY, self.HOY))

    def test_siete_y_treinta_dias(self):
        self.assertEqual(resolver_rango('7dias', self.HOY).inicio, date(2024, 5, 8))
        self.assertEqual(resolver_rango('last-30-days', self.HOY).inicio, date(2024, 4, 15))

    def test_desconocido_es_hoy(self):
        self.assertEqual(resolver_rango('semana', self.HOY).tipo, 'hoy')
        self.assertEqual(resolver_rango(None, self.HOY).inicio, self.HOY)

    def test_personalizado(self):
        rango = resolver_rango('personalizado', self.HOY, '2024-05-01', '2024-05-10')
        self.assertEqual(rango.inicio, date(2024, 5, 1))
        self.assertEqual(rango.a_dict()['fin'], '2024-05-10')

    def test_custom(self):
        rango = resolver_rango('custom:2024-05-01,2024-05-03', self.HOY)
        self.assertEqual(rango.fin, date(2024, 5, 3))

    def test_invalidos(self):
        with self.assertRaises(RangoInvalido):
            resolver_rango('personalizado', self.HOY, '2024-05-10', '2024-05-01')
        with self.assertRaises(RangoInvalido):
            resolver_rango('personalizado', self.HOY, '2024-13-01', '2024-05-01')
        with self.assertRaises(RangoInvalido):
            resolver_rango('personalizado', self.HOY)
        with self.assertRaises(RangoInvalido):
            resolver_rango('custom:2024-05-01', self.HOY)


class ResumenTest(SimpleTestCase):

    def setUp(self):
        self.estados = (
            [clasificar({'hora_entrada': '08:00', 'hora_salida': '17:00'}, False)] * 2
            + [clasificar({}, False)]
            + [clasificar({'hora_entrada': '08:00'}, True)] * 3
        )

    def test_por_gravedad_tiene_todas_las_claves(self):
        conteo = resumen.por_gravedad(self.estados)
        self.assertEqual(conteo, {'NINGUNA': 2, 'BAJA': 0, 'MEDIA': 3, 'ALTA': 1})

    def test_resumen_ordenado_por_gravedad(self):
        filas = resumen.resumen_por_estado(self.estados)
        self.assertEqual([f['estado'] for f in filas], ['SIN_REGISTRO', 'PENDIENTE', 'COMPLETO'])
        self.assertEqual([f['porcentaje'] for f in filas], [17, 50, 33])

    def test_alertas(self):
        analisis = [analizar_almuerzo('12:00', '12:45'), analizar_almuerzo('12:00', '12:10'),
                    analizar_almuerzo(None, None)]
        almuerzos = resumen.almuerzos(analisis)
        self.assertEqual(almuerzos['normales'], 1)
        self.assertEqual(almuerzos['cortos'], 1)
        self.assertEqual(almuerzos['no_registrados'], 1)
        self.assertEqual(almuerzos['completos'], 2)

        alertas = resumen.alertas(resumen.por_gravedad(self.estados), almuerzos)
        self.assertTrue(alertas['requiere_accion_inmediata'])
        self.assertTrue(alertas['requiere_seguimiento'])
        self.assertTrue(alertas['problemas_almuerzo'])

    def test_almuerzo_invertido_no_es_completo(self):
        """Un regreso anterior a la salida es ERROR y no suma a completos"""
        almuerzos = resumen.almuerzos([analizar_almuerzo('13:00', '12:00'),
                                       analizar_almuerzo('12:00', '12:40')])
        self.assertEqual(almuerzos['errores'], 1)
        self.assertEqual(almuerzos['completos'], 1)

    def test_por_campana(self):
        filas = [('Campana SAV', self.estados[0]), ('Campana SAV', self.estados[3]),
                 ('TI', self.estados[2])]
        conteo = resumen.por_campana(filas)
        self.assertEqual(conteo['Campana SAV'],
                         {'total': 2, 'completos': 1, 'pendientes': 1, 'incompletos': 0})
        self.assertEqual(conteo['TI']['total'], 1)


# ========== LIMITADOR ==========

class LimitadorSolicitudesTest(SimpleTestCase):

    def setUp(self):
        self.ahora = 0
        self.limitador = LimitadorSolicitudes(espera=5, retencion=60, reloj=lambda: self.ahora)

    def test_espera_entre_solicitudes(self):
        self.assertTrue(self.limitador.permitir('1.1.1.1', '100'))
        self.ahora = 2
        self.assertFalse(self.limitador.permitir('1.1.1.1', '100'))
        self.assertTrue(self.limitador.permitir('1.1.1.1', '200'))
        self.ahora = 6
        self.assertTrue(self.limitador.permitir('1.1.1.1', '100'))

    def test_descarta_entradas_viejas(self):
        self.limitador.permitir('1.1.1.1', '100')
        self.limitador.permitir('2.2.2.2', '100')
        self.ahora = 100
        self.limitador.permitir('3.3.3.3', '100')
        self.assertEqual(len(self.limitador), 1)


# ========== CLIENTE HIKVISION ==========

def _respuesta(status=200, datos=None):
    respuesta = Mock()
    respuesta.status_code = status
    respuesta.ok = status < 400
    respuesta.text = json.dumps(datos) if datos is not None else ''
    respuesta.json.return_value = datos
    return respuesta


class HikvisionServiceTest(SimpleTestCase):

    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.servicio = HikvisionService('10.0.0.1', 'admin', 'clave', session=self.session)
        self.inicio = timezone.make_aware(datetime(2024, 5, 15, 0, 0))
        self.fin = timezone.make_aware(datetime(2024, 5, 15, 23, 59, 59))

    def test_lote_sin_resultados_404(self):
        self.session.post.return_value = _respuesta(404)
        self.assertEqual(self.servicio.consultar_lote_eventos(self.inicio, self.fin), ([], 0))

    def test_error_http(self):
        self.session.post.return_value = _respuesta(500)
        with self.assertRaises(HikvisionError):
            self.servicio.consultar_lote_eventos(self.inicio, self.fin)

    def test_error_de_red(self):
        self.session.post.side_effect = requests.ConnectionError('sin ruta')
        with self.assertRaises(HikvisionError):
            self.servicio.consultar_lote_eventos(self.inicio, self.fin)

    @patch('apps.asistencia.hikvision.time_module.sleep')
    def test_paginacion(self, _sleep):
        self.session.post.side_effect = [
            _respuesta(datos={'AcsEvent': {'InfoList': [{'a': 1}, {'a': 2}], 'totalMatches': 3}}),
            _respuesta(datos={'AcsEvent': {'InfoList': [{'a': 3}], 'totalMatches': 3}}),
        ]
        eventos = self.servicio.obtener_eventos(self.inicio, self.fin)

        self.assertEqual(len(eventos), 3)
        self.assertEqual(eventos[0]['dispositivo'], '10.0.0.1')
        self.assertEqual(self.session.post.call_count, 2)
        segunda = self.session.post.call_args_list[1].kwargs['json']['AcsEventCond']
        self.assertEqual(segunda['searchResultPosition'], 2)
        self.assertEqual(segunda['maxResults'], config.HIKVISION_MAX_RESULTADOS)

    @patch('apps.asistencia.hikvision.time_module.sleep')
    @patch.object(config, 'HIKVISION_MAX_RESULTADOS', 2)
    def test_paginacion_usuarios(self, _sleep):
        """Un lote incompleto es el último"""
        self.session.post.side_effect = [
            _respuesta(datos={'UserInfoSearch': {'UserInfo': [{'employeeNo': '1'}, {'employeeNo': '2'}]}}),
            _respuesta(datos={'UserInfoSearch': {'UserInfo': [{'employeeNo': '3'}]}}),
        ]
        usuarios = self.servicio.obtener_usuarios()

        self.assertEqual([u['employeeNo'] for u in usuarios], ['1', '2', '3'])
        self.assertEqual(usuarios[0]['dispositivo'], '10.0.0.1')
        self.assertEqual(self.session.post.call_count, 2)
        segunda = self.session.post.call_args_list[1].kwargs['json']['UserInfoSearchCond']
        self.assertEqual(segunda['searchResultPosition'], 2)

    def test_usuarios_sin_resultados(self):
        self.session.post.return_value = _respuesta(404)
        self.assertEqual(self.servicio.obtener_usuarios(), [])


# ========== SINCRONIZACIÓN ==========

def _evento(documento, hora, estado=None, label='', nombre='Empleado', **extra):
    evento = {
        'employeeNoString': documento,
        'name': nombre,
        'time': f'2024-05-15T{hora}-05:00',
        'label': label,
        'dispositivo': '10.0.0.1',
    }
    if estado:
        evento['attendanceStatus'] = estado
    evento.update(extra)
    return evento


class ClienteFalso:
    def __init__(self, eventos=(), usuarios=()):
        self.eventos = eventos
        self.usuarios = usuarios

    def obtener_eventos(self, inicio, fin):
        return [dict(e) for e in self.eventos]

    def obtener_usuarios(self):
        return [dict(u) for u in self.usuarios]


class ClienteCaido:
    def obtener_eventos(self, inicio, fin):
        raise HikvisionError('timeout')

    def obtener_usuarios(self):
        raise HikvisionError('timeout')


class DeterminarTipoTest(SimpleTestCase):

    def test_attendance_status(self):
        self.assertEqual(determinar_tipo({'attendanceStatus': 'breakOut'}, 9)[0], Marcacion.SALIDA_ALMUERZO)
        self.assertEqual(determinar_tipo({'attendanceStatus': 'checkOut'}, 9)[0], Marcacion.SALIDA)

    def test_etiqueta(self):
        self.assertEqual(determinar_tipo({'label': 'Salida a almuerzo'}, 12)[0], Marcacion.SALIDA_ALMUERZO)
        self.assertEqual(determinar_tipo({'label': 'Entrada de almuerzo'}, 13)[0], Marcacion.ENTRADA_ALMUERZO)
        self.assertEqual(determinar_tipo({'label': 'Salida'}, 8)[0], Marcacion.SALIDA)

    def test_por_hora(self):
        self.assertEqual(determinar_tipo({}, 8), (Marcacion.ENTRADA, 'hora'))
        self.assertEqual(determinar_tipo({}, 15), (Marcacion.SALIDA, 'hora'))
        self.assertIsNone(determinar_tipo({}, 12)[0])


class SincronizadorEventosTest(TestCase):
    FECHA = date(2024, 5, 15)

    def _sincronizador(self, clientes):
        return SincronizadorEventos(
            dispositivos=list(clientes),
            logger=SincronizacionLogger(archivo=False),
            crear_cliente=lambda ip: clientes[ip],
            pausa_reintento=0,
        )

    def setUp(self):
        UsuarioHikvision.objects.create(employee_no='100', nombre='Ana', departamento='campaña_sav')
        self.eventos = [
            _evento('100', '08:05:00', 'checkIn', nombre='Ana'),
            _evento('100', '08:00:00', 'checkIn', nombre='Ana'),
            _evento('100', '12:00:00', 'breakOut', nombre='Ana'),
            _evento('100', '12:45:00', 'breakIn', nombre='Ana'),
            _evento('100', '16:00:00', 'checkOut', nombre='Ana'),
            _evento('100', '17:00:00', 'checkOut', nombre='Ana'),
            _evento('200', '08:00:00', 'checkIn', nombre='Luis'),
            _evento('200', '08:00:00', 'checkOut', nombre='Luis'),
            _evento('', '07:00:00', cardNo='300', nombre='Eva', department='TI'),
            # 22:00 del 14 en hora de Colombia
            _evento('100', '22:00:00', 'checkOut', time='2024-05-15T03:00:00Z'),
        ]

    def test_agrupa_y_guarda(self):
        resultado = self._sincronizador({'10.0.0.1': ClienteFalso(self.eventos)}).ejecutar(self.FECHA)

        self.assertTrue(resultado['success'])
        self.assertEqual(resultado['eventos_obtenidos'], 10)
        self.assertEqual(resultado['nuevos_registros'], 3)

        ana = EventoAsistencia.objects.get(documento='100', fecha=self.FECHA)
        self.assertEqual(ana.hora_entrada, time(8, 0))
        self.assertEqual(ana.hora_salida, time(17, 0))
        self.assertEqual(ana.hora_salida_almuerzo, time(12, 0))
        self.assertEqual(ana.hora_entrada_almuerzo, time(12, 45))
        self.assertEqual(ana.campana, 'campaña_sav')
        self.assertEqual(ana.subtipo_evento, 'Jornada completa')

        eva = EventoAsistencia.objects.get(documento='300')
        self.assertEqual(eva.hora_entrada, time(7, 0))
        self.assertEqual(eva.campana, 'TI')

    def test_misma_hora_descarta_salida(self):
        self._sincronizador({'10.0.0.1': ClienteFalso(self.eventos)}).ejecutar(self.FECHA)

        luis = EventoAsistencia.objects.get(documento='200')
        self.assertEqual(luis.hora_entrada, time(8, 0))
        self.assertIsNone(luis.hora_salida)
        self.assertEqual(luis.subtipo_evento, config.SUBTIPOS['MISMA_HORA'])
        self.assertEqual(clasificar(luis, es_hoy=False).estado, Estado.ERROR)

    def test_primera_escritura_gana(self):
        self._sincronizador({'10.0.0.1': ClienteFalso(self.eventos)}).ejecutar(self.FECHA)

        nuevos = [
            _evento('100', '07:00:00', 'checkIn', nombre='Ana'),
            _evento('200', '17:00:00', 'checkOut', nombre='Luis'),
        ]
        resultado = self._sincronizador({'10.0.0.1': ClienteFalso(nuevos)}).ejecutar(self.FECHA)

        self.assertEqual(resultado['sin_cambios'], 1)
        self.assertEqual(resultado['registros_actualizados'], 1)
        self.assertEqual(EventoAsistencia.objects.get(documento='100').hora_entrada, time(8, 0))

        luis = EventoAsistencia.objects.get(documento='200')
        self.assertEqual(luis.hora_salida, time(17, 0))
        self.assertEqual(luis.subtipo_evento, 'Sin almuerzo registrado')

    def test_dispositivo_caido_no_detiene_a_los_demas(self):
        resultado = self._sincronizador({
            '10.0.0.1': ClienteFalso(self.eventos),
            '10.0.0.2': ClienteCaido(),
        }).ejecutar(self.FECHA)

        self.assertEqual(resultado['dispositivos_fallidos'], ['10.0.0.2'])
        self.assertGreaterEqual(resultado['errores'], 1)
        self.assertEqual(EventoAsistencia.objects.count(), 3)

    def test_sin_eventos(self):
        resultado = self._sincronizador({'10.0.0.1': ClienteFalso([])}).ejecutar(self.FECHA)
        self.assertEqual(resultado['registros_procesados'], 0)
        self.assertEqual(EventoAsistencia.objects.count(), 0)


class DatosUsuarioTest(SimpleTestCase):

    def test_campos_del_dispositivo(self):
        datos = datos_usuario({
            'employeeNo': 100, 'name': ' Ana ', 'gender': 'female', 'deptName': 'Campaña SAV',
            'userType': 'normal', 'Valid': {'enable': True}, 'faceURL': 'https://x/foto.jpg',
        })
        self.assertEqual(datos['employee_no'], '100')
        self.assertEqual(datos['nombre'], 'Ana')
        self.assertEqual(datos['genero'], 'Femenino')
        self.assertEqual(datos['departamento'], 'Campaña SAV')
        self.assertEqual(datos['tipo_usuario'], 'Normal')
        self.assertEqual(datos['estado'], 'Activo')

    def test_departamento_por_grupo(self):
        self.assertEqual(datos_usuario({'employeeNo': '1', 'groupId': '5'})['departamento'], 'Campana REFI')
        self.assertIsNone(datos_usuario({'employeeNo': '1', 'groupId': 99})['departamento'])

    def test_valores_por_defecto(self):
        datos = datos_usuario({'employeeNo': '1', 'Valid': {'enable': False}})
        self.assertEqual(datos['nombre'], 'Sin nombre')
        self.assertEqual(datos['genero'], 'No especificado')
        self.assertEqual(datos['tipo_usuario'], 'Desconocido')
        self.assertEqual(datos['estado'], 'Inactivo')

    def test_sin_employee_no(self):
        self.assertIsNone(datos_usuario({'name': 'Ana'}))


class SincronizadorUsuariosTest(TestCase):

    def _sincronizador(self, clientes):
        return SincronizadorUsuarios(
            dispositivos=list(clientes),
            logger=SincronizacionLogger(archivo=False, estadisticas=SincronizadorUsuarios.ESTADISTICAS),
            crear_cliente=lambda ip: clientes[ip],
            pausa_reintento=0,
        )

    def test_crea_y_actualiza(self):
        UsuarioHikvision.objects.create(employee_no='100', nombre='Ana Vieja', departamento='TI')
        UsuarioHikvision.objects.create(employee_no='300', nombre='Eva', departamento='Administrativo',
                                        genero='No especificado', estado='Desconocido',
                                        tipo_usuario='Desconocido')
        usuarios = [
            {'employeeNo': '100', 'name': 'Ana', 'deptName': 'campana sav'},
            {'employeeNo': '200', 'name': 'Luis', 'groupId': 3},
            {'employeeNo': '300', 'name': 'Eva'},
            {'name': 'Sin documento'},
        ]
        resultado = self._sincronizador({'10.0.0.1': ClienteFalso(usuarios=usuarios)}).ejecutar()

        self.assertTrue(resultado['success'])
        self.assertEqual(resultado['usuarios_obtenidos'], 4)
        self.assertEqual(resultado['nuevos_registros'], 1)
        self.assertEqual(resultado['registros_actualizados'], 1)
        self.assertEqual(resultado['sin_cambios'], 1)
        self.assertEqual(resultado['errores'], 1)

        ana = UsuarioHikvision.objects.get(employee_no='100')
        self.assertEqual((ana.nombre, ana.departamento), ('Ana', 'campana sav'))
        self.assertEqual(UsuarioHikvision.objects.get(employee_no='200').departamento, 'Campana 5757')
        # Sin departamento en el dispositivo se conserva el guardado
        self.assertEqual(UsuarioHikvision.objects.get(employee_no='300').departamento, 'Administrativo')

    def test_primer_dispositivo_gana(self):
        resultado = self._sincronizador({
            '10.0.0.1': ClienteFalso(usuarios=[{'employeeNo': '1', 'name': 'Primero'}]),
            '10.0.0.2': ClienteFalso(usuarios=[{'employeeNo': '1', 'name': 'Segundo'}]),
        }).ejecutar()
        self.assertEqual(resultado['nuevos_registros'], 1)
        self.assertEqual(UsuarioHikvision.objects.get(employee_no='1').nombre, 'Primero')

    def test_dispositivo_caido(self):
        resultado = self._sincronizador({
            '10.0.0.1': ClienteFalso(usuarios=[{'employeeNo': '1'}]),
            '10.0.0.2': ClienteCaido(),
        }).ejecutar()
        self.assertTrue(resultado['success'])
        self.assertEqual(resultado['dispositivos_fallidos'], ['10.0.0.2'])
        self.assertEqual(UsuarioHikvision.objects.count(), 1)

    def test_todos_caidos(self):
        resultado = self._sincronizador({'10.0.0.1': ClienteCaido()}).ejecutar()
        self.assertFalse(resultado['success'])


# ========== API ==========

def _crear_usuario(username, rol=None, campana=None, activo=True):
    user = User.objects.create_user(username=username, password='clave-segura-123')
    if rol:
        PerfilUsuario.objects.create(user=user, rol=rol, campana=campana, activo=activo)
    return user


class ApiBaseTest(TestCase):

    def setUp(self):
        self.hoy = timezone.localdate()
        self.ti = _crear_usuario('ti', Rol.TI)
        self.tl_ventas = _crear_usuario('tl', Rol.TEAM_LEADER, 'campaña_ventas')
        self.agente = _crear_usuario('agente', Rol.AGENTE, 'campana_5757')
        self.sin_campana = _crear_usuario('nuevo', Rol.AGENTE)

        UsuarioHikvision.objects.create(employee_no='3', nombre='Carla', departamento='CAMPANA_REFI')
        UsuarioHikvision.objects.create(employee_no='5', nombre='Pedro', departamento='campana_5757')

        EventoAsistencia.objects.create(documento='1', nombre='Ana', fecha=self.hoy,
                                        hora_entrada=time(8, 0), campana='campana_sav')
        EventoAsistencia.objects.create(documento='2', nombre='Bruno', fecha=self.hoy,
                                        hora_entrada=time(8, 0), hora_salida=time(17, 0),
                                        campana='Campana 5757')
        EventoAsistencia.objects.create(documento='3', nombre='Carla', fecha=self.hoy,
                                        hora_salida=time(17, 0))
        EventoAsistencia.objects.create(documento='4', nombre='Diana', fecha=self.hoy,
                                        campana='TI', hora_salida_almuerzo=time(12, 0))

    def _documentos(self, response):
        return sorted(e['documento'] for e in response.json()['eventos'])


class EventosApiTest(ApiBaseTest):
    URL = reverse('asistencia:eventos')

    def test_anonimo_401(self):
        self.assertEqual(self.client.get(self.URL).status_code, 401)

    def test_ti_ve_todo(self):
        self.client.force_login(self.ti)
        response = self.client.get(self.URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._documentos(response), ['1', '2', '3', '4'])
        self.assertEqual(response.json()['total'], 4)

    def test_team_leader_ventas(self):
        self.client.force_login(self.tl_ventas)
        response = self.client.get(self.URL)
        self.assertEqual(self._documentos(response), ['1', '3'])
        self.assertTrue(response.json()['metadata']['es_team_leader_ventas'])

    def test_agente_solo_su_campana(self):
        self.client.force_login(self.agente)
        self.assertEqual(self._documentos(self.client.get(self.URL)), ['2'])

    def test_sin_campana_no_ve_nada(self):
        self.client.force_login(self.sin_campana)
        self.assertEqual(self._documentos(self.client.get(self.URL)), [])

    def test_filtro_campana_no_amplia_alcance(self):
        self.client.force_login(self.tl_ventas)
        self.assertEqual(self._documentos(self.client.get(self.URL, {'campana': 'campana_5757'})), [])
        self.client.force_login(self.ti)
        self.assertEqual(self._documentos(self.client.get(self.URL, {'campana': 'SAV'})), ['1'])

    def test_busqueda(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._documentos(self.client.get(self.URL, {'q': 'carl'})), ['3'])

    def test_evento_serializado(self):
        self.client.force_login(self.ti)
        eventos = {e['documento']: e for e in self.client.get(self.URL).json()['eventos']}

        ana = eventos['1']
        self.assertEqual(ana['estado'], 'PENDIENTE')
        self.assertEqual(ana['horas']['salida'], config.HORA_VACIA)
        self.assertEqual(ana['campana'], 'Campana SAV')
        self.assertEqual(ana['campana_original'], 'campana_sav')
        self.assertTrue(ana['tiene_problemas'])

        self.assertEqual(eventos['2']['estado'], 'COMPLETO')
        self.assertEqual(eventos['3']['campana'], 'Campana REFI')
        self.assertEqual(eventos['3']['gravedad'], 'ALTA')

    def test_departamento_con_tilde_o_espacios(self):
        UsuarioHikvision.objects.create(employee_no='6', nombre='Elena', departamento='Campaña SAV')
        UsuarioHikvision.objects.create(employee_no='7', nombre='Fabio', departamento='campana sav')
        for documento, nombre in (('6', 'Elena'), ('7', 'Fabio')):
            EventoAsistencia.objects.create(documento=documento, nombre=nombre, fecha=self.hoy,
                                            hora_entrada=time(8, 0))

        self.client.force_login(self.tl_ventas)
        self.assertEqual(self._documentos(self.client.get(self.URL)), ['1', '3', '6', '7'])

        self.client.force_login(self.ti)
        eventos = {e['documento']: e for e in self.client.get(self.URL).json()['eventos']}
        self.assertEqual(eventos['6']['campana'], 'Campana SAV')
        self.assertEqual(eventos['7']['campana'], 'Campana SAV')
        self.assertEqual(eventos['6']['campana_original'], 'Campaña SAV')

    def test_fila_sin_horas_usa_subtipo(self):
        EventoAsistencia.objects.create(documento='8', nombre='Gina', fecha=self.hoy,
                                        subtipo_evento='Jornada completa')
        self.client.force_login(self.ti)
        eventos = {e['documento']: e for e in self.client.get(self.URL).json()['eventos']}
        self.assertEqual(eventos['8']['estado'], 'COMPLETO')
        self.assertEqual(eventos['8']['subtipo_evento'], 'Jornada completa')

    def test_almuerzo_invertido_no_es_completo(self):
        EventoAsistencia.objects.create(documento='9', nombre='Hugo', fecha=self.hoy,
                                        hora_salida_almuerzo=time(13, 0),
                                        hora_entrada_almuerzo=time(12, 0))
        self.client.force_login(self.ti)
        eventos = {e['documento']: e for e in self.client.get(self.URL).json()['eventos']}
        self.assertFalse(eventos['9']['tiene_almuerzo_completo'])
        self.assertFalse(eventos['4']['tiene_almuerzo_completo'])

    def test_rango_invalido_400(self):
        self.client.force_login(self.ti)
        response = self.client.get(self.URL, {
            'rango': 'personalizado', 'fechaInicio': '2024-05-10', 'fechaFin': '2024-05-01',
        })
        self.assertEqual(response.status_code, 400)


class FaltasApiTest(ApiBaseTest):
    URL = reverse('asistencia:faltas_api')

    def test_resumen_del_dia(self):
        self.client.force_login(self.ti)
        datos = self.client.get(self.URL).json()
        self.assertTrue(datos['success'])
        self.assertEqual(datos['metadata']['total_registros'], 4)
        self.assertEqual(datos['estadisticas']['por_gravedad']['ALTA'], 1)
        self.assertTrue(datos['alertas']['requiere_accion_inmediata'])
        self.assertEqual(datos['resumen'][0]['gravedad'], 'ALTA')

    def test_fecha_invalida(self):
        self.client.force_login(self.ti)
        self.assertEqual(self.client.get(self.URL, {'fecha': '15/05/2024'}).status_code, 400)


class DescargarEventosExcelTest(ApiBaseTest):

    def test_excel(self):
        self.client.force_login(self.ti)
        response = self.client.get(reverse('asistencia:eventos_excel'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment', response['Content-Disposition'])

        ws = load_workbook(io.BytesIO(response.content)).active
        self.assertEqual(ws['A1'].value, 'DOCUMENTO')
        self.assertEqual(ws.max_row, 5)


class SincronizarApiTest(ApiBaseTest):
    URL = reverse('asistencia:sincronizar')

    def test_permisos(self):
        self.assertEqual(self.client.post(self.URL).status_code, 401)
        self.client.force_login(self.agente)
        self.assertEqual(self.client.post(self.URL).status_code, 403)

    @patch('apps.asistencia.views.SincronizadorEventos')
    def test_ti_sincroniza(self, sincronizador):
        sincronizador.return_value.ejecutar.return_value = {'success': True, 'message': 'ok'}
        self.client.force_login(self.ti)
        response = self.client.post(self.URL, data=json.dumps({'fecha': '2024-05-15'}),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 200)
        sincronizador.return_value.ejecutar.assert_called_once_with(fecha=date(2024, 5, 15))


class CronSincronizarTest(TestCase):
    URL = reverse('asistencia:cron_sincronizar')

    @override_settings(CRON_SECRET_TOKEN='secreto')
    def test_token_invalido(self):
        self.assertEqual(self.client.get(self.URL).status_code, 401)
        self.assertEqual(self.client.get(self.URL, {'token': 'otro'}).status_code, 401)

    @override_settings(CRON_SECRET_TOKEN='')
    def test_sin_token_configurado(self):
        self.assertEqual(self.client.get(self.URL, {'token': ''}).status_code, 401)

    @override_settings(CRON_SECRET_TOKEN='secreto')
    @patch('apps.asistencia.cron.SincronizadorEventos')
    def test_bearer(self, sincronizador):
        sincronizador.return_value.ejecutar.return_value = {'success': True, 'message': 'ok'}
        response = self.client.get(self.URL, HTTP_AUTHORIZATION='Bearer secreto')
        self.assertEqual(response.status_code, 200)
        sincronizador.return_value.ejecutar.assert_called_once_with(fecha=None)


class EmpleadosApiTest(ApiBaseTest):
    URL = reverse('asistencia:empleados')

    def _empleados(self, **params):
        return sorted(e['employeeNo'] for e in self.client.get(self.URL, params).json()['empleados'])

    def test_ti_ve_todos(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._empleados(), ['3', '5'])

    def test_team_leader_solo_su_alcance(self):
        self.client.force_login(self.tl_ventas)
        self.assertEqual(self._empleados(), ['3'])

    def test_departamento_con_tilde_o_espacios(self):
        UsuarioHikvision.objects.create(employee_no='6', nombre='Elena', departamento='Campaña SAV')
        UsuarioHikvision.objects.create(employee_no='7', nombre='Fabio', departamento='campana sav')
        self.client.force_login(self.tl_ventas)
        self.assertEqual(self._empleados(), ['3', '6', '7'])
        self.assertEqual(self._empleados(department='SAV'), ['6', '7'])

    def test_agente_lista_vacia(self):
        self.client.force_login(self.agente)
        datos = self.client.get(self.URL).json()
        self.assertEqual(datos['empleados'], [])
        self.assertIn('warning', datos)

    def test_filtro_departamento_y_paginacion(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._empleados(department='Campana 5757'), ['5'])
        datos = self.client.get(self.URL, {'limit': 1, 'page': 2}).json()
        self.assertEqual(datos['total'], 2)
        self.assertEqual(datos['total_pages'], 2)
        self.assertEqual(len(datos['empleados']), 1)


class SincronizarUsuariosApiTest(ApiBaseTest):
    URL = reverse('asistencia:sincronizar_usuarios')

    def test_permisos(self):
        self.assertEqual(self.client.post(self.URL).status_code, 401)
        self.client.force_login(self.tl_ventas)
        self.assertEqual(self.client.post(self.URL).status_code, 403)

    @patch('apps.asistencia.views.SincronizadorUsuarios')
    def test_ti_sincroniza(self, sincronizador):
        sincronizador.return_value.ejecutar.return_value = {'success': True, 'message': 'ok'}
        self.client.force_login(self.ti)
        response = self.client.post(self.URL)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        sincronizador.return_value.ejecutar.assert_called_once_with()

    @patch('apps.asistencia.views.SincronizadorUsuarios')
    def test_error_interno(self, sincronizador):
        sincronizador.return_value.ejecutar.side_effect = RuntimeError('db caída')
        self.client.force_login(self.ti)
        response = self.client.post(self.URL)
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])


class EliminarEmpleadoTest(ApiBaseTest):
    URL = reverse('asistencia:eliminar_empleado')

    def setUp(self):
        super().setUp()
        patcher = patch('apps.asistencia.views.limitador_eliminacion', LimitadorSolicitudes())
        patcher.start()
        self.addCleanup(patcher.stop)

    def _post(self, cuerpo):
        return self.client.post(self.URL, data=json.dumps(cuerpo), content_type='application/json')

    def test_elimina(self):
        self.client.force_login(self.ti)
        response = self._post({'employeeNo': '5'})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(UsuarioHikvision.objects.filter(employee_no='5').exists())

    def test_cuerpo_invalido(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._post({'employeeNo': '5', 'extra': 1}).status_code, 400)
        self.assertEqual(self._post({'employeeNo': '5; DROP'}).status_code, 400)
        self.assertEqual(self._post(['5']).status_code, 400)

    def test_limite_de_solicitudes(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._post({'employeeNo': '5'}).status_code, 200)
        self.assertEqual(self._post({'employeeNo': '5'}).status_code, 429)

    def test_no_encontrado(self):
        self.client.force_login(self.ti)
        self.assertEqual(self._post({'employeeNo': '999'}).status_code, 404)

    def test_team_leader_no_puede(self):
        self.client.force_login(self.tl_ventas)
        self.assertEqual(self._post({'employeeNo': '3'}).status_code, 403)


class FotoApiTest(ApiBaseTest):

    def test_employee_no_invalido(self):
        self.client.force_login(self.ti)
        response = self.client.get(reverse('asistencia:foto', args=['abc']))
        self.assertEqual(response.status_code, 400)

    @patch('apps.asistencia.views.dispositivos_configurados', return_value=[])
    def test_sin_foto(self, _dispositivos):
        self.client.force_login(self.ti)
        self.assertEqual(self.client.get(reverse('asistencia:foto', args=['5'])).status_code, 404)

    @patch('apps.asistencia.views.HikvisionService')
    @patch('apps.asistencia.views.dispositivos_configurados', return_value=['10.0.0.1', '10.0.0.2'])
    def test_primer_dispositivo_con_foto(self, _dispositivos, servicio):
        servicio.return_value.descargar_foto.side_effect = [None, (b'jpg', 'image/jpeg')]
        self.client.force_login(self.ti)
        response = self.client.get(reverse('asistencia:foto', args=['5']))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'jpg')
        self.assertEqual(response['Content-Type'], 'image/jpeg')

    @patch('apps.asistencia.views.HikvisionService')
    def test_fuera_del_alcance_403(self, servicio):
        self.client.force_login(self.agente)
        self.assertEqual(self.client.get(reverse('asistencia:foto', args=['3'])).status_code, 403)
        self.assertEqual(self.client.get(reverse('asistencia:foto', args=['999'])).status_code, 403)
        self.client.force_login(self.sin_campana)
        self.assertEqual(self.client.get(reverse('asistencia:foto', args=['5'])).status_code, 403)
        servicio.assert_not_called()

    @patch('apps.asistencia.views.dispositivos_configurados', return_value=[])
    def test_dentro_del_alcance(self, _dispositivos):
        self.client.force_login(self.agente)
        self.assertEqual(self.client.get(reverse('asistencia:foto', args=['5'])).status_code, 404)


class PaginasTest(ApiBaseTest):

    def test_requiere_login(self):
        response = self.client.get(reverse('asistencia:index'))
        self.assertEqual(response.status_code, 302)
        self.assertIn('/users/login/', response['Location'])

    def test_paginas(self):
        self.client.force_login(self.agente)
        self.assertEqual(self.client.get(reverse('asistencia:index')).status_code, 200)
        self.assertEqual(self.client.get(reverse('asistencia:faltas')).status_code, 200)
