"""
Módulo de Sincronización de Eventos
Consulta los dispositivos Hikvision, agrupa las marcaciones por empleado y
fecha y las guarda en eventos_procesados
"""

import time as time_module
from datetime import datetime, time

import pandas as pd
from django.db import IntegrityError, transaction
from django.utils import timezone

from . import config
from .hikvision import HikvisionError, HikvisionService, dispositivos_configurados
from .logger import SincronizacionLogger
from .models import EventoAsistencia, UsuarioHikvision
from .reglas.clasificador import clasificar
from .reglas.marcaciones import CAMPOS, Marcacion, leer

# attendanceStatus del dispositivo -> marcación
ESTADOS_HIKVISION = {
    'checkIn': Marcacion.ENTRADA,
    'checkOut': Marcacion.SALIDA,
    'breakOut': Marcacion.SALIDA_ALMUERZO,
    'breakIn': Marcacion.ENTRADA_ALMUERZO,
}

COLUMNAS = ['documento', 'nombre', 'fecha', 'hora', 'tipo', 'dispositivo', 'foto', 'departamento']


def inferir_por_hora(hora):
    """
    Infiere el tipo de marcación por la hora del día

    Args:
        hora: Hora (0-23)

    Returns:
        Marcacion.ENTRADA, Marcacion.SALIDA o None si no se puede inferir
    """
    for rango_inicio, rango_fin in config.RANGO_INFERENCIA_ENTRADA:
        if rango_inicio <= hora < rango_fin:
            return Marcacion.ENTRADA

    for rango_inicio, rango_fin in config.RANGO_INFERENCIA_SALIDA:
        if rango_inicio <= hora < rango_fin:
            return Marcacion.SALIDA

    return None


def determinar_tipo(evento, hora):
    """
    Determina la marcación de un evento crudo.

    Prioridad: attendanceStatus, luego el texto de la etiqueta, luego la hora.

    Returns:
        (Marcacion o None, método usado)
    """
    estado = evento.get('attendanceStatus') or ''
    if estado in ESTADOS_HIKVISION:
        return ESTADOS_HIKVISION[estado], 'attendanceStatus'

    etiqueta = (evento.get('label') or '').lower()
    if 'almuerzo' in etiqueta:
        if 'salida' in etiqueta or 'a almuerzo' in etiqueta:
            return Marcacion.SALIDA_ALMUERZO, 'etiqueta'
        if 'entrada' in etiqueta or 'de almuerzo' in etiqueta:
            return Marcacion.ENTRADA_ALMUERZO, 'etiqueta'
    elif 'salida' in etiqueta:
        return Marcacion.SALIDA, 'etiqueta'
    elif 'entrada' in etiqueta:
        return Marcacion.ENTRADA, 'etiqueta'

    return inferir_por_hora(hora), 'hora'


def _documento(evento):
    for campo in ('employeeNoString', 'cardNo'):
        valor = str(evento.get(campo) or '').strip()
        if valor:
            return valor
    return None


def subtipo_para(registro):
    """Subtipo descriptivo que se guarda junto a las marcaciones."""
    horas = {CAMPOS[m]: leer(registro, m) for m in Marcacion}
    return clasificar(horas, es_hoy=True).descripcion


class _SincronizadorDispositivos:
    """Base de las corridas que consultan todos los dispositivos"""

    def __init__(self, dispositivos=None, logger=None, crear_cliente=HikvisionService,
                 pausa_reintento=config.HIKVISION_PAUSA_REINTENTO):
        """
        Args:
            dispositivos: IPs a consultar (por defecto las de settings)
            logger: SincronizacionLogger de la corrida
            crear_cliente: Fábrica ip -> HikvisionService
            pausa_reintento: Segundos entre intentos a un mismo dispositivo
        """
        self.dispositivos = dispositivos if dispositivos is not None else dispositivos_configurados()
        self.logger = logger or self.crear_logger()
        self.crear_cliente = crear_cliente
        self.pausa_reintento = pausa_reintento
        self.dispositivos_fallidos = []

    def crear_logger(self):
        return SincronizacionLogger()

    def consultar_todos(self, consulta):
        """
        Aplica consulta(cliente) a cada dispositivo con reintentos.

        Un dispositivo que falla todos los intentos queda en
        dispositivos_fallidos y no detiene a los demás.

        Returns:
            Lista con los resultados de todos los dispositivos
        """
        resultados = []
        for ip in self.dispositivos:
            cliente = self.crear_cliente(ip)
            for intento in range(1, config.HIKVISION_INTENTOS + 1):
                try:
                    resultados.extend(consulta(cliente))
                    break
                except HikvisionError as e:
                    self.logger.warning(f"Intento {intento} fallido en {ip}: {e}")
                    if intento < config.HIKVISION_INTENTOS:
                        time_module.sleep(self.pausa_reintento)
            else:
                self.logger.error(f"Dispositivo {ip} sin respuesta tras {config.HIKVISION_INTENTOS} intentos")
                self.dispositivos_fallidos.append(ip)

        return resultados


class SincronizadorEventos(_SincronizadorDispositivos):
    """Orquesta una corrida de sincronización de eventos"""

    def ejecutar(self, fecha=None):
        """
        Ejecuta la sincronización de una fecha

        Args:
            fecha: date a sincronizar (por defecto hoy en America/Bogota)

        Returns:
            Dict con el resultado y las estadísticas de la corrida
        """
        fecha = fecha or timezone.localdate()
        self.logger.log_inicio_proceso(fecha, self.dispositivos)

        try:
            self.logger.log_fase("Consulta de dispositivos")
            eventos = self.consultar_dispositivos(fecha)
            self.logger.incrementar_stat('eventos_obtenidos', len(eventos))
            self.logger.info(config.MENSAJES['consulta_completa'])

            self.logger.log_fase("Agrupación de marcaciones")
            df = self.convertir_eventos(eventos, fecha)
            registros = self.agrupar(df)
            self.logger.info(f"{config.MENSAJES['agrupacion_completa']}: {len(registros)}")

            if not registros:
                self.logger.warning(config.MENSAJES['sin_datos'])

            self.logger.log_fase("Guardado en base de datos")
            for registro in registros:
                resultado = self.guardar_registro(registro)
                self.logger.incrementar_stat('registros_procesados')
                self.logger.incrementar_stat(
                    {'nuevo': 'nuevos_registros', 'actualizado': 'registros_actualizados'}
                    .get(resultado, 'sin_cambios')
                )
            self.logger.info(config.MENSAJES['guardado_completo'])

            exito = not self.dispositivos_fallidos or bool(eventos)
            self.logger.log_fin_proceso(exito=exito)

            stats = self.logger.obtener_estadisticas()
            return {
                'success': exito,
                'fecha': fecha.isoformat(),
                'dispositivos_fallidos': self.dispositivos_fallidos,
                'message': (
                    f"{stats['registros_procesados']} registros procesados "
                    f"({stats['nuevos_registros']} nuevos, "
                    f"{stats['registros_actualizados']} actualizados)"
                ),
                **stats,
            }
        finally:
            self.logger.cerrar()

    # ========== CONSULTA ==========

    def consultar_dispositivos(self, fecha):
        """Eventos crudos de todos los dispositivos; un fallo no detiene a los demás."""
        inicio = timezone.make_aware(datetime.combine(fecha, time.min))
        fin = timezone.make_aware(datetime.combine(fecha, time(23, 59, 59)))

        return self.consultar_todos(lambda cliente: cliente.obtener_eventos(inicio, fin))

    # ========== TRANSFORMACIÓN ==========

    def convertir_eventos(self, eventos, fecha):
        """
        Convierte eventos crudos a un DataFrame en hora de Colombia.

        Descarta eventos sin hora, sin documento o de otra fecha.
        """
        if not eventos:
            return pd.DataFrame(columns=COLUMNAS)

        momentos = pd.to_datetime(
            pd.Series([e.get('time') for e in eventos], dtype=object),
            utc=True, errors='coerce', format='ISO8601',
        )
        momentos = momentos.dt.tz_convert(config.ZONA_HORARIA)

        filas = []
        for evento, momento in zip(eventos, momentos):
            if pd.isna(momento) or momento.date() != fecha:
                continue

            documento = _documento(evento)
            if not documento:
                continue

            hora = momento.time().replace(microsecond=0)
            tipo, metodo = determinar_tipo(evento, hora.hour)
            if tipo is None:
                self.logger.debug(f"Marcación sin tipo - Empleado: {documento}, Hora: {hora}")
                continue
            if metodo == 'hora':
                self.logger.log_inferencia(documento, momento, tipo.value, metodo)

            filas.append({
                'documento': documento,
                'nombre': (evento.get('name') or '').strip() or 'Sin nombre',
                'fecha': fecha,
                'hora': hora,
                'tipo': tipo.value,
                'dispositivo': evento.get('dispositivo') or 'Desconocido',
                'foto': evento.get('pictureURL') or '',
                'departamento': (evento.get('department') or '').strip() or None,
            })

        return pd.DataFrame(filas, columns=COLUMNAS)

    def agrupar(self, df):
        """
        Agrupa por (documento, fecha): primera entrada, última salida, primera
        salida y primera entrada de almuerzo.

        Returns:
            Lista de dicts con los campos de EventoAsistencia
        """
        if df.empty:
            return []

        departamentos = dict(
            UsuarioHikvision.objects.filter(employee_no__in=df['documento'].unique().tolist())
            .values_list('employee_no', 'departamento')
        )

        registros = []
        for (documento, fecha), grupo in df.sort_values('hora').groupby(['documento', 'fecha'], sort=True):
            horas = {}
            for marcacion in Marcacion:
                del_tipo = grupo[grupo['tipo'] == marcacion.value]
                if del_tipo.empty:
                    horas[marcacion] = None
                elif marcacion == Marcacion.SALIDA:
                    horas[marcacion] = del_tipo['hora'].iloc[-1]
                else:
                    horas[marcacion] = del_tipo['hora'].iloc[0]

            registro = {CAMPOS[m]: h for m, h in horas.items()}
            registro.update({
                'documento': documento,
                'fecha': fecha,
                'nombre': grupo['nombre'].iloc[0],
                'dispositivo_ip': grupo['dispositivo'].iloc[0],
                'imagen': next((f for f in grupo['foto'] if isinstance(f, str) and f), ''),
                'campana': departamentos.get(documento) or next(
                    (d for d in grupo['departamento'] if isinstance(d, str) and d), None
                ),
            })

            entrada, salida = horas[Marcacion.ENTRADA], horas[Marcacion.SALIDA]
            if entrada is not None and entrada == salida:
                self.logger.warning(f"Entrada y salida con la misma hora - Empleado: {documento}, Hora: {entrada}")
                registro['hora_salida'] = None
                registro['subtipo_evento'] = config.SUBTIPOS['MISMA_HORA']
            else:
                registro['subtipo_evento'] = subtipo_para(registro)

            registros.append(registro)

        return registros

    # ========== GUARDADO ==========

    def guardar_registro(self, registro):
        """
        Inserta o completa el registro de (documento, fecha).

        Una marcación ya guardada nunca se reemplaza: solo se llenan las
        que siguen vacías.

        Returns:
            'nuevo', 'actualizado' o 'sin_cambios'
        """
        with transaction.atomic():
            evento = (
                EventoAsistencia.objects.select_for_update()
                .filter(documento=registro['documento'], fecha=registro['fecha'])
                .first()
            )
            if evento is None:
                try:
                    with transaction.atomic():
                        EventoAsistencia.objects.create(**registro)
                    return 'nuevo'
                except IntegrityError:
                    # Otro proceso insertó la misma fila
                    evento = EventoAsistencia.objects.select_for_update().get(
                        documento=registro['documento'], fecha=registro['fecha']
                    )

            return self._completar(evento, registro)

    def _completar(self, evento, registro):
        cambios = []
        for campo in CAMPOS.values():
            if getattr(evento, campo) is None and registro.get(campo) is not None:
                setattr(evento, campo, registro[campo])
                cambios.append(campo)

        for campo in ('nombre', 'campana', 'imagen', 'dispositivo_ip'):
            if not getattr(evento, campo) and registro.get(campo):
                setattr(evento, campo, registro[campo])
                cambios.append(campo)

        if registro.get('subtipo_evento') == config.SUBTIPOS['MISMA_HORA'] and evento.hora_salida is None:
            subtipo = config.SUBTIPOS['MISMA_HORA']
        else:
            subtipo = subtipo_para(evento)
        if subtipo != evento.subtipo_evento:
            evento.subtipo_evento = subtipo
            cambios.append('subtipo_evento')

        if not cambios:
            return 'sin_cambios'

        evento.save(update_fields=cambios + ['actualizado_en'])
        return 'actualizado'


# ========== USUARIOS ==========

_GRUPOS_HIKVISION = {grupo: nombre for nombre, grupo in config.DEPARTAMENTOS_HIKVISION.items()}


def _departamento(usuario):
    """deptName del dispositivo; si no viene, el departamento de su groupId."""
    nombre = str(usuario.get('deptName') or '').strip()
    if nombre:
        return nombre[:100]
    try:
        return _GRUPOS_HIKVISION.get(int(usuario.get('groupId')))
    except (TypeError, ValueError):
        return None


def _estado(usuario):
    habilitado = (usuario.get('Valid') or {}).get('enable')
    if habilitado is None:
        return 'Desconocido'
    return 'Activo' if habilitado else 'Inactivo'


def datos_usuario(usuario):
    """
    Convierte un UserInfo crudo a los campos de UsuarioHikvision.

    Returns:
        Dict de campos, o None si el usuario no trae employeeNo
    """
    employee_no = str(usuario.get('employeeNo') or '').strip()
    if not employee_no:
        return None

    tipo = str(usuario.get('userType') or '').strip()
    return {
        'employee_no': employee_no,
        'nombre': (str(usuario.get('name') or '').strip() or 'Sin nombre')[:200],
        'genero': config.GENEROS.get(str(usuario.get('gender') or '').lower(), 'No especificado'),
        'departamento': _departamento(usuario),
        'foto_path': str(usuario.get('faceURL') or '').strip()[:500],
        'tipo_usuario': config.TIPOS_USUARIO.get(tipo.lower(), tipo[:50] or 'Desconocido'),
        'estado': _estado(usuario),
    }


class SincronizadorUsuarios(_SincronizadorDispositivos):
    """Copia los usuarios de los dispositivos a usuarios_hikvision"""

    ESTADISTICAS = (
        'usuarios_obtenidos',
        'nuevos_registros',
        'registros_actualizados',
        'sin_cambios',
        'errores',
        'advertencias',
    )

    def crear_logger(self):
        return SincronizacionLogger('apps.asistencia.usuarios', estadisticas=self.ESTADISTICAS)

    def ejecutar(self):
        """
        Consulta todos los dispositivos y actualiza usuarios_hikvision.

        Un employeeNo presente en varios dispositivos se toma del primero.

        Returns:
            Dict con el resultado y las estadísticas de la corrida
        """
        self.logger.log_inicio_proceso(None, self.dispositivos, config.MENSAJES['inicio_usuarios'])

        try:
            self.logger.log_fase("Consulta de usuarios")
            usuarios = self.consultar_todos(lambda cliente: cliente.obtener_usuarios())
            self.logger.incrementar_stat('usuarios_obtenidos', len(usuarios))

            registros = {}
            for usuario in usuarios:
                datos = datos_usuario(usuario)
                if datos is None:
                    self.logger.incrementar_stat('errores')
                    self.logger.debug(f"Usuario sin employeeNo en {usuario.get('dispositivo')}")
                    continue
                registros.setdefault(datos['employee_no'], datos)

            if not registros:
                self.logger.warning(config.MENSAJES['sin_usuarios'])

            self.logger.log_fase("Guardado en base de datos")
            with transaction.atomic():
                for datos in registros.values():
                    resultado = self.guardar_usuario(datos)
                    self.logger.incrementar_stat(
                        {'nuevo': 'nuevos_registros', 'actualizado': 'registros_actualizados'}
                        .get(resultado, 'sin_cambios')
                    )

            exito = not self.dispositivos_fallidos or bool(usuarios)
            self.logger.log_fin_proceso(exito=exito)

            stats = self.logger.obtener_estadisticas()
            return {
                'success': exito,
                'dispositivos_fallidos': self.dispositivos_fallidos,
                'message': (
                    f"{len(registros)} usuarios sincronizados "
                    f"({stats['nuevos_registros']} nuevos, "
                    f"{stats['registros_actualizados']} actualizados)"
                ),
                **stats,
            }
        finally:
            self.logger.cerrar()

    def guardar_usuario(self, datos):
        """
        Crea o actualiza el usuario con los datos del dispositivo.

        Un departamento vacío en el dispositivo no borra el guardado.

        Returns:
            'nuevo', 'actualizado' o 'sin_cambios'
        """
        usuario = (
            UsuarioHikvision.objects.select_for_update()
            .filter(employee_no=datos['employee_no'])
            .first()
        )
        if usuario is None:
            UsuarioHikvision.objects.create(**datos)
            return 'nuevo'

        cambios = []
        for campo, valor in datos.items():
            if campo == 'departamento' and not valor:
                continue
            if getattr(usuario, campo) != valor:
                setattr(usuario, campo, valor)
                cambios.append(campo)

        if not cambios:
            return 'sin_cambios'

        usuario.save(update_fields=cambios + ['actualizado_en'])
        return 'actualizado'
