"""
Views para el tablero de asistencia
"""

import io
import json
import logging
import re
from datetime import datetime

from django.conf import settings
from django.core.paginator import Paginator
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.views.generic import TemplateView
from django.contrib.auth.decorators import login_required

from apps.users.permisos import (
    api_login_required,
    obtener_alcance,
    obtener_perfil,
    obtener_rol,
    rol_requerido,
)

from . import config
from .consultas import (
    consultar_eventos,
    estadisticas,
    filtrar_por_alcance,
    serializar_evento,
)
from .hikvision import HikvisionError, HikvisionService, dispositivos_configurados
from .models import UsuarioHikvision
from .rate_limit import limitador_eliminacion
from .reglas.alcance import Rol
from .reglas.campanas import es_campana_ventas, nombre_canonico
from .reglas.rangos import RangoInvalido, resolver_rango
from .sincronizador import SincronizadorEventos, SincronizadorUsuarios

logger = logging.getLogger(__name__)

EMPLOYEE_NO = re.compile(r'^\d{1,50}$')


def _error_interno(e):
    """Mensaje de error para el cliente; en producción no se expone el detalle"""
    return str(e) if settings.DEBUG else 'Error interno del servidor'


def _metadata(request, alcance, filtro_campana=None):
    perfil = obtener_perfil(request.user)
    campana = perfil.campana if perfil else None
    rol = obtener_rol(request.user)
    return {
        'rol': rol,
        'campana': campana,
        'alcance': alcance.a_dict(),
        'filtro_aplicado': filtro_campana or None,
        'es_team_leader_ventas': rol == Rol.TEAM_LEADER and es_campana_ventas(campana),
    }


def _ip_cliente(request):
    reenviada = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if reenviada:
        return reenviada.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


def _resolver_rango(request):
    return resolver_rango(
        request.GET.get('rango'),
        timezone.localdate(),
        request.GET.get('fechaInicio'),
        request.GET.get('fechaFin'),
    )


# ========== PÁGINAS ==========

@method_decorator(login_required, name='dispatch')
class IndexView(TemplateView):
    """Página de eventos de asistencia"""
    template_name = 'asistencia/index.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['rol'] = obtener_rol(self.request.user)
        context['alcance'] = obtener_alcance(self.request.user)
        return context


@method_decorator(login_required, name='dispatch')
class FaltasView(IndexView):
    """Página de faltas y novedades del día"""
    template_name = 'asistencia/faltas.html'


# ========== API DE EVENTOS ==========

@method_decorator(api_login_required, name='dispatch')
class EventosApiView(View):
    """
    Eventos clasificados del rango pedido, limitados al alcance del usuario.
    GET /asistencia/api/eventos/?rango=hoy|7dias|30dias|personalizado&campana=&q=
    """

    def get(self, request):
        try:
            rango = _resolver_rango(request)
        except RangoInvalido as e:
            return JsonResponse({'success': False, 'error': str(e)}, status=400)

        try:
            alcance = obtener_alcance(request.user)
            campana = request.GET.get('campana', '').strip()
            hoy = timezone.localdate()

            filas = consultar_eventos(
                alcance, rango.inicio, rango.fin,
                campana=campana, busqueda=request.GET.get('q'),
            )

            eventos = []
            clasificados = []
            for evento, original, visual in filas:
                datos, estado, almuerzo = serializar_evento(evento, original, visual, hoy)
                eventos.append(datos)
                clasificados.append((visual, estado, almuerzo))

            stats, _, _ = estadisticas(clasificados)
            logger.info(
                f"Eventos {rango.inicio} a {rango.fin}: {len(eventos)} "
                f"(usuario={request.user.username})"
            )

            return JsonResponse({
                'success': True,
                'eventos': eventos,
                'total': len(eventos),
                'estadisticas': {
                    'por_estado': stats['por_estado'],
                    'por_gravedad': stats['por_gravedad'],
                    'almuerzos': stats['almuerzos'],
                    'por_campana': stats['por_campana'],
                },
                'rango': rango.a_dict(),
                'metadata': _metadata(request, alcance, campana),
            })

        except Exception as e:
            logger.exception("Error consultando eventos")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


@method_decorator(api_login_required, name='dispatch')
class FaltasApiView(View):
    """
    Registros de un día con su estado, gravedad y análisis de almuerzo.
    GET /asistencia/api/faltas/?fecha=YYYY-MM-DD
    """

    def get(self, request):
        fecha_str = request.GET.get('fecha', '').strip()
        if fecha_str:
            try:
                fecha = datetime.strptime(fecha_str, '%Y-%m-%d').date()
            except ValueError:
                return JsonResponse({
                    'success': False,
                    'error': 'Formato de fecha inválido. Use YYYY-MM-DD'
                }, status=400)
        else:
            fecha = timezone.localdate()

        try:
            alcance = obtener_alcance(request.user)
            hoy = timezone.localdate()
            filas = consultar_eventos(alcance, fecha, fecha, campana=request.GET.get('campana'))

            registros = []
            clasificados = []
            for evento, original, visual in filas:
                datos, estado, almuerzo = serializar_evento(evento, original, visual, hoy)
                registros.append(datos)
                clasificados.append((visual, estado, almuerzo))

            stats, resumen_estados, alertas = estadisticas(clasificados)

            return JsonResponse({
                'success': True,
                'fecha': fecha.isoformat(),
                'metadata': {
                    'fecha_consulta': timezone.now().isoformat(),
                    'total_registros': len(registros),
                    **_metadata(request, alcance),
                },
                'estadisticas': stats,
                'resumen': resumen_estados,
                'registros': registros,
                'alertas': alertas,
            })

        except Exception as e:
            logger.exception("Error consultando faltas")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


@method_decorator(api_login_required, name='dispatch')
class DescargarEventosExcelView(View):
    """
    Genera y descarga un Excel con los eventos del rango.
    GET /asistencia/api/eventos/excel/?rango=...&campana=
    """

    HEADERS = [
        'DOCUMENTO', 'NOMBRE', 'FECHA', 'ENTRADA', 'SALIDA ALMUERZO',
        'ENTRADA ALMUERZO', 'SALIDA', 'DURACIÓN ALMUERZO', 'CAMPAÑA',
        'ESTADO', 'GRAVEDAD', 'DESCRIPCIÓN', 'FALTANTES',
    ]
    ANCHOS = [14, 35, 12, 11, 11, 11, 11, 12, 22, 14, 11, 30, 40]

    # Relleno claro por estado, en la misma gama que el tablero
    _FILL = {
        'COMPLETO': 'C6EFCE',
        'PENDIENTE': 'FFEB9C',
        'INCOMPLETO': 'FFC7CE',
        'ERROR': 'FFC7CE',
        'SIN_REGISTRO': 'D9D9D9',
        'DESCONOCIDO': 'D9D9D9',
    }

    def get(self, request):
        from openpyxl import Workbook
        from openpyxl.styles import PatternFill, Font, Alignment, Border, Side
        from openpyxl.utils import get_column_letter

        try:
            rango = _resolver_rango(request)
        except RangoInvalido as e:
            return JsonResponse({'success': False, 'error': str(e)}, status=400)

        try:
            alcance = obtener_alcance(request.user)
            hoy = timezone.localdate()
            filas = consultar_eventos(
                alcance, rango.inicio, rango.fin,
                campana=request.GET.get('campana'), busqueda=request.GET.get('q'),
            )

            # ── Estilos ──────────────────────────────────────────────────
            fill_header = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
            font_header = Font(bold=True, color='FFFFFF', size=11)
            font_normal = Font(size=10)
            align_center = Alignment(horizontal='center', vertical='center', wrap_text=True)
            align_left = Alignment(horizontal='left', vertical='center', wrap_text=True)
            border = Border(
                left=Side(style='thin'), right=Side(style='thin'),
                top=Side(style='thin'), bottom=Side(style='thin'),
            )
            fills = {k: PatternFill(start_color=v, end_color=v, fill_type='solid')
                     for k, v in self._FILL.items()}

            wb = Workbook()
            ws = wb.active
            ws.title = 'Eventos'
            ws.freeze_panes = 'A2'

            # Encabezados
            for col, (h, ancho) in enumerate(zip(self.HEADERS, self.ANCHOS), 1):
                cell = ws.cell(row=1, column=col, value=h)
                cell.fill = fill_header
                cell.font = font_header
                cell.alignment = align_center
                cell.border = border
                ws.column_dimensions[get_column_letter(col)].width = ancho

            # Datos
            for row_num, (evento, original, visual) in enumerate(filas, 2):
                datos, _, _ = serializar_evento(evento, original, visual, hoy)
                valores = [
                    datos['documento'], datos['nombre'], datos['fecha_formateada'],
                    datos['horas']['entrada'], datos['horas']['salida_almuerzo'],
                    datos['horas']['entrada_almuerzo'], datos['horas']['salida'],
                    datos['duracion_almuerzo'] or '', datos['campana'],
                    datos['estado'], datos['gravedad'], datos['descripcion'],
                    ', '.join(datos['faltantes']),
                ]
                fill = fills[datos['estado']]

                for col, valor in enumerate(valores, 1):
                    cell = ws.cell(row=row_num, column=col, value=valor)
                    cell.fill = fill
                    cell.font = font_normal
                    cell.border = border
                    cell.alignment = align_left if col in (2, 12, 13) else align_center

            buffer = io.BytesIO()
            wb.save(buffer)

            filename = (
                f"eventos_{rango.inicio.strftime('%Y%m%d')}_{rango.fin.strftime('%Y%m%d')}.xlsx"
            )
            response = HttpResponse(
                buffer.getvalue(),
                content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            )
            response['Content-Disposition'] = f'attachment; filename="{filename}"'
            return response

        except Exception as e:
            logger.exception("Error generando Excel de eventos")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


# ========== SINCRONIZACIÓN ==========

@method_decorator(csrf_exempt, name='dispatch')
@method_decorator(rol_requerido(Rol.TI, Rol.ADMINISTRADOR), name='dispatch')
class SincronizarView(View):
    """
    Ejecuta una sincronización con los dispositivos.
    POST /asistencia/api/sincronizar/  Body JSON opcional: {"fecha": "YYYY-MM-DD"}
    """

    def post(self, request):
        try:
            datos = json.loads(request.body or b'{}')
        except json.JSONDecodeError:
            return JsonResponse({'success': False, 'error': 'JSON inválido'}, status=400)

        fecha = None
        fecha_str = datos.get('fecha') if isinstance(datos, dict) else None
        if fecha_str:
            try:
                fecha = datetime.strptime(str(fecha_str), '%Y-%m-%d').date()
            except ValueError:
                return JsonResponse({
                    'success': False,
                    'error': 'Formato de fecha inválido. Use YYYY-MM-DD'
                }, status=400)

        try:
            logger.info(f"Sincronización manual solicitada por {request.user.username}")
            resultado = SincronizadorEventos().ejecutar(fecha=fecha)
            return JsonResponse(resultado)

        except Exception as e:
            logger.exception("Error en sincronización manual")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


@method_decorator(csrf_exempt, name='dispatch')
@method_decorator(rol_requerido(Rol.TI, Rol.ADMINISTRADOR), name='dispatch')
class SincronizarUsuariosView(View):
    """
    Trae los usuarios de los dispositivos a usuarios_hikvision.
    POST /asistencia/api/empleados/sincronizar/
    """

    def post(self, request):
        try:
            logger.info(f"Sincronización de usuarios solicitada por {request.user.username}")
            resultado = SincronizadorUsuarios().ejecutar()
            return JsonResponse(resultado)

        except Exception as e:
            logger.exception("Error en sincronización de usuarios")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


# ========== EMPLEADOS ==========

@method_decorator(api_login_required, name='dispatch')
class EmpleadosView(View):
    """
    Lista de empleados de usuarios_hikvision.
    GET /asistencia/api/empleados/?department=&page=&limit=

    TI y Administrador ven todos; Team Leader solo los de su alcance; el
    resto recibe una lista vacía.
    """

    def get(self, request):
        try:
            rol = obtener_rol(request.user)
            alcance = obtener_alcance(request.user)

            try:
                pagina = max(int(request.GET.get('page', 1)), 1)
                limite = min(max(int(request.GET.get('limit', 50)), 1), 500)
            except ValueError:
                return JsonResponse({
                    'success': False,
                    'error': 'page y limit deben ser números'
                }, status=400)

            if rol not in (Rol.TI, Rol.ADMINISTRADOR, Rol.TEAM_LEADER):
                logger.warning(f"Usuario {request.user.username} sin permiso para listar empleados")
                return JsonResponse({
                    'success': True,
                    'empleados': [],
                    'total': 0,
                    'page': pagina,
                    'limit': limite,
                    'total_pages': 0,
                    'warning': 'Su rol no tiene acceso a la lista de empleados',
                })

            qs = filtrar_por_alcance(UsuarioHikvision.objects.all(), alcance).order_by('nombre', 'employee_no')

            departamento = request.GET.get('department', '').strip()
            filtro = nombre_canonico(departamento) if departamento else None

            empleados = []
            for usuario in qs:
                visual = nombre_canonico(usuario.departamento)
                if not alcance.permite(visual):
                    continue
                if filtro and visual != filtro:
                    continue
                empleados.append({
                    'employeeNo': usuario.employee_no,
                    'nombre': usuario.nombre,
                    'genero': usuario.genero,
                    'departamento': visual,
                    'departamento_original': usuario.departamento,
                    'tipo_usuario': usuario.tipo_usuario,
                    'estado': usuario.estado,
                    'foto_url': f'/asistencia/api/foto/{usuario.employee_no}/',
                })

            paginador = Paginator(empleados, limite)
            pagina_obj = paginador.get_page(pagina)

            return JsonResponse({
                'success': True,
                'empleados': list(pagina_obj.object_list),
                'total': paginador.count,
                'page': pagina_obj.number,
                'limit': limite,
                'total_pages': paginador.num_pages if paginador.count else 0,
                'metadata': _metadata(request, alcance, departamento),
            })

        except Exception as e:
            logger.exception("Error listando empleados")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


@method_decorator(csrf_exempt, name='dispatch')
@method_decorator(rol_requerido(Rol.TI, Rol.ADMINISTRADOR), name='dispatch')
class EliminarEmpleadoView(View):
    """
    Elimina un empleado de usuarios_hikvision.
    POST /asistencia/api/empleados/eliminar/  Body JSON: {"employeeNo": "123"}
    """

    def post(self, request):
        try:
            datos = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JsonResponse({'success': False, 'error': 'JSON inválido'}, status=400)

        if not isinstance(datos, dict) or set(datos) != {'employeeNo'}:
            return JsonResponse({
                'success': False,
                'error': 'El cuerpo debe contener únicamente employeeNo'
            }, status=400)

        employee_no = datos['employeeNo']
        if isinstance(employee_no, bool) or not isinstance(employee_no, (str, int)):
            return JsonResponse({'success': False, 'error': 'employeeNo inválido'}, status=400)
        employee_no = str(employee_no).strip()
        if not EMPLOYEE_NO.match(employee_no):
            return JsonResponse({
                'success': False,
                'error': 'employeeNo debe contener solo dígitos'
            }, status=400)

        if not limitador_eliminacion.permitir(_ip_cliente(request), employee_no):
            return JsonResponse({
                'success': False,
                'error': 'Demasiadas solicitudes, intente de nuevo en unos segundos'
            }, status=429)

        try:
            eliminados, _ = UsuarioHikvision.objects.filter(employee_no=employee_no).delete()
            if not eliminados:
                return JsonResponse({'success': False, 'error': 'Empleado no encontrado'}, status=404)

            logger.info(f"Empleado {employee_no} eliminado por {request.user.username}")
            return JsonResponse({
                'success': True,
                'message': f'Empleado {employee_no} eliminado',
                'employeeNo': employee_no,
            })

        except Exception as e:
            logger.exception(f"Error eliminando empleado {employee_no}")
            return JsonResponse({'success': False, 'error': _error_interno(e)}, status=500)


@method_decorator(api_login_required, name='dispatch')
class FotoView(View):
    """
    Foto de rostro del empleado desde el primer dispositivo que la tenga.
    GET /asistencia/api/foto/<employee_no>/
    """

    def get(self, request, employee_no):
        if not EMPLOYEE_NO.match(employee_no):
            return JsonResponse({'success': False, 'error': 'employeeNo inválido'}, status=400)

        alcance = obtener_alcance(request.user)
        if not alcance.ver_todas:
            usuario = UsuarioHikvision.objects.filter(employee_no=employee_no).first()
            if usuario is None or not alcance.permite(nombre_canonico(usuario.departamento)):
                return JsonResponse({
                    'success': False,
                    'error': 'No tiene acceso a este empleado'
                }, status=403)

        for ip in dispositivos_configurados():
            try:
                foto = HikvisionService(ip).descargar_foto(employee_no)
            except HikvisionError as e:
                logger.warning(f"Error buscando foto de {employee_no}: {e}")
                continue
            if foto:
                contenido, content_type = foto
                response = HttpResponse(contenido, content_type=content_type)
                response['Cache-Control'] = 'private, max-age=3600'
                return response

        return JsonResponse({'success': False, 'error': 'Foto no encontrada'}, status=404)
