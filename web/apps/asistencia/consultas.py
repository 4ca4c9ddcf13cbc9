"""
Consultas de asistencia
Filtra eventos por alcance del visor y los clasifica para la API y el Excel
"""

from django.db.models import OuterRef, Q, Subquery

from . import config
from .models import EventoAsistencia, UsuarioHikvision
from .reglas import resumen
from .reglas.almuerzo import analizar_almuerzo, formatear_duracion
from .reglas.campanas import es_campana_ventas, nombre_canonico, subcampanas_team_leader
from .reglas.clasificador import clasificar, clasificar_subtipo
from .reglas.marcaciones import faltantes


def eventos_con_departamento():
    """Eventos anotados con el departamento del empleado en usuarios_hikvision."""
    departamento = UsuarioHikvision.objects.filter(
        employee_no=OuterRef('documento')
    ).values('departamento')[:1]
    return EventoAsistencia.objects.annotate(departamento_empleado=Subquery(departamento))


def filtrar_por_alcance(qs, alcance):
    """
    Descarta en BD solo lo que el alcance no puede ver en ningún caso.

    La campaña se guarda con cualquier escritura ('Campaña SAV', 'campana sav',
    'CAMPANA_SAV'), así que la pertenencia de cada fila se decide con
    AlcanceVisor.permite sobre su nombre visual.
    """
    if alcance.vacio:
        return qs.none()
    return qs


def campanas_del_filtro(campana):
    """Campañas visuales que pide el parámetro ?campana= (None si no filtra)."""
    if not campana or not campana.strip():
        return None
    if es_campana_ventas(campana):
        return set(subcampanas_team_leader(campana)) | {config.CAMPANA_VENTAS}
    return {nombre_canonico(campana)}


def consultar_eventos(alcance, inicio, fin, campana=None, busqueda=None):
    """
    Eventos del rango visibles para el alcance.

    Returns:
        Lista de (evento, campana_original, campana_visual)
    """
    qs = filtrar_por_alcance(
        eventos_con_departamento().filter(fecha__gte=inicio, fecha__lte=fin),
        alcance,
    )
    if busqueda and busqueda.strip():
        texto = busqueda.strip()
        qs = qs.filter(Q(nombre__icontains=texto) | Q(documento__icontains=texto))

    filtro = campanas_del_filtro(campana)

    filas = []
    for evento in qs.order_by('-fecha', 'nombre', 'documento'):
        original = evento.departamento_empleado or evento.campana or config.SIN_GRUPO
        visual = nombre_canonico(original)
        if not alcance.permite(visual):
            continue
        if filtro is not None and visual not in filtro:
            continue
        filas.append((evento, original, visual))
    return filas


def _hora(valor):
    return valor.strftime(config.FORMATO_HORA_OUTPUT) if valor else config.HORA_VACIA


def serializar_evento(evento, campana_original, campana_visual, hoy):
    """Evento clasificado tal como lo devuelve la API."""
    registro = evento.como_registro()
    es_hoy = evento.fecha == hoy
    faltan = faltantes(registro)
    if len(faltan) == 4 and (evento.subtipo_evento or '').strip():
        # Fila cargada sin horas: solo queda el subtipo guardado
        estado = clasificar_subtipo(evento.subtipo_evento, es_hoy, faltan)
    else:
        estado = clasificar(registro, es_hoy=es_hoy)
    almuerzo = analizar_almuerzo(evento.hora_salida_almuerzo, evento.hora_entrada_almuerzo)

    datos = {
        'id': evento.id,
        'documento': evento.documento,
        'nombre': evento.nombre or 'Sin nombre',
        'fecha': evento.fecha.isoformat(),
        'fecha_formateada': evento.fecha.strftime(config.FORMATO_FECHA_OUTPUT),
        'horas': {
            'entrada': _hora(evento.hora_entrada),
            'salida': _hora(evento.hora_salida),
            'salida_almuerzo': _hora(evento.hora_salida_almuerzo),
            'entrada_almuerzo': _hora(evento.hora_entrada_almuerzo),
        },
        'campana': campana_visual,
        'campana_original': campana_original,
        'subtipo_evento': evento.subtipo_evento,
        'almuerzo': almuerzo.a_dict(),
        'duracion_almuerzo': formatear_duracion(almuerzo.duracion),
        'dispositivo': evento.dispositivo_ip,
        'foto': evento.imagen,
        'tiene_problemas': estado.tiene_problemas,
        'necesita_revision': estado.necesita_revision,
        'tiene_almuerzo_completo': almuerzo.completo,
    }
    datos.update(estado.a_dict())
    return datos, estado, almuerzo


def estadisticas(clasificados):
    """
    Estadísticas de una lista de (campana_visual, EstadoAsistencia, AnalisisAlmuerzo).
    """
    estados = [e for _, e, _ in clasificados]
    conteo_gravedad = resumen.por_gravedad(estados)
    conteo_almuerzos = resumen.almuerzos([a for _, _, a in clasificados])
    return {
        'total_registros': len(clasificados),
        'por_estado': resumen.por_estado(estados),
        'por_gravedad': conteo_gravedad,
        'almuerzos': conteo_almuerzos,
        'por_campana': resumen.por_campana((c, e) for c, e, _ in clasificados),
    }, resumen.resumen_por_estado(estados), resumen.alertas(conteo_gravedad, conteo_almuerzos)
