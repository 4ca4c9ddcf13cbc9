"""
Módulo de Resumen
Estadísticas agregadas sobre registros ya clasificados
"""

from collections import Counter

from .almuerzo import EstadoAlmuerzo
from .clasificador import Estado, Gravedad

_CUBETAS_ALMUERZO = {
    EstadoAlmuerzo.NORMAL: 'normales',
    EstadoAlmuerzo.CORTO: 'cortos',
    EstadoAlmuerzo.LARGO: 'largos',
    EstadoAlmuerzo.INCOMPLETO: 'incompletos',
    EstadoAlmuerzo.NO_REGISTRADO: 'no_registrados',
    EstadoAlmuerzo.ERROR: 'errores',
}


def por_estado(estados):
    """{estado: cantidad} a partir de una lista de EstadoAsistencia."""
    return dict(Counter(e.estado.value for e in estados))


def por_gravedad(estados):
    """{gravedad: cantidad}, siempre con las cuatro gravedades."""
    conteo = {g.name: 0 for g in Gravedad}
    for e in estados:
        conteo[e.gravedad.name] += 1
    return conteo


def por_campana(filas):
    """
    Totales por campaña.

    Args:
        filas: Iterable de tuplas (campana_visual, EstadoAsistencia)
    """
    resultado = {}
    for campana, estado in filas:
        stats = resultado.setdefault(campana, {
            'total': 0, 'completos': 0, 'pendientes': 0, 'incompletos': 0,
        })
        stats['total'] += 1
        if estado.estado == Estado.COMPLETO:
            stats['completos'] += 1
        elif estado.estado == Estado.PENDIENTE:
            stats['pendientes'] += 1
        elif estado.estado == Estado.INCOMPLETO:
            stats['incompletos'] += 1
    return resultado


def almuerzos(analisis):
    """Cubetas de almuerzo a partir de una lista de AnalisisAlmuerzo."""
    conteo = {nombre: 0 for nombre in _CUBETAS_ALMUERZO.values()}
    conteo['completos'] = 0
    for a in analisis:
        conteo[_CUBETAS_ALMUERZO[a.estado]] += 1
        if a.completo:
            conteo['completos'] += 1
    return conteo


def resumen_por_estado(estados):
    """
    Lista de estados ordenada por gravedad (mayor primero) y luego cantidad.

    La gravedad de cada estado es la mayor observada entre sus registros.
    """
    total = len(estados)
    grupos = {}
    for e in estados:
        cantidad, gravedad = grupos.get(e.estado, (0, Gravedad.NINGUNA))
        grupos[e.estado] = (cantidad + 1, max(gravedad, e.gravedad))

    resumen = [
        {
            'estado': estado.value,
            'cantidad': cantidad,
            'gravedad': gravedad.name,
            'porcentaje': round(cantidad * 100 / total) if total else 0,
            '_orden': gravedad,
        }
        for estado, (cantidad, gravedad) in grupos.items()
    ]
    resumen.sort(key=lambda r: (-r['_orden'], -r['cantidad']))
    for r in resumen:
        del r['_orden']
    return resumen


def alertas(conteo_gravedad, conteo_almuerzos):
    return {
        'requiere_accion_inmediata': conteo_gravedad.get('ALTA', 0) > 0,
        'requiere_seguimiento': conteo_gravedad.get('MEDIA', 0) > 0,
        'problemas_almuerzo': any(
            conteo_almuerzos.get(k, 0) > 0 for k in ('incompletos', 'cortos', 'largos')
        ),
    }
