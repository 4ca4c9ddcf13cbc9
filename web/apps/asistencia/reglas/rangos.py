"""
Módulo de Rangos de Fecha
Traduce el parámetro 'rango' de la API a un par de fechas
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta


class RangoInvalido(ValueError):
    """Fechas personalizadas mal formadas o con inicio posterior al fin."""


@dataclass(frozen=True)
class RangoFechas:
    tipo: str
    inicio: date
    fin: date

    def a_dict(self):
        return {
            'tipo': self.tipo,
            'inicio': self.inicio.isoformat(),
            'fin': self.fin.isoformat(),
        }


_DIAS_ATRAS = {
    'hoy': 0,
    'today': 0,
    '7dias': 7,
    'last-7-days': 7,
    '30dias': 30,
    'last-30-days': 30,
}


def _parsear_fecha(texto):
    try:
        return datetime.strptime(texto.strip(), '%Y-%m-%d').date()
    except (AttributeError, ValueError):
        raise RangoInvalido(f"Fecha inválida: {texto!r}. Use YYYY-MM-DD")


def _rango_personalizado(tipo, inicio, fin):
    inicio = _parsear_fecha(inicio)
    fin = _parsear_fecha(fin)
    if inicio > fin:
        raise RangoInvalido('La fecha de inicio es posterior a la fecha de fin')
    return RangoFechas(tipo=tipo, inicio=inicio, fin=fin)


def resolver_rango(rango, hoy, fecha_inicio=None, fecha_fin=None):
    """
    Resuelve un rango de fechas.

    Args:
        rango: 'hoy', '7dias', '30dias', 'personalizado', 'custom:INICIO,FIN'
               o sus equivalentes en inglés. Un valor desconocido es 'hoy'.
        hoy: Fecha actual (en la zona horaria del negocio)
        fecha_inicio: Inicio para 'personalizado' (YYYY-MM-DD)
        fecha_fin: Fin para 'personalizado' (YYYY-MM-DD)

    Returns:
        RangoFechas

    Raises:
        RangoInvalido: fechas personalizadas inválidas
    """
    tipo = (rango or 'hoy').strip()

    if tipo.startswith('custom:'):
        partes = tipo[len('custom:'):].split(',')
        if len(partes) != 2:
            raise RangoInvalido("Formato esperado: custom:YYYY-MM-DD,YYYY-MM-DD")
        return _rango_personalizado('custom', partes[0], partes[1])

    if tipo == 'personalizado':
        if not fecha_inicio or not fecha_fin:
            raise RangoInvalido('Rango personalizado requiere fechaInicio y fechaFin')
        return _rango_personalizado(tipo, fecha_inicio, fecha_fin)

    if tipo not in _DIAS_ATRAS:
        tipo = 'hoy'

    return RangoFechas(
        tipo=tipo,
        inicio=hoy - timedelta(days=_DIAS_ATRAS[tipo]),
        fin=hoy,
    )
