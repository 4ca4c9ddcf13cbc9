"""
Módulo de Clasificación de Asistencia
Deriva estado, gravedad, color e icono a partir de las marcaciones de un día
"""

from dataclasses import dataclass
from enum import Enum, IntEnum

from .. import config
from .marcaciones import Marcacion, esta_presente, faltantes, leer


class Estado(str, Enum):
    COMPLETO = 'COMPLETO'
    PENDIENTE = 'PENDIENTE'
    INCOMPLETO = 'INCOMPLETO'
    ERROR = 'ERROR'
    SIN_REGISTRO = 'SIN_REGISTRO'
    DESCONOCIDO = 'DESCONOCIDO'


class Gravedad(IntEnum):
    NINGUNA = 0
    BAJA = 1
    MEDIA = 2
    ALTA = 3


@dataclass(frozen=True)
class EstadoAsistencia:
    estado: Estado
    gravedad: Gravedad
    color: str
    icono: str
    faltantes: tuple
    descripcion: str

    @property
    def tiene_problemas(self):
        return self.estado != Estado.COMPLETO

    @property
    def necesita_revision(self):
        return self.estado in (Estado.ERROR, Estado.INCOMPLETO)

    def a_dict(self):
        return {
            'estado': self.estado.value,
            'gravedad': self.gravedad.name,
            'color': self.color,
            'icono': self.icono,
            'descripcion': self.descripcion,
            'faltantes': [m.value for m in self.faltantes],
        }


def _pendiente_o_incompleto(es_hoy):
    # Un día en curso todavía puede completarse
    return Estado.PENDIENTE if es_hoy else Estado.INCOMPLETO


def _construir(estado, gravedad, descripcion, faltan):
    color, icono = config.PRESENTACION_ESTADOS[estado.value]
    return EstadoAsistencia(
        estado=estado,
        gravedad=gravedad,
        color=color,
        icono=icono,
        faltantes=faltan,
        descripcion=descripcion,
    )


def clasificar(registro, es_hoy):
    """
    Clasifica un día de asistencia por presencia/ausencia de marcaciones.

    Orden de evaluación (la primera regla que aplica gana):
      0. Subtipo 'ERROR - Misma hora' marcado en la ingesta -> ERROR / ALTA
      1. Las cuatro marcaciones                -> COMPLETO / NINGUNA
      2. Entrada y salida, sin almuerzo        -> COMPLETO / NINGUNA
      3. Entrada sin salida                    -> PENDIENTE|INCOMPLETO / MEDIA
      4. Salida sin entrada                    -> PENDIENTE|INCOMPLETO / ALTA
      5. Solo almuerzo                         -> INCOMPLETO / MEDIA
      6. Ninguna marcación                     -> SIN_REGISTRO / ALTA
      -  Entrada y salida con almuerzo a medias -> INCOMPLETO / MEDIA

    Args:
        registro: Modelo, RegistroAsistencia o dict con las cuatro horas
        es_hoy: True si la fecha del registro es hoy

    Returns:
        EstadoAsistencia
    """
    faltan = faltantes(registro)

    subtipo = registro.get('subtipo_evento') if isinstance(registro, dict) \
        else getattr(registro, 'subtipo_evento', None)
    if subtipo == config.SUBTIPOS['MISMA_HORA']:
        return _construir(Estado.ERROR, Gravedad.ALTA, subtipo, faltan)

    entrada = esta_presente(leer(registro, Marcacion.ENTRADA))
    salida = esta_presente(leer(registro, Marcacion.SALIDA))
    salida_alm = esta_presente(leer(registro, Marcacion.SALIDA_ALMUERZO))
    entrada_alm = esta_presente(leer(registro, Marcacion.ENTRADA_ALMUERZO))

    if entrada and salida and salida_alm and entrada_alm:
        return _construir(Estado.COMPLETO, Gravedad.NINGUNA,
                          config.SUBTIPOS['COMPLETA'], faltan)

    if entrada and salida and not salida_alm and not entrada_alm:
        return _construir(Estado.COMPLETO, Gravedad.NINGUNA,
                          config.SUBTIPOS['SIN_ALMUERZO'], faltan)

    if entrada and not salida:
        return _construir(_pendiente_o_incompleto(es_hoy), Gravedad.MEDIA,
                          config.SUBTIPOS['SOLO_ENTRADA'], faltan)

    if salida and not entrada:
        return _construir(_pendiente_o_incompleto(es_hoy), Gravedad.ALTA,
                          config.SUBTIPOS['SOLO_SALIDA'], faltan)

    if not entrada and not salida and (salida_alm or entrada_alm):
        return _construir(Estado.INCOMPLETO, Gravedad.MEDIA,
                          config.SUBTIPOS['SOLO_ALMUERZO'], faltan)

    if not (entrada or salida or salida_alm or entrada_alm):
        return _construir(Estado.SIN_REGISTRO, Gravedad.ALTA,
                          config.SUBTIPOS['SIN_REGISTROS'], faltan)

    # Entrada y salida con una sola marcación de almuerzo
    return _construir(Estado.INCOMPLETO, Gravedad.MEDIA,
                      config.SUBTIPOS['ALMUERZO_PARCIAL'], faltan)


# Subtipo descriptivo -> (estado fijo o None si depende de es_hoy, gravedad)
_TABLA_SUBTIPOS = {
    'Jornada completa': (Estado.COMPLETO, Gravedad.NINGUNA),
    'Entrada y Salida': (Estado.COMPLETO, Gravedad.NINGUNA),
    'Entrada y Salida Almuerzo': (Estado.COMPLETO, Gravedad.NINGUNA),
    'Sin almuerzo registrado': (Estado.COMPLETO, Gravedad.NINGUNA),
    'Sin almuerzo': (Estado.COMPLETO, Gravedad.NINGUNA),
    'Solo entrada': (None, Gravedad.MEDIA),
    'Falta salida final': (None, Gravedad.MEDIA),
    'Solo salida': (None, Gravedad.ALTA),
    'Falta entrada inicial': (None, Gravedad.ALTA),
    'Solo almuerzo': (Estado.INCOMPLETO, Gravedad.MEDIA),
    'Solo salida almuerzo': (Estado.INCOMPLETO, Gravedad.MEDIA),
    'Solo entrada almuerzo': (Estado.INCOMPLETO, Gravedad.MEDIA),
    'Almuerzo parcial': (Estado.INCOMPLETO, Gravedad.MEDIA),
    'ERROR - Misma hora': (Estado.ERROR, Gravedad.ALTA),
    'Sin registros': (Estado.SIN_REGISTRO, Gravedad.ALTA),
}
_TABLA_SUBTIPOS_NORMALIZADA = {k.lower(): v for k, v in _TABLA_SUBTIPOS.items()}


def clasificar_subtipo(subtipo, es_hoy, faltan=()):
    """
    Clasifica por el subtipo descriptivo guardado en subtipo_evento.

    Los subtipos que no están en la tabla quedan como DESCONOCIDO / BAJA.
    """
    clave = (subtipo or '').strip().lower()
    estado, gravedad = _TABLA_SUBTIPOS_NORMALIZADA.get(
        clave, (Estado.DESCONOCIDO, Gravedad.BAJA)
    )
    if estado is None:
        estado = _pendiente_o_incompleto(es_hoy)
    return _construir(estado, gravedad, subtipo or 'Sin clasificar', tuple(faltan))
