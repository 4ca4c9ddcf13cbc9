"""
Módulo de Análisis de Almuerzo
Calcula la duración del almuerzo y la clasifica
"""

from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Optional

from .. import config
from .marcaciones import Marcacion, esta_presente


class EstadoAlmuerzo(str, Enum):
    NORMAL = 'NORMAL'
    CORTO = 'CORTO'
    LARGO = 'LARGO'
    INCOMPLETO = 'INCOMPLETO'
    NO_REGISTRADO = 'NO_REGISTRADO'
    ERROR = 'ERROR'


@dataclass(frozen=True)
class AnalisisAlmuerzo:
    estado: EstadoAlmuerzo
    mensaje: str
    tiene_problema: bool
    duracion: Optional[int] = None
    lado_faltante: Optional[Marcacion] = None

    @property
    def completo(self):
        """Salida y regreso válidos; el orden invertido no cuenta."""
        return self.estado in (EstadoAlmuerzo.NORMAL, EstadoAlmuerzo.CORTO, EstadoAlmuerzo.LARGO)

    def a_dict(self):
        return {
            'estado': self.estado.value,
            'mensaje': self.mensaje,
            'tiene_problema': self.tiene_problema,
            'duracion': self.duracion,
            'duracion_texto': formatear_duracion(self.duracion),
            'lado_faltante': self.lado_faltante.value if self.lado_faltante else None,
        }


_FORMATOS_HORA = ['%H:%M', '%H:%M:%S', '%I:%M %p', '%I:%M:%S %p']


def parsear_hora(valor):
    """
    Convierte una hora (time, datetime o string) a objeto time.

    Raises:
        ValueError: si el valor no es una hora reconocible
    """
    if isinstance(valor, datetime):
        return valor.time()
    if isinstance(valor, time):
        return valor

    texto = str(valor).strip()
    for fmt in _FORMATOS_HORA:
        try:
            return datetime.strptime(texto, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Hora no reconocida: {valor!r}")


def minutos_del_dia(valor):
    """Minutos desde medianoche (reloj de pared, sin cruzar días)."""
    hora = parsear_hora(valor)
    return hora.hour * 60 + hora.minute


def formatear_duracion(minutos):
    """45 -> '45m', 65 -> '1h 5m', None -> None"""
    if minutos is None:
        return None
    horas, resto = divmod(abs(minutos), 60)
    return f"{horas}h {resto}m" if horas > 0 else f"{resto}m"


def analizar_almuerzo(salida, entrada):
    """
    Analiza las marcaciones de salida y regreso de almuerzo.

    Args:
        salida: Hora de salida a almuerzo (o None)
        entrada: Hora de regreso de almuerzo (o None)

    Returns:
        AnalisisAlmuerzo; nunca lanza excepciones
    """
    tiene_salida = esta_presente(salida)
    tiene_entrada = esta_presente(entrada)

    if not tiene_salida and not tiene_entrada:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.NO_REGISTRADO,
            mensaje='Sin registro de almuerzo',
            tiene_problema=True,
        )

    if tiene_salida and not tiene_entrada:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.INCOMPLETO,
            mensaje='Falta registro de entrada almuerzo',
            tiene_problema=True,
            lado_faltante=Marcacion.ENTRADA_ALMUERZO,
        )

    if tiene_entrada and not tiene_salida:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.INCOMPLETO,
            mensaje='Falta registro de salida almuerzo',
            tiene_problema=True,
            lado_faltante=Marcacion.SALIDA_ALMUERZO,
        )

    try:
        duracion = minutos_del_dia(entrada) - minutos_del_dia(salida)
    except (ValueError, TypeError):
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.ERROR,
            mensaje='Error calculando duración',
            tiene_problema=True,
        )

    # Regreso antes de la salida: reloj desfasado o almuerzo cruzando medianoche
    if duracion < 0:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.ERROR,
            mensaje=f'Regreso de almuerzo anterior a la salida ({duracion} min)',
            tiene_problema=True,
            duracion=duracion,
        )

    if duracion < config.ALMUERZO_MINIMO_MIN:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.CORTO,
            mensaje=f'Almuerzo muy corto ({duracion} min)',
            tiene_problema=True,
            duracion=duracion,
        )

    if duracion > config.ALMUERZO_MAXIMO_MIN:
        return AnalisisAlmuerzo(
            estado=EstadoAlmuerzo.LARGO,
            mensaje=f'Almuerzo muy largo ({duracion} min)',
            tiene_problema=True,
            duracion=duracion,
        )

    return AnalisisAlmuerzo(
        estado=EstadoAlmuerzo.NORMAL,
        mensaje=f'Almuerzo correcto ({duracion} min)',
        tiene_problema=False,
        duracion=duracion,
    )
