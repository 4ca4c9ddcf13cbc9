"""
Las cuatro marcaciones de un día de asistencia y cómo leerlas de un registro
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Optional, Union

from .. import config


class Marcacion(str, Enum):
    ENTRADA = 'Entrada'
    SALIDA = 'Salida'
    SALIDA_ALMUERZO = 'Salida Almuerzo'
    ENTRADA_ALMUERZO = 'Entrada Almuerzo'


# Marcación -> nombre del campo en el modelo EventoAsistencia
CAMPOS = {
    Marcacion.ENTRADA: 'hora_entrada',
    Marcacion.SALIDA: 'hora_salida',
    Marcacion.SALIDA_ALMUERZO: 'hora_salida_almuerzo',
    Marcacion.ENTRADA_ALMUERZO: 'hora_entrada_almuerzo',
}

Hora = Optional[Union[time, str]]


@dataclass(frozen=True)
class RegistroAsistencia:
    """Marcaciones de un empleado en una fecha, independiente de la BD."""
    documento: str
    fecha: date
    hora_entrada: Hora = None
    hora_salida: Hora = None
    hora_salida_almuerzo: Hora = None
    hora_entrada_almuerzo: Hora = None
    campana: Optional[str] = None
    subtipo_evento: Optional[str] = None


def esta_presente(valor):
    """Una marcación cuenta como presente si no es None, vacía ni '--:--'."""
    if valor is None:
        return False
    if isinstance(valor, str):
        texto = valor.strip()
        return bool(texto) and texto != config.HORA_VACIA
    return True


def leer(registro, marcacion):
    """Lee una marcación de un modelo, dataclass o dict."""
    campo = CAMPOS[marcacion]
    if isinstance(registro, dict):
        return registro.get(campo)
    return getattr(registro, campo, None)


def faltantes(registro):
    """Marcaciones ausentes, en orden Entrada, Salida, Salida/Entrada Almuerzo."""
    return tuple(m for m in Marcacion if not esta_presente(leer(registro, m)))
