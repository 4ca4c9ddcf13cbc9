"""
Reglas de negocio del tablero de asistencia.

Este paquete no depende de Django: recibe valores simples (horas, códigos de
campaña, roles) y devuelve clasificaciones. Las vistas, el sincronizador y la
exportación a Excel lo consumen en lugar de repetir las reglas.
"""

from .alcance import AlcanceVisor, Rol, alcance_para, normalizar_rol
from .almuerzo import AnalisisAlmuerzo, EstadoAlmuerzo, analizar_almuerzo, formatear_duracion
from .campanas import (
    es_campana_ventas,
    es_conocida,
    nombre_canonico,
    subcampanas_team_leader,
    variantes_busqueda,
)
from .clasificador import Estado, EstadoAsistencia, Gravedad, clasificar, clasificar_subtipo
from .marcaciones import Marcacion, RegistroAsistencia, esta_presente, faltantes
from .normalizacion import normalizar
from .rangos import RangoFechas, RangoInvalido, resolver_rango
