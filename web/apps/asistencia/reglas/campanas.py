"""
Módulo de Campañas
Resuelve los códigos de campaña (con/sin tilde, mayúsculas, sinónimos) a un
nombre visual único y expande la campaña de ventas en sus sub-campañas
"""

from .. import config
from .normalizacion import normalizar

# Código de campaña (tal como llega de la BD o de los dispositivos) -> nombre visual
CAMPANAS = {
    # Sin tilde
    'campana_5757': 'Campana 5757',
    'campana_sav': 'Campana SAV',
    'campana_refi': 'Campana REFI',
    'campana_pl': 'Campana PL',
    'campana_parlo': 'Campana PARLO',
    'ti': 'TI',
    'teams_leaders': 'Teams Leaders',
    'administrativo': 'Administrativo',
    # Con tilde (variaciones reales de la BD)
    'campaña_5757': 'Campana 5757',
    'campaña_sav': 'Campana SAV',
    'campaña_refi': 'Campana REFI',
    'campaña_pl': 'Campana PL',
    'campaña_parlo': 'Campana PARLO',
    'campaña_PARLO': 'Campana PARLO',
    # Variaciones con mayúsculas
    'CAMPANA_5757': 'Campana 5757',
    'CAMPANA_SAV': 'Campana SAV',
    'CAMPANA_REFI': 'Campana REFI',
    'CAMPANA_PL': 'Campana PL',
    'CAMPANA_PARLO': 'Campana PARLO',
    'TI': 'TI',
    'TEAMS_LEADERS': 'Teams Leaders',
    'ADMINISTRATIVO': 'Administrativo',
    # Códigos cortos
    '5757': 'Campana 5757',
    'SAV': 'Campana SAV',
    'REFI': 'Campana REFI',
    'PL': 'Campana PL',
    'PARLO': 'Campana PARLO',
    # Campaña de ventas (agregado de SAV, REFI y PL)
    'campaña_ventas': config.CAMPANA_VENTAS,
    'campana_ventas': config.CAMPANA_VENTAS,
    'campaña_ventas_casa': config.CAMPANA_VENTAS,
    'campana_ventas_casa': config.CAMPANA_VENTAS,
    'ventas': config.CAMPANA_VENTAS,
    'sales': config.CAMPANA_VENTAS,
    'ventas_consolidado': config.CAMPANA_VENTAS,
    'CAMPANA_VENTAS': config.CAMPANA_VENTAS,
    'CAMPAÑA_VENTAS': config.CAMPANA_VENTAS,
}

VARIANTES_VENTAS = [
    'campaña_ventas',
    'campana_ventas',
    'campaña_ventas_casa',
    'campana_ventas_casa',
    'ventas',
    'sales',
    'ventas_consolidado',
]


def _construir_indice(tabla):
    """Indexa la tabla por clave normalizada; falla si dos variantes chocan."""
    indice = {}
    for codigo, nombre in tabla.items():
        clave = normalizar(codigo)
        if clave in indice and indice[clave] != nombre:
            raise ValueError(
                f"Código de campaña ambiguo: '{codigo}' -> '{nombre}' "
                f"y '{indice[clave]}'"
            )
        indice[clave] = nombre
    # Cada nombre visual se resuelve a sí mismo
    for nombre in set(tabla.values()):
        clave = normalizar(nombre)
        if clave in indice and indice[clave] != nombre:
            raise ValueError(f"Nombre visual ambiguo: '{nombre}'")
        indice[clave] = nombre
    return indice


_INDICE = _construir_indice(CAMPANAS)
_CLAVES_VENTAS = {normalizar(v) for v in VARIANTES_VENTAS}


def es_conocida(codigo):
    """True si el código se resuelve por la tabla de campañas."""
    return normalizar(codigo) in _INDICE


def nombre_canonico(codigo):
    """
    Obtiene el nombre visual de una campaña.

    Args:
        codigo: Código de campaña en cualquiera de sus variantes

    Returns:
        Nombre visual; 'Sin grupo' si el código es vacío; el código original
        si no está en la tabla
    """
    clave = normalizar(codigo)
    if clave is None:
        return config.SIN_GRUPO
    return _INDICE.get(clave, codigo)


def es_campana_ventas(codigo):
    """True si el código es alguno de los sinónimos de la campaña de ventas."""
    clave = normalizar(codigo)
    return clave is not None and clave in _CLAVES_VENTAS


def subcampanas_team_leader(codigo):
    """
    Campañas visibles para un Team Leader según su campaña asignada.

    Ventas se expande a SAV, REFI y PL; cualquier otra campaña es solo ella.
    """
    if normalizar(codigo) is None:
        return []
    if es_campana_ventas(codigo):
        return list(config.SUBCAMPANAS_VENTAS)
    return [nombre_canonico(codigo)]


def variantes_busqueda(codigo):
    """
    Todas las escrituras de una campaña, para construir filtros contra la BD.

    Incluye el código recibido, cada variante de la tabla con el mismo nombre
    visual y el nombre visual.
    """
    if normalizar(codigo) is None:
        return []

    variantes = [codigo]
    if not es_conocida(codigo):
        return variantes

    canonico = nombre_canonico(codigo)
    for variante, nombre in CAMPANAS.items():
        if nombre == canonico and variante not in variantes:
            variantes.append(variante)
    if canonico not in variantes:
        variantes.append(canonico)

    return variantes
