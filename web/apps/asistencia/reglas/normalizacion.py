"""
Módulo de Normalización de Texto
Convierte códigos de campaña y roles a una forma comparable
"""

import re
import unicodedata

_ESPACIOS = re.compile(r'\s+')
_NO_PERMITIDOS = re.compile(r'[^a-z0-9_]')


def normalizar(texto):
    """
    Normaliza un texto libre para comparación.

    Quita tildes, pasa a minúsculas, convierte espacios en '_' y elimina
    cualquier carácter fuera de [a-z0-9_].

        normalizar('Campaña SAV')  -> 'campana_sav'
        normalizar('CAMPANA_SAV')  -> 'campana_sav'

    Args:
        texto: String (o valor convertible a string) a normalizar

    Returns:
        String normalizado, o None si la entrada es vacía o no deja nada
    """
    if texto is None:
        return None

    texto = str(texto)
    if not texto.strip():
        return None

    descompuesto = unicodedata.normalize('NFD', texto)
    sin_tildes = ''.join(c for c in descompuesto if not unicodedata.combining(c))

    resultado = _ESPACIOS.sub('_', sin_tildes.lower().strip())
    resultado = _NO_PERMITIDOS.sub('', resultado)

    return resultado or None
