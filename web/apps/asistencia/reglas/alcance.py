"""
Módulo de Alcance del Visor
Determina qué campañas puede ver un usuario según su rol y su campaña
"""

from dataclasses import dataclass

from .campanas import es_campana_ventas, es_conocida, nombre_canonico, subcampanas_team_leader
from .normalizacion import normalizar


class Rol:
    AGENTE = 'Agente'
    TEAM_LEADER = 'Team Leader'
    SUPERVISOR = 'Supervisor'
    TI = 'TI'
    ADMINISTRADOR = 'Administrador'

    CHOICES = [
        (AGENTE, 'Agente'),
        (TEAM_LEADER, 'Team Leader'),
        (SUPERVISOR, 'Supervisor'),
        (TI, 'TI'),
        (ADMINISTRADOR, 'Administrador'),
    ]


# Clave normalizada -> rol (incluye los alias en inglés)
_ALIAS_ROLES = {
    'agente': Rol.AGENTE,
    'agent': Rol.AGENTE,
    'team_leader': Rol.TEAM_LEADER,
    'teamleader': Rol.TEAM_LEADER,
    'supervisor': Rol.SUPERVISOR,
    'ti': Rol.TI,
    'it': Rol.TI,
    'administrador': Rol.ADMINISTRADOR,
    'admin': Rol.ADMINISTRADOR,
}

ROLES_VER_TODAS = (Rol.TI, Rol.ADMINISTRADOR)


def normalizar_rol(rol):
    """Devuelve el rol canónico, o None si no se reconoce."""
    return _ALIAS_ROLES.get(normalizar(rol))


@dataclass(frozen=True)
class AlcanceVisor:
    rol: object
    ver_todas: bool
    campanas: tuple = ()

    @property
    def vacio(self):
        return not self.ver_todas and not self.campanas

    def permite(self, campana):
        """True si la campaña (nombre visual) está dentro del alcance."""
        if self.ver_todas:
            return True
        return nombre_canonico(campana) in self.campanas

    def a_dict(self):
        return {
            'rol': self.rol,
            'ver_todas': self.ver_todas,
            'campanas': list(self.campanas),
        }


def alcance_para(rol, campana):
    """
    Calcula las campañas visibles para un usuario.

    TI y Administrador ven todo. Cualquier otro rol (incluso uno desconocido)
    con campaña de ventas ve SAV, REFI y PL; con otra campaña conocida ve
    solo esa. Sin campaña o con una campaña desconocida el alcance queda
    vacío.

    Args:
        rol: Rol del usuario (acepta alias y variaciones de escritura)
        campana: Código de campaña asignado al usuario

    Returns:
        AlcanceVisor
    """
    rol_canonico = normalizar_rol(rol)

    if rol_canonico in ROLES_VER_TODAS:
        return AlcanceVisor(rol=rol_canonico, ver_todas=True)

    rol_visible = rol_canonico or rol

    if es_campana_ventas(campana):
        return AlcanceVisor(
            rol=rol_visible,
            ver_todas=False,
            campanas=tuple(subcampanas_team_leader(campana)),
        )

    if not es_conocida(campana):
        return AlcanceVisor(rol=rol_visible, ver_todas=False)

    return AlcanceVisor(
        rol=rol_visible,
        ver_todas=False,
        campanas=(nombre_canonico(campana),),
    )
