"""
Permisos por rol para las vistas de la API
"""

from functools import wraps

from django.http import JsonResponse

from apps.asistencia.reglas.alcance import AlcanceVisor, Rol, alcance_para, normalizar_rol

from .models import PerfilUsuario


def obtener_perfil(user):
    """Perfil del usuario o None si no tiene"""
    try:
        return user.perfil
    except PerfilUsuario.DoesNotExist:
        return None


def obtener_rol(user):
    """Rol canónico del usuario; los superusuarios son Administrador."""
    if user.is_superuser:
        return Rol.ADMINISTRADOR
    perfil = obtener_perfil(user)
    if perfil is None or not perfil.activo:
        return None
    return normalizar_rol(perfil.rol)


def obtener_alcance(user):
    """
    Campañas visibles para el usuario de la sesión.

    Sin perfil, con perfil inactivo o anónimo el alcance queda vacío.
    """
    if not user.is_authenticated:
        return AlcanceVisor(rol=None, ver_todas=False)
    if user.is_superuser:
        return alcance_para(Rol.ADMINISTRADOR, None)

    perfil = obtener_perfil(user)
    if perfil is None or not perfil.activo:
        return AlcanceVisor(rol=None, ver_todas=False)
    return alcance_para(perfil.rol, perfil.campana)


def api_login_required(view_func):
    """Como login_required pero responde 401 JSON en lugar de redirigir"""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'success': False, 'error': 'No autenticado'}, status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped


def rol_requerido(*roles):
    """
    Restringe una vista a los roles indicados.

    Uso:
        @method_decorator(rol_requerido(Rol.TI, Rol.ADMINISTRADOR), name='dispatch')
    """
    def decorador(view_func):
        @wraps(view_func)
        @api_login_required
        def _wrapped(request, *args, **kwargs):
            if obtener_rol(request.user) not in roles:
                return JsonResponse({
                    'success': False,
                    'error': 'No tiene permisos para esta operación'
                }, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorador
