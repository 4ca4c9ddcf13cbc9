"""
Módulo de Tareas Cron para el tablero de asistencia
Sincronización programada de eventos desde un cron externo
"""

import hmac
import logging
from datetime import datetime

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .sincronizador import SincronizadorEventos

logger = logging.getLogger(__name__)


def _validar_token_cron(request):
    """
    Valida el token de autenticación para endpoints cron.
    Acepta token via:
    - Header: Authorization: Bearer <token>
    - Query param: ?token=<token>

    Sin CRON_SECRET_TOKEN configurado se rechaza todo.
    """
    esperado = settings.CRON_SECRET_TOKEN
    if not esperado:
        return False

    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        if hmac.compare_digest(auth_header[7:], esperado):
            return True

    token = request.GET.get('token', '')
    return bool(token) and hmac.compare_digest(token, esperado)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def cron_sincronizar(request):
    """
    Endpoint para sincronizar los eventos del día con los dispositivos.
    URL: /asistencia/cron/sincronizar/?token=<token>[&fecha=YYYY-MM-DD]
    """
    if not _validar_token_cron(request):
        logger.warning("Cron sincronizar: token inválido")
        return JsonResponse({
            'success': False,
            'error': 'Token inválido'
        }, status=401)

    fecha = None
    if request.GET.get('fecha'):
        try:
            fecha = datetime.strptime(request.GET['fecha'], '%Y-%m-%d').date()
        except ValueError:
            return JsonResponse({
                'success': False,
                'error': 'Formato de fecha inválido. Use YYYY-MM-DD'
            }, status=400)

    try:
        logger.info("Ejecutando sincronización de eventos via cron...")
        resultado = SincronizadorEventos().ejecutar(fecha=fecha)
        logger.info(f"Sincronización via cron: {resultado['message']}")
        return JsonResponse(resultado)

    except Exception as e:
        logger.exception("Error en cron_sincronizar")
        return JsonResponse({
            'success': False,
            'error': str(e) if settings.DEBUG else 'Error interno del servidor'
        }, status=500)
