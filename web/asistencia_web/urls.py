"""
URL configuration for asistencia_web project.
"""

from django.contrib import admin
from django.urls import path, include
from django.shortcuts import redirect

urlpatterns = [
    # Admin de Django
    path('admin/', admin.site.urls),

    # App de usuarios (login, logout, etc.)
    path('users/', include('apps.users.urls', namespace='users')),

    # Redirección de la raíz a login
    path('', lambda request: redirect('users:login')),

    # Tablero de asistencia
    path('asistencia/', include('apps.asistencia.urls', namespace='asistencia')),
]
