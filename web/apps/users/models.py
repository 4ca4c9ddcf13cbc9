"""
Modelos para la app de usuarios
"""

from django.db import models
from django.contrib.auth.models import User

from apps.asistencia.reglas.alcance import Rol


class PerfilUsuario(models.Model):
    """Perfil extendido del usuario con rol y campaña asignada"""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='perfil')
    rol = models.CharField(
        max_length=50,
        choices=Rol.CHOICES,
        default=Rol.AGENTE,
        verbose_name='Rol'
    )
    campana = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        verbose_name='Campaña asignada',
        help_text='Código de campaña, p. ej. campana_sav o campaña_ventas'
    )
    documento = models.CharField(max_length=50, blank=True, verbose_name='Documento')
    cargo = models.CharField(max_length=100, blank=True, verbose_name='Cargo')
    activo = models.BooleanField(default=True, verbose_name='Usuario activo')
    fecha_creacion = models.DateTimeField(auto_now_add=True)
    fecha_actualizacion = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Perfil de Usuario'
        verbose_name_plural = 'Perfiles de Usuarios'

    def __str__(self):
        return f"{self.user.username} - {self.rol}"
