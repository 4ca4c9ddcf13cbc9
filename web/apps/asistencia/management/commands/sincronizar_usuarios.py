"""
Comando para copiar los usuarios de los dispositivos Hikvision a usuarios_hikvision
Uso: python manage.py sincronizar_usuarios
"""

from django.core.management.base import BaseCommand

from apps.asistencia.sincronizador import SincronizadorUsuarios


class Command(BaseCommand):
    help = 'Consulta los usuarios de los dispositivos Hikvision y actualiza usuarios_hikvision'

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('=' * 60))
        self.stdout.write(self.style.NOTICE('SINCRONIZACIÓN DE USUARIOS HIKVISION'))
        self.stdout.write(self.style.NOTICE('=' * 60))

        resultado = SincronizadorUsuarios().ejecutar()

        self.stdout.write(f"Usuarios obtenidos: {resultado['usuarios_obtenidos']}")

        if resultado['success']:
            self.stdout.write(self.style.SUCCESS(f"✓ {resultado['message']}"))
        else:
            self.stdout.write(self.style.WARNING(f"⚠ {resultado['message']}"))

        for ip in resultado['dispositivos_fallidos']:
            self.stdout.write(self.style.ERROR(f"✗ Dispositivo sin respuesta: {ip}"))

        self.stdout.write(self.style.NOTICE('=' * 60))
