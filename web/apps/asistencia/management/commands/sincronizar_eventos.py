"""
Comando para sincronizar los eventos de los dispositivos Hikvision
Uso: python manage.py sincronizar_eventos [--fecha YYYY-MM-DD] [--log-archivo]

Programar con cron cada minuto:
* * * * * cd /path/to/web && python manage.py sincronizar_eventos
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from apps.asistencia.logger import SincronizacionLogger
from apps.asistencia.sincronizador import SincronizadorEventos


class Command(BaseCommand):
    help = 'Consulta los dispositivos Hikvision y guarda las marcaciones del día'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fecha',
            type=str,
            help='Fecha específica (YYYY-MM-DD). Por defecto usa la fecha actual.',
        )
        parser.add_argument(
            '--log-archivo',
            action='store_true',
            help='Escribir un archivo de log de la corrida en LOGS_DIR',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('=' * 60))
        self.stdout.write(self.style.NOTICE('SINCRONIZACIÓN DE EVENTOS HIKVISION'))
        self.stdout.write(self.style.NOTICE('=' * 60))

        fecha = None
        if options.get('fecha'):
            try:
                fecha = datetime.strptime(options['fecha'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError(
                    f"Formato de fecha inválido: {options['fecha']}. Use YYYY-MM-DD"
                )

        logger = SincronizacionLogger(archivo=True) if options.get('log_archivo') else None
        resultado = SincronizadorEventos(logger=logger).ejecutar(fecha=fecha)

        self.stdout.write(f"Fecha: {resultado['fecha']}")
        self.stdout.write(f"Eventos obtenidos: {resultado['eventos_obtenidos']}")

        if resultado['success']:
            self.stdout.write(self.style.SUCCESS(f"✓ {resultado['message']}"))
        else:
            self.stdout.write(self.style.WARNING(f"⚠ {resultado['message']}"))

        for ip in resultado['dispositivos_fallidos']:
            self.stdout.write(self.style.ERROR(f"✗ Dispositivo sin respuesta: {ip}"))

        self.stdout.write(self.style.NOTICE('=' * 60))
