"""
Módulo de Logging
Registro de cada corrida de sincronización de eventos
"""

import logging
import os
from datetime import datetime

from django.conf import settings

from . import config


class SincronizacionLogger:
    """Gestiona el logging y las estadísticas de una sincronización"""

    STATS_INICIALES = (
        'eventos_obtenidos',
        'registros_procesados',
        'nuevos_registros',
        'registros_actualizados',
        'sin_cambios',
        'errores',
        'advertencias',
    )

    ETIQUETAS = {
        'eventos_obtenidos': 'Eventos obtenidos',
        'usuarios_obtenidos': 'Usuarios obtenidos',
        'registros_procesados': 'Registros procesados',
        'nuevos_registros': 'Nuevos',
        'registros_actualizados': 'Actualizados',
        'sin_cambios': 'Sin cambios',
        'advertencias': 'Advertencias',
        'errores': 'Errores',
    }

    def __init__(self, nombre_modulo='apps.asistencia.sincronizacion', archivo=None,
                 estadisticas=STATS_INICIALES):
        """
        Inicializa el logger

        Args:
            nombre_modulo: Nombre del logger
            archivo: True para escribir un archivo por corrida en LOGS_DIR;
                     por defecto usa settings.SINCRONIZACION_LOG_ARCHIVO
            estadisticas: Nombres de las estadísticas de la corrida
        """
        self.logger = logging.getLogger(nombre_modulo)
        self.file_handler = None

        if archivo is None:
            archivo = getattr(settings, 'SINCRONIZACION_LOG_ARCHIVO', False)
        if archivo:
            self._configurar_archivo()

        self.stats = {nombre: 0 for nombre in estadisticas}

    def _configurar_archivo(self):
        """Agrega un handler de archivo para esta corrida"""
        os.makedirs(settings.LOGS_DIR, exist_ok=True)

        timestamp = datetime.now().strftime(config.FORMATO_ARCHIVO)
        log_file = os.path.join(settings.LOGS_DIR, f'sincronizacion_{timestamp}.log')

        formatter = logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_DATE_FORMAT)
        self.file_handler = logging.FileHandler(log_file, encoding='utf-8')
        self.file_handler.setLevel(logging.DEBUG)
        self.file_handler.setFormatter(formatter)
        self.logger.addHandler(self.file_handler)

    def cerrar(self):
        """Quita el handler de archivo de la corrida"""
        if self.file_handler:
            self.logger.removeHandler(self.file_handler)
            self.file_handler.close()
            self.file_handler = None

    def info(self, mensaje):
        self.logger.info(mensaje)

    def debug(self, mensaje):
        self.logger.debug(mensaje)

    def warning(self, mensaje):
        self.logger.warning(mensaje)
        self.stats['advertencias'] += 1

    def error(self, mensaje):
        self.logger.error(mensaje)
        self.stats['errores'] += 1

    def incrementar_stat(self, stat_name, cantidad=1):
        """Incrementa una estadística"""
        if stat_name in self.stats:
            self.stats[stat_name] += cantidad

    def obtener_estadisticas(self):
        """Retorna las estadísticas actuales"""
        return self.stats.copy()

    def log_inicio_proceso(self, fecha, dispositivos, mensaje=config.MENSAJES['inicio']):
        """Registra el inicio de la sincronización"""
        self.info("=" * 80)
        self.info(mensaje)
        if fecha:
            self.info(f"Fecha: {fecha}")
        self.info(f"Dispositivos: {', '.join(dispositivos) or 'ninguno'}")
        self.info("=" * 80)

    def log_fin_proceso(self, exito=True):
        """Registra el fin de la sincronización con estadísticas"""
        self.info("=" * 80)

        if exito:
            self.info(config.MENSAJES['proceso_completo'])
        else:
            self.logger.error("Sincronización finalizada con errores")

        self.info("📊 ESTADÍSTICAS DE LA SINCRONIZACIÓN:")
        for nombre, valor in self.stats.items():
            self.info(f"  - {self.ETIQUETAS.get(nombre, nombre)}: {valor}")
        self.info("=" * 80)

    def log_fase(self, nombre_fase):
        """Registra el inicio de una fase"""
        self.info('─' * 80)
        self.info(f"📌 FASE: {nombre_fase}")
        self.info('─' * 80)

    def log_inferencia(self, documento, fecha_hora, tipo, metodo):
        """Registra el tipo deducido para una marcación"""
        self.debug(
            f"Tipo inferido - Empleado: {documento}, "
            f"Fecha/Hora: {fecha_hora}, Tipo: {tipo}, Método: {metodo}"
        )
