"""
Configuración del Tablero de Asistencia
Constantes de negocio compartidas por las reglas, el sincronizador y las vistas
"""

# ========== CONFIGURACIÓN DE ALMUERZO ==========

# Duración aceptable del almuerzo (en minutos, ambos extremos incluidos)
ALMUERZO_MINIMO_MIN = 30
ALMUERZO_MAXIMO_MIN = 120

# ========== CONFIGURACIÓN DE CAMPAÑAS ==========

SIN_GRUPO = 'Sin grupo'

# Nombre visual del agregado de ventas y las campañas que lo componen
CAMPANA_VENTAS = 'Ventas Consolidado'
SUBCAMPANAS_VENTAS = ['Campana SAV', 'Campana REFI', 'Campana PL']

# Grupos (groupId) de cada departamento en los dispositivos Hikvision
DEPARTAMENTOS_HIKVISION = {
    'TI': 1,
    'Teams Leaders': 2,
    'Campana 5757': 3,
    'Campana SAV': 4,
    'Campana REFI': 5,
    'Campana PL': 6,
    'Campana PARLO': 7,
    'Administrativo': 8,
}

# userType del dispositivo -> tipo_usuario
TIPOS_USUARIO = {
    'normal': 'Normal',
    '0': 'Normal',
    'administrador': 'Administrador',
    '1': 'Administrador',
    'supervisor': 'Supervisor',
    '2': 'Supervisor',
    'visitor': 'Visitante',
}

GENEROS = {
    'male': 'Masculino',
    'female': 'Femenino',
}

# ========== CONFIGURACIÓN DE ESTADOS ==========

# Presentación de cada estado: (color, icono)
PRESENTACION_ESTADOS = {
    'COMPLETO': ('#28a745', '✅'),
    'PENDIENTE': ('#ffc107', '⏳'),
    'INCOMPLETO': ('#dc3545', '⚠️'),
    'ERROR': ('#dc3545', '❌'),
    'SIN_REGISTRO': ('#6c757d', '📭'),
    'DESCONOCIDO': ('#6c757d', '❓'),
}

# Subtipos que escribe el sincronizador en eventos_procesados.subtipo_evento
SUBTIPOS = {
    'COMPLETA': 'Jornada completa',
    'SIN_ALMUERZO': 'Sin almuerzo registrado',
    'SOLO_ENTRADA': 'Solo entrada',
    'SOLO_SALIDA': 'Solo salida',
    'ALMUERZO_PARCIAL': 'Almuerzo parcial',
    'SOLO_ALMUERZO': 'Solo almuerzo',
    'MISMA_HORA': 'ERROR - Misma hora',
    'SIN_REGISTROS': 'Sin registros',
}

HORA_VACIA = '--:--'

# ========== CONFIGURACIÓN DE INGESTA ==========

ZONA_HORARIA = 'America/Bogota'

# Si una marcación sin etiqueta ocurre en estos rangos de hora, se infiere como:
RANGO_INFERENCIA_ENTRADA = [(3, 11)]   # 03:00 a 11:00 -> probablemente ENTRADA
RANGO_INFERENCIA_SALIDA = [(14, 20)]   # 14:00 a 20:00 -> probablemente SALIDA

# Consulta de eventos en los dispositivos (ISAPI AcsEvent)
HIKVISION_MAX_RESULTADOS = 50
HIKVISION_MAX_LOTES = 50
HIKVISION_EVENTO_MAJOR = 5
HIKVISION_EVENTO_MINOR = 75
HIKVISION_PAUSA_LOTES = 0.2       # segundos entre lotes
HIKVISION_PAUSA_REINTENTO = 5     # segundos antes de reintentar un dispositivo
HIKVISION_INTENTOS = 2

# ========== CONFIGURACIÓN DE LIMITADOR ==========

LIMITE_ESPERA_SEG = 5       # Una solicitud por (ip, empleado) cada 5 segundos
LIMITE_RETENCION_SEG = 60   # Entradas más viejas se descartan

# ========== FORMATOS ==========

FORMATO_FECHA_OUTPUT = '%d/%m/%Y'
FORMATO_HORA_OUTPUT = '%H:%M'
FORMATO_ARCHIVO = '%Y%m%d_%H%M%S'

# ========== CONFIGURACIÓN DE LOGGING ==========

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# ========== MENSAJES DEL SISTEMA ==========

MENSAJES = {
    'inicio': '🕐 Iniciando sincronización de eventos Hikvision...',
    'consulta_completa': '📡 Consulta de dispositivos completada',
    'agrupacion_completa': '🧮 Eventos agrupados por empleado y fecha',
    'guardado_completo': '💾 Registros guardados en base de datos',
    'proceso_completo': '✅ Sincronización completada exitosamente',
    'sin_datos': '⚠️ No se encontraron eventos para procesar',
    'inicio_usuarios': '👥 Iniciando sincronización de usuarios Hikvision...',
    'sin_usuarios': '⚠️ Los dispositivos no devolvieron usuarios',
}
