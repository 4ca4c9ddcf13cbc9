from django.db import models

from .reglas.marcaciones import RegistroAsistencia


class UsuarioHikvision(models.Model):
    """Empleado registrado en los dispositivos Hikvision."""
    employee_no = models.CharField(max_length=50, unique=True)
    nombre = models.CharField(max_length=200, blank=True)
    genero = models.CharField(max_length=20, blank=True)
    departamento = models.CharField(max_length=100, null=True, blank=True)
    foto_path = models.CharField(max_length=500, blank=True)
    tipo_usuario = models.CharField(max_length=50, blank=True)
    estado = models.CharField(max_length=50, blank=True, default='Activo')
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'usuarios_hikvision'
        verbose_name = 'Usuario Hikvision'
        verbose_name_plural = 'Usuarios Hikvision'
        ordering = ['nombre']

    def __str__(self):
        return f"{self.nombre} ({self.employee_no})"


class EventoAsistencia(models.Model):
    """Marcaciones consolidadas de un empleado en una fecha."""
    documento = models.CharField(max_length=50, db_index=True)
    nombre = models.CharField(max_length=200, blank=True)
    fecha = models.DateField(db_index=True)

    hora_entrada = models.TimeField(null=True, blank=True)
    hora_salida = models.TimeField(null=True, blank=True)
    hora_salida_almuerzo = models.TimeField(null=True, blank=True)
    hora_entrada_almuerzo = models.TimeField(null=True, blank=True)

    campana = models.CharField(max_length=100, null=True, blank=True)
    tipo_evento = models.CharField(max_length=50, default='Asistencia')
    subtipo_evento = models.CharField(max_length=100, blank=True)
    dispositivo_ip = models.CharField(max_length=100, blank=True)
    imagen = models.CharField(max_length=500, blank=True)

    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'eventos_procesados'
        unique_together = ('documento', 'fecha')
        verbose_name = 'Evento de asistencia'
        verbose_name_plural = 'Eventos de asistencia'
        ordering = ['-fecha', 'nombre']

    def __str__(self):
        return f"{self.documento} - {self.fecha}"

    def como_registro(self):
        """Copia independiente de la BD para las reglas de clasificación."""
        return RegistroAsistencia(
            documento=self.documento,
            fecha=self.fecha,
            hora_entrada=self.hora_entrada,
            hora_salida=self.hora_salida,
            hora_salida_almuerzo=self.hora_salida_almuerzo,
            hora_entrada_almuerzo=self.hora_entrada_almuerzo,
            campana=self.campana,
            subtipo_evento=self.subtipo_evento,
        )
