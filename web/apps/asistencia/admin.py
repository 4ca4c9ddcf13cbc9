from django.contrib import admin

from .models import EventoAsistencia, UsuarioHikvision


@admin.register(UsuarioHikvision)
class UsuarioHikvisionAdmin(admin.ModelAdmin):
    list_display  = ('employee_no', 'nombre', 'departamento', 'genero', 'estado')
    list_filter   = ('departamento', 'estado')
    search_fields = ('employee_no', 'nombre', 'departamento')
    ordering      = ('nombre',)


@admin.register(EventoAsistencia)
class EventoAsistenciaAdmin(admin.ModelAdmin):
    list_display   = ('documento', 'nombre', 'fecha', 'hora_entrada', 'hora_salida',
                      'hora_salida_almuerzo', 'hora_entrada_almuerzo', 'campana', 'subtipo_evento')
    list_filter    = ('fecha', 'subtipo_evento', 'campana')
    search_fields  = ('documento', 'nombre')
    ordering       = ('-fecha', 'documento')
    date_hierarchy = 'fecha'
