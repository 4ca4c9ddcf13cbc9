"""
URLs para el tablero de asistencia
"""

from django.urls import path
from . import cron, views

app_name = 'asistencia'

urlpatterns = [
    # Páginas
    path('', views.IndexView.as_view(), name='index'),
    path('faltas/', views.FaltasView.as_view(), name='faltas'),

    # API
    path('api/eventos/', views.EventosApiView.as_view(), name='eventos'),
    path('api/eventos/excel/', views.DescargarEventosExcelView.as_view(), name='eventos_excel'),
    path('api/faltas/', views.FaltasApiView.as_view(), name='faltas_api'),
    path('api/sincronizar/', views.SincronizarView.as_view(), name='sincronizar'),
    path('api/empleados/', views.EmpleadosView.as_view(), name='empleados'),
    path('api/empleados/eliminar/', views.EliminarEmpleadoView.as_view(), name='eliminar_empleado'),
    path('api/empleados/sincronizar/', views.SincronizarUsuariosView.as_view(), name='sincronizar_usuarios'),
    path('api/foto/<str:employee_no>/', views.FotoView.as_view(), name='foto'),

    # Cron
    path('cron/sincronizar/', cron.cron_sincronizar, name='cron_sincronizar'),
]
