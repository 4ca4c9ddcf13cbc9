import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PerfilUsuario',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rol', models.CharField(choices=[('Agente', 'Agente'), ('Team Leader', 'Team Leader'), ('Supervisor', 'Supervisor'), ('TI', 'TI'), ('Administrador', 'Administrador')], default='Agente', max_length=50, verbose_name='Rol')),
                ('campana', models.CharField(blank=True, help_text='Código de campaña, p. ej. campana_sav o campaña_ventas', max_length=100, null=True, verbose_name='Campaña asignada')),
                ('documento', models.CharField(blank=True, max_length=50, verbose_name='Documento')),
                ('cargo', models.CharField(blank=True, max_length=100, verbose_name='Cargo')),
                ('activo', models.BooleanField(default=True, verbose_name='Usuario activo')),
                ('fecha_creacion', models.DateTimeField(auto_now_add=True)),
                ('fecha_actualizacion', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='perfil', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Perfil de Usuario',
                'verbose_name_plural': 'Perfiles de Usuarios',
            },
        ),
    ]
