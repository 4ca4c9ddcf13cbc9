from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='UsuarioHikvision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('employee_no', models.CharField(max_length=50, unique=True)),
                ('nombre', models.CharField(blank=True, max_length=200)),
                ('genero', models.CharField(blank=True, max_length=20)),
                ('departamento', models.CharField(blank=True, max_length=100, null=True)),
                ('foto_path', models.CharField(blank=True, max_length=500)),
                ('tipo_usuario', models.CharField(blank=True, max_length=50)),
                ('estado', models.CharField(blank=True, default='Activo', max_length=50)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('actualizado_en', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Usuario Hikvision',
                'verbose_name_plural': 'Usuarios Hikvision',
                'db_table': 'usuarios_hikvision',
                'ordering': ['nombre'],
            },
        ),
        migrations.CreateModel(
            name='EventoAsistencia',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('documento', models.CharField(db_index=True, max_length=50)),
                ('nombre', models.CharField(blank=True, max_length=200)),
                ('fecha', models.DateField(db_index=True)),
                ('hora_entrada', models.TimeField(blank=True, null=True)),
                ('hora_salida', models.TimeField(blank=True, null=True)),
                ('hora_salida_almuerzo', models.TimeField(blank=True, null=True)),
                ('hora_entrada_almuerzo', models.TimeField(blank=True, null=True)),
                ('campana', models.CharField(blank=True, max_length=100, null=True)),
                ('tipo_evento', models.CharField(default='Asistencia', max_length=50)),
                ('subtipo_evento', models.CharField(blank=True, max_length=100)),
                ('dispositivo_ip', models.CharField(blank=True, max_length=100)),
                ('imagen', models.CharField(blank=True, max_length=500)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('actualizado_en', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Evento de asistencia',
                'verbose_name_plural': 'Eventos de asistencia',
                'db_table': 'eventos_procesados',
                'ordering': ['-fecha', 'nombre'],
                'unique_together': {('documento', 'fecha')},
            },
        ),
    ]
