from django.contrib.auth.models import AnonymousUser, User
from django.test import TestCase
from django.urls import reverse

from apps.asistencia.reglas.alcance import Rol

from .models import PerfilUsuario
from .permisos import obtener_alcance, obtener_rol


class LoginTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='ti', password='clave-segura-123')
        PerfilUsuario.objects.create(user=self.user, rol=Rol.TI)

    def test_pagina_login(self):
        response = self.client.get(reverse('users:login'))
        self.assertEqual(response.status_code, 200)

    def test_credenciales_incorrectas(self):
        response = self.client.post(reverse('users:login'), {'username': 'ti', 'password': 'mala'})
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_login_redirige_al_tablero(self):
        response = self.client.post(
            reverse('users:login'), {'username': 'ti', 'password': 'clave-segura-123'}, follow=True
        )
        self.assertRedirects(response, reverse('asistencia:index'))

    def test_perfil_inactivo_cierra_sesion(self):
        self.user.perfil.activo = False
        self.user.perfil.save()
        self.client.force_login(self.user)

        response = self.client.get(reverse('users:redirect'))
        self.assertRedirects(response, reverse('users:login'), fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_redirect_crea_perfil(self):
        """Un usuario sin perfil recibe uno de Agente al entrar"""
        nuevo = User.objects.create_user(username='nuevo', password='clave-segura-123')
        self.client.force_login(nuevo)
        self.client.get(reverse('users:redirect'))
        self.assertEqual(PerfilUsuario.objects.get(user=nuevo).rol, Rol.AGENTE)

    def test_perfil(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('users:perfil'))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Todas')


class PermisosTest(TestCase):
    """Tests para obtener_rol y obtener_alcance"""

    def test_superusuario_es_administrador(self):
        admin = User.objects.create_superuser(username='admin', password='clave-segura-123')
        self.assertEqual(obtener_rol(admin), Rol.ADMINISTRADOR)
        self.assertTrue(obtener_alcance(admin).ver_todas)

    def test_sin_perfil(self):
        user = User.objects.create_user(username='sin_perfil', password='x')
        self.assertIsNone(obtener_rol(user))
        self.assertTrue(obtener_alcance(user).vacio)

    def test_anonimo(self):
        self.assertTrue(obtener_alcance(AnonymousUser()).vacio)

    def test_perfil_inactivo(self):
        user = User.objects.create_user(username='inactivo', password='x')
        PerfilUsuario.objects.create(user=user, rol=Rol.TI, activo=False)
        self.assertIsNone(obtener_rol(user))
        self.assertTrue(obtener_alcance(user).vacio)

    def test_team_leader_ventas(self):
        user = User.objects.create_user(username='tl', password='x')
        PerfilUsuario.objects.create(user=user, rol=Rol.TEAM_LEADER, campana='campaña_ventas')
        self.assertEqual(
            obtener_alcance(user).campanas,
            ('Campana SAV', 'Campana REFI', 'Campana PL'),
        )
