"""
Views para la app de usuarios
"""

from django.shortcuts import render, redirect
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.views import View
from django.views.generic import TemplateView
from django.utils.decorators import method_decorator

from .models import PerfilUsuario
from .permisos import obtener_alcance, obtener_perfil, obtener_rol


class LoginView(View):
    """Vista de inicio de sesión"""
    template_name = 'users/login.html'

    def get(self, request):
        # Si ya está autenticado, redirigir
        if request.user.is_authenticated:
            return redirect('users:redirect')
        return render(request, self.template_name)

    def post(self, request):
        username = request.POST.get('username', '').strip()
        password = request.POST.get('password', '')

        if not username or not password:
            messages.error(request, 'Por favor ingrese usuario y contraseña')
            return render(request, self.template_name)

        user = authenticate(request, username=username, password=password)

        if user is not None:
            if user.is_active:
                login(request, user)
                messages.success(request, f'Bienvenido, {user.get_full_name() or user.username}')
                return redirect('users:redirect')
            else:
                messages.error(request, 'Su cuenta está desactivada')
        else:
            messages.error(request, 'Usuario o contraseña incorrectos')

        return render(request, self.template_name)


class LogoutView(View):
    """Vista de cierre de sesión"""

    def get(self, request):
        logout(request)
        messages.info(request, 'Ha cerrado sesión correctamente')
        return redirect('users:login')

    def post(self, request):
        return self.get(request)


@method_decorator(login_required, name='dispatch')
class RedirectView(View):
    """Redirige al usuario al tablero de asistencia"""

    def get(self, request):
        user = request.user

        if not user.is_superuser:
            # Obtener o crear perfil
            perfil = obtener_perfil(user)
            if perfil is None:
                perfil = PerfilUsuario.objects.create(user=user)

            # Verificar si el usuario está activo
            if not perfil.activo:
                logout(request)
                messages.error(request, 'Su cuenta está desactivada')
                return redirect('users:login')

        return redirect('asistencia:index')


@method_decorator(login_required, name='dispatch')
class PerfilView(TemplateView):
    """Vista del perfil del usuario"""
    template_name = 'users/perfil.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        user = self.request.user
        context['perfil'] = obtener_perfil(user)
        context['rol'] = obtener_rol(user)
        context['alcance'] = obtener_alcance(user)
        return context
