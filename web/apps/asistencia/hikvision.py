"""
Cliente ISAPI para los dispositivos de control de acceso Hikvision
Consulta eventos de asistencia, usuarios y fotos de rostro
"""

import logging
import time as time_module

import requests
import urllib3
from requests.auth import HTTPDigestAuth
from django.conf import settings

from . import config

logger = logging.getLogger(__name__)


class HikvisionError(Exception):
    """Fallo de transporte o respuesta HTTP inesperada de un dispositivo."""


class HikvisionService:
    """Servicio para consultar un dispositivo Hikvision por ISAPI"""

    RUTA_EVENTOS = '/ISAPI/AccessControl/AcsEvent?format=json'
    RUTA_USUARIOS = '/ISAPI/AccessControl/UserInfo/Search?format=json'

    def __init__(self, ip, usuario=None, clave=None, session=None):
        """
        Args:
            ip: IP o host del dispositivo
            usuario: Usuario ISAPI (por defecto settings.HIKVISION['USUARIO'])
            clave: Clave ISAPI (por defecto settings.HIKVISION['CLAVE'])
            session: requests.Session a reutilizar (útil en pruebas)
        """
        cfg = settings.HIKVISION
        self.ip = ip
        self.base_url = f"https://{ip}"
        self.timeout = cfg['TIMEOUT']
        self.verify = cfg['VERIFY_SSL']

        self.session = session or requests.Session()
        self.session.auth = HTTPDigestAuth(usuario or cfg['USUARIO'], clave or cfg['CLAVE'])
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

        if not self.verify:
            # Los dispositivos usan certificados autofirmados
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def _post(self, ruta, cuerpo):
        url = f"{self.base_url}{ruta}"
        try:
            return self.session.post(url, json=cuerpo, timeout=self.timeout, verify=self.verify)
        except requests.RequestException as e:
            raise HikvisionError(f"{self.ip}: {e}") from e

    # ========== EVENTOS ==========

    def consultar_lote_eventos(self, inicio, fin, posicion=0):
        """
        Consulta un lote de eventos de asistencia.

        Args:
            inicio: datetime con zona horaria (inicio del rango)
            fin: datetime con zona horaria (fin del rango)
            posicion: searchResultPosition

        Returns:
            (lista_eventos, total_reportado)
        """
        cuerpo = {
            'AcsEventCond': {
                'searchID': f"search_{self.ip}_{int(time_module.time() * 1000)}",
                'searchResultPosition': posicion,
                'maxResults': config.HIKVISION_MAX_RESULTADOS,
                'major': config.HIKVISION_EVENTO_MAJOR,
                'minor': config.HIKVISION_EVENTO_MINOR,
                'startTime': inicio.isoformat(timespec='seconds'),
                'endTime': fin.isoformat(timespec='seconds'),
            }
        }

        respuesta = self._post(self.RUTA_EVENTOS, cuerpo)

        # El dispositivo responde 400/404 cuando no hay más resultados
        if respuesta.status_code in (400, 404):
            return [], 0
        if not respuesta.ok:
            raise HikvisionError(
                f"{self.ip}: HTTP {respuesta.status_code} {respuesta.text[:100]}"
            )
        if not respuesta.text.strip():
            return [], 0

        datos = respuesta.json().get('AcsEvent') or {}
        return datos.get('InfoList') or [], datos.get('totalMatches') or 0

    def obtener_eventos(self, inicio, fin):
        """
        Recorre todos los lotes de eventos del rango.

        Returns:
            Lista de eventos crudos, cada uno con la clave 'dispositivo'
        """
        eventos = []
        posicion = 0
        total = None

        for lote in range(1, config.HIKVISION_MAX_LOTES + 1):
            lista, total_reportado = self.consultar_lote_eventos(inicio, fin, posicion)
            if lote == 1:
                total = total_reportado

            if not lista:
                break

            for evento in lista:
                evento['dispositivo'] = self.ip
            eventos.extend(lista)

            if total and len(eventos) >= total:
                break

            posicion += len(lista)
            time_module.sleep(config.HIKVISION_PAUSA_LOTES)

        logger.info(f"{self.ip}: {len(eventos)} eventos (reportados: {total})")
        return eventos

    # ========== USUARIOS ==========

    def _buscar_usuarios(self, condicion):
        cuerpo = {'UserInfoSearchCond': {'searchID': f"usuarios_{self.ip}", **condicion}}
        respuesta = self._post(self.RUTA_USUARIOS, cuerpo)
        if respuesta.status_code in (400, 404):
            return []
        if not respuesta.ok:
            raise HikvisionError(f"{self.ip}: HTTP {respuesta.status_code}")
        if not respuesta.text.strip():
            return []
        return (respuesta.json().get('UserInfoSearch') or {}).get('UserInfo') or []

    def buscar_usuario(self, employee_no):
        """Devuelve el UserInfo del empleado o None si el dispositivo no lo tiene."""
        usuarios = self._buscar_usuarios({
            'maxResults': 1,
            'searchResultPosition': 0,
            'EmployeeNoList': [{'employeeNo': str(employee_no)}],
        })
        return usuarios[0] if usuarios else None

    def consultar_lote_usuarios(self, posicion=0):
        """Un lote de UserInfo a partir de searchResultPosition."""
        return self._buscar_usuarios({
            'maxResults': config.HIKVISION_MAX_RESULTADOS,
            'searchResultPosition': posicion,
        })

    def obtener_usuarios(self):
        """
        Recorre todos los lotes de usuarios del dispositivo.

        Se detiene con un lote vacío o incompleto.

        Returns:
            Lista de UserInfo crudos, cada uno con la clave 'dispositivo'
        """
        usuarios = []
        posicion = 0

        for _ in range(config.HIKVISION_MAX_LOTES):
            lista = self.consultar_lote_usuarios(posicion)
            if not lista:
                break

            for usuario in lista:
                usuario['dispositivo'] = self.ip
            usuarios.extend(lista)

            if len(lista) < config.HIKVISION_MAX_RESULTADOS:
                break

            posicion += len(lista)
            time_module.sleep(config.HIKVISION_PAUSA_LOTES)

        logger.info(f"{self.ip}: {len(usuarios)} usuarios")
        return usuarios

    def descargar_foto(self, employee_no):
        """
        Descarga la foto de rostro de un empleado.

        Returns:
            (bytes, content_type) o None si el usuario no tiene foto
        """
        usuario = self.buscar_usuario(employee_no)
        if not usuario or not (usuario.get('faceURL') or '').strip():
            return None

        face_url = usuario['faceURL'].strip()
        if not face_url.startswith('http'):
            face_url = f"{self.base_url}/{face_url.lstrip('/')}"

        try:
            respuesta = self.session.get(face_url, timeout=self.timeout, verify=self.verify)
        except requests.RequestException as e:
            raise HikvisionError(f"{self.ip}: {e}") from e

        if not respuesta.ok:
            raise HikvisionError(f"{self.ip}: HTTP {respuesta.status_code} descargando foto")

        return respuesta.content, respuesta.headers.get('Content-Type', 'image/jpeg')


def dispositivos_configurados():
    """IPs de los dispositivos definidos en settings (omite las vacías)."""
    return [ip for ip in settings.HIKVISION['DISPOSITIVOS'] if ip]
