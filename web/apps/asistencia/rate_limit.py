"""
Limitador de solicitudes en memoria
Una solicitud por (ip, empleado) cada LIMITE_ESPERA_SEG segundos
"""

import time
from threading import Lock

from . import config


class LimitadorSolicitudes:
    """
    Mapa (ip, clave) -> última solicitud aceptada.

    Vive en el proceso: no se comparte entre workers y se pierde al reiniciar.
    Las entradas más viejas que `retencion` se descartan al consultar.
    """

    def __init__(self, espera=config.LIMITE_ESPERA_SEG,
                 retencion=config.LIMITE_RETENCION_SEG, reloj=time.monotonic):
        self.espera = espera
        self.retencion = retencion
        self.reloj = reloj
        self._ultimas = {}
        self._lock = Lock()

    def _limpiar(self, ahora):
        vencidas = [k for k, t in self._ultimas.items() if ahora - t > self.retencion]
        for clave in vencidas:
            del self._ultimas[clave]

    def permitir(self, ip, clave):
        """
        Registra la solicitud si está permitida.

        Returns:
            True si se acepta, False si llegó antes de que termine la espera
        """
        ahora = self.reloj()
        with self._lock:
            self._limpiar(ahora)
            llave = (ip, clave)
            ultima = self._ultimas.get(llave)
            if ultima is not None and ahora - ultima < self.espera:
                return False
            self._ultimas[llave] = ahora
            return True

    def __len__(self):
        with self._lock:
            return len(self._ultimas)


# Instancia del proceso usada por la API de empleados
limitador_eliminacion = LimitadorSolicitudes()
