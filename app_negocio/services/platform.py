# ==============================================================================
# SERVICIOS DE PLATAFORMA - Avisos al usuario y compartir archivos
# ==============================================================================
# Las pantallas no conocen la interfaz concreta: avisan y piden confirmación
# a través de un Notifier, y entregan los archivos generados a un
# ShareService. La capa web (main.py) los traduce a flash() y descargas.
# ==============================================================================

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional


@dataclass
class Alert:
    """Aviso mostrado al usuario."""
    title: str
    message: str
    level: str = 'info'


class Notifier:
    """
    Avisos y confirmaciones.

    Guarda los avisos emitidos en orden; `confirm()` devuelve la respuesta
    que la interfaz ya obtuvo del usuario (por defecto, cancelar).
    """

    def __init__(self, confirmed: bool = False):
        self.alerts: List[Alert] = []
        self.confirmations: List[Alert] = []
        self._confirmed = confirmed

    def alert(self, title: str, message: str, level: str = 'info') -> None:
        self.alerts.append(Alert(title, message, level))

    def error(self, title: str, message: str) -> None:
        self.alert(title, message, 'danger')

    def success(self, title: str, message: str) -> None:
        self.alert(title, message, 'success')

    def confirm(self, title: str, message: str) -> bool:
        """Confirmación destructiva. Queda registrada aunque se cancele."""
        self.confirmations.append(Alert(title, message, 'warning'))
        return self._confirmed


@dataclass
class SharedFile:
    """Archivo entregado al usuario."""
    path: str
    mimetype: str
    filename: str


class ShareService:
    """
    Hoja de compartir: recibe los archivos generados por las exportaciones.

    Solo recuerda los últimos `history` archivos.
    """

    def __init__(self, history: int = 20):
        self.shared: Deque[SharedFile] = deque(maxlen=history)

    def share(self, path: str, mimetype: str, filename: str) -> SharedFile:
        shared = SharedFile(path=path, mimetype=mimetype, filename=filename)
        self.shared.append(shared)
        return shared

    @property
    def last(self) -> Optional[SharedFile]:
        return self.shared[-1] if self.shared else None
