"""
Errores del cliente SIGA.

Los servicios lanzan estas excepciones; los view models las capturan y
las convierten en el mensaje que ve el usuario.
"""
from typing import Optional

NO_SESSION_MESSAGE = "No hay sesión activa"
CONNECTION_ERROR_MESSAGE = "Error de conexión"
UNKNOWN_ERROR_MESSAGE = "Error desconocido"


class SigaError(Exception):
    """Base de todos los errores esperables del cliente"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class SessionError(SigaError):
    """No hay token guardado; no se reintenta"""

    def __init__(self, message: str = NO_SESSION_MESSAGE):
        super().__init__(message)


class TransportError(SigaError):
    """Fallo de red, timeout o respuesta imposible de decodificar"""

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE):
        super().__init__(message)


class ApiError(SigaError):
    """Respuesta no-2xx del backend, con el mensaje que envió el servidor"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
