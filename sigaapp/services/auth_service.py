import logging
from typing import Optional, Set

from sigaapp.core.exceptions import SigaError, UNKNOWN_ERROR_MESSAGE
from sigaapp.services.api_client import ApiClient
from sigaapp.services.session_service import SessionService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, api: ApiClient, session: SessionService):
        self.api = api
        self.session = session

    async def login(self, email: str, password: str) -> bool:
        """
        Login contra el backend.

        Flujo:
        1. POST /api/auth/login
        2. Guardar sesión completa (token, usuario, rol, empresa, local por defecto)
        3. Pedir los permisos del usuario con el token nuevo y guardarlos

        Lanza SigaError con el mensaje del servidor o "Error de conexión".
        """
        response = await self.api.login(email, password)

        if not (response.success and response.access_token and response.user):
            message = response.message or UNKNOWN_ERROR_MESSAGE
            logger.warning(f"[Auth] Login rechazado para {email}: {message}")
            raise SigaError(message)

        user = response.user
        self.session.save_auth_session(
            token=response.access_token,
            user_id=user.id,
            role=user.rol,
            nombre=user.nombre,
            nombre_empresa=user.nombre_empresa,
            default_local_id=user.local_por_defecto.id if user.local_por_defecto else None,
        )

        permissions = await self.api.get_permisos(user.id, response.access_token)
        self.session.save_permissions(permissions)

        logger.info(f"[Auth] Login OK usuario={user.id} rol={user.rol} permisos={len(permissions)}")
        return True

    def logout(self) -> None:
        # Preservar settings y biometría
        self.session.clear_auth_only()

    def get_user_role(self) -> Optional[str]:
        return self.session.get_user_role()

    def get_permissions(self) -> Set[str]:
        return self.session.get_permissions()
