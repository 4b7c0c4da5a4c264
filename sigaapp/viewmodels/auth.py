import logging
from typing import Optional

from sigaapp.core.observable import StateFlow
from sigaapp.core.security import UserRole, normalize_role
from sigaapp.services.auth_service import AuthService
from sigaapp.services.session_service import SessionService
from sigaapp.viewmodels.base import ViewModel

logger = logging.getLogger(__name__)

EMPTY_CREDENTIALS_MESSAGE = "Ingresa usuario y contraseña"
NO_SAVED_CREDENTIALS_MESSAGE = "No hay credenciales guardadas"
LOGIN_ERROR_MESSAGE = "Error al iniciar sesión"


class AuthViewModel(ViewModel):

    def __init__(self, auth: AuthService, session: SessionService):
        super().__init__()
        self.auth = auth
        self.session = session

        self.is_loading: StateFlow[bool] = StateFlow(False)
        self.error: StateFlow[Optional[str]] = StateFlow(None)
        self.login_success: StateFlow[bool] = StateFlow(False)
        self.user_role: StateFlow[Optional[UserRole]] = StateFlow(None)

    async def login(self, email: str, password: str, remember_credentials: bool = True) -> None:
        if not email.strip() or not password.strip():
            self._emit(self.error, EMPTY_CREDENTIALS_MESSAGE)
            return

        self._emit(self.is_loading, True)
        self._emit(self.error, None)
        try:
            await self.auth.login(email, password)
        except Exception as e:
            self._emit(self.error, self._error_message(e) or LOGIN_ERROR_MESSAGE)
        else:
            if remember_credentials:
                # Credenciales para el login biométrico
                self.session.save_credentials(email, password)
            self._emit(self.user_role, normalize_role(self.auth.get_user_role()))
            self._emit(self.login_success, True)
        finally:
            self._emit(self.is_loading, False)

    async def login_with_saved_credentials(self) -> None:
        """Login rápido tras el prompt biométrico, con las credenciales guardadas"""
        credentials = self.session.get_saved_credentials()
        if credentials is None:
            self._emit(self.error, NO_SAVED_CREDENTIALS_MESSAGE)
            return
        email, password = credentials
        await self.login(email, password, remember_credentials=False)

    def clear_error(self) -> None:
        self._emit(self.error, None)

    def logout(self) -> None:
        self.auth.logout()
        self._emit(self.login_success, False)
        self._emit(self.user_role, None)
        self._emit(self.error, None)
