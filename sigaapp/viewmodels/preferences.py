"""
Ajustes de la app: tamaño de tarjetas, biometría y notificaciones
"""
import logging
from enum import Enum
from typing import Tuple

from sigaapp.core.observable import StateFlow
from sigaapp.services.session_service import SessionService
from sigaapp.viewmodels.base import ViewModel

logger = logging.getLogger(__name__)


class CardSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class PreferencesViewModel(ViewModel):

    def __init__(self, session: SessionService):
        super().__init__()
        self.session = session

        self.card_size: StateFlow[CardSize] = StateFlow(CardSize.MEDIUM)
        self.biometric_enabled: StateFlow[bool] = StateFlow(False)

        self._load_settings()

    def _load_settings(self) -> None:
        saved_size = self.session.get_card_size()
        try:
            self._emit(self.card_size, CardSize(saved_size))
        except ValueError:
            logger.warning(f"[Preferences] Tamaño de tarjeta desconocido: {saved_size}")
            self._emit(self.card_size, CardSize.MEDIUM)
        self._emit(self.biometric_enabled, self.session.is_biometric_enabled())

    def toggle_biometric(self, enable: bool) -> None:
        if not enable:
            self.session.clear_credentials()
            self._emit(self.biometric_enabled, False)
            return
        # Activar requiere credenciales guardadas de un login manual previo
        self._emit(self.biometric_enabled, self.session.is_biometric_enabled())

    def set_card_size(self, size: CardSize) -> None:
        self._emit(self.card_size, size)
        self.session.save_card_size(size.value)

    def get_notification_settings(self) -> Tuple[bool, bool]:
        return self.session.get_notification_settings()

    def save_notification_settings(self, push: bool, stock: bool) -> None:
        self.session.save_notification_settings(push, stock)
