# sigaapp/services/session_service.py
"""
Sesión local del usuario

Guarda en la BD local (tabla `preferences`) el token, el usuario, el rol,
los permisos y las preferencias de la app. Cada escritura agrupa sus
claves en una sola transacción.

Versionado: si la versión guardada es menor que DATA_VERSION se borra
todo y se vuelve a empezar (no hay migraciones parciales).
"""
import json
import logging
from typing import Any, Dict, Iterable, Optional, Set, Tuple

from sqlalchemy.orm import sessionmaker

from sigaapp.core.config import settings
from sigaapp.core.database import SessionLocal
from sigaapp.models.preference import Preference
from sigaapp.schemas.auth import AuthSession

logger = logging.getLogger(__name__)

DATA_VERSION = 2

KEY_DATA_VERSION = "data_version"

# Auth
KEY_ACCESS_TOKEN = "access_token"
KEY_USER_ID = "user_id"
KEY_USER_ROLE = "user_role"
KEY_USER_NAME = "user_name"
KEY_PERMISSIONS = "user_permissions"

# Empresa / local
KEY_COMPANY_NAME = "company_name"
KEY_DEFAULT_LOCAL_ID = "default_local_id"

# Configuración
KEY_CARD_SIZE = "card_size"
KEY_NOTIF_PUSH = "notif_push"
KEY_NOTIF_STOCK = "notif_stock"

# Biometría (credenciales para login rápido)
KEY_SAVED_EMAIL = "saved_email"
KEY_SAVED_PASS = "saved_pass"

AUTH_KEYS = (KEY_ACCESS_TOKEN, KEY_USER_ID, KEY_USER_ROLE, KEY_USER_NAME, KEY_PERMISSIONS)


class SessionService:

    def __init__(self, session_factory: Optional[sessionmaker] = None, data_version: int = DATA_VERSION):
        self._session_factory = session_factory or SessionLocal
        self._data_version = data_version
        self._check_and_wipe_old_data()

    # ──────────────────────────────────────────────
    # ALMACÉN CLAVE/VALOR
    # ──────────────────────────────────────────────

    def _get(self, key: str, default: Any = None) -> Any:
        db = self._session_factory()
        try:
            row = db.query(Preference).filter(Preference.key == key).first()
            if row is None or row.value is None:
                return default
            return json.loads(row.value)
        finally:
            db.close()

    def _write(self, values: Optional[Dict[str, Any]] = None, remove: Iterable[str] = ()) -> None:
        """Escribe y borra claves en una sola transacción. Un valor None borra la clave."""
        values = values or {}
        to_remove = set(remove) | {k for k, v in values.items() if v is None}

        db = self._session_factory()
        try:
            if to_remove:
                db.query(Preference).filter(Preference.key.in_(to_remove)).delete(synchronize_session=False)
            for key, value in values.items():
                if value is None:
                    continue
                db.merge(Preference(key=key, value=json.dumps(value)))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _wipe(self) -> None:
        db = self._session_factory()
        try:
            db.query(Preference).delete(synchronize_session=False)
            db.add(Preference(key=KEY_DATA_VERSION, value=json.dumps(self._data_version)))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _check_and_wipe_old_data(self) -> None:
        saved_version = self._get(KEY_DATA_VERSION, 0)
        logger.debug(f"[Session] Versión guardada={saved_version}, actual={self._data_version}")
        if saved_version < self._data_version:
            logger.warning(f"[Session] Datos locales v{saved_version} obsoletos, se borran")
            self._wipe()

    # ──────────────────────────────────────────────
    # SESIÓN
    # ──────────────────────────────────────────────

    def save_auth_session(
        self,
        token: str,
        user_id: int,
        role: str,
        nombre: Optional[str],
        nombre_empresa: Optional[str],
        default_local_id: Optional[int]
    ) -> None:
        self._write({
            KEY_ACCESS_TOKEN: token,
            KEY_USER_ID: user_id,
            KEY_USER_ROLE: role,
            KEY_USER_NAME: nombre,
            KEY_COMPANY_NAME: nombre_empresa,
            KEY_DEFAULT_LOCAL_ID: default_local_id,
        })
        logger.info(f"[Session] Sesión guardada para usuario {user_id} ({role})")

    def get_access_token(self) -> Optional[str]:
        return self._get(KEY_ACCESS_TOKEN)

    def get_user_id(self) -> int:
        return self._get(KEY_USER_ID, -1)

    def get_user_role(self) -> Optional[str]:
        return self._get(KEY_USER_ROLE)

    def get_user_name(self) -> Optional[str]:
        return self._get(KEY_USER_NAME)

    def get_company_name(self) -> Optional[str]:
        return self._get(KEY_COMPANY_NAME)

    def save_permissions(self, permissions: Iterable[str]) -> None:
        self._write({KEY_PERMISSIONS: sorted(set(permissions))})

    def get_permissions(self) -> Set[str]:
        return set(self._get(KEY_PERMISSIONS, []))

    def save_default_local_id(self, local_id: Optional[int]) -> None:
        self._write({KEY_DEFAULT_LOCAL_ID: local_id})

    def get_default_local_id(self) -> Optional[int]:
        return self._get(KEY_DEFAULT_LOCAL_ID)

    def is_logged_in(self) -> bool:
        token = self.get_access_token()
        role = self.get_user_role()
        # Validación estricta: token no vacío, userId válido y rol no vacío
        return bool(token) and self.get_user_id() > 0 and bool(role and role.strip())

    def get_session(self) -> Optional[AuthSession]:
        if not self.is_logged_in():
            return None
        return AuthSession(
            access_token=self.get_access_token(),
            user_id=self.get_user_id(),
            role=self.get_user_role(),
            nombre=self.get_user_name(),
            nombre_empresa=self.get_company_name(),
            default_local_id=self.get_default_local_id(),
            permissions=frozenset(self.get_permissions()),
        )

    def clear_auth_only(self) -> None:
        """Logout que preserva configuraciones, local por defecto y credenciales biométricas"""
        self._write(remove=AUTH_KEYS)
        logger.info("[Session] Sesión cerrada")

    def clear_session(self) -> None:
        """Borra todo el almacén local"""
        self._wipe()

    # ──────────────────────────────────────────────
    # CONFIGURACIÓN
    # ──────────────────────────────────────────────

    def save_card_size(self, size: str) -> None:
        self._write({KEY_CARD_SIZE: size})

    def get_card_size(self) -> str:
        return self._get(KEY_CARD_SIZE, settings.DEFAULT_CARD_SIZE)

    def get_notification_settings(self) -> Tuple[bool, bool]:
        """(push, alerta de stock bajo); ambas activas por defecto"""
        return self._get(KEY_NOTIF_PUSH, True), self._get(KEY_NOTIF_STOCK, True)

    def save_notification_settings(self, push: bool, stock: bool) -> None:
        self._write({KEY_NOTIF_PUSH: push, KEY_NOTIF_STOCK: stock})

    # ──────────────────────────────────────────────
    # BIOMETRÍA
    # ──────────────────────────────────────────────

    def save_credentials(self, email: str, password: str) -> None:
        self._write({KEY_SAVED_EMAIL: email, KEY_SAVED_PASS: password})

    def get_saved_credentials(self) -> Optional[Tuple[str, str]]:
        email = self._get(KEY_SAVED_EMAIL)
        password = self._get(KEY_SAVED_PASS)
        if email is not None and password is not None:
            return email, password
        return None

    def clear_credentials(self) -> None:
        self._write(remove=(KEY_SAVED_EMAIL, KEY_SAVED_PASS))

    def is_biometric_enabled(self) -> bool:
        credentials = self.get_saved_credentials()
        if credentials is None:
            return False
        email, password = credentials
        return bool(email.strip()) and bool(password.strip())
