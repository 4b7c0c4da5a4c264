"""
Roles y permisos del usuario.

El backend manda el rol como texto libre ("Administrador", "admin",
"CAJERO_1"...). En el cliente se normaliza a uno de tres roles.
"""
from enum import Enum
from typing import Iterable, Optional

PERMISO_PRODUCTOS_CREATE = "PRODUCTOS_CREATE"
PERMISO_PRODUCTOS_ELIMINAR = "PRODUCTOS_ELIMINAR"


class UserRole(str, Enum):
    ADMINISTRADOR = "ADMINISTRADOR"
    OPERADOR = "OPERADOR"
    CAJERO = "CAJERO"


def normalize_role(raw_role: Optional[str]) -> UserRole:
    """Normaliza el rol sin distinguir mayúsculas; sin rol reconocible es OPERADOR"""
    role = (raw_role or UserRole.OPERADOR.value).upper()
    if "ADMIN" in role:
        return UserRole.ADMINISTRADOR
    if "CAJERO" in role:
        return UserRole.CAJERO
    return UserRole.OPERADOR


def _is_manager(role: Optional[str]) -> bool:
    # Si la lista de permisos viene vacía del backend, ADMIN y OPERADOR igual pueden gestionar
    return role is not None and normalize_role(role) in (UserRole.ADMINISTRADOR, UserRole.OPERADOR)


def can_create_product(role: Optional[str], permissions: Iterable[str]) -> bool:
    return _is_manager(role) or PERMISO_PRODUCTOS_CREATE in set(permissions)


def can_delete_product(role: Optional[str], permissions: Iterable[str]) -> bool:
    return _is_manager(role) or PERMISO_PRODUCTOS_ELIMINAR in set(permissions)
