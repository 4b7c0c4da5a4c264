# sigaapp/schemas/auth.py
from pydantic import BaseModel, ConfigDict, Field
from typing import FrozenSet, List, Optional

from sigaapp.core.security import UserRole, can_create_product, can_delete_product, normalize_role
from sigaapp.schemas.store import Local


class LoginRequest(BaseModel):
    email: str
    password: str


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    email: str
    rol: str
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    nombre_empresa: Optional[str] = Field(None, alias="nombreEmpresa")
    local_por_defecto: Optional[Local] = Field(None, alias="localPorDefecto")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool
    access_token: Optional[str] = Field(None, alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    user: Optional[User] = None
    message: Optional[str] = None


class PermissionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    permisos: List[str] = []


class AuthSession(BaseModel):
    """Foto de la sesión guardada localmente"""
    model_config = ConfigDict(frozen=True)

    access_token: str
    user_id: int
    role: str
    nombre: Optional[str] = None
    nombre_empresa: Optional[str] = None
    default_local_id: Optional[int] = None
    permissions: FrozenSet[str] = frozenset()

    @property
    def user_role(self) -> UserRole:
        return normalize_role(self.role)

    @property
    def can_create_product(self) -> bool:
        return can_create_product(self.role, self.permissions)

    @property
    def can_delete_product(self) -> bool:
        return can_delete_product(self.role, self.permissions)
