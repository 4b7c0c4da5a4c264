# sigaapp/schemas/store.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Local(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    nombre: str
    direccion: Optional[str] = None
    ciudad: Optional[str] = None


class LocalesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    locales: List[Local] = []
