# sigaapp/schemas/sale.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Sale(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    fecha: str  # ISO date
    total: int
    items: int  # Cantidad de items
    local_id: int
    local_nombre: Optional[str] = None


class VentasListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    ventas: List[Sale] = []
