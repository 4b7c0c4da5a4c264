# sigaapp/schemas/stock.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from sigaapp.schemas.product import Product


class StockItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    producto_id: int
    local_id: int
    cantidad: int
    min_stock: int
    producto: Optional[Product] = None  # Si viene anidado

    @property
    def is_phantom(self) -> bool:
        """Entrada sintética para un producto sin registro de stock"""
        return self.id < 0

    def is_low_stock(self) -> bool:
        return self.cantidad <= self.min_stock


class StockListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    stock: List[StockItem] = []


class StockUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    producto_id: int = Field(..., alias="productoId")
    local_id: int = Field(..., alias="localId")
    cantidad: int
    cantidad_minima: int = Field(0, alias="cantidadMinima")
