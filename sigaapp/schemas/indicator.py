# sigaapp/schemas/indicator.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class IndicatorValue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fecha: str
    valor: float


class IndicatorResponse(BaseModel):
    """Respuesta de mindicador.cl; la serie viene del más reciente al más antiguo"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: Optional[str] = None
    autor: Optional[str] = None
    codigo: Optional[str] = None
    nombre: Optional[str] = None
    unidad_medida: Optional[str] = None
    serie: List[IndicatorValue] = Field(default_factory=list)
