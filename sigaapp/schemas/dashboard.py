# sigaapp/schemas/dashboard.py
from pydantic import BaseModel, ConfigDict
from typing import Optional


class IndicatorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: Optional[float] = None
    unit: str = ""
    date: str = ""
    is_loading: bool = False
    error: Optional[str] = None


class SalesMetricsState(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_sales_today: int = 0
    transaction_count: int = 0
    average_ticket: int = 0
    is_loading: bool = True
    error: Optional[str] = None


class InventoryMetricsState(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_items: int = 0
    total_units: int = 0
    low_stock_count: int = 0
    is_loading: bool = True
