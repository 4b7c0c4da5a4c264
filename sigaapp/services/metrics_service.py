"""
Cálculos de negocio para el dashboard.

Funciones puras: reciben las listas ya descargadas y devuelven el estado
que muestra la pantalla. No hacen I/O.
"""
import logging
from typing import Iterable, List

from sigaapp.schemas.dashboard import InventoryMetricsState, SalesMetricsState
from sigaapp.schemas.sale import Sale
from sigaapp.schemas.stock import StockItem

logger = logging.getLogger(__name__)


def calcular_margen(costo: float, precio: float) -> float:
    """
    Margen de ganancia en porcentaje (0-100) sobre el precio de venta.
    Devuelve 0 si costo o precio no son positivos.
    """
    if costo <= 0 or precio <= 0:
        return 0.0
    ganancia = precio - costo
    return (ganancia / precio) * 100


def es_quiebre_stock(cantidad: int, minimo: int) -> bool:
    """Quiebre de stock: la cantidad llegó al mínimo o menos"""
    return cantidad <= minimo


def sales_metrics_for_day(ventas: Iterable[Sale], today: str) -> SalesMetricsState:
    """
    Totales de las ventas de `today` (YYYY-MM-DD).
    Compara por prefijo del texto de fecha, sin normalizar zona horaria.
    """
    ventas_hoy = [v for v in ventas if v.fecha.startswith(today)]

    total = sum(v.total for v in ventas_hoy)
    count = len(ventas_hoy)
    ticket_promedio = total // count if count > 0 else 0

    return SalesMetricsState(
        total_sales_today=total,
        transaction_count=count,
        average_ticket=ticket_promedio,
        is_loading=False,
    )


def product_display_key(item: StockItem) -> str:
    if item.producto is not None and item.producto.nombre is not None:
        return item.producto.nombre
    return f"ID:{item.producto_id}"


def inventory_metrics(stock: List[StockItem]) -> InventoryMetricsState:
    """
    Productos distintos (por nombre, o "ID:<id>" si no viene el producto),
    unidades totales y cantidad de items en quiebre.
    """
    distinct_keys = {product_display_key(item) for item in stock}
    logger.debug(f"[Metrics] Productos distintos detectados: {len(distinct_keys)}")

    return InventoryMetricsState(
        total_items=len(distinct_keys),
        total_units=sum(item.cantidad for item in stock),
        low_stock_count=sum(1 for item in stock if es_quiebre_stock(item.cantidad, item.min_stock)),
        is_loading=False,
    )
