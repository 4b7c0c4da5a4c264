"""
Repositorio de datos del SaaS: productos, stock, ventas, locales,
categorías e indicadores.

Cada método lee el token de la sesión (SessionError si no hay), llama
al ApiClient y desenvuelve la lista o entidad del sobre de respuesta.
Aquí no se cruza ni se filtra nada; eso es trabajo de los view models.
"""
import logging
from typing import List, Optional

from sigaapp.core.exceptions import SessionError
from sigaapp.schemas.category import Category, CategoryRequest
from sigaapp.schemas.indicator import IndicatorResponse
from sigaapp.schemas.product import Product, ProductRequest
from sigaapp.schemas.sale import Sale
from sigaapp.schemas.stock import StockItem, StockUpdateRequest
from sigaapp.schemas.store import Local
from sigaapp.services.api_client import ApiClient
from sigaapp.services.indicator_service import IndicatorService
from sigaapp.services.session_service import SessionService

logger = logging.getLogger(__name__)


class SaaSService:

    def __init__(self, api: ApiClient, session: SessionService, indicators: IndicatorService):
        self.api = api
        self.session = session
        self.indicators = indicators

    def _token(self) -> str:
        token = self.session.get_access_token()
        if not token:
            raise SessionError()
        return token

    # ──────────────────────────────────────────────
    # PRODUCTOS
    # ──────────────────────────────────────────────

    async def get_products(self) -> List[Product]:
        return (await self.api.get_products(self._token())).productos

    async def create_product(self, nombre: str, precio: int, descripcion: Optional[str]) -> Product:
        token = self._token()
        request = ProductRequest(nombre=nombre, precio_unitario=str(precio), descripcion=descripcion)
        return (await self.api.create_product(request, token)).producto

    async def update_product(self, product_id: int, nombre: str, precio: int, descripcion: Optional[str]) -> Product:
        token = self._token()
        request = ProductRequest(nombre=nombre, precio_unitario=str(precio), descripcion=descripcion)
        return (await self.api.update_product(product_id, request, token)).producto

    async def delete_product(self, product_id: int) -> bool:
        return await self.api.delete_product(product_id, self._token())

    # ──────────────────────────────────────────────
    # STOCK Y VENTAS
    # ──────────────────────────────────────────────

    async def get_stock(self) -> List[StockItem]:
        return (await self.api.get_stock(self._token())).stock

    async def update_stock(self, producto_id: int, local_id: int, cantidad: int, cantidad_minima: int = 0) -> bool:
        token = self._token()
        request = StockUpdateRequest(
            producto_id=producto_id,
            local_id=local_id,
            cantidad=cantidad,
            cantidad_minima=cantidad_minima,
        )
        return await self.api.post_stock(request, token)

    async def get_ventas(self) -> List[Sale]:
        return (await self.api.get_ventas(self._token())).ventas

    # ──────────────────────────────────────────────
    # LOCALES Y CATEGORÍAS
    # ──────────────────────────────────────────────

    async def get_locales(self) -> List[Local]:
        return (await self.api.get_locales(self._token())).locales

    async def get_categories(self) -> List[Category]:
        return (await self.api.get_categories(self._token())).categorias

    async def create_category(self, nombre: str, descripcion: Optional[str]) -> Category:
        token = self._token()
        request = CategoryRequest(nombre=nombre, descripcion=descripcion)
        return (await self.api.create_category(request, token)).categoria

    async def delete_category(self, category_id: int) -> bool:
        return await self.api.delete_category(category_id, self._token())

    def save_default_local_id(self, local_id: int) -> None:
        self.session.save_default_local_id(local_id)

    def get_default_local_id(self) -> Optional[int]:
        return self.session.get_default_local_id()

    # ──────────────────────────────────────────────
    # INDICADORES (públicos, sin token)
    # ──────────────────────────────────────────────

    async def fetch_dollar_indicator(self) -> IndicatorResponse:
        return await self.indicators.fetch("dolar")

    async def fetch_uf_indicator(self) -> IndicatorResponse:
        return await self.indicators.fetch("uf")

    async def fetch_utm_indicator(self) -> IndicatorResponse:
        return await self.indicators.fetch("utm")
