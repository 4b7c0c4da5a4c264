# SIGA Test Suite - Shared Configuration and Fixtures
#
# This module provides:
# - Local session store on in-memory SQLite (fresh per test)
# - Fake SaaS repository for view model tests
# - httpx.MockTransport backend for service tests
# - Data builders for products, stock, locales and sales

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from sigaapp.core.database import create_session_factory
from sigaapp.schemas.category import Category
from sigaapp.schemas.indicator import IndicatorResponse, IndicatorValue
from sigaapp.schemas.product import Product
from sigaapp.schemas.sale import Sale
from sigaapp.schemas.stock import StockItem
from sigaapp.schemas.store import Local
from sigaapp.services.api_client import ApiClient
from sigaapp.services.indicator_service import IndicatorService
from sigaapp.services.session_service import SessionService

API_BASE_URL = "http://siga.test"
INDICATORS_BASE_URL = "http://indicadores.test/api"


# =============================================================================
# DATA BUILDERS
# =============================================================================

def make_product(product_id: int, nombre: Optional[str] = None, precio_unitario: Optional[str] = "1000") -> Product:
    return Product(id=product_id, nombre=nombre or f"Producto {product_id}", precio_unitario=precio_unitario)


def make_stock(
    stock_id: int,
    producto_id: int,
    local_id: int,
    cantidad: int = 10,
    min_stock: int = 2,
    producto: Optional[Product] = None
) -> StockItem:
    return StockItem(
        id=stock_id,
        producto_id=producto_id,
        local_id=local_id,
        cantidad=cantidad,
        min_stock=min_stock,
        producto=producto,
    )


def make_local(local_id: int, nombre: Optional[str] = None) -> Local:
    return Local(id=local_id, nombre=nombre or f"Local {local_id}")


def make_sale(sale_id: int, fecha: str, total: int, local_id: int = 1) -> Sale:
    return Sale(id=sale_id, fecha=fecha, total=total, items=1, local_id=local_id)


def make_indicator(codigo: str, valor: Optional[float], unidad: str = "Pesos", fecha: str = "2026-10-19T03:00:00.000Z"):
    serie = [IndicatorValue(fecha=fecha, valor=valor)] if valor is not None else []
    return IndicatorResponse(codigo=codigo, unidad_medida=unidad, serie=serie)


def run(coro):
    """Ejecuta una corrutina de test en un event loop nuevo"""
    return asyncio.run(coro)


# =============================================================================
# FAKE REPOSITORY
# =============================================================================

class FakeRepository:
    """
    Reemplazo en memoria de SaaSService.

    `errors` mapea nombre de método -> excepción a lanzar. `calls` cuenta
    las llamadas por método. `max_in_flight` registra cuántas lecturas de
    stock llegaron a estar en curso al mismo tiempo.
    """

    def __init__(
        self,
        products: Optional[List[Product]] = None,
        stock: Optional[List[StockItem]] = None,
        locales: Optional[List[Local]] = None,
        categories: Optional[List[Category]] = None,
        ventas: Optional[List[Sale]] = None,
        default_local_id: Optional[int] = None,
    ):
        self.products = list(products or [])
        self.stock = list(stock or [])
        self.locales = list(locales or [])
        self.categories = list(categories or [])
        self.ventas = list(ventas or [])
        self.default_local_id = default_local_id
        self.indicators: Dict[str, IndicatorResponse] = {}
        self.errors: Dict[str, BaseException] = {}
        self.calls: Dict[str, int] = {}
        self.stock_updates: List[Tuple[int, int, int, int]] = []
        self._in_flight = 0
        self.max_in_flight = 0

    async def _call(self, name: str, result: Any) -> Any:
        self.calls[name] = self.calls.get(name, 0) + 1
        await asyncio.sleep(0)
        if name in self.errors:
            raise self.errors[name]
        return result

    async def get_products(self) -> List[Product]:
        return await self._call("get_products", list(self.products))

    async def get_stock(self) -> List[StockItem]:
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(0)
            return await self._call("get_stock", list(self.stock))
        finally:
            self._in_flight -= 1

    async def get_locales(self) -> List[Local]:
        return await self._call("get_locales", list(self.locales))

    async def get_categories(self) -> List[Category]:
        return await self._call("get_categories", list(self.categories))

    async def get_ventas(self) -> List[Sale]:
        return await self._call("get_ventas", list(self.ventas))

    async def create_product(self, nombre: str, precio: int, descripcion: Optional[str]) -> Product:
        product = make_product(100 + len(self.products), nombre, str(precio))
        await self._call("create_product", product)
        self.products.append(product)
        return product

    async def update_product(self, product_id: int, nombre: str, precio: int, descripcion: Optional[str]) -> Product:
        return await self._call("update_product", make_product(product_id, nombre, str(precio)))

    async def delete_product(self, product_id: int) -> bool:
        return await self._call("delete_product", True)

    async def update_stock(self, producto_id: int, local_id: int, cantidad: int, cantidad_minima: int = 0) -> bool:
        result = await self._call("update_stock", True)
        self.stock_updates.append((producto_id, local_id, cantidad, cantidad_minima))
        return result

    async def create_category(self, nombre: str, descripcion: Optional[str]) -> Category:
        category = Category(id=len(self.categories) + 1, nombre=nombre, descripcion=descripcion)
        await self._call("create_category", category)
        self.categories.append(category)
        return category

    async def delete_category(self, category_id: int) -> bool:
        return await self._call("delete_category", True)

    def save_default_local_id(self, local_id: int) -> None:
        self.default_local_id = local_id

    def get_default_local_id(self) -> Optional[int]:
        return self.default_local_id

    async def fetch_dollar_indicator(self) -> IndicatorResponse:
        return await self._call("fetch_dollar_indicator", self.indicators.get("dolar") or IndicatorResponse(codigo="dolar"))

    async def fetch_uf_indicator(self) -> IndicatorResponse:
        return await self._call("fetch_uf_indicator", self.indicators.get("uf") or IndicatorResponse(codigo="uf"))

    async def fetch_utm_indicator(self) -> IndicatorResponse:
        return await self._call("fetch_utm_indicator", self.indicators.get("utm") or IndicatorResponse(codigo="utm"))


# =============================================================================
# MOCK BACKEND
# =============================================================================

@dataclass
class MockBackend:
    """
    Backend falso para httpx.MockTransport.

    `routes` mapea (método, path) -> (status, cuerpo) o a una función
    que recibe el request y devuelve un httpx.Response.
    """
    routes: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    requests: List[httpx.Request] = field(default_factory=list)

    def add(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"Ruta no encontrada: {request.url.path}"})
        if callable(route):
            return route(request)
        status, body = route
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last(self, method: str, path: str) -> httpx.Request:
        matching = [r for r in self.requests if r.method == method and r.url.path == path]
        assert matching, f"No hubo request {method} {path}"
        return matching[-1]


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content.decode())


def raising_transport(exc_factory: Callable[[httpx.Request], Exception]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)
    return httpx.MockTransport(handler)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def session_factory():
    return create_session_factory("sqlite://")


@pytest.fixture
def session(session_factory) -> SessionService:
    return SessionService(session_factory)


@pytest.fixture
def logged_session(session: SessionService) -> SessionService:
    session.save_auth_session(
        token="T",
        user_id=5,
        role="ADMINISTRADOR",
        nombre="Ana",
        nombre_empresa="Almacén Ana",
        default_local_id=None,
    )
    return session


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def api_factory(backend: MockBackend) -> Callable[[], ApiClient]:
    """ApiClient ligado al backend falso; se crea dentro del event loop del test"""
    return lambda: ApiClient(API_BASE_URL, 5.0, transport=backend.transport())


@pytest.fixture
def indicators_factory(backend: MockBackend) -> Callable[[], IndicatorService]:
    return lambda: IndicatorService(INDICATORS_BASE_URL, 5.0, transport=backend.transport())
