# sigaapp/services/api_client.py
"""
Cliente HTTP del backend SaaS SIGA

Un método por endpoint. Todas las respuestas se decodifican a los
schemas de `sigaapp.schemas`; cualquier fallo se traduce a SigaError:
  - sin conexión / timeout / cuerpo ilegible -> TransportError
  - HTTP no-2xx -> ApiError con el `message` del backend
"""
import json
import httpx
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel

from sigaapp.core.config import settings
from sigaapp.core.exceptions import (
    ApiError,
    TransportError,
    CONNECTION_ERROR_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
)
from sigaapp.schemas.auth import LoginRequest, LoginResponse, PermissionResponse
from sigaapp.schemas.category import CategoryRequest, CategoriesResponse, CategoryResponse
from sigaapp.schemas.chat import ChatRequest, ChatResponse
from sigaapp.schemas.product import ProductRequest, ProductResponse, ProductosListResponse
from sigaapp.schemas.sale import VentasListResponse
from sigaapp.schemas.stock import StockListResponse, StockUpdateRequest
from sigaapp.schemas.store import LocalesResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_error_message(body: str) -> str:
    """Extrae `message` del cuerpo de error; sin JSON válido es un error de conexión"""
    try:
        data = json.loads(body)
    except (ValueError, TypeError):
        return CONNECTION_ERROR_MESSAGE
    if not isinstance(data, dict):
        return CONNECTION_ERROR_MESSAGE
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    return UNKNOWN_ERROR_MESSAGE


class ApiClient:
    """Pasarela hacia /api/auth y /api/saas del backend"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        response_model: Optional[Type[M]] = None,
        token: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        headers = {}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"[Api] Timeout en {method} {path}")
            raise TransportError()
        except httpx.RequestError as e:
            logger.error(f"[Api] Error de conexión en {method} {path}: {str(e)}")
            raise TransportError()

        logger.debug(f"[Api] {method} {path} -> {response.status_code}")

        if not response.is_success:
            message = parse_error_message(response.text)
            logger.warning(f"[Api] {method} {path} rechazado ({response.status_code}): {message}")
            raise ApiError(message, status_code=response.status_code)

        if response_model is None:
            return True

        try:
            return response_model.model_validate(response.json())
        except ValueError as e:
            body_preview = response.text[:500] if response.text else "(vacío)"
            logger.error(f"[Api] Respuesta inválida de {path}: {str(e)} | {body_preview}")
            raise TransportError()

    # ============================================
    # AUTH
    # ============================================

    async def login(self, email: str, password: str) -> LoginResponse:
        payload = LoginRequest(email=email, password=password).model_dump()
        return await self._request("POST", "/api/auth/login", LoginResponse, payload=payload)

    async def get_permisos(self, user_id: int, token: str) -> List[str]:
        """Permisos del usuario; si el backend falla se asume lista vacía"""
        try:
            data = await self._request(
                "GET", f"/api/saas/usuarios/{user_id}/permisos", PermissionResponse, token=token
            )
        except (ApiError, TransportError) as e:
            logger.warning(f"[Api] No se pudieron obtener permisos de usuario {user_id}: {e.message}")
            return []
        return data.permisos

    async def chat(self, message: str, token: str) -> ChatResponse:
        payload = ChatRequest(message=message).model_dump()
        return await self._request("POST", "/api/saas/chat", ChatResponse, token=token, payload=payload)

    # ============================================
    # PRODUCTOS
    # ============================================

    async def get_products(self, token: str) -> ProductosListResponse:
        return await self._request("GET", "/api/saas/productos", ProductosListResponse, token=token)

    async def create_product(self, product: ProductRequest, token: str) -> ProductResponse:
        return await self._request(
            "POST", "/api/saas/productos", ProductResponse,
            token=token, payload=product.model_dump(by_alias=True)
        )

    async def update_product(self, product_id: int, product: ProductRequest, token: str) -> ProductResponse:
        return await self._request(
            "PUT", f"/api/saas/productos/{product_id}", ProductResponse,
            token=token, payload=product.model_dump(by_alias=True)
        )

    async def delete_product(self, product_id: int, token: str) -> bool:
        return await self._request("DELETE", f"/api/saas/productos/{product_id}", token=token)

    # ============================================
    # STOCK Y VENTAS
    # ============================================

    async def get_stock(self, token: str) -> StockListResponse:
        return await self._request("GET", "/api/saas/stock", StockListResponse, token=token)

    async def post_stock(self, request: StockUpdateRequest, token: str) -> bool:
        return await self._request(
            "POST", "/api/saas/stock", token=token, payload=request.model_dump(by_alias=True)
        )

    async def get_ventas(self, token: str) -> VentasListResponse:
        return await self._request("GET", "/api/saas/ventas", VentasListResponse, token=token)

    # ============================================
    # LOCALES Y CATEGORÍAS
    # ============================================

    async def get_locales(self, token: str) -> LocalesResponse:
        return await self._request("GET", "/api/saas/locales", LocalesResponse, token=token)

    async def get_categories(self, token: str) -> CategoriesResponse:
        return await self._request("GET", "/api/saas/categorias", CategoriesResponse, token=token)

    async def create_category(self, category: CategoryRequest, token: str) -> CategoryResponse:
        return await self._request(
            "POST", "/api/saas/categorias", CategoryResponse,
            token=token, payload=category.model_dump()
        )

    async def delete_category(self, category_id: int, token: str) -> bool:
        return await self._request("DELETE", f"/api/saas/categorias/{category_id}", token=token)
