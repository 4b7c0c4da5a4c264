"""
Indicadores económicos públicos (mindicador.cl)
"""
import httpx
import logging
from typing import Optional

from sigaapp.config.indicators import INDICATOR_DEFINITIONS
from sigaapp.core.config import settings
from sigaapp.core.exceptions import ApiError, TransportError
from sigaapp.schemas.indicator import IndicatorResponse

logger = logging.getLogger(__name__)


class IndicatorService:
    """Cliente sin autenticación para la API de indicadores"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.INDICATORS_BASE_URL,
            timeout=timeout if timeout is not None else settings.INDICATORS_TIMEOUT,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, codigo: str) -> IndicatorResponse:
        definition = INDICATOR_DEFINITIONS.get(codigo)
        if definition is None:
            raise ValueError(f"Indicador desconocido: {codigo}")

        try:
            response = await self._client.get(definition["path"])
        except httpx.TimeoutException:
            logger.error(f"[Indicadores] Timeout consultando {codigo}")
            raise TransportError(f"Timeout consultando {definition['name']}")
        except httpx.RequestError as e:
            logger.error(f"[Indicadores] Error de conexión ({codigo}): {str(e)}")
            raise TransportError()

        if not response.is_success:
            logger.warning(f"[Indicadores] {codigo} respondió HTTP {response.status_code}")
            raise ApiError(f"HTTP {response.status_code} consultando {definition['name']}", response.status_code)

        try:
            return IndicatorResponse.model_validate(response.json())
        except ValueError as e:
            logger.error(f"[Indicadores] Respuesta inválida para {codigo}: {str(e)}")
            raise TransportError(f"Respuesta inválida de {definition['name']}")
