"""
Estado global compartido entre pantallas: local seleccionado,
indicadores económicos y métricas del negocio.
"""
import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, List, Optional

from sigaapp.config.indicators import INDICATOR_DEFINITIONS
from sigaapp.core.config import settings
from sigaapp.core.observable import StateFlow
from sigaapp.schemas.dashboard import IndicatorState, InventoryMetricsState, SalesMetricsState
from sigaapp.schemas.indicator import IndicatorResponse, IndicatorValue
from sigaapp.schemas.store import Local
from sigaapp.services.metrics_service import inventory_metrics, sales_metrics_for_day
from sigaapp.services.saas_service import SaaSService
from sigaapp.viewmodels.base import ViewModel

logger = logging.getLogger(__name__)

SALES_ERROR_MESSAGE = "Error al cargar ventas"


def today_iso() -> str:
    return date.today().isoformat()


class GlobalViewModel(ViewModel):

    def __init__(
        self,
        repository: SaaSService,
        auto_load: bool = True,
        today: Callable[[], str] = today_iso,
        utm_fallback_enabled: Optional[bool] = None,
        utm_fallback_value: Optional[float] = None,
    ):
        super().__init__()
        self.repository = repository
        self._today = today
        self._utm_fallback_enabled = (
            settings.UTM_FALLBACK_ENABLED if utm_fallback_enabled is None else utm_fallback_enabled
        )
        self._utm_fallback_value = (
            settings.UTM_FALLBACK_VALUE if utm_fallback_value is None else utm_fallback_value
        )

        self.locales: StateFlow[List[Local]] = StateFlow([])
        self.selected_local: StateFlow[Optional[Local]] = StateFlow(None)
        self.is_loading: StateFlow[bool] = StateFlow(False)

        self.dollar_indicator: StateFlow[IndicatorState] = StateFlow(IndicatorState(is_loading=True))
        self.uf_indicator: StateFlow[IndicatorState] = StateFlow(IndicatorState(is_loading=True))
        self.utm_indicator: StateFlow[IndicatorState] = StateFlow(IndicatorState(is_loading=True))

        self.sales_metrics: StateFlow[SalesMetricsState] = StateFlow(SalesMetricsState())
        self.inventory_metrics: StateFlow[InventoryMetricsState] = StateFlow(InventoryMetricsState())

        if auto_load:
            self.scope.launch(self.load_locales())
            self.refresh_all_data()

    # ──────────────────────────────────────────────
    # LOCALES
    # ──────────────────────────────────────────────

    async def load_locales(self) -> None:
        self._emit(self.is_loading, True)
        try:
            locales = await self.repository.get_locales()
        except Exception as e:
            logger.warning(f"[Global] No se pudieron cargar locales: {self._error_message(e)}")
        else:
            self._emit(self.locales, locales)
            self._auto_select(locales)
        finally:
            self._emit(self.is_loading, False)

    def _auto_select(self, locales: List[Local]) -> None:
        default_id = self.repository.get_default_local_id()
        if default_id is not None:
            match = next((local for local in locales if local.id == default_id), None)
            if match is not None:
                self.select_local(match)
                return

        # Si hay un solo local, se selecciona solo
        if len(locales) == 1:
            self.select_local(locales[0])

    def select_local(self, local: Optional[Local]) -> None:
        if self.scope.closed:
            return
        self._emit(self.selected_local, local)
        if local is not None:
            self.repository.save_default_local_id(local.id)
            logger.info(f"[Global] Local seleccionado: {local.id} ({local.nombre})")
        self.refresh_all_data()

    # ──────────────────────────────────────────────
    # REFRESCO
    # ──────────────────────────────────────────────

    def refresh_all_data(self) -> None:
        self.scope.launch(self.refresh_economic_indicators())
        self.scope.launch(self.refresh_business_metrics())

    async def refresh_all(self) -> None:
        """Igual que refresh_all_data pero esperando a que termine"""
        await asyncio.gather(self.refresh_economic_indicators(), self.refresh_business_metrics())

    async def refresh_economic_indicators(self) -> None:
        # Los tres en paralelo; uno que falla no cancela a los otros
        await asyncio.gather(
            self._fetch_indicator(self.dollar_indicator, self.repository.fetch_dollar_indicator),
            self._fetch_indicator(self.uf_indicator, self.repository.fetch_uf_indicator),
            self._fetch_indicator(self.utm_indicator, self._fetch_utm),
            return_exceptions=True,
        )

    async def refresh_dollar_indicator(self) -> None:
        await self._fetch_indicator(self.dollar_indicator, self.repository.fetch_dollar_indicator)

    async def _fetch_utm(self) -> IndicatorResponse:
        response = await self.repository.fetch_utm_indicator()
        definition = INDICATOR_DEFINITIONS["utm"]
        if response.serie or not (definition["fallback"] and self._utm_fallback_enabled):
            return response

        logger.warning("[Global] UTM llegó sin datos, se usa valor aproximado")
        return IndicatorResponse(
            codigo="utm",
            unidad_medida=definition["fallback_unit"],
            serie=[IndicatorValue(fecha=self._today(), valor=self._utm_fallback_value)],
        )

    async def _fetch_indicator(
        self,
        flow: StateFlow[IndicatorState],
        fetcher: Callable[[], Awaitable[IndicatorResponse]]
    ) -> None:
        self._emit(flow, flow.value.model_copy(update={"is_loading": True, "error": None}))
        try:
            response = await fetcher()
        except Exception as e:
            self._emit(flow, IndicatorState(is_loading=False, error=self._error_message(e)))
            return

        # La serie viene del más reciente al más antiguo
        last_value = response.serie[0] if response.serie else None
        self._emit(flow, IndicatorState(
            value=last_value.valor if last_value else None,
            unit=response.unidad_medida or "",
            date=last_value.fecha if last_value else "",
            is_loading=False,
        ))

    async def refresh_business_metrics(self) -> None:
        await asyncio.gather(self._refresh_sales_metrics(), self._refresh_inventory_metrics())

    async def _refresh_sales_metrics(self) -> None:
        try:
            ventas = await self.repository.get_ventas()
        except Exception as e:
            logger.warning(f"[Global] Ventas no disponibles: {self._error_message(e)}")
            self._emit(self.sales_metrics, SalesMetricsState(is_loading=False, error=SALES_ERROR_MESSAGE))
            return
        self._emit(self.sales_metrics, sales_metrics_for_day(ventas, self._today()))

    async def _refresh_inventory_metrics(self) -> None:
        try:
            stock = await self.repository.get_stock()
        except Exception as e:
            # Se mantiene el último valor conocido
            logger.error(f"[Global] Error obteniendo stock: {self._error_message(e)}")
            return
        self._emit(self.inventory_metrics, inventory_metrics(stock))
