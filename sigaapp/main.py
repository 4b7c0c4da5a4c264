# sigaapp/main.py
"""
SIGA - Cliente de inventario y ventas
Punto de entrada: arma los servicios y view models y los libera al salir
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx
from dotenv import load_dotenv
from sqlalchemy.orm import sessionmaker

from sigaapp.core.config import Settings, settings as default_settings
from sigaapp.core.database import create_session_factory
from sigaapp.services.api_client import ApiClient
from sigaapp.services.auth_service import AuthService
from sigaapp.services.chat_service import ChatService
from sigaapp.services.indicator_service import IndicatorService
from sigaapp.services.saas_service import SaaSService
from sigaapp.services.session_service import SessionService
from sigaapp.viewmodels.auth import AuthViewModel
from sigaapp.viewmodels.dashboard import GlobalViewModel
from sigaapp.viewmodels.inventory import InventoryViewModel
from sigaapp.viewmodels.preferences import PreferencesViewModel
from sigaapp.viewmodels.sales import SalesViewModel

load_dotenv()

logger = logging.getLogger("sigaapp")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@dataclass
class AppContainer:
    settings: Settings
    session: SessionService
    api: ApiClient
    indicators: IndicatorService
    auth: AuthService
    saas: SaaSService
    chat: ChatService
    auth_view_model: AuthViewModel
    preferences_view_model: PreferencesViewModel

    def global_view_model(self, auto_load: bool = True) -> GlobalViewModel:
        return GlobalViewModel(
            self.saas,
            auto_load=auto_load,
            utm_fallback_enabled=self.settings.UTM_FALLBACK_ENABLED,
            utm_fallback_value=self.settings.UTM_FALLBACK_VALUE,
        )

    def inventory_view_model(
        self,
        global_view_model: Optional[GlobalViewModel] = None,
        auto_load: bool = True
    ) -> InventoryViewModel:
        view_model = InventoryViewModel(self.saas, auto_load=auto_load)
        if global_view_model is not None:
            view_model.follow_selection(global_view_model.selected_local)
        return view_model

    def sales_view_model(self, auto_load: bool = True) -> SalesViewModel:
        return SalesViewModel(self.saas, auto_load=auto_load)


@asynccontextmanager
async def lifespan(
    app_settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    api_transport: Optional[httpx.AsyncBaseTransport] = None,
    indicators_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[AppContainer]:
    """Startup y shutdown del cliente"""
    app_settings = app_settings or default_settings
    configure_logging(app_settings.LOG_LEVEL)

    # ===== STARTUP =====
    if session_factory is None:
        session_factory = create_session_factory(app_settings.DATABASE_URL)

    session = SessionService(session_factory)
    api = ApiClient(app_settings.API_BASE_URL, app_settings.REQUEST_TIMEOUT, transport=api_transport)
    indicators = IndicatorService(
        app_settings.INDICATORS_BASE_URL, app_settings.INDICATORS_TIMEOUT, transport=indicators_transport
    )
    auth = AuthService(api, session)
    saas = SaaSService(api, session, indicators)

    container = AppContainer(
        settings=app_settings,
        session=session,
        api=api,
        indicators=indicators,
        auth=auth,
        saas=saas,
        chat=ChatService(api, session),
        auth_view_model=AuthViewModel(auth, session),
        preferences_view_model=PreferencesViewModel(session),
    )
    logger.info(f"[Main] {app_settings.PROJECT_NAME} {app_settings.VERSION} -> {app_settings.API_BASE_URL}")

    try:
        yield container
    finally:
        # ===== SHUTDOWN =====
        container.auth_view_model.close()
        container.preferences_view_model.close()
        await api.aclose()
        await indicators.aclose()
        logger.info("[Main] Cliente detenido")
