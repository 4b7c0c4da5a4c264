from typing import List, Optional

from sigaapp.core.observable import StateFlow
from sigaapp.schemas.sale import Sale
from sigaapp.services.saas_service import SaaSService
from sigaapp.viewmodels.base import ViewModel


class SalesViewModel(ViewModel):
    """Listado de ventas"""

    def __init__(self, repository: SaaSService, auto_load: bool = True):
        super().__init__()
        self.repository = repository

        self.sales: StateFlow[List[Sale]] = StateFlow([])
        self.is_loading: StateFlow[bool] = StateFlow(False)
        self.error: StateFlow[Optional[str]] = StateFlow(None)

        if auto_load:
            self.scope.launch(self.load_sales())

    async def load_sales(self) -> None:
        self._emit(self.is_loading, True)
        self._emit(self.error, None)
        try:
            self._emit(self.sales, await self.repository.get_ventas())
        except Exception as e:
            self._emit(self.error, self._error_message(e) or "Error al cargar ventas")
        finally:
            self._emit(self.is_loading, False)
