"""
Inventario: cruce de productos con stock y filtro por local.

Productos y stock llegan por endpoints separados. Al recargar:
  1. Locales y categorías se piden "si se puede" (un fallo no corta nada)
  2. Productos y stock se piden en paralelo y se esperan ambos
  3. Cada item de stock se enriquece con su producto; si el producto ya
     no existe el item se descarta (stock huérfano)
  4. Los productos sin ningún registro de stock reciben una entrada
     fantasma (id negativo, cantidad 0) para que sigan apareciendo

La vista filtrada por local siempre incluye las entradas fantasma.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from sigaapp.core.observable import StateFlow, combine
from sigaapp.schemas.category import Category
from sigaapp.schemas.product import Product
from sigaapp.schemas.stock import StockItem
from sigaapp.schemas.store import Local
from sigaapp.services.saas_service import SaaSService
from sigaapp.viewmodels.base import ViewModel

logger = logging.getLogger(__name__)

UNKNOWN_LOCAL_ID = -1
LOAD_ERROR_MESSAGE = "Error al cargar inventario"
DELETE_SUCCESS_MESSAGE = "Producto eliminado correctamente"


def reconcile_stock(
    products: Sequence[Product],
    stock: Sequence[StockItem],
    fallback_local_id: int
) -> List[StockItem]:
    """Une productos y stock: enriquece, descarta huérfanos y agrega fantasmas"""
    products_by_id = {product.id: product for product in products}

    enriched: List[StockItem] = []
    for item in stock:
        producto = products_by_id.get(item.producto_id)
        if producto is None:
            logger.debug(f"[Inventory] Stock huérfano {item.id} (producto {item.producto_id}) descartado")
            continue
        enriched.append(item.model_copy(update={"producto": producto}))

    stock_product_ids = {item.producto_id for item in stock}
    for product in products_by_id.values():
        if product.id in stock_product_ids:
            continue
        enriched.append(StockItem(
            id=-product.id,  # Placeholder para no chocar con ids reales
            producto_id=product.id,
            local_id=fallback_local_id,
            cantidad=0,
            min_stock=0,
            producto=product,
        ))

    return enriched


def filter_by_local(local: Optional[Local], items: List[StockItem]) -> List[StockItem]:
    if local is None:
        return items
    return [item for item in items if item.local_id == local.id or item.id < 0]


class InventoryViewModel(ViewModel):

    def __init__(self, repository: SaaSService, auto_load: bool = True):
        super().__init__()
        self.repository = repository

        self._raw_products: StateFlow[List[Product]] = StateFlow([])
        self._raw_stock_items: StateFlow[List[StockItem]] = StateFlow([])

        self.locales: StateFlow[List[Local]] = StateFlow([])
        self.selected_local: StateFlow[Optional[Local]] = StateFlow(None)

        # Lo que ve la pantalla: stock filtrado por el local seleccionado
        self.stock_items = combine(self.selected_local, self._raw_stock_items, filter_by_local)

        self.is_loading: StateFlow[bool] = StateFlow(False)
        self.error: StateFlow[Optional[str]] = StateFlow(None)
        self.is_creating: StateFlow[bool] = StateFlow(False)
        self.categories: StateFlow[List[Category]] = StateFlow([])
        self.success_message: StateFlow[Optional[str]] = StateFlow(None)

        self._reload_lock = asyncio.Lock()
        self._unfollow: Optional[Callable[[], None]] = None

        if auto_load:
            self.scope.launch(self.load_data())

    @property
    def raw_stock_items(self) -> List[StockItem]:
        return self._raw_stock_items.value

    @property
    def raw_products(self) -> List[Product]:
        return self._raw_products.value

    # ──────────────────────────────────────────────
    # CARGA
    # ──────────────────────────────────────────────

    async def _load_locales(self) -> None:
        try:
            self._emit(self.locales, await self.repository.get_locales())
        except Exception as e:
            logger.warning(f"[Inventory] No se pudieron cargar locales: {self._error_message(e)}")

    async def _load_categories(self) -> None:
        try:
            self._emit(self.categories, await self.repository.get_categories())
        except Exception as e:
            logger.warning(f"[Inventory] No se pudieron cargar categorías: {self._error_message(e)}")

    def _fallback_local_id(self) -> int:
        selected = self.selected_local.value
        if selected is not None:
            return selected.id
        default_id = self.repository.get_default_local_id()
        if default_id is not None:
            return default_id
        if self.locales.value:
            return self.locales.value[0].id
        return UNKNOWN_LOCAL_ID

    async def load_data(self) -> None:
        # Una recarga a la vez por instancia; la siguiente espera y ve datos frescos
        async with self._reload_lock:
            self._emit(self.is_loading, True)
            self._emit(self.error, None)

            _, _, products_result, stock_result = await asyncio.gather(
                self._load_locales(),
                self._load_categories(),
                self.repository.get_products(),
                self.repository.get_stock(),
                return_exceptions=True,
            )

            products_failed = isinstance(products_result, BaseException)
            stock_failed = isinstance(stock_result, BaseException)

            if not products_failed and not stock_failed:
                logger.info(f"[Inventory] Productos: {len(products_result)}, stock: {len(stock_result)}")
                reconciled = reconcile_stock(products_result, stock_result, self._fallback_local_id())
                self._emit(self._raw_products, products_result)
                self._emit(self._raw_stock_items, reconciled)
            else:
                if stock_failed:
                    message = self._error_message(stock_result)
                elif products_failed:
                    message = self._error_message(products_result)
                else:
                    message = LOAD_ERROR_MESSAGE
                logger.warning(f"[Inventory] Error cargando inventario: {message}")
                self._emit(self.error, message or LOAD_ERROR_MESSAGE)

            self._emit(self.is_loading, False)

    async def load_inventory(self) -> None:
        await self.load_data()

    def refresh(self) -> None:
        self.scope.launch(self.load_data())

    # ──────────────────────────────────────────────
    # LOCAL SELECCIONADO
    # ──────────────────────────────────────────────

    def select_local(self, local: Optional[Local]) -> None:
        self._emit(self.selected_local, local)

    def follow_selection(self, selected_local: StateFlow[Optional[Local]]) -> None:
        """Sigue la selección global de local: cada cambio filtra y recarga"""
        if self._unfollow is not None:
            self._unfollow()
        self.select_local(selected_local.value)

        def on_change(local: Optional[Local]) -> None:
            self.select_local(local)
            self.scope.launch(self.load_data())

        self._unfollow = selected_local.subscribe(on_change, emit_current=False)

    # ──────────────────────────────────────────────
    # MUTACIONES
    # ──────────────────────────────────────────────

    async def add_product(self, nombre: str, precio: int, descripcion: Optional[str]) -> None:
        self._emit(self.is_creating, True)
        try:
            await self.repository.create_product(nombre, precio, descripcion)
        except Exception as e:
            self._emit(self.error, f"Error al crear producto: {self._error_message(e)}")
        else:
            # Recargar para ver el nuevo producto (aunque sea con stock 0)
            await self.load_inventory()
        finally:
            self._emit(self.is_creating, False)

    async def update_product(self, product_id: int, nombre: str, precio: int, descripcion: Optional[str]) -> None:
        self._emit(self.is_creating, True)
        try:
            await self.repository.update_product(product_id, nombre, precio, descripcion)
        except Exception as e:
            self._emit(self.error, f"Error al actualizar: {self._error_message(e)}")
        else:
            await self.load_inventory()
        finally:
            self._emit(self.is_creating, False)

    async def update_stock(self, producto_id: int, local_id: int, cantidad: int, cantidad_minima: int = 0) -> None:
        self._emit(self.is_loading, True)
        try:
            await self.repository.update_stock(producto_id, local_id, cantidad, cantidad_minima)
        except Exception as e:
            self._emit(self.error, f"Error al actualizar stock: {self._error_message(e)}")
            self._emit(self.is_loading, False)
        else:
            await self.load_inventory()

    async def delete_product(self, product_id: int) -> None:
        self._emit(self.is_loading, True)
        try:
            await self.repository.delete_product(product_id)
        except Exception as e:
            self._emit(self.error, f"Error al eliminar: {self._error_message(e)}")
        else:
            # Sin recargar: se quita del cache local, fantasmas incluidos
            remaining = [item for item in self._raw_stock_items.value if item.producto_id != product_id]
            self._emit(self._raw_stock_items, remaining)
            self._emit(self.success_message, DELETE_SUCCESS_MESSAGE)
        finally:
            self._emit(self.is_loading, False)

    async def _refresh_categories(self) -> None:
        try:
            self._emit(self.categories, await self.repository.get_categories())
        except Exception as e:
            logger.warning(f"[Inventory] No se pudieron refrescar categorías: {self._error_message(e)}")

    async def create_category(self, nombre: str, descripcion: Optional[str]) -> None:
        self._emit(self.is_creating, True)
        try:
            await self.repository.create_category(nombre, descripcion)
        except Exception as e:
            self._emit(self.error, f"Error al crear categoría: {self._error_message(e)}")
        else:
            await self._refresh_categories()
        finally:
            self._emit(self.is_creating, False)

    async def delete_category(self, category_id: int) -> None:
        self._emit(self.is_loading, True)
        try:
            await self.repository.delete_category(category_id)
        except Exception as e:
            self._emit(self.error, f"Error al eliminar categoría: {self._error_message(e)}")
        else:
            await self._refresh_categories()
        finally:
            self._emit(self.is_loading, False)

    def clear_error(self) -> None:
        self._emit(self.error, None)

    def clear_success_message(self) -> None:
        self._emit(self.success_message, None)

    def close(self) -> None:
        if self._unfollow is not None:
            self._unfollow()
            self._unfollow = None
        self.stock_items.detach()
        super().close()
