# SIGA Tests - Inventory
#
# Tests for:
# - Product/stock reconciliation (enrich, orphans, phantom entries)
# - Local filter that always keeps phantom entries
# - Fallback local used for phantom entries
# - Load error precedence and serialized reloads
# - Mutations: optimistic delete, reload after create, error messages

import asyncio

import pytest

from sigaapp.core.exceptions import SigaError
from sigaapp.core.observable import StateFlow
from sigaapp.viewmodels.inventory import (
    DELETE_SUCCESS_MESSAGE,
    LOAD_ERROR_MESSAGE,
    UNKNOWN_LOCAL_ID,
    InventoryViewModel,
    filter_by_local,
    reconcile_stock,
)

from tests.conftest import FakeRepository, make_local, make_product, make_stock, run


def sample_repository(**kwargs) -> FakeRepository:
    products = [make_product(1, "Pan"), make_product(2, "Leche"), make_product(7, "Café")]
    stock = [
        make_stock(10, 1, 1, cantidad=30),
        make_stock(11, 1, 2, cantidad=4),
        make_stock(12, 99, 1, cantidad=8),  # producto 99 ya no existe
    ]
    return FakeRepository(products=products, stock=stock, **kwargs)


class TestReconciliation:

    @pytest.mark.smoke
    @pytest.mark.inventory
    def test_enriches_drops_orphans_and_adds_phantoms(self):
        repo = sample_repository()
        result = reconcile_stock(repo.products, repo.stock, fallback_local_id=1)

        by_id = {item.id: item for item in result}
        assert set(by_id) == {10, 11, -2, -7}
        assert by_id[10].producto.nombre == "Pan"
        assert by_id[11].producto.nombre == "Pan"
        assert all(item.producto_id != 99 for item in result)

    @pytest.mark.inventory
    def test_phantom_entry_shape(self):
        result = reconcile_stock([make_product(7, "Café")], [], fallback_local_id=3)
        assert len(result) == 1
        phantom = result[0]
        assert phantom.id == -7
        assert phantom.producto_id == 7
        assert phantom.local_id == 3
        assert phantom.cantidad == 0
        assert phantom.min_stock == 0
        assert phantom.producto.nombre == "Café"

    @pytest.mark.inventory
    def test_every_product_appears_at_least_once(self):
        repo = sample_repository()
        result = reconcile_stock(repo.products, repo.stock, fallback_local_id=1)
        assert {p.id for p in repo.products} <= {item.producto_id for item in result}

    @pytest.mark.inventory
    def test_reconciliation_is_idempotent(self):
        repo = sample_repository()
        once = reconcile_stock(repo.products, repo.stock, fallback_local_id=1)
        twice = reconcile_stock(repo.products, once, fallback_local_id=1)
        assert twice == once

    def test_empty_inputs(self):
        assert reconcile_stock([], [], fallback_local_id=1) == []
        assert reconcile_stock([], [make_stock(1, 5, 1)], fallback_local_id=1) == []


class TestLocalFilter:

    def test_no_local_returns_everything(self):
        items = reconcile_stock([make_product(1)], [make_stock(10, 1, 2)], 1)
        assert filter_by_local(None, items) == items

    @pytest.mark.inventory
    def test_phantoms_visible_under_any_local(self):
        repo = sample_repository()
        items = reconcile_stock(repo.products, repo.stock, fallback_local_id=1)

        filtered = filter_by_local(make_local(2), items)
        assert {item.id for item in filtered} == {11, -2, -7}


class TestFallbackLocal:

    def _phantom_local(self, vm: InventoryViewModel) -> int:
        phantoms = [item for item in vm.raw_stock_items if item.is_phantom]
        assert phantoms
        return phantoms[0].local_id

    def test_selected_local_wins(self):
        async def scenario():
            repo = FakeRepository(products=[make_product(1)], locales=[make_local(5)], default_local_id=3)
            vm = InventoryViewModel(repo, auto_load=False)
            vm.select_local(make_local(9))
            await vm.load_data()
            return self._phantom_local(vm)

        assert run(scenario()) == 9

    def test_default_local_when_nothing_selected(self):
        async def scenario():
            repo = FakeRepository(products=[make_product(1)], locales=[make_local(5)], default_local_id=3)
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return self._phantom_local(vm)

        assert run(scenario()) == 3

    def test_first_local_without_default(self):
        async def scenario():
            repo = FakeRepository(products=[make_product(1)], locales=[make_local(5), make_local(6)])
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return self._phantom_local(vm)

        assert run(scenario()) == 5

    def test_unknown_local_when_no_locales(self):
        async def scenario():
            repo = FakeRepository(products=[make_product(1)])
            repo.errors["get_locales"] = SigaError("Error de conexión")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return self._phantom_local(vm), vm.error.value

        local_id, error = run(scenario())
        assert local_id == UNKNOWN_LOCAL_ID
        # Locales es "si se puede": no produce error de inventario
        assert error is None


class TestLoadData:

    @pytest.mark.smoke
    def test_successful_load_publishes_state(self):
        async def scenario():
            repo = sample_repository(locales=[make_local(1), make_local(2)])
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return vm

        vm = run(scenario())
        assert vm.is_loading.value is False
        assert vm.error.value is None
        assert len(vm.raw_products) == 3
        assert len(vm.locales.value) == 2
        assert {item.id for item in vm.stock_items.value} == {10, 11, -2, -7}

    def test_stock_error_takes_precedence(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["get_stock"] = SigaError("Stock no disponible")
            repo.errors["get_products"] = SigaError("Productos no disponibles")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return vm

        vm = run(scenario())
        assert vm.error.value == "Stock no disponible"
        assert vm.is_loading.value is False

    def test_products_error_when_stock_succeeds(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["get_products"] = SigaError("Productos no disponibles")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return vm

        assert run(scenario()).error.value == "Productos no disponibles"

    def test_empty_message_uses_generic_error(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["get_stock"] = SigaError("")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            return vm

        assert run(scenario()).error.value == LOAD_ERROR_MESSAGE

    def test_failed_reload_keeps_previous_items(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            before = vm.raw_stock_items
            repo.errors["get_products"] = SigaError("Error de conexión")
            await vm.load_data()
            return before, vm

        before, vm = run(scenario())
        assert vm.raw_stock_items == before
        assert vm.error.value == "Error de conexión"

    def test_reloads_never_overlap(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await asyncio.gather(vm.load_data(), vm.load_data(), vm.load_data())
            return repo

        repo = run(scenario())
        assert repo.calls["get_stock"] == 3
        assert repo.max_in_flight == 1

    @pytest.mark.inventory
    def test_repeated_reload_yields_same_view(self):
        async def scenario():
            repo = sample_repository(locales=[make_local(1), make_local(2)])
            vm = InventoryViewModel(repo, auto_load=False)
            vm.select_local(make_local(2))
            await vm.load_data()
            first = vm.stock_items.value
            await vm.load_data()
            return first, vm.stock_items.value

        first, second = run(scenario())
        assert second == first
        ids = [item.id for item in second]
        assert len(ids) == len(set(ids))
        assert sorted(i for i in ids if i < 0) == [-7, -2]

    def test_auto_load_runs_in_scope(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo)
            await vm.scope.join()
            return vm

        assert len(run(scenario()).raw_stock_items) == 4

    def test_closed_view_model_ignores_results(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            vm.close()
            await vm.load_data()
            return vm

        vm = run(scenario())
        assert vm.raw_stock_items == []
        assert vm.is_loading.value is False


class TestSelection:

    def test_stock_items_follow_selected_local(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            vm.select_local(make_local(1))
            local_1 = {item.id for item in vm.stock_items.value}
            vm.select_local(make_local(2))
            local_2 = {item.id for item in vm.stock_items.value}
            return local_1, local_2

        local_1, local_2 = run(scenario())
        assert local_1 == {10, -2, -7}
        assert local_2 == {11, -2, -7}

    def test_follow_global_selection_reloads(self):
        async def scenario():
            repo = sample_repository()
            global_local = StateFlow(None)
            vm = InventoryViewModel(repo, auto_load=False)
            vm.follow_selection(global_local)
            global_local.value = make_local(2)
            await vm.scope.join()
            return repo, vm

        repo, vm = run(scenario())
        assert vm.selected_local.value.id == 2
        assert repo.calls["get_products"] == 1
        assert {item.id for item in vm.stock_items.value} == {11, -2, -7}


class TestMutations:

    @pytest.mark.inventory
    def test_delete_is_optimistic(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            await vm.delete_product(1)
            return repo, vm

        repo, vm = run(scenario())
        assert all(item.producto_id != 1 for item in vm.raw_stock_items)
        assert {item.id for item in vm.raw_stock_items} == {-2, -7}
        assert vm.success_message.value == DELETE_SUCCESS_MESSAGE
        # Sin recarga
        assert repo.calls["get_products"] == 1

    def test_delete_removes_phantom_entry(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            await vm.delete_product(7)
            return vm

        assert -7 not in {item.id for item in run(scenario()).raw_stock_items}

    def test_delete_failure_keeps_items(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["delete_product"] = SigaError("Producto con ventas")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.load_data()
            before = vm.raw_stock_items
            await vm.delete_product(1)
            return before, vm

        before, vm = run(scenario())
        assert vm.raw_stock_items == before
        assert vm.error.value == "Error al eliminar: Producto con ventas"
        assert vm.success_message.value is None
        assert vm.is_loading.value is False

    def test_add_product_reloads(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.add_product("Queso", 4500, None)
            return repo, vm

        repo, vm = run(scenario())
        assert repo.calls["get_products"] == 1
        assert "Queso" in {item.producto.nombre for item in vm.raw_stock_items}
        assert vm.is_creating.value is False

    def test_add_product_failure_message(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["create_product"] = SigaError("Nombre duplicado")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.add_product("Pan", 1000, None)
            return repo, vm

        repo, vm = run(scenario())
        assert vm.error.value == "Error al crear producto: Nombre duplicado"
        assert "get_products" not in repo.calls

    def test_update_product_failure_message(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["update_product"] = SigaError("No encontrado")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.update_product(1, "Pan", 1000, None)
            return vm

        assert run(scenario()).error.value == "Error al actualizar: No encontrado"

    def test_update_stock_sends_values_and_reloads(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.update_stock(2, 1, 15, 3)
            return repo, vm

        repo, vm = run(scenario())
        assert repo.stock_updates == [(2, 1, 15, 3)]
        assert repo.calls["get_stock"] == 1
        assert vm.is_loading.value is False

    def test_update_stock_failure_message(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["update_stock"] = SigaError("Local inválido")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.update_stock(2, 1, 15)
            return vm

        vm = run(scenario())
        assert vm.error.value == "Error al actualizar stock: Local inválido"
        assert vm.is_loading.value is False

    def test_create_category_refreshes_list(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.create_category("Lácteos", None)
            return vm

        assert [c.nombre for c in run(scenario()).categories.value] == ["Lácteos"]

    def test_category_failure_messages(self):
        async def scenario():
            repo = sample_repository()
            repo.errors["create_category"] = SigaError("Ya existe")
            repo.errors["delete_category"] = SigaError("Tiene productos")
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.create_category("Lácteos", None)
            created = vm.error.value
            await vm.delete_category(1)
            return created, vm.error.value

        created, deleted = run(scenario())
        assert created == "Error al crear categoría: Ya existe"
        assert deleted == "Error al eliminar categoría: Tiene productos"

    def test_clear_messages(self):
        async def scenario():
            repo = sample_repository()
            vm = InventoryViewModel(repo, auto_load=False)
            await vm.delete_product(1)
            vm.clear_success_message()
            repo.errors["delete_product"] = SigaError("x")
            await vm.delete_product(1)
            vm.clear_error()
            return vm

        vm = run(scenario())
        assert vm.error.value is None
        assert vm.success_message.value is None
