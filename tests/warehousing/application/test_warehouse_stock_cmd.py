"""Application tests for direct ledger maintenance and holds."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from warehousing.errors import InsufficientStockError
from warehousing.warehouse.stock import ReleaseWarehouseStock, ReserveWarehouseStock, UpdateWarehouseStock


@pytest.fixture()
def wh_id(make_warehouse, make_product):
    make_product("prod-P")
    return make_warehouse()


def _update(wh_id, quantity, operation, product_id="prod-P"):
    return current_domain.process(
        UpdateWarehouseStock(warehouse_id=wh_id, product_id=product_id, quantity=quantity, operation=operation),
        asynchronous=False,
    )


class TestUpdateWarehouseStock:
    def test_add_creates_entry(self, wh_id, ledger):
        assert _update(wh_id, 5, "add") == 5
        assert ledger(wh_id, "prod-P") == (5, 0)

    def test_add_then_subtract(self, wh_id, ledger):
        _update(wh_id, 8, "add")
        assert _update(wh_id, 3, "subtract") == 5
        assert ledger(wh_id, "prod-P") == (5, 0)

    def test_set_replaces_quantity(self, wh_id, ledger):
        _update(wh_id, 8, "add")
        _update(wh_id, 2, "set")
        assert ledger(wh_id, "prod-P") == (2, 0)

    def test_subtract_beyond_available_changes_nothing(self, wh_id, ledger):
        _update(wh_id, 3, "add")
        with pytest.raises(InsufficientStockError):
            _update(wh_id, 4, "subtract")
        assert ledger(wh_id, "prod-P") == (3, 0)

    def test_subtract_from_missing_entry(self, wh_id, ledger):
        with pytest.raises(InsufficientStockError):
            _update(wh_id, 1, "subtract")
        assert ledger(wh_id, "prod-P") is None

    def test_unknown_product(self, wh_id):
        with pytest.raises(ObjectNotFoundError):
            _update(wh_id, 1, "add", product_id="prod-unknown")

    def test_unknown_warehouse(self, make_product):
        make_product("prod-P")
        with pytest.raises(ObjectNotFoundError):
            _update("missing", 1, "add")

    def test_unknown_operation(self, wh_id):
        with pytest.raises(ValidationError):
            _update(wh_id, 1, "double")


class TestHolds:
    def test_reserve_and_release(self, wh_id, ledger, set_stock):
        set_stock(wh_id, "prod-P", 10)
        current_domain.process(
            ReserveWarehouseStock(warehouse_id=wh_id, product_id="prod-P", quantity=4, reference="ord-1"),
            asynchronous=False,
        )
        assert ledger(wh_id, "prod-P") == (10, 4)

        current_domain.process(
            ReleaseWarehouseStock(warehouse_id=wh_id, product_id="prod-P", quantity=3),
            asynchronous=False,
        )
        assert ledger(wh_id, "prod-P") == (10, 1)

    def test_reserve_beyond_available(self, wh_id, ledger, set_stock):
        set_stock(wh_id, "prod-P", 10, reserved=8)
        with pytest.raises(InsufficientStockError):
            current_domain.process(
                ReserveWarehouseStock(warehouse_id=wh_id, product_id="prod-P", quantity=3),
                asynchronous=False,
            )
        assert ledger(wh_id, "prod-P") == (10, 8)

    def test_set_below_reserved_is_refused(self, wh_id, ledger, set_stock):
        set_stock(wh_id, "prod-P", 10, reserved=6)
        with pytest.raises(ValidationError):
            _update(wh_id, 5, "set")
        assert ledger(wh_id, "prod-P") == (10, 6)
