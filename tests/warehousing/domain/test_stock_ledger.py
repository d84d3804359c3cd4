"""Tests for ledger operations on the Warehouse aggregate."""

import pytest
from protean.exceptions import ValidationError
from warehousing.errors import InsufficientStockError
from warehousing.warehouse.events import (
    WarehouseStockReleased,
    WarehouseStockReserved,
    WarehouseStockUpdated,
)
from warehousing.warehouse.warehouse import LedgerEntry, LedgerOperation, Warehouse


@pytest.fixture()
def warehouse():
    return Warehouse.create(name="Main Warehouse", code="MAIN")


def _stock(warehouse, product_id, quantity, reserved=0):
    warehouse.apply_delta(product_id, quantity, LedgerOperation.ADD)
    if reserved:
        warehouse.reserve(product_id, reserved)


class TestAvailableStock:
    def test_quantity_minus_reserved(self, warehouse):
        _stock(warehouse, "prod-P", 10, reserved=2)
        assert warehouse.available_stock("prod-P") == 8

    def test_missing_entry_has_nothing_available(self, warehouse):
        assert warehouse.available_stock("prod-unknown") == 0

    def test_repeated_reads_are_stable(self, warehouse):
        _stock(warehouse, "prod-P", 10, reserved=2)
        assert {warehouse.available_stock("prod-P") for _ in range(3)} == {8}


class TestAddOperation:
    def test_add_opens_entry(self, warehouse):
        previous, new = warehouse.apply_delta("prod-1", 5, "add")
        entry = warehouse.entry_for("prod-1")
        assert (previous, new) == (0, 5)
        assert entry.quantity == 5
        assert entry.reserved == 0

    def test_add_increments_existing_entry(self, warehouse):
        _stock(warehouse, "prod-1", 5)
        warehouse.apply_delta("prod-1", 7, "add")
        assert warehouse.quantity_of("prod-1") == 12
        assert len(warehouse.entries) == 1

    def test_negative_amount_is_rejected(self, warehouse):
        with pytest.raises(ValidationError):
            warehouse.apply_delta("prod-1", -1, "add")

    def test_unknown_operation_is_rejected(self, warehouse):
        with pytest.raises(ValidationError):
            warehouse.apply_delta("prod-1", 1, "multiply")


class TestSubtractOperation:
    def test_subtract_within_available(self, warehouse):
        _stock(warehouse, "prod-1", 10, reserved=2)
        warehouse.apply_delta("prod-1", 8, "subtract")
        entry = warehouse.entry_for("prod-1")
        assert entry.quantity == 2
        assert entry.reserved == 2
        assert entry.available == 0

    def test_subtract_cannot_dip_into_reserved(self, warehouse):
        _stock(warehouse, "prod-1", 10, reserved=2)
        with pytest.raises(InsufficientStockError):
            warehouse.apply_delta("prod-1", 9, "subtract")
        assert warehouse.quantity_of("prod-1") == 10

    def test_subtract_from_missing_entry_is_insufficient(self, warehouse):
        with pytest.raises(InsufficientStockError):
            warehouse.apply_delta("prod-missing", 1, "subtract")
        assert warehouse.entry_for("prod-missing") is None

    def test_subtracting_nothing_from_missing_entry_is_insufficient(self, warehouse):
        with pytest.raises(InsufficientStockError):
            warehouse.apply_delta("prod-missing", 0, "subtract")
        assert warehouse.entry_for("prod-missing") is None

    def test_subtracting_nothing_from_existing_entry_is_a_no_op(self, warehouse):
        _stock(warehouse, "prod-1", 3)
        assert warehouse.apply_delta("prod-1", 0, "subtract") == (3, 3)

    def test_insufficient_stock_is_a_validation_error(self, warehouse):
        with pytest.raises(ValidationError):
            warehouse.apply_delta("prod-missing", 1, "subtract")

    def test_zero_quantity_entry_persists(self, warehouse):
        _stock(warehouse, "prod-1", 3)
        warehouse.apply_delta("prod-1", 3, "subtract")
        assert warehouse.entry_for("prod-1") is not None
        assert warehouse.quantity_of("prod-1") == 0


class TestSetOperation:
    def test_set_replaces_quantity(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        previous, new = warehouse.apply_delta("prod-1", 4, "set")
        assert (previous, new) == (10, 4)

    def test_set_opens_missing_entry(self, warehouse):
        warehouse.apply_delta("prod-1", 6, "set")
        assert warehouse.quantity_of("prod-1") == 6

    def test_set_negative_is_rejected(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        with pytest.raises(ValidationError):
            warehouse.apply_delta("prod-1", -3, "set")

    def test_set_below_reserved_is_rejected(self, warehouse):
        _stock(warehouse, "prod-1", 10, reserved=4)
        with pytest.raises(ValidationError):
            warehouse.apply_delta("prod-1", 3, "set")
        assert warehouse.quantity_of("prod-1") == 10


class TestUpdateStock:
    def test_update_stock_raises_event(self, warehouse):
        warehouse.update_stock("prod-1", 5, "add", updated_by="admin-1")
        events = [e for e in warehouse._events if isinstance(e, WarehouseStockUpdated)]
        assert len(events) == 1
        assert events[0].operation == "add"
        assert events[0].previous_quantity == 0
        assert events[0].new_quantity == 5
        assert events[0].updated_by == "admin-1"

    def test_update_stock_returns_new_quantity(self, warehouse):
        assert warehouse.update_stock("prod-1", 9, LedgerOperation.SET) == 9


class TestBatchDebit:
    def test_debit_is_all_or_nothing(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        _stock(warehouse, "prod-2", 1)
        with pytest.raises(InsufficientStockError) as exc:
            warehouse.debit([("prod-1", 4), ("prod-2", 2)])
        assert warehouse.quantity_of("prod-1") == 10
        assert warehouse.quantity_of("prod-2") == 1
        assert "prod-2" in exc.value.messages["quantity"][0]

    def test_repeated_products_are_checked_on_their_sum(self, warehouse):
        _stock(warehouse, "prod-1", 5)
        with pytest.raises(InsufficientStockError):
            warehouse.check_availability([("prod-1", 3), ("prod-1", 3)])

    def test_debit_and_credit(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        warehouse.debit([("prod-1", 4)])
        warehouse.credit([("prod-1", 4), ("prod-2", 2)])
        assert warehouse.quantity_of("prod-1") == 10
        assert warehouse.quantity_of("prod-2") == 2


class TestSetQuantity:
    def test_missing_entry_with_zero_stays_missing(self, warehouse):
        assert warehouse.set_quantity("prod-1", 0) == 0
        assert warehouse.entry_for("prod-1") is None

    def test_missing_entry_with_positive_quantity_is_opened(self, warehouse):
        warehouse.set_quantity("prod-1", 3)
        entry = warehouse.entry_for("prod-1")
        assert entry.quantity == 3
        assert entry.reserved == 0

    def test_returns_previous_quantity(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        assert warehouse.set_quantity("prod-1", 7) == 10


class TestHolds:
    def test_reserve_reduces_available(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        warehouse.reserve("prod-1", 3, reference="ord-1")
        assert warehouse.available_stock("prod-1") == 7
        event = next(e for e in warehouse._events if isinstance(e, WarehouseStockReserved))
        assert event.new_reserved == 3
        assert event.reference == "ord-1"

    def test_reserve_beyond_available_is_refused(self, warehouse):
        _stock(warehouse, "prod-1", 2)
        with pytest.raises(InsufficientStockError):
            warehouse.reserve("prod-1", 3)

    def test_reserve_without_entry_is_refused(self, warehouse):
        with pytest.raises(InsufficientStockError):
            warehouse.reserve("prod-1", 1)

    def test_release(self, warehouse):
        _stock(warehouse, "prod-1", 10, reserved=4)
        warehouse.release("prod-1", 3)
        assert warehouse.entry_for("prod-1").reserved == 1
        assert any(isinstance(e, WarehouseStockReleased) for e in warehouse._events)

    def test_release_more_than_reserved_is_refused(self, warehouse):
        _stock(warehouse, "prod-1", 10, reserved=1)
        with pytest.raises(ValidationError):
            warehouse.release("prod-1", 2)

    def test_zero_quantity_hold_is_refused(self, warehouse):
        _stock(warehouse, "prod-1", 10)
        with pytest.raises(ValidationError):
            warehouse.reserve("prod-1", 0)


class TestLedgerInvariants:
    def test_entry_cannot_reserve_more_than_quantity(self):
        with pytest.raises(ValidationError):
            LedgerEntry(product_id="prod-1", quantity=2, reserved=3)

    def test_entry_quantity_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            LedgerEntry(product_id="prod-1", quantity=-1, reserved=0)

