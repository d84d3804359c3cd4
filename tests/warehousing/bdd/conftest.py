"""Shared BDD fixtures and step definitions for the Warehousing domain."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from warehousing.errors import InsufficientStockError
from warehousing.warehouse.warehouse import Warehouse


@pytest.fixture()
def outcome():
    """Ids created by When steps plus the last error raised, if any."""
    return {"error": None}


@pytest.fixture()
def attempt(outcome):
    """Process a command, recording a domain error instead of raising it."""

    def _attempt(command):
        try:
            result = current_domain.process(command, asynchronous=False)
        except ValidationError as exc:
            outcome["error"] = exc
            return None
        outcome["error"] = None
        return result

    return _attempt


@pytest.fixture()
def warehouse_id():
    """Resolve a warehouse code to its id."""

    def _resolve(code):
        return str(current_domain.repository_for(Warehouse).find_by_code(code).id)

    return _resolve


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" exists with a low-stock threshold of {threshold:d}'))
def _(make_product, product_id, threshold):
    make_product(product_id, low_stock_threshold=threshold)


@given(parsers.cfparse('warehouse "{code}" exists'))
def _(make_warehouse, code):
    make_warehouse(code=code)


@given(parsers.cfparse('warehouse "{code}" holds {qty:d} units of "{product_id}"'))
def _(make_warehouse, set_stock, code, qty, product_id):
    set_stock(make_warehouse(code=code), product_id, qty)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('warehouse "{code}" holds {qty:d} units of "{product_id}"'))
def _(ledger, warehouse_id, code, qty, product_id):
    entry = ledger(warehouse_id(code), product_id)
    assert (entry[0] if entry else 0) == qty


@then("the action fails with a validation error")
def _(outcome):
    assert isinstance(outcome["error"], ValidationError)


@then("the action fails with an insufficient stock error")
def _(outcome):
    assert isinstance(outcome["error"], InsufficientStockError)
