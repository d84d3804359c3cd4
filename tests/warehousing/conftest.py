import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def warehousing_bed():
    from warehousing.domain import warehousing

    bed = DomainFixture(warehousing)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(warehousing_bed):
    from warehousing.domain import warehousing
    from warehousing.utils.db import drop_db, setup_db

    setup_db(warehousing)

    yield

    drop_db(warehousing)


@pytest.fixture(autouse=True)
def _ctx(warehousing_bed):
    with warehousing_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Record a catalogue product through the inbound catalogue handler."""
    from datetime import UTC, datetime

    from shared.events.catalogue import ProductCreated
    from warehousing.catalog.catalogue_events import CatalogueProductEventHandler

    def _make(product_id="prod-P", sku=None, title=None, price=10.0, low_stock_threshold=10):
        CatalogueProductEventHandler().on_product_created(
            ProductCreated(
                product_id=product_id,
                sku=sku or product_id.upper(),
                title=title or f"Product {product_id}",
                price_amount=price,
                low_stock_threshold=low_stock_threshold,
                created_at=datetime.now(UTC),
            )
        )
        return product_id

    return _make


@pytest.fixture()
def make_warehouse():
    """Create a warehouse through the command pipeline and return its id."""
    import json

    from protean import current_domain
    from warehousing.warehouse.management import CreateWarehouse

    def _make(code="MAIN", name=None, **overrides):
        defaults = {
            "name": name or f"Warehouse {code}",
            "code": code,
            "address": json.dumps(
                {
                    "street": "100 Industrial Blvd",
                    "city": "Chicago",
                    "state": "IL",
                    "postal_code": "60601",
                    "country": "US",
                }
            ),
            "created_by": "admin-1",
        }
        defaults.update(overrides)
        return current_domain.process(CreateWarehouse(**defaults), asynchronous=False)

    return _make


@pytest.fixture()
def set_stock():
    """Put ``quantity`` units (``reserved`` of them on hold) of a product in a warehouse."""
    from protean import current_domain
    from warehousing.warehouse.stock import ReserveWarehouseStock, UpdateWarehouseStock

    def _set(warehouse_id, product_id, quantity, reserved=0):
        current_domain.process(
            UpdateWarehouseStock(
                warehouse_id=warehouse_id,
                product_id=product_id,
                quantity=quantity,
                operation="set",
                updated_by="admin-1",
            ),
            asynchronous=False,
        )
        if reserved:
            current_domain.process(
                ReserveWarehouseStock(warehouse_id=warehouse_id, product_id=product_id, quantity=reserved),
                asynchronous=False,
            )

    return _set


@pytest.fixture()
def ledger():
    """Read back ``(quantity, reserved)`` of a product in a warehouse."""
    from protean import current_domain
    from warehousing.warehouse.warehouse import Warehouse

    def _read(warehouse_id, product_id):
        entry = current_domain.repository_for(Warehouse).get(warehouse_id).entry_for(product_id)
        return (entry.quantity, entry.reserved) if entry else None

    return _read
