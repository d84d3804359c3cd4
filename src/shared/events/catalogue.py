"""Cross-domain event contracts for Catalogue domain events.

The warehousing domain keeps a local product snapshot (name, SKU, price,
low-stock threshold) in step with the catalogue through these events. They
are registered as external events via ``domain.register_external_event()``
with matching ``__type__`` strings so Protean's stream deserialization works.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, Integer, String


class ProductCreated(BaseEvent):
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    title = String(required=True)
    price_amount = Float(default=0.0)
    low_stock_threshold = Integer()
    created_at = DateTime(required=True)


class ProductUpdated(BaseEvent):
    """Catalogue details that the warehouses care about were changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    title = String(required=True)
    price_amount = Float(default=0.0)
    low_stock_threshold = Integer()
    updated_at = DateTime(required=True)
