"""Local product lookup — the catalogue facts warehousing depends on.

The catalogue owns products; warehousing keeps a snapshot of the handful of
attributes it needs (name, SKU, unit price, low-stock threshold), maintained
from catalogue events.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from warehousing.domain import warehousing

DEFAULT_LOW_STOCK_THRESHOLD = 10


@warehousing.projection
class ProductSnapshot:
    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=100)
    unit_price = Float(default=0.0)
    low_stock_threshold = Integer()
    updated_at = DateTime()


def threshold_for(product) -> int:
    """Low-stock threshold of ``product``; unset or zero falls back to the default."""
    return (product.low_stock_threshold if product is not None else None) or DEFAULT_LOW_STOCK_THRESHOLD


def get_product(product_id) -> ProductSnapshot:
    """Return the snapshot for ``product_id`` or raise ``ObjectNotFoundError``."""
    try:
        return current_domain.repository_for(ProductSnapshot).get(str(product_id))
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"product_id": [f"Product {product_id} not found"]}) from None


def products_by_id() -> dict[str, ProductSnapshot]:
    """All known products keyed by id, for read-side joins."""
    items = current_domain.repository_for(ProductSnapshot)._dao.query.limit(None).all().items
    return {str(p.product_id): p for p in items}
