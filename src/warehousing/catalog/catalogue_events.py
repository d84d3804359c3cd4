"""Inbound cross-domain event handler — warehousing tracks catalogue products.

ProductCreated and ProductUpdated upsert the local ProductSnapshot used to
validate ledger operations and to price and threshold the read-side reports.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalogue import ProductCreated, ProductUpdated

from warehousing.catalog.product import ProductSnapshot
from warehousing.domain import warehousing
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)

warehousing.register_external_event(ProductCreated, "Catalogue.ProductCreated.v1")
warehousing.register_external_event(ProductUpdated, "Catalogue.ProductUpdated.v1")


def _upsert_snapshot(event, occurred_at):
    repo = current_domain.repository_for(ProductSnapshot)
    try:
        snapshot = repo.get(str(event.product_id))
        snapshot.name = event.title
        snapshot.sku = event.sku
        snapshot.unit_price = event.price_amount or 0.0
        snapshot.low_stock_threshold = event.low_stock_threshold
        snapshot.updated_at = occurred_at
    except ObjectNotFoundError:
        snapshot = ProductSnapshot(
            product_id=str(event.product_id),
            name=event.title,
            sku=event.sku,
            unit_price=event.price_amount or 0.0,
            low_stock_threshold=event.low_stock_threshold,
            updated_at=occurred_at,
        )
    repo.add(snapshot)
    return snapshot


@warehousing.event_handler(part_of=Warehouse, stream_category="catalogue::product")
class CatalogueProductEventHandler:
    """Keeps the local product snapshot in step with the catalogue."""

    @handle(ProductCreated)
    def on_product_created(self, event: ProductCreated) -> None:
        _upsert_snapshot(event, event.created_at)
        logger.info("Product snapshot recorded", product_id=str(event.product_id), sku=event.sku)

    @handle(ProductUpdated)
    def on_product_updated(self, event: ProductUpdated) -> None:
        _upsert_snapshot(event, event.updated_at)
        logger.info("Product snapshot refreshed", product_id=str(event.product_id), sku=event.sku)
