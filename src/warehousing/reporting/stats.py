"""Fleet-wide inventory statistics and per-warehouse inventory views."""

from collections import defaultdict
from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from warehousing.adjustment.adjustment import InventoryAdjustment
from warehousing.catalog.product import products_by_id, threshold_for
from warehousing.reporting.alerts import classify
from warehousing.transfer.transfer import StockTransfer, TransferStatus
from warehousing.warehouse.warehouse import Warehouse

TOP_PRODUCTS_LIMIT = 5


@dataclass(frozen=True)
class InventoryOverview:
    total_warehouses: int = 0
    total_products: int = 0
    total_quantity: int = 0
    total_reserved: int = 0
    total_available: int = 0
    total_value: float = 0.0
    low_stock_count: int = 0
    out_of_stock_count: int = 0


@dataclass(frozen=True)
class TransferCounts:
    pending: int = 0
    in_transit: int = 0
    total: int = 0


@dataclass(frozen=True)
class ProductTotals:
    product_id: str
    quantity: int
    reserved: int
    available: int
    value: float


@dataclass(frozen=True)
class WarehouseSummary:
    warehouse_id: str
    name: str
    code: str
    item_count: int
    total_quantity: int
    total_reserved: int
    total_available: int
    low_stock_count: int = 0


@dataclass(frozen=True)
class InventoryStats:
    overview: InventoryOverview
    transfers: TransferCounts
    pending_adjustments: int
    top_products: list[ProductTotals] = field(default_factory=list)
    warehouses: list[WarehouseSummary] = field(default_factory=list)


@dataclass(frozen=True)
class InventoryLine:
    product_id: str
    name: str
    sku: str
    quantity: int
    reserved: int
    available: int
    threshold: int
    is_low_stock: bool


@dataclass(frozen=True)
class WarehouseInventory:
    summary: WarehouseSummary
    lines: list[InventoryLine] = field(default_factory=list)


def summarize_warehouse(warehouse, products=None) -> WarehouseSummary:
    """Totals over every ledger entry of ``warehouse``.

    ``low_stock_count`` counts entries at or below their product threshold
    (out-of-stock included) and is only computed when ``products`` is given.
    """
    entries = warehouse.entries or []
    quantity = sum(e.quantity or 0 for e in entries)
    reserved = sum(e.reserved or 0 for e in entries)

    low_stock = 0
    if products is not None:
        for entry in entries:
            product = products.get(str(entry.product_id))
            if product is not None and entry.available <= threshold_for(product):
                low_stock += 1

    return WarehouseSummary(
        warehouse_id=str(warehouse.id),
        name=warehouse.name,
        code=warehouse.code,
        item_count=len(entries),
        total_quantity=quantity,
        total_reserved=reserved,
        total_available=quantity - reserved,
        low_stock_count=low_stock,
    )


def compute_inventory_stats() -> InventoryStats:
    """Recompute the fleet overview over active warehouses.

    Ledger entries of unknown products are left out of the overview and top
    products, but still count in the per-warehouse summaries.
    """
    warehouses = current_domain.repository_for(Warehouse).find_active()
    products = products_by_id()

    per_product = defaultdict(lambda: {"quantity": 0, "reserved": 0, "available": 0, "value": 0.0})
    low_stock = out_of_stock = 0
    for warehouse in warehouses:
        for entry in warehouse.entries or []:
            product = products.get(str(entry.product_id))
            if product is None:
                continue

            totals = per_product[str(entry.product_id)]
            totals["quantity"] += entry.quantity or 0
            totals["reserved"] += entry.reserved or 0
            totals["available"] += entry.available
            totals["value"] += (entry.quantity or 0) * (product.unit_price or 0.0)

            status = classify(entry.available, threshold_for(product))
            if status.is_out_of_stock:
                out_of_stock += 1
            elif status.is_low_stock:
                low_stock += 1

    overview = InventoryOverview(
        total_warehouses=len(warehouses),
        total_products=len(per_product),
        total_quantity=sum(t["quantity"] for t in per_product.values()),
        total_reserved=sum(t["reserved"] for t in per_product.values()),
        total_available=sum(t["available"] for t in per_product.values()),
        total_value=round(sum(t["value"] for t in per_product.values()), 2),
        low_stock_count=low_stock,
        out_of_stock_count=out_of_stock,
    )

    transfer_repo = current_domain.repository_for(StockTransfer)
    pending = len(transfer_repo.find_by_status(TransferStatus.PENDING))
    in_transit = len(transfer_repo.find_by_status(TransferStatus.IN_TRANSIT))

    top = sorted(per_product.items(), key=lambda item: item[1]["quantity"], reverse=True)[:TOP_PRODUCTS_LIMIT]

    return InventoryStats(
        overview=overview,
        transfers=TransferCounts(pending=pending, in_transit=in_transit, total=pending + in_transit),
        pending_adjustments=len(current_domain.repository_for(InventoryAdjustment).find_pending()),
        top_products=[
            ProductTotals(
                product_id=product_id,
                quantity=totals["quantity"],
                reserved=totals["reserved"],
                available=totals["available"],
                value=round(totals["value"], 2),
            )
            for product_id, totals in top
        ],
        warehouses=[summarize_warehouse(w, products) for w in warehouses],
    )


def warehouse_inventory(warehouse_id, search=None, low_stock_only=False) -> WarehouseInventory:
    """Ledger of one warehouse joined with product details.

    ``search`` matches product name or SKU case-insensitively. The summary
    always covers the whole ledger regardless of filters.
    """
    warehouse = current_domain.repository_for(Warehouse).get(warehouse_id)
    products = products_by_id()

    lines = []
    for entry in warehouse.entries or []:
        product = products.get(str(entry.product_id))
        threshold = threshold_for(product)
        lines.append(
            InventoryLine(
                product_id=str(entry.product_id),
                name=product.name if product else "",
                sku=product.sku if product else "",
                quantity=entry.quantity or 0,
                reserved=entry.reserved or 0,
                available=entry.available,
                threshold=threshold,
                is_low_stock=entry.available <= threshold,
            )
        )

    if search:
        needle = search.lower()
        lines = [line for line in lines if needle in line.name.lower() or needle in line.sku.lower()]
    if low_stock_only:
        lines = [line for line in lines if line.is_low_stock]

    return WarehouseInventory(summary=summarize_warehouse(warehouse, products), lines=lines)
