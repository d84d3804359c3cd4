"""Low-stock and out-of-stock alerts derived from live ledgers.

Nothing here is stored: every call scans the active warehouses, joins each
ledger entry with its product's threshold, and classifies it.
"""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from warehousing.catalog.product import products_by_id, threshold_for
from warehousing.warehouse.warehouse import Warehouse


@dataclass(frozen=True)
class StockClassification:
    available: int
    threshold: int
    critical_threshold: int
    is_low_stock: bool
    is_critical: bool
    is_out_of_stock: bool


@dataclass(frozen=True)
class StockAlert:
    warehouse_id: str
    warehouse_name: str
    warehouse_code: str
    product_id: str
    product_name: str
    sku: str
    quantity: int
    reserved: int
    available: int
    threshold: int
    critical_threshold: int
    is_critical: bool
    is_out_of_stock: bool
    percentage_remaining: float


@dataclass(frozen=True)
class AlertStats:
    low_stock: int = 0
    critical: int = 0
    out_of_stock: int = 0
    total_alerts: int = 0


@dataclass(frozen=True)
class StockAlertReport:
    alerts: list[StockAlert] = field(default_factory=list)
    stats: AlertStats = field(default_factory=AlertStats)


def classify(available: int, threshold: int) -> StockClassification:
    """Classify ``available`` units against ``threshold``.

    Out of stock at or below zero. Low stock at or below the threshold, and
    critical when also at or below half of it (rounded down) while still
    above zero.
    """
    critical_threshold = threshold // 2
    is_out_of_stock = available <= 0
    return StockClassification(
        available=available,
        threshold=threshold,
        critical_threshold=critical_threshold,
        is_low_stock=not is_out_of_stock and available <= threshold,
        is_critical=not is_out_of_stock and available <= critical_threshold,
        is_out_of_stock=is_out_of_stock,
    )


def collect_stock_alerts(warehouse_id=None, critical_only=False, out_of_stock_only=False) -> StockAlertReport:
    """Alerts for every entry at or below its threshold, lowest availability first.

    ``stats`` always describe the full (unfiltered) alert set for the scanned
    warehouses; the filters only narrow ``alerts``. Entries whose product is
    unknown are skipped.
    """
    repo = current_domain.repository_for(Warehouse)
    warehouses = repo.find_active()
    if warehouse_id is not None:
        warehouses = [w for w in warehouses if str(w.id) == str(warehouse_id)]
    products = products_by_id()

    alerts = []
    for warehouse in warehouses:
        for entry in warehouse.entries or []:
            product = products.get(str(entry.product_id))
            if product is None:
                continue

            threshold = threshold_for(product)
            status = classify(entry.available, threshold)
            if not (status.is_low_stock or status.is_out_of_stock):
                continue

            alerts.append(
                StockAlert(
                    warehouse_id=str(warehouse.id),
                    warehouse_name=warehouse.name,
                    warehouse_code=warehouse.code,
                    product_id=str(entry.product_id),
                    product_name=product.name,
                    sku=product.sku,
                    quantity=entry.quantity or 0,
                    reserved=entry.reserved or 0,
                    available=status.available,
                    threshold=threshold,
                    critical_threshold=status.critical_threshold,
                    is_critical=status.is_critical,
                    is_out_of_stock=status.is_out_of_stock,
                    percentage_remaining=round(max(status.available, 0) / threshold * 100, 2),
                )
            )

    stats = AlertStats(
        low_stock=sum(1 for a in alerts if not a.is_out_of_stock),
        critical=sum(1 for a in alerts if a.is_critical),
        out_of_stock=sum(1 for a in alerts if a.is_out_of_stock),
        total_alerts=len(alerts),
    )

    if critical_only:
        alerts = [a for a in alerts if a.is_critical]
    if out_of_stock_only:
        alerts = [a for a in alerts if a.is_out_of_stock]
    alerts.sort(key=lambda a: a.available)

    return StockAlertReport(alerts=alerts, stats=stats)
