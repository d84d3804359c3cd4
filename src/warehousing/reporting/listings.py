"""Paged listings and detail views of warehouses, transfers and adjustments.

Read straight from the aggregates and joined with the product snapshots and
warehouse names at read time. Filters narrow ``items`` and
``pagination.total``; the ``stats`` counts always cover the whole collection.
"""

from dataclasses import dataclass, field
from datetime import datetime
from math import ceil

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from warehousing.adjustment.adjustment import AdjustmentReason, AdjustmentStatus, InventoryAdjustment
from warehousing.catalog.product import products_by_id
from warehousing.reporting.stats import WarehouseSummary, summarize_warehouse
from warehousing.transfer.transfer import StockTransfer, TransferStatus
from warehousing.warehouse.warehouse import Warehouse

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    pages: int


@dataclass(frozen=True)
class WarehouseRecord:
    warehouse_id: str
    name: str
    code: str
    is_active: bool
    address: dict | None = None
    phone: str | None = None
    email: str | None = None
    manager_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WarehouseCounts:
    total: int = 0
    active: int = 0
    inactive: int = 0


@dataclass(frozen=True)
class WarehousePage:
    warehouses: list[WarehouseRecord]
    pagination: Pagination
    stats: WarehouseCounts


@dataclass(frozen=True)
class WarehouseDetail:
    warehouse: WarehouseRecord
    summary: WarehouseSummary


@dataclass(frozen=True)
class ProductRef:
    product_id: str
    name: str = ""
    sku: str = ""


@dataclass(frozen=True)
class WarehouseRef:
    warehouse_id: str
    name: str = ""
    code: str = ""


@dataclass(frozen=True)
class TransferLineRecord:
    product: ProductRef
    quantity: int
    notes: str | None = None


@dataclass(frozen=True)
class TransferRecord:
    transfer_id: str
    transfer_number: str
    from_warehouse: WarehouseRef
    to_warehouse: WarehouseRef
    status: str
    lines: list[TransferLineRecord] = field(default_factory=list)
    total_quantity: int = 0
    notes: str | None = None
    requested_by: str | None = None
    requested_at: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None


@dataclass(frozen=True)
class TransferPage:
    transfers: list[TransferRecord]
    pagination: Pagination
    stats: dict[str, int]


@dataclass(frozen=True)
class AdjustmentLineRecord:
    product: ProductRef
    previous_quantity: int
    new_quantity: int
    difference: int


@dataclass(frozen=True)
class AdjustmentRecord:
    adjustment_id: str
    adjustment_number: str
    warehouse: WarehouseRef
    reason: str
    status: str
    lines: list[AdjustmentLineRecord] = field(default_factory=list)
    notes: str | None = None
    requested_by: str | None = None
    requested_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_note: str | None = None


@dataclass(frozen=True)
class AdjustmentPage:
    adjustments: list[AdjustmentRecord]
    pagination: Pagination
    stats: dict[str, int]


def _check_paging(page, limit):
    if page is None or page < 1:
        raise ValidationError({"page": ["Page must be at least 1"]})
    if limit is None or not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})


def _check_choice(name, value, enum_cls):
    if value and value not in {member.value for member in enum_cls}:
        raise ValidationError({name: [f"Unknown {name}: {value}"]})


def _pagination(results, page, limit) -> Pagination:
    return Pagination(total=results.total, page=page, limit=limit, pages=ceil(results.total / limit))


def _status_counts(repo, enum_cls) -> dict[str, int]:
    counts = {member.value: repo._dao.query.filter(status=member.value).all().total for member in enum_cls}
    counts["total"] = sum(counts.values())
    return counts


def _warehouse_refs(warehouse_ids) -> dict[str, WarehouseRef]:
    ids = sorted({str(wid) for wid in warehouse_ids})
    if not ids:
        return {}
    found = current_domain.repository_for(Warehouse)._dao.query.filter(id__in=ids).limit(None).all().items
    return {str(w.id): WarehouseRef(warehouse_id=str(w.id), name=w.name, code=w.code) for w in found}


def _product_ref(product_id, products) -> ProductRef:
    product = products.get(str(product_id))
    if product is None:
        return ProductRef(product_id=str(product_id))
    return ProductRef(product_id=str(product_id), name=product.name, sku=product.sku)


def _warehouse_ref(warehouse_id, refs) -> WarehouseRef:
    return refs.get(str(warehouse_id)) or WarehouseRef(warehouse_id=str(warehouse_id))


# ---------------------------------------------------------------------------
# Warehouses
# ---------------------------------------------------------------------------
def warehouse_record(warehouse) -> WarehouseRecord:
    address = warehouse.address
    return WarehouseRecord(
        warehouse_id=str(warehouse.id),
        name=warehouse.name,
        code=warehouse.code,
        is_active=bool(warehouse.is_active),
        address=address.to_dict() if address else None,
        phone=warehouse.phone,
        email=warehouse.email,
        manager_id=str(warehouse.manager_id) if warehouse.manager_id else None,
        created_at=warehouse.created_at,
        updated_at=warehouse.updated_at,
    )


def list_warehouses(search=None, is_active=None, page=1, limit=DEFAULT_PAGE_SIZE) -> WarehousePage:
    _check_paging(page, limit)
    repo = current_domain.repository_for(Warehouse)
    results = repo.search(search=search, is_active=is_active, page=page, limit=limit)

    active = repo._dao.query.filter(is_active=True).all().total
    inactive = repo._dao.query.filter(is_active=False).all().total
    return WarehousePage(
        warehouses=[warehouse_record(w) for w in results.items],
        pagination=_pagination(results, page, limit),
        stats=WarehouseCounts(total=active + inactive, active=active, inactive=inactive),
    )


def warehouse_detail(warehouse_id) -> WarehouseDetail:
    """Registry fields plus the ledger summary; ``ObjectNotFoundError`` for unknown ids."""
    warehouse = current_domain.repository_for(Warehouse).get(warehouse_id)
    return WarehouseDetail(
        warehouse=warehouse_record(warehouse),
        summary=summarize_warehouse(warehouse, products_by_id()),
    )


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------
def _transfer_record(transfer, products, refs) -> TransferRecord:
    lines = [
        TransferLineRecord(product=_product_ref(line.product_id, products), quantity=line.quantity, notes=line.notes)
        for line in transfer.lines or []
    ]
    return TransferRecord(
        transfer_id=str(transfer.id),
        transfer_number=transfer.transfer_number,
        from_warehouse=_warehouse_ref(transfer.from_warehouse_id, refs),
        to_warehouse=_warehouse_ref(transfer.to_warehouse_id, refs),
        status=transfer.status,
        lines=lines,
        total_quantity=sum(line.quantity for line in lines),
        notes=transfer.notes,
        requested_by=transfer.requested_by,
        requested_at=transfer.requested_at,
        approved_by=transfer.approved_by,
        approved_at=transfer.approved_at,
        completed_by=transfer.completed_by,
        completed_at=transfer.completed_at,
        cancelled_by=transfer.cancelled_by,
        cancelled_at=transfer.cancelled_at,
        cancellation_reason=transfer.cancellation_reason,
    )


def list_transfers(status=None, warehouse_id=None, page=1, limit=DEFAULT_PAGE_SIZE) -> TransferPage:
    """Transfers newest first; ``warehouse_id`` matches the source or the destination."""
    _check_paging(page, limit)
    _check_choice("status", status, TransferStatus)
    repo = current_domain.repository_for(StockTransfer)
    results = repo.search(status=status, warehouse_id=warehouse_id, page=page, limit=limit)

    products = products_by_id()
    refs = _warehouse_refs(
        [t.from_warehouse_id for t in results.items] + [t.to_warehouse_id for t in results.items]
    )
    return TransferPage(
        transfers=[_transfer_record(t, products, refs) for t in results.items],
        pagination=_pagination(results, page, limit),
        stats=_status_counts(repo, TransferStatus),
    )


def transfer_detail(transfer_id) -> TransferRecord:
    transfer = current_domain.repository_for(StockTransfer).get(transfer_id)
    refs = _warehouse_refs([transfer.from_warehouse_id, transfer.to_warehouse_id])
    return _transfer_record(transfer, products_by_id(), refs)


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------
def _adjustment_record(adjustment, products, refs) -> AdjustmentRecord:
    return AdjustmentRecord(
        adjustment_id=str(adjustment.id),
        adjustment_number=adjustment.adjustment_number,
        warehouse=_warehouse_ref(adjustment.warehouse_id, refs),
        reason=adjustment.reason,
        status=adjustment.status,
        lines=[
            AdjustmentLineRecord(
                product=_product_ref(line.product_id, products),
                previous_quantity=line.previous_quantity or 0,
                new_quantity=line.new_quantity or 0,
                difference=line.difference or 0,
            )
            for line in adjustment.lines or []
        ],
        notes=adjustment.notes,
        requested_by=adjustment.requested_by,
        requested_at=adjustment.requested_at,
        reviewed_by=adjustment.reviewed_by,
        reviewed_at=adjustment.reviewed_at,
        review_note=adjustment.review_note,
    )


def list_adjustments(status=None, warehouse_id=None, reason=None, page=1, limit=DEFAULT_PAGE_SIZE) -> AdjustmentPage:
    _check_paging(page, limit)
    _check_choice("status", status, AdjustmentStatus)
    _check_choice("reason", reason, AdjustmentReason)
    repo = current_domain.repository_for(InventoryAdjustment)
    results = repo.search(status=status, warehouse_id=warehouse_id, reason=reason, page=page, limit=limit)

    products = products_by_id()
    refs = _warehouse_refs([a.warehouse_id for a in results.items])
    return AdjustmentPage(
        adjustments=[_adjustment_record(a, products, refs) for a in results.items],
        pagination=_pagination(results, page, limit),
        stats=_status_counts(repo, AdjustmentStatus),
    )


def adjustment_detail(adjustment_id) -> AdjustmentRecord:
    adjustment = current_domain.repository_for(InventoryAdjustment).get(adjustment_id)
    refs = _warehouse_refs([adjustment.warehouse_id])
    return _adjustment_record(adjustment, products_by_id(), refs)
