"""FastAPI routes for the Warehousing domain.

Thin adapters: request schema → command → response. Read endpoints call the
reporting functions directly; nothing on the read side is cached.
"""

import json
from dataclasses import asdict

from fastapi import APIRouter
from protean.utils.globals import current_domain

from warehousing.adjustment.proposal import ProposeAdjustment
from warehousing.adjustment.review import ApproveAdjustment, DeleteAdjustment, RejectAdjustment
from warehousing.api.schemas import (
    AdjustmentDetailResponse,
    AdjustmentIdResponse,
    AdjustmentListResponse,
    ApproveAdjustmentRequest,
    CancelTransferRequest,
    CompleteTransferRequest,
    CreateWarehouseRequest,
    DispatchTransferRequest,
    InventoryStatsResponse,
    ProposeAdjustmentRequest,
    RejectAdjustmentRequest,
    RequestTransferRequest,
    StatusResponse,
    StockAlertReportResponse,
    StockHoldRequest,
    StockUpdateResponse,
    TransferDetailResponse,
    TransferIdResponse,
    TransferListResponse,
    UpdateStockRequest,
    UpdateWarehouseRequest,
    WarehouseActionRequest,
    WarehouseDetailResponse,
    WarehouseIdResponse,
    WarehouseInventoryResponse,
    WarehouseListResponse,
)
from warehousing.reporting.alerts import collect_stock_alerts
from warehousing.reporting.listings import (
    DEFAULT_PAGE_SIZE,
    adjustment_detail,
    list_adjustments,
    list_transfers,
    list_warehouses,
    transfer_detail,
    warehouse_detail,
)
from warehousing.reporting.stats import compute_inventory_stats, warehouse_inventory
from warehousing.transfer.lifecycle import CancelTransfer, CompleteTransfer, DeleteTransfer, DispatchTransfer
from warehousing.transfer.requesting import RequestTransfer
from warehousing.warehouse.management import (
    ActivateWarehouse,
    CreateWarehouse,
    DeactivateWarehouse,
    DeleteWarehouse,
    UpdateWarehouse,
)
from warehousing.warehouse.stock import ReleaseWarehouseStock, ReserveWarehouseStock, UpdateWarehouseStock

# ---------------------------------------------------------------------------
# Warehouse Router
# ---------------------------------------------------------------------------
warehouse_router = APIRouter(prefix="/warehouses", tags=["warehouses"])


@warehouse_router.get("", response_model=WarehouseListResponse)
async def list_warehouses_page(
    search: str | None = None, is_active: bool | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> WarehouseListResponse:
    view = list_warehouses(search=search, is_active=is_active, page=page, limit=limit)
    return WarehouseListResponse.model_validate(asdict(view))


@warehouse_router.get("/{warehouse_id}", response_model=WarehouseDetailResponse)
async def get_warehouse(warehouse_id: str) -> WarehouseDetailResponse:
    return WarehouseDetailResponse.model_validate(asdict(warehouse_detail(warehouse_id)))


@warehouse_router.post("", status_code=201, response_model=WarehouseIdResponse)
async def create_warehouse(body: CreateWarehouseRequest) -> WarehouseIdResponse:
    command = CreateWarehouse(
        name=body.name,
        code=body.code,
        address=json.dumps(body.address.model_dump()) if body.address else None,
        phone=body.phone,
        email=body.email,
        manager_id=body.manager_id,
        created_by=body.created_by,
    )
    result = current_domain.process(command, asynchronous=False)
    return WarehouseIdResponse(warehouse_id=result)


@warehouse_router.put("/{warehouse_id}", response_model=StatusResponse)
async def update_warehouse(warehouse_id: str, body: UpdateWarehouseRequest) -> StatusResponse:
    command = UpdateWarehouse(
        warehouse_id=warehouse_id,
        name=body.name,
        code=body.code,
        address=json.dumps(body.address.model_dump()) if body.address else None,
        phone=body.phone,
        email=body.email,
        manager_id=body.manager_id,
        updated_by=body.updated_by,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@warehouse_router.put("/{warehouse_id}/activate", response_model=StatusResponse)
async def activate_warehouse(warehouse_id: str, body: WarehouseActionRequest | None = None) -> StatusResponse:
    command = ActivateWarehouse(warehouse_id=warehouse_id, updated_by=body.updated_by if body else None)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@warehouse_router.put("/{warehouse_id}/deactivate", response_model=StatusResponse)
async def deactivate_warehouse(warehouse_id: str, body: WarehouseActionRequest | None = None) -> StatusResponse:
    command = DeactivateWarehouse(warehouse_id=warehouse_id, updated_by=body.updated_by if body else None)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@warehouse_router.delete("/{warehouse_id}", response_model=StatusResponse)
async def delete_warehouse(warehouse_id: str, deleted_by: str | None = None) -> StatusResponse:
    current_domain.process(DeleteWarehouse(warehouse_id=warehouse_id, deleted_by=deleted_by), asynchronous=False)
    return StatusResponse()


@warehouse_router.get("/{warehouse_id}/inventory", response_model=WarehouseInventoryResponse)
async def get_warehouse_inventory(
    warehouse_id: str, search: str | None = None, low_stock: bool = False
) -> WarehouseInventoryResponse:
    view = warehouse_inventory(warehouse_id, search=search, low_stock_only=low_stock)
    return WarehouseInventoryResponse.model_validate(asdict(view))


@warehouse_router.post("/{warehouse_id}/inventory", response_model=StockUpdateResponse)
async def update_warehouse_stock(warehouse_id: str, body: UpdateStockRequest) -> StockUpdateResponse:
    command = UpdateWarehouseStock(
        warehouse_id=warehouse_id,
        product_id=body.product_id,
        quantity=body.quantity,
        operation=body.operation,
        updated_by=body.updated_by,
    )
    new_quantity = current_domain.process(command, asynchronous=False)
    return StockUpdateResponse(product_id=body.product_id, quantity=new_quantity)


@warehouse_router.post("/{warehouse_id}/inventory/reserve", response_model=StatusResponse)
async def reserve_warehouse_stock(warehouse_id: str, body: StockHoldRequest) -> StatusResponse:
    command = ReserveWarehouseStock(
        warehouse_id=warehouse_id,
        product_id=body.product_id,
        quantity=body.quantity,
        reference=body.reference,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@warehouse_router.post("/{warehouse_id}/inventory/release", response_model=StatusResponse)
async def release_warehouse_stock(warehouse_id: str, body: StockHoldRequest) -> StatusResponse:
    command = ReleaseWarehouseStock(
        warehouse_id=warehouse_id,
        product_id=body.product_id,
        quantity=body.quantity,
        reference=body.reference,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Adjustment Router
# ---------------------------------------------------------------------------
adjustment_router = APIRouter(prefix="/inventory/adjustments", tags=["adjustments"])


@adjustment_router.get("", response_model=AdjustmentListResponse)
async def list_adjustments_page(
    status: str | None = None,
    warehouse_id: str | None = None,
    reason: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> AdjustmentListResponse:
    view = list_adjustments(status=status, warehouse_id=warehouse_id, reason=reason, page=page, limit=limit)
    return AdjustmentListResponse.model_validate(asdict(view))


@adjustment_router.get("/{adjustment_id}", response_model=AdjustmentDetailResponse)
async def get_adjustment(adjustment_id: str) -> AdjustmentDetailResponse:
    return AdjustmentDetailResponse.model_validate(asdict(adjustment_detail(adjustment_id)))


@adjustment_router.post("", status_code=201, response_model=AdjustmentIdResponse)
async def propose_adjustment(body: ProposeAdjustmentRequest) -> AdjustmentIdResponse:
    command = ProposeAdjustment(
        warehouse_id=body.warehouse_id,
        lines=json.dumps([line.model_dump(exclude_none=True) for line in body.lines]),
        reason=body.reason,
        notes=body.notes,
        requested_by=body.requested_by,
    )
    result = current_domain.process(command, asynchronous=False)
    return AdjustmentIdResponse(adjustment_id=result)


@adjustment_router.put("/{adjustment_id}/approve", response_model=StatusResponse)
async def approve_adjustment(adjustment_id: str, body: ApproveAdjustmentRequest) -> StatusResponse:
    command = ApproveAdjustment(adjustment_id=adjustment_id, approved_by=body.approved_by)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@adjustment_router.put("/{adjustment_id}/reject", response_model=StatusResponse)
async def reject_adjustment(adjustment_id: str, body: RejectAdjustmentRequest) -> StatusResponse:
    command = RejectAdjustment(
        adjustment_id=adjustment_id,
        rejected_by=body.rejected_by,
        review_note=body.review_note,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@adjustment_router.delete("/{adjustment_id}", response_model=StatusResponse)
async def delete_adjustment(adjustment_id: str, deleted_by: str | None = None) -> StatusResponse:
    current_domain.process(DeleteAdjustment(adjustment_id=adjustment_id, deleted_by=deleted_by), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Transfer Router
# ---------------------------------------------------------------------------
transfer_router = APIRouter(prefix="/transfers", tags=["transfers"])


@transfer_router.get("", response_model=TransferListResponse)
async def list_transfers_page(
    status: str | None = None, warehouse_id: str | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> TransferListResponse:
    view = list_transfers(status=status, warehouse_id=warehouse_id, page=page, limit=limit)
    return TransferListResponse.model_validate(asdict(view))


@transfer_router.get("/{transfer_id}", response_model=TransferDetailResponse)
async def get_transfer(transfer_id: str) -> TransferDetailResponse:
    return TransferDetailResponse.model_validate(asdict(transfer_detail(transfer_id)))


@transfer_router.post("", status_code=201, response_model=TransferIdResponse)
async def request_transfer(body: RequestTransferRequest) -> TransferIdResponse:
    command = RequestTransfer(
        from_warehouse_id=body.from_warehouse_id,
        to_warehouse_id=body.to_warehouse_id,
        lines=json.dumps([line.model_dump() for line in body.lines]),
        notes=body.notes,
        requested_by=body.requested_by,
    )
    result = current_domain.process(command, asynchronous=False)
    return TransferIdResponse(transfer_id=result)


@transfer_router.put("/{transfer_id}/dispatch", response_model=StatusResponse)
async def dispatch_transfer(transfer_id: str, body: DispatchTransferRequest) -> StatusResponse:
    current_domain.process(DispatchTransfer(transfer_id=transfer_id, approved_by=body.approved_by), asynchronous=False)
    return StatusResponse()


@transfer_router.put("/{transfer_id}/complete", response_model=StatusResponse)
async def complete_transfer(transfer_id: str, body: CompleteTransferRequest) -> StatusResponse:
    current_domain.process(
        CompleteTransfer(transfer_id=transfer_id, completed_by=body.completed_by), asynchronous=False
    )
    return StatusResponse()


@transfer_router.put("/{transfer_id}/cancel", response_model=StatusResponse)
async def cancel_transfer(transfer_id: str, body: CancelTransferRequest) -> StatusResponse:
    command = CancelTransfer(transfer_id=transfer_id, cancelled_by=body.cancelled_by, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@transfer_router.delete("/{transfer_id}", response_model=StatusResponse)
async def delete_transfer(transfer_id: str, deleted_by: str | None = None) -> StatusResponse:
    current_domain.process(DeleteTransfer(transfer_id=transfer_id, deleted_by=deleted_by), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Reporting Router
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/inventory", tags=["inventory"])


@report_router.get("/alerts", response_model=StockAlertReportResponse)
async def get_stock_alerts(
    warehouse_id: str | None = None, critical: bool = False, out_of_stock: bool = False
) -> StockAlertReportResponse:
    report = collect_stock_alerts(warehouse_id=warehouse_id, critical_only=critical, out_of_stock_only=out_of_stock)
    return StockAlertReportResponse.model_validate(asdict(report))


@report_router.get("/stats", response_model=InventoryStatsResponse)
async def get_inventory_stats() -> InventoryStatsResponse:
    return InventoryStatsResponse.model_validate(asdict(compute_inventory_stats()))
