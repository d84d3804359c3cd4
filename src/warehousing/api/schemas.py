"""Pydantic request/response schemas for the Warehousing API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and the read-side dataclasses.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


# ---------------------------------------------------------------------------
# Warehouse Request Schemas
# ---------------------------------------------------------------------------
class CreateWarehouseRequest(BaseModel):
    name: str = Field(max_length=100)
    code: str = Field(min_length=2, max_length=10)
    address: AddressSchema | None = None
    phone: str | None = None
    email: str | None = None
    manager_id: str | None = None
    created_by: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Dallas Fulfillment Center",
                    "code": "DAL01",
                    "address": {
                        "street": "123 Logistics Way",
                        "city": "Dallas",
                        "state": "TX",
                        "postal_code": "75201",
                        "country": "US",
                    },
                    "created_by": "admin-1",
                }
            ]
        }
    }


class UpdateWarehouseRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    code: str | None = Field(default=None, min_length=2, max_length=10)
    address: AddressSchema | None = None
    phone: str | None = None
    email: str | None = None
    manager_id: str | None = None
    updated_by: str | None = None


class WarehouseActionRequest(BaseModel):
    updated_by: str | None = None


class UpdateStockRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=0)
    operation: Literal["add", "subtract", "set"] = "add"
    updated_by: str | None = None


class StockHoldRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    reference: str | None = None


# ---------------------------------------------------------------------------
# Adjustment Request Schemas
# ---------------------------------------------------------------------------
class AdjustmentLineSchema(BaseModel):
    product_id: str
    previous_quantity: int = Field(ge=0)
    new_quantity: int = Field(ge=0)
    difference: int | None = None


class ProposeAdjustmentRequest(BaseModel):
    warehouse_id: str
    lines: list[AdjustmentLineSchema]
    reason: Literal["stock_count", "damaged", "lost", "found", "correction", "other"]
    notes: str | None = Field(default=None, max_length=1000)
    requested_by: str | None = None


class ApproveAdjustmentRequest(BaseModel):
    approved_by: str | None = None


class RejectAdjustmentRequest(BaseModel):
    rejected_by: str | None = None
    review_note: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Transfer Request Schemas
# ---------------------------------------------------------------------------
class TransferLineSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    notes: str | None = Field(default=None, max_length=500)


class RequestTransferRequest(BaseModel):
    from_warehouse_id: str
    to_warehouse_id: str
    lines: list[TransferLineSchema]
    notes: str | None = Field(default=None, max_length=500)
    requested_by: str | None = None


class DispatchTransferRequest(BaseModel):
    approved_by: str | None = None


class CompleteTransferRequest(BaseModel):
    completed_by: str | None = None


class CancelTransferRequest(BaseModel):
    cancelled_by: str | None = None
    reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class WarehouseIdResponse(BaseModel):
    warehouse_id: str


class AdjustmentIdResponse(BaseModel):
    adjustment_id: str


class TransferIdResponse(BaseModel):
    transfer_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class StockUpdateResponse(BaseModel):
    status: str = "ok"
    product_id: str
    quantity: int


class WarehouseSummarySchema(BaseModel):
    warehouse_id: str
    name: str
    code: str
    item_count: int
    total_quantity: int
    total_reserved: int
    total_available: int
    low_stock_count: int = 0


class InventoryLineSchema(BaseModel):
    product_id: str
    name: str
    sku: str
    quantity: int
    reserved: int
    available: int
    threshold: int
    is_low_stock: bool


class WarehouseInventoryResponse(BaseModel):
    summary: WarehouseSummarySchema
    lines: list[InventoryLineSchema]


class StockAlertSchema(BaseModel):
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


class AlertStatsSchema(BaseModel):
    low_stock: int
    critical: int
    out_of_stock: int
    total_alerts: int


class StockAlertReportResponse(BaseModel):
    alerts: list[StockAlertSchema]
    stats: AlertStatsSchema


class InventoryOverviewSchema(BaseModel):
    total_warehouses: int
    total_products: int
    total_quantity: int
    total_reserved: int
    total_available: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int


class TransferCountsSchema(BaseModel):
    pending: int
    in_transit: int
    total: int


class ProductTotalsSchema(BaseModel):
    product_id: str
    quantity: int
    reserved: int
    available: int
    value: float


class InventoryStatsResponse(BaseModel):
    overview: InventoryOverviewSchema
    transfers: TransferCountsSchema
    pending_adjustments: int
    top_products: list[ProductTotalsSchema]
    warehouses: list[WarehouseSummarySchema]


# ---------------------------------------------------------------------------
# Listing and detail Response Schemas
# ---------------------------------------------------------------------------
class PaginationSchema(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class WarehouseSchema(BaseModel):
    warehouse_id: str
    name: str
    code: str
    is_active: bool
    address: AddressSchema | None = None
    phone: str | None = None
    email: str | None = None
    manager_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WarehouseCountsSchema(BaseModel):
    total: int
    active: int
    inactive: int


class WarehouseListResponse(BaseModel):
    warehouses: list[WarehouseSchema]
    pagination: PaginationSchema
    stats: WarehouseCountsSchema


class WarehouseDetailResponse(BaseModel):
    warehouse: WarehouseSchema
    summary: WarehouseSummarySchema


class ProductRefSchema(BaseModel):
    product_id: str
    name: str
    sku: str


class WarehouseRefSchema(BaseModel):
    warehouse_id: str
    name: str
    code: str


class TransferLineDetailSchema(BaseModel):
    product: ProductRefSchema
    quantity: int
    notes: str | None = None


class TransferDetailResponse(BaseModel):
    transfer_id: str
    transfer_number: str
    from_warehouse: WarehouseRefSchema
    to_warehouse: WarehouseRefSchema
    status: str
    lines: list[TransferLineDetailSchema]
    total_quantity: int
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


class TransferListResponse(BaseModel):
    transfers: list[TransferDetailResponse]
    pagination: PaginationSchema
    stats: dict[str, int]


class AdjustmentLineDetailSchema(BaseModel):
    product: ProductRefSchema
    previous_quantity: int
    new_quantity: int
    difference: int


class AdjustmentDetailResponse(BaseModel):
    adjustment_id: str
    adjustment_number: str
    warehouse: WarehouseRefSchema
    reason: str
    status: str
    lines: list[AdjustmentLineDetailSchema]
    notes: str | None = None
    requested_by: str | None = None
    requested_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_note: str | None = None


class AdjustmentListResponse(BaseModel):
    adjustments: list[AdjustmentDetailResponse]
    pagination: PaginationSchema
    stats: dict[str, int]
