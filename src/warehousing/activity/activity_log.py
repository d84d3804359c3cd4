"""Activity log — audit trail of warehouse, adjustment and transfer actions.

Recording is fire-and-forget: a failure to write an entry is logged and
swallowed so it can never fail the workflow that triggered it.
"""

import json
import uuid
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from warehousing.adjustment.adjustment import InventoryAdjustment
from warehousing.adjustment.events import (
    AdjustmentApproved,
    AdjustmentDeleted,
    AdjustmentProposed,
    AdjustmentRejected,
)
from warehousing.domain import warehousing
from warehousing.transfer.events import (
    TransferCancelled,
    TransferCompleted,
    TransferDeleted,
    TransferDispatched,
    TransferRequested,
)
from warehousing.transfer.transfer import StockTransfer
from warehousing.warehouse.events import (
    WarehouseActivated,
    WarehouseCreated,
    WarehouseDeactivated,
    WarehouseDeleted,
    WarehouseStockUpdated,
    WarehouseUpdated,
)
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


class ActivityAction(Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    DISPATCH = "DISPATCH"
    COMPLETE = "COMPLETE"
    CANCEL = "CANCEL"
    ENABLE = "ENABLE"
    DISABLE = "DISABLE"


@warehousing.projection
class ActivityLog:
    log_id = Identifier(identifier=True, required=True)
    actor = String(max_length=255)
    action = String(required=True, choices=ActivityAction)
    entity = String(required=True, max_length=50)
    entity_id = Identifier(required=True)
    description = String(required=True, max_length=500)
    details = Text()  # JSON object
    created_at = DateTime(required=True)


def record_activity(actor, action, entity, entity_id, description, metadata=None, occurred_at=None):
    """Append an activity entry; never raises."""
    try:
        current_domain.repository_for(ActivityLog).add(
            ActivityLog(
                log_id=str(uuid.uuid4()),
                actor=actor,
                action=action.value if isinstance(action, ActivityAction) else action,
                entity=entity,
                entity_id=str(entity_id),
                description=description,
                details=json.dumps(metadata) if metadata else None,
                created_at=occurred_at or datetime.now(UTC),
            )
        )
    except Exception:
        logger.exception(
            "Failed to record activity",
            action=str(action),
            entity=entity,
            entity_id=str(entity_id),
        )


def _line_count(lines_json):
    return len(json.loads(lines_json)) if lines_json else 0


@warehousing.projector(projector_for=ActivityLog, aggregates=[Warehouse, InventoryAdjustment, StockTransfer])
class ActivityLogProjector:
    @on(WarehouseCreated)
    def on_warehouse_created(self, event):
        record_activity(
            event.created_by,
            ActivityAction.CREATE,
            "Warehouse",
            event.warehouse_id,
            f"Created warehouse {event.name} ({event.code})",
            occurred_at=event.created_at,
        )

    @on(WarehouseUpdated)
    def on_warehouse_updated(self, event):
        record_activity(
            event.updated_by,
            ActivityAction.UPDATE,
            "Warehouse",
            event.warehouse_id,
            f"Updated warehouse {event.code}",
            metadata={"changed_fields": json.loads(event.changed_fields or "[]")},
            occurred_at=event.updated_at,
        )

    @on(WarehouseActivated)
    def on_warehouse_activated(self, event):
        record_activity(
            event.updated_by,
            ActivityAction.ENABLE,
            "Warehouse",
            event.warehouse_id,
            f"Activated warehouse {event.code}",
            occurred_at=event.activated_at,
        )

    @on(WarehouseDeactivated)
    def on_warehouse_deactivated(self, event):
        record_activity(
            event.updated_by,
            ActivityAction.DISABLE,
            "Warehouse",
            event.warehouse_id,
            f"Deactivated warehouse {event.code}",
            occurred_at=event.deactivated_at,
        )

    @on(WarehouseDeleted)
    def on_warehouse_deleted(self, event):
        record_activity(
            event.deleted_by,
            ActivityAction.DELETE,
            "Warehouse",
            event.warehouse_id,
            f"Deleted warehouse {event.name} ({event.code})",
            occurred_at=event.deleted_at,
        )

    @on(WarehouseStockUpdated)
    def on_warehouse_stock_updated(self, event):
        record_activity(
            event.updated_by,
            ActivityAction.UPDATE,
            "Inventory",
            event.warehouse_id,
            f"Stock of product {event.product_id}: {event.operation} {event.amount} "
            f"({event.previous_quantity} -> {event.new_quantity})",
            metadata={
                "product_id": str(event.product_id),
                "operation": event.operation,
                "previous_quantity": event.previous_quantity,
                "new_quantity": event.new_quantity,
            },
            occurred_at=event.updated_at,
        )

    @on(AdjustmentProposed)
    def on_adjustment_proposed(self, event):
        record_activity(
            event.requested_by,
            ActivityAction.CREATE,
            "InventoryAdjustment",
            event.adjustment_id,
            f"Proposed adjustment {event.adjustment_number} ({event.reason})",
            metadata={"warehouse_id": str(event.warehouse_id), "lines": _line_count(event.lines)},
            occurred_at=event.proposed_at,
        )

    @on(AdjustmentApproved)
    def on_adjustment_approved(self, event):
        record_activity(
            event.reviewed_by,
            ActivityAction.APPROVE,
            "InventoryAdjustment",
            event.adjustment_id,
            f"Approved adjustment {event.adjustment_number}",
            metadata={"warehouse_id": str(event.warehouse_id), "lines": _line_count(event.lines)},
            occurred_at=event.approved_at,
        )

    @on(AdjustmentRejected)
    def on_adjustment_rejected(self, event):
        record_activity(
            event.reviewed_by,
            ActivityAction.REJECT,
            "InventoryAdjustment",
            event.adjustment_id,
            f"Rejected adjustment {event.adjustment_number}",
            metadata={"review_note": event.review_note} if event.review_note else None,
            occurred_at=event.rejected_at,
        )

    @on(AdjustmentDeleted)
    def on_adjustment_deleted(self, event):
        record_activity(
            event.deleted_by,
            ActivityAction.DELETE,
            "InventoryAdjustment",
            event.adjustment_id,
            f"Deleted {event.status} adjustment {event.adjustment_number}",
            metadata={"warehouse_id": str(event.warehouse_id)},
            occurred_at=event.deleted_at,
        )

    @on(TransferRequested)
    def on_transfer_requested(self, event):
        record_activity(
            event.requested_by,
            ActivityAction.CREATE,
            "StockTransfer",
            event.transfer_id,
            f"Requested transfer {event.transfer_number}",
            metadata={
                "from_warehouse_id": str(event.from_warehouse_id),
                "to_warehouse_id": str(event.to_warehouse_id),
                "lines": _line_count(event.lines),
            },
            occurred_at=event.requested_at,
        )

    @on(TransferDispatched)
    def on_transfer_dispatched(self, event):
        record_activity(
            event.approved_by,
            ActivityAction.DISPATCH,
            "StockTransfer",
            event.transfer_id,
            f"Dispatched transfer {event.transfer_number}",
            occurred_at=event.dispatched_at,
        )

    @on(TransferCompleted)
    def on_transfer_completed(self, event):
        record_activity(
            event.completed_by,
            ActivityAction.COMPLETE,
            "StockTransfer",
            event.transfer_id,
            f"Completed transfer {event.transfer_number}",
            occurred_at=event.completed_at,
        )

    @on(TransferCancelled)
    def on_transfer_cancelled(self, event):
        record_activity(
            event.cancelled_by,
            ActivityAction.CANCEL,
            "StockTransfer",
            event.transfer_id,
            f"Cancelled transfer {event.transfer_number}",
            metadata={"restocked": event.restocked, "reason": event.reason},
            occurred_at=event.cancelled_at,
        )

    @on(TransferDeleted)
    def on_transfer_deleted(self, event):
        record_activity(
            event.deleted_by,
            ActivityAction.DELETE,
            "StockTransfer",
            event.transfer_id,
            f"Deleted {event.status} transfer {event.transfer_number}",
            occurred_at=event.deleted_at,
        )
