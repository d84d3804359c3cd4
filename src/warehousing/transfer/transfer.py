"""StockTransfer aggregate — moving stock between two warehouses.

State Machine:
    PENDING → IN_TRANSIT → COMPLETED
    PENDING → CANCELLED
    IN_TRANSIT → CANCELLED

Units are debited from the source when the transfer is dispatched and
credited to the destination only on completion. While in transit they count
towards neither warehouse. Cancelling an in-transit transfer returns the
units to the source.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from warehousing.domain import warehousing
from warehousing.errors import InvalidTransitionError
from warehousing.utils.lines import parse_lines
from warehousing.transfer.events import (
    TransferCancelled,
    TransferCompleted,
    TransferDeleted,
    TransferDispatched,
    TransferRequested,
)


class TransferStatus(Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    TransferStatus.PENDING: {TransferStatus.IN_TRANSIT, TransferStatus.CANCELLED},
    TransferStatus.IN_TRANSIT: {TransferStatus.COMPLETED, TransferStatus.CANCELLED},
    TransferStatus.COMPLETED: set(),
    TransferStatus.CANCELLED: set(),
}

_DELETABLE_STATUSES = {TransferStatus.PENDING, TransferStatus.CANCELLED}


@warehousing.entity(part_of="StockTransfer")
class TransferLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    notes = String(max_length=500)

    def to_dict(self):
        return {"product_id": str(self.product_id), "quantity": self.quantity, "notes": self.notes}


@warehousing.aggregate
class StockTransfer:
    """A request to move stock from one warehouse to another."""

    transfer_number = String(required=True, max_length=20)
    from_warehouse_id = Identifier(required=True)
    to_warehouse_id = Identifier(required=True)
    lines = HasMany(TransferLine)
    status = String(choices=TransferStatus, default=TransferStatus.PENDING.value)
    notes = String(max_length=500)
    requested_by = String(max_length=255)
    requested_at = DateTime()
    approved_by = String(max_length=255)
    approved_at = DateTime()
    completed_by = String(max_length=255)
    completed_at = DateTime()
    cancelled_by = String(max_length=255)
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)

    @invariant.post
    def warehouses_must_differ(self):
        if self.from_warehouse_id and str(self.from_warehouse_id) == str(self.to_warehouse_id):
            raise ValidationError({"to_warehouse_id": ["Source and destination warehouses must be different"]})

    @classmethod
    def request(cls, transfer_number, from_warehouse_id, to_warehouse_id, lines, requested_by=None, notes=None):
        """Create a pending transfer from ``{product_id, quantity, notes}`` line dicts."""
        lines = parse_lines(lines, ("quantity",))
        if str(from_warehouse_id) == str(to_warehouse_id):
            raise ValidationError({"to_warehouse_id": ["Source and destination warehouses must be different"]})
        if not lines:
            raise ValidationError({"lines": ["A transfer needs at least one line"]})
        for line in lines:
            quantity = line.get("quantity")
            if quantity is None or quantity < 1:
                raise ValidationError({"lines": [f"Quantity for product {line.get('product_id')} must be at least 1"]})

        now = datetime.now(UTC)
        transfer = cls(
            transfer_number=transfer_number,
            from_warehouse_id=str(from_warehouse_id),
            to_warehouse_id=str(to_warehouse_id),
            notes=notes,
            requested_by=requested_by,
            requested_at=now,
        )
        for line in lines:
            transfer.add_lines(
                TransferLine(
                    product_id=str(line["product_id"]),
                    quantity=line["quantity"],
                    notes=line.get("notes"),
                )
            )

        transfer.raise_(
            TransferRequested(
                transfer_id=str(transfer.id),
                transfer_number=transfer_number,
                from_warehouse_id=str(from_warehouse_id),
                to_warehouse_id=str(to_warehouse_id),
                lines=transfer.lines_json(),
                requested_by=requested_by,
                requested_at=now,
            )
        )
        return transfer

    def demands(self):
        """``(product_id, quantity)`` pairs, in line order."""
        return [(str(line.product_id), line.quantity) for line in self.lines]

    def lines_json(self) -> str:
        return json.dumps([line.to_dict() for line in self.lines])

    def assert_can_transition(self, target_status):
        current = TransferStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                {"status": [f"Cannot move transfer {self.transfer_number} from {current.value} to {target_status.value}"]}
            )

    def dispatch(self, approved_by=None):
        self.assert_can_transition(TransferStatus.IN_TRANSIT)
        now = datetime.now(UTC)
        self.status = TransferStatus.IN_TRANSIT.value
        self.approved_by = approved_by
        self.approved_at = now
        self.raise_(
            TransferDispatched(
                transfer_id=str(self.id),
                transfer_number=self.transfer_number,
                from_warehouse_id=str(self.from_warehouse_id),
                lines=self.lines_json(),
                approved_by=approved_by,
                dispatched_at=now,
            )
        )

    def complete(self, completed_by=None):
        self.assert_can_transition(TransferStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = TransferStatus.COMPLETED.value
        self.completed_by = completed_by
        self.completed_at = now
        self.raise_(
            TransferCompleted(
                transfer_id=str(self.id),
                transfer_number=self.transfer_number,
                to_warehouse_id=str(self.to_warehouse_id),
                lines=self.lines_json(),
                completed_by=completed_by,
                completed_at=now,
            )
        )

    @property
    def is_in_transit(self) -> bool:
        return self.status == TransferStatus.IN_TRANSIT.value

    def cancel(self, cancelled_by=None, reason=None):
        self.assert_can_transition(TransferStatus.CANCELLED)
        restocked = self.is_in_transit
        now = datetime.now(UTC)
        self.status = TransferStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.cancellation_reason = reason
        self.raise_(
            TransferCancelled(
                transfer_id=str(self.id),
                transfer_number=self.transfer_number,
                from_warehouse_id=str(self.from_warehouse_id),
                restocked=restocked,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def ensure_deletable(self):
        if TransferStatus(self.status) not in _DELETABLE_STATUSES:
            raise InvalidTransitionError(
                {"status": [f"Transfer {self.transfer_number} is {self.status} and cannot be deleted"]}
            )

    def mark_deleted(self, deleted_by=None):
        self.ensure_deletable()
        self.raise_(
            TransferDeleted(
                transfer_id=str(self.id),
                transfer_number=self.transfer_number,
                status=self.status,
                deleted_by=deleted_by,
                deleted_at=datetime.now(UTC),
            )
        )
