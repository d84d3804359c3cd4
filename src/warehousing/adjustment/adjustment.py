"""InventoryAdjustment aggregate — a reviewed correction to ledger quantities.

State Machine:
    PENDING → APPROVED | REJECTED   (both terminal)

An adjustment is proposed against the quantities a requester saw; each line
records the previous and new quantity of one product. Only approval writes to
the warehouse ledger, and it sets quantities outright rather than applying
deltas. Approved adjustments are permanent history and cannot be deleted.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from warehousing.adjustment.events import (
    AdjustmentApproved,
    AdjustmentDeleted,
    AdjustmentProposed,
    AdjustmentRejected,
)
from warehousing.domain import warehousing
from warehousing.errors import InvalidTransitionError
from warehousing.utils.lines import parse_lines


class AdjustmentStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AdjustmentReason(Enum):
    STOCK_COUNT = "stock_count"
    DAMAGED = "damaged"
    LOST = "lost"
    FOUND = "found"
    CORRECTION = "correction"
    OTHER = "other"


_VALID_TRANSITIONS = {
    AdjustmentStatus.PENDING: {AdjustmentStatus.APPROVED, AdjustmentStatus.REJECTED},
    AdjustmentStatus.APPROVED: set(),
    AdjustmentStatus.REJECTED: set(),
}

_DELETABLE_STATUSES = {AdjustmentStatus.PENDING, AdjustmentStatus.REJECTED}

ADJUSTMENT_QUANTITY_FIELDS = ("previous_quantity", "new_quantity", "difference")


@warehousing.entity(part_of="InventoryAdjustment")
class AdjustmentLine:
    product_id = Identifier(required=True)
    previous_quantity = Integer(min_value=0, default=0)
    new_quantity = Integer(min_value=0, default=0)
    difference = Integer(default=0)

    @invariant.post
    def difference_matches_quantities(self):
        if (self.difference or 0) != (self.new_quantity or 0) - (self.previous_quantity or 0):
            raise ValidationError(
                {"difference": [f"Difference for product {self.product_id} must equal new minus previous quantity"]}
            )

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "previous_quantity": self.previous_quantity or 0,
            "new_quantity": self.new_quantity or 0,
            "difference": self.difference or 0,
        }


def _build_line(raw):
    previous = raw.get("previous_quantity")
    new = raw.get("new_quantity")
    if raw.get("product_id") is None or previous is None or new is None:
        raise ValidationError({"lines": ["Each line needs product_id, previous_quantity and new_quantity"]})

    expected = new - previous
    difference = raw.get("difference", expected)
    if difference != expected:
        raise ValidationError(
            {"lines": [f"Difference {difference} for product {raw['product_id']} should be {expected}"]}
        )
    return AdjustmentLine(
        product_id=str(raw["product_id"]),
        previous_quantity=previous,
        new_quantity=new,
        difference=difference,
    )


@warehousing.aggregate
class InventoryAdjustment:
    """A proposed correction of one warehouse's ledger, pending sign-off."""

    adjustment_number = String(required=True, max_length=20)
    warehouse_id = Identifier(required=True)
    reason = String(required=True, choices=AdjustmentReason)
    notes = String(max_length=1000)
    lines = HasMany(AdjustmentLine)
    status = String(choices=AdjustmentStatus, default=AdjustmentStatus.PENDING.value)
    requested_by = String(max_length=255)
    requested_at = DateTime()
    reviewed_by = String(max_length=255)
    reviewed_at = DateTime()
    review_note = String(max_length=500)

    @classmethod
    def propose(cls, adjustment_number, warehouse_id, reason, lines, requested_by=None, notes=None):
        """Build a pending adjustment from line dicts.

        Rejects an empty line list, a product listed twice, and lines whose
        ``difference`` disagrees with their quantities.
        """
        lines = parse_lines(lines, ADJUSTMENT_QUANTITY_FIELDS)
        if not lines:
            raise ValidationError({"lines": ["An adjustment needs at least one line"]})
        product_ids = [str(line.get("product_id")) for line in lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["Each product can appear only once per adjustment"]})

        built = [_build_line(line) for line in lines]
        now = datetime.now(UTC)
        adjustment = cls(
            adjustment_number=adjustment_number,
            warehouse_id=str(warehouse_id),
            reason=reason,
            notes=notes,
            requested_by=requested_by,
            requested_at=now,
        )
        for line in built:
            adjustment.add_lines(line)

        adjustment.raise_(
            AdjustmentProposed(
                adjustment_id=str(adjustment.id),
                adjustment_number=adjustment_number,
                warehouse_id=str(warehouse_id),
                reason=reason,
                lines=adjustment.lines_json(),
                requested_by=requested_by,
                proposed_at=now,
            )
        )
        return adjustment

    def lines_json(self) -> str:
        return json.dumps([line.to_dict() for line in self.lines])

    def assert_can_transition(self, target_status):
        current = AdjustmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                {"status": [f"Cannot move adjustment {self.adjustment_number} from {current.value} to {target_status.value}"]}
            )

    def verify_against(self, warehouse):
        """Require every line's previous quantity to match the ledger right now.

        A product without a ledger entry counts as quantity 0. A new quantity
        below the units already reserved is also refused.
        """
        stale = []
        for line in self.lines:
            current = warehouse.quantity_of(line.product_id)
            if current != (line.previous_quantity or 0):
                stale.append(
                    f"Product {line.product_id}: ledger shows {current}, adjustment expected {line.previous_quantity}"
                )
            entry = warehouse.entry_for(line.product_id)
            if entry is not None and (line.new_quantity or 0) < (entry.reserved or 0):
                stale.append(
                    f"Product {line.product_id}: new quantity {line.new_quantity} is below {entry.reserved} reserved"
                )
        if stale:
            raise ValidationError({"lines": stale})

    def apply_to(self, warehouse):
        """Write the new quantities into ``warehouse`` after verifying every line."""
        self.verify_against(warehouse)
        for line in self.lines:
            warehouse.set_quantity(line.product_id, line.new_quantity or 0)

    def approve(self, reviewed_by=None):
        self.assert_can_transition(AdjustmentStatus.APPROVED)
        now = datetime.now(UTC)
        self.status = AdjustmentStatus.APPROVED.value
        self.reviewed_by = reviewed_by
        self.reviewed_at = now
        self.raise_(
            AdjustmentApproved(
                adjustment_id=str(self.id),
                adjustment_number=self.adjustment_number,
                warehouse_id=str(self.warehouse_id),
                lines=self.lines_json(),
                reviewed_by=reviewed_by,
                approved_at=now,
            )
        )

    def reject(self, reviewed_by=None, review_note=None):
        self.assert_can_transition(AdjustmentStatus.REJECTED)
        now = datetime.now(UTC)
        self.status = AdjustmentStatus.REJECTED.value
        self.reviewed_by = reviewed_by
        self.reviewed_at = now
        self.review_note = review_note
        self.raise_(
            AdjustmentRejected(
                adjustment_id=str(self.id),
                adjustment_number=self.adjustment_number,
                warehouse_id=str(self.warehouse_id),
                reviewed_by=reviewed_by,
                review_note=review_note,
                rejected_at=now,
            )
        )

    def ensure_deletable(self):
        if AdjustmentStatus(self.status) not in _DELETABLE_STATUSES:
            raise InvalidTransitionError(
                {"status": [f"Adjustment {self.adjustment_number} is {self.status} and cannot be deleted"]}
            )

    def mark_deleted(self, deleted_by=None):
        """Check the adjustment may go and record who removed it."""
        self.ensure_deletable()
        self.raise_(
            AdjustmentDeleted(
                adjustment_id=str(self.id),
                adjustment_number=self.adjustment_number,
                warehouse_id=str(self.warehouse_id),
                status=self.status,
                deleted_by=deleted_by,
                deleted_at=datetime.now(UTC),
            )
        )
