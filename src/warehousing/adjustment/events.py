"""Domain events for the InventoryAdjustment aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from warehousing.domain import warehousing


@warehousing.event(part_of="InventoryAdjustment")
class AdjustmentProposed:
    """A quantity correction was proposed and awaits review."""

    __version__ = 1

    adjustment_id = Identifier(required=True)
    adjustment_number = String(required=True)
    warehouse_id = Identifier(required=True)
    reason = String(required=True)
    lines = Text(required=True)  # JSON list of line dicts
    requested_by = String()
    proposed_at = DateTime(required=True)


@warehousing.event(part_of="InventoryAdjustment")
class AdjustmentApproved:
    """An adjustment was approved and written to the warehouse ledger."""

    __version__ = 1

    adjustment_id = Identifier(required=True)
    adjustment_number = String(required=True)
    warehouse_id = Identifier(required=True)
    lines = Text(required=True)
    reviewed_by = String()
    approved_at = DateTime(required=True)


@warehousing.event(part_of="InventoryAdjustment")
class AdjustmentRejected:
    __version__ = 1

    adjustment_id = Identifier(required=True)
    adjustment_number = String(required=True)
    warehouse_id = Identifier(required=True)
    reviewed_by = String()
    review_note = String()
    rejected_at = DateTime(required=True)


@warehousing.event(part_of="InventoryAdjustment")
class AdjustmentDeleted:
    __version__ = 1

    adjustment_id = Identifier(required=True)
    adjustment_number = String(required=True)
    warehouse_id = Identifier(required=True)
    status = String(required=True)  # status at the time of deletion
    deleted_by = String()
    deleted_at = DateTime(required=True)
