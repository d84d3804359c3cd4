"""Domain events for the StockTransfer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String, Text

from warehousing.domain import warehousing


@warehousing.event(part_of="StockTransfer")
class TransferRequested:
    __version__ = 1

    transfer_id = Identifier(required=True)
    transfer_number = String(required=True)
    from_warehouse_id = Identifier(required=True)
    to_warehouse_id = Identifier(required=True)
    lines = Text(required=True)  # JSON list of {product_id, quantity, notes}
    requested_by = String()
    requested_at = DateTime(required=True)


@warehousing.event(part_of="StockTransfer")
class TransferDispatched:
    """Units left the source warehouse and are now in transit."""

    __version__ = 1

    transfer_id = Identifier(required=True)
    transfer_number = String(required=True)
    from_warehouse_id = Identifier(required=True)
    lines = Text(required=True)
    approved_by = String()
    dispatched_at = DateTime(required=True)


@warehousing.event(part_of="StockTransfer")
class TransferCompleted:
    """Units arrived at the destination warehouse."""

    __version__ = 1

    transfer_id = Identifier(required=True)
    transfer_number = String(required=True)
    to_warehouse_id = Identifier(required=True)
    lines = Text(required=True)
    completed_by = String()
    completed_at = DateTime(required=True)


@warehousing.event(part_of="StockTransfer")
class TransferCancelled:
    __version__ = 1

    transfer_id = Identifier(required=True)
    transfer_number = String(required=True)
    from_warehouse_id = Identifier(required=True)
    restocked = Boolean(default=False)
    reason = String()
    cancelled_by = String()
    cancelled_at = DateTime(required=True)


@warehousing.event(part_of="StockTransfer")
class TransferDeleted:
    __version__ = 1

    transfer_id = Identifier(required=True)
    transfer_number = String(required=True)
    status = String(required=True)  # status at the time of deletion
    deleted_by = String()
    deleted_at = DateTime(required=True)
