"""Domain events for the Warehouse aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from warehousing.domain import warehousing


@warehousing.event(part_of="Warehouse")
class WarehouseCreated:
    """A new warehouse was registered."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    name = String(required=True)
    code = String(required=True)
    address = Text()  # JSON-serialized address
    created_by = String()
    created_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseUpdated:
    """Warehouse identity or contact details were changed."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    name = String(required=True)
    code = String(required=True)
    changed_fields = Text()  # JSON list of field names
    updated_by = String()
    updated_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseActivated:
    __version__ = 1

    warehouse_id = Identifier(required=True)
    code = String(required=True)
    updated_by = String()
    activated_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseDeactivated:
    __version__ = 1

    warehouse_id = Identifier(required=True)
    code = String(required=True)
    updated_by = String()
    deactivated_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseStockUpdated:
    """A ledger entry was changed directly (add, subtract or set)."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    operation = String(required=True)
    amount = Integer(default=0)
    previous_quantity = Integer(default=0)
    new_quantity = Integer(default=0)
    reserved = Integer(default=0)
    updated_by = String()
    updated_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseStockReserved:
    """Units of a ledger entry were put on hold."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=0)
    new_reserved = Integer(default=0)
    reference = String()
    reserved_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseStockReleased:
    """Held units of a ledger entry were returned to availability."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=0)
    new_reserved = Integer(default=0)
    reference = String()
    released_at = DateTime(required=True)


@warehousing.event(part_of="Warehouse")
class WarehouseDeleted:
    """An empty warehouse was removed for good."""

    __version__ = 1

    warehouse_id = Identifier(required=True)
    name = String(required=True)
    code = String(required=True)
    deleted_by = String()
    deleted_at = DateTime(required=True)
