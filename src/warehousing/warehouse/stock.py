"""Direct ledger maintenance — add/subtract/set stock and holds on a warehouse."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from warehousing.catalog.product import get_product
from warehousing.domain import warehousing
from warehousing.errors import InsufficientStockError
from warehousing.warehouse.warehouse import LedgerOperation, Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="Warehouse")
class UpdateWarehouseStock:
    """Change a product's ledger entry by ``operation`` (add, subtract or set)."""

    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(min_value=0, default=0)
    operation = String(choices=LedgerOperation, default=LedgerOperation.ADD.value)
    updated_by = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class ReserveWarehouseStock:
    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    reference = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class ReleaseWarehouseStock:
    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    reference = String(max_length=255)


@warehousing.command_handler(part_of=Warehouse)
class WarehouseStockHandler:
    @handle(UpdateWarehouseStock)
    def update_stock(self, command):
        get_product(command.product_id)

        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        try:
            new_quantity = warehouse.update_stock(
                command.product_id,
                command.quantity,
                command.operation or LedgerOperation.ADD.value,
                updated_by=command.updated_by,
            )
        except InsufficientStockError:
            logger.warning(
                "Stock update rejected",
                warehouse_id=str(warehouse.id),
                product_id=str(command.product_id),
                operation=command.operation,
                quantity=command.quantity,
            )
            raise
        repo.add(warehouse)
        return new_quantity

    @handle(ReserveWarehouseStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.reserve(command.product_id, command.quantity, reference=command.reference)
        repo.add(warehouse)

    @handle(ReleaseWarehouseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.release(command.product_id, command.quantity, reference=command.reference)
        repo.add(warehouse)
