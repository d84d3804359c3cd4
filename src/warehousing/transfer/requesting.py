"""Request a stock transfer — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from warehousing.catalog.product import get_product
from warehousing.domain import warehousing
from warehousing.transfer.transfer import StockTransfer
from warehousing.utils.lines import parse_lines
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="StockTransfer")
class RequestTransfer:
    from_warehouse_id = Identifier(required=True)
    to_warehouse_id = Identifier(required=True)
    lines = Text(required=True)  # JSON list of {product_id, quantity, notes}
    notes = String(max_length=500)
    requested_by = String(max_length=255)


def _require_active(warehouse, field):
    if not warehouse.is_active:
        raise ValidationError({field: [f"Warehouse {warehouse.code} is inactive"]})


@warehousing.command_handler(part_of=StockTransfer)
class TransferRequestHandler:
    @handle(RequestTransfer)
    def request_transfer(self, command):
        lines = parse_lines(command.lines, ("quantity",))
        if str(command.from_warehouse_id) == str(command.to_warehouse_id):
            raise ValidationError({"to_warehouse_id": ["Source and destination warehouses must be different"]})

        warehouse_repo = current_domain.repository_for(Warehouse)
        source = warehouse_repo.get(command.from_warehouse_id)
        destination = warehouse_repo.get(command.to_warehouse_id)
        _require_active(source, "from_warehouse_id")
        _require_active(destination, "to_warehouse_id")
        for line in lines:
            get_product(line.get("product_id"))

        repo = current_domain.repository_for(StockTransfer)
        transfer = StockTransfer.request(
            transfer_number=repo.next_transfer_number(),
            from_warehouse_id=source.id,
            to_warehouse_id=destination.id,
            lines=lines,
            requested_by=command.requested_by,
            notes=command.notes,
        )
        repo.add(transfer)
        logger.info(
            "Transfer requested",
            transfer_id=str(transfer.id),
            transfer_number=transfer.transfer_number,
            from_warehouse_id=str(source.id),
            to_warehouse_id=str(destination.id),
        )
        return str(transfer.id)
