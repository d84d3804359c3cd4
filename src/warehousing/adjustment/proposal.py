"""Propose an inventory adjustment — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from warehousing.adjustment.adjustment import ADJUSTMENT_QUANTITY_FIELDS, AdjustmentReason, InventoryAdjustment
from warehousing.catalog.product import get_product
from warehousing.domain import warehousing
from warehousing.utils.lines import parse_lines
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="InventoryAdjustment")
class ProposeAdjustment:
    warehouse_id = Identifier(required=True)
    lines = Text(required=True)  # JSON list of {product_id, previous_quantity, new_quantity, difference}
    reason = String(required=True, choices=AdjustmentReason)
    notes = String(max_length=1000)
    requested_by = String(max_length=255)


@warehousing.command_handler(part_of=InventoryAdjustment)
class AdjustmentProposalHandler:
    @handle(ProposeAdjustment)
    def propose_adjustment(self, command):
        lines = parse_lines(command.lines, ADJUSTMENT_QUANTITY_FIELDS)
        warehouse = current_domain.repository_for(Warehouse).get(command.warehouse_id)
        for line in lines:
            get_product(line.get("product_id"))

        repo = current_domain.repository_for(InventoryAdjustment)
        adjustment = InventoryAdjustment.propose(
            adjustment_number=repo.next_adjustment_number(),
            warehouse_id=warehouse.id,
            reason=command.reason,
            lines=lines,
            requested_by=command.requested_by,
            notes=command.notes,
        )
        try:
            adjustment.verify_against(warehouse)
        except ValidationError:
            logger.warning(
                "Adjustment proposal is stale",
                warehouse_id=str(warehouse.id),
                requested_by=command.requested_by,
            )
            raise

        repo.add(adjustment)
        logger.info(
            "Adjustment proposed",
            adjustment_id=str(adjustment.id),
            adjustment_number=adjustment.adjustment_number,
            warehouse_id=str(warehouse.id),
        )
        return str(adjustment.id)
