"""Review an inventory adjustment — approve, reject or delete."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from warehousing.adjustment.adjustment import AdjustmentStatus, InventoryAdjustment
from warehousing.domain import warehousing
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="InventoryAdjustment")
class ApproveAdjustment:
    adjustment_id = Identifier(required=True)
    approved_by = String(max_length=255)


@warehousing.command(part_of="InventoryAdjustment")
class RejectAdjustment:
    adjustment_id = Identifier(required=True)
    rejected_by = String(max_length=255)
    review_note = String(max_length=500)


@warehousing.command(part_of="InventoryAdjustment")
class DeleteAdjustment:
    adjustment_id = Identifier(required=True)
    deleted_by = String(max_length=255)


@warehousing.command_handler(part_of=InventoryAdjustment)
class AdjustmentReviewHandler:
    @handle(ApproveAdjustment)
    def approve_adjustment(self, command):
        adjustment_repo = current_domain.repository_for(InventoryAdjustment)
        warehouse_repo = current_domain.repository_for(Warehouse)

        adjustment = adjustment_repo.get(command.adjustment_id)
        adjustment.assert_can_transition(AdjustmentStatus.APPROVED)
        warehouse = warehouse_repo.get(adjustment.warehouse_id)

        try:
            adjustment.apply_to(warehouse)
        except ValidationError:
            logger.warning(
                "Adjustment no longer matches the ledger",
                adjustment_id=str(adjustment.id),
                warehouse_id=str(warehouse.id),
            )
            raise
        adjustment.approve(reviewed_by=command.approved_by)

        warehouse_repo.add(warehouse)
        adjustment_repo.add(adjustment)
        logger.info(
            "Adjustment approved",
            adjustment_id=str(adjustment.id),
            adjustment_number=adjustment.adjustment_number,
            approved_by=command.approved_by,
        )

    @handle(RejectAdjustment)
    def reject_adjustment(self, command):
        repo = current_domain.repository_for(InventoryAdjustment)
        adjustment = repo.get(command.adjustment_id)
        adjustment.reject(reviewed_by=command.rejected_by, review_note=command.review_note)
        repo.add(adjustment)

    @handle(DeleteAdjustment)
    def delete_adjustment(self, command):
        repo = current_domain.repository_for(InventoryAdjustment)
        adjustment = repo.get(command.adjustment_id)
        adjustment.mark_deleted(deleted_by=command.deleted_by)

        repo._dao.delete(adjustment)
        logger.info(
            "Adjustment deleted", adjustment_id=str(adjustment.id), adjustment_number=adjustment.adjustment_number
        )
