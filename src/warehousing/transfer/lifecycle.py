"""Stock transfer lifecycle — dispatch, complete, cancel and delete.

Dispatch debits the source ledger and completion credits the destination.
Each handler checks the transition before touching any ledger, so a refused
transition never moves stock.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from warehousing.domain import warehousing
from warehousing.errors import InsufficientStockError
from warehousing.transfer.transfer import StockTransfer, TransferStatus
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="StockTransfer")
class DispatchTransfer:
    transfer_id = Identifier(required=True)
    approved_by = String(max_length=255)


@warehousing.command(part_of="StockTransfer")
class CompleteTransfer:
    transfer_id = Identifier(required=True)
    completed_by = String(max_length=255)


@warehousing.command(part_of="StockTransfer")
class CancelTransfer:
    transfer_id = Identifier(required=True)
    cancelled_by = String(max_length=255)
    reason = String(max_length=500)


@warehousing.command(part_of="StockTransfer")
class DeleteTransfer:
    transfer_id = Identifier(required=True)
    deleted_by = String(max_length=255)


@warehousing.command_handler(part_of=StockTransfer)
class TransferLifecycleHandler:
    @handle(DispatchTransfer)
    def dispatch_transfer(self, command):
        transfer_repo = current_domain.repository_for(StockTransfer)
        warehouse_repo = current_domain.repository_for(Warehouse)

        transfer = transfer_repo.get(command.transfer_id)
        transfer.assert_can_transition(TransferStatus.IN_TRANSIT)
        source = warehouse_repo.get(transfer.from_warehouse_id)

        try:
            source.debit(transfer.demands())
        except InsufficientStockError:
            logger.warning(
                "Transfer dispatch refused",
                transfer_id=str(transfer.id),
                transfer_number=transfer.transfer_number,
                from_warehouse_id=str(source.id),
            )
            raise
        transfer.dispatch(approved_by=command.approved_by)

        warehouse_repo.add(source)
        transfer_repo.add(transfer)
        logger.info("Transfer dispatched", transfer_id=str(transfer.id), transfer_number=transfer.transfer_number)

    @handle(CompleteTransfer)
    def complete_transfer(self, command):
        transfer_repo = current_domain.repository_for(StockTransfer)
        warehouse_repo = current_domain.repository_for(Warehouse)

        transfer = transfer_repo.get(command.transfer_id)
        transfer.assert_can_transition(TransferStatus.COMPLETED)
        try:
            destination = warehouse_repo.get(transfer.to_warehouse_id)
        except ObjectNotFoundError:
            logger.warning(
                "Transfer destination is gone; transfer stays in transit",
                transfer_id=str(transfer.id),
                to_warehouse_id=str(transfer.to_warehouse_id),
            )
            raise

        destination.credit(transfer.demands())
        transfer.complete(completed_by=command.completed_by)

        warehouse_repo.add(destination)
        transfer_repo.add(transfer)
        logger.info("Transfer completed", transfer_id=str(transfer.id), transfer_number=transfer.transfer_number)

    @handle(CancelTransfer)
    def cancel_transfer(self, command):
        transfer_repo = current_domain.repository_for(StockTransfer)
        warehouse_repo = current_domain.repository_for(Warehouse)

        transfer = transfer_repo.get(command.transfer_id)
        transfer.assert_can_transition(TransferStatus.CANCELLED)
        if transfer.is_in_transit:
            source = warehouse_repo.get(transfer.from_warehouse_id)
            source.credit(transfer.demands())
            warehouse_repo.add(source)

        transfer.cancel(cancelled_by=command.cancelled_by, reason=command.reason)
        transfer_repo.add(transfer)
        logger.info("Transfer cancelled", transfer_id=str(transfer.id), transfer_number=transfer.transfer_number)

    @handle(DeleteTransfer)
    def delete_transfer(self, command):
        repo = current_domain.repository_for(StockTransfer)
        transfer = repo.get(command.transfer_id)
        transfer.mark_deleted(deleted_by=command.deleted_by)

        repo._dao.delete(transfer)
        logger.info("Transfer deleted", transfer_id=str(transfer.id), transfer_number=transfer.transfer_number)
