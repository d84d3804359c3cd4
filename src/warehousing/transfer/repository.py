"""Repository for the StockTransfer aggregate."""

from protean.utils.query import Q

from warehousing.domain import warehousing
from warehousing.transfer.transfer import StockTransfer, TransferStatus

_NUMBER_PREFIX = "TRF"


@warehousing.repository(part_of=StockTransfer)
class StockTransferRepository:
    def next_transfer_number(self) -> str:
        results = self._dao.query.order_by("-transfer_number").all()
        latest = results.first if results and results.items else None
        sequence = int(latest.transfer_number[len(_NUMBER_PREFIX) :]) if latest else 0
        return f"{_NUMBER_PREFIX}{sequence + 1:06d}"

    def find_by_status(self, status: TransferStatus) -> list[StockTransfer]:
        return self._dao.query.filter(status=status.value).limit(None).all().items

    def search(self, status=None, warehouse_id=None, page=1, limit=10):
        """One page of transfers, most recently requested first.

        ``warehouse_id`` matches either end of a transfer.
        """
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if warehouse_id:
            query = query.filter(Q(from_warehouse_id=warehouse_id) | Q(to_warehouse_id=warehouse_id))
        return query.order_by(["-requested_at", "-transfer_number"]).offset((page - 1) * limit).limit(limit).all()
