"""Repository for the InventoryAdjustment aggregate."""

from warehousing.adjustment.adjustment import AdjustmentStatus, InventoryAdjustment
from warehousing.domain import warehousing

_NUMBER_PREFIX = "ADJ"


@warehousing.repository(part_of=InventoryAdjustment)
class InventoryAdjustmentRepository:
    def next_adjustment_number(self) -> str:
        """``ADJ`` followed by the highest existing sequence plus one, zero-padded to six digits."""
        results = self._dao.query.order_by("-adjustment_number").all()
        latest = results.first if results and results.items else None
        sequence = int(latest.adjustment_number[len(_NUMBER_PREFIX) :]) if latest else 0
        return f"{_NUMBER_PREFIX}{sequence + 1:06d}"

    def find_pending(self) -> list[InventoryAdjustment]:
        return self._dao.query.filter(status=AdjustmentStatus.PENDING.value).limit(None).all().items

    def search(self, status=None, warehouse_id=None, reason=None, page=1, limit=10):
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if warehouse_id:
            query = query.filter(warehouse_id=warehouse_id)
        if reason:
            query = query.filter(reason=reason)
        return query.order_by(["-requested_at", "-adjustment_number"]).offset((page - 1) * limit).limit(limit).all()
