"""Repository for the Warehouse aggregate."""

from protean.utils.query import Q

from warehousing.domain import warehousing
from warehousing.warehouse.warehouse import Warehouse, normalize_code


@warehousing.repository(part_of=Warehouse)
class WarehouseRepository:
    def find_by_code(self, code) -> Warehouse | None:
        results = self._dao.query.filter(code=normalize_code(code)).all()
        return results.first if results and results.items else None

    def find_active(self) -> list[Warehouse]:
        return self._dao.query.filter(is_active=True).limit(None).all().items

    def search(self, search=None, is_active=None, page=1, limit=10):
        """One page of warehouses, newest first.

        ``search`` matches name, code or city case-insensitively. The result's
        ``total`` counts every match, not just the page.
        """
        query = self._dao.query
        if search:
            query = query.filter(
                Q(name__icontains=search) | Q(code__icontains=search) | Q(address_city__icontains=search)
            )
        if is_active is not None:
            query = query.filter(is_active=is_active)
        return query.order_by(["-created_at", "code"]).offset((page - 1) * limit).limit(limit).all()
