"""Warehouse aggregate — a stocking location and its inventory ledger.

The ledger is embedded: one LedgerEntry per product the warehouse has ever
held, each carrying physical ``quantity`` and ``reserved`` units. Available
stock is always derived as ``quantity - reserved`` and never stored. Entries
are created the first time stock arrives and are kept at zero afterwards.

Every ledger mutation goes through this aggregate, so a mutation and its
persistence are a single read-modify-write of one warehouse.
"""

import json
import re
from collections import defaultdict
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, ValueObject

from warehousing.domain import warehousing
from warehousing.errors import InsufficientStockError, InvalidTransitionError
from warehousing.warehouse.events import (
    WarehouseActivated,
    WarehouseCreated,
    WarehouseDeactivated,
    WarehouseDeleted,
    WarehouseStockReleased,
    WarehouseStockReserved,
    WarehouseStockUpdated,
    WarehouseUpdated,
)

_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2,10}$")


class LedgerOperation(Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


def normalize_code(code):
    """Warehouse codes are stored trimmed and upper-cased."""
    return code.strip().upper() if code else code


def _coerce_operation(operation):
    if isinstance(operation, LedgerOperation):
        return operation
    try:
        return LedgerOperation(operation)
    except ValueError:
        raise ValidationError({"operation": [f"Unknown ledger operation: {operation}"]}) from None


@warehousing.value_object(part_of="Warehouse")
class WarehouseAddress:
    """Physical address of a warehouse."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@warehousing.entity(part_of="Warehouse")
class LedgerEntry:
    """Stock of one product inside one warehouse."""

    product_id = Identifier(required=True)
    quantity = Integer(min_value=0, default=0)
    reserved = Integer(min_value=0, default=0)

    @invariant.post
    def reserved_cannot_exceed_quantity(self):
        if (self.reserved or 0) > (self.quantity or 0):
            raise ValidationError(
                {"reserved": [f"Reserved ({self.reserved}) cannot exceed quantity ({self.quantity})"]}
            )

    @property
    def available(self) -> int:
        return (self.quantity or 0) - (self.reserved or 0)


@warehousing.aggregate
class Warehouse:
    """A physical location that holds stock."""

    name = String(required=True, max_length=100)
    code = String(required=True, max_length=10, unique=True)
    address = ValueObject(WarehouseAddress)
    phone = String(max_length=30)
    email = String(max_length=254)
    manager_id = Identifier()
    is_active = Boolean(default=True)
    entries = HasMany(LedgerEntry)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def code_must_be_short_alphanumeric(self):
        if self.code and not _CODE_PATTERN.match(self.code):
            raise ValidationError({"code": ["Code must be 2-10 uppercase letters or digits"]})

    @invariant.post
    def one_ledger_entry_per_product(self):
        product_ids = [str(e.product_id) for e in self.entries or []]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"entries": ["A product can only have one ledger entry per warehouse"]})

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    @classmethod
    def create(cls, name, code, address=None, phone=None, email=None, manager_id=None, created_by=None):
        """Register a new, active warehouse with an empty ledger."""
        now = datetime.now(UTC)
        if isinstance(address, dict):
            address = WarehouseAddress(**address)
        warehouse = cls(
            name=name,
            code=normalize_code(code),
            address=address,
            phone=phone,
            email=email,
            manager_id=manager_id,
            created_at=now,
            updated_at=now,
        )
        warehouse.raise_(
            WarehouseCreated(
                warehouse_id=str(warehouse.id),
                name=warehouse.name,
                code=warehouse.code,
                address=json.dumps(address.to_dict()) if address else None,
                created_by=created_by,
                created_at=now,
            )
        )
        return warehouse

    def update_details(self, updated_by=None, **changes):
        """Apply the given non-None detail changes (name, code, address, contact, manager)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if "code" in changes:
            changes["code"] = normalize_code(changes["code"])
        if isinstance(changes.get("address"), dict):
            changes["address"] = WarehouseAddress(**changes["address"])

        for field, value in changes.items():
            setattr(self, field, value)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            WarehouseUpdated(
                warehouse_id=str(self.id),
                name=self.name,
                code=self.code,
                changed_fields=json.dumps(sorted(changes)),
                updated_by=updated_by,
                updated_at=self.updated_at,
            )
        )

    def activate(self, updated_by=None):
        if self.is_active:
            raise InvalidTransitionError({"warehouse": ["Warehouse is already active"]})
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self.raise_(
            WarehouseActivated(
                warehouse_id=str(self.id),
                code=self.code,
                updated_by=updated_by,
                activated_at=self.updated_at,
            )
        )

    def deactivate(self, updated_by=None):
        if not self.is_active:
            raise InvalidTransitionError({"warehouse": ["Warehouse is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(
            WarehouseDeactivated(
                warehouse_id=str(self.id),
                code=self.code,
                updated_by=updated_by,
                deactivated_at=self.updated_at,
            )
        )

    def ensure_deletable(self):
        """Refuse deletion while any ledger entry still holds units."""
        stocked = [str(e.product_id) for e in self.entries or [] if (e.quantity or 0) > 0]
        if stocked:
            raise InvalidTransitionError(
                {"warehouse": [f"Cannot delete warehouse {self.code}: {len(stocked)} product(s) still in stock"]}
            )

    def mark_deleted(self, deleted_by=None):
        self.ensure_deletable()
        self.raise_(
            WarehouseDeleted(
                warehouse_id=str(self.id),
                name=self.name,
                code=self.code,
                deleted_by=deleted_by,
                deleted_at=datetime.now(UTC),
            )
        )

    # ------------------------------------------------------------------
    # Ledger operations
    # ------------------------------------------------------------------
    def entry_for(self, product_id):
        return next((e for e in self.entries or [] if str(e.product_id) == str(product_id)), None)

    def available_stock(self, product_id) -> int:
        """``quantity - reserved`` for the product, or 0 when it has no entry."""
        entry = self.entry_for(product_id)
        return entry.available if entry else 0

    def quantity_of(self, product_id) -> int:
        entry = self.entry_for(product_id)
        return (entry.quantity or 0) if entry else 0

    def _open_entry(self, product_id, quantity):
        entry = LedgerEntry(product_id=str(product_id), quantity=quantity, reserved=0)
        self.add_entries(entry)
        return entry

    def apply_delta(self, product_id, amount, operation=LedgerOperation.ADD):
        """Apply ``amount`` to the product's entry and return ``(previous, new)`` quantity.

        ``add`` opens the entry when missing. ``subtract`` fails with
        InsufficientStockError when the amount exceeds available stock, and
        also when the product has no entry at all, even for an amount of 0.
        ``set`` replaces the quantity, opening the entry when missing, but
        never goes below zero or below the reserved units.
        """
        operation = _coerce_operation(operation)
        if amount is None or amount < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        entry = self.entry_for(product_id)
        previous = (entry.quantity or 0) if entry else 0

        if operation == LedgerOperation.SUBTRACT:
            available = entry.available if entry else 0
            if entry is None or amount > available:
                raise InsufficientStockError.for_product(product_id, available, amount)
            if amount:
                entry.quantity = previous - amount
        elif operation == LedgerOperation.SET and entry is not None:
            if amount < (entry.reserved or 0):
                raise ValidationError(
                    {"quantity": [f"Quantity {amount} is below the {entry.reserved} units reserved"]}
                )
            entry.quantity = amount
        elif entry is None:
            entry = self._open_entry(product_id, amount)
        else:
            entry.quantity = previous + amount

        self.updated_at = datetime.now(UTC)
        return previous, self.quantity_of(product_id)

    def update_stock(self, product_id, amount, operation, updated_by=None) -> int:
        """Direct ledger maintenance; records a WarehouseStockUpdated event."""
        operation = _coerce_operation(operation)
        previous, new = self.apply_delta(product_id, amount, operation)
        entry = self.entry_for(product_id)
        self.raise_(
            WarehouseStockUpdated(
                warehouse_id=str(self.id),
                product_id=str(product_id),
                operation=operation.value,
                amount=amount,
                previous_quantity=previous,
                new_quantity=new,
                reserved=(entry.reserved or 0) if entry else 0,
                updated_by=updated_by,
                updated_at=self.updated_at,
            )
        )
        return new

    def check_availability(self, demands):
        """Validate ``(product_id, quantity)`` demands together, summing repeats.

        Raises InsufficientStockError listing every shortfall; mutates nothing.
        """
        requested = defaultdict(int)
        for product_id, quantity in demands:
            requested[str(product_id)] += quantity

        shortfalls = []
        for product_id, quantity in requested.items():
            available = self.available_stock(product_id)
            if quantity > available:
                shortfalls.append(
                    f"Insufficient stock for product {product_id}: {available} available, {quantity} requested"
                )
        if shortfalls:
            raise InsufficientStockError({"quantity": shortfalls})

    def debit(self, demands):
        """Subtract every demand, or none of them."""
        demands = list(demands)
        self.check_availability(demands)
        for product_id, quantity in demands:
            self.apply_delta(product_id, quantity, LedgerOperation.SUBTRACT)

    def credit(self, demands):
        for product_id, quantity in demands:
            self.apply_delta(product_id, quantity, LedgerOperation.ADD)

    def set_quantity(self, product_id, new_quantity) -> int:
        """Authoritative correction of a product's quantity; returns the previous value.

        A product without an entry only gets one when ``new_quantity`` is positive.
        """
        if self.entry_for(product_id) is None and not new_quantity:
            return 0
        previous, _ = self.apply_delta(product_id, new_quantity, LedgerOperation.SET)
        return previous

    def reserve(self, product_id, quantity, reference=None):
        """Put ``quantity`` available units of the product on hold."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        available = self.available_stock(product_id)
        if quantity > available:
            raise InsufficientStockError.for_product(product_id, available, quantity)

        entry = self.entry_for(product_id)
        entry.reserved = (entry.reserved or 0) + quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            WarehouseStockReserved(
                warehouse_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                new_reserved=entry.reserved,
                reference=reference,
                reserved_at=self.updated_at,
            )
        )

    def release(self, product_id, quantity, reference=None):
        """Return ``quantity`` held units of the product to availability."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        entry = self.entry_for(product_id)
        reserved = (entry.reserved or 0) if entry else 0
        if quantity > reserved:
            raise ValidationError(
                {"quantity": [f"Cannot release {quantity} units of product {product_id}: only {reserved} reserved"]}
            )

        entry.reserved = reserved - quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            WarehouseStockReleased(
                warehouse_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                new_reserved=entry.reserved,
                reference=reference,
                released_at=self.updated_at,
            )
        )
