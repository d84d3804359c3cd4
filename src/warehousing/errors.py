"""Error kinds raised by the warehousing domain.

Unresolved ids surface as ``protean.exceptions.ObjectNotFoundError`` and
malformed input as ``protean.exceptions.ValidationError``; the two classes
below narrow those for stock shortfalls and forbidden workflow transitions.
"""

from protean.exceptions import InvalidStateError, ValidationError


class InsufficientStockError(ValidationError):
    """A debit or hold asked for more units than a ledger entry has available."""

    @classmethod
    def for_product(cls, product_id, available, requested):
        return cls(
            {"quantity": [f"Insufficient stock for product {product_id}: {available} available, {requested} requested"]}
        )


class InvalidTransitionError(InvalidStateError):
    """A workflow operation was attempted from a state that forbids it."""

    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages
