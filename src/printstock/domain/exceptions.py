"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each class carries a short ``code`` that outer layers use to tell error kinds
apart without parsing messages.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "domain_error"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "validation_error"


class InvalidQuantityError(ValidationError):
    """A reserved or adjusted quantity is zero, negative or not a number."""

    code = "invalid_quantity"


class InvalidExpiryError(ValidationError):
    """An expiry timestamp is not in the future."""

    code = "invalid_expiry"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "not_found"


class InvalidStateError(DomainException):
    """The operation is not allowed in the reservation's current status."""

    code = "invalid_state"


class InsufficientStockError(DomainException):
    """The request would reserve more than is currently available."""

    code = "insufficient_stock"

    def __init__(self, material_id: int, requested: Decimal, available: Decimal) -> None:
        self.material_id = material_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for material #{material_id} "
            f"(requested {requested}, available {available}, short by {self.shortfall})"
        )

    @property
    def shortfall(self) -> Decimal:
        return self.requested - self.available


class InsufficientOnHandError(DomainException):
    """A ledger decrement asked for more than is physically on hand."""

    code = "insufficient_on_hand"

    def __init__(self, material_id: int, requested: Decimal, on_hand: Decimal) -> None:
        self.material_id = material_id
        self.requested = requested
        self.on_hand = on_hand
        super().__init__(
            f"Cannot remove {requested} of material #{material_id} "
            f"— only {on_hand} on hand"
        )


class LedgerInconsistencyError(DomainException):
    """Fulfillment found less stock on hand than an active reservation holds.

    This can only happen if the stock invariant was broken upstream, so it is
    treated as data corruption rather than a normal rejection.
    """

    code = "ledger_inconsistency"
