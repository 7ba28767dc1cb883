"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from printstock.domain.exceptions import InvalidQuantityError


def to_decimal(value: str | int | Decimal) -> Decimal:
    """Coerce user input to a finite Decimal.

    Floats are rejected: ``Decimal(0.1)`` silently carries binary rounding
    noise into stock figures.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidQuantityError(
            f"Quantity must be a Decimal, int or string, got {type(value).__name__}"
        )
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidQuantityError(f"Invalid quantity: {value!r}") from exc
    if not result.is_finite():
        raise InvalidQuantityError(f"Invalid quantity: {value!r}")
    return result


@dataclass(frozen=True)
class Quantity:
    """A strictly positive decimal amount of material.

    Paper is counted in sheets, ink in millilitres or kilograms, so the
    amount is a Decimal rather than an int.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise InvalidQuantityError(
                f"Quantity must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite() or self.value <= 0:
            raise InvalidQuantityError(f"Quantity must be positive, got {self.value}")

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __lt__(self, other: Quantity) -> bool:
        return self.value < other.value

    def __le__(self, other: Quantity) -> bool:
        return self.value <= other.value

    def __gt__(self, other: Quantity) -> bool:
        return self.value > other.value

    def __ge__(self, other: Quantity) -> bool:
        return self.value >= other.value

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return str(self.value)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal) -> Quantity:
        """Convenient factory that coerces to Decimal safely."""
        return Quantity(to_decimal(amount))
