"""Material aggregate: the physical stock record for one material.

Each material (a paper grade, an ink, a roll of film) has exactly one record
holding the quantity currently on the shelf. Reservations never touch this
number; only fulfillment and manual stock transactions do.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from printstock.domain.exceptions import InsufficientOnHandError, ValidationError
from printstock.domain.model.value_objects import Quantity


@dataclass
class Material:
    """Aggregate root for physical stock.

    Invariants:
    - ``on_hand_quantity`` is never negative
    - ``min_stock_level``, when set, is never negative
    """

    id: int | None
    name: str
    unit: str
    on_hand_quantity: Decimal = Decimal("0")
    min_stock_level: Decimal | None = None

    # --- Factory (used for NEW materials only) --------------------------------

    @staticmethod
    def create(
        name: str,
        unit: str,
        on_hand_quantity: Decimal = Decimal("0"),
        min_stock_level: Decimal | None = None,
    ) -> Material:
        if not name or not name.strip():
            raise ValidationError("Material name is required")
        if not unit or not unit.strip():
            raise ValidationError("Material unit is required")
        if on_hand_quantity < 0:
            raise ValidationError("On-hand quantity cannot be negative")
        if min_stock_level is not None and min_stock_level < 0:
            raise ValidationError("Minimum stock level cannot be negative")
        return Material(
            id=None,
            name=name.strip(),
            unit=unit.strip(),
            on_hand_quantity=on_hand_quantity,
            min_stock_level=min_stock_level,
        )

    # --- Stock movements ------------------------------------------------------

    def decrement(self, amount: Quantity) -> Decimal:
        """Remove *amount* from the shelf and return the new on-hand figure.

        Raises InsufficientOnHandError rather than going negative.
        """
        if amount.value > self.on_hand_quantity:
            raise InsufficientOnHandError(self.id, amount.value, self.on_hand_quantity)  # type: ignore[arg-type]
        self.on_hand_quantity -= amount.value
        return self.on_hand_quantity

    def increment(self, amount: Quantity) -> Decimal:
        """Add received stock and return the new on-hand figure."""
        self.on_hand_quantity += amount.value
        return self.on_hand_quantity
