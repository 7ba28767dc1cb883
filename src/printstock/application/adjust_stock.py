"""Application service: Adjust Stock use case (manual stock transactions).

Receipts add to on-hand stock. Write-offs (damaged sheets, spoiled ink)
remove from it, but never below what active reservations are holding.
"""

from __future__ import annotations

from decimal import Decimal

from printstock.domain.model.value_objects import Quantity
from printstock.domain.service.reservation_engine import ReservationEngine


class AdjustStockHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def receive(self, material_id: int, quantity: str, reason: str | None = None) -> Decimal:
        """Book incoming stock; return the new on-hand quantity."""
        amount = Quantity.of(quantity)
        return self._engine.adjust_on_hand(material_id, amount.value, reason)

    def write_off(self, material_id: int, quantity: str, reason: str | None = None) -> Decimal:
        """Remove stock from the shelf; return the new on-hand quantity."""
        amount = Quantity.of(quantity)
        return self._engine.adjust_on_hand(material_id, -amount.value, reason)
