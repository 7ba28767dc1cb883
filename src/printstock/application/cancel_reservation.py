"""Application service: Cancel Reservation use case.

Cancelling releases the held quantity; on-hand stock is not touched.
Cancelling an already cancelled reservation succeeds silently.
"""

from __future__ import annotations

from printstock.domain.service.reservation_engine import ReservationEngine


class CancelReservationHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def handle(self, reservation_id: int, reason: str | None = None) -> None:
        self._engine.cancel(reservation_id, reason)

    def handle_order(self, order_id: int, reason: str | None = None) -> int:
        """Release every active reservation of an order; return how many."""
        return self._engine.release_for_order(order_id, reason)
