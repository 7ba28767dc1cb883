"""Application service: Fulfill Reservation use case.

Fulfillment is the only way a reservation turns into a stock deduction:
on-hand drops by the reserved quantity and the reservation is closed.
"""

from __future__ import annotations

from printstock.application.dto import AvailabilityDTO
from printstock.domain.service.reservation_engine import ReservationEngine


class FulfillReservationHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def handle(self, reservation_id: int) -> AvailabilityDTO:
        """Fulfill and return the material's stock figures afterwards."""
        self._engine.fulfill(reservation_id)
        material_id = self._engine.get(reservation_id).material_id
        snap = self._engine.availability.snapshot(material_id)
        return AvailabilityDTO(
            material_id=material_id,
            on_hand=str(snap.on_hand),
            reserved=str(snap.reserved),
            available=str(snap.available),
        )
