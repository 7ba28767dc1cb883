"""Application service: Create Reservation use case.

Places a manual hold (or an order-linked hold) on one material. The expiry
may be given as an absolute timestamp or as a number of hours from now.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from printstock.application.dto import ReservationDTO, reservation_to_dto
from printstock.domain.clock import Clock
from printstock.domain.exceptions import InvalidExpiryError
from printstock.domain.service.reservation_engine import ReservationEngine


class CreateReservationHandler:

    def __init__(self, engine: ReservationEngine, clock: Clock) -> None:
        self._engine = engine
        self._clock = clock

    def handle(
        self,
        material_id: int,
        quantity: str,
        order_id: int | None = None,
        expires_at: datetime | None = None,
        expires_in_hours: float | None = None,
        notes: str | None = None,
        reserved_by: str | None = None,
    ) -> ReservationDTO:
        if expires_at is not None and expires_in_hours is not None:
            raise InvalidExpiryError("Give either an expiry time or a number of hours, not both")
        if expires_in_hours is not None:
            if expires_in_hours <= 0:
                raise InvalidExpiryError("Hold duration must be positive")
            expires_at = self._clock.now() + timedelta(hours=expires_in_hours)

        reservation = self._engine.create(
            material_id=material_id,
            quantity_reserved=quantity,
            order_id=order_id,
            expires_at=expires_at,
            notes=notes,
            reserved_by=reserved_by,
        )
        return reservation_to_dto(reservation)
