"""Application service: Update Reservation use case."""

from __future__ import annotations

from datetime import datetime

from printstock.application.dto import ReservationDTO, reservation_to_dto
from printstock.domain.exceptions import ValidationError
from printstock.domain.service.reservation_engine import ReservationEngine


class UpdateReservationHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def handle(
        self,
        reservation_id: int,
        quantity: str | None = None,
        expires_at: datetime | None = None,
        notes: str | None = None,
        clear_expiry: bool = False,
    ) -> ReservationDTO:
        if clear_expiry and expires_at is not None:
            raise ValidationError("Cannot set and clear the expiry in one update")
        if quantity is None and expires_at is None and notes is None and not clear_expiry:
            raise ValidationError("Nothing to update")

        reservation = self._engine.update(
            reservation_id,
            quantity_reserved=quantity,
            expires_at=expires_at,
            notes=notes,
            clear_expiry=clear_expiry,
        )
        return reservation_to_dto(reservation)
