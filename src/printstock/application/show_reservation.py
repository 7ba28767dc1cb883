"""Application service: Show / List Reservations use cases (queries)."""

from __future__ import annotations

from printstock.application.dto import ReservationDTO, reservation_to_dto
from printstock.domain.exceptions import ValidationError
from printstock.domain.model.reservation import ReservationStatus
from printstock.domain.service.reservation_engine import ReservationEngine


class ShowReservationHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def handle(self, reservation_id: int) -> ReservationDTO:
        return reservation_to_dto(self._engine.get(reservation_id))


class ListReservationsHandler:

    def __init__(self, engine: ReservationEngine) -> None:
        self._engine = engine

    def handle(
        self,
        material_id: int | None = None,
        status: str | None = None,
        order_id: int | None = None,
    ) -> list[ReservationDTO]:
        reservations = self._engine.list(
            material_id=material_id,
            status=self._parse_status(status),
            order_id=order_id,
        )
        return [reservation_to_dto(r) for r in sorted(reservations, key=lambda r: r.id or 0)]

    @staticmethod
    def _parse_status(raw: str | None) -> ReservationStatus | None:
        if raw is None:
            return None
        try:
            return ReservationStatus(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in ReservationStatus)
            raise ValidationError(f"Unknown status '{raw}'. Expected one of: {allowed}")
