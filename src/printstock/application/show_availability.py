"""Application service: Show Availability use case (query)."""

from __future__ import annotations

from printstock.application.dto import AvailabilityDTO
from printstock.domain.service.availability import AvailabilityCalculator


class ShowAvailabilityHandler:

    def __init__(self, availability: AvailabilityCalculator) -> None:
        self._availability = availability

    def handle(self, material_id: int) -> AvailabilityDTO:
        snap = self._availability.snapshot(material_id)
        return AvailabilityDTO(
            material_id=material_id,
            on_hand=str(snap.on_hand),
            reserved=str(snap.reserved),
            available=str(snap.available),
        )
