"""Domain service: Availability.

    available = on_hand - sum(quantity_reserved of ACTIVE reservations)

Reservations past their ``expires_at`` still count until the sweeper has
moved them to EXPIRED. Availability is therefore pessimistic: a stale hold
can block a new one for at most one sweep interval, but a read never has to
race the sweeper to decide whether a hold is still live.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from printstock.domain.model.reservation import ReservationStatus
from printstock.domain.repository.material_ledger import MaterialLedger
from printstock.domain.repository.reservation_repository import ReservationRepository


@dataclass(frozen=True)
class AvailabilitySnapshot:
    material_id: int
    on_hand: Decimal
    reserved: Decimal

    @property
    def available(self) -> Decimal:
        return self.on_hand - self.reserved


class AvailabilityCalculator:

    def __init__(
        self,
        ledger: MaterialLedger,
        reservation_repo: ReservationRepository,
    ) -> None:
        self._ledger = ledger
        self._reservation_repo = reservation_repo

    def snapshot(self, material_id: int) -> AvailabilitySnapshot:
        """Raises EntityNotFoundError for an unknown material."""
        on_hand = self._ledger.get_on_hand(material_id)
        return AvailabilitySnapshot(
            material_id=material_id,
            on_hand=on_hand,
            reserved=self.reserved_quantity(material_id),
        )

    def available_quantity(self, material_id: int) -> Decimal:
        return self.snapshot(material_id).available

    def reserved_quantity(self, material_id: int) -> Decimal:
        active = self._reservation_repo.list(
            material_id=material_id, status=ReservationStatus.ACTIVE
        )
        return sum((r.quantity_reserved.value for r in active), Decimal("0"))
