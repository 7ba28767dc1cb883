"""Abstract repository for the Reservation aggregate.

Implementations hand out *copies*: mutating a returned Reservation has no
effect until it is written back with ``replace()``, and that write only
lands if nobody else wrote the record in the meantime.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from printstock.domain.model.reservation import Reservation, ReservationStatus


class ReservationRepository(ABC):

    @abstractmethod
    def add(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation, assigning its ID and initial version."""

    @abstractmethod
    def get_by_id(self, reservation_id: int) -> Reservation | None:
        """Return a reservation by its ID, or None if not found."""

    @abstractmethod
    def list(
        self,
        material_id: int | None = None,
        status: ReservationStatus | None = None,
        order_id: int | None = None,
    ) -> list[Reservation]:
        """Return reservations matching every given filter."""

    @abstractmethod
    def list_expirable(self, as_of: datetime) -> list[Reservation]:
        """Return active reservations whose ``expires_at`` is at or before *as_of*."""

    @abstractmethod
    def replace(self, reservation: Reservation, expected_version: int) -> bool:
        """Compare-and-set write.

        Stores *reservation* and bumps its version only if the stored
        record still has ``expected_version``. On success the version of
        *reservation* itself is bumped too. Returns False (and writes
        nothing) when the record changed underneath the caller.
        """
