"""Reservation aggregate — a claim on a material's on-hand quantity.

A reservation starts ``active`` and ends in exactly one terminal status.
All lifecycle rules are enforced here; the engine decides *whether* stock is
available, the aggregate decides *whether a transition is legal*.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from printstock.domain.exceptions import InvalidExpiryError, InvalidStateError
from printstock.domain.model.value_objects import Quantity


class ReservationStatus(Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not ReservationStatus.ACTIVE


@dataclass
class Reservation:
    """Aggregate root for material reservations.

    Use the ``Reservation.create()`` factory for new reservations — it
    enforces the creation-time rules. The ``__init__`` is intentionally
    simple so the repository can reconstitute persisted records without
    re-validating them.

    ``version`` is owned by the repository: it is bumped on every write and
    used for compare-and-set, so a caller holding a stale copy can never
    overwrite a newer state.
    """

    id: int | None
    material_id: int
    quantity_reserved: Quantity
    reserved_at: datetime
    created_at: datetime
    updated_at: datetime
    status: ReservationStatus = ReservationStatus.ACTIVE
    order_id: int | None = None
    expires_at: datetime | None = None
    reserved_by: str | None = None
    notes: str | None = None
    version: int = 0

    # --- Factory (used for NEW reservations only) -----------------------------

    @staticmethod
    def create(
        material_id: int,
        quantity: Quantity,
        now: datetime,
        order_id: int | None = None,
        expires_at: datetime | None = None,
        reserved_by: str | None = None,
        notes: str | None = None,
    ) -> Reservation:
        if expires_at is not None and expires_at <= now:
            raise InvalidExpiryError(
                f"Expiry {expires_at.isoformat()} must be after {now.isoformat()}"
            )
        return Reservation(
            id=None,
            material_id=material_id,
            quantity_reserved=quantity,
            reserved_at=now,
            created_at=now,
            updated_at=now,
            order_id=order_id,
            expires_at=expires_at,
            reserved_by=reserved_by,
            notes=_clean(notes),
        )

    # --- Mutations while ACTIVE -----------------------------------------------

    def change_quantity(self, quantity: Quantity, now: datetime) -> None:
        self.require_active("change quantity of")
        self.quantity_reserved = quantity
        self.updated_at = now

    def change_expiry(self, expires_at: datetime | None, now: datetime) -> None:
        """Move or clear the expiry. A new expiry must lie in the future."""
        self.require_active("change expiry of")
        if expires_at is not None and expires_at <= now:
            raise InvalidExpiryError(
                f"Expiry {expires_at.isoformat()} must be after {now.isoformat()}"
            )
        self.expires_at = expires_at
        self.updated_at = now

    def change_notes(self, notes: str | None, now: datetime) -> None:
        self.require_active("edit notes of")
        self.notes = _clean(notes)
        self.updated_at = now

    # --- State transitions ----------------------------------------------------

    def cancel(self, now: datetime, reason: str | None = None) -> None:
        """Transition ACTIVE -> CANCELLED, appending the reason to the notes."""
        self.require_active("cancel")
        self.status = ReservationStatus.CANCELLED
        reason = _clean(reason)
        if reason:
            line = f"Cancelled: {reason}"
            self.notes = f"{self.notes}\n{line}" if self.notes else line
        self.updated_at = now

    def fulfill(self, now: datetime) -> None:
        """Transition ACTIVE -> FULFILLED.

        The ledger decrement must happen in the same transaction
        (coordinated by the engine).
        """
        self.require_active("fulfill")
        self.status = ReservationStatus.FULFILLED
        self.updated_at = now

    def expire(self, now: datetime) -> None:
        """Transition ACTIVE -> EXPIRED. Only the sweeper calls this."""
        self.require_active("expire")
        self.status = ReservationStatus.EXPIRED
        self.updated_at = now

    # --- Computed properties --------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE

    def is_overdue(self, now: datetime) -> bool:
        """True for an active reservation whose expiry has passed."""
        return self.is_active and self.expires_at is not None and self.expires_at <= now

    # --- Guards ---------------------------------------------------------------

    def require_active(self, action: str) -> None:
        if self.status is not ReservationStatus.ACTIVE:
            raise InvalidStateError(
                f"Cannot {action} reservation #{self.id} — current status is "
                f"{self.status.value}, expected active"
            )


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text or None
