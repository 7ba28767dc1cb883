"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world. Quantities and
timestamps are pre-formatted strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from printstock.domain.model.reservation import Reservation


@dataclass(frozen=True)
class RequirementSpec:
    """Input: one material an order item needs.

    ``quantity_per_item`` is multiplied by ``item_count`` (e.g. 2 sheets
    per flyer x 500 flyers).
    """

    material_id: int
    quantity_per_item: str
    item_count: int = 1


@dataclass(frozen=True)
class ReservationDTO:
    """Output: a reservation as displayed to the user."""

    id: int
    material_id: int
    order_id: int | None
    quantity_reserved: str
    status: str
    reserved_at: str
    expires_at: str | None
    reserved_by: str | None
    notes: str | None
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class AvailabilityDTO:
    material_id: int
    on_hand: str
    reserved: str
    available: str


@dataclass(frozen=True)
class MaterialLineDTO:
    id: int
    name: str
    unit: str
    on_hand: str
    reserved: str
    available: str
    min_stock_level: str | None


def reservation_to_dto(reservation: Reservation) -> ReservationDTO:
    return ReservationDTO(
        id=reservation.id,  # type: ignore[arg-type]
        material_id=reservation.material_id,
        order_id=reservation.order_id,
        quantity_reserved=str(reservation.quantity_reserved),
        status=reservation.status.value,
        reserved_at=_fmt(reservation.reserved_at),
        expires_at=_fmt(reservation.expires_at) if reservation.expires_at else None,
        reserved_by=reservation.reserved_by,
        notes=reservation.notes,
        created_at=_fmt(reservation.created_at),
        updated_at=_fmt(reservation.updated_at),
    )


def _fmt(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")
