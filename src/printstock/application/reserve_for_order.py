"""Application service: Reserve Materials for an Order.

When a print order is accepted, every material its items need is held in
one go: either all holds are placed or none is. Holds expire after the
configured default hold time unless the order is fulfilled or cancelled
first.
"""

from __future__ import annotations

from datetime import timedelta

from printstock.application.dto import RequirementSpec, ReservationDTO, reservation_to_dto
from printstock.domain.clock import Clock
from printstock.domain.exceptions import InvalidQuantityError
from printstock.domain.model.value_objects import Quantity
from printstock.domain.service.reservation_engine import MaterialRequirement, ReservationEngine


class ReserveForOrderHandler:

    def __init__(
        self,
        engine: ReservationEngine,
        clock: Clock,
        default_hold_hours: float,
    ) -> None:
        self._engine = engine
        self._clock = clock
        self._default_hold_hours = default_hold_hours

    def handle(
        self,
        order_id: int,
        specs: list[RequirementSpec],
        hold_hours: float | None = None,
        reserved_by: str | None = None,
    ) -> list[ReservationDTO]:
        requirements = [self._to_requirement(spec) for spec in specs]
        hours = hold_hours if hold_hours is not None else self._default_hold_hours
        expires_at = self._clock.now() + timedelta(hours=hours)

        reservations = self._engine.reserve_for_order(
            order_id=order_id,
            requirements=requirements,
            expires_at=expires_at,
            reserved_by=reserved_by,
        )
        return [reservation_to_dto(r) for r in reservations]

    @staticmethod
    def _to_requirement(spec: RequirementSpec) -> MaterialRequirement:
        if spec.item_count <= 0:
            raise InvalidQuantityError(
                f"Item count for material #{spec.material_id} must be positive"
            )
        per_item = Quantity.of(spec.quantity_per_item)
        return MaterialRequirement(
            material_id=spec.material_id,
            quantity=Quantity(per_item.value * spec.item_count),
        )
