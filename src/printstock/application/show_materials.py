"""Application service: Show Materials use case (query)."""

from __future__ import annotations

from printstock.application.dto import MaterialLineDTO
from printstock.domain.repository.material_ledger import MaterialLedger
from printstock.domain.service.availability import AvailabilityCalculator


class ShowMaterialsHandler:

    def __init__(
        self,
        ledger: MaterialLedger,
        availability: AvailabilityCalculator,
    ) -> None:
        self._ledger = ledger
        self._availability = availability

    def handle(self) -> list[MaterialLineDTO]:
        lines: list[MaterialLineDTO] = []
        for material in sorted(self._ledger.list_all(), key=lambda m: m.id or 0):
            reserved = self._availability.reserved_quantity(material.id)  # type: ignore[arg-type]
            lines.append(
                MaterialLineDTO(
                    id=material.id,  # type: ignore[arg-type]
                    name=material.name,
                    unit=material.unit,
                    on_hand=str(material.on_hand_quantity),
                    reserved=str(reserved),
                    available=str(material.on_hand_quantity - reserved),
                    min_stock_level=(
                        str(material.min_stock_level)
                        if material.min_stock_level is not None
                        else None
                    ),
                )
            )
        return lines
