"""Application service: Add Material use case."""

from __future__ import annotations

from printstock.domain.exceptions import ValidationError
from printstock.domain.model.material import Material
from printstock.domain.model.value_objects import to_decimal
from printstock.domain.repository.material_ledger import MaterialLedger


class AddMaterialHandler:

    def __init__(self, ledger: MaterialLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        name: str,
        unit: str,
        on_hand: str = "0",
        min_stock_level: str | None = None,
    ) -> Material:
        """Register a new material with its opening stock."""
        for existing in self._ledger.list_all():
            if existing.name.lower() == name.strip().lower():
                raise ValidationError(f"Material '{name.strip()}' already exists")

        material = Material.create(
            name=name,
            unit=unit,
            on_hand_quantity=to_decimal(on_hand),
            min_stock_level=to_decimal(min_stock_level) if min_stock_level is not None else None,
        )
        return self._ledger.add(material)

