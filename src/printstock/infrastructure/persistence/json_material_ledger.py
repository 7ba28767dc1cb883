"""JSON-file-backed implementation of MaterialLedger."""

from __future__ import annotations

from decimal import Decimal

from printstock.domain.exceptions import EntityNotFoundError
from printstock.domain.model.material import Material
from printstock.domain.model.value_objects import Quantity
from printstock.domain.repository.material_ledger import MaterialLedger
from printstock.infrastructure.persistence.json_data_store import JsonDataStore


class JsonMaterialLedger(MaterialLedger):

    def __init__(self, store: JsonDataStore) -> None:
        self._store = store

    # --- MaterialLedger interface ---------------------------------------------

    def get_by_id(self, material_id: int) -> Material | None:
        raw = self._find(self._store.load(), material_id)
        return self._to_domain(raw) if raw is not None else None

    def get_on_hand(self, material_id: int) -> Decimal:
        material = self.get_by_id(material_id)
        if material is None:
            raise EntityNotFoundError(f"Material #{material_id} not found")
        return material.on_hand_quantity

    def list_all(self) -> list[Material]:
        return [self._to_domain(raw) for raw in self._store.load()["materials"]]

    def add(self, material: Material) -> Material:
        with self._store.transaction():
            document = self._store.load()
            material.id = document["next_material_id"]
            document["next_material_id"] += 1
            document["materials"].append(self._to_raw(material))
            self._store.persist(document)
        return material

    def decrement(self, material_id: int, amount: Quantity) -> Decimal:
        return self._mutate(material_id, lambda m: m.decrement(amount))

    def increment(self, material_id: int, amount: Quantity) -> Decimal:
        return self._mutate(material_id, lambda m: m.increment(amount))

    # --- Internal helpers -----------------------------------------------------

    def _mutate(self, material_id: int, change) -> Decimal:
        with self._store.transaction():
            document = self._store.load()
            raw = self._find(document, material_id)
            if raw is None:
                raise EntityNotFoundError(f"Material #{material_id} not found")
            material = self._to_domain(raw)
            on_hand = change(material)
            raw.update(self._to_raw(material))
            self._store.persist(document)
        return on_hand

    @staticmethod
    def _find(document: dict, material_id: int) -> dict | None:
        for raw in document["materials"]:
            if raw["id"] == material_id:
                return raw
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(material: Material) -> dict:
        return {
            "id": material.id,
            "name": material.name,
            "unit": material.unit,
            "on_hand_quantity": str(material.on_hand_quantity),
            "min_stock_level": (
                str(material.min_stock_level) if material.min_stock_level is not None else None
            ),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Material:
        min_level = raw.get("min_stock_level")
        return Material(
            id=raw["id"],
            name=raw["name"],
            unit=raw["unit"],
            on_hand_quantity=Decimal(raw["on_hand_quantity"]),
            min_stock_level=Decimal(min_level) if min_level is not None else None,
        )
