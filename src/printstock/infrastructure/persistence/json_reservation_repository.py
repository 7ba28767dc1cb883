"""JSON-file-backed implementation of ReservationRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from printstock.domain.model.reservation import Reservation, ReservationStatus
from printstock.domain.model.value_objects import Quantity
from printstock.domain.repository.reservation_repository import ReservationRepository
from printstock.infrastructure.persistence.json_data_store import JsonDataStore


class JsonReservationRepository(ReservationRepository):

    def __init__(self, store: JsonDataStore) -> None:
        self._store = store

    # --- ReservationRepository interface --------------------------------------

    def add(self, reservation: Reservation) -> Reservation:
        with self._store.transaction():
            document = self._store.load()
            reservation.id = document["next_reservation_id"]
            reservation.version = 1
            document["next_reservation_id"] += 1
            document["reservations"].append(self._to_raw(reservation))
            self._store.persist(document)
        return reservation

    def get_by_id(self, reservation_id: int) -> Reservation | None:
        for raw in self._store.load()["reservations"]:
            if raw["id"] == reservation_id:
                return self._to_domain(raw)
        return None

    def list(
        self,
        material_id: int | None = None,
        status: ReservationStatus | None = None,
        order_id: int | None = None,
    ) -> list[Reservation]:
        return [
            self._to_domain(raw)
            for raw in self._store.load()["reservations"]
            if (material_id is None or raw["material_id"] == material_id)
            and (status is None or raw["status"] == status.value)
            and (order_id is None or raw.get("order_id") == order_id)
        ]

    def list_expirable(self, as_of: datetime) -> list[Reservation]:
        return [
            r
            for r in self.list(status=ReservationStatus.ACTIVE)
            if r.expires_at is not None and r.expires_at <= as_of
        ]

    def replace(self, reservation: Reservation, expected_version: int) -> bool:
        with self._store.transaction():
            document = self._store.load()
            records = document["reservations"]
            for i, raw in enumerate(records):
                if raw["id"] != reservation.id:
                    continue
                if raw["version"] != expected_version:
                    return False
                reservation.version = expected_version + 1
                records[i] = self._to_raw(reservation)
                self._store.persist(document)
                return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(reservation: Reservation) -> dict:
        return {
            "id": reservation.id,
            "material_id": reservation.material_id,
            "order_id": reservation.order_id,
            "quantity_reserved": str(reservation.quantity_reserved.value),
            "status": reservation.status.value,
            "reserved_at": reservation.reserved_at.isoformat(),
            "expires_at": _iso(reservation.expires_at),
            "reserved_by": reservation.reserved_by,
            "notes": reservation.notes,
            "created_at": reservation.created_at.isoformat(),
            "updated_at": reservation.updated_at.isoformat(),
            "version": reservation.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Reservation:
        return Reservation(
            id=raw["id"],
            material_id=raw["material_id"],
            order_id=raw.get("order_id"),
            quantity_reserved=Quantity(Decimal(raw["quantity_reserved"])),
            status=ReservationStatus(raw["status"]),
            reserved_at=datetime.fromisoformat(raw["reserved_at"]),
            expires_at=_parse(raw.get("expires_at")),
            reserved_by=raw.get("reserved_by"),
            notes=raw.get("notes"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            version=raw.get("version", 1),
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None
