"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from printstock.domain.clock import Clock, SystemClock
from printstock.domain.service.expiration_sweeper import ExpirationSweeper
from printstock.domain.service.reservation_engine import ReservationEngine
from printstock.domain.service.threshold_monitor import LoggingNotifier, ThresholdMonitor
from printstock.infrastructure.config import Settings
from printstock.infrastructure.persistence.json_data_store import JsonDataStore
from printstock.infrastructure.persistence.json_material_ledger import JsonMaterialLedger
from printstock.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)


@dataclass
class Container:
    settings: Settings
    store: JsonDataStore
    ledger: JsonMaterialLedger
    reservation_repo: JsonReservationRepository
    engine: ReservationEngine
    sweeper: ExpirationSweeper
    clock: Clock


def build(settings: Settings | None = None, clock: Clock | None = None) -> Container:
    settings = settings or Settings.from_env()
    clock = clock or SystemClock()

    store = JsonDataStore(settings.store_path)
    ledger = JsonMaterialLedger(store)
    reservation_repo = JsonReservationRepository(store)
    monitor = ThresholdMonitor(ledger, LoggingNotifier())

    engine = ReservationEngine(
        reservation_repo=reservation_repo,
        ledger=ledger,
        clock=clock,
        listener=monitor,
        transaction=store.transaction,
    )
    sweeper = ExpirationSweeper(
        reservation_repo=reservation_repo,
        availability=engine.availability,
        clock=clock,
        listener=monitor,
        interval_seconds=settings.sweep_interval_seconds,
    )
    return Container(
        settings=settings,
        store=store,
        ledger=ledger,
        reservation_repo=reservation_repo,
        engine=engine,
        sweeper=sweeper,
        clock=clock,
    )
