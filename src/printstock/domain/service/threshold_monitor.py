"""Domain service: low-stock threshold monitoring.

The reservation engine announces every availability change to an
``AvailabilityListener``. ``ThresholdMonitor`` is the listener used in
production: it compares the new figure with the material's minimum stock
level and hands a ``StockAlert`` to a notifier when the material gets
worse (ok -> low -> out). Delivery (Telegram, e-mail) is the notifier's
business.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from printstock.domain.repository.material_ledger import MaterialLedger
from printstock.logging_config import get_logger

logger = get_logger("service.threshold_monitor")


class AvailabilityListener(ABC):

    @abstractmethod
    def availability_changed(self, material_id: int, new_available: Decimal) -> None:
        """Called after any operation that changed a material's availability."""


class StockLevel(Enum):
    OK = "ok"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {StockLevel.OK: 0, StockLevel.LOW_STOCK: 1, StockLevel.OUT_OF_STOCK: 2}


@dataclass(frozen=True)
class StockAlert:
    material_id: int
    material_name: str
    level: StockLevel
    available: Decimal
    min_stock_level: Decimal | None


class Notifier(ABC):

    @abstractmethod
    def notify(self, alert: StockAlert) -> None:
        """Deliver an alert. May raise; the monitor never retries."""


class ThresholdMonitor(AvailabilityListener):
    """Edge-triggered low-stock detector.

    Remembers the last level seen per material and only alerts when the
    level becomes more severe, so a burst of reservations on a scarce
    material produces one alert, not one per reservation.
    """

    def __init__(self, ledger: MaterialLedger, notifier: Notifier) -> None:
        self._ledger = ledger
        self._notifier = notifier
        self._levels: dict[int, StockLevel] = {}
        self._lock = threading.Lock()

    def availability_changed(self, material_id: int, new_available: Decimal) -> None:
        material = self._ledger.get_by_id(material_id)
        if material is None:
            return

        level = self.classify(new_available, material.min_stock_level)
        with self._lock:
            previous = self._levels.get(material_id, StockLevel.OK)
            self._levels[material_id] = level
        if level.severity <= previous.severity:
            return

        self._notifier.notify(
            StockAlert(
                material_id=material_id,
                material_name=material.name,
                level=level,
                available=new_available,
                min_stock_level=material.min_stock_level,
            )
        )

    @staticmethod
    def classify(available: Decimal, min_stock_level: Decimal | None) -> StockLevel:
        if available <= 0:
            return StockLevel.OUT_OF_STOCK
        if min_stock_level is not None and available <= min_stock_level:
            return StockLevel.LOW_STOCK
        return StockLevel.OK


class LoggingNotifier(Notifier):
    """Default notifier: writes the alert to the log at WARNING."""

    def notify(self, alert: StockAlert) -> None:
        logger.warning(
            "stock_alert",
            extra={
                "material_id": alert.material_id,
                "material_name": alert.material_name,
                "alert_type": alert.level.value,
                "available": alert.available,
                "min_stock_level": alert.min_stock_level,
            },
        )
