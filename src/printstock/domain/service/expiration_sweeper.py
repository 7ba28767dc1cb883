"""ExpirationSweeper -- moves overdue ACTIVE reservations to EXPIRED.

Contract:
    - ``run_once()`` performs one scan-and-update pass and returns a
      ``SweepResult``. It is also what the "cleanup expired" maintenance
      operation calls.
    - ``start()`` / ``stop()`` run passes on a fixed interval in a
      background thread.

Each row is transitioned independently with a compare-and-set on its
version, so a reservation cancelled or fulfilled concurrently is never
expired, and a second pass never touches a row the first pass expired.
A row that raises is logged and left ACTIVE for the next pass.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal

from printstock.domain.clock import Clock, SystemClock
from printstock.domain.repository.reservation_repository import ReservationRepository
from printstock.domain.service.availability import AvailabilityCalculator
from printstock.domain.service.threshold_monitor import AvailabilityListener
from printstock.logging_config import get_logger

logger = get_logger("service.expiration_sweeper")

DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


@dataclass
class SweepResult:
    expired_ids: list[int] = field(default_factory=list)
    skipped_ids: list[int] = field(default_factory=list)
    failed_ids: list[int] = field(default_factory=list)

    @property
    def expired_count(self) -> int:
        return len(self.expired_ids)


class ExpirationSweeper:

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        availability: AvailabilityCalculator,
        clock: Clock | None = None,
        listener: AvailabilityListener | None = None,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Sweep interval must be positive")
        self._reservation_repo = reservation_repo
        self._availability = availability
        self._clock = clock or SystemClock()
        self._listener = listener
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # --- Public API -----------------------------------------------------------

    def run_once(self) -> SweepResult:
        """Expire every active reservation whose expiry is at or before now."""
        now = self._clock.now()
        result = SweepResult()
        touched: set[int] = set()

        for reservation in self._reservation_repo.list_expirable(now):
            reservation_id: int = reservation.id  # type: ignore[assignment]
            try:
                expected_version = reservation.version
                reservation.expire(now)
                if self._reservation_repo.replace(reservation, expected_version):
                    result.expired_ids.append(reservation_id)
                    touched.add(reservation.material_id)
                else:
                    # Cancelled, fulfilled or updated since the scan.
                    result.skipped_ids.append(reservation_id)
            except Exception:
                logger.exception(
                    "reservation_expire_failed",
                    extra={"reservation_id": reservation_id},
                )
                result.failed_ids.append(reservation_id)

        logger.info(
            "sweep_completed",
            extra={
                "expired_count": result.expired_count,
                "skipped_count": len(result.skipped_ids),
                "failed_count": len(result.failed_ids),
            },
        )
        for material_id in sorted(touched):
            self._announce(material_id)
        return result

    def start(self) -> None:
        """Start sweeping in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="reservation-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info("sweeper_started", extra={"interval_seconds": self._interval})

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current pass to finish."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("sweeper_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # --- Internal -------------------------------------------------------------

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("sweep_failed")
            self._stop_event.wait(timeout=self._interval)

    def _announce(self, material_id: int) -> None:
        if self._listener is None:
            return
        try:
            available: Decimal = self._availability.available_quantity(material_id)
            self._listener.availability_changed(material_id, available)
        except Exception:
            logger.exception(
                "availability_listener_failed", extra={"material_id": material_id}
            )
