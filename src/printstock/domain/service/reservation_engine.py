"""Domain service: Reservation Engine.

Creates, updates, cancels and fulfills reservations while keeping

    sum(active quantity_reserved) <= on_hand_quantity

true for every material, under real thread parallelism.

Two concurrency tools are combined:

  * A per-material lock serializes every path that can *grow* the reserved
    total or *shrink* on-hand stock (create, quantity updates, fulfill,
    write-offs). Within the lock the availability check and the write form
    one critical section.
  * Cancel and expire only ever shrink the reserved total, so they skip the
    lock and rely on the repository's compare-and-set instead: a transition
    lands only if the record is still the version that was read.

Every locked path also runs inside the persistence backend's transaction,
which is what extends the critical section to other processes sharing a
file store. For fulfill it also means the ledger decrement and the status
change commit or roll back together.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from printstock.domain.clock import Clock, SystemClock, as_utc
from printstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientOnHandError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidStateError,
    LedgerInconsistencyError,
)
from printstock.domain.model.reservation import Reservation, ReservationStatus
from printstock.domain.model.value_objects import Quantity, to_decimal
from printstock.domain.repository.material_ledger import MaterialLedger
from printstock.domain.repository.reservation_repository import ReservationRepository
from printstock.domain.service.availability import AvailabilityCalculator
from printstock.domain.service.threshold_monitor import AvailabilityListener
from printstock.logging_config import get_logger

logger = get_logger("service.reservation_engine")

TransactionFactory = Callable[[], AbstractContextManager]

# Optimistic retries for cancel. Each retry means another writer touched
# the same record, so contention this high is already a bug elsewhere.
MAX_CAS_ATTEMPTS = 5


@dataclass(frozen=True)
class MaterialRequirement:
    """One material needed by an order: ``quantity`` of ``material_id``."""

    material_id: int
    quantity: Quantity


class _MaterialLocks:
    """Lazily created lock per material id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, material_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(material_id)
            if lock is None:
                lock = self._locks[material_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *material_ids: int) -> Iterator[None]:
        # Ascending id order so multi-material callers cannot deadlock.
        locks = [self._lock_for(mid) for mid in sorted(set(material_ids))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


class ReservationEngine:

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        ledger: MaterialLedger,
        clock: Clock | None = None,
        listener: AvailabilityListener | None = None,
        transaction: TransactionFactory | None = None,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._ledger = ledger
        self._clock = clock or SystemClock()
        self._listener = listener
        self._transaction = transaction or nullcontext
        self._availability = AvailabilityCalculator(ledger, reservation_repo)
        self._locks = _MaterialLocks()

    @property
    def availability(self) -> AvailabilityCalculator:
        return self._availability

    # --- Queries --------------------------------------------------------------

    def available_quantity(self, material_id: int) -> Decimal:
        return self._availability.available_quantity(material_id)

    def get(self, reservation_id: int) -> Reservation:
        reservation = self._reservation_repo.get_by_id(reservation_id)
        if reservation is None:
            raise EntityNotFoundError(f"Reservation #{reservation_id} not found")
        return reservation

    def list(
        self,
        material_id: int | None = None,
        status: ReservationStatus | None = None,
        order_id: int | None = None,
    ) -> list[Reservation]:
        return self._reservation_repo.list(
            material_id=material_id, status=status, order_id=order_id
        )

    # --- Commands -------------------------------------------------------------

    def create(
        self,
        material_id: int,
        quantity_reserved: str | int | Decimal | Quantity,
        order_id: int | None = None,
        expires_at: datetime | None = None,
        notes: str | None = None,
        reserved_by: str | None = None,
    ) -> Reservation:
        """Reserve stock of one material.

        Validation order: quantity, expiry, then availability under the
        material lock. An expiry without a timezone is taken as UTC.
        Raises InvalidQuantityError, InvalidExpiryError, EntityNotFoundError
        or InsufficientStockError.
        """
        quantity = _as_quantity(quantity_reserved)
        reservation = Reservation.create(
            material_id=material_id,
            quantity=quantity,
            now=self._clock.now(),
            order_id=order_id,
            expires_at=as_utc(expires_at),
            reserved_by=reserved_by,
            notes=notes,
        )

        with self._locks.hold(material_id), self._transaction():
            available = self._availability.available_quantity(material_id)
            self._check_fits(material_id, quantity.value, available)
            saved = self._reservation_repo.add(reservation)

        logger.info(
            "reservation_created",
            extra={
                "reservation_id": saved.id,
                "material_id": material_id,
                "quantity": quantity.value,
                "order_id": order_id,
                "expires_at": saved.expires_at,
            },
        )
        self._announce(material_id, available - quantity.value)
        return saved

    def update(
        self,
        reservation_id: int,
        quantity_reserved: str | int | Decimal | Quantity | None = None,
        expires_at: datetime | None = None,
        notes: str | None = None,
        clear_expiry: bool = False,
    ) -> Reservation:
        """Change quantity, expiry or notes of an active reservation.

        ``expires_at`` is validated before the quantity, so a call that both
        moves the expiry into the past and grows the quantity fails with
        InvalidExpiryError and writes nothing. An increase must satisfy
        ``new <= available + old``.
        """
        new_quantity = _as_quantity(quantity_reserved) if quantity_reserved is not None else None
        material_id = self.get(reservation_id).material_id

        with self._locks.hold(material_id), self._transaction():
            reservation = self.get(reservation_id)
            reservation.require_active("update")
            expected_version = reservation.version
            old_quantity = reservation.quantity_reserved
            now = self._clock.now()

            if clear_expiry:
                reservation.change_expiry(None, now)
            elif expires_at is not None:
                reservation.change_expiry(as_utc(expires_at), now)

            if new_quantity is not None and new_quantity != old_quantity:
                if new_quantity > old_quantity:
                    available = self._availability.available_quantity(material_id)
                    self._check_fits(material_id, new_quantity.value, available + old_quantity.value)
                reservation.change_quantity(new_quantity, now)

            if notes is not None:
                reservation.change_notes(notes, now)

            if not self._reservation_repo.replace(reservation, expected_version):
                raise self._lost_race(reservation_id, "update")

        logger.info(
            "reservation_updated",
            extra={
                "reservation_id": reservation_id,
                "material_id": material_id,
                "quantity": reservation.quantity_reserved.value,
                "expires_at": reservation.expires_at,
            },
        )
        if new_quantity is not None and new_quantity != old_quantity:
            self._announce(material_id)
        return reservation

    def cancel(self, reservation_id: int, reason: str | None = None) -> None:
        """Cancel an active reservation, releasing its hold.

        Cancelling an already cancelled reservation is a successful no-op;
        cancelling a fulfilled or expired one raises InvalidStateError.
        """
        for _ in range(MAX_CAS_ATTEMPTS):
            reservation = self.get(reservation_id)
            if reservation.status is ReservationStatus.CANCELLED:
                logger.info("reservation_cancel_noop", extra={"reservation_id": reservation_id})
                return
            expected_version = reservation.version
            reservation.cancel(self._clock.now(), reason)
            if self._reservation_repo.replace(reservation, expected_version):
                break
        else:
            raise self._lost_race(reservation_id, "cancel")

        logger.info(
            "reservation_cancelled",
            extra={
                "reservation_id": reservation_id,
                "material_id": reservation.material_id,
                "quantity": reservation.quantity_reserved.value,
                "reason": reason,
            },
        )
        self._announce(reservation.material_id)

    def fulfill(self, reservation_id: int) -> None:
        """Convert an active reservation into a physical stock deduction.

        The ledger decrement and the FULFILLED transition share one
        transaction. A ledger refusal means on-hand had already fallen below
        an active hold, which the engine never allows, so it is reported as
        LedgerInconsistencyError and logged at CRITICAL.
        """
        material_id = self.get(reservation_id).material_id

        with self._locks.hold(material_id), self._transaction():
            reservation = self.get(reservation_id)
            expected_version = reservation.version
            reservation.fulfill(self._clock.now())
            quantity = reservation.quantity_reserved

            try:
                on_hand = self._ledger.decrement(material_id, quantity)
            except InsufficientOnHandError as exc:
                logger.critical(
                    "ledger_inconsistency",
                    extra={
                        "reservation_id": reservation_id,
                        "material_id": material_id,
                        "quantity": quantity.value,
                        "on_hand": exc.on_hand,
                    },
                )
                raise LedgerInconsistencyError(
                    f"Reservation #{reservation_id} holds {quantity} of material "
                    f"#{material_id} but only {exc.on_hand} is on hand"
                ) from exc

            if not self._reservation_repo.replace(reservation, expected_version):
                # Undo explicitly as well: backends without a real
                # transaction (nullcontext) must not keep the decrement.
                self._ledger.increment(material_id, quantity)
                raise self._lost_race(reservation_id, "fulfill")

        logger.info(
            "reservation_fulfilled",
            extra={
                "reservation_id": reservation_id,
                "material_id": material_id,
                "quantity": quantity.value,
                "on_hand": on_hand,
            },
        )
        self._announce(material_id)

    # --- Order-level and stock-level operations -------------------------------

    def reserve_for_order(
        self,
        order_id: int,
        requirements: list[MaterialRequirement],
        expires_at: datetime | None = None,
        reserved_by: str | None = None,
        notes: str | None = None,
    ) -> list[Reservation]:
        """Reserve every material an order needs, all or nothing.

        Requirements for the same material are summed into one reservation.
        Phase 1 checks every material under its lock; phase 2 writes, inside
        one transaction, only after every check passed.
        """
        if not requirements:
            raise InvalidQuantityError("An order reservation needs at least one material")

        totals: dict[int, Decimal] = defaultdict(Decimal)
        for req in requirements:
            totals[req.material_id] += req.quantity.value

        now = self._clock.now()
        notes = notes or f"Reserved for order #{order_id}"
        pending = [
            Reservation.create(
                material_id=material_id,
                quantity=Quantity(total),
                now=now,
                order_id=order_id,
                expires_at=as_utc(expires_at),
                reserved_by=reserved_by,
                notes=notes,
            )
            for material_id, total in sorted(totals.items())
        ]

        with self._locks.hold(*totals), self._transaction():
            # Phase 1: validate every material before any write
            available: dict[int, Decimal] = {}
            for reservation in pending:
                mid = reservation.material_id
                available[mid] = self._availability.available_quantity(mid)
                self._check_fits(mid, reservation.quantity_reserved.value, available[mid])

            # Phase 2: persist
            saved = [self._reservation_repo.add(r) for r in pending]

        logger.info(
            "order_reserved",
            extra={
                "order_id": order_id,
                "reservation_ids": [r.id for r in saved],
                "material_ids": sorted(totals),
            },
        )
        for reservation in saved:
            mid = reservation.material_id
            self._announce(mid, available[mid] - reservation.quantity_reserved.value)
        return saved

    def release_for_order(self, order_id: int, reason: str | None = None) -> int:
        """Cancel every active reservation of an order; return how many."""
        released = 0
        for reservation in self.list(order_id=order_id, status=ReservationStatus.ACTIVE):
            try:
                self.cancel(reservation.id, reason)  # type: ignore[arg-type]
            except InvalidStateError:
                # Fulfilled or expired after the listing; nothing to release.
                logger.info(
                    "order_release_skipped",
                    extra={"order_id": order_id, "reservation_id": reservation.id},
                )
                continue
            released += 1
        return released

    def adjust_on_hand(
        self,
        material_id: int,
        delta: str | int | Decimal,
        reason: str | None = None,
    ) -> Decimal:
        """Manual stock transaction: receipt (delta > 0) or write-off (delta < 0).

        A write-off may not take on-hand below what active reservations hold;
        that is reported as InsufficientStockError against availability.
        """
        delta = to_decimal(delta)
        if delta == 0:
            raise InvalidQuantityError("Stock adjustment must be non-zero")

        with self._locks.hold(material_id), self._transaction():
            if delta > 0:
                on_hand = self._ledger.increment(material_id, Quantity(delta))
            else:
                amount = Quantity(-delta)
                available = self._availability.available_quantity(material_id)
                self._check_fits(material_id, amount.value, available)
                on_hand = self._ledger.decrement(material_id, amount)

        logger.info(
            "stock_adjusted",
            extra={
                "material_id": material_id,
                "delta": delta,
                "on_hand": on_hand,
                "reason": reason,
            },
        )
        self._announce(material_id)
        return on_hand

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_fits(material_id: int, requested: Decimal, available: Decimal) -> None:
        if requested > available:
            logger.info(
                "reservation_rejected",
                extra={
                    "material_id": material_id,
                    "requested": requested,
                    "available": available,
                },
            )
            raise InsufficientStockError(material_id, requested, available)

    def _lost_race(self, reservation_id: int, action: str) -> InvalidStateError:
        current = self.get(reservation_id)
        return InvalidStateError(
            f"Cannot {action} reservation #{reservation_id} — it was changed "
            f"concurrently and is now {current.status.value}"
        )

    def _announce(self, material_id: int, new_available: Decimal | None = None) -> None:
        """Tell the listener about a new availability figure, fire-and-forget."""
        if self._listener is None:
            return
        try:
            if new_available is None:
                new_available = self._availability.available_quantity(material_id)
            self._listener.availability_changed(material_id, new_available)
        except Exception:
            logger.exception(
                "availability_listener_failed", extra={"material_id": material_id}
            )


def _as_quantity(value: str | int | Decimal | Quantity) -> Quantity:
    if isinstance(value, Quantity):
        return value
    return Quantity.of(value)
