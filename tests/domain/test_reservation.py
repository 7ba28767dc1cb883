"""Unit tests for the Reservation aggregate — lifecycle and guards."""

from datetime import datetime, timedelta, timezone

import pytest

from printstock.domain.exceptions import InvalidExpiryError, InvalidStateError
from printstock.domain.model.reservation import Reservation, ReservationStatus
from printstock.domain.model.value_objects import Quantity

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _active(**kwargs) -> Reservation:
    r = Reservation.create(material_id=1, quantity=Quantity.of("10"), now=NOW, **kwargs)
    r.id = 1
    return r


class TestReservationCreate:

    def test_starts_active(self):
        r = _active()
        assert r.status is ReservationStatus.ACTIVE
        assert r.is_active
        assert r.reserved_at == r.created_at == r.updated_at == NOW

    def test_keeps_optional_fields(self):
        r = _active(order_id=42, reserved_by="anna", notes="business cards")
        assert r.order_id == 42
        assert r.reserved_by == "anna"
        assert r.notes == "business cards"

    def test_blank_notes_become_none(self):
        assert _active(notes="   ").notes is None

    def test_expiry_in_past_rejected(self):
        with pytest.raises(InvalidExpiryError):
            _active(expires_at=NOW - timedelta(minutes=1))

    def test_expiry_equal_to_now_rejected(self):
        with pytest.raises(InvalidExpiryError):
            _active(expires_at=NOW)

    def test_future_expiry_accepted(self):
        r = _active(expires_at=NOW + timedelta(hours=1))
        assert r.expires_at == NOW + timedelta(hours=1)


class TestReservationTransitions:

    def test_cancel(self):
        r = _active()
        later = NOW + timedelta(minutes=5)
        r.cancel(later)
        assert r.status is ReservationStatus.CANCELLED
        assert r.updated_at == later

    def test_cancel_appends_reason(self):
        r = _active(notes="flyers")
        r.cancel(NOW, "customer withdrew")
        assert r.notes == "flyers\nCancelled: customer withdrew"

    def test_cancel_reason_without_notes(self):
        r = _active()
        r.cancel(NOW, "typo")
        assert r.notes == "Cancelled: typo"

    def test_fulfill(self):
        r = _active()
        r.fulfill(NOW)
        assert r.status is ReservationStatus.FULFILLED

    def test_expire(self):
        r = _active()
        r.expire(NOW)
        assert r.status is ReservationStatus.EXPIRED

    @pytest.mark.parametrize("terminal", ["cancel", "fulfill", "expire"])
    def test_terminal_states_are_final(self, terminal):
        r = _active()
        getattr(r, terminal)(NOW)
        for action in ("cancel", "fulfill", "expire"):
            with pytest.raises(InvalidStateError, match="expected active"):
                getattr(r, action)(NOW)

    def test_terminal_statuses(self):
        assert not ReservationStatus.ACTIVE.is_terminal
        assert ReservationStatus.FULFILLED.is_terminal
        assert ReservationStatus.CANCELLED.is_terminal
        assert ReservationStatus.EXPIRED.is_terminal


class TestReservationChanges:

    def test_change_quantity(self):
        r = _active()
        later = NOW + timedelta(minutes=1)
        r.change_quantity(Quantity.of("15"), later)
        assert r.quantity_reserved == Quantity.of("15")
        assert r.updated_at == later

    def test_change_expiry(self):
        r = _active()
        r.change_expiry(NOW + timedelta(days=2), NOW)
        assert r.expires_at == NOW + timedelta(days=2)

    def test_clear_expiry(self):
        r = _active(expires_at=NOW + timedelta(hours=1))
        r.change_expiry(None, NOW)
        assert r.expires_at is None

    def test_change_expiry_to_past_rejected(self):
        r = _active()
        with pytest.raises(InvalidExpiryError):
            r.change_expiry(NOW - timedelta(seconds=1), NOW)

    def test_change_notes(self):
        r = _active()
        r.change_notes(" rush job ", NOW)
        assert r.notes == "rush job"

    def test_changes_rejected_once_terminal(self):
        r = _active()
        r.fulfill(NOW)
        with pytest.raises(InvalidStateError, match="current status is fulfilled"):
            r.change_quantity(Quantity.of("1"), NOW)
        with pytest.raises(InvalidStateError):
            r.change_notes("x", NOW)


class TestReservationOverdue:

    def test_without_expiry_never_overdue(self):
        assert not _active().is_overdue(NOW + timedelta(days=365))

    def test_overdue_at_expiry(self):
        r = _active(expires_at=NOW + timedelta(hours=1))
        assert not r.is_overdue(NOW + timedelta(minutes=59))
        assert r.is_overdue(NOW + timedelta(hours=1))

    def test_terminal_not_overdue(self):
        r = _active(expires_at=NOW + timedelta(hours=1))
        r.cancel(NOW)
        assert not r.is_overdue(NOW + timedelta(hours=2))
