"""Property-based tests: no sequence of operations breaks the stock invariant.

For every material, at every point:

    0 <= sum(active quantity_reserved) <= on_hand_quantity
"""

from datetime import timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from printstock.domain.clock import ManualClock
from printstock.domain.exceptions import DomainException
from printstock.domain.model.material import Material
from printstock.domain.model.reservation import ReservationStatus
from printstock.domain.service.expiration_sweeper import ExpirationSweeper
from printstock.domain.service.reservation_engine import ReservationEngine
from tests.fakes import FakeMaterialLedger, FakeReservationRepository

OPERATIONS = ["create", "update", "cancel", "fulfill", "receive", "write_off", "tick"]

operation = st.tuples(
    st.sampled_from(OPERATIONS),
    st.integers(min_value=1, max_value=2),  # material id
    st.integers(min_value=0, max_value=8),  # reservation index
    st.decimals(min_value=Decimal("0.5"), max_value=Decimal("80"), places=1),
    st.sampled_from([None, 1, 5, 60]),  # hold minutes
)


def _build():
    ledger = FakeMaterialLedger(
        [
            Material(id=None, name="Paper", unit="sheets", on_hand_quantity=Decimal("100")),
            Material(id=None, name="Ink", unit="ml", on_hand_quantity=Decimal("12.5")),
        ]
    )
    repo = FakeReservationRepository()
    clock = ManualClock()
    engine = ReservationEngine(repo, ledger, clock=clock)
    sweeper = ExpirationSweeper(repo, engine.availability, clock=clock)
    return engine, sweeper, ledger, repo, clock


def _check(engine, ledger, repo) -> None:
    for material_id in (1, 2):
        on_hand = ledger.get_on_hand(material_id)
        reserved = sum(
            (r.quantity_reserved.value for r in repo.list(material_id=material_id, status=ReservationStatus.ACTIVE)),
            Decimal("0"),
        )
        assert on_hand >= 0
        assert 0 <= reserved <= on_hand
        assert engine.available_quantity(material_id) == on_hand - reserved


class TestStockInvariant:

    @settings(
        max_examples=150,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    @given(st.lists(operation, min_size=1, max_size=40))
    def test_invariant_holds_after_every_operation(self, ops):
        engine, sweeper, ledger, repo, clock = _build()
        ids: list[int] = []

        for name, material_id, index, amount, hold in ops:
            target = ids[index % len(ids)] if ids else None
            try:
                if name == "create":
                    expires = clock.now() + timedelta(minutes=hold) if hold else None
                    ids.append(engine.create(material_id, amount, expires_at=expires).id)
                elif name == "update" and target is not None:
                    engine.update(target, quantity_reserved=amount)
                elif name == "cancel" and target is not None:
                    engine.cancel(target)
                elif name == "fulfill" and target is not None:
                    engine.fulfill(target)
                elif name == "receive":
                    engine.adjust_on_hand(material_id, amount)
                elif name == "write_off":
                    engine.adjust_on_hand(material_id, -amount)
                elif name == "tick":
                    clock.advance(minutes=hold or 1)
                    sweeper.run_once()
            except DomainException:
                pass
            _check(engine, ledger, repo)

    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(st.lists(st.decimals(min_value=Decimal("0.1"), max_value=Decimal("60"), places=1), max_size=25))
    def test_terminal_reservations_never_come_back(self, amounts):
        engine, _, _, repo, _ = _build()
        closed = []
        for i, amount in enumerate(amounts):
            try:
                r = engine.create(1, amount)
            except DomainException:
                continue
            if i % 2:
                engine.cancel(r.id)
            else:
                engine.fulfill(r.id)
            closed.append((r.id, repo.get_by_id(r.id).status))

        for reservation_id, status in closed:
            assert repo.get_by_id(reservation_id).status is status
