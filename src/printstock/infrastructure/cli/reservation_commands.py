"""CLI commands for material reservations."""

from __future__ import annotations

from datetime import datetime

import click

from printstock.application.cancel_reservation import CancelReservationHandler
from printstock.application.create_reservation import CreateReservationHandler
from printstock.application.dto import RequirementSpec, ReservationDTO
from printstock.application.fulfill_reservation import FulfillReservationHandler
from printstock.application.reserve_for_order import ReserveForOrderHandler
from printstock.application.show_availability import ShowAvailabilityHandler
from printstock.application.show_reservation import (
    ListReservationsHandler,
    ShowReservationHandler,
)
from printstock.application.update_reservation import UpdateReservationHandler
from printstock.domain.exceptions import DomainException
from printstock.domain.model.reservation import ReservationStatus
from printstock.infrastructure.bootstrap import Container
from printstock.infrastructure.cli.common import (
    DATETIME_FORMATS,
    domain_error,
    pass_container,
)


def _display_reservation(dto: ReservationDTO) -> None:
    """Shared formatting for displaying one reservation."""
    click.echo(f"Reservation #{dto.id}  (status={dto.status})")
    click.echo(f"Material:  #{dto.material_id}")
    click.echo(f"Quantity:  {dto.quantity_reserved}")
    if dto.order_id is not None:
        click.echo(f"Order:     #{dto.order_id}")
    click.echo(f"Reserved:  {dto.reserved_at}" + (f" by {dto.reserved_by}" if dto.reserved_by else ""))
    click.echo(f"Expires:   {dto.expires_at or 'never'}")
    click.echo(f"Updated:   {dto.updated_at}")
    if dto.notes:
        click.echo(f"Notes:     {dto.notes}")


def _parse_requirements(raw: str) -> list[RequirementSpec]:
    """Parse '3:2x500,5:1.5' into RequirementSpec list.

    Each entry is ``material_id:quantity`` with an optional ``xCOUNT``
    multiplier for per-item quantities.
    """
    specs: list[RequirementSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'MaterialId:Quantity[xCount]'."
            )
        mid_str, qty_str = pair.split(":", 1)
        count = 1
        if "x" in qty_str:
            qty_str, count_str = qty_str.split("x", 1)
            try:
                count = int(count_str)
            except ValueError:
                raise click.BadParameter(f"Invalid item count '{count_str}' in '{pair}'.")
        try:
            material_id = int(mid_str)
        except ValueError:
            raise click.BadParameter(f"Invalid material id '{mid_str}' in '{pair}'.")
        specs.append(
            RequirementSpec(
                material_id=material_id,
                quantity_per_item=qty_str.strip(),
                item_count=count,
            )
        )
    return specs


@click.command("create")
@click.option("--material", "material_id", required=True, type=int, help="Material ID.")
@click.option("--quantity", required=True, help="Quantity to reserve (e.g. 250 or 1.5).")
@click.option("--order", "order_id", type=int, default=None, help="Order the hold belongs to.")
@click.option(
    "--expires-at",
    type=click.DateTime(formats=DATETIME_FORMATS),
    default=None,
    help="Expiry time (UTC).",
)
@click.option("--hold-hours", type=float, default=None, help="Expire after this many hours.")
@click.option("--notes", default=None, help="Free-text note.")
@click.option("--by", "reserved_by", default=None, help="Who is placing the hold.")
@pass_container
def reservation_create(
    container: Container,
    material_id: int,
    quantity: str,
    order_id: int | None,
    expires_at: datetime | None,
    hold_hours: float | None,
    notes: str | None,
    reserved_by: str | None,
) -> None:
    """Reserve stock of a material."""
    handler = CreateReservationHandler(container.engine, container.clock)

    try:
        dto = handler.handle(
            material_id=material_id,
            quantity=quantity,
            order_id=order_id,
            expires_at=expires_at,
            expires_in_hours=hold_hours,
            notes=notes,
            reserved_by=reserved_by,
        )
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Reservation #{dto.id} created  (status={dto.status})")
    _display_reservation(dto)


@click.command("show")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
@pass_container
def reservation_show(container: Container, reservation_id: int) -> None:
    """Show details of a reservation."""
    handler = ShowReservationHandler(container.engine)

    try:
        dto = handler.handle(reservation_id)
    except DomainException as exc:
        raise domain_error(exc)

    _display_reservation(dto)


@click.command("list")
@click.option("--material", "material_id", type=int, default=None, help="Only this material.")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ReservationStatus]),
    default=None,
    help="Only this status.",
)
@click.option("--order", "order_id", type=int, default=None, help="Only this order.")
@pass_container
def reservation_list(
    container: Container,
    material_id: int | None,
    status: str | None,
    order_id: int | None,
) -> None:
    """List reservations."""
    handler = ListReservationsHandler(container.engine)

    try:
        rows = handler.handle(material_id=material_id, status=status, order_id=order_id)
    except DomainException as exc:
        raise domain_error(exc)

    if not rows:
        click.echo("No reservations found.")
        return

    click.echo(f"{'ID':<6} {'Material':>8} {'Order':>6} {'Quantity':>10} {'Status':<10} {'Expires':<24}")
    click.echo("-" * 69)
    for r in rows:
        order = str(r.order_id) if r.order_id is not None else "-"
        click.echo(
            f"{r.id:<6} {r.material_id:>8} {order:>6} {r.quantity_reserved:>10} "
            f"{r.status:<10} {r.expires_at or 'never':<24}"
        )


@click.command("update")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
@click.option("--quantity", default=None, help="New reserved quantity.")
@click.option(
    "--expires-at",
    type=click.DateTime(formats=DATETIME_FORMATS),
    default=None,
    help="New expiry time (UTC).",
)
@click.option("--no-expiry", is_flag=True, default=False, help="Remove the expiry.")
@click.option("--notes", default=None, help="Replace the notes.")
@pass_container
def reservation_update(
    container: Container,
    reservation_id: int,
    quantity: str | None,
    expires_at: datetime | None,
    no_expiry: bool,
    notes: str | None,
) -> None:
    """Change quantity, expiry or notes of an active reservation."""
    handler = UpdateReservationHandler(container.engine)

    try:
        dto = handler.handle(
            reservation_id,
            quantity=quantity,
            expires_at=expires_at,
            notes=notes,
            clear_expiry=no_expiry,
        )
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Reservation #{dto.id} updated.")
    _display_reservation(dto)


@click.command("cancel")
@click.option("--id", "reservation_id", type=int, default=None, help="Reservation ID.")
@click.option("--order", "order_id", type=int, default=None, help="Cancel every hold of this order.")
@click.option("--reason", default=None, help="Why the hold is released.")
@pass_container
def reservation_cancel(
    container: Container,
    reservation_id: int | None,
    order_id: int | None,
    reason: str | None,
) -> None:
    """Cancel a reservation (releases the held quantity)."""
    if (reservation_id is None) == (order_id is None):
        raise click.UsageError("Give exactly one of --id or --order")

    handler = CancelReservationHandler(container.engine)

    try:
        if order_id is not None:
            released = handler.handle_order(order_id, reason)
        else:
            handler.handle(reservation_id, reason)  # type: ignore[arg-type]
    except DomainException as exc:
        raise domain_error(exc)

    if order_id is not None:
        click.echo(f"Order #{order_id}: {released} reservation(s) cancelled.")
    else:
        click.echo(f"Reservation #{reservation_id} cancelled.")


@click.command("fulfill")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
@pass_container
def reservation_fulfill(container: Container, reservation_id: int) -> None:
    """Fulfill a reservation (deducts the stock from the shelf)."""
    handler = FulfillReservationHandler(container.engine)

    try:
        stock = handler.handle(reservation_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Reservation #{reservation_id} fulfilled — stock deducted.")
    click.echo(f"Material #{stock.material_id}: on hand {stock.on_hand}, available {stock.available}")


@click.command("availability")
@click.option("--material", "material_id", required=True, type=int, help="Material ID.")
@pass_container
def reservation_availability(container: Container, material_id: int) -> None:
    """Show on-hand, reserved and available quantity of a material."""
    handler = ShowAvailabilityHandler(container.engine.availability)

    try:
        dto = handler.handle(material_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Material #{dto.material_id}")
    click.echo(f"  On hand:   {dto.on_hand:>12}")
    click.echo(f"  Reserved:  {dto.reserved:>12}")
    click.echo(f"  Available: {dto.available:>12}")


@click.command("reserve-order")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--items",
    required=True,
    help="Materials as 'MaterialId:Qty[xCount],...' (e.g. '3:2x500,5:1.5').",
)
@click.option("--hold-hours", type=float, default=None, help="Override the default hold time.")
@click.option("--by", "reserved_by", default=None, help="Who is placing the holds.")
@pass_container
def reservation_reserve_order(
    container: Container,
    order_id: int,
    items: str,
    hold_hours: float | None,
    reserved_by: str | None,
) -> None:
    """Reserve every material an order needs (all or nothing)."""
    specs = _parse_requirements(items)

    handler = ReserveForOrderHandler(
        container.engine,
        container.clock,
        default_hold_hours=container.settings.default_hold_hours,
    )

    try:
        rows = handler.handle(order_id, specs, hold_hours=hold_hours, reserved_by=reserved_by)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{order_id}: {len(rows)} reservation(s) created")
    for r in rows:
        click.echo(f"  #{r.id:<5} material #{r.material_id:<5} {r.quantity_reserved:>10}  expires {r.expires_at}")
