"""CLI commands for the material register and manual stock transactions."""

from __future__ import annotations

import click

from printstock.application.add_material import AddMaterialHandler
from printstock.application.adjust_stock import AdjustStockHandler
from printstock.application.show_materials import ShowMaterialsHandler
from printstock.domain.exceptions import DomainException
from printstock.infrastructure.bootstrap import Container
from printstock.infrastructure.cli.common import domain_error, pass_container


@click.command("add")
@click.option("--name", required=True, help="Material name (e.g. 'Coated 170g SRA3').")
@click.option("--unit", required=True, help="Display unit (sheets, ml, kg...).")
@click.option("--on-hand", default="0", show_default=True, help="Opening stock.")
@click.option("--min-level", default=None, help="Low-stock alert threshold.")
@pass_container
def material_add(
    container: Container,
    name: str,
    unit: str,
    on_hand: str,
    min_level: str | None,
) -> None:
    """Register a new material."""
    handler = AddMaterialHandler(container.ledger)

    try:
        material = handler.handle(name=name, unit=unit, on_hand=on_hand, min_stock_level=min_level)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(
        f"Material #{material.id} '{material.name}' added "
        f"({material.on_hand_quantity} {material.unit} on hand)"
    )


@click.command("list")
@pass_container
def material_list(container: Container) -> None:
    """Show stock levels with reserved and available quantities."""
    handler = ShowMaterialsHandler(container.ledger, container.engine.availability)
    lines = handler.handle()

    if not lines:
        click.echo("No materials found.")
        return

    click.echo(
        f"{'ID':<5} {'Material':<24} {'Unit':<8} {'On hand':>10} {'Reserved':>10} "
        f"{'Available':>10} {'Min':>8}"
    )
    click.echo("-" * 81)
    for line in lines:
        click.echo(
            f"{line.id:<5} {line.name:<24} {line.unit:<8} {line.on_hand:>10} "
            f"{line.reserved:>10} {line.available:>10} {line.min_stock_level or '-':>8}"
        )


@click.command("receive")
@click.option("--id", "material_id", required=True, type=int, help="Material ID.")
@click.option("--quantity", required=True, help="Quantity received.")
@click.option("--reason", default=None, help="Delivery note, supplier invoice...")
@pass_container
def material_receive(
    container: Container, material_id: int, quantity: str, reason: str | None
) -> None:
    """Book a stock receipt."""
    handler = AdjustStockHandler(container.engine)

    try:
        on_hand = handler.receive(material_id, quantity, reason)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Material #{material_id}: received {quantity}, now {on_hand} on hand")


@click.command("write-off")
@click.option("--id", "material_id", required=True, type=int, help="Material ID.")
@click.option("--quantity", required=True, help="Quantity to remove.")
@click.option("--reason", default=None, help="Damage, spoilage, stock count...")
@pass_container
def material_write_off(
    container: Container, material_id: int, quantity: str, reason: str | None
) -> None:
    """Remove stock from the shelf (never below what is reserved)."""
    handler = AdjustStockHandler(container.engine)

    try:
        on_hand = handler.write_off(material_id, quantity, reason)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Material #{material_id}: wrote off {quantity}, now {on_hand} on hand")
