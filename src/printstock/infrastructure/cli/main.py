from dataclasses import replace
from pathlib import Path

import click

from printstock.infrastructure.bootstrap import build
from printstock.infrastructure.cli.maintenance_commands import (
    maintenance_cleanup,
    maintenance_sweeper,
)
from printstock.infrastructure.cli.material_commands import (
    material_add,
    material_list,
    material_receive,
    material_write_off,
)
from printstock.infrastructure.cli.reservation_commands import (
    reservation_availability,
    reservation_cancel,
    reservation_create,
    reservation_fulfill,
    reservation_list,
    reservation_reserve_order,
    reservation_show,
    reservation_update,
)
from printstock.infrastructure.config import Settings
from printstock.logging_config import configure_logging


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="PRINTSTOCK_DATA_DIR",
    default=None,
    help="Directory holding printstock.json.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="PRINTSTOCK_LOG_LEVEL",
    default=None,
    help="Verbosity of the JSON log on stderr.",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, log_level: str | None) -> None:
    """printstock — material stock reservations for the print shop"""
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise click.UsageError(str(exc))
    if data_dir is not None:
        settings = replace(settings, data_dir=data_dir)
    if log_level is not None:
        settings = replace(settings, log_level=log_level.upper())

    configure_logging(level=settings.log_level)
    ctx.obj = build(settings)


@cli.group()
def material() -> None:
    """Manage materials and stock levels."""


@cli.group()
def reservation() -> None:
    """Manage stock reservations."""


@cli.group()
def maintenance() -> None:
    """Housekeeping jobs."""


# Register subcommands
material.add_command(material_add)
material.add_command(material_list)
material.add_command(material_receive)
material.add_command(material_write_off)
reservation.add_command(reservation_availability)
reservation.add_command(reservation_cancel)
reservation.add_command(reservation_create)
reservation.add_command(reservation_fulfill)
reservation.add_command(reservation_list)
reservation.add_command(reservation_reserve_order)
reservation.add_command(reservation_show)
reservation.add_command(reservation_update)
maintenance.add_command(maintenance_cleanup)
maintenance.add_command(maintenance_sweeper)
