"""CLI commands for reservation housekeeping."""

from __future__ import annotations

import time

import click

from printstock.application.cleanup_expired import CleanupExpiredHandler
from printstock.infrastructure.bootstrap import Container
from printstock.infrastructure.cli.common import pass_container


@click.command("cleanup")
@pass_container
def maintenance_cleanup(container: Container) -> None:
    """Expire overdue reservations now."""
    handler = CleanupExpiredHandler(container.sweeper)
    expired = handler.handle()
    click.echo(f"{expired} reservation(s) expired.")


@click.command("sweeper")
@pass_container
def maintenance_sweeper(container: Container) -> None:
    """Run the expiration sweeper until interrupted (Ctrl+C)."""
    interval = container.settings.sweep_interval_seconds
    click.echo(f"Sweeping every {interval:g}s — press Ctrl+C to stop.")
    container.sweeper.start()
    try:
        while container.sweeper.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        container.sweeper.stop()
    click.echo("Sweeper stopped.")
