"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import click

from printstock.domain.exceptions import DomainException
from printstock.infrastructure.bootstrap import Container

pass_container = click.make_pass_decorator(Container)

# Accepted by --expires-at; values without a zone are taken as UTC.
DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"]


def domain_error(exc: DomainException) -> click.ClickException:
    """Map a domain error to a CLI error that shows its kind."""
    return click.ClickException(f"[{exc.code}] {exc}")

