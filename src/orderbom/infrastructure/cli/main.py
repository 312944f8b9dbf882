import click

from orderbom.infrastructure.cli.component_commands import components_accept
from orderbom.infrastructure.cli.reservation_commands import (
    reservations_release,
    reservations_reserve,
    reservations_show,
)
from orderbom.infrastructure.cli.rollup_commands import rollup_show
from orderbom.infrastructure.cli.snapshot_commands import snapshot_recompute, snapshot_sign
from orderbom.infrastructure.logging_config import configure_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="ORDERBOM_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity (stderr).",
)
def cli(log_level: str) -> None:
    """orderbom — order BOM rollup and inventory reservations"""
    configure_logging(log_level)


@cli.group()
def rollup() -> None:
    """Inspect order rollups."""


@cli.group()
def reservations() -> None:
    """Manage inventory reservations."""


@cli.group()
def snapshot() -> None:
    """Sign and recompute pricing snapshots."""


@cli.group()
def components() -> None:
    """Manage accepted child components."""


# Register subcommands
rollup.add_command(rollup_show)
reservations.add_command(reservations_reserve)
reservations.add_command(reservations_release)
reservations.add_command(reservations_show)
snapshot.add_command(snapshot_sign)
snapshot.add_command(snapshot_recompute)
components.add_command(components_accept)
