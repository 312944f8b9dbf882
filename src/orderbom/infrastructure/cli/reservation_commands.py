"""CLI commands for the inventory reservation ledger."""

from __future__ import annotations

import json

import click

from orderbom.application.dto import rollup_view_to_payload
from orderbom.application.release_order_inventory import ReleaseOrderInventoryHandler
from orderbom.application.reserve_order_inventory import ReserveOrderInventoryHandler
from orderbom.application.show_reservations import ShowReservationsHandler
from orderbom.domain.exceptions import DomainException
from orderbom.domain.model.reservation import ReservationStatus
from orderbom.infrastructure.bootstrap import (
    order_repository,
    reservation_repository,
    tree_version_repository,
)


@click.command("reserve")
@click.option("--order", "order_id", required=True, help="Order ID to reserve for.")
@click.option("--user", "user_id", default=None, help="User recorded as creator.")
def reservations_reserve(order_id: str, user_id: str | None) -> None:
    """Reserve inventory for an order (idempotent)."""
    handler = ReserveOrderInventoryHandler(
        order_repo=order_repository(),
        reservation_repo=reservation_repository(),
        tree_version_repo=tree_version_repository(),
    )

    try:
        result = handler.handle(order_id, created_by_user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for w in result.warnings:
        click.echo(f"warning: {w.code.value} ({w.line_item_id}) {w.message}", err=True)

    if not result.inserted:
        click.echo(f"Order {order_id}: nothing new to reserve.")
        return

    click.echo(f"Order {order_id}: reserved {len(result.inserted)} rows.")
    for row in result.inserted:
        click.echo(f"  {row.source_type.value:<15} {row.source_key:<20} {row.uom:<6} {row.qty:>10}")


@click.command("release")
@click.option("--order", "order_id", required=True, help="Order ID to release.")
def reservations_release(order_id: str) -> None:
    """Release every active reservation of an order."""
    handler = ReleaseOrderInventoryHandler(
        order_repo=order_repository(),
        reservation_repo=reservation_repository(),
    )

    try:
        released = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id}: released {len(released)} rows.")


@click.command("show")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ReservationStatus], case_sensitive=False),
    default=ReservationStatus.RESERVED.value,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw payload.")
def reservations_show(order_id: str, status: str, as_json: bool) -> None:
    """Summarize an order's reservations by material."""
    handler = ShowReservationsHandler(reservation_repo=reservation_repository())
    view = handler.handle(order_id, status=status.upper())

    if as_json:
        click.echo(json.dumps(rollup_view_to_payload(view), indent=2))
        return

    if not view.items:
        click.echo(f"No {view.status.value} reservations for order {order_id}.")
        return

    click.echo(
        f"{'Source key':<20} {'UOM':<6} {'Qty':>10} {'Material':>10} {'Component':>10} {'Manual':>10}"
    )
    click.echo("-" * 71)
    for item in view.items:
        by_type = item.by_source_type
        click.echo(
            f"{item.source_key:<20} {item.uom:<6} {item.qty:>10} "
            f"{by_type['PBV2_MATERIAL']:>10} {by_type['PBV2_COMPONENT']:>10} {by_type['MANUAL']:>10}"
        )
