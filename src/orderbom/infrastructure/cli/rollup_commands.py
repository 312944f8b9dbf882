"""CLI commands for order rollups."""

from __future__ import annotations

import json

import click

from orderbom.application.dto import rollup_to_payload
from orderbom.application.show_order_rollup import ShowOrderRollupHandler
from orderbom.domain.exceptions import DomainException
from orderbom.infrastructure.bootstrap import order_repository


@click.command("show")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw rollup payload.")
def rollup_show(order_id: str, as_json: bool) -> None:
    """Show the bill of materials of an order."""
    handler = ShowOrderRollupHandler(order_repo=order_repository())

    try:
        rollup = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(json.dumps(rollup_to_payload(rollup), indent=2))
        return

    click.echo(f"Order {rollup.order_id}")
    click.echo()
    click.echo(f"  {'Material':<20} {'UOM':<6} {'Qty':>12} {'Sources':>8}")
    click.echo(f"  {'-'*49}")
    for m in rollup.materials:
        click.echo(f"  {m.sku_ref:<20} {m.uom:<6} {m.qty:>12} {len(m.sources):>8}")

    if rollup.components:
        click.echo()
        click.echo(f"  {'Line item':<12} {'Component':<24} {'Key':<14} {'Qty':>8}")
        click.echo(f"  {'-'*61}")
        for c in rollup.components:
            click.echo(
                f"  {c.line_item_id:<12} {c.title:<24} {c.identity_key:<14} {c.qty:>8}"
            )

    for w in rollup.warnings:
        click.echo(f"warning: {w.code.value} ({w.line_item_id}) {w.message}", err=True)
