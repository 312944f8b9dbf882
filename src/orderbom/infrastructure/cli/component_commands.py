"""CLI commands for accepted child components."""

from __future__ import annotations

import click

from orderbom.application.accept_components import AcceptComponentsHandler
from orderbom.domain.exceptions import DomainException
from orderbom.infrastructure.bootstrap import order_repository, tree_version_repository


@click.command("accept")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--line-item", "line_item_id", required=True, help="Line item ID.")
def components_accept(order_id: str, line_item_id: str) -> None:
    """Accept the proposed child components of a line item."""
    handler = AcceptComponentsHandler(
        order_repo=order_repository(),
        tree_version_repo=tree_version_repository(),
    )

    try:
        diff = handler.handle(order_id, line_item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Line item {line_item_id}: {len(diff.added)} added, "
        f"{len(diff.removed)} removed, {len(diff.modified)} modified, "
        f"{len(diff.unchanged)} unchanged"
    )
    for m in diff.modified:
        click.echo(f"  ~ {m.after.title} ({', '.join(m.changed_fields)})")
