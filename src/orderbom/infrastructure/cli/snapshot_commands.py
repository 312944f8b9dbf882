"""CLI commands for pricing snapshot signatures."""

from __future__ import annotations

import json
from pathlib import Path

import click

from orderbom.application.recompute_snapshot import RecomputeSnapshotHandler
from orderbom.domain.exceptions import DomainException
from orderbom.domain.model.snapshot import PricingSnapshot
from orderbom.domain.service.input_signature import compute_input_signature
from orderbom.infrastructure.bootstrap import order_repository, tree_version_repository


@click.command("sign")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Snapshot JSON file.",
)
def snapshot_sign(file_path: Path) -> None:
    """Print the input signature of a snapshot file."""
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {file_path}: {exc}")

    snapshot = PricingSnapshot.from_json(raw)
    if snapshot is None:
        raise click.ClickException("Snapshot must be a JSON object")

    try:
        signature = compute_input_signature(
            snapshot.tree_version_id, snapshot.explicit_selections, snapshot.env
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(signature)
    if snapshot.input_signature and snapshot.input_signature != signature:
        click.echo("stored signature does not match (snapshot is stale)", err=True)


@click.command("recompute")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--line-item", "line_item_id", required=True, help="Line item ID.")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Freshly evaluated snapshot JSON file.",
)
def snapshot_recompute(order_id: str, line_item_id: str, file_path: Path) -> None:
    """Store a freshly evaluated snapshot on a line item and sign it."""
    try:
        evaluated = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {file_path}: {exc}")

    handler = RecomputeSnapshotHandler(
        order_repo=order_repository(),
        tree_version_repo=tree_version_repository(),
    )

    try:
        signature = handler.handle(order_id, line_item_id, evaluated)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line item {line_item_id} recomputed: {signature}")
