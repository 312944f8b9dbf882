"""Order aggregate as seen by the rollup engine.

Only the parts the engine consumes are modelled: each line item's stored
snapshot JSON and the components users accepted onto line items.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.rollup import AcceptedComponent
from orderbom.domain.model.snapshot import PricingSnapshot


@dataclass
class OrderLineItem:
    id: str
    snapshot_json: dict | None = None

    @property
    def snapshot(self) -> PricingSnapshot | None:
        return PricingSnapshot.from_json(self.snapshot_json)

    def replace_snapshot(self, snapshot: PricingSnapshot) -> None:
        self.snapshot_json = snapshot.to_json()


@dataclass
class Order:
    """Aggregate root owning line items and their accepted components."""

    id: str
    organization_id: str
    line_items: list[OrderLineItem] = field(default_factory=list)
    accepted_components: list[AcceptedComponent] = field(default_factory=list)

    def find_line_item(self, line_item_id: str) -> OrderLineItem:
        for item in self.line_items:
            if item.id == line_item_id:
                return item
        raise EntityNotFoundError(
            f"Line item '{line_item_id}' not found in order {self.id}"
        )

    def components_for(self, line_item_id: str) -> list[AcceptedComponent]:
        return [
            c for c in self.accepted_components if c.order_line_item_id == line_item_id
        ]

    def replace_components(
        self, line_item_id: str, components: list[AcceptedComponent]
    ) -> None:
        """Swap the accepted components of one line item, keeping the rest."""
        self.find_line_item(line_item_id)
        kept = [
            c for c in self.accepted_components if c.order_line_item_id != line_item_id
        ]
        self.accepted_components = kept + list(components)

    def tree_version_ids(self) -> list[str]:
        """Distinct tree version ids referenced by line item snapshots, sorted."""
        ids = set()
        for item in self.line_items:
            snapshot = item.snapshot
            if snapshot is not None and snapshot.tree_version_id:
                ids.add(snapshot.tree_version_id)
        return sorted(ids)
