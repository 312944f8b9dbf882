"""Application service: Accept Components use case.

Replaces a line item's accepted child components with the proposals stored
in its pricing snapshot.  Acceptance is refused when the tree version is
DRAFT or when the snapshot no longer matches its inputs; the user must
recompute pricing first.
"""

from __future__ import annotations

import logging

from orderbom.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from orderbom.domain.model.rollup import AcceptedComponent
from orderbom.domain.model.tree_version import GuardContext, assert_not_draft
from orderbom.domain.repository.order_repository import OrderRepository
from orderbom.domain.repository.tree_version_repository import TreeVersionRepository
from orderbom.domain.service.component_diff import (
    ComparableComponent,
    ComponentDiff,
    diff_components,
    normalize_component_for_diff,
)
from orderbom.domain.service.order_rollup_service import verify_snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_STALE_CODE = "PBV2_SNAPSHOT_STALE"


class AcceptComponentsHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        tree_version_repo: TreeVersionRepository,
    ) -> None:
        self._order_repo = order_repo
        self._tree_version_repo = tree_version_repo

    def handle(self, order_id: str, line_item_id: str) -> ComponentDiff:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        line_item = order.find_line_item(line_item_id)
        snapshot = line_item.snapshot
        if snapshot is None:
            raise ValidationError(f"Line item '{line_item_id}' has no pricing snapshot")

        assert_not_draft(
            self._tree_version_repo.get_status(snapshot.tree_version_id),
            GuardContext.ACCEPT,
        )

        problem = verify_snapshot(snapshot)
        if problem is not None:
            raise ConflictError(
                "PBV2 snapshot is out of date; recompute PBV2 before accepting components",
                code=SNAPSHOT_STALE_CODE,
                context=GuardContext.ACCEPT.value,
            )
        if snapshot.child_items is None:
            raise ValidationError(
                "Snapshot missing PBV2 proposals; recompute PBV2 before accepting components"
            )

        accepted = [
            c
            for c in (self._comparable(a) for a in order.components_for(line_item_id))
            if c is not None
        ]
        proposed: list[ComparableComponent] = []
        for proposal in snapshot.child_items:
            comparable = normalize_component_for_diff(
                source_node_id=proposal.source_node_id,
                effect_index=proposal.effect_index,
                kind=proposal.kind,
                title=proposal.title,
                qty=proposal.qty,
                invoice_visibility=proposal.invoice_visibility,
                sku_ref=proposal.sku_ref,
                child_product_id=proposal.child_product_id,
                unit_price_cents=proposal.unit_price_cents,
                amount_cents=proposal.amount_cents,
            )
            if comparable is None:
                logger.warning(
                    "Dropping proposal %r on line item %s: no source node/effect index",
                    proposal.title,
                    line_item_id,
                )
                continue
            proposed.append(comparable)

        diff = diff_components(accepted, proposed)
        order.replace_components(
            line_item_id,
            [self._to_accepted(line_item_id, c) for c in sorted(proposed, key=lambda c: c.key)],
        )
        self._order_repo.save(order)

        logger.info(
            "Accepted components on %s/%s: %d added, %d removed, %d modified",
            order_id,
            line_item_id,
            len(diff.added),
            len(diff.removed),
            len(diff.modified),
        )
        return diff

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _comparable(component: AcceptedComponent) -> ComparableComponent | None:
        return normalize_component_for_diff(
            source_node_id=component.source_node_id,
            effect_index=component.effect_index,
            kind=component.kind,
            title=component.title,
            qty=component.qty,
            invoice_visibility=component.invoice_visibility,
            sku_ref=component.sku_ref,
            child_product_id=component.child_product_id,
            unit_price_cents=component.unit_price_cents,
            amount_cents=component.amount_cents,
        )

    @staticmethod
    def _to_accepted(line_item_id: str, c: ComparableComponent) -> AcceptedComponent:
        return AcceptedComponent(
            order_line_item_id=line_item_id,
            kind=c.kind,
            title=c.title,
            qty=c.qty,
            sku_ref=c.sku_ref,
            child_product_id=c.child_product_id,
            unit_price_cents=c.unit_price_cents,
            amount_cents=c.amount_cents,
            invoice_visibility=c.invoice_visibility or None,
            source_node_id=c.key.source_node_id,
            effect_index=c.key.effect_index,
        )
