"""Application service: Recompute Snapshot use case.

Stores a freshly evaluated pricing snapshot on a line item.  The pricing
evaluator runs upstream; this handler replaces the stored snapshot as a
whole (inputs, materials and proposals together) and signs it, so edited
inputs can never be paired with materials computed from older ones.
Guarded: a DRAFT tree version cannot be recomputed on an order.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from orderbom.domain.exceptions import EntityNotFoundError, ValidationError
from orderbom.domain.model.snapshot import PricingSnapshot
from orderbom.domain.model.tree_version import GuardContext, assert_not_draft
from orderbom.domain.repository.order_repository import OrderRepository
from orderbom.domain.repository.tree_version_repository import TreeVersionRepository
from orderbom.domain.service.input_signature import compute_input_signature

logger = logging.getLogger(__name__)


class RecomputeSnapshotHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        tree_version_repo: TreeVersionRepository,
    ) -> None:
        self._order_repo = order_repo
        self._tree_version_repo = tree_version_repo

    def handle(self, order_id: str, line_item_id: str, evaluated_snapshot: dict) -> str:
        """Replace the line item's snapshot with *evaluated_snapshot*; return its signature.

        Any signature carried by *evaluated_snapshot* is ignored and
        recomputed from its own inputs.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        line_item = order.find_line_item(line_item_id)
        snapshot = PricingSnapshot.from_json(evaluated_snapshot)
        if snapshot is None or not snapshot.has_inputs:
            raise ValidationError(
                f"Evaluated snapshot for line item '{line_item_id}' has no inputs to sign"
            )

        assert_not_draft(
            self._tree_version_repo.get_status(snapshot.tree_version_id),
            GuardContext.RECOMPUTE,
        )

        signature = compute_input_signature(
            snapshot.tree_version_id, snapshot.explicit_selections, snapshot.env
        )
        line_item.replace_snapshot(replace(snapshot, input_signature=signature))
        self._order_repo.save(order)

        logger.info(
            "Stored recomputed snapshot on %s/%s (%d materials)",
            order_id,
            line_item_id,
            len(snapshot.materials),
        )
        return signature
