"""Application service: Reserve Order Inventory use case.

Orchestrates the draft guard, the order rollup and the reservation mapper:

1. Refuse if any referenced tree version is still DRAFT.
2. Build the rollup and the desired reservation rows.
3. Diff against the order's RESERVED rows and append only the delta.

Running it twice inserts nothing the second time.  Stale line items are
reported as warnings and reserve nothing.
"""

from __future__ import annotations

import logging

from orderbom.application.dto import ReservationResult
from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.tree_version import GuardContext, assert_not_draft
from orderbom.domain.repository.order_repository import OrderRepository
from orderbom.domain.repository.reservation_repository import ReservationRepository
from orderbom.domain.repository.tree_version_repository import TreeVersionRepository
from orderbom.domain.service.inventory_reservation_service import (
    build_reservations_from_rollup,
    diff_for_insert,
)
from orderbom.domain.service.order_rollup_service import build_order_rollup

logger = logging.getLogger(__name__)


class ReserveOrderInventoryHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        reservation_repo: ReservationRepository,
        tree_version_repo: TreeVersionRepository,
    ) -> None:
        self._order_repo = order_repo
        self._reservation_repo = reservation_repo
        self._tree_version_repo = tree_version_repo

    def handle(
        self,
        order_id: str,
        created_by_user_id: str | None = None,
    ) -> ReservationResult:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        for tree_version_id in order.tree_version_ids():
            status = self._tree_version_repo.get_status(tree_version_id)
            assert_not_draft(status, GuardContext.PERSIST)

        rollup = build_order_rollup(order.id, order.line_items, order.accepted_components)
        desired = build_reservations_from_rollup(
            organization_id=order.organization_id,
            order_id=order.id,
            rollup=rollup,
            created_by_user_id=created_by_user_id,
        )

        existing = [r for r in self._reservation_repo.list_for_order(order.id) if r.is_reserved]
        to_insert = diff_for_insert(desired, existing)
        inserted = self._reservation_repo.add_all(to_insert) if to_insert else []

        logger.info(
            "Reserved inventory for order %s: %d new rows, %d already reserved",
            order.id,
            len(inserted),
            len(desired) - len(to_insert),
        )
        return ReservationResult(
            inserted=inserted,
            already_reserved=existing,
            warnings=list(rollup.warnings),
        )
