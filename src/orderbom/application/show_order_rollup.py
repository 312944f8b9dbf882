"""Application service: Show Order Rollup use case (query).

Safe to call on every page load: building a rollup has no side effects.
"""

from __future__ import annotations

from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.rollup import OrderRollup
from orderbom.domain.repository.order_repository import OrderRepository
from orderbom.domain.service.order_rollup_service import build_order_rollup


class ShowOrderRollupHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str) -> OrderRollup:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return build_order_rollup(
            order.id, order.line_items, order.accepted_components
        )
