"""Application service: Release Order Inventory use case.

Flips every RESERVED row of an order to RELEASED (e.g. on cancellation).
Rows are never deleted, so the reservation history stays auditable.
"""

from __future__ import annotations

import logging

from orderbom.domain.exceptions import EntityNotFoundError
from orderbom.domain.model.reservation import InventoryReservation
from orderbom.domain.repository.order_repository import OrderRepository
from orderbom.domain.repository.reservation_repository import ReservationRepository
from orderbom.domain.service.inventory_reservation_service import apply_release

logger = logging.getLogger(__name__)


class ReleaseOrderInventoryHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        reservation_repo: ReservationRepository,
    ) -> None:
        self._order_repo = order_repo
        self._reservation_repo = reservation_repo

    def handle(self, order_id: str) -> list[InventoryReservation]:
        if self._order_repo.get_by_id(order_id) is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        active = [r for r in self._reservation_repo.list_for_order(order_id) if r.is_reserved]
        released = apply_release(active)
        if released:
            self._reservation_repo.update_all(released)

        logger.info("Released %d reservation rows for order %s", len(released), order_id)
        return released
