"""Application service: Show Reservations use case (query)."""

from __future__ import annotations

from orderbom.domain.model.reservation import ReservationRollupView, ReservationStatus
from orderbom.domain.repository.reservation_repository import ReservationRepository
from orderbom.domain.service.inventory_reservation_service import build_rollup_view


class ShowReservationsHandler:

    def __init__(self, reservation_repo: ReservationRepository) -> None:
        self._reservation_repo = reservation_repo

    def handle(
        self,
        order_id: str,
        status: ReservationStatus | str = ReservationStatus.RESERVED,
    ) -> ReservationRollupView:
        rows = self._reservation_repo.list_for_order(order_id)
        return build_rollup_view(rows, status=status)
