"""Abstract repository for the inventory reservation ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderbom.domain.model.reservation import InventoryReservation


class ReservationRepository(ABC):

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[InventoryReservation]:
        """Return every reservation row of an order, in insertion order."""

    @abstractmethod
    def add_all(self, rows: list[InventoryReservation]) -> list[InventoryReservation]:
        """Append new rows and return them with ids assigned."""

    @abstractmethod
    def update_all(self, rows: list[InventoryReservation]) -> None:
        """Overwrite existing rows (matched by id)."""
