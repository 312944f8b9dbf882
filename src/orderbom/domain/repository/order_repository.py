"""Abstract repository for the Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Implementations are responsible for tenant scoping:
the engine trusts whatever rows it is handed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderbom.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order with its line items and accepted components, or None."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""
