"""Abstract repository for order status history.

Insert-only: no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rental.domain.model.order import OrderStatusEntry
from rental.domain.repository.transaction import Transaction


class OrderStatusRepository(ABC):

    @abstractmethod
    def add(self, tx: Transaction, entry: OrderStatusEntry) -> OrderStatusEntry:
        """Insert a new entry and return it with its assigned ID."""

    @abstractmethod
    def list_for_order(self, tx: Transaction, order_id: int) -> list[OrderStatusEntry]:
        """Return every entry of the order, in no particular order."""
