"""Abstract repository for Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Queries by status always mean the *current* status,
resolved from the status history with the same tie-break as
``OrderStatusLog.current``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection

from rental.domain.model.order import Order, OrderStatus
from rental.domain.repository.transaction import Transaction


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, tx: Transaction, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, tx: Transaction, order: Order) -> None:
        """Persist a new or updated order, assigning an ID to new ones."""

    @abstractmethod
    def list_by_current_status(self, tx: Transaction, status: OrderStatus) -> list[Order]:
        """Return every order whose current status is *status*, ascending by ID."""

    @abstractmethod
    def list_by_owner(
        self,
        tx: Transaction,
        owner_id: int,
        statuses: Collection[OrderStatus],
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Order]:
        """Return the owner's orders whose current status is in *statuses*, ascending by ID."""

    @abstractmethod
    def count_by_owner(
        self,
        tx: Transaction,
        owner_id: int,
        statuses: Collection[OrderStatus],
    ) -> int:
        """Count the owner's orders whose current status is in *statuses*."""

    @abstractmethod
    def owner_has_status_entry(
        self, tx: Transaction, owner_id: int, status: OrderStatus
    ) -> bool:
        """True if any of the owner's orders ever had *status* in its history."""
