"""Domain service: Order Status Log.

The status history is the system of record for what happened to an order
and when.  It only ever grows: appending a new entry is the one way to
change an order's status.
"""

from __future__ import annotations

from datetime import datetime

from rental.domain.exceptions import EntityNotFoundError
from rental.domain.model.history import chronological, latest
from rental.domain.model.order import OrderStatus, OrderStatusEntry
from rental.domain.model.value_objects import utc
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import Transaction


class OrderStatusLog:

    def __init__(self, status_repo: OrderStatusRepository) -> None:
        self._status_repo = status_repo

    def append(
        self,
        tx: Transaction,
        order_id: int,
        status: OrderStatus,
        comment: str,
        acting_user_id: int,
        timestamp: datetime,
    ) -> OrderStatusEntry:
        """Append *status* so that it becomes the order's current status.

        An entry is never dated before the current one: a *timestamp*
        older than the current entry is moved up to it, and the ID
        tie-break then puts the new entry last.
        """
        current_date = utc(timestamp)
        previous = latest(self._status_repo.list_for_order(tx, order_id))
        if previous is not None and previous.current_date > current_date:
            current_date = previous.current_date
        entry = OrderStatusEntry(
            id=None,
            order_id=order_id,
            status=status,
            current_date=current_date,
            comment=comment,
            acting_user_id=acting_user_id,
        )
        return self._status_repo.add(tx, entry)

    def current(self, tx: Transaction, order_id: int) -> OrderStatusEntry:
        """Return the entry with the latest timestamp.

        Entries sharing a timestamp are ordered by ID, so the one inserted
        last is current.
        """
        entry = latest(self._status_repo.list_for_order(tx, order_id))
        if entry is None:
            raise EntityNotFoundError(f"Order #{order_id} has no status history")
        return entry

    def history(self, tx: Transaction, order_id: int) -> list[OrderStatusEntry]:
        """Return every entry, oldest first."""
        return chronological(self._status_repo.list_for_order(tx, order_id))
