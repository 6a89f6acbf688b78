"""Application service: List Orders use case (query).

Lists one owner's orders, optionally narrowed to a single status or to
the aggregated "active" / "finished" groups, one page at a time.
"""

from __future__ import annotations

from rental.application.dto import OrderListDTO, to_order_dto
from rental.domain.exceptions import ValidationError
from rental.domain.model.order import StatusFilter
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import TransactionManager
from rental.domain.service.order_status_log import OrderStatusLog


class ListOrdersHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._status_log = OrderStatusLog(order_status_repo)

    def handle(
        self,
        owner_id: int,
        status: str = StatusFilter.ALL.value,
        limit: int | None = None,
        offset: int = 0,
    ) -> OrderListDTO:
        if limit is not None and limit < 0:
            raise ValidationError("Limit cannot be negative")
        if offset < 0:
            raise ValidationError("Offset cannot be negative")

        statuses = StatusFilter.parse(status).statuses
        with self._tx_manager.begin() as tx:
            orders = self._order_repo.list_by_owner(tx, owner_id, statuses, limit, offset)
            total = self._order_repo.count_by_owner(tx, owner_id, statuses)
            items = [
                to_order_dto(order, self._status_log.current(tx, order.id).status)  # type: ignore[arg-type]
                for order in orders
            ]
        return OrderListDTO(items=items, total=total)
