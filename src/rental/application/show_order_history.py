"""Application service: Show Order History use case (query)."""

from __future__ import annotations

from rental.application.dto import StatusEntryDTO, to_status_dto
from rental.domain.exceptions import EntityNotFoundError
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import TransactionManager
from rental.domain.service.order_status_log import OrderStatusLog


class ShowOrderHistoryHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._status_log = OrderStatusLog(order_status_repo)

    def handle(self, order_id: int) -> list[StatusEntryDTO]:
        with self._tx_manager.begin() as tx:
            if self._order_repo.get_by_id(tx, order_id) is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            history = self._status_log.history(tx, order_id)
        return [to_status_dto(entry) for entry in history]
