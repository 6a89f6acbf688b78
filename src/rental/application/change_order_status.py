"""Application service: Change Order Status use case.

Appends a new status to an order on behalf of an administrator.  The
transition must be allowed by the order workflow, and the equipment
cascade must accept it, before anything is written.

Approving an order clears the owner's "first order" flag on all of the
owner's orders.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from rental.application.dto import StatusEntryDTO, to_status_dto
from rental.domain.exceptions import EntityNotFoundError, ValidationError
from rental.domain.model.order import OrderStatus
from rental.domain.model.value_objects import now_utc
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import Transaction, TransactionManager
from rental.domain.service.equipment_status_cascade import EquipmentStatusCascade
from rental.domain.service.order_status_log import OrderStatusLog

logger = structlog.get_logger(__name__)


class ChangeOrderStatusHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
        equipment_status_repo: EquipmentStatusRepository,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._status_log = OrderStatusLog(order_status_repo)
        self._cascade = EquipmentStatusCascade(equipment_status_repo)
        self._clock = clock

    def handle(
        self,
        order_id: int,
        new_status: OrderStatus,
        acting_user_id: int,
        comment: str = "",
    ) -> StatusEntryDTO:
        with self._tx_manager.begin() as tx:
            order = self._order_repo.get_by_id(tx, order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            current = self._status_log.current(tx, order_id)
            if not current.status.can_transition_to(new_status):
                raise ValidationError(
                    f"Cannot move order #{order_id} from "
                    f"{current.status.value} to {new_status.value}"
                )

            now = self._clock()
            self._cascade.on_order_transition(tx, order, new_status, now)
            entry = self._status_log.append(
                tx,
                order_id=order_id,
                status=new_status,
                comment=comment or new_status.value,
                acting_user_id=acting_user_id,
                timestamp=now,
            )

            if new_status is OrderStatus.APPROVED:
                self._clear_first_flag(tx, order.owner_id)

            tx.commit()

        logger.info(
            "order status changed",
            order_id=order_id,
            previous=current.status.value,
            status=new_status.value,
            acting_user_id=acting_user_id,
        )
        return to_status_dto(entry)

    def _clear_first_flag(self, tx: Transaction, owner_id: int) -> None:
        for order in self._order_repo.list_by_owner(tx, owner_id, set(OrderStatus)):
            if order.is_first:
                order.is_first = False
                self._order_repo.save(tx, order)
