"""Application service: Update Order use case.

Only the owner may change an order.  The new period and quantity go
through the same reservation policy as a new order.
"""

from __future__ import annotations

import structlog

from rental.application.dto import OrderDTO, OrderUpdateRequest, to_order_dto
from rental.domain.exceptions import AccessDeniedError, EntityNotFoundError
from rental.domain.repository.catalog_repository import (
    EquipmentRepository,
    KindRepository,
)
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import TransactionManager
from rental.domain.service.order_status_log import OrderStatusLog
from rental.domain.service.reservation_policy import ReservationPolicy

logger = structlog.get_logger(__name__)


class UpdateOrderHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
        equipment_repo: EquipmentRepository,
        kind_repo: KindRepository,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._equipment_repo = equipment_repo
        self._kind_repo = kind_repo
        self._status_log = OrderStatusLog(order_status_repo)
        self._policy = ReservationPolicy()

    def handle(
        self,
        order_id: int,
        acting_user_id: int,
        request: OrderUpdateRequest,
    ) -> OrderDTO:
        with self._tx_manager.begin() as tx:
            order = self._order_repo.get_by_id(tx, order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            if order.owner_id != acting_user_id:
                raise AccessDeniedError("Permission denied")

            equipment = self._equipment_repo.get_by_id(tx, order.equipment_ids[0])
            if equipment is None:
                raise EntityNotFoundError(f"Equipment #{order.equipment_ids[0]} not found")
            kind = self._kind_repo.get_by_id(tx, equipment.kind_id)
            if kind is None:
                raise EntityNotFoundError(f"Kind #{equipment.kind_id} not found")

            self._policy.validate(
                request.rent_start, request.rent_end, request.quantity, kind.limits
            )

            order.reschedule(
                description=request.description,
                quantity=request.quantity,
                rent_start=request.rent_start,
                rent_end=request.rent_end,
            )
            self._order_repo.save(tx, order)
            current = self._status_log.current(tx, order_id)
            tx.commit()

        logger.info("order updated", order_id=order_id, acting_user_id=acting_user_id)
        return to_order_dto(order, current.status)
