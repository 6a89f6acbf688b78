"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model.
Every check runs before the first write, and all writes (order, initial
status, equipment bookings) share one transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from rental.application.dto import OrderDTO, OrderRequest, to_order_dto
from rental.domain.exceptions import EntityNotFoundError, ValidationError
from rental.domain.model.equipment import Equipment
from rental.domain.model.order import Order, OrderStatus
from rental.domain.model.value_objects import Period, now_utc
from rental.domain.repository.catalog_repository import (
    EquipmentRepository,
    KindRepository,
    UserRepository,
)
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import Transaction, TransactionManager
from rental.domain.service.equipment_availability import (
    EquipmentAvailability,
    booking_period,
)
from rental.domain.service.order_status_log import OrderStatusLog
from rental.domain.service.reservation_policy import ReservationPolicy

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
        equipment_repo: EquipmentRepository,
        equipment_status_repo: EquipmentStatusRepository,
        kind_repo: KindRepository,
        user_repo: UserRepository,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._equipment_repo = equipment_repo
        self._kind_repo = kind_repo
        self._user_repo = user_repo
        self._status_log = OrderStatusLog(order_status_repo)
        self._availability = EquipmentAvailability(equipment_status_repo)
        self._policy = ReservationPolicy()
        self._clock = clock

    def handle(self, owner_id: int, request: OrderRequest) -> OrderDTO:
        """Create a new rental order in Review status.

        Steps:
        1. Resolve the owner and every requested equipment unit.
        2. Validate the request against the kind's reservation limits.
        3. Make sure every unit is free for the booking period.
        4. Persist the order, its first status entry and the bookings.
        """
        with self._tx_manager.begin() as tx:
            owner = self._user_repo.get_by_id(tx, owner_id)
            if owner is None:
                raise EntityNotFoundError(f"User #{owner_id} not found")

            if not request.equipment_ids:
                raise ValidationError("No equipment for order")
            equipment = self._load_equipment(tx, request.equipment_ids)

            kind = self._kind_repo.get_by_id(tx, equipment[0].kind_id)
            if kind is None:
                raise EntityNotFoundError(f"Kind #{equipment[0].kind_id} not found")

            self._policy.validate(
                request.rent_start, request.rent_end, request.quantity, kind.limits
            )

            period = Period(request.rent_start, request.rent_end)
            for unit in equipment:
                if not self._availability.is_free(tx, unit.id, booking_period(period)):  # type: ignore[arg-type]
                    raise ValidationError(f"Requested equipment #{unit.id} is not free")

            is_first = not self._order_repo.owner_has_status_entry(
                tx, owner_id, OrderStatus.APPROVED
            )
            order = Order.create(
                description=request.description,
                quantity=request.quantity,
                rent_start=request.rent_start,
                rent_end=request.rent_end,
                owner_id=owner_id,
                equipment_ids=request.equipment_ids,
                is_first=is_first,
            )
            self._order_repo.save(tx, order)

            self._status_log.append(
                tx,
                order_id=order.id,  # type: ignore[arg-type]
                status=OrderStatus.REVIEW,
                comment="Order created",
                acting_user_id=owner_id,
                timestamp=self._clock(),
            )
            for unit in equipment:
                self._availability.book(tx, unit.id, order.id, period)  # type: ignore[arg-type]

            tx.commit()

        logger.info(
            "order created",
            order_id=order.id,
            owner_id=owner_id,
            equipment_ids=order.equipment_ids,
        )
        return to_order_dto(order, OrderStatus.REVIEW)

    def _load_equipment(self, tx: Transaction, equipment_ids: list[int]) -> list[Equipment]:
        equipment: list[Equipment] = []
        for equipment_id in equipment_ids:
            unit = self._equipment_repo.get_by_id(tx, equipment_id)
            if unit is None:
                raise EntityNotFoundError(f"Equipment #{equipment_id} not found")
            equipment.append(unit)

        if len({unit.kind_id for unit in equipment}) > 1:
            raise ValidationError("All equipment in an order must be of the same kind")
        return equipment
