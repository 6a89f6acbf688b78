"""Domain service: Equipment Status Cascade.

When an order changes status, the equipment it holds changes availability
too.  This service decides which equipment entries a transition produces,
checks that every unit is in the status the transition expects, and only
then appends the new entries.  Nothing is written for an order whose
precondition fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from rental.domain.exceptions import PreconditionFailure
from rental.domain.model.equipment import EquipmentStatus, EquipmentStatusEntry
from rental.domain.model.history import latest
from rental.domain.model.order import Order, OrderStatus
from rental.domain.model.value_objects import Period, utc
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.transaction import Transaction


@dataclass(frozen=True)
class _CascadeRule:
    expected: EquipmentStatus | None
    produces: EquipmentStatus
    ends_with_rental: bool = False


_RULES: dict[OrderStatus, _CascadeRule] = {
    OrderStatus.IN_PROGRESS: _CascadeRule(
        expected=EquipmentStatus.BOOKED,
        produces=EquipmentStatus.IN_USE,
        ends_with_rental=True,
    ),
    OrderStatus.OVERDUE: _CascadeRule(
        expected=EquipmentStatus.IN_USE,
        produces=EquipmentStatus.IN_USE,
    ),
    OrderStatus.REJECTED: _CascadeRule(expected=None, produces=EquipmentStatus.AVAILABLE),
    OrderStatus.CLOSED: _CascadeRule(expected=None, produces=EquipmentStatus.AVAILABLE),
}


class EquipmentStatusCascade:

    def __init__(self, equipment_status_repo: EquipmentStatusRepository) -> None:
        self._equipment_status_repo = equipment_status_repo

    def current_statuses(
        self, tx: Transaction, order: Order
    ) -> dict[int, EquipmentStatus | None]:
        """Map each unit of the order to its latest status for that order."""
        entries = self._equipment_status_repo.list_for_order(tx, order.id)  # type: ignore[arg-type]
        result: dict[int, EquipmentStatus | None] = {}
        for equipment_id in order.equipment_ids:
            entry = latest(e for e in entries if e.equipment_id == equipment_id)
            result[equipment_id] = entry.status if entry else None
        return result

    def check(self, tx: Transaction, order: Order, new_status: OrderStatus) -> None:
        """Raise PreconditionFailure if any unit is not in the expected status."""
        rule = _RULES.get(new_status)
        if rule is None or rule.expected is None:
            return

        current = self.current_statuses(tx, order)
        mismatched = [
            equipment_id
            for equipment_id, status in current.items()
            if status is not rule.expected
        ]
        if mismatched:
            raise PreconditionFailure(
                order_id=order.id,  # type: ignore[arg-type]
                expected_status=rule.expected.value,
                equipment_ids=mismatched,
            )

    def on_order_transition(
        self,
        tx: Transaction,
        order: Order,
        new_status: OrderStatus,
        effective_date: datetime,
    ) -> list[EquipmentStatusEntry]:
        """Append the equipment entries caused by an order transition.

        Transitions with no equipment effect (Review, Approved) return an
        empty list.
        """
        rule = _RULES.get(new_status)
        if rule is None:
            return []

        self.check(tx, order, new_status)

        start = utc(effective_date)
        end = order.rent_end if rule.ends_with_rental and order.rent_end > start else None
        return [
            self._equipment_status_repo.add(
                tx,
                EquipmentStatusEntry(
                    id=None,
                    equipment_id=equipment_id,
                    order_id=order.id,
                    status=rule.produces,
                    period=Period(start, end),
                ),
            )
            for equipment_id in order.equipment_ids
        ]
