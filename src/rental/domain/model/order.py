"""Order aggregate and its status history.

An Order links one user to one or more equipment units over a rental
period.  Its lifecycle status is not a field on the order: it lives in an
append-only list of ``OrderStatusEntry`` records, and the current status
is always derived from that history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rental.domain.exceptions import ValidationError
from rental.domain.model.value_objects import ONE_DAY, Period, Quantity, utc


class OrderStatus(Enum):
    REVIEW = "Review"
    APPROVED = "Approved"
    IN_PROGRESS = "InProgress"
    REJECTED = "Rejected"
    CLOSED = "Closed"
    OVERDUE = "Overdue"

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    @staticmethod
    def parse(raw: str) -> OrderStatus:
        for status in OrderStatus:
            if status.value.lower() == raw.strip().lower():
                return status
        raise ValidationError(f"Unknown order status '{raw}'")


# Administrator workflow.  Overdue is normally reached through the sweep job.
_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.REVIEW: frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CLOSED}),
    OrderStatus.APPROVED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CLOSED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.CLOSED, OrderStatus.OVERDUE}),
    OrderStatus.OVERDUE: frozenset({OrderStatus.CLOSED}),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.CLOSED: frozenset(),
}


class StatusFilter(Enum):
    """Status selectors accepted by order listings.

    ``ALL``, ``ACTIVE`` and ``FINISHED`` aggregate several statuses; every
    other member selects exactly one.
    """

    ALL = "all"
    ACTIVE = "active"
    FINISHED = "finished"
    REVIEW = "Review"
    APPROVED = "Approved"
    IN_PROGRESS = "InProgress"
    REJECTED = "Rejected"
    CLOSED = "Closed"
    OVERDUE = "Overdue"

    @property
    def statuses(self) -> frozenset[OrderStatus]:
        if self is StatusFilter.ALL:
            return frozenset(OrderStatus)
        if self is StatusFilter.ACTIVE:
            return frozenset({
                OrderStatus.REVIEW,
                OrderStatus.APPROVED,
                OrderStatus.IN_PROGRESS,
                OrderStatus.OVERDUE,
            })
        if self is StatusFilter.FINISHED:
            return frozenset({OrderStatus.REJECTED, OrderStatus.CLOSED})
        return frozenset({OrderStatus(self.value)})

    @staticmethod
    def parse(raw: str) -> StatusFilter:
        for item in StatusFilter:
            if item.value.lower() == raw.strip().lower():
                return item
        raise ValidationError(f"Unknown status filter '{raw}'")


@dataclass(frozen=True)
class OrderStatusEntry:
    """One immutable row of an order's status history.

    ``id`` is None until the repository inserts the entry.
    """

    id: int | None
    order_id: int
    status: OrderStatus
    current_date: datetime
    comment: str
    acting_user_id: int

    @property
    def sort_key(self) -> tuple:
        return (self.current_date, self.id or 0)


@dataclass
class Order:
    """Aggregate root for rental orders.

    Use the ``Order.create()`` factory for new orders.  The reservation
    policy must have accepted the requested period and quantity before the
    factory is called; the factory itself only guards structural
    invariants.  ``__init__`` stays simple so repositories can reconstitute
    persisted orders without re-validating.
    """

    id: int | None
    description: str
    quantity: Quantity
    rent_start: datetime
    rent_end: datetime
    owner_id: int
    equipment_ids: list[int]
    is_first: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        description: str,
        quantity: int,
        rent_start: datetime,
        rent_end: datetime,
        owner_id: int,
        equipment_ids: list[int],
        is_first: bool = False,
    ) -> Order:
        if not equipment_ids:
            raise ValidationError("No equipment for order")
        if len(set(equipment_ids)) != len(equipment_ids):
            raise ValidationError("Equipment listed more than once")

        return Order(
            id=None,
            description=(description or "").strip(),
            quantity=Quantity(quantity),
            rent_start=utc(rent_start),
            rent_end=utc(rent_end),
            owner_id=owner_id,
            equipment_ids=list(equipment_ids),
            is_first=is_first,
        )

    # --- Mutations ------------------------------------------------------------

    def reschedule(
        self,
        description: str,
        quantity: int,
        rent_start: datetime,
        rent_end: datetime,
    ) -> None:
        """Apply an accepted update request.

        The owner and the reserved equipment never change.
        """
        self.description = (description or "").strip()
        self.quantity = Quantity(quantity)
        self.rent_start = utc(rent_start)
        self.rent_end = utc(rent_end)

    # --- Computed properties --------------------------------------------------

    @property
    def period(self) -> Period:
        return Period(self.rent_start, self.rent_end)

    @property
    def overdue_date(self) -> datetime:
        """The instant an unreturned order becomes overdue."""
        return self.rent_end + ONE_DAY

    def is_expired_at(self, now: datetime) -> bool:
        return utc(now) > self.rent_end
