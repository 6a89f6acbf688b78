"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from rental.domain.model.order import Order, OrderStatus, OrderStatusEntry

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderRequest:
    """Input: a new reservation as asked for by the user."""

    description: str
    quantity: int
    rent_start: datetime
    rent_end: datetime
    equipment_ids: list[int]


@dataclass(frozen=True)
class OrderUpdateRequest:
    """Input: the fields an owner may change on an existing order."""

    description: str
    quantity: int
    rent_start: datetime
    rent_end: datetime


@dataclass(frozen=True)
class OrderDTO:
    """Output: an order as displayed to the user."""

    id: int
    description: str
    quantity: int
    rent_start: str
    rent_end: str
    owner_id: int
    equipment_ids: list[int]
    status: str
    is_first: bool
    created_at: str


@dataclass(frozen=True)
class OrderListDTO:
    """Output: one page of orders plus the size of the whole selection."""

    items: list[OrderDTO]
    total: int


@dataclass(frozen=True)
class StatusEntryDTO:
    """Output: a single row of an order's status history."""

    id: int
    order_id: int
    status: str
    current_date: str
    comment: str
    acting_user_id: int


def to_order_dto(order: Order, status: OrderStatus) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        description=order.description,
        quantity=order.quantity.value,
        rent_start=order.rent_start.strftime(TIMESTAMP_FORMAT),
        rent_end=order.rent_end.strftime(TIMESTAMP_FORMAT),
        owner_id=order.owner_id,
        equipment_ids=list(order.equipment_ids),
        status=status.value,
        is_first=order.is_first,
        created_at=order.created_at.strftime(TIMESTAMP_FORMAT),
    )


def to_status_dto(entry: OrderStatusEntry) -> StatusEntryDTO:
    return StatusEntryDTO(
        id=entry.id,  # type: ignore[arg-type]
        order_id=entry.order_id,
        status=entry.status.value,
        current_date=entry.current_date.strftime(TIMESTAMP_FORMAT),
        comment=entry.comment,
        acting_user_id=entry.acting_user_id,
    )
