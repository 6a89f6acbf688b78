"""Integration tests for the UpdateOrder use case."""

from datetime import timedelta

import pytest

from rental.application.dto import OrderUpdateRequest
from rental.application.update_order import UpdateOrderHandler
from rental.domain.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    RejectionReason,
    ReservationRejected,
)
from rental.domain.model.order import OrderStatus
from tests.fakes import DAY, NOW, FakeWorld


def _setup():
    world = FakeWorld()
    owner = world.add_user("alice")
    world.add_user("bob")
    kind = world.add_kind(max_reservation_time=3 * 86400, max_reservation_units=2)
    unit = world.add_equipment(kind.id)
    order = world.add_order(
        owner_id=owner.id,
        equipment_ids=[unit.id],
        rent_start=NOW + 5 * DAY,
        rent_end=NOW + 6 * DAY,
        statuses=(OrderStatus.REVIEW, OrderStatus.APPROVED),
    )
    handler = UpdateOrderHandler(
        tx_manager=world.store,
        order_repo=world.orders,
        order_status_repo=world.order_statuses,
        equipment_repo=world.equipment,
        kind_repo=world.kinds,
    )
    return handler, world, order


def _request(hours=48, quantity=2) -> OrderUpdateRequest:
    return OrderUpdateRequest(
        description="longer shoot",
        quantity=quantity,
        rent_start=NOW + 5 * DAY,
        rent_end=NOW + 5 * DAY + timedelta(hours=hours),
    )


class TestUpdateOrder:

    def test_owner_can_reschedule(self):
        handler, world, order = _setup()
        dto = handler.handle(order.id, order.owner_id, _request())
        assert dto.quantity == 2
        assert dto.description == "longer shoot"
        assert dto.status == "Approved"
        [saved] = world.store.rows("orders")
        assert saved.rent_end == NOW + 7 * DAY

    def test_other_user_denied(self):
        handler, world, order = _setup()
        with pytest.raises(AccessDeniedError, match="Permission denied"):
            handler.handle(order.id, 2, _request())
        [saved] = world.store.rows("orders")
        assert saved.quantity.value == 1

    def test_same_policy_as_create(self):
        handler, world, order = _setup()
        with pytest.raises(ReservationRejected) as exc_info:
            handler.handle(order.id, order.owner_id, _request(hours=12))
        assert exc_info.value.reason is RejectionReason.TOO_SHORT
        [saved] = world.store.rows("orders")
        assert saved.rent_end == NOW + 6 * DAY

    def test_quantity_limit(self):
        handler, _, order = _setup()
        with pytest.raises(ReservationRejected, match="Quantity limit exceeded"):
            handler.handle(order.id, order.owner_id, _request(quantity=3))

    def test_unknown_order(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Order #9 not found"):
            handler.handle(9, 1, _request())
