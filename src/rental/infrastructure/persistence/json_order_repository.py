"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from rental.domain.model.history import latest
from rental.domain.model.order import Order, OrderStatus, OrderStatusEntry
from rental.domain.model.value_objects import Quantity, utc
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.transaction import Transaction
from rental.infrastructure.persistence.json_status_repositories import (
    JsonOrderStatusRepository,
)
from rental.infrastructure.persistence.json_store import json_tx, record_decoder


class JsonOrderRepository(OrderRepository):

    TABLE = "orders"

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, tx: Transaction, order_id: int) -> Order | None:
        for raw in json_tx(tx).records(self.TABLE):
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, tx: Transaction, order: Order) -> None:
        jtx = json_tx(tx)
        if order.id is None:
            order.id = jtx.insert(self.TABLE, self._to_raw(order))
        else:
            jtx.replace(self.TABLE, self._to_raw(order))

    def list_by_current_status(self, tx: Transaction, status: OrderStatus) -> list[Order]:
        current = self._current_statuses(tx)
        return [
            order for order in self._all(tx)
            if current.get(order.id) is status
        ]

    def list_by_owner(
        self,
        tx: Transaction,
        owner_id: int,
        statuses: Collection[OrderStatus],
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Order]:
        selected = self._owned(tx, owner_id, statuses)
        end = None if limit is None else offset + limit
        return selected[offset:end]

    def count_by_owner(
        self,
        tx: Transaction,
        owner_id: int,
        statuses: Collection[OrderStatus],
    ) -> int:
        return len(self._owned(tx, owner_id, statuses))

    def owner_has_status_entry(
        self, tx: Transaction, owner_id: int, status: OrderStatus
    ) -> bool:
        owned_ids = {order.id for order in self._all(tx) if order.owner_id == owner_id}
        return any(
            entry.order_id in owned_ids and entry.status is status
            for entry in self._status_entries(tx)
        )

    # --- Queries --------------------------------------------------------------

    def _all(self, tx: Transaction) -> list[Order]:
        orders = [self._to_domain(raw) for raw in json_tx(tx).records(self.TABLE)]
        return sorted(orders, key=lambda order: order.id)

    def _owned(
        self, tx: Transaction, owner_id: int, statuses: Collection[OrderStatus]
    ) -> list[Order]:
        current = self._current_statuses(tx)
        return [
            order for order in self._all(tx)
            if order.owner_id == owner_id and current.get(order.id) in statuses
        ]

    def _status_entries(self, tx: Transaction) -> list[OrderStatusEntry]:
        return [
            JsonOrderStatusRepository.to_domain(raw)
            for raw in json_tx(tx).records(JsonOrderStatusRepository.TABLE)
        ]

    def _current_statuses(self, tx: Transaction) -> dict[int, OrderStatus]:
        by_order: dict[int, list[OrderStatusEntry]] = {}
        for entry in self._status_entries(tx):
            by_order.setdefault(entry.order_id, []).append(entry)
        return {
            order_id: latest(entries).status  # type: ignore[union-attr]
            for order_id, entries in by_order.items()
        }

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "description": order.description,
            "quantity": order.quantity.value,
            "rent_start": order.rent_start.isoformat(),
            "rent_end": order.rent_end.isoformat(),
            "owner_id": order.owner_id,
            "equipment_ids": list(order.equipment_ids),
            "is_first": order.is_first,
            "created_at": order.created_at.isoformat(),
        }

    @staticmethod
    @record_decoder(TABLE)
    def _to_domain(raw: dict) -> Order:
        return Order(
            id=raw["id"],
            description=raw.get("description", ""),
            quantity=Quantity(raw["quantity"]),
            rent_start=utc(datetime.fromisoformat(raw["rent_start"])),
            rent_end=utc(datetime.fromisoformat(raw["rent_end"])),
            owner_id=raw["owner_id"],
            equipment_ids=list(raw["equipment_ids"]),
            is_first=raw.get("is_first", False),
            created_at=utc(datetime.fromisoformat(raw["created_at"])),
        )
