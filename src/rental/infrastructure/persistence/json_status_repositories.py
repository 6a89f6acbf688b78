"""JSON-file-backed implementations of the status history repositories.

Both repositories only ever insert rows.
"""

from __future__ import annotations

from datetime import datetime

from rental.domain.exceptions import StorageError
from rental.domain.model.equipment import EquipmentStatus, EquipmentStatusEntry
from rental.domain.model.order import OrderStatus, OrderStatusEntry
from rental.domain.model.value_objects import Period, utc
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import Transaction
from rental.infrastructure.persistence.json_store import json_tx, record_decoder


class JsonOrderStatusRepository(OrderStatusRepository):

    TABLE = "order_statuses"

    def add(self, tx: Transaction, entry: OrderStatusEntry) -> OrderStatusEntry:
        if entry.id is not None:
            raise StorageError(f"Order status entry #{entry.id} is already stored")
        new_id = json_tx(tx).insert(self.TABLE, self.to_raw(entry))
        return self.to_domain({**self.to_raw(entry), "id": new_id})

    def list_for_order(self, tx: Transaction, order_id: int) -> list[OrderStatusEntry]:
        return [
            self.to_domain(raw)
            for raw in json_tx(tx).records(self.TABLE)
            if raw.get("order_id") == order_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_raw(entry: OrderStatusEntry) -> dict:
        return {
            "id": entry.id,
            "order_id": entry.order_id,
            "status": entry.status.value,
            "current_date": entry.current_date.isoformat(),
            "comment": entry.comment,
            "acting_user_id": entry.acting_user_id,
        }

    @staticmethod
    @record_decoder(TABLE)
    def to_domain(raw: dict) -> OrderStatusEntry:
        return OrderStatusEntry(
            id=raw["id"],
            order_id=raw["order_id"],
            status=OrderStatus(raw["status"]),
            current_date=utc(datetime.fromisoformat(raw["current_date"])),
            comment=raw.get("comment", ""),
            acting_user_id=raw["acting_user_id"],
        )


class JsonEquipmentStatusRepository(EquipmentStatusRepository):

    TABLE = "equipment_statuses"

    def add(self, tx: Transaction, entry: EquipmentStatusEntry) -> EquipmentStatusEntry:
        if entry.id is not None:
            raise StorageError(f"Equipment status entry #{entry.id} is already stored")
        new_id = json_tx(tx).insert(self.TABLE, self._to_raw(entry))
        return self._to_domain({**self._to_raw(entry), "id": new_id})

    def list_for_equipment(
        self, tx: Transaction, equipment_id: int
    ) -> list[EquipmentStatusEntry]:
        return [
            self._to_domain(raw)
            for raw in json_tx(tx).records(self.TABLE)
            if raw.get("equipment_id") == equipment_id
        ]

    def list_for_order(self, tx: Transaction, order_id: int) -> list[EquipmentStatusEntry]:
        return [
            self._to_domain(raw)
            for raw in json_tx(tx).records(self.TABLE)
            if raw.get("order_id") == order_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: EquipmentStatusEntry) -> dict:
        return {
            "id": entry.id,
            "equipment_id": entry.equipment_id,
            "order_id": entry.order_id,
            "status": entry.status.value,
            "start_date": entry.start_date.isoformat(),
            "end_date": entry.end_date.isoformat() if entry.end_date else None,
            "created_at": entry.created_at.isoformat(),
        }

    @staticmethod
    @record_decoder(TABLE)
    def _to_domain(raw: dict) -> EquipmentStatusEntry:
        end = raw.get("end_date")
        return EquipmentStatusEntry(
            id=raw["id"],
            equipment_id=raw["equipment_id"],
            order_id=raw.get("order_id"),
            status=EquipmentStatus(raw["status"]),
            period=Period(
                datetime.fromisoformat(raw["start_date"]),
                datetime.fromisoformat(end) if end else None,
            ),
            created_at=utc(datetime.fromisoformat(raw["created_at"])),
        )
