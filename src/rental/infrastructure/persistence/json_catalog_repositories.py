"""JSON-file-backed implementations of the kind, equipment and user repositories."""

from __future__ import annotations

from rental.domain.model.equipment import Equipment
from rental.domain.model.kind import Kind
from rental.domain.model.user import User
from rental.domain.repository.catalog_repository import (
    EquipmentRepository,
    KindRepository,
    UserRepository,
)
from rental.domain.repository.transaction import Transaction
from rental.infrastructure.persistence.json_store import json_tx, record_decoder


class JsonKindRepository(KindRepository):

    TABLE = "kinds"

    def get_by_id(self, tx: Transaction, kind_id: int) -> Kind | None:
        for kind in self.list_all(tx):
            if kind.id == kind_id:
                return kind
        return None

    def get_by_name(self, tx: Transaction, name: str) -> Kind | None:
        for kind in self.list_all(tx):
            if kind.name.lower() == name.strip().lower():
                return kind
        return None

    def list_all(self, tx: Transaction) -> list[Kind]:
        return [self._to_domain(raw) for raw in json_tx(tx).records(self.TABLE)]

    def save(self, tx: Transaction, kind: Kind) -> None:
        raw = {
            "id": kind.id,
            "name": kind.name,
            "max_reservation_time": kind.max_reservation_time,
            "max_reservation_units": kind.max_reservation_units,
        }
        if kind.id is None:
            kind.id = json_tx(tx).insert(self.TABLE, raw)
        else:
            json_tx(tx).replace(self.TABLE, raw)

    @staticmethod
    @record_decoder(TABLE)
    def _to_domain(raw: dict) -> Kind:
        return Kind(
            id=raw["id"],
            name=str(raw["name"]),
            max_reservation_time=int(raw["max_reservation_time"]),
            max_reservation_units=int(raw["max_reservation_units"]),
        )


class JsonEquipmentRepository(EquipmentRepository):

    TABLE = "equipment"

    def get_by_id(self, tx: Transaction, equipment_id: int) -> Equipment | None:
        for raw in json_tx(tx).records(self.TABLE):
            if raw["id"] == equipment_id:
                return self._to_domain(raw)
        return None

    def save(self, tx: Transaction, equipment: Equipment) -> None:
        raw = {"id": equipment.id, "name": equipment.name, "kind_id": equipment.kind_id}
        if equipment.id is None:
            equipment.id = json_tx(tx).insert(self.TABLE, raw)
        else:
            json_tx(tx).replace(self.TABLE, raw)

    @staticmethod
    @record_decoder(TABLE)
    def _to_domain(raw: dict) -> Equipment:
        return Equipment(id=raw["id"], name=str(raw["name"]), kind_id=int(raw["kind_id"]))


class JsonUserRepository(UserRepository):

    TABLE = "users"

    def get_by_id(self, tx: Transaction, user_id: int) -> User | None:
        for raw in json_tx(tx).records(self.TABLE):
            if raw["id"] == user_id:
                return self._to_domain(raw)
        return None

    def save(self, tx: Transaction, user: User) -> None:
        raw = {"id": user.id, "name": user.name}
        if user.id is None:
            user.id = json_tx(tx).insert(self.TABLE, raw)
        else:
            json_tx(tx).replace(self.TABLE, raw)

    @staticmethod
    @record_decoder(TABLE)
    def _to_domain(raw: dict) -> User:
        return User(id=raw["id"], name=str(raw["name"]))
