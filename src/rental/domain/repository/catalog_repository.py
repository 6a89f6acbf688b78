"""Abstract repositories for the reference data orders point at."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rental.domain.model.equipment import Equipment
from rental.domain.model.kind import Kind
from rental.domain.model.user import User
from rental.domain.repository.transaction import Transaction


class KindRepository(ABC):

    @abstractmethod
    def get_by_id(self, tx: Transaction, kind_id: int) -> Kind | None:
        """Return a kind by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, tx: Transaction, name: str) -> Kind | None:
        """Return a kind by its exact name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self, tx: Transaction) -> list[Kind]:
        """Return every kind."""

    @abstractmethod
    def save(self, tx: Transaction, kind: Kind) -> None:
        """Persist a new or updated kind, assigning an ID to new ones."""


class EquipmentRepository(ABC):

    @abstractmethod
    def get_by_id(self, tx: Transaction, equipment_id: int) -> Equipment | None:
        """Return an equipment unit by its ID, or None if not found."""

    @abstractmethod
    def save(self, tx: Transaction, equipment: Equipment) -> None:
        """Persist a new or updated unit, assigning an ID to new ones."""


class UserRepository(ABC):

    @abstractmethod
    def get_by_id(self, tx: Transaction, user_id: int) -> User | None:
        """Return a user by its ID, or None if not found."""

    @abstractmethod
    def save(self, tx: Transaction, user: User) -> None:
        """Persist a new or updated user, assigning an ID to new ones."""
