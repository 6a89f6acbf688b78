"""Abstract repository for equipment availability history.

Insert-only, like the order status history.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rental.domain.model.equipment import EquipmentStatusEntry
from rental.domain.repository.transaction import Transaction


class EquipmentStatusRepository(ABC):

    @abstractmethod
    def add(self, tx: Transaction, entry: EquipmentStatusEntry) -> EquipmentStatusEntry:
        """Insert a new entry and return it with its assigned ID."""

    @abstractmethod
    def list_for_equipment(
        self, tx: Transaction, equipment_id: int
    ) -> list[EquipmentStatusEntry]:
        """Return every entry of one equipment unit."""

    @abstractmethod
    def list_for_order(self, tx: Transaction, order_id: int) -> list[EquipmentStatusEntry]:
        """Return every entry linked to the order, across all its units."""
