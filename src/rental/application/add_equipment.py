"""Application service: Add Equipment use case.

New units start with no availability history, which means they are free.
"""

from __future__ import annotations

from rental.domain.exceptions import EntityNotFoundError
from rental.domain.model.equipment import Equipment
from rental.domain.repository.catalog_repository import (
    EquipmentRepository,
    KindRepository,
)
from rental.domain.repository.transaction import TransactionManager


class AddEquipmentHandler:

    def __init__(
        self,
        tx_manager: TransactionManager,
        equipment_repo: EquipmentRepository,
        kind_repo: KindRepository,
    ) -> None:
        self._tx_manager = tx_manager
        self._equipment_repo = equipment_repo
        self._kind_repo = kind_repo

    def handle(self, name: str, kind_id: int) -> Equipment:
        equipment = Equipment.create(name, kind_id)

        with self._tx_manager.begin() as tx:
            if self._kind_repo.get_by_id(tx, kind_id) is None:
                raise EntityNotFoundError(f"Kind #{kind_id} not found")
            self._equipment_repo.save(tx, equipment)
            tx.commit()
        return equipment
