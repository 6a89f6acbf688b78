"""Application service: Add Kind use case."""

from __future__ import annotations

from rental.domain.exceptions import ValidationError
from rental.domain.model.kind import Kind
from rental.domain.repository.catalog_repository import KindRepository
from rental.domain.repository.transaction import TransactionManager


class AddKindHandler:

    def __init__(self, tx_manager: TransactionManager, kind_repo: KindRepository) -> None:
        self._tx_manager = tx_manager
        self._kind_repo = kind_repo

    def handle(self, name: str, max_reservation_time: int, max_reservation_units: int) -> Kind:
        """Add a new equipment kind with its reservation limits."""
        kind = Kind.create(name, max_reservation_time, max_reservation_units)

        with self._tx_manager.begin() as tx:
            if self._kind_repo.get_by_name(tx, kind.name) is not None:
                raise ValidationError(f"Kind '{kind.name}' already exists")
            self._kind_repo.save(tx, kind)
            tx.commit()
        return kind
