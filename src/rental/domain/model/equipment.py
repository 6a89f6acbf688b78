"""Equipment aggregate and its availability history.

Every unit belongs to exactly one Kind.  Its availability is never stored
as a mutable field: it is derived from an append-only list of
``EquipmentStatusEntry`` records, each optionally linked to the order
that caused it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rental.domain.exceptions import ValidationError
from rental.domain.model.value_objects import Period


class EquipmentStatus(Enum):
    AVAILABLE = "Available"
    BOOKED = "Booked"
    IN_USE = "InUse"
    NOT_AVAILABLE = "NotAvailable"

    @property
    def blocks_reservation(self) -> bool:
        return self is not EquipmentStatus.AVAILABLE


@dataclass
class Equipment:

    id: int | None
    name: str
    kind_id: int

    @staticmethod
    def create(name: str, kind_id: int) -> Equipment:
        if not name or not name.strip():
            raise ValidationError("Equipment name is required")
        return Equipment(id=None, name=name.strip(), kind_id=kind_id)


@dataclass(frozen=True)
class EquipmentStatusEntry:
    """One immutable row of an equipment unit's availability timeline.

    ``id`` is None until the repository inserts the entry.  Entries are
    ordered by when they were recorded, not by the period they cover.
    """

    id: int | None
    equipment_id: int
    order_id: int | None
    status: EquipmentStatus
    period: Period
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def start_date(self) -> datetime:
        return self.period.start

    @property
    def end_date(self) -> datetime | None:
        return self.period.end

    @property
    def sort_key(self) -> tuple:
        return (self.created_at, self.id or 0)
