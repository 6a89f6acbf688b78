"""Domain service: Equipment Availability.

Equipment is free for a period when none of its order timelines is
currently in a blocking status over an overlapping span.  Each order
contributes only its latest entry, so a booking that was later closed
no longer blocks anything.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta

from rental.domain.model.equipment import EquipmentStatus, EquipmentStatusEntry
from rental.domain.model.history import latest
from rental.domain.model.value_objects import ONE_DAY, Period
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.transaction import Transaction

# Units are held one day either side of the rental for preparation and return.
BOOKING_MARGIN = ONE_DAY


class EquipmentAvailability:

    def __init__(self, equipment_status_repo: EquipmentStatusRepository) -> None:
        self._equipment_status_repo = equipment_status_repo

    def is_free(self, tx: Transaction, equipment_id: int, period: Period) -> bool:
        entries = self._equipment_status_repo.list_for_equipment(tx, equipment_id)
        return not any(
            entry.status.blocks_reservation and entry.period.overlaps(period)
            for entry in self._effective_entries(entries)
        )

    def book(
        self, tx: Transaction, equipment_id: int, order_id: int, period: Period
    ) -> EquipmentStatusEntry:
        """Append a Booked entry covering the rental plus the margins."""
        return self._equipment_status_repo.add(
            tx,
            EquipmentStatusEntry(
                id=None,
                equipment_id=equipment_id,
                order_id=order_id,
                status=EquipmentStatus.BOOKED,
                period=booking_period(period),
            ),
        )

    @staticmethod
    def _effective_entries(
        entries: list[EquipmentStatusEntry],
    ) -> list[EquipmentStatusEntry]:
        by_order: dict[int | None, list[EquipmentStatusEntry]] = defaultdict(list)
        for entry in entries:
            by_order[entry.order_id].append(entry)

        effective: list[EquipmentStatusEntry] = []
        for order_id, group in by_order.items():
            if order_id is None:
                # Unlinked entries (repairs, manual blocks) all count.
                effective.extend(group)
            else:
                newest = latest(group)
                if newest is not None:
                    effective.append(newest)
        return effective


def booking_period(period: Period, margin: timedelta = BOOKING_MARGIN) -> Period:
    end = period.end + margin if period.end is not None else None
    return Period(period.start - margin, end)
