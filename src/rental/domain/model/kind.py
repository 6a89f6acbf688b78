"""Kind aggregate: an equipment category carrying reservation limits."""

from __future__ import annotations

from dataclasses import dataclass

from rental.domain.exceptions import ValidationError


@dataclass(frozen=True)
class ReservationLimits:
    """Upper bounds a reservation against a kind must respect."""

    max_reservation_time: int  # seconds
    max_reservation_units: int


@dataclass
class Kind:
    """An equipment category.

    Limits are read-only inputs to the reservation policy; nothing in the
    order lifecycle ever changes them.
    """

    id: int | None
    name: str
    max_reservation_time: int
    max_reservation_units: int

    @staticmethod
    def create(name: str, max_reservation_time: int, max_reservation_units: int) -> Kind:
        if not name or not name.strip():
            raise ValidationError("Kind name is required")
        if max_reservation_time <= 0:
            raise ValidationError("Maximum reservation time must be positive")
        if max_reservation_units <= 0:
            raise ValidationError("Maximum reservation units must be positive")
        return Kind(
            id=None,
            name=name.strip(),
            max_reservation_time=max_reservation_time,
            max_reservation_units=max_reservation_units,
        )

    @property
    def limits(self) -> ReservationLimits:
        return ReservationLimits(
            max_reservation_time=self.max_reservation_time,
            max_reservation_units=self.max_reservation_units,
        )
