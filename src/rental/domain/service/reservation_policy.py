"""Domain service: Reservation Policy.

Decides whether a requested rental period and quantity are acceptable for
an equipment kind.  Stateless and free of side effects, so order creation
and order update run exactly the same checks.
"""

from __future__ import annotations

from datetime import datetime

from rental.domain.exceptions import RejectionReason, ReservationRejected
from rental.domain.model.kind import ReservationLimits
from rental.domain.model.value_objects import ONE_DAY, utc

MIN_RENTAL_PERIOD = ONE_DAY


class ReservationPolicy:

    def evaluate(
        self,
        rent_start: datetime,
        rent_end: datetime,
        quantity: int,
        limits: ReservationLimits,
    ) -> ReservationRejected | None:
        """Return the first rule the request breaks, or None if it is valid.

        Rules are checked in a fixed order: range, minimum period, maximum
        period, quantity.
        """
        start, end = utc(rent_start), utc(rent_end)

        if start >= end:
            return ReservationRejected(
                RejectionReason.INVALID_RANGE,
                "Start date should be before end date",
            )

        duration = end - start
        if duration < MIN_RENTAL_PERIOD:
            return ReservationRejected(
                RejectionReason.TOO_SHORT,
                f"Rental period too short: minimum is {MIN_RENTAL_PERIOD.days} day",
            )

        if duration.total_seconds() > limits.max_reservation_time:
            return ReservationRejected(
                RejectionReason.TOO_LONG,
                f"Rental period too long: {limits.max_reservation_time} seconds allowed",
            )

        if quantity > limits.max_reservation_units:
            return ReservationRejected(
                RejectionReason.QUANTITY_EXCEEDED,
                f"Quantity limit exceeded: {limits.max_reservation_units} allowed",
            )

        return None

    def validate(
        self,
        rent_start: datetime,
        rent_end: datetime,
        quantity: int,
        limits: ReservationLimits,
    ) -> None:
        """Raise ReservationRejected if the request breaks any rule."""
        rejection = self.evaluate(rent_start, rent_end, quantity, limits)
        if rejection is not None:
            raise rejection
