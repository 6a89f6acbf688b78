"""Unit tests for the ReservationPolicy domain service."""

from datetime import datetime, timedelta, timezone

import pytest

from rental.domain.exceptions import RejectionReason, ReservationRejected, ValidationError
from rental.domain.model.kind import ReservationLimits
from rental.domain.service.reservation_policy import ReservationPolicy

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
LIMITS = ReservationLimits(max_reservation_time=3 * 86400, max_reservation_units=2)


def _evaluate(hours: float, quantity: int = 1) -> ReservationRejected | None:
    return ReservationPolicy().evaluate(T0, T0 + timedelta(hours=hours), quantity, LIMITS)


class TestReservationPolicyAccepts:

    def test_exactly_one_day(self):
        assert _evaluate(24) is None

    def test_exactly_max_time(self):
        assert _evaluate(72) is None

    def test_exactly_max_units(self):
        assert _evaluate(48, quantity=2) is None


class TestReservationPolicyRejects:

    def test_end_before_start(self):
        rejection = _evaluate(-5)
        assert rejection.reason is RejectionReason.INVALID_RANGE

    def test_equal_start_and_end(self):
        rejection = _evaluate(0)
        assert rejection.reason is RejectionReason.INVALID_RANGE
        assert "before end date" in str(rejection)

    def test_twelve_hours_is_too_short(self):
        rejection = _evaluate(12)
        assert rejection.reason is RejectionReason.TOO_SHORT

    def test_one_second_over_max_is_too_long(self):
        rejection = _evaluate(72 + 1 / 3600)
        assert rejection.reason is RejectionReason.TOO_LONG
        assert "259200 seconds allowed" in str(rejection)

    def test_quantity_over_max(self):
        rejection = _evaluate(48, quantity=3)
        assert rejection.reason is RejectionReason.QUANTITY_EXCEEDED
        assert "2 allowed" in str(rejection)

    def test_range_checked_before_quantity(self):
        assert _evaluate(-5, quantity=99).reason is RejectionReason.INVALID_RANGE

    def test_period_checked_before_quantity(self):
        assert _evaluate(100, quantity=99).reason is RejectionReason.TOO_LONG


class TestReservationPolicyValidate:

    def test_raises_rejection(self):
        with pytest.raises(ReservationRejected) as exc_info:
            ReservationPolicy().validate(T0, T0 + timedelta(hours=12), 1, LIMITS)
        assert exc_info.value.reason is RejectionReason.TOO_SHORT

    def test_rejection_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            ReservationPolicy().validate(T0, T0, 1, LIMITS)

    def test_valid_request_passes(self):
        ReservationPolicy().validate(T0, T0 + timedelta(days=2), 1, LIMITS)

    def test_offsets_compared_in_utc(self):
        start = datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert ReservationPolicy().evaluate(start, T0 + timedelta(days=1), 1, LIMITS) is None
