"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from rental.domain.exceptions import ValidationError

ONE_DAY = timedelta(days=1)


def utc(moment: datetime) -> datetime:
    """Normalize a timezone-aware datetime to UTC.

    Naive datetimes are rejected: every timestamp in the domain is compared
    against the others, and mixing naive and aware values is a bug.
    """
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValidationError(f"Timestamp {moment.isoformat()} has no timezone")
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot reserve zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Period:
    """A time span with an optional open end.

    ``end=None`` means the period runs indefinitely, which is how equipment
    status entries without a known end date are stored.
    """

    start: datetime
    end: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", utc(self.end))

    @property
    def duration(self) -> timedelta | None:
        if self.end is None:
            return None
        return self.end - self.start

    def overlaps(self, other: Period) -> bool:
        """True if the two periods share at least one instant."""
        if self.end is not None and self.end < other.start:
            return False
        if other.end is not None and other.end < self.start:
            return False
        return True

    def __str__(self) -> str:
        end = self.end.strftime("%Y-%m-%d %H:%M") if self.end else "open"
        return f"{self.start.strftime('%Y-%m-%d %H:%M')} -> {end}"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
