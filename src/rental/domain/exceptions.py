"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from enum import Enum


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class AccessDeniedError(DomainException):
    """The acting user may not modify the requested entity."""


class StorageError(DomainException):
    """The persistence layer failed to read or write data."""


class RejectionReason(Enum):
    INVALID_RANGE = "InvalidRange"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    QUANTITY_EXCEEDED = "QuantityExceeded"


class ReservationRejected(ValidationError):
    """A reservation request broke one of the kind's rental limits.

    ``reason`` tells the caller which rule failed so the request can be
    corrected and resubmitted.
    """

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class PreconditionFailure(DomainException):
    """Equipment attached to an order is not in the expected status.

    Raised per order by the equipment cascade; the overdue sweep collects
    these instead of stopping.
    """

    def __init__(
        self,
        order_id: int,
        expected_status: str,
        equipment_ids: list[int],
    ) -> None:
        super().__init__(
            f"Order #{order_id}: equipment {equipment_ids} "
            f"not in expected status '{expected_status}'"
        )
        self.order_id = order_id
        self.expected_status = expected_status
        self.equipment_ids = list(equipment_ids)
