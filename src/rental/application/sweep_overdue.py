"""Application service: Overdue Sweep job.

Moves InProgress orders whose rental has ended to Overdue, and appends the
matching equipment entries.  One run is one transaction:

  1. Fetch every InProgress order, ascending by ID.
  2. Keep the candidates whose rent_end has passed.
  3. For each candidate, check the equipment precondition.  A failing
     order is recorded and the loop moves on to the next one.
  4. Commit only if at least one order was transitioned and no order
     failed.  Otherwise every write of the run is rolled back and the
     failing orders are retried on the next run, since they are still
     InProgress.

A run never raises for business or storage failures, including rows that
cannot be read back and a run time without a timezone: the outcome is
reported in a ``SweepResult`` so a scheduler can simply try again later.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import structlog

from rental.domain.exceptions import PreconditionFailure, StorageError, ValidationError
from rental.domain.model.order import Order, OrderStatus
from rental.domain.model.value_objects import utc
from rental.domain.repository.equipment_status_repository import (
    EquipmentStatusRepository,
)
from rental.domain.repository.order_repository import OrderRepository
from rental.domain.repository.order_status_repository import OrderStatusRepository
from rental.domain.repository.transaction import Transaction, TransactionManager
from rental.domain.service.equipment_status_cascade import EquipmentStatusCascade
from rental.domain.service.order_status_log import OrderStatusLog

logger = structlog.get_logger(__name__)

OVERDUE_COMMENT = "overdue"


class SweepOutcome(Enum):
    COMMITTED = "Committed"
    NO_CHANGES = "NoChanges"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    TIMED_OUT = "TimedOut"


@dataclass(frozen=True)
class SweepError:
    """Why one order was not transitioned.

    ``order_id`` is None for failures that aborted the whole run.
    """

    order_id: int | None
    message: str


@dataclass(frozen=True)
class SweepResult:

    outcome: SweepOutcome
    transitioned_ids: list[int] = field(default_factory=list)
    errors: list[SweepError] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.outcome is SweepOutcome.COMMITTED


class OverdueSweepJob:

    def __init__(
        self,
        tx_manager: TransactionManager,
        order_repo: OrderRepository,
        order_status_repo: OrderStatusRepository,
        equipment_status_repo: EquipmentStatusRepository,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._tx_manager = tx_manager
        self._order_repo = order_repo
        self._status_log = OrderStatusLog(order_status_repo)
        self._cascade = EquipmentStatusCascade(equipment_status_repo)
        self._monotonic = monotonic

    def run(
        self,
        now: datetime,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> SweepResult:
        """Execute one sweep run.

        Args:
            now: The instant candidates are compared against.
            cancel: When set, the run stops before the next order and
                rolls back.
            timeout: Seconds the run may take.  Exceeding it rolls back
                the same way as cancellation.
        """
        try:
            now = utc(now)
        except ValidationError as exc:
            logger.error("overdue sweep rejected its run time", error=str(exc))
            return SweepResult(
                outcome=SweepOutcome.FAILED,
                errors=[SweepError(order_id=None, message=str(exc))],
            )
        deadline = self._monotonic() + timeout if timeout is not None else None
        tx = self._tx_manager.begin()
        try:
            return self._sweep(tx, now, cancel, deadline)
        except StorageError as exc:
            logger.error("overdue sweep aborted by storage failure", error=str(exc))
            return SweepResult(
                outcome=SweepOutcome.FAILED,
                errors=[SweepError(order_id=None, message=str(exc))],
            )
        finally:
            if tx.is_active:
                tx.rollback()

    # --- Run steps ------------------------------------------------------------

    def _sweep(
        self,
        tx: Transaction,
        now: datetime,
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> SweepResult:
        in_progress = self._order_repo.list_by_current_status(tx, OrderStatus.IN_PROGRESS)
        if not in_progress:
            logger.info("order list with in progress status is empty")
            return SweepResult(outcome=SweepOutcome.NO_CHANGES)

        candidates = [order for order in in_progress if order.is_expired_at(now)]
        if not candidates:
            logger.info("no in progress order has passed its rent end")
            return SweepResult(outcome=SweepOutcome.NO_CHANGES)

        transitioned: list[int] = []
        errors: list[SweepError] = []

        for order in candidates:
            interrupted = self._interruption(cancel, deadline)
            if interrupted is not None:
                return interrupted
            try:
                self._mark_overdue(tx, order, now)
            except PreconditionFailure as exc:
                logger.error(
                    "error while updating status to overdue",
                    order_id=order.id,
                    error=str(exc),
                )
                errors.append(SweepError(order_id=order.id, message=str(exc)))
                continue
            transitioned.append(order.id)  # type: ignore[arg-type]

        if errors:
            logger.error(
                "overdue sweep rolled back",
                failed_order_ids=[error.order_id for error in errors],
            )
            return SweepResult(outcome=SweepOutcome.FAILED, errors=errors)

        interrupted = self._interruption(cancel, deadline)
        if interrupted is not None:
            return interrupted

        tx.commit()
        logger.info("updated statuses to overdue", order_ids=transitioned)
        return SweepResult(outcome=SweepOutcome.COMMITTED, transitioned_ids=transitioned)

    def _mark_overdue(self, tx: Transaction, order: Order, now: datetime) -> None:
        """Append the Overdue status and the equipment entries for one order.

        The precondition is checked before the first write so a failing
        order leaves nothing behind in the transaction.  The equipment
        entries start one day after rent_end; the status entry carries the
        same date unless that is still ahead of *now*.
        """
        self._cascade.check(tx, order, OrderStatus.OVERDUE)
        self._status_log.append(
            tx,
            order_id=order.id,  # type: ignore[arg-type]
            status=OrderStatus.OVERDUE,
            comment=OVERDUE_COMMENT,
            acting_user_id=order.owner_id,
            timestamp=min(order.overdue_date, now),
        )
        self._cascade.on_order_transition(
            tx, order, OrderStatus.OVERDUE, order.overdue_date
        )

    def _interruption(
        self,
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> SweepResult | None:
        if cancel is not None and cancel.is_set():
            logger.warning("overdue sweep cancelled, rolling back")
            return SweepResult(outcome=SweepOutcome.CANCELLED)
        if deadline is not None and self._monotonic() > deadline:
            logger.warning("overdue sweep exceeded its deadline, rolling back")
            return SweepResult(outcome=SweepOutcome.TIMED_OUT)
        return None
