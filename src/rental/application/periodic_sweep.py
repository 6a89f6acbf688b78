"""Application service: run the overdue sweep on a fixed interval.

Runs once immediately, then once per interval until the stop event is
set.  Setting the stop event also cancels a run that is in progress.
A failing run is logged and the loop keeps going.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime

import structlog

from rental.application.sweep_overdue import OverdueSweepJob, SweepResult
from rental.domain.model.value_objects import now_utc

logger = structlog.get_logger(__name__)


class PeriodicSweep:

    def __init__(
        self,
        job: OverdueSweepJob,
        interval: float,
        timeout: float | None = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        if interval <= 0:
            raise ValueError("Sweep interval must be positive")
        self._job = job
        self._interval = interval
        self._timeout = timeout
        self._clock = clock

    def run_until(self, stop: threading.Event) -> int:
        """Block until *stop* is set.  Returns the number of runs made."""
        runs = 0
        while True:
            self._tick(stop)
            runs += 1
            if stop.wait(self._interval):
                break
        logger.info("overdue sweep loop stopped", runs=runs)
        return runs

    def _tick(self, stop: threading.Event) -> SweepResult | None:
        try:
            result = self._job.run(self._clock(), cancel=stop, timeout=self._timeout)
        except Exception:
            logger.exception("overdue sweep run crashed")
            return None
        logger.debug(
            "overdue sweep run finished",
            outcome=result.outcome.value,
            transitioned=len(result.transitioned_ids),
            errors=len(result.errors),
        )
        return result
