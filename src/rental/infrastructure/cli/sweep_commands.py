"""CLI commands for the overdue sweep."""

from __future__ import annotations

import signal
import threading
from datetime import datetime, timezone

import click
import structlog

from rental.application.periodic_sweep import PeriodicSweep
from rental.application.sweep_overdue import OverdueSweepJob, SweepOutcome
from rental.infrastructure.bootstrap import (
    equipment_status_repository,
    order_repository,
    order_status_repository,
    store,
)
from rental.infrastructure.config import get_settings

logger = structlog.get_logger(__name__)


def _job() -> OverdueSweepJob:
    return OverdueSweepJob(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
        equipment_status_repo=equipment_status_repository(),
    )


@click.command("run")
@click.option(
    "--now",
    type=click.DateTime(["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]),
    default=None,
    help="Evaluate as of this UTC instant instead of the current time.",
)
@click.option("--timeout", type=float, default=None, help="Seconds the run may take.")
def sweep_run(now: datetime | None, timeout: float | None) -> None:
    """Move expired in-progress orders to Overdue, once."""
    moment = now.replace(tzinfo=timezone.utc) if now else datetime.now(timezone.utc)
    if timeout is None:
        timeout = get_settings().sweep_timeout_seconds

    result = _job().run(moment, timeout=timeout)

    if result.outcome is SweepOutcome.COMMITTED:
        ids = ", ".join(f"#{i}" for i in result.transitioned_ids)
        click.echo(f"Marked overdue: {ids}")
    elif result.outcome is SweepOutcome.NO_CHANGES:
        click.echo("Nothing to do.")
    else:
        for error in result.errors:
            prefix = f"Order #{error.order_id}: " if error.order_id is not None else ""
            click.echo(f"  {prefix}{error.message}", err=True)
        raise click.ClickException(f"Sweep {result.outcome.value}, no changes saved")


@click.command("serve")
@click.option("--interval", type=float, default=None, help="Seconds between runs.")
def sweep_serve(interval: float | None) -> None:
    """Run the sweep periodically until interrupted."""
    settings = get_settings()
    stop = threading.Event()

    def _request_stop(signum, frame) -> None:
        logger.info("stop requested", signal=signum)
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    try:
        loop = PeriodicSweep(
            _job(),
            interval=interval if interval is not None else settings.sweep_interval_seconds,
            timeout=settings.sweep_timeout_seconds,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--interval")

    runs = loop.run_until(stop)
    click.echo(f"Stopped after {runs} run(s).")
