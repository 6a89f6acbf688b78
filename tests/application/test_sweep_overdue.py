"""Integration tests for the overdue sweep job."""

import threading
from datetime import timedelta

from structlog.testing import capture_logs

from rental.application.change_order_status import ChangeOrderStatusHandler
from rental.application.sweep_overdue import OVERDUE_COMMENT, OverdueSweepJob, SweepOutcome
from rental.domain.model.equipment import EquipmentStatus
from rental.domain.model.history import latest
from rental.domain.model.order import OrderStatus
from tests.fakes import DAY, NOW, FailingOrderRepository, FakeStore, FakeWorld

IN_PROGRESS = (OrderStatus.REVIEW, OrderStatus.APPROVED, OrderStatus.IN_PROGRESS)
ADMIN = 99


def _setup(store: FakeStore | None = None, order_repo=None, monotonic=None):
    world = FakeWorld(store=store or FakeStore())
    if order_repo is not None:
        world.orders = order_repo
    world.add_user("alice")
    kind = world.add_kind()
    world.units = [world.add_equipment(kind.id).id for _ in range(4)]
    kwargs = {"monotonic": monotonic} if monotonic else {}
    job = OverdueSweepJob(
        tx_manager=world.store,
        order_repo=world.orders,
        order_status_repo=world.order_statuses,
        equipment_status_repo=world.equipment_statuses,
        **kwargs,
    )
    return job, world


def _expired_order(world, unit, equipment_status=EquipmentStatus.IN_USE):
    return world.add_order(
        owner_id=1,
        equipment_ids=[unit],
        rent_start=NOW - 3 * DAY,
        rent_end=NOW - timedelta(hours=25),
        statuses=IN_PROGRESS,
        equipment_status=equipment_status,
    )


def _current(world, order_id):
    return latest(e for e in world.store.rows("order_statuses") if e.order_id == order_id).status


class TestSweepCommits:

    def test_expired_order_becomes_overdue(self):
        job, world = _setup()
        order = _expired_order(world, world.units[0])

        result = job.run(NOW)

        assert result.outcome is SweepOutcome.COMMITTED
        assert result.transitioned_ids == [order.id]
        assert result.errors == []
        entry = world.store.rows("order_statuses")[-1]
        assert entry.status is OrderStatus.OVERDUE
        assert entry.current_date == order.rent_end + timedelta(hours=24)
        assert entry.comment == OVERDUE_COMMENT
        assert entry.acting_user_id == order.owner_id

    def test_equipment_entry_starts_a_day_after_rent_end(self):
        job, world = _setup()
        order = _expired_order(world, world.units[0])

        job.run(NOW)

        equipment_entry = world.store.rows("equipment_statuses")[-1]
        assert equipment_entry.equipment_id == world.units[0]
        assert equipment_entry.order_id == order.id
        assert equipment_entry.status is EquipmentStatus.IN_USE
        assert equipment_entry.start_date == order.rent_end + timedelta(hours=24)
        assert equipment_entry.end_date is None

    def test_candidates_in_id_order(self):
        job, world = _setup()
        ids = [_expired_order(world, unit).id for unit in world.units[:3]]
        result = job.run(NOW)
        assert result.transitioned_ids == ids

    def test_only_expired_in_progress_orders(self):
        job, world = _setup()
        expired = _expired_order(world, world.units[0])
        running = world.add_order(1, [world.units[1]], NOW - DAY, NOW + DAY, statuses=IN_PROGRESS,
                                  equipment_status=EquipmentStatus.IN_USE)
        approved = world.add_order(1, [world.units[2]], NOW - 3 * DAY, NOW - 2 * DAY,
                                   statuses=IN_PROGRESS[:2], equipment_status=EquipmentStatus.IN_USE)

        result = job.run(NOW)

        assert result.transitioned_ids == [expired.id]
        assert _current(world, running.id) is OrderStatus.IN_PROGRESS
        assert _current(world, approved.id) is OrderStatus.APPROVED

    def test_rent_end_equal_to_now_is_not_expired(self):
        job, world = _setup()
        order = _expired_order(world, world.units[0])
        result = job.run(order.rent_end)
        assert result.outcome is SweepOutcome.NO_CHANGES

    def test_second_run_finds_nothing(self):
        job, world = _setup()
        _expired_order(world, world.units[0])
        assert job.run(NOW).outcome is SweepOutcome.COMMITTED
        assert job.run(NOW).outcome is SweepOutcome.NO_CHANGES

    def test_logs_transitioned_ids(self):
        job, world = _setup()
        order = _expired_order(world, world.units[0])
        with capture_logs() as logs:
            job.run(NOW)
        assert {
            "event": "updated statuses to overdue",
            "log_level": "info",
            "order_ids": [order.id],
        } in logs


class TestSweepAllOrNothing:

    def test_one_failure_rolls_back_every_order(self):
        job, world = _setup()
        good = _expired_order(world, world.units[0])
        bad = _expired_order(world, world.units[1], equipment_status=EquipmentStatus.BOOKED)
        statuses_before = world.store.rows("order_statuses")
        equipment_before = world.store.rows("equipment_statuses")

        result = job.run(NOW)

        assert result.outcome is SweepOutcome.FAILED
        assert result.transitioned_ids == []
        assert [e.order_id for e in result.errors] == [bad.id]
        assert "not in expected status 'InUse'" in result.errors[0].message
        assert world.store.rows("order_statuses") == statuses_before
        assert world.store.rows("equipment_statuses") == equipment_before
        assert _current(world, good.id) is OrderStatus.IN_PROGRESS

    def test_every_failing_order_is_reported(self):
        job, world = _setup()
        first = _expired_order(world, world.units[0], equipment_status=None)
        _expired_order(world, world.units[1])
        third = _expired_order(world, world.units[2], equipment_status=EquipmentStatus.AVAILABLE)

        result = job.run(NOW)

        assert [e.order_id for e in result.errors] == [first.id, third.id]

    def test_failed_orders_are_retried_next_run(self):
        job, world = _setup()
        bad = _expired_order(world, world.units[0], equipment_status=EquipmentStatus.BOOKED)
        assert job.run(NOW).outcome is SweepOutcome.FAILED
        assert job.run(NOW).errors[0].order_id == bad.id

    def test_failure_logged_per_order(self):
        job, world = _setup()
        bad = _expired_order(world, world.units[0], equipment_status=EquipmentStatus.BOOKED)
        with capture_logs() as logs:
            job.run(NOW)
        events = [(log["event"], log["log_level"]) for log in logs]
        assert ("error while updating status to overdue", "error") in events
        assert ("overdue sweep rolled back", "error") in events
        assert any(log.get("order_id") == bad.id for log in logs)


class TestSweepNoChanges:

    def test_no_in_progress_orders(self):
        job, world = _setup()
        with capture_logs() as logs:
            result = job.run(NOW)
        assert result.outcome is SweepOutcome.NO_CHANGES
        assert logs[0]["event"] == "order list with in progress status is empty"

    def test_idempotent_without_candidates(self):
        job, world = _setup()
        world.add_order(1, [world.units[0]], NOW - DAY, NOW + DAY, statuses=IN_PROGRESS)
        commits = world.store.commits
        assert job.run(NOW).outcome is SweepOutcome.NO_CHANGES
        assert job.run(NOW).outcome is SweepOutcome.NO_CHANGES
        assert world.store.commits == commits

    def test_no_changes_rolls_back(self):
        job, world = _setup()
        rollbacks = world.store.rollbacks
        job.run(NOW)
        assert world.store.rollbacks == rollbacks + 1


class TestSweepInterruption:

    def test_cancelled_before_first_order(self):
        job, world = _setup()
        _expired_order(world, world.units[0])
        cancel = threading.Event()
        cancel.set()

        result = job.run(NOW, cancel=cancel)

        assert result.outcome is SweepOutcome.CANCELLED
        assert _current(world, 1) is OrderStatus.IN_PROGRESS

    def test_deadline_exceeded(self):
        ticks = iter([0.0, 10.0, 20.0])
        job, world = _setup(monotonic=lambda: next(ticks))
        _expired_order(world, world.units[0])

        with capture_logs() as logs:
            result = job.run(NOW, timeout=5)

        assert result.outcome is SweepOutcome.TIMED_OUT
        assert _current(world, 1) is OrderStatus.IN_PROGRESS
        assert logs[-1]["log_level"] == "warning"

    def test_deadline_not_reached(self):
        job, world = _setup(monotonic=lambda: 0.0)
        _expired_order(world, world.units[0])
        assert job.run(NOW, timeout=5).committed


class TestSweepStorageFailure:

    def test_read_failure_reported(self):
        job, world = _setup(order_repo=FailingOrderRepository())
        result = job.run(NOW)
        assert result.outcome is SweepOutcome.FAILED
        assert result.errors[0].order_id is None
        assert "Connection reset" in result.errors[0].message

    def test_commit_failure_rolls_back(self):
        store = FakeStore()
        job, world = _setup(store=store)
        _expired_order(world, world.units[0])
        store.fail_on_commit = True

        result = job.run(NOW)

        assert result.outcome is SweepOutcome.FAILED
        assert result.transitioned_ids == []
        assert _current(world, 1) is OrderStatus.IN_PROGRESS
        assert store.rollbacks == 1


class TestSweepStatusDating:

    def test_late_in_progress_entry_is_still_superseded(self):
        job, world = _setup()
        order = world.add_order(1, [world.units[0]], NOW - 5 * DAY, NOW - 3 * DAY,
                                statuses=IN_PROGRESS[:2], equipment_status=EquipmentStatus.IN_USE)
        world.add_status(order.id, OrderStatus.IN_PROGRESS, NOW, acting_user_id=ADMIN)

        result = job.run(NOW + DAY)

        assert result.outcome is SweepOutcome.COMMITTED
        assert _current(world, order.id) is OrderStatus.OVERDUE
        assert world.store.rows("order_statuses")[-1].current_date == NOW
        equipment_entry = world.store.rows("equipment_statuses")[-1]
        assert equipment_entry.start_date == order.rent_end + timedelta(hours=24)

    def test_late_in_progress_entry_swept_once(self):
        job, world = _setup()
        order = world.add_order(1, [world.units[0]], NOW - 5 * DAY, NOW - 3 * DAY,
                                statuses=IN_PROGRESS[:2], equipment_status=EquipmentStatus.IN_USE)
        world.add_status(order.id, OrderStatus.IN_PROGRESS, NOW, acting_user_id=ADMIN)

        assert job.run(NOW + DAY).outcome is SweepOutcome.COMMITTED
        assert job.run(NOW + DAY).outcome is SweepOutcome.NO_CHANGES
        overdue = [e for e in world.store.rows("order_statuses") if e.status is OrderStatus.OVERDUE]
        assert len(overdue) == 1

    def test_status_not_dated_after_the_run(self):
        job, world = _setup()
        order = world.add_order(1, [world.units[0]], NOW - 3 * DAY, NOW - timedelta(hours=1),
                                statuses=IN_PROGRESS, equipment_status=EquipmentStatus.IN_USE)

        job.run(NOW)

        assert world.store.rows("order_statuses")[-1].current_date == NOW
        equipment_entry = world.store.rows("equipment_statuses")[-1]
        assert equipment_entry.start_date == order.rent_end + DAY

    def test_close_right_after_sweep_becomes_current(self):
        job, world = _setup()
        order = world.add_order(1, [world.units[0]], NOW - 3 * DAY, NOW - timedelta(hours=1),
                                statuses=IN_PROGRESS, equipment_status=EquipmentStatus.IN_USE)
        assert job.run(NOW).committed
        close = ChangeOrderStatusHandler(
            tx_manager=world.store,
            order_repo=world.orders,
            order_status_repo=world.order_statuses,
            equipment_status_repo=world.equipment_statuses,
            clock=lambda: NOW,
        )

        close.handle(order.id, OrderStatus.CLOSED, ADMIN, "returned")

        assert _current(world, order.id) is OrderStatus.CLOSED
        assert job.run(NOW + 2 * DAY).outcome is SweepOutcome.NO_CHANGES


class TestSweepRunTime:

    def test_naive_now_reported_as_failure(self):
        job, world = _setup()
        _expired_order(world, world.units[0])
        commits, rollbacks = world.store.commits, world.store.rollbacks

        with capture_logs() as logs:
            result = job.run(NOW.replace(tzinfo=None))

        assert result.outcome is SweepOutcome.FAILED
        assert result.errors[0].order_id is None
        assert "has no timezone" in result.errors[0].message
        assert (world.store.commits, world.store.rollbacks) == (commits, rollbacks)
        assert logs[-1]["event"] == "overdue sweep rejected its run time"
        assert logs[-1]["log_level"] == "error"
