"""Unit tests for the OrderStatusLog domain service."""

from datetime import timedelta

import pytest

from rental.domain.exceptions import EntityNotFoundError
from rental.domain.model.order import OrderStatus, OrderStatusEntry
from rental.domain.service.order_status_log import OrderStatusLog
from tests.fakes import NOW, FakeOrderStatusRepository, FakeStore


def _setup() -> tuple[OrderStatusLog, FakeOrderStatusRepository, FakeStore]:
    repo = FakeOrderStatusRepository()
    return OrderStatusLog(repo), repo, FakeStore()


def _store_entry(repo, tx, order_id, status, timestamp) -> OrderStatusEntry:
    """Insert an entry as it was recorded, without the log's dating rule."""
    return repo.add(tx, OrderStatusEntry(
        id=None,
        order_id=order_id,
        status=status,
        current_date=timestamp,
        comment="",
        acting_user_id=2,
    ))


class TestOrderStatusLogCurrent:

    def test_latest_timestamp_wins(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            _store_entry(repo, tx, 1, OrderStatus.APPROVED, NOW + timedelta(hours=1))
            _store_entry(repo, tx, 1, OrderStatus.REVIEW, NOW)
            assert log.current(tx, 1).status is OrderStatus.APPROVED

    def test_equal_timestamps_resolved_by_highest_id(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            first = log.append(tx, 1, OrderStatus.REVIEW, "", 2, NOW)
            second = log.append(tx, 1, OrderStatus.APPROVED, "", 9, NOW)
            assert second.id > first.id
            assert log.current(tx, 1) == second

    def test_only_entries_of_that_order(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            log.append(tx, 1, OrderStatus.REVIEW, "", 2, NOW)
            log.append(tx, 2, OrderStatus.CLOSED, "", 2, NOW + timedelta(days=1))
            assert log.current(tx, 1).status is OrderStatus.REVIEW

    def test_no_history(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            with pytest.raises(EntityNotFoundError, match="no status history"):
                log.current(tx, 42)


class TestOrderStatusLogAppend:

    def test_appended_entry_becomes_current(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            log.append(tx, 1, OrderStatus.IN_PROGRESS, "", 9, NOW)
            entry = log.append(tx, 1, OrderStatus.OVERDUE, "", 2, NOW - timedelta(days=2))
            assert log.current(tx, 1) == entry

    def test_older_timestamp_moved_up_to_current_entry(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            log.append(tx, 1, OrderStatus.IN_PROGRESS, "", 9, NOW)
            entry = log.append(tx, 1, OrderStatus.OVERDUE, "", 2, NOW - timedelta(days=2))
        assert entry.current_date == NOW

    def test_newer_timestamp_kept(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            log.append(tx, 1, OrderStatus.REVIEW, "", 2, NOW)
            entry = log.append(tx, 1, OrderStatus.APPROVED, "", 9, NOW + timedelta(hours=3))
        assert entry.current_date == NOW + timedelta(hours=3)

    def test_other_orders_do_not_move_the_timestamp(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            log.append(tx, 2, OrderStatus.CLOSED, "", 2, NOW + timedelta(days=5))
            entry = log.append(tx, 1, OrderStatus.REVIEW, "", 2, NOW)
        assert entry.current_date == NOW

    def test_timestamps_stored_in_utc(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            entry = log.append(tx, 1, OrderStatus.REVIEW, "", 2, NOW)
        assert entry.current_date.utcoffset() == timedelta(0)


class TestOrderStatusLogHistory:

    def test_oldest_first_with_id_tie_break(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            _store_entry(repo, tx, 1, OrderStatus.IN_PROGRESS, NOW + timedelta(days=1))
            _store_entry(repo, tx, 1, OrderStatus.REVIEW, NOW)
            _store_entry(repo, tx, 1, OrderStatus.APPROVED, NOW)
            history = log.history(tx, 1)
        assert [e.status for e in history] == [
            OrderStatus.REVIEW,
            OrderStatus.APPROVED,
            OrderStatus.IN_PROGRESS,
        ]

    def test_empty_history(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            assert log.history(tx, 1) == []

    def test_append_never_touches_existing_entries(self):
        log, repo, store = _setup()
        with store.begin() as tx:
            first = log.append(tx, 1, OrderStatus.REVIEW, "created", 2, NOW)
            log.append(tx, 1, OrderStatus.CLOSED, "done", 2, NOW + timedelta(days=1))
            assert log.history(tx, 1)[0] == first
