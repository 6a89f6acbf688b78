"""Ordering rules shared by the append-only status histories.

Both order status entries and equipment status entries expose a
``sort_key`` of ``(timestamp, id)``.  Ties on the timestamp are broken by
the entry id, so the most recently inserted entry wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar


class HistoryEntry(Protocol):

    @property
    def sort_key(self) -> tuple: ...


E = TypeVar("E", bound=HistoryEntry)


def chronological(entries: Iterable[E]) -> list[E]:
    """Return entries oldest first."""
    return sorted(entries, key=lambda entry: entry.sort_key)


def latest(entries: Iterable[E]) -> E | None:
    """Return the most recent entry, or None for an empty history."""
    return max(entries, key=lambda entry: entry.sort_key, default=None)
