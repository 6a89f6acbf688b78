"""Transaction boundary shared by every repository.

Repositories never open or finish transactions themselves.  The caller
begins a ``Transaction`` and passes it explicitly to each repository
method, so "one transaction per use case" is visible in the signatures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transaction(ABC):
    """A unit of work.  Writes become visible to others only on commit.

    Used as a context manager, a transaction that was neither committed nor
    rolled back is rolled back on exit.
    """

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True until commit() or rollback() has been called."""

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this transaction durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write of this transaction."""

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.is_active:
            self.rollback()


class TransactionManager(ABC):

    @abstractmethod
    def begin(self) -> Transaction:
        """Open a new transaction."""
