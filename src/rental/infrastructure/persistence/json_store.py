"""JSON-file-backed transactional store.

Each table lives in its own ``<table>.json`` file under the data
directory.  A transaction reads tables lazily into private copies and
remembers a digest of every file it read; writes touch only those copies
until ``commit()``.

Commits are optimistic.  Under an exclusive lock on ``.lock`` in the data
directory, shared by every process using that directory, ``commit()``
checks that none of the tables the transaction read has changed since,
then writes every modified table back (each file replaced atomically).  A
changed table fails the commit with ``StorageError`` and nothing is
written.  ``rollback()`` simply drops the copies.

The file lock uses ``fcntl`` and therefore needs a POSIX system.
"""

from __future__ import annotations

import contextlib
import fcntl
import functools
import hashlib
import json
import os
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TypeVar

from rental.domain.exceptions import StorageError, ValidationError
from rental.domain.repository.transaction import Transaction, TransactionManager

T = TypeVar("T")

TABLES = (
    "users",
    "kinds",
    "equipment",
    "orders",
    "order_statuses",
    "equipment_statuses",
)

LOCK_FILE = ".lock"


class JsonStore(TransactionManager):

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._commit_lock = threading.Lock()
        self._ensure_files()

    def begin(self) -> JsonTransaction:
        return JsonTransaction(self)

    # --- Commit protocol ------------------------------------------------------

    def _commit(self, read_digests: dict[str, str], tables: dict[str, list[dict]]) -> None:
        """Write *tables* if every table in *read_digests* is unchanged."""
        with self._commit_lock, self._file_lock():
            for table in sorted(read_digests):
                if self._digest(self._read_bytes(table)) != read_digests[table]:
                    raise StorageError(
                        f"Table '{table}' was changed by another transaction"
                    )
            self._persist(tables)

    @contextlib.contextmanager
    def _file_lock(self) -> Iterator[None]:
        path = self._data_dir / LOCK_FILE
        try:
            handle = open(path, "a", encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot open {path.name}: {exc}") from exc
        with handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    # --- File helpers ---------------------------------------------------------

    def _path(self, table: str) -> Path:
        if table not in TABLES:
            raise StorageError(f"Unknown table '{table}'")
        return self._data_dir / f"{table}.json"

    def _read_bytes(self, table: str) -> bytes:
        path = self._path(table)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read {path.name}: {exc}") from exc

    @staticmethod
    def _digest(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def _load(self, table: str) -> tuple[list[dict], str]:
        """Return the records of *table* and a digest of the file they came from."""
        name = self._path(table).name
        data = self._read_bytes(table)
        try:
            records = json.loads(data)
        except ValueError as exc:
            raise StorageError(f"Cannot read {name}: {exc}") from exc
        if not isinstance(records, list):
            raise StorageError(f"Cannot read {name}: expected a JSON list")
        for raw in records:
            if not isinstance(raw, dict) or type(raw.get("id")) is not int:
                raise StorageError(f"Cannot read {name}: every record needs an integer id")
        return records, self._digest(data)

    def _persist(self, tables: dict[str, list[dict]]) -> None:
        for table, records in tables.items():
            path = self._path(table)
            tmp_path = path.with_suffix(".json.tmp")
            try:
                tmp_path.write_text(
                    json.dumps(records, indent=2) + "\n", encoding="utf-8"
                )
                os.replace(tmp_path, path)
            except OSError as exc:
                raise StorageError(f"Cannot write {path.name}: {exc}") from exc

    def _ensure_files(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            for table in TABLES:
                path = self._path(table)
                if not path.exists():
                    path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot prepare data directory {self._data_dir}: {exc}") from exc


class JsonTransaction(Transaction):

    def __init__(self, store: JsonStore) -> None:
        self._store = store
        self._tables: dict[str, list[dict]] = {}
        self._digests: dict[str, str] = {}
        self._dirty: set[str] = set()
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def records(self, table: str) -> list[dict]:
        """Return this transaction's private copy of *table*."""
        self._assert_active()
        if table not in self._tables:
            self._tables[table], self._digests[table] = self._store._load(table)
        return self._tables[table]

    def insert(self, table: str, raw: dict) -> int:
        """Append a record, assigning the next free ID."""
        records = self.records(table)
        raw["id"] = max((r["id"] for r in records), default=0) + 1
        records.append(raw)
        self._dirty.add(table)
        return raw["id"]

    def replace(self, table: str, raw: dict) -> None:
        """Overwrite the record with the same ID."""
        records = self.records(table)
        for i, existing in enumerate(records):
            if existing["id"] == raw["id"]:
                records[i] = raw
                self._dirty.add(table)
                return
        raise StorageError(f"No record #{raw['id']} in table '{table}'")

    def commit(self) -> None:
        """Write the modified tables.

        Raises StorageError, leaving the transaction active, when a table
        this transaction read was committed by someone else in between.
        """
        self._assert_active()
        if self._dirty:
            self._store._commit(
                dict(self._digests),
                {table: self._tables[table] for table in sorted(self._dirty)},
            )
        self._close()

    def rollback(self) -> None:
        self._assert_active()
        self._close()

    def _close(self) -> None:
        self._tables.clear()
        self._digests.clear()
        self._dirty.clear()
        self._active = False

    def _assert_active(self) -> None:
        if not self._active:
            raise StorageError("Transaction is already finished")


def json_tx(tx: Transaction) -> JsonTransaction:
    """Narrow a domain transaction to the JSON implementation."""
    if not isinstance(tx, JsonTransaction):
        raise TypeError(f"Expected a JsonTransaction, got {type(tx).__name__}")
    return tx


def record_decoder(table: str) -> Callable[[Callable[[dict], T]], Callable[[dict], T]]:
    """Make a raw-to-domain mapper report bad rows of *table* as StorageError."""

    def decorate(mapper: Callable[[dict], T]) -> Callable[[dict], T]:
        @functools.wraps(mapper)
        def decode(raw: dict) -> T:
            try:
                return mapper(raw)
            except (KeyError, TypeError, ValueError, ValidationError) as exc:
                raise StorageError(f"Malformed record in '{table}': {exc!r}") from exc

        return decode

    return decorate
