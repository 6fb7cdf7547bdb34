"""Hearing store collaborator.

The store persists hearings and override records and serves the current
schedule. The commit gateway only talks to it through `transaction()`, which
holds the locks for a set of keys, exposes a snapshot of the schedule, and
applies staged writes only if the block exits cleanly.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import TYPE_CHECKING, ContextManager, Dict, Iterable, List, Optional, Protocol

from hearing_scheduler.core.errors import HearingStoreError
from hearing_scheduler.core.hearing import Hearing

if TYPE_CHECKING:
    from hearing_scheduler.control.overrides import OverrideRecord


class HearingTransaction(Protocol):
    def snapshot(self) -> List[Hearing]: ...

    def put_hearing(self, hearing: Hearing) -> None: ...

    def add_override(self, record: OverrideRecord) -> None: ...


class HearingStore(Protocol):
    """Read/write contract the engine needs from hearing storage."""

    def transaction(self, keys: Iterable[str]) -> ContextManager[HearingTransaction]: ...

    def all_hearings(self) -> List[Hearing]: ...

    def hearings_on(self, on_date: date, court_name: Optional[str] = None) -> List[Hearing]: ...

    def get_hearing(self, hearing_id: str) -> Optional[Hearing]: ...

    def override_records(self) -> List[OverrideRecord]: ...

    def get_override(self, override_id: str) -> Optional[OverrideRecord]: ...


class KeyedLocks:
    """One lock per key, alive only while some caller holds or waits on it.

    `hold()` acquires several keys in sorted order so two callers asking for
    overlapping key sets cannot deadlock. Each key's lock is reference
    counted and dropped when its last user leaves.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}
        self.timeout = timeout

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, keys: Iterable[str]):
        ordered = sorted(set(keys))
        checked_out: List[str] = []
        acquired: List[threading.Lock] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                ok = lock.acquire(timeout=self.timeout) if self.timeout is not None else lock.acquire()
                if not ok:
                    raise HearingStoreError(f"Timed out waiting for schedule lock {key!r}")
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in checked_out:
                self._checkin(key)

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)


class _StagedTransaction:
    """Buffers writes until the owning store commits them."""

    def __init__(self, store: InMemoryHearingStore):
        self._store = store
        self.hearings: List[Hearing] = []
        self.overrides: List[OverrideRecord] = []

    def snapshot(self) -> List[Hearing]:
        return self._store.all_hearings()

    def put_hearing(self, hearing: Hearing) -> None:
        self.hearings.append(hearing)

    def add_override(self, record: OverrideRecord) -> None:
        self.overrides.append(record)


class InMemoryHearingStore:
    """Thread-safe in-process hearing store.

    Args:
        hearings: Initial schedule
        lock_timeout: Seconds to wait for a key lock (None waits forever)
    """

    def __init__(self, hearings: Optional[Iterable[Hearing]] = None, lock_timeout: Optional[float] = None):
        self._data_lock = threading.RLock()
        self._hearings: Dict[str, Hearing] = {}
        self._overrides: Dict[str, OverrideRecord] = {}
        self._keys = KeyedLocks(timeout=lock_timeout)
        for hearing in hearings or []:
            self._hearings[hearing.hearing_id] = hearing

    @contextmanager
    def transaction(self, keys: Iterable[str]):
        """Atomic read-check-write unit over `keys`.

        Writes staged on the yielded transaction are applied together when
        the block exits without an exception and discarded otherwise.
        """
        with self._keys.hold(keys):
            txn = _StagedTransaction(self)
            yield txn
            self._apply(txn)

    def _apply(self, txn: _StagedTransaction) -> None:
        with self._data_lock:
            for hearing in txn.hearings:
                self._hearings[hearing.hearing_id] = hearing
            for record in txn.overrides:
                self._overrides[record.override_id] = record

    def all_hearings(self) -> List[Hearing]:
        with self._data_lock:
            return list(self._hearings.values())

    def hearings_on(self, on_date: date, court_name: Optional[str] = None) -> List[Hearing]:
        """Hearings on a date, optionally limited to one court."""
        return [
            h for h in self.all_hearings()
            if h.hearing_date == on_date and (court_name is None or h.court_name == court_name)
        ]

    def get_hearing(self, hearing_id: str) -> Optional[Hearing]:
        with self._data_lock:
            return self._hearings.get(hearing_id)

    def override_records(self) -> List[OverrideRecord]:
        with self._data_lock:
            return list(self._overrides.values())

    def get_override(self, override_id: str) -> Optional[OverrideRecord]:
        with self._data_lock:
            return self._overrides.get(override_id)

    def overrides_for(self, hearing_id: str) -> List[OverrideRecord]:
        return [r for r in self.override_records() if r.hearing_id == hearing_id]

    def load_overrides(self, records: Iterable[OverrideRecord]) -> None:
        """Seed previously persisted override records (e.g. from an audit file)."""
        with self._data_lock:
            for record in records:
                self._overrides[record.override_id] = record

    def __len__(self) -> int:
        with self._data_lock:
            return len(self._hearings)
