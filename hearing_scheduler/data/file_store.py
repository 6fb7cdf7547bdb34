"""File-backed hearing store: a schedule CSV plus an override audit JSON.

Every transaction runs under an inter-process file lock and re-reads both
files inside it, so separate CLI processes see each other's commits and
cannot both accept overlapping hearings. Staged writes go to temp files next
to their targets and are moved into place with `os.replace` only when the
transaction block exits cleanly. The audit file is replaced first; if the
schedule replace then fails, the previous audit content is put back.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager, suppress
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional

from filelock import FileLock, Timeout

from hearing_scheduler.control.overrides import export_audit_trail, load_audit_trail
from hearing_scheduler.core.errors import HearingStoreError
from hearing_scheduler.core.hearing import Hearing
from hearing_scheduler.data.schedule_io import load_schedule_csv, save_schedule_csv
from hearing_scheduler.data.store import InMemoryHearingStore

if TYPE_CHECKING:
    from hearing_scheduler.control.overrides import OverrideRecord

logger = logging.getLogger(__name__)


def _temp_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.tmp")


class FileHearingStore:
    """Hearing store persisted to disk.

    Args:
        schedule_path: Schedule CSV (missing file is an empty schedule)
        audit_path: Override audit trail JSON (missing file is an empty trail)
        lock_timeout: Seconds to wait for the file lock (None waits forever)
    """

    def __init__(
        self,
        schedule_path: str | Path,
        audit_path: str | Path,
        lock_timeout: Optional[float] = None,
    ):
        self.schedule_path = Path(schedule_path)
        self.audit_path = Path(audit_path)
        self.lock_path = self.schedule_path.with_name(self.schedule_path.name + ".lock")
        self._file_lock = FileLock(
            str(self.lock_path), timeout=lock_timeout if lock_timeout is not None else -1
        )

    @contextmanager
    def _locked(self):
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_lock.acquire()
        except Timeout as e:
            raise HearingStoreError(f"Timed out waiting for schedule lock {self.lock_path}") from e
        except OSError as e:
            raise HearingStoreError(f"Cannot lock schedule {self.lock_path}: {e}") from e
        try:
            yield
        finally:
            self._file_lock.release()

    def _load(self) -> InMemoryHearingStore:
        try:
            hearings = load_schedule_csv(self.schedule_path)
            overrides = load_audit_trail(self.audit_path)
        except OSError as e:
            raise HearingStoreError(f"Cannot read schedule: {e}") from e
        current = InMemoryHearingStore(hearings)
        current.load_overrides(overrides)
        return current

    def _snapshot(self) -> InMemoryHearingStore:
        with self._locked():
            return self._load()

    @contextmanager
    def transaction(self, keys: Iterable[str]):
        """Locked read-check-write unit over both files.

        Raises:
            HearingStoreError: If the lock, a read or a write fails; the files
                on disk are left as they were
        """
        with self._locked():
            current = self._load()
            with current.transaction(keys) as txn:
                yield txn
            if txn.hearings or txn.overrides:
                self._write(current, write_audit=bool(txn.overrides))

    def _write(self, current: InMemoryHearingStore, write_audit: bool) -> None:
        schedule_tmp = _temp_path(self.schedule_path)
        audit_tmp = _temp_path(self.audit_path)
        try:
            save_schedule_csv(current.all_hearings(), schedule_tmp)
            previous_audit = None
            if write_audit:
                if self.audit_path.exists():
                    previous_audit = self.audit_path.read_bytes()
                export_audit_trail(current.override_records(), audit_tmp)
                os.replace(audit_tmp, self.audit_path)
            try:
                os.replace(schedule_tmp, self.schedule_path)
            except OSError:
                if write_audit:
                    self._restore_audit(previous_audit)
                raise
        except OSError as e:
            logger.error("Schedule commit to %s failed: %s", self.schedule_path, e)
            raise HearingStoreError(f"Cannot save schedule: {e}") from e
        finally:
            for tmp in (schedule_tmp, audit_tmp):
                with suppress(OSError):
                    tmp.unlink(missing_ok=True)

    def _restore_audit(self, previous: Optional[bytes]) -> None:
        if previous is None:
            self.audit_path.unlink(missing_ok=True)
        else:
            self.audit_path.write_bytes(previous)

    def all_hearings(self) -> List[Hearing]:
        return self._snapshot().all_hearings()

    def hearings_on(self, on_date: date, court_name: Optional[str] = None) -> List[Hearing]:
        return self._snapshot().hearings_on(on_date, court_name)

    def get_hearing(self, hearing_id: str) -> Optional[Hearing]:
        return self._snapshot().get_hearing(hearing_id)

    def override_records(self) -> List[OverrideRecord]:
        return self._snapshot().override_records()

    def get_override(self, override_id: str) -> Optional[OverrideRecord]:
        return self._snapshot().get_override(override_id)
