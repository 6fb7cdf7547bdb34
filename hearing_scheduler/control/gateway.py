"""Scheduling gateway: the authoritative commit path for hearings.

The gateway is the only component allowed to make a binding accept/reject
decision. It never trusts conflict information from the caller: at commit
time it re-reads the schedule and re-runs detection inside one store
transaction, so two overlapping submissions cannot both see an empty
schedule and both succeed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Union
from zoneinfo import ZoneInfo

from hearing_scheduler.control.overrides import OverrideRecord, OverrideValidator
from hearing_scheduler.core.classifier import normalize_name
from hearing_scheduler.core.conflict import Conflict
from hearing_scheduler.core.detector import ConflictDetector
from hearing_scheduler.core.errors import HearingValidationError
from hearing_scheduler.core.hearing import Hearing, HearingStatus, Priority
from hearing_scheduler.data.clients import ClientRegistry
from hearing_scheduler.data.config import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_HEARING_TIME,
    DEFAULT_TIMEZONE,
    REQUIRED_FIELDS,
)
from hearing_scheduler.data.store import HearingStore
from hearing_scheduler.utils.timeparse import parse_hearing_date, parse_time_of_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HearingRequest:
    """A create-or-update hearing payload, optionally forcing past conflicts."""
    hearing: Hearing
    override: bool = False
    override_reason: Optional[str] = None

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        default_time: str = DEFAULT_HEARING_TIME,
        default_duration: int = DEFAULT_DURATION_MINUTES,
    ) -> HearingRequest:
        """Parse a raw form payload.

        Collects every problem before raising, so the caller can show them
        all at once. A payload without `hearing_id` describes a new hearing
        and gets a fresh id.

        Raises:
            HearingValidationError: On missing or malformed fields
        """
        errors: List[str] = []

        for name in REQUIRED_FIELDS:
            value = payload.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append(f"{name} is required")

        hearing_date = None
        if payload.get("hearing_date"):
            try:
                hearing_date = parse_hearing_date(payload["hearing_date"])
            except ValueError:
                errors.append("Valid hearing date is required")

        hearing_time = None
        try:
            hearing_time = parse_time_of_day(payload.get("hearing_time") or default_time)
        except ValueError:
            errors.append("Valid hearing time is required")

        duration = default_duration
        try:
            duration = int(payload.get("duration_minutes") or default_duration)
            if duration <= 0:
                errors.append("duration_minutes must be positive")
        except (TypeError, ValueError):
            errors.append("duration_minutes must be a whole number of minutes")

        try:
            status = HearingStatus(str(payload.get("status") or "active").lower())
        except ValueError:
            errors.append(f"Invalid status: {payload.get('status')}")
            status = HearingStatus.ACTIVE

        try:
            priority = Priority(str(payload.get("priority") or "medium").lower())
        except ValueError:
            errors.append(f"Invalid priority: {payload.get('priority')}")
            priority = Priority.MEDIUM

        if errors:
            raise HearingValidationError(errors)

        hearing = Hearing(
            hearing_id=str(payload.get("hearing_id") or uuid.uuid4().hex),
            case_number=str(payload["case_number"]).strip(),
            client_name=str(payload["client_name"]).strip(),
            court_name=str(payload["court_name"]).strip(),
            hearing_date=hearing_date,
            hearing_time=hearing_time,
            duration_minutes=duration,
            opposing_party=(payload.get("opposing_party") or "").strip() or None,
            judge_name=(payload.get("judge_name") or "").strip() or None,
            status=status,
            priority=priority,
        )
        return cls(
            hearing=hearing,
            override=payload.get("override") is True,
            override_reason=payload.get("override_reason"),
        )

    def with_override(self, reason: str) -> HearingRequest:
        return replace(self, override=True, override_reason=reason)


@dataclass(frozen=True)
class Accepted:
    """The hearing was persisted."""
    hearing: Hearing
    override_record: Optional[OverrideRecord] = None
    created: bool = True

    @property
    def accepted(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {
            "status": "accepted",
            "hearing": self.hearing.to_dict(),
            "created": self.created,
            "override": self.override_record.to_dict() if self.override_record else None,
        }


@dataclass(frozen=True)
class Rejected:
    """Conflicts need explicit confirmation before the hearing can be written."""
    conflicts: tuple[Conflict, ...] = field(default_factory=tuple)

    @property
    def accepted(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {
            "error": "CONFLICT",
            "message": "Hearing conflicts with existing schedules",
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


SubmissionResult = Union[Accepted, Rejected]


def lock_keys(hearing: Hearing) -> List[str]:
    """Store lock keys covering every rule the hearing could trip.

    Two hearings that can conflict always share at least one key: the date
    for time overlaps, the client for double-bookings, the opposing party
    for conflicts of interest.
    """
    keys = [f"date:{hearing.hearing_date.isoformat()}"]
    client = normalize_name(hearing.client_name)
    if client:
        keys.append(f"client:{client}")
    opposing = normalize_name(hearing.opposing_party)
    if opposing:
        keys.append(f"opposing:{opposing}")
    return keys


class SchedulingGateway:
    """Authoritative accept/reject decision for hearing commits.

    Args:
        store: Hearing store to read and write
        detector: Conflict detector (default thresholds if None)
        client_registry: Optional registry used to canonicalise client names
        clock: Returns the current time; "today" for past-date checks comes from it
        timezone_name: Court timezone used by the default clock
        default_time: Start time assumed when a payload omits one
        default_duration: Duration assumed when a payload omits one
    """

    def __init__(
        self,
        store: HearingStore,
        detector: Optional[ConflictDetector] = None,
        client_registry: Optional[ClientRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
        timezone_name: str = DEFAULT_TIMEZONE,
        default_time: str = DEFAULT_HEARING_TIME,
        default_duration: int = DEFAULT_DURATION_MINUTES,
    ):
        self.store = store
        self.detector = detector or ConflictDetector()
        self.client_registry = client_registry
        tz = ZoneInfo(timezone_name)
        self._clock = clock or (lambda: datetime.now(tz))
        self.default_time = default_time
        self.default_duration = default_duration

    def today(self) -> date:
        return self._clock().date()

    def validate(self, request: HearingRequest, actor_id: str) -> None:
        """Checks that need no schedule read.

        Raises:
            HearingValidationError: If the request cannot be processed
        """
        errors: List[str] = []
        hearing = request.hearing

        if hearing.is_open() and hearing.hearing_date < self.today():
            errors.append("Hearing date cannot be in the past for scheduled hearings")

        if request.override:
            valid, error = OverrideValidator.validate_reason(request.override_reason)
            if not valid:
                errors.append(error)
            valid, error = OverrideValidator.validate_actor(actor_id)
            if not valid:
                errors.append(error)

        if errors:
            raise HearingValidationError(errors)

    def check(self, hearing: Hearing) -> List[Conflict]:
        """Advisory check against the current schedule. Never writes.

        The answer can be stale by the time the user commits; only
        `submit()` decides.
        """
        return self.detector.detect(self._resolve_client(hearing), self.store.all_hearings())

    def submit(self, request: HearingRequest, actor_id: str) -> SubmissionResult:
        """Commit a hearing, or reject it with the conflicts that block it.

        Args:
            request: Hearing plus optional override flag and reason
            actor_id: Who is submitting (recorded on overrides)

        Returns:
            Accepted if the hearing was written, Rejected if conflicts exist and
            no override was given

        Raises:
            HearingValidationError: Before any read, if the request is invalid
            HearingStoreError: If the store fails; nothing is written
        """
        self.validate(request, actor_id)
        candidate = self._resolve_client(request.hearing)

        with self.store.transaction(lock_keys(candidate)) as txn:
            existing = txn.snapshot()
            conflicts = self.detector.detect(candidate, existing)
            created = all(h.hearing_id != candidate.hearing_id for h in existing)

            if conflicts and not request.override:
                logger.info(
                    "Rejected hearing %s (%s): %d conflict(s)",
                    candidate.hearing_id, candidate.case_number, len(conflicts),
                )
                return Rejected(conflicts=tuple(conflicts))

            record = None
            if conflicts:
                record = OverrideRecord(
                    hearing_id=candidate.hearing_id,
                    reason=request.override_reason or "",
                    actor_id=actor_id,
                    conflicts=tuple(conflicts),
                    timestamp=self._clock(),
                )
                txn.add_override(record)
                logger.warning(
                    "Hearing %s (%s) scheduled despite %d conflict(s) by %s: %s",
                    candidate.hearing_id, candidate.case_number, len(conflicts),
                    actor_id, record.reason,
                )
            txn.put_hearing(candidate)

        if self.client_registry is not None:
            self.client_registry.register(candidate.client_name)
        logger.info(
            "%s hearing %s (%s) on %s at %s",
            "Created" if created else "Updated",
            candidate.hearing_id, candidate.case_number,
            candidate.hearing_date.isoformat(), candidate.hearing_time.strftime("%H:%M"),
        )
        return Accepted(hearing=candidate, override_record=record, created=created)

    def parse_request(self, payload: dict[str, Any]) -> HearingRequest:
        """Parse a raw payload with this gateway's defaults."""
        return HearingRequest.from_payload(
            payload, default_time=self.default_time, default_duration=self.default_duration
        )

    def submit_payload(self, payload: dict[str, Any], actor_id: str) -> SubmissionResult:
        """Parse a raw payload and submit it."""
        return self.submit(self.parse_request(payload), actor_id)

    def _resolve_client(self, hearing: Hearing) -> Hearing:
        """Swap in the registered spelling of the client. Never registers."""
        if self.client_registry is None:
            return hearing
        canonical = self.client_registry.lookup(hearing.client_name)
        if canonical is None or canonical == hearing.client_name:
            return hearing
        return hearing.with_client(canonical)
