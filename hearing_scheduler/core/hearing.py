"""Hearing value object.

A Hearing is plain value data: a scheduled court appearance identified by an
opaque `hearing_id`. Detection compares hearings field by field and needs no
cross-references between them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, time
from enum import Enum
from typing import Any, Optional

from hearing_scheduler.data.config import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_HEARING_TIME,
    OPEN_STATUSES,
)
from hearing_scheduler.utils.timeparse import (
    minutes_of_day,
    parse_hearing_date,
    parse_time_of_day,
)


class HearingStatus(Enum):
    """Status of the matter a hearing belongs to."""
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"
    WON = "won"
    LOST = "lost"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass(frozen=True)
class Hearing:
    """A proposed or existing court hearing.

    Attributes:
        hearing_id: Opaque identity, used to exclude a hearing from its own check
        case_number: Human-facing case reference used in messages
        client_name: Client as typed on the form (or canonicalised by a registry)
        court_name: Court where the hearing takes place
        hearing_date: Calendar date
        hearing_time: Start time of day
        duration_minutes: Expected duration
        opposing_party: Opposing party name, if known
        judge_name: Presiding judge, if known
        status: Matter status
        priority: Matter priority
    """
    hearing_id: str
    case_number: str
    client_name: str
    court_name: str
    hearing_date: date
    hearing_time: time
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    opposing_party: Optional[str] = None
    judge_name: Optional[str] = None
    status: HearingStatus = HearingStatus.ACTIVE
    priority: Priority = Priority.MEDIUM

    @property
    def start_minute(self) -> int:
        """Minutes past midnight of the start time."""
        return minutes_of_day(self.hearing_time)

    def is_active(self) -> bool:
        return self.status == HearingStatus.ACTIVE

    def is_open(self) -> bool:
        """True for statuses that describe an upcoming or live matter."""
        return self.status.value in OPEN_STATUSES

    def with_time(self, hearing_time: time, hearing_date: Optional[date] = None) -> Hearing:
        """Copy of this hearing moved to another time (and optionally date)."""
        return replace(
            self,
            hearing_time=hearing_time,
            hearing_date=hearing_date or self.hearing_date,
        )

    def with_client(self, client_name: str) -> Hearing:
        return replace(self, client_name=client_name)

    def to_dict(self) -> dict:
        """Convert hearing to a flat dictionary for serialization."""
        return {
            "hearing_id": self.hearing_id,
            "case_number": self.case_number,
            "client_name": self.client_name,
            "court_name": self.court_name,
            "hearing_date": self.hearing_date.isoformat(),
            "hearing_time": self.hearing_time.strftime("%H:%M"),
            "duration_minutes": self.duration_minutes,
            "opposing_party": self.opposing_party or "",
            "judge_name": self.judge_name or "",
            "status": self.status.value,
            "priority": self.priority.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Hearing:
        """Build a hearing from its dictionary (or CSV row) form.

        Missing time and duration fall back to the engine defaults. Empty
        optional strings become None.

        Raises:
            ValueError: If a date, time, duration, status or priority is malformed
            KeyError: If a required field is missing
        """
        duration = data.get("duration_minutes") or DEFAULT_DURATION_MINUTES
        return cls(
            hearing_id=str(data["hearing_id"]),
            case_number=str(data["case_number"]),
            client_name=str(data["client_name"]),
            court_name=str(data["court_name"]),
            hearing_date=parse_hearing_date(data["hearing_date"]),
            hearing_time=parse_time_of_day(data.get("hearing_time") or DEFAULT_HEARING_TIME),
            duration_minutes=int(duration),
            opposing_party=data.get("opposing_party") or None,
            judge_name=data.get("judge_name") or None,
            status=HearingStatus(str(data.get("status") or "active").lower()),
            priority=Priority(str(data.get("priority") or "medium").lower()),
        )

    def __repr__(self) -> str:
        return (f"Hearing(id={self.hearing_id}, case={self.case_number}, "
                f"date={self.hearing_date}, time={self.hearing_time:%H:%M})")
