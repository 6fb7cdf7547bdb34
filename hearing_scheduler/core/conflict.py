"""Conflict records produced by detection.

Conflicts are derived and transient: they are recomputed on every detection
call and only persisted as part of an override audit record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional


class ConflictType(Enum):
    """Kinds of collision the detector reports."""
    TIME_OVERLAP = "time_overlap"  # Same date, start times too close
    CLIENT_DOUBLE_BOOKING = "client_double_booking"  # Same client, both active
    OPPOSING_PARTY = "opposing_party"  # Same opposing party, conflict of interest


class Severity(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


@dataclass(frozen=True)
class Conflict:
    """A typed, severity-ranked collision with one existing hearing.

    Attributes:
        conflict_type: Which rule produced the conflict
        severity: How blocking the conflict is expected to be
        message: Human-readable description
        affected_hearing_id: Existing hearing the candidate collides with
        affected_case_number: Case number of the affected hearing
        source_hearing_id: Candidate hearing that was checked
        date: Shared date, set only for date-scoped conflicts
    """
    conflict_type: ConflictType
    severity: Severity
    message: str
    affected_hearing_id: str
    affected_case_number: str = ""
    source_hearing_id: str = ""
    date: Optional[date] = None

    @property
    def is_date_scoped(self) -> bool:
        return self.date is not None

    def to_dict(self) -> dict:
        """Convert to the wire form of a conflict response entry."""
        data = {
            "type": self.conflict_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "affected_hearing_id": self.affected_hearing_id,
            "case_number": self.affected_case_number,
            "source_hearing_id": self.source_hearing_id,
        }
        if self.date is not None:
            data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Conflict:
        raw_date = data.get("date")
        return cls(
            conflict_type=ConflictType(data["type"]),
            severity=Severity(data["severity"]),
            message=data.get("message", ""),
            affected_hearing_id=data["affected_hearing_id"],
            affected_case_number=data.get("case_number", ""),
            source_hearing_id=data.get("source_hearing_id", ""),
            date=date.fromisoformat(raw_date) if raw_date else None,
        )

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.conflict_type.value}: {self.message}"


def partition_conflicts(
    conflicts: Iterable[Conflict],
) -> tuple[dict[date, list[Conflict]], list[Conflict]]:
    """Split conflicts for presentation.

    Returns:
        (date-scoped conflicts grouped by date, general conflicts)
    """
    by_date: dict[date, list[Conflict]] = {}
    general: list[Conflict] = []
    for conflict in conflicts:
        if conflict.date is not None:
            by_date.setdefault(conflict.date, []).append(conflict)
        else:
            general.append(conflict)
    return by_date, general


def highest_severity(conflicts: Iterable[Conflict]) -> Optional[Severity]:
    """Most blocking severity among conflicts, or None if there are none."""
    ranked = [c.severity for c in conflicts]
    if not ranked:
        return None
    return max(ranked, key=lambda s: s.rank)
