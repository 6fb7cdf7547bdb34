"""Conflict classification: thresholds, name policy and message templates.

The detector decides *which* pairs of hearings to look at; the classifier
decides whether the evidence for a pair amounts to a conflict and how severe
it is. Keeping thresholds here means every call site (advisory checks, the
commit gateway, daily views) applies the same numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hearing_scheduler.core.conflict import Conflict, ConflictType, Severity
from hearing_scheduler.core.hearing import Hearing
from hearing_scheduler.data.config import (
    CONFLICT_WINDOW_MINUTES,
    DENSITY_WINDOW_MINUTES,
    HIGH_SEVERITY_MINUTES,
)
from hearing_scheduler.utils.timeparse import minutes_between

TIME_OVERLAP_TEMPLATE = "Scheduling conflict with {case_number} on {date}"
CLIENT_TEMPLATE = "Multiple active cases for client: {client_name}"
OPPOSING_PARTY_TEMPLATE = "Conflict of interest: Same opposing party ({opposing_party})"


@dataclass(frozen=True)
class ConflictThresholds:
    """Tunable detection thresholds, in minutes.

    Attributes:
        high_severity_minutes: Start-time gap below which an overlap is HIGH
        conflict_window_minutes: Gap at or above which there is no overlap
        density_window_minutes: Same-court gap that triggers a density warning
    """
    high_severity_minutes: int = HIGH_SEVERITY_MINUTES
    conflict_window_minutes: int = CONFLICT_WINDOW_MINUTES
    density_window_minutes: int = DENSITY_WINDOW_MINUTES

    def __post_init__(self) -> None:
        if self.high_severity_minutes <= 0:
            raise ValueError("high_severity_minutes must be positive")
        if self.conflict_window_minutes <= self.high_severity_minutes:
            raise ValueError(
                "conflict_window_minutes must be greater than high_severity_minutes"
            )
        if self.density_window_minutes <= 0:
            raise ValueError("density_window_minutes must be positive")


def normalize_name(name: Optional[str]) -> str:
    """Trim and case-fold a party name. None becomes the empty string."""
    if not name:
        return ""
    return name.strip().casefold()


def names_match(a: Optional[str], b: Optional[str]) -> bool:
    """Exact match after normalisation. Empty names never match."""
    left = normalize_name(a)
    return bool(left) and left == normalize_name(b)


class ConflictClassifier:
    """Turns raw overlap evidence into typed Conflict records."""

    def __init__(self, thresholds: Optional[ConflictThresholds] = None):
        self.thresholds = thresholds or ConflictThresholds()

    def classify_time_gap(self, delta_minutes: int) -> Optional[Severity]:
        """Severity of two same-day hearings `delta_minutes` apart.

        Returns:
            HIGH below the high-severity threshold, MEDIUM below the conflict
            window, None otherwise
        """
        delta = abs(delta_minutes)
        if delta < self.thresholds.high_severity_minutes:
            return Severity.HIGH
        if delta < self.thresholds.conflict_window_minutes:
            return Severity.MEDIUM
        return None

    def is_dense(self, delta_minutes: int) -> bool:
        """True if two same-court hearings are closer than the density window."""
        return abs(delta_minutes) < self.thresholds.density_window_minutes

    def time_overlap(self, candidate: Hearing, other: Hearing) -> Optional[Conflict]:
        if candidate.hearing_date != other.hearing_date:
            return None

        severity = self.classify_time_gap(
            minutes_between(candidate.hearing_time, other.hearing_time)
        )
        if severity is None:
            return None

        return Conflict(
            conflict_type=ConflictType.TIME_OVERLAP,
            severity=severity,
            message=TIME_OVERLAP_TEMPLATE.format(
                case_number=other.case_number,
                date=other.hearing_date.isoformat(),
            ),
            affected_hearing_id=other.hearing_id,
            affected_case_number=other.case_number,
            source_hearing_id=candidate.hearing_id,
            date=other.hearing_date,
        )

    def client_double_booking(self, candidate: Hearing, other: Hearing) -> Optional[Conflict]:
        if not (candidate.is_active() and other.is_active()):
            return None
        if not names_match(candidate.client_name, other.client_name):
            return None

        return Conflict(
            conflict_type=ConflictType.CLIENT_DOUBLE_BOOKING,
            severity=Severity.MEDIUM,
            message=CLIENT_TEMPLATE.format(client_name=candidate.client_name.strip()),
            affected_hearing_id=other.hearing_id,
            affected_case_number=other.case_number,
            source_hearing_id=candidate.hearing_id,
        )

    def opposing_party(self, candidate: Hearing, other: Hearing) -> Optional[Conflict]:
        if not names_match(candidate.opposing_party, other.opposing_party):
            return None

        return Conflict(
            conflict_type=ConflictType.OPPOSING_PARTY,
            severity=Severity.HIGH,
            message=OPPOSING_PARTY_TEMPLATE.format(
                opposing_party=(candidate.opposing_party or "").strip()
            ),
            affected_hearing_id=other.hearing_id,
            affected_case_number=other.case_number,
            source_hearing_id=candidate.hearing_id,
        )
