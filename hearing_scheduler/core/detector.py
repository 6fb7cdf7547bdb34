"""Conflict detection over an explicit schedule.

Detection is a pure function of (candidate, existing hearings). Each rule is
an independent strategy; the detector runs every rule against every other
hearing and returns the union of what they report.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from itertools import combinations
from typing import Iterable, Optional, Sequence

from hearing_scheduler.core.classifier import ConflictClassifier
from hearing_scheduler.core.conflict import Conflict, ConflictType
from hearing_scheduler.core.hearing import Hearing
from hearing_scheduler.utils.timeparse import minutes_between

logger = logging.getLogger(__name__)


class ConflictRule(ABC):
    """One independent detection rule."""

    conflict_type: ConflictType

    @abstractmethod
    def evaluate(
        self, candidate: Hearing, other: Hearing, classifier: ConflictClassifier
    ) -> Optional[Conflict]:
        """Return a conflict between `candidate` and `other`, or None."""

    @property
    def name(self) -> str:
        return self.conflict_type.value


class TimeOverlapRule(ConflictRule):
    """Same calendar date, start times inside the conflict window."""

    conflict_type = ConflictType.TIME_OVERLAP

    def evaluate(self, candidate, other, classifier):
        return classifier.time_overlap(candidate, other)


class ClientDoubleBookingRule(ConflictRule):
    """Same client on two active hearings, any date."""

    conflict_type = ConflictType.CLIENT_DOUBLE_BOOKING

    def evaluate(self, candidate, other, classifier):
        return classifier.client_double_booking(candidate, other)


class OpposingPartyRule(ConflictRule):
    """Same non-empty opposing party, any date."""

    conflict_type = ConflictType.OPPOSING_PARTY

    def evaluate(self, candidate, other, classifier):
        return classifier.opposing_party(candidate, other)


DEFAULT_RULES: tuple[ConflictRule, ...] = (
    TimeOverlapRule(),
    ClientDoubleBookingRule(),
    OpposingPartyRule(),
)


@dataclass(frozen=True)
class DensityWarning:
    """Two hearings in the same court on the same day, close together.

    Used to highlight calendar cells. Never blocks a commit.
    """
    court_name: str
    date: date
    first_hearing_id: str
    second_hearing_id: str
    first_case_number: str
    second_case_number: str
    gap_minutes: int

    @property
    def label(self) -> str:
        return f"{self.first_case_number} & {self.second_case_number}"

    def to_dict(self) -> dict:
        return {
            "court_name": self.court_name,
            "date": self.date.isoformat(),
            "first_hearing_id": self.first_hearing_id,
            "second_hearing_id": self.second_hearing_id,
            "label": self.label,
            "gap_minutes": self.gap_minutes,
        }


class ConflictDetector:
    """Runs a set of rules against a candidate and an explicit schedule.

    Args:
        classifier: Threshold and message policy (default thresholds if None)
        rules: Rules to apply, in reporting order (all three built-ins if None)
    """

    def __init__(
        self,
        classifier: Optional[ConflictClassifier] = None,
        rules: Optional[Sequence[ConflictRule]] = None,
    ):
        self.classifier = classifier or ConflictClassifier()
        self.rules: tuple[ConflictRule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES

    def detect(self, candidate: Hearing, existing: Iterable[Hearing]) -> list[Conflict]:
        """Find every conflict between `candidate` and the existing schedule.

        The candidate is skipped if it appears in `existing` (same hearing_id),
        so an update can be checked against a schedule that still contains
        the old version of itself.

        Returns:
            Conflicts ordered by existing-hearing order, then rule order
        """
        conflicts: list[Conflict] = []
        for other in existing:
            if other.hearing_id == candidate.hearing_id:
                continue
            for rule in self.rules:
                conflict = rule.evaluate(candidate, other, self.classifier)
                if conflict is not None:
                    conflicts.append(conflict)

        logger.debug("Detected %d conflict(s) for hearing %s", len(conflicts), candidate.hearing_id)
        return conflicts

    def detect_for_date(self, hearings: Iterable[Hearing], on_date: date) -> list[Conflict]:
        """Daily view: time overlaps between every pair of hearings on a date.

        Each pair is reported once, from the perspective of the earlier
        hearing in input order.
        """
        day = [h for h in hearings if h.hearing_date == on_date]
        conflicts = []
        for first, second in combinations(day, 2):
            if first.hearing_id == second.hearing_id:
                continue
            conflict = self.classifier.time_overlap(first, second)
            if conflict is not None:
                conflicts.append(conflict)
        return conflicts

    def density_warnings(self, hearings: Iterable[Hearing], on_date: date) -> list[DensityWarning]:
        """Same-court pairs on a date closer than the density window."""
        day = [h for h in hearings if h.hearing_date == on_date]
        warnings = []
        for first, second in combinations(day, 2):
            if first.court_name != second.court_name:
                continue
            gap = minutes_between(first.hearing_time, second.hearing_time)
            if self.classifier.is_dense(gap):
                warnings.append(DensityWarning(
                    court_name=first.court_name,
                    date=on_date,
                    first_hearing_id=first.hearing_id,
                    second_hearing_id=second.hearing_id,
                    first_case_number=first.case_number,
                    second_case_number=second.case_number,
                    gap_minutes=gap,
                ))
        return warnings


_default_detector = ConflictDetector()


def detect(candidate: Hearing, existing: Iterable[Hearing]) -> list[Conflict]:
    """Detect conflicts with the default thresholds and rules."""
    return _default_detector.detect(candidate, existing)
