"""Daily docket report with conflict and density flags.

Builds the per-day listing shown in calendar views: hearings ordered by
court and time, each annotated with how many same-day time overlaps it is
part of and whether its court is crowded around it.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from hearing_scheduler.core.conflict import Severity
from hearing_scheduler.core.detector import ConflictDetector
from hearing_scheduler.core.hearing import Hearing

logger = logging.getLogger(__name__)


class DocketReportGenerator:
    """Generates daily dockets from a hearing schedule."""

    def __init__(self, hearings: Iterable[Hearing], detector: Optional[ConflictDetector] = None):
        """Initialize with a schedule.

        Args:
            hearings: Hearings to report on
            detector: Detector whose thresholds drive the flags (default if None)
        """
        self.hearings = list(hearings)
        self.detector = detector or ConflictDetector()

    def build(self) -> pd.DataFrame:
        """Build the docket frame.

        Returns:
            One row per hearing, sorted by date, court and time

        Raises:
            ValueError: If the schedule is empty
        """
        if not self.hearings:
            raise ValueError("No hearings to report")

        conflict_counts: dict[str, int] = {}
        worst: dict[str, Severity] = {}
        dense: set[str] = set()

        for day in sorted({h.hearing_date for h in self.hearings}):
            for conflict in self.detector.detect_for_date(self.hearings, day):
                for hearing_id in (conflict.source_hearing_id, conflict.affected_hearing_id):
                    conflict_counts[hearing_id] = conflict_counts.get(hearing_id, 0) + 1
                    current = worst.get(hearing_id)
                    if current is None or conflict.severity.rank > current.rank:
                        worst[hearing_id] = conflict.severity
            for warning in self.detector.density_warnings(self.hearings, day):
                dense.update((warning.first_hearing_id, warning.second_hearing_id))

        docket = pd.DataFrame(
            {
                "Date": [h.hearing_date.isoformat() for h in self.hearings],
                "Court": [h.court_name for h in self.hearings],
                "Time": [h.hearing_time.strftime("%H:%M") for h in self.hearings],
                "Hearing_ID": [h.hearing_id for h in self.hearings],
                "Case_Number": [h.case_number for h in self.hearings],
                "Client": [h.client_name for h in self.hearings],
                "Judge": [h.judge_name or "" for h in self.hearings],
                "Status": [h.status.value for h in self.hearings],
                "Priority": [h.priority.value for h in self.hearings],
                "Time_Conflicts": [conflict_counts.get(h.hearing_id, 0) for h in self.hearings],
                "Highest_Severity": [
                    worst[h.hearing_id].value if h.hearing_id in worst else "" for h in self.hearings
                ],
                "Density_Warning": [h.hearing_id in dense for h in self.hearings],
            }
        )

        docket = docket.sort_values(["Date", "Court", "Time", "Hearing_ID"]).reset_index(drop=True)
        docket["Sequence_Number"] = docket.groupby(["Date", "Court"]).cumcount() + 1
        return docket

    def daily_summary(self, docket: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        """Per-day totals: hearings, courts, hearings in conflict, dense hearings."""
        docket = docket if docket is not None else self.build()
        return (
            docket.groupby("Date")
            .agg(
                Total_Hearings=("Hearing_ID", "count"),
                Active_Courts=("Court", "nunique"),
                Hearings_In_Conflict=("Time_Conflicts", lambda s: int((s > 0).sum())),
                Density_Warnings=("Density_Warning", "sum"),
            )
        )

    def generate(self, output_dir: Path) -> Path:
        """Write the docket and daily summary CSVs.

        Args:
            output_dir: Directory to save the CSVs

        Returns:
            Path to the docket CSV
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        docket = self.build()
        docket_path = output_dir / "docket.csv"
        docket.to_csv(docket_path, index=False)

        summary_path = output_dir / "daily_summaries.csv"
        self.daily_summary(docket).to_csv(summary_path)

        logger.info(
            "Generated docket %s: %d hearing(s) from %s to %s",
            docket_path, len(docket), docket["Date"].min(), docket["Date"].max(),
        )
        return docket_path
