"""CSV import/export for hearing schedules.

The CSV layout is the flat `Hearing.to_dict()` form, one row per hearing.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, List

from hearing_scheduler.core.hearing import Hearing

SCHEDULE_COLUMNS = [
    "hearing_id", "case_number", "client_name", "court_name",
    "hearing_date", "hearing_time", "duration_minutes",
    "opposing_party", "judge_name", "status", "priority",
]


def save_schedule_csv(hearings: Iterable[Hearing], out_path: Path) -> Path:
    """Write hearings to CSV, sorted by date then time."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    rows = sorted(hearings, key=lambda h: (h.hearing_date, h.hearing_time, h.hearing_id))
    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=SCHEDULE_COLUMNS)
        w.writeheader()
        for hearing in rows:
            w.writerow(hearing.to_dict())
    return out_path


def load_schedule_csv(path: Path) -> List[Hearing]:
    """Read hearings from CSV. A missing file is an empty schedule.

    Raises:
        ValueError: If a row cannot be parsed (message names the line)
    """
    path = Path(path)
    if not path.exists():
        return []

    hearings: List[Hearing] = []
    with path.open("r", newline="", encoding="utf-8") as f:
        r = csv.DictReader(f)
        for line_no, row in enumerate(r, start=2):
            try:
                hearings.append(Hearing.from_dict(row))
            except (KeyError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: invalid hearing row ({e})") from e
    return hearings
