"""Conflict override records and audit trail.

An override is an explicit, reasoned decision to commit a hearing despite
detected conflicts. Each one is captured as an immutable OverrideRecord that
snapshots the conflicts it overrode.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from hearing_scheduler.core.conflict import Conflict


@dataclass(frozen=True)
class OverrideRecord:
    """Audit record of a hearing committed past detected conflicts."""
    hearing_id: str
    reason: str
    actor_id: str
    conflicts: tuple[Conflict, ...]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    override_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        valid, error = OverrideValidator.validate_reason(self.reason)
        if not valid:
            raise ValueError(error)
        if not self.conflicts:
            raise ValueError("An override record requires at least one conflict")
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "reason", self.reason.strip())
        object.__setattr__(self, "conflicts", tuple(self.conflicts))

    @property
    def conflicting_hearing_ids(self) -> list[str]:
        seen: list[str] = []
        for conflict in self.conflicts:
            if conflict.affected_hearing_id not in seen:
                seen.append(conflict.affected_hearing_id)
        return seen

    def to_dict(self) -> dict:
        """Convert to dictionary for the audit trail."""
        return {
            "override_id": self.override_id,
            "hearing_id": self.hearing_id,
            "reason": self.reason,
            "actor_id": self.actor_id,
            "timestamp": self.timestamp.isoformat(),
            "conflicting_hearings": self.conflicting_hearing_ids,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }

    @classmethod
    def from_dict(cls, data: dict) -> OverrideRecord:
        return cls(
            override_id=data["override_id"],
            hearing_id=data["hearing_id"],
            reason=data["reason"],
            actor_id=data["actor_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            conflicts=tuple(Conflict.from_dict(c) for c in data["conflicts"]),
        )

    def to_readable_text(self) -> str:
        """Human-readable description of the override."""
        parts = [
            f"[{self.timestamp.strftime('%Y-%m-%d %H:%M')}]",
            f"{self.actor_id}:",
            f"Scheduled hearing {self.hearing_id} despite {len(self.conflicts)} conflict(s)",
            f"Reason: {self.reason}",
        ]
        return " ".join(parts)


class OverrideValidator:
    """Validates override requests."""

    @staticmethod
    def validate_reason(reason: Optional[str]) -> tuple[bool, str]:
        """Validate an override reason.

        Args:
            reason: Text typed by the user

        Returns:
            (valid, error_message)
        """
        if reason is None or not reason.strip():
            return False, "Override reason is required when forcing a conflicting hearing"
        return True, ""

    @staticmethod
    def validate_actor(actor_id: Optional[str]) -> tuple[bool, str]:
        if not actor_id or not actor_id.strip():
            return False, "Actor ID is required to record an override"
        return True, ""


def summarize_overrides(records: Iterable[OverrideRecord], actor_id: Optional[str] = None) -> dict:
    """Get override statistics.

    Args:
        records: Override records to summarise
        actor_id: Optional filter by actor

    Returns:
        Statistics dictionary
    """
    relevant = [r for r in records if actor_id is None or r.actor_id == actor_id]
    if not relevant:
        return {
            "total_overrides": 0,
            "by_conflict_type": {},
            "by_actor": {},
            "avg_conflicts_per_override": 0,
        }

    by_type: dict[str, int] = {}
    by_actor: dict[str, int] = {}
    total_conflicts = 0
    for record in relevant:
        by_actor[record.actor_id] = by_actor.get(record.actor_id, 0) + 1
        for conflict in record.conflicts:
            key = conflict.conflict_type.value
            by_type[key] = by_type.get(key, 0) + 1
        total_conflicts += len(record.conflicts)

    return {
        "total_overrides": len(relevant),
        "by_conflict_type": by_type,
        "by_actor": by_actor,
        "avg_conflicts_per_override": total_conflicts / len(relevant),
    }


def export_audit_trail(records: Iterable[OverrideRecord], output_file: str | Path) -> Path:
    """Export the override audit trail to a JSON file.

    Args:
        records: Override records to export
        output_file: Path to output file

    Returns:
        Path written
    """
    records = list(records)
    audit_data = {
        "overrides": [r.to_dict() for r in records],
        "statistics": summarize_overrides(records),
    }

    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(audit_data, f, indent=2)
    return path


def load_audit_trail(input_file: str | Path) -> list[OverrideRecord]:
    """Read override records back from an exported audit trail.

    A missing file is an empty trail.
    """
    path = Path(input_file)
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [OverrideRecord.from_dict(item) for item in data.get("overrides", [])]
