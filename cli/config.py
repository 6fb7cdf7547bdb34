"""Configuration models and loaders for CLI commands."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from hearing_scheduler.core.classifier import ConflictClassifier, ConflictThresholds
from hearing_scheduler.core.detector import ConflictDetector
from hearing_scheduler.data.config import (
    CONFLICT_WINDOW_MINUTES,
    DEFAULT_AUDIT_PATH,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_HEARING_TIME,
    DEFAULT_SCHEDULE_PATH,
    DEFAULT_TIMEZONE,
    DENSITY_WINDOW_MINUTES,
    HIGH_SEVERITY_MINUTES,
)
from hearing_scheduler.utils.timeparse import parse_time_of_day

# Configuration Models

class ThresholdConfig(BaseModel):
    """Detection thresholds, in minutes."""
    high_severity_minutes: int = Field(HIGH_SEVERITY_MINUTES, ge=1)
    conflict_window_minutes: int = Field(CONFLICT_WINDOW_MINUTES, ge=1)
    density_window_minutes: int = Field(DENSITY_WINDOW_MINUTES, ge=1)

    @model_validator(mode="after")
    def _check_bands(self) -> "ThresholdConfig":
        if self.conflict_window_minutes <= self.high_severity_minutes:
            raise ValueError("conflict_window_minutes must be greater than high_severity_minutes")
        return self

    def to_thresholds(self) -> ConflictThresholds:
        return ConflictThresholds(
            high_severity_minutes=self.high_severity_minutes,
            conflict_window_minutes=self.conflict_window_minutes,
            density_window_minutes=self.density_window_minutes,
        )


class EngineConfig(BaseModel):
    """Configuration shared by all CLI commands."""
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    default_hearing_time: str = DEFAULT_HEARING_TIME
    default_duration_minutes: int = Field(DEFAULT_DURATION_MINUTES, ge=1)
    timezone: str = DEFAULT_TIMEZONE
    log_level: str = Field("INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    lock_timeout_seconds: Optional[float] = Field(None, gt=0)
    schedule: Path = Path(DEFAULT_SCHEDULE_PATH)
    audit: Path = Path(DEFAULT_AUDIT_PATH)

    @field_validator("default_hearing_time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        parse_time_of_day(v)
        return v

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    def build_detector(self) -> ConflictDetector:
        return ConflictDetector(classifier=ConflictClassifier(self.thresholds.to_thresholds()))


# Configuration Loaders

def _read_config(path: Path) -> Dict[str, Any]:
    """Read configuration from .toml or .json file."""
    suf = path.suffix.lower()
    if suf == ".json":
        return json.loads(path.read_text(encoding="utf-8"))
    if suf == ".toml":
        return tomllib.loads(path.read_text(encoding="utf-8"))
    raise ValueError(f"Unsupported config format: {path.suffix}. Use .toml or .json")


def load_engine_config(path: Optional[Path]) -> EngineConfig:
    """Load engine configuration from file, or defaults when no path is given."""
    if path is None:
        return EngineConfig()
    data = _read_config(path)
    return EngineConfig(**data)
