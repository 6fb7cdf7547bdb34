"""Configuration constants for the hearing conflict engine.

This module contains the default thresholds and fallbacks used throughout
detection, classification and commit handling. Runtime overrides come from
`cli.config.EngineConfig`.
"""

# Time-overlap severity bands (minutes between hearing start times)
HIGH_SEVERITY_MINUTES = 60  # delta below this is HIGH
CONFLICT_WINDOW_MINUTES = 180  # delta at or above this is no conflict

# Same-courtroom density warning used for calendar highlighting
DENSITY_WINDOW_MINUTES = 120

# Fallbacks for incomplete hearing payloads
DEFAULT_HEARING_TIME = "10:00"
DEFAULT_DURATION_MINUTES = 60
DEFAULT_TIMEZONE = "Asia/Kolkata"

# Statuses that describe an open matter; past dates are rejected for these
OPEN_STATUSES = ("active", "pending")

# Required fields of a create-or-update payload
REQUIRED_FIELDS = ("case_number", "client_name", "court_name", "hearing_date")

# Default file locations used by the CLI
DEFAULT_SCHEDULE_PATH = "data/schedule.csv"
DEFAULT_AUDIT_PATH = "data/override_audit.json"
