"""Core domain: hearings, conflicts, classification and detection."""

from .classifier import ConflictClassifier, ConflictThresholds, names_match, normalize_name
from .conflict import Conflict, ConflictType, Severity, highest_severity, partition_conflicts
from .detector import (
    ClientDoubleBookingRule,
    ConflictDetector,
    ConflictRule,
    DensityWarning,
    OpposingPartyRule,
    TimeOverlapRule,
    detect,
)
from .errors import (
    HearingStoreError,
    HearingValidationError,
    InvalidTransitionError,
    SchedulingError,
)
from .hearing import Hearing, HearingStatus, Priority

__all__ = [
    'Hearing',
    'HearingStatus',
    'Priority',
    'Conflict',
    'ConflictType',
    'Severity',
    'highest_severity',
    'partition_conflicts',
    'ConflictClassifier',
    'ConflictThresholds',
    'names_match',
    'normalize_name',
    'ConflictRule',
    'TimeOverlapRule',
    'ClientDoubleBookingRule',
    'OpposingPartyRule',
    'ConflictDetector',
    'DensityWarning',
    'detect',
    'SchedulingError',
    'HearingValidationError',
    'HearingStoreError',
    'InvalidTransitionError',
]
