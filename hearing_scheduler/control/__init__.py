"""Commit gateway, override records and the resolution workflow."""

from .gateway import Accepted, HearingRequest, Rejected, SchedulingGateway, lock_keys
from .overrides import (
    OverrideRecord,
    OverrideValidator,
    export_audit_trail,
    load_audit_trail,
    summarize_overrides,
)
from .workflow import (
    OverrideResolutionWorkflow,
    ResolutionEvent,
    ResolutionState,
    Transition,
)

__all__ = [
    'HearingRequest',
    'Accepted',
    'Rejected',
    'SchedulingGateway',
    'lock_keys',
    'OverrideRecord',
    'OverrideValidator',
    'export_audit_trail',
    'load_audit_trail',
    'summarize_overrides',
    'OverrideResolutionWorkflow',
    'ResolutionEvent',
    'ResolutionState',
    'Transition',
]
