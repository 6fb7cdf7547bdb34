"""Override resolution workflow.

Session-level state machine for one in-progress hearing submission. It
presents conflicts returned by the gateway and captures the user's decision:
cancel, edit the time and resubmit, or override with a reason. It holds no
locks and can be abandoned in any state without side effects.

    idle --submit--> submitting
    submitting --accepted--> accepted                (terminal)
    submitting --rejected--> conflict_presented
    conflict_presented --cancel--> idle              (form kept)
    conflict_presented --edit_time--> editing_time
    editing_time --resubmit--> submitting
    conflict_presented --override--> override_submitting --resubmit--> submitting
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Any, Optional

from hearing_scheduler.control.gateway import Accepted, SchedulingGateway
from hearing_scheduler.control.overrides import OverrideValidator
from hearing_scheduler.core.conflict import Conflict
from hearing_scheduler.core.errors import (
    HearingStoreError,
    HearingValidationError,
    InvalidTransitionError,
)

logger = logging.getLogger(__name__)


class ResolutionState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ACCEPTED = "accepted"
    CONFLICT_PRESENTED = "conflict_presented"
    EDITING_TIME = "editing_time"
    OVERRIDE_SUBMITTING = "override_submitting"


class ResolutionEvent(Enum):
    SUBMIT = "submit"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCEL = "cancel"
    EDIT_TIME = "edit_time"
    RESUBMIT = "resubmit"
    OVERRIDE = "override"
    FAILED = "failed"


S, E = ResolutionState, ResolutionEvent

TRANSITIONS: dict[tuple[ResolutionState, ResolutionEvent], ResolutionState] = {
    (S.IDLE, E.SUBMIT): S.SUBMITTING,
    (S.SUBMITTING, E.ACCEPTED): S.ACCEPTED,
    (S.SUBMITTING, E.REJECTED): S.CONFLICT_PRESENTED,
    (S.CONFLICT_PRESENTED, E.CANCEL): S.IDLE,
    (S.CONFLICT_PRESENTED, E.EDIT_TIME): S.EDITING_TIME,
    (S.EDITING_TIME, E.RESUBMIT): S.SUBMITTING,
    (S.CONFLICT_PRESENTED, E.OVERRIDE): S.OVERRIDE_SUBMITTING,
    (S.OVERRIDE_SUBMITTING, E.RESUBMIT): S.SUBMITTING,
}

# States in which the form may be edited
EDITABLE_STATES = (S.IDLE, S.EDITING_TIME)


@dataclass(frozen=True)
class Transition:
    from_state: ResolutionState
    event: ResolutionEvent
    to_state: ResolutionState


class OverrideResolutionWorkflow:
    """Drives one hearing form through submission and conflict resolution.

    Args:
        gateway: Authoritative commit path
        actor_id: User performing the submission (recorded on overrides)
        form: Optional initial form payload
    """

    def __init__(self, gateway: SchedulingGateway, actor_id: str, form: Optional[dict[str, Any]] = None):
        self.gateway = gateway
        self.actor_id = actor_id
        self.state = ResolutionState.IDLE
        self.form: dict[str, Any] = dict(form or {})
        self.conflicts: tuple[Conflict, ...] = ()
        self.override_reason: Optional[str] = None
        self.result: Optional[Accepted] = None
        self.last_error: Optional[Exception] = None
        self.history: list[Transition] = []

    @property
    def is_terminal(self) -> bool:
        return self.state == ResolutionState.ACCEPTED

    def _fire(self, event: ResolutionEvent) -> ResolutionState:
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransitionError(
                f"Cannot {event.value} while {self.state.value}"
            )
        self.history.append(Transition(self.state, event, target))
        self.state = target
        return target

    def _restore(self, state: ResolutionState) -> None:
        self.history.append(Transition(self.state, ResolutionEvent.FAILED, state))
        self.state = state

    def submit(self, form: Optional[dict[str, Any]] = None) -> ResolutionState:
        """Submit the form (or the retained form after a cancel)."""
        if self.state != ResolutionState.IDLE:
            raise InvalidTransitionError(f"Cannot submit while {self.state.value}")
        if form is not None:
            self.form = dict(form)
        self._fire(ResolutionEvent.SUBMIT)
        return self._send(override=False, resting=ResolutionState.IDLE)

    def cancel(self) -> ResolutionState:
        """Close the conflict dialog. Nothing was written; the form is kept."""
        self._fire(ResolutionEvent.CANCEL)
        self.conflicts = ()
        self.override_reason = None
        return self.state

    def edit_time(self) -> ResolutionState:
        """Reopen the form so the user can move the hearing."""
        self._fire(ResolutionEvent.EDIT_TIME)
        return self.state

    def update_form(self, **fields: Any) -> None:
        """Change form fields while the form is open."""
        if self.state not in EDITABLE_STATES:
            raise InvalidTransitionError(f"Form is not editable while {self.state.value}")
        self.form.update(fields)

    def set_time(self, hearing_time: str | time, hearing_date: Optional[str | date] = None) -> None:
        changes: dict[str, Any] = {"hearing_time": hearing_time}
        if hearing_date is not None:
            changes["hearing_date"] = hearing_date
        self.update_form(**changes)

    def resubmit(self) -> ResolutionState:
        """Submit again after editing the time."""
        if self.state != ResolutionState.EDITING_TIME:
            raise InvalidTransitionError(f"Cannot resubmit while {self.state.value}")
        self._fire(ResolutionEvent.RESUBMIT)
        return self._send(override=False, resting=ResolutionState.EDITING_TIME)

    def override(self, reason: Optional[str]) -> ResolutionState:
        """Force the hearing through the presented conflicts.

        The reason is checked locally first; the gateway validates it again.

        Raises:
            HearingValidationError: If the reason is empty (state unchanged)
        """
        if self.state != ResolutionState.CONFLICT_PRESENTED:
            raise InvalidTransitionError(f"Cannot override while {self.state.value}")
        valid, error = OverrideValidator.validate_reason(reason)
        if not valid:
            raise HearingValidationError([error])

        self.override_reason = reason.strip()
        self._fire(ResolutionEvent.OVERRIDE)
        self._fire(ResolutionEvent.RESUBMIT)
        return self._send(override=True, resting=ResolutionState.CONFLICT_PRESENTED)

    def _send(self, override: bool, resting: ResolutionState) -> ResolutionState:
        # Pin the id so retries of a new hearing stay the same hearing
        if not self.form.get("hearing_id"):
            self.form["hearing_id"] = uuid.uuid4().hex
        try:
            request = self.gateway.parse_request(self.form)
            if override:
                request = request.with_override(self.override_reason or "")
            result = self.gateway.submit(request, self.actor_id)
        except (HearingValidationError, HearingStoreError) as e:
            self.last_error = e
            self._restore(resting)
            logger.warning("Submission of hearing %s failed: %s", self.form.get("hearing_id"), e)
            raise
        except Exception as e:
            self.last_error = e
            self._restore(resting)
            logger.exception("Unexpected error submitting hearing %s", self.form.get("hearing_id"))
            raise

        self.last_error = None
        if result.accepted:
            self.result = result
            self.conflicts = ()
            return self._fire(ResolutionEvent.ACCEPTED)

        self.conflicts = result.conflicts
        return self._fire(ResolutionEvent.REJECTED)
