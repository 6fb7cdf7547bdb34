"""Exception hierarchy for the conflict engine.

A detected conflict is not an error: the gateway returns it as a
`Rejected` result.
"""


class SchedulingError(Exception):
    """Base class for engine errors."""


class HearingValidationError(SchedulingError):
    """Input failed validation before any detection ran."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid hearing request")


class HearingStoreError(SchedulingError):
    """The hearing store could not be read or written. Safe to retry."""


class InvalidTransitionError(SchedulingError):
    """A resolution workflow event is not allowed in the current state."""
