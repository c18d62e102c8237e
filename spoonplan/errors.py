"""
Error taxonomy for the scheduling core.
All conditions are local and recoverable; the API maps them to HTTP errors.
"""


class SpoonplanError(Exception):
    """Base class for scheduling-core errors."""
    pass


class InvalidRule(SpoonplanError):
    """Malformed ritual rule. The matcher logs it and treats it as never firing."""
    pass


class OutOfRangeSlot(SpoonplanError):
    """An hour outside the configured daily window was addressed."""

    def __init__(self, hour: str):
        self.hour = hour
        super().__init__(f"Hour {hour!r} is outside the daily window")


class OverwriteRefused(SpoonplanError):
    """A Recovery slot was targeted without an explicit override."""

    def __init__(self, hour: str):
        self.hour = hour
        super().__init__(f"Slot {hour} holds a recovery block; pass override to replace it")


class AdvisoryFailure(SpoonplanError):
    """The advisory producer returned nothing, or something malformed."""
    pass


class PlanStateError(SpoonplanError):
    """A plan transition was requested from the wrong negotiator state."""
    pass


class PlanInProgress(PlanStateError):
    """A plan request arrived while another is Planning or in Preview."""
    pass
