"""
Exceptions raised by the Club Field Scheduler.
"""


class SchedulingError(ValueError):
    """Base class for malformed scheduling input."""


class InvalidWindowError(SchedulingError):
    """A time window whose end is not after its start."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid time window: end {end} is not after start {start}")
