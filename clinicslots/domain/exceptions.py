"""
Domain-specific exception hierarchy for the clinic scheduling core.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidSchedulingInputError(SchedulingError, ValueError):
    """Raised when a date, time or duration supplied by the caller is malformed."""


class SettingsStoreError(SchedulingError):
    """Raised when a settings location cannot be used at all."""
