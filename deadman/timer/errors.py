"""Error taxonomy for the timer core."""

from __future__ import annotations


class TimerError(Exception):
    """Base class for timer errors."""


class ClockError(TimerError):
    """System wall clock reads earlier than the Unix epoch."""


class PersistIoError(TimerError):
    """Filesystem failure while writing the persisted state."""


class StateParseError(TimerError):
    """Persisted state could not be decoded."""
