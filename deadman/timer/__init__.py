"""Timer core: clock reconciliation, persisted state, and the Warning/DeadMan machine."""

from deadman.timer.core import Timer, format_duration
from deadman.timer.errors import ClockError, PersistIoError, StateParseError, TimerError
from deadman.timer.persistence import PersistenceHandle
from deadman.timer.shared import SharedTimer
from deadman.timer.state import Defaulted, Loaded, PersistedState, TimerMode

__all__ = [
    "ClockError",
    "Defaulted",
    "Loaded",
    "PersistIoError",
    "PersistedState",
    "PersistenceHandle",
    "SharedTimer",
    "StateParseError",
    "Timer",
    "TimerError",
    "TimerMode",
    "format_duration",
]
