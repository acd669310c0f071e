"""Restart-resilient Warning -> DeadMan timer.

The timer counts down the warning period first.  When the host loop observes
it expired, :meth:`Timer.update` promotes it to the dead-man period.  A human
check-in (:meth:`Timer.reset`) re-arms it, demoting DeadMan back to Warning.

Only the mode and the wall-clock second of the last change are persisted; on
start the monotonic ``start`` is rebuilt so time spent while the process was
down still counts.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import timedelta
from typing import Optional, Protocol

from deadman.timer.clock import (
    MonotonicFn,
    epoch_now,
    monotonic_start_from_wall_elapsed,
    wall_elapsed,
)
from deadman.timer.persistence import PersistenceHandle
from deadman.timer.state import Loaded, LoadResult, PersistedState, TimerMode, load_state

log = logging.getLogger(__name__)


class TimerConfig(Protocol):
    timer_warning_seconds: int
    timer_dead_man_seconds: int


def format_duration(total_seconds: int) -> str:
    """Render seconds as e.g. ``"1 day(s), 3 hour(s), 45 minute(s)"``."""

    total_seconds = max(0, int(total_seconds))
    days, rem = divmod(total_seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    parts: list[str] = []
    if days > 0:
        parts.append(f"{days} day(s)")
    if hours > 0:
        parts.append(f"{hours} hour(s)")
    if minutes > 0:
        parts.append(f"{minutes} minute(s)")
    if seconds > 0 or not parts:
        parts.append(f"{seconds} second(s)")
    return ", ".join(parts)


class Timer:
    """In-memory countdown backed by a :class:`PersistenceHandle`.

    Not thread-safe on its own; concurrent hosts wrap it in
    :class:`deadman.timer.shared.SharedTimer`.
    """

    def __init__(
        self,
        mode: TimerMode,
        start: float,
        duration_s: float,
        *,
        persistence: Optional[PersistenceHandle] = None,
        monotonic: MonotonicFn | None = None,
    ) -> None:
        self._mode = mode
        self._start = float(start)
        self._duration_s = max(0.0, float(duration_s))
        self._persistence = persistence
        self._monotonic: MonotonicFn = monotonic or time.monotonic
        self.origin: Optional[LoadResult] = None

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    @classmethod
    def new(
        cls,
        config: TimerConfig,
        persistence: PersistenceHandle,
        *,
        monotonic: MonotonicFn | None = None,
    ) -> "Timer":
        """Rehydrate the timer from disk, or start a fresh Warning period.

        Raises ``ClockError`` if the wall clock is unusable and
        ``PersistIoError`` if the state location is not writable.
        """

        mono = monotonic or time.monotonic
        result = load_state(persistence.path)

        if isinstance(result, Loaded):
            state = result.state
            start = monotonic_start_from_wall_elapsed(
                wall_elapsed(state.last_modified), monotonic=mono
            )
            timer = cls(
                state.mode,
                start,
                _duration_for(state.mode, config),
                persistence=persistence,
                monotonic=mono,
            )
            log.info(
                "timer.loaded",
                extra={"extra": {"mode": state.mode.value, "last_modified": state.last_modified}},
            )
        else:
            timer = cls(
                TimerMode.WARNING,
                mono(),
                config.timer_warning_seconds,
                persistence=persistence,
                monotonic=mono,
            )
            state = timer.snapshot()
            log.info("timer.defaulted", extra={"extra": {"reason": result.reason}})

        timer.origin = result
        persistence.seed(state)
        persistence.persist_blocking(state)
        return timer

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def get_mode(self) -> TimerMode:
        return self._mode

    @property
    def duration(self) -> timedelta:
        return timedelta(seconds=self._duration_s)

    @property
    def start(self) -> float:
        return self._start

    def _elapsed_s(self) -> float:
        return max(0.0, self._monotonic() - self._start)

    def _remaining_s(self) -> float:
        return max(0.0, self._duration_s - self._elapsed_s())

    def elapsed(self) -> timedelta:
        return timedelta(seconds=self._elapsed_s())

    def remaining(self) -> timedelta:
        return timedelta(seconds=self._remaining_s())

    def remaining_percent(self) -> int:
        """Whole percent of the current period left, 0..100.

        Only reaches 0 once the period has fully elapsed.
        """

        if self._duration_s <= 0:
            return 0
        remaining = self._remaining_s()
        if remaining <= 0:
            return 0
        pct = math.floor(remaining / self._duration_s * 100)
        return min(100, max(1, pct))

    def label(self) -> str:
        return format_duration(int(self._remaining_s()))

    def expired(self) -> bool:
        return self._elapsed_s() >= self._duration_s

    def snapshot(self) -> PersistedState:
        """State to persist, stamped with the current wall-clock second."""

        return PersistedState(mode=self._mode, last_modified=epoch_now())

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------
    def update(self, elapsed: timedelta, dead_man_seconds: int) -> None:
        """Promote Warning to DeadMan once ``elapsed`` covers the warning period.

        No-op in DeadMan mode, so repeated calls with the same ``elapsed`` do
        not transition twice.
        """

        if self._mode is not TimerMode.WARNING:
            return
        if elapsed.total_seconds() < self._duration_s:
            return

        self._mode = TimerMode.DEAD_MAN
        self._start = self._monotonic()
        self._duration_s = max(0.0, float(dead_man_seconds))
        log.info(
            "timer.transition",
            extra={"extra": {"mode": self._mode.value, "duration_s": self._duration_s}},
        )
        self._persist(self.snapshot())

    def reset(self, config: TimerConfig) -> None:
        """Check in: re-arm the current period, demoting DeadMan to Warning."""

        if self._mode is TimerMode.DEAD_MAN:
            self._mode = TimerMode.WARNING
            self._duration_s = max(0.0, float(config.timer_warning_seconds))
        self._start = self._monotonic()
        log.info(
            "timer.check_in",
            extra={"extra": {"mode": self._mode.value, "duration_s": self._duration_s}},
        )
        self._persist(self.snapshot())

    def _persist(self, state: PersistedState) -> None:
        if self._persistence is None:
            return
        self._persistence.enqueue(state)

    def __repr__(self) -> str:
        return (
            f"Timer(mode={self._mode.value}, elapsed={self._elapsed_s():.1f}s, "
            f"duration={self._duration_s:.0f}s)"
        )


def _duration_for(mode: TimerMode, config: TimerConfig) -> float:
    if mode is TimerMode.DEAD_MAN:
        return float(config.timer_dead_man_seconds)
    return float(config.timer_warning_seconds)


__all__ = ["Timer", "TimerConfig", "format_duration"]
