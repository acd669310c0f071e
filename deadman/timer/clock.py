"""Bridge between the wall clock (survives restarts) and the monotonic clock.

Wall-clock epoch seconds are what gets checkpointed to disk.  Inside a single
process all elapsed-time arithmetic uses ``time.monotonic`` so that NTP steps
or manual clock changes cannot shorten or lengthen a running timer.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from deadman.timer.errors import ClockError

log = logging.getLogger(__name__)

MonotonicFn = Callable[[], float]


def epoch_now() -> int:
    """Return the current wall-clock time as whole epoch seconds."""

    now = time.time()
    if now < 0:
        raise ClockError(f"system clock is before the Unix epoch: {now!r}")
    return int(now)


def wall_elapsed(last_modified: int) -> float:
    """Return seconds elapsed since ``last_modified`` on the wall clock.

    A checkpoint in the future (clock skew, hand-edited state file) clamps to
    zero: time moving backwards never grants extra time.
    """

    try:
        now_wall = epoch_now()
    except ClockError:
        log.warning("wall clock before epoch; treating elapsed time as zero", exc_info=True)
        return 0.0
    if now_wall > last_modified:
        return float(now_wall - last_modified)
    return 0.0


def monotonic_start_from_wall_elapsed(
    elapsed: float, *, monotonic: MonotonicFn | None = None
) -> float:
    """Return a monotonic instant such that ``now - start == elapsed``.

    Negative or non-finite inputs saturate to ``now`` so elapsed time never
    appears negative.
    """

    now_mono = (monotonic or time.monotonic)()
    if not math.isfinite(elapsed) or elapsed <= 0:
        return now_mono
    return now_mono - elapsed


__all__ = ["MonotonicFn", "epoch_now", "monotonic_start_from_wall_elapsed", "wall_elapsed"]
