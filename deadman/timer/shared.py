"""Mutex-guarded access to a single :class:`Timer` for concurrent hosts."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from deadman.timer.core import Timer


class SharedTimer:
    """One writer at a time; readers take the same lock.

    Persistence enqueues made while the lock is held never block on disk I/O.
    """

    def __init__(self, timer: Timer) -> None:
        self._timer = timer
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[Timer]:
        with self._lock:
            yield self._timer


__all__ = ["SharedTimer"]
