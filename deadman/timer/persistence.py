"""Background persistence of timer state snapshots.

Front-ends (the web request handlers, the poll loop) must never wait on an
fsync.  They hand snapshots to a :class:`PersistenceHandle`, which feeds a
single worker thread.  The worker coalesces bursts inside a short debounce
window, skips snapshots equal to the last one written, and logs (rather than
raises) write failures so a later differing snapshot retries the write.

Startup uses :meth:`PersistenceHandle.persist_blocking` once to prove the state
location is writable; that path does raise.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from deadman.timer.atomic import write_atomic
from deadman.timer.state import PersistedState, encode_state

log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 0.3

_CLOSE = object()

Writer = Callable[[Path, bytes], None]


class PersistenceHandle:
    """Owns the snapshot channel and the one worker thread behind it."""

    def __init__(
        self,
        path: Path,
        *,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        writer: Writer | None = None,
    ) -> None:
        self.path = Path(path)
        self._debounce_s = max(0.0, float(debounce_s))
        self._writer: Writer = writer or write_atomic
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._start_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        self._last_written: Optional[PersistedState] = None

    # ------------------------------------------------------------------
    @property
    def debounce_s(self) -> float:
        return self._debounce_s

    @property
    def last_written(self) -> Optional[PersistedState]:
        return self._last_written

    def seed(self, state: PersistedState) -> None:
        """Record ``state`` as already on disk. Ignored once the worker runs."""

        with self._start_lock:
            if self._thread is None:
                self._last_written = state

    def persist_blocking(self, state: PersistedState) -> None:
        """Write ``state`` synchronously; raises ``PersistIoError``."""

        try:
            self._writer(self.path, encode_state(state))
        except Exception:
            log.error("persist new state failed: path=%s", self.path, exc_info=True)
            raise

    def enqueue(self, state: PersistedState) -> bool:
        """Hand ``state`` to the worker without blocking.

        Returns False (and logs) when the worker is gone; the in-memory timer
        stays authoritative either way.
        """

        with self._start_lock:
            alive = self._ensure_worker()
            if alive:
                self._queue.put_nowait(state)
        if not alive:
            log.error(
                "failed to enqueue persistence of state; background worker may have stopped"
            )
        return alive

    def close(self, timeout: float | None = None) -> None:
        """Close the channel and wait for the worker to flush and exit."""

        with self._start_lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._queue.put_nowait(_CLOSE)
        if thread is not None:
            thread.join(timeout)

    # ------------------------------------------------------------------
    def _ensure_worker(self) -> bool:
        # caller holds _start_lock
        if self._closed:
            return False
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name="deadman-persist", daemon=True
            )
            self._thread.start()
            return True
        return self._thread.is_alive()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _CLOSE:
                return
            snapshot, closed = self._coalesce(item)  # type: ignore[arg-type]
            self._write_if_changed(snapshot)
            if closed:
                return

    def _coalesce(self, snapshot: PersistedState) -> tuple[PersistedState, bool]:
        """Absorb queued and debounce-window arrivals, keeping only the latest."""

        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _CLOSE:
                return snapshot, True
            snapshot = item  # type: ignore[assignment]

        deadline = time.monotonic() + self._debounce_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return snapshot, False
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                return snapshot, False
            if item is _CLOSE:
                return snapshot, True
            snapshot = item  # type: ignore[assignment]

    def _write_if_changed(self, snapshot: PersistedState) -> None:
        if self._last_written == snapshot:
            log.debug("skipping persist state: identical to last written")
            return
        try:
            self._writer(self.path, encode_state(snapshot))
        except Exception:
            log.error("persist new state failed: path=%s", self.path, exc_info=True)
            return
        log.debug("persisted new state: path=%s", self.path)
        self._last_written = snapshot


__all__ = ["DEFAULT_DEBOUNCE_S", "PersistenceHandle", "Writer"]
