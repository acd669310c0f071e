"""Global pytest fixtures and environment configuration."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

import pytest

from deadman.config import AppSettings
from deadman.paths import state_file_path
from deadman.timer import PersistenceHandle

# Keep a developer's real state directory out of reach of the suite.
os.environ.pop("DEADMAN_STATE_DIR", None)
os.environ.pop("STATE_DIR", None)


class FakeMonotonic:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingWriter:
    """Writer double that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, bytes]] = []
        self.fail_next = 0
        self.called = threading.Event()

    def __call__(self, path: Path, data: bytes) -> None:
        try:
            if self.fail_next > 0:
                self.fail_next -= 1
                raise OSError("disk full")
            self.calls.append((path, data))
        finally:
            self.called.set()


class RecordingPersistence:
    """Duck-typed persistence handle for timers built directly in tests."""

    def __init__(self) -> None:
        self.enqueued: list = []

    def enqueue(self, state) -> bool:  # noqa: ANN001
        self.enqueued.append(state)
        return True


@pytest.fixture
def mono() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def recorder() -> RecordingPersistence:
    return RecordingPersistence()


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        state_dir=tmp_path,
        timer_warning_seconds=60,
        timer_dead_man_seconds=120,
        persist_debounce_ms=0,
        poll_interval_s=0.01,
    )


@pytest.fixture
def handle(settings: AppSettings):
    h = PersistenceHandle(state_file_path(settings), debounce_s=0.0)
    yield h
    h.close(timeout=5.0)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
