"""Line commands for the ``deadman-watch`` loop: ``c`` checks in, ``q`` quits."""

from __future__ import annotations

import logging
import queue
import threading
from enum import Enum
from typing import Optional, TextIO

log = logging.getLogger(__name__)


class Command(Enum):
    CHECK_IN = "check_in"
    QUIT = "quit"


_KEYS = {
    "c": Command.CHECK_IN,
    "check-in": Command.CHECK_IN,
    "q": Command.QUIT,
    "quit": Command.QUIT,
    "\x1b": Command.QUIT,
}

HELP = "c = check in, q = quit"


def parse_command(line: str) -> Optional[Command]:
    return _KEYS.get(line.strip().lower())


class CommandReader:
    """Read commands from ``stream`` on a daemon thread.

    The poll loop never blocks on input; it collects whatever arrived with
    :meth:`wait`, which doubles as the loop's sleep.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._queue: "queue.Queue[Command]" = queue.Queue()
        self._th: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._th is not None:
            return
        self._th = threading.Thread(target=self._loop, name="deadman-console", daemon=True)
        self._th.start()

    def _loop(self) -> None:
        try:
            for line in self._stream:
                cmd = parse_command(line)
                if cmd is not None:
                    self._queue.put(cmd)
                elif line.strip():
                    log.info("unknown command %r (%s)", line.strip(), HELP)
        except (OSError, ValueError):
            log.warning("command input unavailable; check in over HTTP instead", exc_info=True)
            return
        # EOF (e.g. stdin is /dev/null under a service manager) is not a quit.
        log.debug("command input closed")

    def wait(self, timeout: float) -> list[Command]:
        """Block up to ``timeout`` seconds for a command, then drain the rest."""

        try:
            first = self._queue.get(timeout=timeout)
        except queue.Empty:
            return []
        pending = [first]
        while True:
            try:
                pending.append(self._queue.get_nowait())
            except queue.Empty:
                return pending


__all__ = ["HELP", "Command", "CommandReader", "parse_command"]
