"""Process entry points.

``deadman-web`` runs the HTTP front-end with the expiry loop on a daemon
thread.  ``deadman-watch`` is the single-owner poll loop: it reads ``c``
(check in) and ``q`` (quit) from stdin, logs the remaining time each tick and
exits after the dead-man notice.
"""

from __future__ import annotations

import logging
import sys
import threading

from deadman.config import AppSettings, load_settings
from deadman.console import HELP, Command, CommandReader
from deadman.notify import LoggingNotifier
from deadman.paths import state_file_path
from deadman.runner import TimerRunner, watch_tick
from deadman.server import web
from deadman.server.logging_setup import log_event, setup_root_logger
from deadman.timer import PersistenceHandle, SharedTimer, Timer, TimerError

log = logging.getLogger("deadman.main")


def _bootstrap() -> tuple[AppSettings, PersistenceHandle, Timer] | None:
    settings = load_settings()
    setup_root_logger(settings.log_level, settings.log_format)
    try:
        handle = PersistenceHandle(
            state_file_path(settings), debounce_s=settings.persist_debounce_s
        )
        timer = Timer.new(settings, handle)
    except TimerError as exc:
        log.error("timer startup failed: %s", exc, exc_info=True)
        return None
    log_event(
        "timer.armed",
        mode=timer.get_mode().value,
        remaining=timer.label(),
        path=str(handle.path),
    )
    return settings, handle, timer


def main() -> int:
    """Run the web front-end with the expiry loop in the background."""

    boot = _bootstrap()
    if boot is None:
        return 1
    settings, handle, timer = boot

    shared = SharedTimer(timer)
    runner = TimerRunner(shared, settings, LoggingNotifier())
    threading.Thread(target=runner.run_forever, name="deadman-runner", daemon=True).start()

    app = web.create_app(shared, settings)
    try:
        web.run(app, settings.web_host, settings.web_port)
    finally:
        runner.stop()
        handle.close(timeout=5.0)
    return 0


def watch() -> int:
    """Poll loop over a directly owned timer, with check-in from stdin."""

    boot = _bootstrap()
    if boot is None:
        return 1
    settings, handle, timer = boot
    notifier = LoggingNotifier()
    reader = CommandReader(sys.stdin)
    reader.start()
    log_event("console.ready", keys=HELP)

    pending: list[Command] = []
    try:
        while watch_tick(timer, settings, notifier, pending):
            pending = reader.wait(settings.poll_interval_s)
    except KeyboardInterrupt:
        log_event("runner.stop", reason="interrupted")
    finally:
        handle.close(timeout=5.0)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
