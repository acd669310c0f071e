"""Host loop that observes expiry, fires notices and drives ``Timer.update``.

The core timer has no internal scheduler; whoever owns it calls
:func:`check_expiry` at its own cadence.  :class:`TimerRunner` is that caller
for concurrent hosts, where the timer sits behind a :class:`SharedTimer`;
:func:`watch_tick` is one pass of the single-owner console loop.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from deadman.config import AppSettings
from deadman.console import Command
from deadman.notify import Notice, Notifier
from deadman.timer import ClockError, SharedTimer, Timer, TimerMode

log = logging.getLogger(__name__)


def check_expiry(timer: Timer, dead_man_seconds: int) -> Optional[Notice]:
    """Return the notice due for ``timer`` (if any) and apply the transition.

    A Warning expiry yields ``Notice.WARNING`` and promotes the timer to
    DeadMan in the same call, so the warning is only ever due once.
    """

    notice: Optional[Notice] = None
    if timer.expired():
        if timer.get_mode() is TimerMode.WARNING:
            notice = Notice.WARNING
        else:
            notice = Notice.DEAD_MAN
    timer.update(timer.elapsed(), dead_man_seconds)
    return notice


def deliver(notifier: Notifier, notice: Notice) -> None:
    try:
        notifier.send(notice)
    except Exception:
        log.error("failed to send %s notice", notice.value, exc_info=True)


def watch_tick(
    timer: Timer,
    settings: AppSettings,
    notifier: Notifier,
    commands: Iterable[Command] = (),
) -> bool:
    """One pass of the single-owner loop. Returns False when the loop should end.

    Commands are applied before expiry is evaluated, so a check-in arriving in
    the same pass as an expiry re-arms the timer and no notice goes out.
    """

    for cmd in commands:
        if cmd is Command.QUIT:
            log.info("runner.stop", extra={"extra": {"reason": "quit"}})
            return False
        if cmd is Command.CHECK_IN:
            try:
                timer.reset(settings)
            except ClockError:
                log.error("check-in failed", exc_info=True)

    notice = check_expiry(timer, settings.timer_dead_man_seconds)
    if notice is not None:
        deliver(notifier, notice)
        if notice is Notice.DEAD_MAN:
            log.info("runner.stop", extra={"extra": {"reason": "dead_man_sent"}})
            return False
    log.debug(
        "timer.tick",
        extra={
            "extra": {
                "mode": timer.get_mode().value,
                "remaining": timer.label(),
                "percent": timer.remaining_percent(),
            }
        },
    )
    return True


class TimerRunner:
    """Poll a shared timer until the dead-man notice has gone out."""

    def __init__(self, shared: SharedTimer, settings: AppSettings, notifier: Notifier) -> None:
        self._shared = shared
        self._settings = settings
        self._notifier = notifier
        self._stop_evt = threading.Event()

    def tick(self) -> bool:
        """Run one evaluation. Returns False once the dead-man notice was sent."""

        with self._shared.locked() as timer:
            notice = check_expiry(timer, self._settings.timer_dead_man_seconds)
        if notice is None:
            return True
        deliver(self._notifier, notice)
        return notice is not Notice.DEAD_MAN

    def stop(self) -> None:
        self._stop_evt.set()

    @property
    def stopped(self) -> bool:
        return self._stop_evt.is_set()

    def run_forever(self) -> None:
        interval = self._settings.poll_interval_s
        while not self._stop_evt.is_set():
            if not self.tick():
                log.info("runner.stop", extra={"extra": {"reason": "dead_man_sent"}})
                self._stop_evt.set()
                break
            self._stop_evt.wait(interval)


__all__ = ["TimerRunner", "check_expiry", "deliver", "watch_tick"]
