"""Expiry notices and the transports that deliver them."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

log = logging.getLogger(__name__)


class Notice(Enum):
    """Which message the host sends when a period expires."""

    WARNING = "warning"
    DEAD_MAN = "dead_man"


class Notifier(Protocol):
    def send(self, notice: Notice) -> None:
        ...


class LoggingNotifier:
    """Notifier that only records the notice; real transports plug in here."""

    def __init__(self) -> None:
        self.sent: list[Notice] = []

    def send(self, notice: Notice) -> None:
        self.sent.append(notice)
        level = logging.WARNING if notice is Notice.WARNING else logging.CRITICAL
        log.log(level, "notice.sent", extra={"extra": {"notice": notice.value}})
