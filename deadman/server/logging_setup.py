"""Root logger configuration with logfmt or JSON output."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any, Optional

_LOG = logging.getLogger(__name__)

_SKIP_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName", "extra", "ts", "tag"}

_NEEDS_QUOTES = frozenset(' ="')


def _timestamp() -> str:
    """Local time with offset, to the second."""

    return datetime.now().astimezone().isoformat(timespec="seconds")


def _logfmt_value(value: Any) -> str:
    if value is None:
        return "null"
    if value is True or value is False:
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    if not text:
        return '""'
    if _NEEDS_QUOTES.isdisjoint(text) and "\n" not in text and "\\" not in text:
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    """Structured fields: ``extra={"extra": {...}}`` first, then stray attributes."""

    nested = getattr(record, "extra", None)
    fields: dict[str, Any] = dict(nested) if isinstance(nested, dict) else {}
    for key, value in vars(record).items():
        if key not in _SKIP_FIELDS and key not in fields:
            fields[key] = value
    return fields


class LogfmtFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - standard logging override
        ts = getattr(record, "ts", None) or _timestamp()
        raw_msg = record.getMessage()
        tag = getattr(record, "tag", None) or (raw_msg.split(" ", 1)[0] if raw_msg else "log")

        parts = [f"ts={ts}", f"lvl={record.levelname.lower()}", f"logger={record.name}"]
        parts.append(f"tag={_logfmt_value(tag)}")
        for key, value in _fields(record).items():
            parts.append(f"{key}={_logfmt_value(value)}")
        if raw_msg and raw_msg != tag:
            parts.append(f"msg={_logfmt_value(raw_msg)}")
        if record.exc_info:
            parts.append(f"exc={_logfmt_value(self.formatException(record.exc_info))}")
        return " ".join(parts)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - standard logging override
        payload: dict[str, Any] = {
            "ts": getattr(record, "ts", None) or _timestamp(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "tag": getattr(record, "tag", None) or "log",
            "msg": record.getMessage() or "",
        }
        payload.update(_fields(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_root_logger(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure the root logger with a single stdout handler."""

    level_name = (level or "INFO").upper()
    level_value = getattr(logging, level_name, None)
    if not isinstance(level_value, int):
        level_value = logging.INFO

    fmt = (fmt or "logfmt").lower()
    root = logging.getLogger()
    root.setLevel(level_value)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if fmt == "json" else LogfmtFormatter())
    root.addHandler(handler)
    _LOG.info("logging.init", extra={"extra": {"level": level_name, "format": fmt}})


def log_event(tag: str, level: str = "info", **fields: Any) -> None:
    """Emit a structured log line with ``tag`` and arbitrary ``fields``."""

    logger = logging.getLogger(tag)
    log_fn = getattr(logger, level.lower(), None)
    if not callable(log_fn):
        log_fn = logger.info
    log_fn(tag, extra={"extra": fields, "ts": _timestamp(), "tag": tag})


__all__ = ["JsonFormatter", "LogfmtFormatter", "log_event", "setup_root_logger"]
