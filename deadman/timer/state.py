"""Persisted timer state: the only data that survives a restart."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deadman.timer.errors import StateParseError

log = logging.getLogger(__name__)


class TimerMode(Enum):
    """Which period the switch is counting down."""

    WARNING = "Warning"
    DEAD_MAN = "DeadMan"


class PersistedState(BaseModel):
    """Mode plus the wall-clock second it last changed."""

    model_config = ConfigDict(frozen=True)

    mode: TimerMode
    last_modified: int = Field(ge=0)


def encode_state(state: PersistedState) -> bytes:
    return state.model_dump_json(indent=2).encode("utf-8")


def decode_state(raw: bytes | str) -> PersistedState:
    """Parse a persisted payload, raising :class:`StateParseError` if corrupt."""

    try:
        return PersistedState.model_validate_json(raw)
    except ValidationError as exc:
        raise StateParseError(str(exc)) from exc


@dataclass(frozen=True)
class Loaded:
    state: PersistedState


@dataclass(frozen=True)
class Defaulted:
    """No usable state on disk; caller starts a fresh Warning period.

    ``reason`` is ``"missing"`` for a first run or ``"corrupt"`` when the file
    existed but could not be read or parsed.
    """

    reason: Literal["missing", "corrupt"]
    error: Optional[Exception] = None


LoadResult = Union[Loaded, Defaulted]


def load_state(path: Path) -> LoadResult:
    """Read the persisted state at ``path``.

    Never raises for a missing or corrupt file; both map to :class:`Defaulted`.
    """

    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        log.debug("no persisted state at %s: using defaults", path)
        return Defaulted(reason="missing")
    except OSError as exc:
        log.warning("persisted state unreadable at %s: using defaults (%s)", path, exc)
        return Defaulted(reason="corrupt", error=exc)

    try:
        return Loaded(decode_state(raw))
    except StateParseError as exc:
        log.warning("persisted state parse error at %s: using defaults (%s)", path, exc)
        return Defaulted(reason="corrupt", error=exc)


__all__ = [
    "Defaulted",
    "LoadResult",
    "Loaded",
    "PersistedState",
    "TimerMode",
    "decode_state",
    "encode_state",
    "load_state",
]
