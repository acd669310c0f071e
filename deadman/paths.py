"""Where the persisted timer state lives on disk."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from deadman.config import AppSettings
from deadman.timer.errors import PersistIoError

APP_NAME = "deadman"
STATE_FILE_NAME = "state.json"


def app_state_dir(settings: AppSettings) -> Path:
    """Per-application state directory, created if missing.

    Raises ``PersistIoError`` if the directory cannot be created.
    """

    if settings.state_dir is not None:
        base = Path(settings.state_dir)
    else:
        xdg = os.environ.get("XDG_STATE_HOME")
        appdata = os.environ.get("APPDATA")
        if xdg:
            base = Path(xdg) / APP_NAME
        elif sys.platform.startswith("win") and appdata:
            base = Path(appdata) / APP_NAME
        else:
            base = Path.home() / ".local" / "state" / APP_NAME
    try:
        base.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistIoError(f"cannot create state directory {base}: {exc}") from exc
    return base


def state_file_path(settings: AppSettings) -> Path:
    return app_state_dir(settings) / STATE_FILE_NAME
