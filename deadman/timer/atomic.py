"""Write-to-temp-then-rename primitive."""

from __future__ import annotations

import os
from pathlib import Path

from deadman.timer.errors import PersistIoError

TMP_SUFFIX = ".tmp"


def temp_path_for(path: Path) -> Path:
    """Return the temp sibling used while ``path`` is being replaced."""

    return path.with_suffix(TMP_SUFFIX)


def write_atomic(path: Path, data: bytes) -> None:
    """Durably replace ``path`` with ``data``.

    The bytes land in a sibling temp file which is fsynced and then renamed
    over the target, so readers only ever see the old or the new content.
    """

    path = Path(path)
    tmp_path = temp_path_for(path)
    try:
        with open(tmp_path, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        raise PersistIoError(f"atomic write to {path} failed: {exc}") from exc


__all__ = ["TMP_SUFFIX", "temp_path_for", "write_atomic"]
