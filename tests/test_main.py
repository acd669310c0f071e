"""
Tests for the process entry points' startup failure path.
"""

import logging

import pytest

from deadman import main as entry


@pytest.fixture
def broken_state_dir(settings, tmp_path, monkeypatch):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    bad = settings.model_copy(update={"state_dir": blocker / "nested"})
    monkeypatch.setattr(entry, "load_settings", lambda: bad)
    monkeypatch.setattr(entry, "setup_root_logger", lambda *args, **kwargs: None)
    return bad


@pytest.mark.parametrize("entry_point", [entry.main, entry.watch])
def test_unwritable_state_dir_exits_with_status_1(broken_state_dir, entry_point, caplog):
    with caplog.at_level(logging.ERROR, logger="deadman.main"):
        assert entry_point() == 1
    assert "timer startup failed" in caplog.text
