from __future__ import annotations

import json
import logging

from deadman.server.logging_setup import log_event, setup_root_logger


def test_json_format_includes_extra_fields(restore_root_logger, capsys) -> None:
    setup_root_logger("INFO", "json")
    logging.getLogger("deadman.timer.core").info(
        "timer.transition", extra={"extra": {"mode": "DeadMan", "duration_s": 120.0}}
    )
    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    record = lines[-1]
    assert record["msg"] == "timer.transition"
    assert record["mode"] == "DeadMan"
    assert record["duration_s"] == 120.0
    assert record["level"] == "info"


def test_logfmt_log_event(restore_root_logger, capsys) -> None:
    setup_root_logger("DEBUG", "logfmt")
    log_event("runner.stop", reason="dead_man_sent")
    out = capsys.readouterr().out.splitlines()[-1]
    assert "tag=runner.stop" in out
    assert "reason=dead_man_sent" in out
    assert "lvl=info" in out


def test_unknown_level_falls_back_to_info(restore_root_logger) -> None:
    setup_root_logger("LOUD", "logfmt")
    assert logging.getLogger().level == logging.INFO


def test_logfmt_quotes_values_with_spaces(restore_root_logger, capsys) -> None:
    setup_root_logger("INFO", "logfmt")
    log_event("timer.armed", remaining="1 day(s), 2 hour(s)", path='a"b', empty="")
    out = capsys.readouterr().out.splitlines()[-1]
    assert 'remaining="1 day(s), 2 hour(s)"' in out
    assert 'path="a\\"b"' in out
    assert 'empty=""' in out
    assert "msg=" not in out


def test_json_log_event_uses_tag_as_message(restore_root_logger, capsys) -> None:
    setup_root_logger("INFO", "json")
    log_event("console.ready", keys="c = check in, q = quit")
    record = json.loads(capsys.readouterr().out.splitlines()[-1])
    assert record["tag"] == "console.ready"
    assert record["msg"] == "console.ready"
    assert record["keys"] == "c = check in, q = quit"
