from __future__ import annotations

import builtins
import sys
from types import SimpleNamespace
from typing import Any

import pytest

from deadman.server import web
from deadman.timer import ClockError, SharedTimer, Timer, TimerMode


@pytest.fixture
def timer(mono, recorder) -> Timer:
    return Timer(TimerMode.WARNING, mono(), 60, persistence=recorder, monotonic=mono)


@pytest.fixture
def client(timer, settings):
    app = web.create_app(SharedTimer(timer), settings)
    return app.test_client()


def test_live_endpoint(client) -> None:
    resp = client.get("/live")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "live"


def test_timer_endpoint_reports_remaining(client, mono) -> None:
    mono.advance(15)
    resp = client.get("/timer")
    assert resp.status_code == 200
    assert resp.get_json() == {
        "timer_type": "Warning",
        "time_left_seconds": 45,
        "time_left_percentage": 75,
        "label": "45 second(s)",
        "expired": False,
    }


def test_check_in_demotes_dead_man(client, timer, mono, recorder) -> None:
    mono.advance(61)
    timer.update(timer.elapsed(), 120)
    assert client.get("/timer").get_json()["timer_type"] == "DeadMan"

    resp = client.post("/check-in")
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["timer_type"] == "Warning"
    assert data["time_left_seconds"] == 60
    assert recorder.enqueued[-1].mode is TimerMode.WARNING


def test_check_in_clock_error_is_500(client, timer, monkeypatch) -> None:
    def broken_snapshot():
        raise ClockError("clock before epoch")

    monkeypatch.setattr(timer, "snapshot", broken_snapshot)
    resp = client.post("/check-in")
    assert resp.status_code == 500
    assert "clock before epoch" in resp.get_json()["error"]


def test_check_in_requires_post(client) -> None:
    assert client.get("/check-in").status_code == 405


def test_run_uses_waitress_when_available(timer, settings, monkeypatch) -> None:
    calls: dict[str, tuple[str, int]] = {}

    def fake_serve(app, host: str, port: int) -> None:  # noqa: ANN001
        calls["args"] = (host, port)

    app = web.create_app(SharedTimer(timer), settings)
    monkeypatch.setitem(sys.modules, "waitress", SimpleNamespace(serve=fake_serve))
    monkeypatch.setattr(
        app,
        "run",
        lambda **_: (_ for _ in ()).throw(AssertionError("should not call app.run")),
    )

    web.run(app, host="1.2.3.4", port=5555)
    assert calls["args"] == ("1.2.3.4", 5555)


def test_run_falls_back_when_waitress_missing(timer, settings, monkeypatch) -> None:
    monkeypatch.delitem(sys.modules, "waitress", raising=False)
    orig_import = builtins.__import__

    def fake_import(name, *args, **kwargs):  # noqa: ANN001
        if name == "waitress":
            raise ImportError
        return orig_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", fake_import)

    calls: dict[str, Any] = {}

    def fake_run(*, host: str, port: int, debug: bool, use_reloader: bool, threaded: bool) -> None:
        calls.update({"host": host, "port": port, "threaded": threaded})

    app = web.create_app(SharedTimer(timer), settings)
    monkeypatch.setattr(app, "run", fake_run)

    web.run(app, host="0.0.0.0", port=8080)
    assert calls == {"host": "0.0.0.0", "port": 8080, "threaded": True}
