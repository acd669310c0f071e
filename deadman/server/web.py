"""Flask front-end: timer status and check-in over HTTP.

Request handlers share one :class:`SharedTimer` with the background
:class:`~deadman.runner.TimerRunner`; every access goes through its lock.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from flask import Flask, jsonify

from deadman.config import AppSettings
from deadman.timer import ClockError, SharedTimer, Timer

log = logging.getLogger(__name__)


def timer_payload(timer: Timer) -> dict[str, Any]:
    return {
        "timer_type": timer.get_mode().value,
        "time_left_seconds": int(timer.remaining().total_seconds()),
        "time_left_percentage": timer.remaining_percent(),
        "label": timer.label(),
        "expired": timer.expired(),
    }


def create_app(shared: SharedTimer, settings: AppSettings) -> Flask:
    app = Flask(__name__)
    start_ts = time.time()

    @app.route("/live", methods=["GET"])
    def live() -> tuple[dict[str, Any], int]:
        """Liveness probe: returns 200 as long as the process is up."""
        return {"status": "live", "uptime_sec": int(time.time() - start_ts)}, 200

    @app.route("/timer", methods=["GET"])
    def timer_data() -> Any:
        with shared.locked() as timer:
            payload = timer_payload(timer)
        return jsonify(payload)

    @app.route("/check-in", methods=["POST"])
    def check_in() -> Any:
        try:
            with shared.locked() as timer:
                timer.reset(settings)
                payload = timer_payload(timer)
        except ClockError as exc:
            log.error("check-in failed: %s", exc)
            return jsonify({"error": f"Error resetting timer: {exc}"}), 500
        return jsonify(payload)

    return app


def run(app: Flask, host: str, port: int) -> None:
    """Serve ``app`` in the current thread.

    Uses Waitress when installed, falling back to Flask's development server.
    """

    try:
        from waitress import serve  # type: ignore[import-not-found,import-untyped]
    except ImportError:  # pragma: no cover - import guarded for optional dep
        serve = None

    log.info("web.serve", extra={"extra": {"host": host, "port": port}})
    if serve is not None:
        wl = logging.getLogger("waitress")
        wl.handlers.clear()
        wl.propagate = True
        serve(app, host=host, port=port)
    else:
        # threaded so request handlers contend on the timer lock, not the server
        app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)


__all__ = ["create_app", "run", "timer_payload"]
