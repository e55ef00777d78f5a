"""
Minimal Flask API around one GameSession.

Endpoints:
- GET    /api/providers      -> provider descriptors and model catalogs
- GET    /api/game           -> session snapshot
- POST   /api/game/new       -> start a new game (new generation, status active)
- POST   /api/game/reset     -> back to idle
- POST   /api/game/move      -> submit a human move {"move": "e2e4"}
- POST   /api/game/ai-move   -> ask the seat to move for a move (202; runs in the background)
- POST   /api/game/autoplay  -> {"enabled": true|false}, or toggle when omitted
- PUT    /api/seats/<seat>   -> reconfigure a seat between games
- GET    /api/game/pgn       -> PGN export
- GET/POST/DELETE /api/debug -> read, enable/disable, clear the debug log

Flask handles requests on its own threads; every session call is marshalled
onto one asyncio loop thread (SessionLoop) so the session is only ever touched
from a single cooperative context.
"""
from __future__ import annotations

import argparse
import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable

from flask import Flask, Response, jsonify, request

from .errors import UnknownProviderError
from .game import GameSession
from .models import Seat

log = logging.getLogger("server")

SEAT_FIELDS = ("kind", "provider_id", "model_id", "custom_model", "temperature", "max_retries", "api_key", "max_tokens")


class SessionLoop:
    """Dedicated event loop thread that owns all session mutations."""

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, name="neurochess-session", daemon=True)
        self._thread.start()

    def call(self, fn: Callable[..., Any], *args: Any, timeout: float = 30.0) -> Any:
        async def _invoke():
            return fn(*args)
        return asyncio.run_coroutine_threadsafe(_invoke(), self.loop).result(timeout)

    def submit(self, coro) -> concurrent.futures.Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=5)
        if not self._thread.is_alive():
            self.loop.close()


def _log_background_failure(fut: concurrent.futures.Future) -> None:
    if not fut.cancelled() and fut.exception() is not None:
        log.error("Background AI request failed", exc_info=fut.exception())


def create_app(session: GameSession | None = None, runner: SessionLoop | None = None) -> Flask:
    app = Flask(__name__)
    runner = runner or SessionLoop()
    session = session or GameSession()
    app.extensions["neurochess"] = {"session": session, "runner": runner}

    def snapshot() -> dict:
        return runner.call(session.snapshot)

    @app.route("/api/providers", methods=["GET"])
    def list_providers():
        return jsonify([d.to_dict() for d in session.pipeline.registry.list()])

    @app.route("/api/game", methods=["GET"])
    def get_game():
        return jsonify(snapshot())

    @app.route("/api/game/new", methods=["POST"])
    def new_game():
        runner.call(session.start_new_game)
        return jsonify(snapshot())

    @app.route("/api/game/reset", methods=["POST"])
    def reset_game():
        runner.call(session.reset_game)
        return jsonify(snapshot())

    @app.route("/api/game/move", methods=["POST"])
    def human_move():
        data = request.get_json(silent=True) or {}
        move = data.get("move")
        if not isinstance(move, str) or not move.strip():
            return jsonify({"error": "move is required"}), 400
        if not runner.call(session.submit_human_move, move.strip()):
            state = snapshot()
            return jsonify({"error": "move_rejected", "status_message": state["status_message"]}), 400
        return jsonify(snapshot())

    @app.route("/api/game/ai-move", methods=["POST"])
    def ai_move():
        fut = runner.submit(session.request_ai_move())
        fut.add_done_callback(_log_background_failure)
        return jsonify(snapshot()), 202

    @app.route("/api/game/autoplay", methods=["POST"])
    def autoplay():
        data = request.get_json(silent=True) or {}
        enabled = data.get("enabled")

        def _apply():
            if enabled is None or bool(enabled) != session.auto_play:
                if enabled is False:
                    session.stop_auto_play()
                else:
                    session.toggle_auto_play()
            return session.auto_play

        runner.call(_apply)
        return jsonify(snapshot())

    @app.route("/api/seats/<seat>", methods=["PUT"])
    def configure_seat(seat: str):
        try:
            target = Seat(seat)
        except ValueError:
            return jsonify({"error": f"unknown seat: {seat}"}), 404
        data = request.get_json(silent=True) or {}
        changes = {k: data[k] for k in SEAT_FIELDS if k in data}
        try:
            accepted = runner.call(lambda: session.configure_seat(target, **changes))
        except UnknownProviderError as exc:
            return jsonify({"error": str(exc)}), 400
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        if not accepted:
            return jsonify({"error": "game_active", "detail": "Reset the game before changing players"}), 409
        return jsonify(snapshot())

    @app.route("/api/game/pgn", methods=["GET"])
    def pgn():
        return Response(runner.call(session.export_pgn), mimetype="application/x-chess-pgn")

    @app.route("/api/debug", methods=["GET"])
    def debug_entries():
        entries = runner.call(session.debug_log.entries)
        return jsonify({"enabled": session.debug_mode, "entries": [e.to_dict() for e in entries]})

    @app.route("/api/debug", methods=["POST"])
    def debug_toggle():
        data = request.get_json(silent=True) or {}
        enabled = data.get("enabled", not session.debug_mode)
        runner.call(session.set_debug_mode, bool(enabled))
        return jsonify({"enabled": session.debug_mode})

    @app.route("/api/debug", methods=["DELETE"])
    def debug_clear():
        runner.call(session.debug_log.clear)
        return jsonify({"enabled": session.debug_mode, "entries": []})

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        return response

    return app


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the NeuroChess Arena game API.")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=5000)
    ap.add_argument("--log-level", default="INFO", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_app().run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()
