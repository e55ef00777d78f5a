"""
Terminal runner: play one game between two configured seats.

Human seats type UCI moves at the prompt ("quit" ends the game early); AI
seats are driven through GameSession.request_ai_move(), or through auto-play
when both seats are AI. The final PGN is printed and optionally written to disk.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging

from .game import GameSession
from .models import PlayerKind, Seat, SessionStatus

log = logging.getLogger("neurochess")


def load_json_config(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Play a chess game between humans and LLM-backed seats.")
    ap.add_argument("--config", default=None, help="Optional JSON config file to load defaults from.")
    for seat in Seat:
        ap.add_argument(f"--{seat.value}", choices=[k.value for k in PlayerKind], default=None, help=f"Who plays {seat.value}")
        ap.add_argument(f"--{seat.value}-provider", default=None, help=f"Provider id for an AI {seat.value} seat")
        ap.add_argument(f"--{seat.value}-model", default=None, help=f"Model id for an AI {seat.value} seat")
        ap.add_argument(f"--{seat.value}-temperature", type=float, default=None)
        ap.add_argument(f"--{seat.value}-retries", type=int, default=None, help="Max attempts per move")
    ap.add_argument("--max-plies", type=int, default=None, help="Stop after this many plies (0 = no limit)")
    ap.add_argument("--pgn-out", default=None, help="Optional path to write PGN at end")
    ap.add_argument("--debug", action="store_true", help="Print the prompt/response debug log at the end")
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")
    return ap


def configure_seats(session: GameSession, args: argparse.Namespace, cfg: dict) -> None:
    """Apply CLI arguments over the JSON config ({"white": {...}, "black": {...}})."""
    for seat in Seat:
        seat_cfg = dict(cfg.get(seat.value) or {})
        overrides = {
            "kind": getattr(args, seat.value),
            "provider_id": getattr(args, f"{seat.value}_provider"),
            "model_id": getattr(args, f"{seat.value}_model"),
            "temperature": getattr(args, f"{seat.value}_temperature"),
            "max_retries": getattr(args, f"{seat.value}_retries"),
        }
        seat_cfg.update({k: v for k, v in overrides.items() if v is not None})
        session.configure_seat(seat, **seat_cfg)


def _read_human_move(session: GameSession) -> str:
    print("\n" + str(session.position))
    print(f"{session.status_message}. FEN: {session.position.fen()}")
    return input(f"{session.turn.label} move (UCI, e.g. e2e4): ").strip()


async def play(session: GameSession, max_plies: int = 0) -> None:
    session.start_new_game()
    if session.both_seats_ai():
        session.toggle_auto_play()
        while session.status is SessionStatus.active and session.auto_play:
            if max_plies and len(session.move_history) >= max_plies:
                session.stop_auto_play()
                break
            await asyncio.sleep(0.05)
        if session.autoplay.task is not None:
            await session.autoplay.task
        return

    while session.status is SessionStatus.active:
        if max_plies and len(session.move_history) >= max_plies:
            break
        if session.is_current_player_ai():
            if not await session.request_ai_move():
                print(session.status_message)
                break
            last = session.move_history[-1]
            print(f"{last.color.label} AI played {last.san} ({last.uci})")
            continue
        token = _read_human_move(session)
        if token.lower() in {"quit", "exit"}:
            break
        if not session.submit_human_move(token):
            print("Illegal move. Please try again with a legal move.")


def main() -> None:
    args = build_parser().parse_args()
    cfg = load_json_config(args.config) if args.config else {}

    log_level = (args.log_level or cfg.get("log_level") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    session = GameSession()
    configure_seats(session, args, cfg)
    session.set_debug_mode(args.debug or bool(cfg.get("debug", False)))
    max_plies = args.max_plies if args.max_plies is not None else int(cfg.get("max_plies", 0))

    async def _run():
        try:
            await play(session, max_plies=max_plies)
        finally:
            await session.pipeline.aclose()

    asyncio.run(_run())

    print("\n" + session.status_message)
    pgn = session.export_pgn()
    print(pgn)
    if args.pgn_out:
        with open(args.pgn_out, "w", encoding="utf-8") as f:
            f.write(pgn + "\n")
        log.info("Wrote PGN to %s", args.pgn_out)
    if session.debug_mode:
        for entry in session.debug_log.entries():
            print(f"[{entry.timestamp:%H:%M:%S}] {entry.seat.value} {entry.kind.value}: {entry.text}")


if __name__ == "__main__":
    main()
