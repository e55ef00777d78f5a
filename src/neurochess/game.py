"""
GameSession: the turn-based state machine for one running game.

- Owns the position (a python-chess Board replaced wholesale on every move),
  the append-only MoveRecord history, SessionStatus and the status message.
- Seats are independently human or AI; AI moves come from MoveRequestPipeline.
- Every start_new_game()/reset_game() bumps `generation`. An AI request
  captures the generation before awaiting the provider and commits only if it
  is unchanged afterwards; otherwise the result (and its move log entry) is dropped.
- Human moves and AI requests exclude each other through `is_awaiting_ai`.
- Expected rejections (wrong turn, illegal move, missing API key) return False
  and update status_message; they never raise.

Status policy on AI failure: status stays `active`, only the message changes
and auto-play is switched off.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Awaitable, Callable, Optional

import chess

from .autoplay import AutoPlayScheduler
from .config import SETTINGS
from .debug_log import DebugEntry, DebugKind, DebugLog, notify
from .errors import ConfigError, ExhaustedRetriesError, IllegalMoveError, UnknownProviderError
from .models import MoveRecord, PlayerKind, PlayerSeatConfig, Seat, SessionStatus, default_seat_config
from .move_request import AcquiredMove, MoveRequestPipeline
from .referee import AppliedMove, Referee


class GameSession:
    def __init__(
        self,
        pipeline: MoveRequestPipeline | None = None,
        white: PlayerSeatConfig | None = None,
        black: PlayerSeatConfig | None = None,
        autoplay_delay_s: float = SETTINGS.autoplay_delay_s,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        debug_log: DebugLog | None = None,
    ):
        self.log = logging.getLogger("GameSession")
        self.pipeline = pipeline or MoveRequestPipeline()
        self.referee: Referee = self.pipeline.referee
        self.seats: dict[Seat, PlayerSeatConfig] = {
            Seat.white: white or default_seat_config(),
            Seat.black: black or default_seat_config(),
        }
        self.debug_log = debug_log or DebugLog()
        self.debug_mode = False
        self.autoplay = AutoPlayScheduler(self, delay_s=autoplay_delay_s, sleep=sleep)
        self.generation = 0
        self._begin(SessionStatus.idle, "Ready to play")

    # ---------------- Lifecycle -----------------
    def _begin(self, status: SessionStatus, message: str | None = None) -> None:
        self.generation += 1
        self.position: chess.Board = self.referee.new_position()
        self.move_history: list[MoveRecord] = []
        self.status = status
        self.status_message = message or self.referee.describe(self.position)
        self.is_awaiting_ai = False
        self.awaiting_ai_seat: Optional[Seat] = None
        self.auto_play = False

    def start_new_game(self) -> None:
        self._begin(SessionStatus.active)
        self.log.info("New game started (generation %d)", self.generation)

    def reset_game(self) -> None:
        self._begin(SessionStatus.idle, "Ready to play")
        self.log.info("Game reset (generation %d)", self.generation)

    # ---------------- Seats -----------------
    @property
    def turn(self) -> Seat:
        return Seat.from_color(self.position.turn)

    def seat_config(self, seat: Seat) -> PlayerSeatConfig:
        return self.seats[seat]

    def is_current_player_ai(self) -> bool:
        return self.seats[self.turn].is_ai

    def both_seats_ai(self) -> bool:
        return all(cfg.is_ai for cfg in self.seats.values())

    def configure_seat(self, seat: Seat, **changes) -> bool:
        """Update a seat between games. Returns False while a game is active."""
        if self.status is SessionStatus.active:
            self.log.warning("Refusing to reconfigure %s seat during an active game", seat.value)
            return False
        current = self.seats[seat]
        if "kind" in changes:
            changes["kind"] = PlayerKind(changes["kind"])
        provider_id = changes.get("provider_id")
        if provider_id is not None and provider_id != current.provider_id:
            if provider_id not in self.pipeline.registry:
                raise UnknownProviderError(f"Unknown provider: {provider_id}")
            changes.setdefault("api_key", SETTINGS.api_key_for(provider_id))
        self.seats[seat] = dataclasses.replace(current, **changes)
        return True

    # ---------------- Moves -----------------
    def submit_human_move(self, token: str) -> bool:
        """Apply a human move; False (no state change) unless active, human's turn and legal."""
        if self.status is not SessionStatus.active or self.is_awaiting_ai:
            return False
        seat = self.turn
        if self.seats[seat].is_ai:
            return False
        if not self.referee.is_legal(self.position, token):
            self.log.debug("Rejected human move %r", token)
            return False
        record = self._commit(seat, self.referee.apply_move(self.position, token))
        self._debug(DebugKind.move, seat, f"Human played: {record.san} ({record.uci})")
        return True

    async def request_ai_move(self) -> bool:
        """Ask the seat to move for a move and commit it if this game is still current."""
        if self.status is not SessionStatus.active or self.is_awaiting_ai:
            return False
        seat = self.turn
        cfg = self.seats[seat]
        if not cfg.is_ai:
            return False
        if not cfg.api_key:
            self.status_message = f"{seat.label} AI needs an API key"
            return False

        generation = self.generation
        position = self.position.copy()
        history = [m.san for m in self.move_history]
        self.is_awaiting_ai = True
        self.awaiting_ai_seat = seat
        self.status_message = f"{seat.label} AI is thinking..."

        result: AcquiredMove | None = None
        error: Exception | None = None
        try:
            result = await self.pipeline.acquire_move(
                position,
                cfg,
                history,
                seat=seat,
                observer=self._debug_observer(),
            )
        except (ConfigError, ExhaustedRetriesError) as exc:
            error = exc
        except Exception as exc:
            if generation == self.generation:
                self._fail_ai(seat, exc)
            raise
        finally:
            if generation == self.generation:
                self.is_awaiting_ai = False
                self.awaiting_ai_seat = None

        if generation != self.generation:
            self.log.info("Discarding stale AI result for generation %d (now %d)", generation, self.generation)
            return False
        if error is not None:
            self._fail_ai(seat, error)
            return False

        try:
            applied = self.referee.apply_move(self.position, result.move)
        except IllegalMoveError as exc:
            self._fail_ai(seat, exc)
            return False
        record = self._commit(seat, applied)
        reason = f"\nReason: {result.thoughts}" if result.thoughts else ""
        self._debug(DebugKind.move, seat, f"AI played: {record.san} ({record.uci}){reason}")
        return True

    def _commit(self, seat: Seat, applied: AppliedMove) -> MoveRecord:
        record = MoveRecord(
            san=applied.san,
            uci=applied.uci,
            fen=applied.position.fen(),
            color=seat,
            move_number=self.position.fullmove_number,
        )
        self.position = applied.position
        self.move_history.append(record)
        self._refresh_status()
        self.log.info("[ply %d] %s: %s (%s)", len(self.move_history), seat.value, record.san, record.uci)
        return record

    def _refresh_status(self) -> None:
        terminal = self.referee.terminal_status(self.position)
        if terminal.is_over:
            if terminal.winner is Seat.white:
                self.status = SessionStatus.white_wins
            elif terminal.winner is Seat.black:
                self.status = SessionStatus.black_wins
            else:
                self.status = SessionStatus.draw
            self.auto_play = False
        self.status_message = self.referee.describe(self.position)

    def _fail_ai(self, seat: Seat, error: Exception) -> None:
        self.log.error("%s AI failed: %s", seat.value, error)
        self.status_message = f"AI Error: {error}"
        self.auto_play = False
        self._debug(DebugKind.error, seat, f"AI failed: {error}")

    # ---------------- Auto-play -----------------
    def toggle_auto_play(self) -> bool:
        """Flip auto-play; turning it on starts the scheduler (needs a running event loop)."""
        if self.auto_play:
            self.auto_play = False
            return False
        if self.status is not SessionStatus.active or self.is_awaiting_ai:
            return False
        self.auto_play = True
        self.autoplay.start()
        return True

    def stop_auto_play(self) -> None:
        self.auto_play = False

    # ---------------- Debug log -----------------
    def set_debug_mode(self, enabled: bool) -> None:
        self.debug_mode = bool(enabled)

    def _debug_observer(self):
        return self.debug_log if self.debug_mode else None

    def _debug(self, kind: DebugKind, seat: Seat, text: str) -> None:
        notify(self._debug_observer(), DebugEntry(kind=kind, seat=seat, text=text))

    # ---------------- Export -----------------
    def export_pgn(self) -> str:
        return self.referee.export_pgn(
            self.position,
            self.seats[Seat.white].label(),
            self.seats[Seat.black].label(),
        )

    def formatted_history(self) -> str:
        parts: list[str] = []
        for record in self.move_history:
            if record.color is Seat.white or not parts:
                dots = "." if record.color is Seat.white else "..."
                parts.append(f"{record.move_number}{dots}")
            parts.append(record.san)
        return " ".join(parts)

    def material_balance(self) -> dict:
        return self.referee.material_balance(self.position)

    def snapshot(self) -> dict:
        return {
            "generation": self.generation,
            "fen": self.position.fen(),
            "turn": self.turn.value,
            "status": self.status.value,
            "status_message": self.status_message,
            "is_awaiting_ai": self.is_awaiting_ai,
            "awaiting_ai_seat": self.awaiting_ai_seat.value if self.awaiting_ai_seat else None,
            "auto_play": self.auto_play,
            "debug_mode": self.debug_mode,
            "move_history": [m.to_dict() for m in self.move_history],
            "history_text": self.formatted_history(),
            "material": self.material_balance(),
            "seats": {seat.value: cfg.to_dict() for seat, cfg in self.seats.items()},
        }


__all__ = ["GameSession"]
