"""
Referee: the rules oracle the session and the move pipeline consult.

- Wraps python-chess; positions are chess.Board values and are never mutated
  in place. apply_move() returns a fresh board so callers replace positions wholesale.
- terminal_status() folds checkmate, stalemate, insufficient material,
  repetition and the fifty-move rule into one TerminalStatus.
- export_pgn() serializes a position's move stack with headers and a result marker.
- describe() and material_balance() produce the human-readable extras.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

import chess
import chess.pgn

from .errors import IllegalMoveError
from .models import Seat
from .move_validator import is_move_token, normalize_token

PIECE_VALUES = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}

_DRAW_TEXT = {
    chess.Termination.STALEMATE: "Stalemate! Game is a draw.",
    chess.Termination.INSUFFICIENT_MATERIAL: "Draw by insufficient material.",
    chess.Termination.THREEFOLD_REPETITION: "Draw by threefold repetition.",
    chess.Termination.FIVEFOLD_REPETITION: "Draw by threefold repetition.",
    chess.Termination.FIFTY_MOVES: "Draw by fifty-move rule.",
    chess.Termination.SEVENTYFIVE_MOVES: "Draw by fifty-move rule.",
}


@dataclass(frozen=True)
class AppliedMove:
    position: chess.Board
    san: str
    uci: str


@dataclass(frozen=True)
class TerminalStatus:
    is_over: bool
    winner: Optional[Seat] = None
    reason: Optional[chess.Termination] = None

    @property
    def result(self) -> str:
        if not self.is_over:
            return "*"
        if self.winner is Seat.white:
            return "1-0"
        if self.winner is Seat.black:
            return "0-1"
        return "1/2-1/2"


class Referee:
    """Stateless chess rules oracle around python-chess."""

    event = "NeuroChess Arena"
    site = "Local"

    # ---------------- Positions -----------------
    def new_position(self, starting_fen: str | None = None) -> chess.Board:
        return chess.Board(fen=starting_fen) if starting_fen else chess.Board()

    def legal_move_tokens(self, position: chess.Board) -> list[str]:
        """Every legal move as a UCI token, in python-chess generation order."""
        return [mv.uci() for mv in position.legal_moves]

    def is_legal(self, position: chess.Board, token: str) -> bool:
        token = normalize_token(token)
        if not is_move_token(token):
            return False
        try:
            mv = chess.Move.from_uci(token)
        except ValueError:
            # Grammar-valid but unparseable, e.g. same-square "e2e2".
            return False
        return mv in position.legal_moves

    # ---------------- Move Application -----------------
    def apply_move(self, position: chess.Board, token: str) -> AppliedMove:
        token = normalize_token(token)
        if not self.is_legal(position, token):
            raise IllegalMoveError(f"Illegal move: {token or '(empty)'}")
        mv = chess.Move.from_uci(token)
        after = position.copy()
        san = after.san(mv)
        after.push(mv)
        return AppliedMove(position=after, san=san, uci=mv.uci())

    # ---------------- Status -----------------
    def terminal_status(self, position: chess.Board) -> TerminalStatus:
        outcome = position.outcome(claim_draw=True)
        if outcome is None:
            return TerminalStatus(is_over=False)
        winner = Seat.from_color(outcome.winner) if outcome.winner is not None else None
        return TerminalStatus(is_over=True, winner=winner, reason=outcome.termination)

    def describe(self, position: chess.Board) -> str:
        """One-line status text for the position ("White to move", "Checkmate! Black wins!")."""
        status = self.terminal_status(position)
        if status.is_over:
            if status.winner is not None:
                return f"Checkmate! {status.winner.label} wins!"
            return _DRAW_TEXT.get(status.reason, "Game drawn.")
        side = Seat.from_color(position.turn).label
        if position.is_check():
            return f"{side} is in check!"
        return f"{side} to move"

    def material_balance(self, position: chess.Board) -> dict:
        counts: dict[str, dict[str, int]] = {}
        totals: dict[str, int] = {}
        for seat in Seat:
            per_piece = {}
            total = 0
            for piece_type in (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN):
                n = len(position.pieces(piece_type, seat.color))
                per_piece[chess.piece_name(piece_type) + "s"] = n
                total += n * PIECE_VALUES[piece_type]
            counts[seat.value] = per_piece
            totals[seat.value] = total
        diff = totals["white"] - totals["black"]
        advantage = "white" if diff > 0 else "black" if diff < 0 else "equal"
        return {
            "white": counts["white"],
            "black": counts["black"],
            "white_total": totals["white"],
            "black_total": totals["black"],
            "advantage": advantage,
            "advantage_value": abs(diff),
        }

    # ---------------- PGN -----------------
    def export_pgn(self, position: chess.Board, white: str, black: str, date: Optional[str] = None) -> str:
        game = chess.pgn.Game.from_board(position)
        game.headers["Event"] = self.event
        game.headers["Site"] = self.site
        game.headers["Date"] = date or datetime.date.today().strftime("%Y.%m.%d")
        game.headers["White"] = white
        game.headers["Black"] = black
        # from_board() only claims automatic draws; align with terminal_status().
        game.headers["Result"] = self.terminal_status(position).result
        exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=False)
        return game.accept(exporter)


__all__ = ["AppliedMove", "PIECE_VALUES", "Referee", "TerminalStatus"]
