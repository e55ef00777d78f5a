"""
Provider-agnostic prompt construction for move requests.

The system part fixes the reply format (a fenced JSON block with "move" and
"explanation"); the user part carries the FEN, a bounded tail of recent SAN
moves, the side to move, and the full list of legal UCI tokens to pick from.
"""
from __future__ import annotations

from typing import Sequence

from .config import SETTINGS
from .models import ChessPrompt, Seat

CHESS_SYSTEM_PROMPT = """You are a chess engine. Your task is to select the best move from a list of legal moves.

## Response Format
You MUST respond with a JSON block in exactly this format:

```json
{
  "move": "UCI_MOVE",
  "explanation": "Brief explanation"
}
```

## Rules
- Choose ONE move from the provided legal moves list
- Use UCI format exactly as shown (e.g., "e2e4", "g1f3", "e7e8q")
- Focus on selecting the strategically best move
- Do NOT suggest multiple moves"""

TRUNCATION_MARKER = "..."


def recent_moves_text(move_history: Sequence[str], max_plies: int = SETTINGS.recent_moves_context) -> str:
    """Last max_plies SAN moves, prefixed with '...' when older moves were dropped."""
    if not move_history:
        return "(Opening)"
    if max_plies <= 0:
        return TRUNCATION_MARKER
    recent = list(move_history[-max_plies:])
    prefix = f"{TRUNCATION_MARKER} " if len(move_history) > max_plies else ""
    return prefix + " ".join(recent)


def build_user_prompt(
    fen: str,
    side: Seat,
    move_history: Sequence[str],
    legal_moves: Sequence[str],
    max_plies: int = SETTINGS.recent_moves_context,
) -> str:
    return (
        f"## Position (FEN)\n{fen}\n\n"
        f"## Recent Moves\n{recent_moves_text(move_history, max_plies)}\n\n"
        f"## {side.label} to move\n\n"
        f"## Legal Moves ({len(legal_moves)})\n{', '.join(legal_moves)}\n\n"
        "Select the best move."
    )


def build_chess_prompt(
    fen: str,
    side: Seat,
    move_history: Sequence[str],
    legal_moves: Sequence[str],
    max_plies: int = SETTINGS.recent_moves_context,
) -> ChessPrompt:
    """Fresh system/user pair for one move request; never cached."""
    return ChessPrompt(
        system=CHESS_SYSTEM_PROMPT,
        user=build_user_prompt(fen, side, move_history, legal_moves, max_plies),
    )


__all__ = ["CHESS_SYSTEM_PROMPT", "TRUNCATION_MARKER", "build_chess_prompt", "build_user_prompt", "recent_moves_text"]
