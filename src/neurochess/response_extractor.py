"""
Turn a free-form model reply into a move candidate.

Strategies run in strict priority order and the first hit wins:
1) fenced ```json block with a "move" field
2) inline JSON object with a "move" field
3) bare "move": "<token>" pair anywhere in the text
4) explicit lead-in phrases ("my move is", "I play", "best move is", ...)
5) the LAST grammar match in the text (models tend to list candidates before committing)

Each strategy returns None to fall through. Tokens are lowercase UCI.
"""
from __future__ import annotations

import json
import re
from typing import Callable, Optional

from .models import MoveCandidate
from .move_validator import find_move_tokens, is_move_token, normalize_token

_TOKEN = r"([a-h][1-8][a-h][1-8][qrbn]?)"

FENCED_JSON_RE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```", re.I)
INLINE_JSON_RE = re.compile(r'\{[^{}]*"move"\s*:\s*"' + _TOKEN + r'"[^{}]*\}', re.I)
MOVE_PROPERTY_RE = re.compile(r'"move"\s*:\s*"' + _TOKEN + r'"', re.I)
LEAD_IN_RES = (
    re.compile(
        r"(?:my (?:final )?move is|i (?:will )?play|best move(?:\s+is)?|i choose|final move:?|move:)"
        r"\s*[:\s]*\**" + _TOKEN + r"\**",
        re.I,
    ),
    re.compile(
        r"(?:therefore|thus|so),?\s+(?:i (?:will )?play|my move is)\s*[:\s]*\**" + _TOKEN + r"\**",
        re.I,
    ),
)

Strategy = Callable[[str], Optional[MoveCandidate]]


def _candidate_from_object(obj) -> Optional[MoveCandidate]:
    if not isinstance(obj, dict):
        return None
    move = obj.get("move")
    if not isinstance(move, str) or not is_move_token(move):
        return None
    thoughts = obj.get("explanation") or obj.get("thoughts")
    return MoveCandidate(move=normalize_token(move), thoughts=thoughts if isinstance(thoughts, str) else None)


def from_fenced_json(text: str) -> Optional[MoveCandidate]:
    for match in FENCED_JSON_RE.finditer(text):
        try:
            parsed = json.loads(match.group(1))
        except ValueError:
            continue
        candidate = _candidate_from_object(parsed)
        if candidate:
            return candidate
    return None


def from_inline_json(text: str) -> Optional[MoveCandidate]:
    match = INLINE_JSON_RE.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        # Object-ish but not valid JSON; the regex already pinned a well-formed token.
        return MoveCandidate(move=match.group(1).lower())
    return _candidate_from_object(parsed)


def from_move_property(text: str) -> Optional[MoveCandidate]:
    match = MOVE_PROPERTY_RE.search(text)
    return MoveCandidate(move=match.group(1).lower()) if match else None


def from_lead_in_phrase(text: str) -> Optional[MoveCandidate]:
    for pattern in LEAD_IN_RES:
        match = pattern.search(text)
        if match:
            return MoveCandidate(move=match.group(1).lower())
    return None


def from_last_mention(text: str) -> Optional[MoveCandidate]:
    tokens = find_move_tokens(text)
    return MoveCandidate(move=tokens[-1]) if tokens else None


STRATEGIES: tuple[Strategy, ...] = (
    from_fenced_json,
    from_inline_json,
    from_move_property,
    from_lead_in_phrase,
    from_last_mention,
)


def extract_move(text: str) -> Optional[MoveCandidate]:
    """Return the first candidate any strategy finds, or None."""
    if not text:
        return None
    for strategy in STRATEGIES:
        candidate = strategy(text)
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "STRATEGIES",
    "extract_move",
    "from_fenced_json",
    "from_inline_json",
    "from_last_mention",
    "from_lead_in_phrase",
    "from_move_property",
]
