"""
Move token grammar helpers.

A move token is long algebraic UCI: source square, destination square and an
optional promotion letter (e2e4, e7e8q). Matching is case-insensitive and the
normalized form is lowercase.
"""
from __future__ import annotations

import re

UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$", re.I)
# Same grammar for searching inside free-form text.
UCI_SEARCH_RE = re.compile(r"\b([a-h][1-8][a-h][1-8][qrbn]?)\b", re.I)


def normalize_token(token: str) -> str:
    return (token or "").strip().lower()


def is_move_token(token: str) -> bool:
    """True if token (after normalization) matches the move-token grammar."""
    return bool(UCI_RE.fullmatch(normalize_token(token)))


def find_move_tokens(text: str) -> list[str]:
    """All grammar matches in text, in order of appearance, normalized."""
    return [m.lower() for m in UCI_SEARCH_RE.findall(text or "")]


__all__ = ["UCI_RE", "UCI_SEARCH_RE", "normalize_token", "is_move_token", "find_move_tokens"]
