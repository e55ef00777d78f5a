"""
Debug entries for prompts, replies, errors and committed moves.

DebugLog keeps the most recent entries (bounded) and doubles as the move
request observer. notify() shields callers from observer failures: a broken
observer is logged and otherwise ignored.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from .config import SETTINGS
from .models import Seat

log = logging.getLogger("debug_log")


class DebugKind(str, Enum):
    prompt = "prompt"
    response = "response"
    error = "error"
    move = "move"


@dataclass(frozen=True)
class DebugEntry:
    kind: DebugKind
    seat: Seat
    text: str
    raw: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "seat": self.seat.value,
            "text": self.text,
            "raw": self.raw,
        }


Observer = Callable[[DebugEntry], None]


def notify(observer: Optional[Observer], entry: DebugEntry) -> None:
    if observer is None:
        return
    try:
        observer(entry)
    except Exception:
        log.exception("Debug observer failed on %s entry", entry.kind.value)


class DebugLog:
    def __init__(self, limit: int = SETTINGS.debug_log_limit):
        self._entries: deque[DebugEntry] = deque(maxlen=limit)

    def __call__(self, entry: DebugEntry) -> None:
        self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[DebugEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["DebugEntry", "DebugKind", "DebugLog", "Observer", "notify"]
