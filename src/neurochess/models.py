"""
Value types shared by the session, the move request pipeline and the providers.

- Seat / PlayerKind / SessionStatus: the small enums the state machine runs on.
- PlayerSeatConfig: who sits in a seat and, for AI seats, how to reach the model.
- MoveRecord: one committed ply (immutable, append-only history member).
- ChessPrompt, ModelInfo, ProviderDescriptor, MoveCandidate: provider-agnostic request/response shapes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import chess

from .config import SETTINGS


class Seat(str, Enum):
    white = "white"
    black = "black"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def color(self) -> chess.Color:
        return chess.WHITE if self is Seat.white else chess.BLACK

    @property
    def opponent(self) -> "Seat":
        return Seat.black if self is Seat.white else Seat.white

    @classmethod
    def from_color(cls, color: chess.Color) -> "Seat":
        return cls.white if color == chess.WHITE else cls.black


class PlayerKind(str, Enum):
    human = "human"
    ai = "ai"


class SessionStatus(str, Enum):
    idle = "idle"
    active = "active"
    white_wins = "white_wins"
    black_wins = "black_wins"
    draw = "draw"

    @property
    def is_over(self) -> bool:
        return self in (SessionStatus.white_wins, SessionStatus.black_wins, SessionStatus.draw)


@dataclass(frozen=True)
class PlayerSeatConfig:
    kind: PlayerKind = PlayerKind.human
    provider_id: str = SETTINGS.default_provider
    model_id: str = SETTINGS.default_model
    custom_model: str | None = None
    temperature: float = SETTINGS.temperature
    max_retries: int = SETTINGS.max_retries
    api_key: str = ""
    max_tokens: int = SETTINGS.max_tokens

    @property
    def effective_model(self) -> str:
        """Custom model override when set, else the catalog model id."""
        custom = (self.custom_model or "").strip()
        return custom or self.model_id

    @property
    def is_ai(self) -> bool:
        return self.kind is PlayerKind.ai

    def label(self) -> str:
        return f"AI ({self.effective_model})" if self.is_ai else "Human"

    def to_dict(self) -> dict:
        # Credentials never leave the process; only report whether one is set.
        return {
            "kind": self.kind.value,
            "provider_id": self.provider_id,
            "model_id": self.model_id,
            "custom_model": self.custom_model,
            "effective_model": self.effective_model,
            "temperature": self.temperature,
            "max_retries": self.max_retries,
            "max_tokens": self.max_tokens,
            "has_api_key": bool(self.api_key),
        }


def default_seat_config(kind: PlayerKind = PlayerKind.human, provider_id: str | None = None) -> PlayerSeatConfig:
    """Seat config seeded from SETTINGS, including the provider's API key if configured."""
    provider_id = provider_id or SETTINGS.default_provider
    return PlayerSeatConfig(kind=kind, provider_id=provider_id, api_key=SETTINGS.api_key_for(provider_id))


@dataclass(frozen=True)
class MoveRecord:
    san: str
    uci: str
    fen: str
    color: Seat
    move_number: int

    def to_dict(self) -> dict:
        return {
            "san": self.san,
            "uci": self.uci,
            "fen": self.fen,
            "color": self.color.value,
            "move_number": self.move_number,
        }


@dataclass(frozen=True)
class ChessPrompt:
    system: str
    user: str

    def combined(self) -> str:
        """Single-message form for backends without a system role."""
        return f"{self.system}\n\n---\n\n{self.user}"


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str


@dataclass(frozen=True)
class ProviderDescriptor:
    id: str
    name: str
    models: tuple[ModelInfo, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "models": [{"id": m.id, "name": m.name} for m in self.models],
        }


@dataclass(frozen=True)
class MoveCandidate:
    move: str
    thoughts: Optional[str] = None
