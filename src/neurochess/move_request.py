"""
MoveRequestPipeline: ask one AI seat for one move.

Flow per request:
1) build a ChessPrompt from the position, the recent SAN history and the legal UCI tokens
2) for attempt 1..max_retries: adapter.build_request -> transport.send ->
   adapter.parse_response -> extract_move -> legality check against the referee
3) any failure in step 2 (transport, provider error payload, no parseable move,
   illegal move) consumes the attempt; sleep backoff_base * 2**attempt before the next
4) after the last failed attempt raise ExhaustedRetriesError with the last error

The observer (debug log) sees the prompt, each reply and each failed attempt;
it never influences control flow.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

import chess

from .config import SETTINGS
from .debug_log import DebugEntry, DebugKind, Observer, notify
from .errors import (
    RETRYABLE_ERRORS,
    ConfigError,
    ExhaustedRetriesError,
    ExtractionFailure,
    IllegalMoveError,
    ProviderProtocolError,
)
from .llm_client import HttpTransport
from .models import ChessPrompt, MoveCandidate, PlayerSeatConfig, Seat
from .prompting import build_chess_prompt
from .providers import ProviderAdapter, ProviderRegistry, WireRequest, default_registry
from .referee import Referee
from .response_extractor import extract_move

log = logging.getLogger("move_request")


class Transport(Protocol):
    async def send(self, request: WireRequest) -> Any: ...


@dataclass(frozen=True)
class AcquiredMove:
    move: str
    thoughts: Optional[str]
    raw_text: str
    attempts: int


class MoveRequestPipeline:
    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        transport: Transport | None = None,
        referee: Referee | None = None,
        backoff_base_s: float = SETTINGS.backoff_base_s,
        context_plies: int = SETTINGS.recent_moves_context,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.registry = registry or default_registry()
        self.referee = referee or Referee()
        self.backoff_base_s = backoff_base_s
        self.context_plies = context_plies
        self._transport = transport
        self._sleep = sleep

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = HttpTransport()
        return self._transport

    async def aclose(self) -> None:
        closer = getattr(self._transport, "aclose", None)
        if closer is not None:
            await closer()

    def backoff_delay(self, attempt: int) -> float:
        return self.backoff_base_s * (2 ** attempt)

    async def acquire_move(
        self,
        position: chess.Board,
        seat_config: PlayerSeatConfig,
        move_history: Sequence[str] = (),
        seat: Seat | None = None,
        observer: Optional[Observer] = None,
    ) -> AcquiredMove:
        """Return a legal move for position or raise ExhaustedRetriesError / ConfigError."""
        seat = seat or Seat.from_color(position.turn)
        adapter = self.registry.get(seat_config.provider_id)
        if not seat_config.api_key:
            raise ConfigError(f"{seat.label} AI needs an API key")

        legal = self.referee.legal_move_tokens(position)
        prompt = build_chess_prompt(position.fen(), seat, move_history, legal, self.context_plies)
        notify(observer, DebugEntry(kind=DebugKind.prompt, seat=seat, text=prompt.combined()))

        max_attempts = max(1, seat_config.max_retries)
        last_error: BaseException | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                candidate, raw_text = await self._attempt(adapter, prompt, seat_config, legal, seat, observer)
            except RETRYABLE_ERRORS as exc:
                last_error = exc
                log.warning(
                    "%s %s attempt %d/%d failed: %s",
                    seat.value, adapter.id, attempt, max_attempts, exc,
                )
                notify(observer, DebugEntry(
                    kind=DebugKind.error,
                    seat=seat,
                    text=f"Attempt {attempt}/{max_attempts}: {exc}",
                ))
                if attempt == max_attempts:
                    break
                await self._sleep(self.backoff_delay(attempt))
                continue
            log.info("%s %s returned %s after %d attempt(s)", seat.value, adapter.id, candidate.move, attempt)
            return AcquiredMove(move=candidate.move, thoughts=candidate.thoughts, raw_text=raw_text, attempts=attempt)

        raise ExhaustedRetriesError(max_attempts, last_error)

    async def _attempt(
        self,
        adapter: ProviderAdapter,
        prompt: ChessPrompt,
        seat_config: PlayerSeatConfig,
        legal: Sequence[str],
        seat: Seat,
        observer: Optional[Observer],
    ) -> tuple[MoveCandidate, str]:
        request = adapter.build_request(prompt, seat_config)
        payload = await self.transport.send(request)
        try:
            text = adapter.parse_response(payload)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            raise ProviderProtocolError(f"Malformed {adapter.name} response: {exc}") from exc
        candidate = extract_move(text)
        summary = "Move: (none found)"
        if candidate is not None:
            summary = f"Move: {candidate.move}" + (f"\nThoughts: {candidate.thoughts}" if candidate.thoughts else "")
        notify(observer, DebugEntry(kind=DebugKind.response, seat=seat, text=summary, raw=text))
        if candidate is None:
            raise ExtractionFailure(f"Could not extract move from response: {text[:200]}")
        if candidate.move not in legal:
            raise IllegalMoveError(f"Illegal move from AI: {candidate.move}")
        return candidate, text


__all__ = ["AcquiredMove", "MoveRequestPipeline", "Transport"]
