"""
AutoPlayScheduler: chain AI moves while auto-play stays on.

The loop re-reads the live session (generation, auto_play flag, status, seat
to move) after every inter-move delay, so a stop issued during the delay
prevents the next request. A loop started for an older generation exits on
its next check; reset/new game never has to cancel it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from .models import SessionStatus

if TYPE_CHECKING:  # pragma: no cover - import cycle protection for type hints
    from .game import GameSession

log = logging.getLogger("autoplay")


class AutoPlayScheduler:
    def __init__(
        self,
        session: "GameSession",
        delay_s: float,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._session = session
        self.delay_s = delay_s
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._generation: Optional[int] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Spawn the loop on the running event loop, reusing a live loop for the same game."""
        session = self._session
        if self.running and self._generation == session.generation:
            return self._task
        self._generation = session.generation
        self._task = asyncio.get_running_loop().create_task(self._run(session.generation))
        return self._task

    def should_continue(self, generation: int) -> bool:
        session = self._session
        return (
            generation == session.generation
            and session.auto_play
            and session.status is SessionStatus.active
            and session.is_current_player_ai()
        )

    async def _run(self, generation: int) -> None:
        plies = 0
        try:
            while self.should_continue(generation):
                if not await self._session.request_ai_move():
                    break
                plies += 1
                await self._sleep(self.delay_s)
        except Exception:
            # No caller awaits this task; record the failure instead of leaving it unretrieved.
            log.exception("Auto-play loop failed")
        finally:
            if generation == self._session.generation:
                self._session.auto_play = False
            log.info("Auto-play stopped after %d AI move(s)", plies)


__all__ = ["AutoPlayScheduler"]
