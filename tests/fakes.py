"""Shared fakes for the unittest suites (transport, payload builders, seats)."""
from __future__ import annotations

import asyncio

from neurochess.models import PlayerKind, PlayerSeatConfig


def chat_payload(text: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "openai/gpt-4o",
        "choices": [
            {"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": text}},
        ],
    }


def fenced(move: str, explanation: str = "Develops a piece") -> str:
    return f'Let me look at the position.\n```json\n{{"move": "{move}", "explanation": "{explanation}"}}\n```'


def ai_seat(**overrides) -> PlayerSeatConfig:
    values = dict(
        kind=PlayerKind.ai,
        provider_id="openrouter",
        model_id="openai/gpt-4o",
        api_key="test-key",
        max_retries=3,
    )
    values.update(overrides)
    return PlayerSeatConfig(**values)


def human_seat() -> PlayerSeatConfig:
    return PlayerSeatConfig(kind=PlayerKind.human)


class FakeTransport:
    """Replays scripted replies; the last one repeats. Exceptions are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    async def send(self, request):
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


class BlockingTransport(FakeTransport):
    """Holds every send() until release() so tests can act mid-request."""

    def __init__(self, *replies):
        super().__init__(*replies)
        self.gate = asyncio.Event()

    def release(self):
        self.gate.set()

    async def send(self, request):
        await self.gate.wait()
        return await super().send(request)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays and can run a hook."""

    def __init__(self, hook=None):
        self.delays = []
        self.hook = hook

    async def __call__(self, delay):
        self.delays.append(delay)
        if self.hook is not None:
            self.hook()
