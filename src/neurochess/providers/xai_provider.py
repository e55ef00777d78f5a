"""xAI (Grok) adapter: plain chat-completions dialect."""
from __future__ import annotations

from typing import Any

from ..models import ChessPrompt, PlayerSeatConfig, ProviderDescriptor
from .base import ProviderAdapter, WireRequest, catalog
from .openai_provider import bearer_headers, chat_completion_text, chat_messages

XAI_URL = "https://api.x.ai/v1/chat/completions"

XAI_MODELS = catalog(
    ("grok-3", "Grok 3"),
    ("grok-3-mini", "Grok 3 Mini"),
    ("grok-2", "Grok 2"),
    ("grok-2-mini", "Grok 2 Mini"),
)


def build_request(prompt: ChessPrompt, seat: PlayerSeatConfig) -> WireRequest:
    body = {
        "model": seat.effective_model,
        "messages": chat_messages(prompt),
        "temperature": seat.temperature,
    }
    return WireRequest(url=XAI_URL, headers=bearer_headers(seat.api_key), body=body)


def parse_response(payload: Any) -> str:
    return chat_completion_text(payload, "xAI")


XAI_ADAPTER = ProviderAdapter(
    descriptor=ProviderDescriptor(id="xai", name="xAI (Grok)", models=XAI_MODELS),
    build_request=build_request,
    parse_response=parse_response,
)
