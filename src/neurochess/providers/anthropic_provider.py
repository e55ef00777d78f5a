"""
Anthropic Messages API adapter.

Header-key auth (x-api-key) with a pinned anthropic-version, a top-level
"system" field, and a content-array reply where the first text block wins.
"""
from __future__ import annotations

from typing import Any

from ..errors import ProviderProtocolError
from ..models import ChessPrompt, PlayerSeatConfig, ProviderDescriptor
from .base import JSON_HEADERS, ProviderAdapter, WireRequest, catalog, raise_for_error_payload, require_text

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

ANTHROPIC_MODELS = catalog(
    ("claude-sonnet-4-20250514", "Claude Sonnet 4"),
    ("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet"),
    ("claude-3-opus-20240229", "Claude 3 Opus"),
    ("claude-3-haiku-20240307", "Claude 3 Haiku"),
)


def build_request(prompt: ChessPrompt, seat: PlayerSeatConfig) -> WireRequest:
    headers = {
        **JSON_HEADERS,
        "x-api-key": seat.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }
    body = {
        "model": seat.effective_model,
        "max_tokens": seat.max_tokens,
        "temperature": seat.temperature,
        "system": prompt.system,
        "messages": [{"role": "user", "content": prompt.user}],
    }
    return WireRequest(url=ANTHROPIC_URL, headers=headers, body=body)


def parse_response(payload: Any) -> str:
    raise_for_error_payload(payload, "Anthropic")
    blocks = payload.get("content") or []
    if not isinstance(blocks, list):
        raise ProviderProtocolError("Anthropic API Error: content is not a list of blocks")
    text = next(
        (b.get("text") for b in blocks if isinstance(b, dict) and b.get("type") == "text"),
        None,
    )
    return require_text(text, "Anthropic")


ANTHROPIC_ADAPTER = ProviderAdapter(
    descriptor=ProviderDescriptor(id="anthropic", name="Anthropic", models=ANTHROPIC_MODELS),
    build_request=build_request,
    parse_response=parse_response,
)
