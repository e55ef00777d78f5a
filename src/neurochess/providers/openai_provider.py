"""
OpenAI adapter and the shared chat-completions dialect.

- Bearer-token auth, {"model", "messages", ...} body, choices[0].message.content reply.
- Response bodies are read through the openai SDK's ChatCompletion model
  (lenient construct, no validation) so every chat-completions backend
  (OpenAI, OpenRouter, xAI) shares one parser.
- Reasoning models (o1*/o3*) reject system messages and temperature: they get
  the combined prompt as a single user message. Other models also get the
  json_object response_format hint.
"""
from __future__ import annotations

from typing import Any

from openai.types.chat import ChatCompletion

from ..errors import ProviderProtocolError
from ..models import ChessPrompt, PlayerSeatConfig, ProviderDescriptor
from .base import JSON_HEADERS, ProviderAdapter, WireRequest, catalog, raise_for_error_payload, require_text

OPENAI_URL = "https://api.openai.com/v1/chat/completions"

OPENAI_MODELS = catalog(
    ("gpt-4o", "GPT-4o"),
    ("gpt-4o-mini", "GPT-4o Mini"),
    ("gpt-4-turbo", "GPT-4 Turbo"),
    ("gpt-4", "GPT-4"),
    ("gpt-3.5-turbo", "GPT-3.5 Turbo"),
    ("o1-preview", "O1 Preview"),
    ("o1-mini", "O1 Mini"),
)

_REASONING_PREFIXES = ("o1", "o3")


def chat_messages(prompt: ChessPrompt, combine: bool = False) -> list[dict[str, str]]:
    if combine:
        return [{"role": "user", "content": prompt.combined()}]
    return [
        {"role": "system", "content": prompt.system},
        {"role": "user", "content": prompt.user},
    ]


def bearer_headers(api_key: str) -> dict[str, str]:
    return {**JSON_HEADERS, "Authorization": f"Bearer {api_key}"}


def chat_completion_text(payload: Any, provider_name: str) -> str:
    """Reply text of a chat-completions body; raises on error payloads or empty content."""
    raise_for_error_payload(payload, provider_name)
    completion = ChatCompletion.construct(**payload)
    choices = getattr(completion, "choices", None) or []
    if not isinstance(choices, list):
        raise ProviderProtocolError(f"{provider_name} API Error: choices is not a list")
    message = getattr(choices[0], "message", None) if choices else None
    content = getattr(message, "content", None)
    if isinstance(content, list):
        # Some gateways return content parts instead of a plain string.
        content = "".join(
            part["text"]
            for part in content
            if isinstance(part, dict) and part.get("type") == "text" and isinstance(part.get("text"), str)
        )
    return require_text(content, provider_name)


def is_reasoning_model(model_id: str) -> bool:
    return model_id.startswith(_REASONING_PREFIXES)


def build_request(prompt: ChessPrompt, seat: PlayerSeatConfig) -> WireRequest:
    model_id = seat.effective_model
    reasoning = is_reasoning_model(model_id)
    body: dict[str, Any] = {
        "model": model_id,
        "messages": chat_messages(prompt, combine=reasoning),
        "max_tokens": seat.max_tokens,
    }
    if not reasoning:
        body["temperature"] = seat.temperature
        body["response_format"] = {"type": "json_object"}
    return WireRequest(url=OPENAI_URL, headers=bearer_headers(seat.api_key), body=body)


def parse_response(payload: Any) -> str:
    return chat_completion_text(payload, "OpenAI")


OPENAI_ADAPTER = ProviderAdapter(
    descriptor=ProviderDescriptor(id="openai", name="OpenAI", models=OPENAI_MODELS),
    build_request=build_request,
    parse_response=parse_response,
)
