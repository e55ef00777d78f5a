"""
Provider adapter contract.

An adapter is a plain record of two functions plus a static descriptor:
- build_request(prompt, seat) -> WireRequest (endpoint, method, headers, JSON body)
- parse_response(payload) -> reply text; raises ProviderProtocolError on an
  error payload or when the payload carries no text at all.
Adapters are selected by provider id through ProviderRegistry, not by subclassing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ..errors import ProviderProtocolError
from ..models import ChessPrompt, ModelInfo, PlayerSeatConfig, ProviderDescriptor

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class WireRequest:
    url: str
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class ProviderAdapter:
    descriptor: ProviderDescriptor
    build_request: Callable[[ChessPrompt, PlayerSeatConfig], WireRequest]
    parse_response: Callable[[Any], str]

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def name(self) -> str:
        return self.descriptor.name


def catalog(*models: tuple[str, str]) -> tuple[ModelInfo, ...]:
    return tuple(ModelInfo(id=model_id, name=name) for model_id, name in models)


def raise_for_error_payload(payload: Any, provider_name: str) -> None:
    """Surface a provider-reported {"error": ...} body as ProviderProtocolError."""
    if not isinstance(payload, dict):
        raise ProviderProtocolError(f"{provider_name} API Error: unexpected response shape")
    error = payload.get("error")
    if not error:
        return
    if isinstance(error, dict):
        message = error.get("message") or error.get("status") or error.get("type") or "Unknown error"
    else:
        message = str(error)
    raise ProviderProtocolError(f"{provider_name} API Error: {message}")


def require_text(text: Any, provider_name: str) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ProviderProtocolError(f"No text content in {provider_name} response")
    return text
