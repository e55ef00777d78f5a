"""
Google Generative Language adapter (Gemini / Gemma).

- API key travels in the query string; body is {"contents": [{"role", "parts"}], "generationConfig"}.
- Gemini models take a systemInstruction and the application/json response hint.
- Gemma models have no system role, so they receive the combined prompt.
- Reply text is the concatenation of the first candidate's text parts.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..errors import ProviderProtocolError
from ..models import ChessPrompt, PlayerSeatConfig, ProviderDescriptor
from .base import JSON_HEADERS, ProviderAdapter, WireRequest, catalog, raise_for_error_payload, require_text

GOOGLE_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

GOOGLE_MODELS = catalog(
    ("gemini-2.0-flash", "Gemini 2.0 Flash"),
    ("gemini-1.5-pro-latest", "Gemini 1.5 Pro (latest)"),
    ("gemini-1.5-flash-latest", "Gemini 1.5 Flash (latest)"),
    ("gemma-2-9b-it", "Gemma 2 9B IT"),
    ("gemma-2-27b-it", "Gemma 2 27B IT"),
)


def supports_system_role(model_id: str) -> bool:
    return not model_id.startswith("gemma")


def build_request(prompt: ChessPrompt, seat: PlayerSeatConfig) -> WireRequest:
    model_id = seat.effective_model
    url = f"{GOOGLE_BASE_URL}/{quote(model_id, safe='')}:generateContent?key={quote(seat.api_key, safe='')}"
    generation_config: dict[str, Any] = {"temperature": seat.temperature}
    if supports_system_role(model_id):
        body: dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": prompt.system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt.user}]}],
        }
        generation_config["responseMimeType"] = "application/json"
    else:
        body = {"contents": [{"role": "user", "parts": [{"text": prompt.combined()}]}]}
    body["generationConfig"] = generation_config
    return WireRequest(url=url, headers=dict(JSON_HEADERS), body=body)


def parse_response(payload: Any) -> str:
    raise_for_error_payload(payload, "Google")
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        raise ProviderProtocolError("Google API Error: candidates is not a list")
    content = candidates[0].get("content") if candidates and isinstance(candidates[0], dict) else None
    if content is not None and not isinstance(content, dict):
        raise ProviderProtocolError("Google API Error: unexpected candidate content")
    parts = (content or {}).get("parts") or []
    if not isinstance(parts, list):
        raise ProviderProtocolError("Google API Error: parts is not a list")
    text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
    return require_text(text, "Google")


GOOGLE_ADAPTER = ProviderAdapter(
    descriptor=ProviderDescriptor(id="google", name="Google (Gemini/Gemma)", models=GOOGLE_MODELS),
    build_request=build_request,
    parse_response=parse_response,
)
