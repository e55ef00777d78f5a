"""OpenRouter adapter: chat-completions dialect plus app identification headers."""
from __future__ import annotations

from typing import Any

from ..config import SETTINGS
from ..models import ChessPrompt, PlayerSeatConfig, ProviderDescriptor
from .base import ProviderAdapter, WireRequest, catalog
from .openai_provider import bearer_headers, chat_completion_text, chat_messages

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

OPENROUTER_MODELS = catalog(
    ("openai/gpt-5", "GPT-5"),
    ("openai/o3", "O3"),
    ("openai/o1", "O1"),
    ("openai/gpt-4.1", "GPT-4.1"),
    ("openai/gpt-4.1-mini", "GPT-4.1 Mini"),
    ("openai/gpt-4o", "GPT-4o"),
    ("openai/gpt-4o-mini", "GPT-4o Mini"),
    ("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet"),
    ("anthropic/claude-3-opus", "Claude 3 Opus"),
    ("anthropic/claude-3-haiku", "Claude 3 Haiku"),
    ("google/gemini-2.0-flash", "Gemini 2.0 Flash"),
    ("google/gemini-pro-1.5", "Gemini 1.5 Pro"),
    ("google/gemma-2-27b-it", "Gemma 2 27B IT"),
    ("x-ai/grok-3", "Grok 3"),
    ("x-ai/grok-3-mini", "Grok 3 Mini"),
    ("meta-llama/llama-3.1-405b-instruct", "Llama 3.1 405B"),
    ("meta-llama/llama-3.1-70b-instruct", "Llama 3.1 70B"),
    ("mistralai/mistral-large", "Mistral Large"),
    ("deepseek/deepseek-chat", "DeepSeek Chat"),
    ("qwen/qwen-2.5-72b-instruct", "Qwen 2.5 72B"),
)


def build_request(prompt: ChessPrompt, seat: PlayerSeatConfig) -> WireRequest:
    headers = bearer_headers(seat.api_key)
    headers["HTTP-Referer"] = SETTINGS.app_url
    headers["X-Title"] = SETTINGS.app_title
    body = {
        "model": seat.effective_model,
        "messages": chat_messages(prompt),
        "temperature": seat.temperature,
    }
    return WireRequest(url=OPENROUTER_URL, headers=headers, body=body)


def parse_response(payload: Any) -> str:
    return chat_completion_text(payload, "OpenRouter")


OPENROUTER_ADAPTER = ProviderAdapter(
    descriptor=ProviderDescriptor(id="openrouter", name="OpenRouter", models=OPENROUTER_MODELS),
    build_request=build_request,
    parse_response=parse_response,
)
