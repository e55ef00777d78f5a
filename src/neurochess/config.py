"""
Configuration and environment loading for NeuroChess Arena.

- Loads settings.yml (YAML) if present; falls back to environment variables (.env is read first).
- Exposes SETTINGS with defaults for new seats, retry/backoff knobs, prompt context and API keys.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()

# Environment variables that hold each provider's credential, in lookup order.
API_KEY_ENV: dict[str, tuple[str, ...]] = {
    "openrouter": ("OPENROUTER_API_KEY",),
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "google": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
    "xai": ("XAI_API_KEY",),
}


def _settings_path() -> str:
    return os.environ.get("NEUROCHESS_SETTINGS") or os.path.join(os.getcwd(), "settings.yml")


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


def _getter(cfg: dict) -> Callable[..., Any]:
    def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
        if name in cfg:
            val = cfg[name]
            return cast(val) if cast else val
        env = os.environ.get(name)
        if env is not None:
            return cast(env) if cast else env
        return default
    return _get


@dataclass(frozen=True)
class Settings:
    # Seat defaults
    default_provider: str = "openrouter"
    default_model: str = "openai/gpt-4o"
    temperature: float = 0.3
    max_retries: int = 3
    max_tokens: int = 1024

    # Tuning knobs
    backoff_base_s: float = 0.5
    recent_moves_context: int = 10
    responses_timeout_s: float = 300.0
    autoplay_delay_s: float = 0.5
    debug_log_limit: int = 100

    # Identification sent to providers that ask for it (OpenRouter)
    app_url: str = "http://localhost:5000"
    app_title: str = "NeuroChess Arena"

    api_keys: dict[str, str] = field(default_factory=dict)

    def api_key_for(self, provider_id: str) -> str:
        return self.api_keys.get(provider_id, "")


def load_settings(path: str | None = None) -> Settings:
    """Build Settings with precedence YAML > env > defaults."""
    _get = _getter(_load_yaml(path or _settings_path()))
    api_keys = {}
    for provider_id, names in API_KEY_ENV.items():
        for name in names:
            value = _get(name, "")
            if value:
                api_keys[provider_id] = str(value)
                break
    return Settings(
        default_provider=_get("NEUROCHESS_DEFAULT_PROVIDER", "openrouter"),
        default_model=_get("NEUROCHESS_DEFAULT_MODEL", "openai/gpt-4o"),
        temperature=_get("NEUROCHESS_TEMPERATURE", 0.3, cast=float),
        max_retries=_get("NEUROCHESS_MAX_RETRIES", 3, cast=int),
        max_tokens=_get("NEUROCHESS_MAX_TOKENS", 1024, cast=int),
        backoff_base_s=_get("NEUROCHESS_BACKOFF_BASE_S", 0.5, cast=float),
        recent_moves_context=_get("NEUROCHESS_RECENT_MOVES", 10, cast=int),
        responses_timeout_s=_get("NEUROCHESS_RESPONSES_TIMEOUT_S", 300.0, cast=float),
        autoplay_delay_s=_get("NEUROCHESS_AUTOPLAY_DELAY_S", 0.5, cast=float),
        debug_log_limit=_get("NEUROCHESS_DEBUG_LOG_LIMIT", 100, cast=int),
        app_url=_get("NEUROCHESS_APP_URL", "http://localhost:5000"),
        app_title=_get("NEUROCHESS_APP_TITLE", "NeuroChess Arena"),
        api_keys=api_keys,
    )


SETTINGS = load_settings()
