from __future__ import annotations

from typing import Dict, Iterable, List

from ..errors import UnknownProviderError
from ..models import ProviderDescriptor
from .anthropic_provider import ANTHROPIC_ADAPTER
from .base import ProviderAdapter, WireRequest
from .google_provider import GOOGLE_ADAPTER
from .openai_provider import OPENAI_ADAPTER
from .openrouter_provider import OPENROUTER_ADAPTER
from .xai_provider import XAI_ADAPTER

DEFAULT_ADAPTERS = (OPENROUTER_ADAPTER, OPENAI_ADAPTER, ANTHROPIC_ADAPTER, GOOGLE_ADAPTER, XAI_ADAPTER)


class ProviderRegistry:
    """Provider id -> adapter lookup, preserving registration order."""

    def __init__(self, adapters: Iterable[ProviderAdapter] = ()) -> None:
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.id] = adapter

    def get(self, provider_id: str) -> ProviderAdapter:
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            raise UnknownProviderError(f"Unknown provider: {provider_id}")
        return adapter

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._adapters

    def list(self) -> List[ProviderDescriptor]:
        return [adapter.descriptor for adapter in self._adapters.values()]


def default_registry() -> ProviderRegistry:
    return ProviderRegistry(DEFAULT_ADAPTERS)


__all__ = ["DEFAULT_ADAPTERS", "ProviderAdapter", "ProviderRegistry", "WireRequest", "default_registry"]
