"""Provider adapters and the default provider factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from myvocab.core.errors import ConfigurationError
from myvocab.providers.base import BaseProvider
from myvocab.providers.gemini import GeminiProvider
from myvocab.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    import httpx

    from myvocab.config import MyVocabConfig
    from myvocab.core.protocols import ProviderFactory

__all__ = [
    "BaseProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "default_provider_factory",
    "make_provider_factory",
]


def default_provider_factory(provider_id: str, api_key: str) -> BaseProvider:
    """Build an adapter with built-in endpoint and model defaults."""
    if provider_id == "openai":
        return OpenAIProvider(api_key)
    if provider_id == "gemini":
        return GeminiProvider(api_key)
    raise ConfigurationError(f"Unknown provider: {provider_id}", provider_id=provider_id)


def make_provider_factory(
    config: MyVocabConfig,
    client: httpx.AsyncClient | None = None,
) -> ProviderFactory:
    """Return a factory binding adapters to configured endpoints and models.

    Args:
        config: Resolved configuration supplying per-provider settings.
        client: Optional shared HTTP client handed to every adapter.
    """

    def factory(provider_id: str, api_key: str) -> BaseProvider:
        if provider_id == "openai":
            return OpenAIProvider(
                api_key,
                model=config.openai.model,
                base_url=config.openai.base_url,
                timeout=float(config.openai.timeout_seconds),
                client=client,
            )
        if provider_id == "gemini":
            return GeminiProvider(
                api_key,
                model=config.gemini.model,
                base_url=config.gemini.base_url,
                timeout=float(config.gemini.timeout_seconds),
                client=client,
            )
        raise ConfigurationError(f"Unknown provider: {provider_id}", provider_id=provider_id)

    return factory
