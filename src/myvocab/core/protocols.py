"""Interface contracts for myvocab's pluggable collaborators.

Provider adapters, persistence stores, settings sources and secret ciphers
all conform to these protocols, so the enrichment service can be wired
with test doubles or new implementations without modification.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from myvocab.models.enrichment import EnrichmentResponse
    from myvocab.models.settings import AppSettings


@runtime_checkable
class EnrichmentProvider(Protocol):
    """Minimum capability every provider adapter offers."""

    provider_id: str

    async def enrich(
        self, text: str, language: str, extra_fields: str | None = None
    ) -> EnrichmentResponse: ...


@runtime_checkable
class TranslationProvider(Protocol):
    """Free-text language operations."""

    async def translate(
        self, text: str, from_lang: str, to_lang: str, style_prompt: str | None = None
    ) -> str: ...

    async def rephrase(
        self,
        text: str,
        language: str,
        style_prompt: str | None = None,
        context: str | None = None,
    ) -> str: ...

    async def explain(self, text: str, language: str) -> str: ...

    async def detect_language(self, text: str) -> str: ...


@runtime_checkable
class ConversationProvider(Protocol):
    """Writing-assistant and conversation-practice operations."""

    async def improve_style_prompt(self, description: str) -> str: ...

    async def suggest_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str: ...

    async def correct_text(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        style_prompt: str | None = None,
    ) -> str: ...

    async def suggest_next_ideas(self, history: Sequence[str], language: str) -> str: ...

    async def get_conversation_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str: ...

    async def get_suggested_reply_to_bot(
        self, bot_message: str, language: str, style_prompt: str | None = None
    ) -> str: ...


ProviderFactory = Callable[[str, str], EnrichmentProvider]
"""``(provider_id, api_key) -> adapter``; the seam for adding providers."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Async string-keyed persistence used by the cache."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class SettingsSource(Protocol):
    """Read access to the settings aggregate."""

    async def get_settings(self) -> AppSettings: ...


@runtime_checkable
class SecretCipher(Protocol):
    """Opaque encryption capability for API keys at rest.

    ``decrypt`` raises :class:`~myvocab.core.errors.DecryptionError` on
    tampered ciphertext or key mismatch.
    """

    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, ciphertext: str) -> str: ...
