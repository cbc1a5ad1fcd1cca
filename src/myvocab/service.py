"""Enrichment service: the entry point consumers call.

Every operation runs the same sequence::

    validate inputs -> cache lookup -> resolve provider -> retried call
    -> cache write -> return

Validation and configuration faults are raised immediately and never
retried. Any other failure of a provider call is retried with exponential
backoff plus jitter, then reported as a :class:`RetryExhaustedError`. The
cache is neither read nor written on a failure path.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from myvocab.cache.service import (
    ResponseCache,
    generate_cache_key,
    generate_translation_cache_key,
)
from myvocab.core.errors import ConfigurationError, RetryExhaustedError, ValidationError
from myvocab.models.enrichment import ApiKeyStatus, EnrichmentRequest, TranslateResult
from myvocab.providers import default_provider_factory

if TYPE_CHECKING:
    from myvocab.config import MyVocabConfig
    from myvocab.core.protocols import EnrichmentProvider, ProviderFactory, SettingsSource
    from myvocab.models.enrichment import EnrichmentResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
RETRY_DELAY_BASE_MS = 1000
RETRY_JITTER_MS = 500

# Never retried: the call cannot succeed as constructed.
_NON_RETRYABLE = (ValidationError, ConfigurationError)

_FAILURE_DESCRIPTIONS: dict[str, str] = {
    "enrich": "enrich vocabulary",
    "translate": "translate text",
    "rephrase": "rephrase text",
    "explain": "explain text",
    "detect_language": "detect language",
    "improve_style_prompt": "improve style prompt",
    "suggest_reply": "suggest reply",
    "correct_text": "correct text",
    "suggest_next_ideas": "suggest next ideas",
    "get_conversation_reply": "get conversation reply",
    "get_suggested_reply_to_bot": "get suggested reply",
}


def calculate_backoff_delay(
    attempt: int,
    base_ms: float = RETRY_DELAY_BASE_MS,
    jitter_ms: float = RETRY_JITTER_MS,
    rand: Callable[[], float] = random.random,
) -> float:
    """Delay before the next attempt: ``base * 2^attempt + uniform(0, jitter)`` ms.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        base_ms: Base delay in milliseconds.
        jitter_ms: Upper bound of the random jitter in milliseconds.
        rand: Source of uniform values in ``[0, 1)``.
    """
    return base_ms * (2**attempt) + rand() * jitter_ms


def _require(value: str | None, field: str, purpose: str) -> str:
    trimmed = value.strip() if value else ""
    if not trimmed:
        raise ValidationError(f"{field.capitalize()} is required for {purpose}", field=field)
    return trimmed


def _optional(value: str | None) -> str | None:
    trimmed = value.strip() if value else ""
    return trimmed or None


class EnrichmentService:
    """Orchestrates provider selection, retries and caching.

    Args:
        settings: Read-only source of provider configuration.
        cache: Response cache; None disables caching entirely.
        provider_factory: ``(provider_id, api_key) -> adapter``.
        max_retries: Total attempts per call (not additional retries).
        base_delay_ms: Backoff base in milliseconds.
        jitter_ms: Maximum random jitter added to each backoff.
        sleep: Coroutine used to wait between attempts (seconds).
        rand: Uniform ``[0, 1)`` source for jitter.
    """

    def __init__(
        self,
        settings: SettingsSource,
        cache: ResponseCache | None = None,
        provider_factory: ProviderFactory = default_provider_factory,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay_ms: float = RETRY_DELAY_BASE_MS,
        jitter_ms: float = RETRY_JITTER_MS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self._settings = settings
        self._cache = cache
        self._provider_factory = provider_factory
        self._max_retries = max_retries
        self._base_delay_ms = base_delay_ms
        self._jitter_ms = jitter_ms
        self._sleep = sleep
        self._rand = rand

    @property
    def max_retries(self) -> int:
        return self._max_retries

    # -- Provider resolution ---------------------------------------------------

    async def _resolve_provider(self) -> tuple[str, EnrichmentProvider]:
        """Build an adapter for the active provider.

        Raises:
            ConfigurationError: No active provider, unknown provider id, or
                missing API key.
        """
        settings = await self._settings.get_settings()
        if not settings.active_provider_id or not settings.providers:
            raise ConfigurationError("No active GPT provider configured")

        config = settings.find_provider(settings.active_provider_id)
        if config is None:
            raise ConfigurationError(
                f"Provider not found: {settings.active_provider_id}",
                provider_id=settings.active_provider_id,
            )
        if not config.api_key:
            raise ConfigurationError(
                f"API key not configured for provider: {config.id}",
                provider_id=config.id,
            )

        logger.info("Using provider %s", config.id)
        return config.id, self._provider_factory(config.id, config.api_key)

    async def check_api_key_status(self) -> ApiKeyStatus:
        """Report whether the active provider is usable, without raising."""
        settings = await self._settings.get_settings()
        if not settings.active_provider_id or not settings.providers:
            return ApiKeyStatus(is_configured=False, provider_id=None, provider_name=None)

        config = settings.find_provider(settings.active_provider_id)
        if config is None:
            return ApiKeyStatus(
                is_configured=False,
                provider_id=settings.active_provider_id,
                provider_name=None,
            )
        return ApiKeyStatus(
            is_configured=bool(config.api_key),
            provider_id=config.id,
            provider_name=config.name,
        )

    # -- Retry loop ------------------------------------------------------------

    async def _with_retry(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        last_error: Exception | None = None
        for attempt in range(self._max_retries):
            try:
                return await call()
            except _NON_RETRYABLE:
                raise
            except Exception as exc:
                last_error = exc
                if attempt < self._max_retries - 1:
                    delay_ms = calculate_backoff_delay(
                        attempt, self._base_delay_ms, self._jitter_ms, self._rand
                    )
                    logger.warning(
                        "%s attempt %d/%d failed (%s); retrying in %.0f ms",
                        operation,
                        attempt + 1,
                        self._max_retries,
                        exc,
                        delay_ms,
                    )
                    await self._sleep(delay_ms / 1000)
                else:
                    logger.warning(
                        "%s attempt %d/%d failed (%s)",
                        operation,
                        attempt + 1,
                        self._max_retries,
                        exc,
                    )

        description = _FAILURE_DESCRIPTIONS.get(operation, operation)
        raise RetryExhaustedError(
            f"Failed to {description} after {self._max_retries} attempts: {last_error}",
            operation=operation,
            attempts=self._max_retries,
            last_error=last_error,
        ) from last_error

    async def _invoke(self, operation: str, *args: Any) -> Any:
        """Resolve the provider, check it supports ``operation``, call it with retry."""
        provider_id, provider = await self._resolve_provider()
        method = getattr(provider, operation, None)
        if not callable(method):
            raise ConfigurationError(
                f"Provider {provider_id} does not support {operation}",
                provider_id=provider_id,
            )
        return await self._with_retry(operation, lambda: method(*args))

    # -- Enrichment ------------------------------------------------------------

    async def enrich(
        self, text: str, language: str, extra_fields: str | None = None
    ) -> EnrichmentResponse:
        """Enrich a word or phrase, serving from cache when possible.

        Requests with ``extra_fields`` bypass the cache in both directions.

        Raises:
            ValidationError: Empty text or language.
            ConfigurationError: No usable provider.
            RetryExhaustedError: Every attempt failed.
        """
        request = EnrichmentRequest.create(text, language, extra_fields)
        key = generate_cache_key(request.text, request.language)

        if request.cacheable and self._cache is not None:
            cached = await self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %r", key)
                return cached
            logger.debug("Cache miss for %r", key)

        response: EnrichmentResponse = await self._invoke(
            "enrich", request.text, request.language, request.extra_fields
        )

        if request.cacheable and self._cache is not None:
            await self._cache.set(key, response)
            logger.info("Cached enrichment for %r", key)
        return response

    # -- Translation -----------------------------------------------------------

    async def _cached_text(
        self, operation: str, key: str, args: Sequence[Any]
    ) -> TranslateResult:
        if self._cache is not None:
            cached = await self._cache.get_translation(key)
            if cached is not None:
                logger.debug("Cache hit for %r", key)
                return TranslateResult(text=cached, from_cache=True, cache_key=key)
            logger.debug("Cache miss for %r", key)

        text: str = await self._invoke(operation, *args)

        if self._cache is not None:
            await self._cache.set_translation(key, text)
            logger.info("Cached %s result for %r", operation, key)
        return TranslateResult(text=text, from_cache=False, cache_key=key)

    async def translate(
        self,
        text: str,
        from_lang: str,
        to_lang: str,
        style_id: str | None = None,
        style_prompt: str | None = None,
        context: str | None = None,
    ) -> TranslateResult:
        """Translate ``text``; results are cached per style and context.

        ``style_id`` and ``context`` take part in the cache key. The provider
        receives ``style_prompt`` with the context appended to it.
        """
        text = _require(text, "text", "translation")
        from_lang = _require(from_lang, "source language", "translation")
        to_lang = _require(to_lang, "target language", "translation")
        context = _optional(context)
        style_prompt = _optional(style_prompt)

        full_prompt = style_prompt or ""
        if context:
            instruction = f"Context for translation: {context}"
            full_prompt = f"{full_prompt}. {instruction}" if full_prompt else instruction

        key = generate_translation_cache_key(
            "translate", text, from_lang, to_lang, _optional(style_id), context
        )
        return await self._cached_text(
            "translate", key, (text, from_lang, to_lang, full_prompt or None)
        )

    async def rephrase(
        self,
        text: str,
        language: str,
        style_id: str | None = None,
        style_prompt: str | None = None,
        context: str | None = None,
    ) -> TranslateResult:
        """Rephrase ``text`` in the same language; cached like translations."""
        text = _require(text, "text", "rephrasing")
        language = _require(language, "language", "rephrasing")
        context = _optional(context)

        key = generate_translation_cache_key(
            "rephrase", text, language, language, _optional(style_id), context
        )
        return await self._cached_text(
            "rephrase", key, (text, language, _optional(style_prompt), context)
        )

    async def explain(self, text: str, language: str) -> str:
        text = _require(text, "text", "explanation")
        language = _require(language, "language", "explanation")
        return await self._invoke("explain", text, language)

    async def detect_language(self, text: str) -> str:
        text = _require(text, "text", "language detection")
        return await self._invoke("detect_language", text)

    # -- Writing assistant and conversation practice ---------------------------

    async def improve_style_prompt(self, description: str) -> str:
        description = _require(description, "description", "style improvement")
        return await self._invoke("improve_style_prompt", description)

    async def suggest_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str:
        message = _require(message, "message", "reply suggestion")
        language = _require(language, "language", "reply suggestion")
        return await self._invoke("suggest_reply", message, language, _optional(style_prompt))

    async def correct_text(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        style_prompt: str | None = None,
    ) -> str:
        text = _require(text, "text", "correction")
        source_lang = _require(source_lang, "source language", "correction")
        target_lang = _require(target_lang, "target language", "correction")
        return await self._invoke(
            "correct_text", text, source_lang, target_lang, _optional(style_prompt)
        )

    async def suggest_next_ideas(self, history: Sequence[str], language: str) -> str:
        lines = [line.strip() for line in history if line and line.strip()]
        if not lines:
            raise ValidationError(
                "Conversation history is required for suggestions", field="history"
            )
        language = _require(language, "language", "suggestions")
        return await self._invoke("suggest_next_ideas", lines, language)

    async def get_conversation_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str:
        message = _require(message, "message", "conversation reply")
        language = _require(language, "language", "conversation reply")
        return await self._invoke(
            "get_conversation_reply", message, language, _optional(style_prompt)
        )

    async def get_suggested_reply_to_bot(
        self, bot_message: str, language: str, style_prompt: str | None = None
    ) -> str:
        bot_message = _require(bot_message, "message", "suggested reply")
        language = _require(language, "language", "suggested reply")
        return await self._invoke(
            "get_suggested_reply_to_bot", bot_message, language, _optional(style_prompt)
        )

    # -- Cache management ------------------------------------------------------

    async def clear_cache(self) -> None:
        """Drop every cached enrichment."""
        if self._cache is not None:
            await self._cache.clear()

    async def clear_translation_cache(self, key: str) -> None:
        """Drop one translate/rephrase entry, e.g. before re-running it."""
        if self._cache is not None:
            await self._cache.delete_translation(key)

    async def clear_all_translations(self) -> None:
        if self._cache is not None:
            await self._cache.clear_translations()

    def close(self) -> None:
        """Release the cache's persistence handles."""
        if self._cache is not None:
            self._cache.close()


def create_service(
    config: MyVocabConfig,
    settings: SettingsSource | None = None,
    provider_factory: ProviderFactory | None = None,
) -> EnrichmentService:
    """Wire an :class:`EnrichmentService` from configuration.

    Uses the JSON-file settings and cache stores under ``general.data_dir``
    unless collaborators are passed in.
    """
    from myvocab.cache.store import JsonFileStore
    from myvocab.providers import make_provider_factory
    from myvocab.settings import SettingsStorage

    if settings is None:
        settings = SettingsStorage(config.resolve_path(config.settings.file))

    cache: ResponseCache | None = None
    if config.cache.enabled:
        cache = ResponseCache(
            JsonFileStore(config.resolve_path(config.cache.enrichment_file)),
            JsonFileStore(config.resolve_path(config.cache.translation_file)),
        )

    return EnrichmentService(
        settings=settings,
        cache=cache,
        provider_factory=provider_factory or make_provider_factory(config),
        max_retries=config.retry.max_retries,
        base_delay_ms=config.retry.base_delay_ms,
        jitter_ms=config.retry.jitter_ms,
    )
