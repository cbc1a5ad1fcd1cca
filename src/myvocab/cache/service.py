"""Response cache for enrichment and translation results.

Two logical namespaces, each on its own store:

* enrichment -- ``"<text>_<language>"`` keys, values are enrichment dicts.
* translation -- ``"<operation>:<from>:<to>:<style>:<context-hash>:<text>"``
  keys, values are plain strings.

Only validated enrichment results and successful provider answers are ever
stored; callers write after success and never on a failure path.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from myvocab.enrichment.validation import is_valid_enrichment_response
from myvocab.models.enrichment import EnrichmentResponse

if TYPE_CHECKING:
    from myvocab.core.protocols import KeyValueStore

logger = logging.getLogger(__name__)

NO_CONTEXT_TOKEN = "noctx"


def _normalize(value: str) -> str:
    return value.strip().lower()


def generate_cache_key(text: str, language: str) -> str:
    """Enrichment key: ``normalize(text) + "_" + normalize(language)``.

    >>> generate_cache_key("  Serendipity ", "EN")
    'serendipity_en'
    """
    return f"{_normalize(text)}_{_normalize(language)}"


def hash_context(context: str | None) -> str:
    """djb2 hash of the normalized context as a short base-36 token."""
    normalized = _normalize(context) if context else ""
    if not normalized:
        return NO_CONTEXT_TOKEN
    h = 5381
    for ch in normalized:
        h = (h * 33 + ord(ch)) & 0xFFFFFFFF
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    token = ""
    while h:
        h, rem = divmod(h, 36)
        token = digits[rem] + token
    return token or "0"


def generate_translation_cache_key(
    operation: str,
    text: str,
    from_lang: str,
    to_lang: str,
    style_id: str | None = None,
    context: str | None = None,
) -> str:
    """Composite key for translate/rephrase results.

    The operation prefix keeps these keys disjoint from enrichment keys.
    """
    style = style_id.strip() if style_id and style_id.strip() else "none"
    return ":".join(
        [
            operation,
            _normalize(from_lang),
            _normalize(to_lang),
            style,
            hash_context(context),
            _normalize(text),
        ]
    )


def _entry(key: str, value: Any) -> dict[str, Any]:
    return {"key": key, "value": value, "created_at": datetime.now(UTC).isoformat()}


class ResponseCache:
    """Cache component wrapping two key-value stores.

    Args:
        enrichment_store: Store for enrichment results.
        translation_store: Store for translate/rephrase strings.
    """

    def __init__(
        self,
        enrichment_store: KeyValueStore,
        translation_store: KeyValueStore,
    ) -> None:
        self._enrichment = enrichment_store
        self._translation = translation_store

    # -- Enrichment namespace --------------------------------------------------

    async def get(self, key: str) -> EnrichmentResponse | None:
        """Return the cached enrichment for ``key``, or None on a miss.

        An entry that no longer passes validation is discarded and reported
        as a miss.
        """
        entry = await self._enrichment.get(key)
        if entry is None:
            return None
        value = entry.get("value") if isinstance(entry, dict) else None
        if not is_valid_enrichment_response(value):
            logger.warning("Discarding malformed cache entry %r", key)
            await self._enrichment.delete(key)
            return None
        return EnrichmentResponse.from_dict(value)

    async def set(self, key: str, value: EnrichmentResponse) -> None:
        """Store ``value`` under ``key``, overwriting any previous entry."""
        await self._enrichment.set(key, _entry(key, value.to_dict()))

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def clear(self) -> None:
        """Drop every enrichment entry."""
        await self._enrichment.clear()

    # -- Translation namespace -------------------------------------------------

    async def get_translation(self, key: str) -> str | None:
        entry = await self._translation.get(key)
        if isinstance(entry, dict) and isinstance(entry.get("value"), str):
            return entry["value"]
        return None

    async def set_translation(self, key: str, text: str) -> None:
        await self._translation.set(key, _entry(key, text))

    async def delete_translation(self, key: str) -> None:
        await self._translation.delete(key)

    async def clear_translations(self) -> None:
        """Bulk clear of the translation namespace, for full resets."""
        await self._translation.clear()

    def close(self) -> None:
        """Release the underlying store handles. Safe to call twice."""
        self._enrichment.close()
        self._translation.close()
