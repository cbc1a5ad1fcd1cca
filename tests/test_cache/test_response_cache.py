"""Tests for cache keys and the response cache."""

from __future__ import annotations

from typing import Any

from myvocab.cache.service import (
    NO_CONTEXT_TOKEN,
    ResponseCache,
    generate_cache_key,
    generate_translation_cache_key,
    hash_context,
)
from myvocab.cache.store import MemoryStore
from myvocab.models.enrichment import EnrichmentResponse

# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestCacheKeys:
    """Key derivation."""

    def test_enrichment_key_normalizes(self) -> None:
        assert generate_cache_key("  Serendipity ", " EN") == "serendipity_en"

    def test_enrichment_key_idempotent(self) -> None:
        assert generate_cache_key("Run", "en") == generate_cache_key("run ", "EN")

    def test_translation_key_layout(self) -> None:
        key = generate_translation_cache_key("translate", " Hello ", "EN", "fr")
        assert key == f"translate:en:fr:none:{NO_CONTEXT_TOKEN}:hello"

    def test_translation_key_with_style(self) -> None:
        key = generate_translation_cache_key("translate", "hi", "en", "fr", style_id="formal")
        assert key.split(":")[3] == "formal"

    def test_operation_prefix_separates_namespaces(self) -> None:
        translate = generate_translation_cache_key("translate", "hi", "en", "en")
        rephrase = generate_translation_cache_key("rephrase", "hi", "en", "en")
        assert translate != rephrase
        assert translate != generate_cache_key("hi", "en")

    def test_context_changes_key(self) -> None:
        a = generate_translation_cache_key("translate", "bank", "en", "fr", context="river")
        b = generate_translation_cache_key("translate", "bank", "en", "fr", context="money")
        assert a != b


class TestHashContext:
    """djb2 context hashing."""

    def test_empty_context(self) -> None:
        assert hash_context(None) == NO_CONTEXT_TOKEN
        assert hash_context("   ") == NO_CONTEXT_TOKEN

    def test_known_value(self) -> None:
        # djb2("a") = 5381 * 33 + 97 = 177670 -> base36 "3t3a"
        assert hash_context("a") == "3t3a"

    def test_normalized_before_hashing(self) -> None:
        assert hash_context(" River Bank ") == hash_context("river bank")

    def test_base36_alphabet(self) -> None:
        token = hash_context("a fairly long context about finance and banking")
        assert token.isalnum()
        assert token == token.lower()


# ---------------------------------------------------------------------------
# ResponseCache
# ---------------------------------------------------------------------------


class TestResponseCache:
    """Enrichment and translation namespaces."""

    async def test_enrichment_roundtrip(
        self, memory_cache: ResponseCache, sample_enrichment: dict[str, Any]
    ) -> None:
        value = EnrichmentResponse.from_dict(sample_enrichment)
        await memory_cache.set("run_en", value)
        assert await memory_cache.get("run_en") == value
        assert await memory_cache.has("run_en") is True

    async def test_entry_envelope(self, sample_enrichment: dict[str, Any]) -> None:
        store = MemoryStore()
        cache = ResponseCache(store, MemoryStore())
        await cache.set("run_en", EnrichmentResponse.from_dict(sample_enrichment))

        entry = await store.get("run_en")
        assert entry["key"] == "run_en"
        assert entry["value"]["ipa"] == "/rʌn/"
        assert "created_at" in entry

    async def test_invalid_entry_discarded(self) -> None:
        store = MemoryStore()
        await store.set("run_en", {"key": "run_en", "value": {"definition": "x"}})
        cache = ResponseCache(store, MemoryStore())

        assert await cache.get("run_en") is None
        assert await store.get("run_en") is None

    async def test_miss(self, memory_cache: ResponseCache) -> None:
        assert await memory_cache.get("absent_en") is None
        assert await memory_cache.has("absent_en") is False

    async def test_translation_namespace(self, memory_cache: ResponseCache) -> None:
        await memory_cache.set_translation("translate:en:fr:none:noctx:hi", "salut")
        assert await memory_cache.get_translation("translate:en:fr:none:noctx:hi") == "salut"
        assert await memory_cache.get("translate:en:fr:none:noctx:hi") is None

        await memory_cache.delete_translation("translate:en:fr:none:noctx:hi")
        assert await memory_cache.get_translation("translate:en:fr:none:noctx:hi") is None

    async def test_clear_is_per_namespace(
        self, memory_cache: ResponseCache, sample_enrichment: dict[str, Any]
    ) -> None:
        await memory_cache.set("run_en", EnrichmentResponse.from_dict(sample_enrichment))
        await memory_cache.set_translation("k", "v")

        await memory_cache.clear()
        assert await memory_cache.get("run_en") is None
        assert await memory_cache.get_translation("k") == "v"

        await memory_cache.clear_translations()
        assert await memory_cache.get_translation("k") is None
