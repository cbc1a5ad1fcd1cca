"""Response caching over pluggable key-value stores."""

from myvocab.cache.service import (
    ResponseCache,
    generate_cache_key,
    generate_translation_cache_key,
    hash_context,
)
from myvocab.cache.store import JsonFileStore, MemoryStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "ResponseCache",
    "generate_cache_key",
    "generate_translation_cache_key",
    "hash_context",
]
