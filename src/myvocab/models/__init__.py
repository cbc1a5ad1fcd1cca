"""Data models for enrichment results and provider settings."""

from myvocab.models.enrichment import (
    ApiKeyStatus,
    EnrichmentRequest,
    EnrichmentResponse,
    TranslateResult,
    WordSense,
)
from myvocab.models.settings import AppSettings, ProviderConfig, default_settings

__all__ = [
    "ApiKeyStatus",
    "AppSettings",
    "EnrichmentRequest",
    "EnrichmentResponse",
    "ProviderConfig",
    "TranslateResult",
    "WordSense",
    "default_settings",
]
