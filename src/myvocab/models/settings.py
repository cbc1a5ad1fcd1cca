"""Provider configuration and the application settings aggregate."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

PROVIDER_IDS: tuple[str, ...] = ("openai", "gemini")

_DISPLAY_NAMES: dict[str, str] = {
    "openai": "OpenAI",
    "gemini": "Gemini",
}


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """One upstream provider as configured by the user.

    An empty ``api_key`` means "not configured".
    """

    id: str
    name: str
    api_key: str = ""
    is_active: bool = False

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return (
            f"ProviderConfig(id={self.id!r}, name={self.name!r}, "
            f"api_key={masked!r}, is_active={self.is_active!r})"
        )


@dataclass(frozen=True, slots=True)
class AppSettings:
    """Settings aggregate owning the provider list."""

    providers: tuple[ProviderConfig, ...] = ()
    active_provider_id: str | None = None
    default_language: str = "en"

    def find_provider(self, provider_id: str) -> ProviderConfig | None:
        """Return the provider with ``provider_id``, or None."""
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None

    def with_provider(self, updated: ProviderConfig) -> AppSettings:
        """Return a copy with ``updated`` replacing the provider of the same id."""
        providers = tuple(updated if p.id == updated.id else p for p in self.providers)
        if self.find_provider(updated.id) is None:
            providers = (*providers, updated)
        return replace(self, providers=providers)

    def with_active(self, provider_id: str) -> AppSettings:
        """Return a copy with ``provider_id`` as the active provider."""
        providers = tuple(replace(p, is_active=p.id == provider_id) for p in self.providers)
        return replace(self, providers=providers, active_provider_id=provider_id)

    def to_dict(self, include_keys: bool = True) -> dict[str, Any]:
        """Serialize to dictionary; ``include_keys=False`` drops API keys."""
        providers: list[dict[str, Any]] = []
        for p in self.providers:
            entry: dict[str, Any] = {"id": p.id, "name": p.name, "is_active": p.is_active}
            if include_keys:
                entry["api_key"] = p.api_key
            providers.append(entry)
        return {
            "providers": providers,
            "active_provider_id": self.active_provider_id,
            "default_language": self.default_language,
        }


def display_name(provider_id: str) -> str:
    """Human-readable name for a provider id."""
    return _DISPLAY_NAMES.get(provider_id, provider_id)


def default_settings() -> AppSettings:
    """Settings on first use: every known provider, no keys, OpenAI active."""
    return AppSettings(
        providers=tuple(
            ProviderConfig(id=pid, name=display_name(pid)) for pid in PROVIDER_IDS
        ),
        active_provider_id="openai",
        default_language="en",
    )
