"""Settings persistence for provider credentials and preferences.

The enrichment service only ever reads settings through
:class:`~myvocab.core.protocols.SettingsSource`; mutation happens here, driven
by user actions (the ``provider`` CLI commands).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from myvocab.core.errors import DecryptionError
from myvocab.models.settings import AppSettings, ProviderConfig, default_settings, display_name

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from myvocab.core.protocols import SecretCipher

logger = logging.getLogger(__name__)

ENV_KEY_TEMPLATE = "MYVOCAB_{provider}_API_KEY"
SETTINGS_FILE_MODE = 0o600


def _env_key(provider_id: str, environ: Mapping[str, str]) -> str:
    return environ.get(ENV_KEY_TEMPLATE.format(provider=provider_id.upper()), "")


class StaticSettings:
    """In-memory settings source, for embedding and tests."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings if settings is not None else default_settings()

    async def get_settings(self) -> AppSettings:
        return self._settings

    async def save_settings(self, settings: AppSettings) -> None:
        self._settings = settings


class SettingsStorage:
    """JSON-file settings store with API keys passed through a cipher.

    Stored layout::

        {"api_keys": {"openai": "<ciphertext>"},
         "settings": {"providers": [...], "active_provider_id": "openai",
                      "default_language": "en"}}

    A missing or unreadable file yields :func:`default_settings`. A key that
    fails to decrypt reads back as empty ("not configured"). Empty stored
    keys are filled from ``MYVOCAB_<PROVIDER>_API_KEY`` at read time.

    Args:
        path: Settings file location.
        cipher: Optional encryption for keys at rest; keys are stored as given
            when omitted.
        environ: Environment mapping (defaults to ``os.environ``).
    """

    def __init__(
        self,
        path: Path,
        cipher: SecretCipher | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._path = path
        self._cipher = cipher
        self._environ = environ if environ is not None else os.environ

    def has_settings(self) -> bool:
        return self._path.is_file()

    def _read_raw(self) -> dict[str, Any] | None:
        if not self._path.is_file():
            return None
        try:
            with open(self._path, encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return None
        if not isinstance(raw, dict) or not isinstance(raw.get("settings"), dict):
            logger.warning("Ignoring malformed settings file %s", self._path)
            return None
        return raw

    def _decrypt(self, provider_id: str, stored: str) -> str:
        if not stored or self._cipher is None:
            return stored
        try:
            return self._cipher.decrypt(stored)
        except DecryptionError:
            logger.warning("Stored API key for %s could not be decrypted", provider_id)
            return ""

    def _with_env_keys(self, settings: AppSettings) -> AppSettings:
        providers = tuple(
            p if p.api_key else replace(p, api_key=_env_key(p.id, self._environ))
            for p in settings.providers
        )
        return replace(settings, providers=providers)

    async def get_settings(self) -> AppSettings:
        """Load settings, decrypting API keys and applying environment keys."""
        return self._with_env_keys(self._load())

    def _load(self) -> AppSettings:
        raw = self._read_raw()
        if raw is None:
            return default_settings()

        body = raw["settings"]
        keys = raw.get("api_keys") or {}
        providers: list[ProviderConfig] = []
        for entry in body.get("providers", []):
            pid = str(entry.get("id", ""))
            if not pid:
                continue
            providers.append(
                ProviderConfig(
                    id=pid,
                    name=str(entry.get("name") or display_name(pid)),
                    api_key=self._decrypt(pid, str(keys.get(pid, ""))),
                    is_active=bool(entry.get("is_active", False)),
                )
            )
        return AppSettings(
            providers=tuple(providers),
            active_provider_id=body.get("active_provider_id"),
            default_language=str(body.get("default_language") or "en"),
        )

    async def save_settings(self, settings: AppSettings) -> None:
        """Persist settings atomically, encrypting non-empty API keys."""
        keys: dict[str, str] = {}
        for p in settings.providers:
            if p.api_key:
                keys[p.id] = self._cipher.encrypt(p.api_key) if self._cipher else p.api_key
        data = {"api_keys": keys, "settings": settings.to_dict(include_keys=False)}

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.unlink(missing_ok=True)
        # Owner-only: keys may be stored unencrypted.
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, SETTINGS_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self._path)

    async def clear_settings(self) -> None:
        if self._path.is_file():
            self._path.unlink()

    # -- User actions ----------------------------------------------------------

    async def set_api_key(self, provider_id: str, api_key: str) -> AppSettings:
        """Store a key for ``provider_id``; an empty key clears it."""
        settings = self._load()
        current = settings.find_provider(provider_id)
        if current is None:
            current = ProviderConfig(id=provider_id, name=display_name(provider_id))
        settings = settings.with_provider(replace(current, api_key=api_key.strip()))
        await self.save_settings(settings)
        return settings

    async def set_active_provider(self, provider_id: str) -> AppSettings:
        settings = self._load().with_active(provider_id)
        await self.save_settings(settings)
        return settings
