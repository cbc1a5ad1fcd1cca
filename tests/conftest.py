"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from myvocab.cache.service import ResponseCache
from myvocab.cache.store import MemoryStore
from myvocab.config import MyVocabConfig, load_config
from myvocab.models.settings import AppSettings, ProviderConfig
from myvocab.settings import StaticSettings


@pytest.fixture
def sample_enrichment() -> dict[str, Any]:
    """A schema-valid enrichment payload for "run"."""
    return {
        "definition": "To move swiftly on foot",
        "ipa": "/rʌn/",
        "type": "verb",
        "examples": ["I run every morning.", "She ran to catch the bus."],
        "forms": {
            "past": "ran",
            "pastParticiple": "run",
            "presentParticiple": "running",
            "thirdPerson": "runs",
        },
        "senses": [
            {
                "type": "noun",
                "definition": "An act or spell of running",
                "examples": ["I went for a run."],
                "forms": {"plural": "runs"},
            }
        ],
    }


@pytest.fixture
def openai_settings() -> AppSettings:
    """OpenAI active with a key, Gemini present without one."""
    return AppSettings(
        providers=(
            ProviderConfig(id="openai", name="OpenAI", api_key="sk-test", is_active=True),
            ProviderConfig(id="gemini", name="Gemini", api_key="", is_active=False),
        ),
        active_provider_id="openai",
    )


@pytest.fixture
def settings_source(openai_settings: AppSettings) -> StaticSettings:
    return StaticSettings(openai_settings)


@pytest.fixture
def memory_cache() -> ResponseCache:
    return ResponseCache(MemoryStore(), MemoryStore())


@pytest.fixture
def default_config(tmp_path: Path) -> MyVocabConfig:
    """Config with data files redirected into a temp directory."""
    return load_config(
        user_config_path=tmp_path / "missing.toml",
        cli_overrides={"general.data_dir": str(tmp_path / "data")},
    )
