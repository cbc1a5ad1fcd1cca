"""Layered TOML configuration with typed dataclass mapping.

Priority stack (highest wins):
    1. Hardcoded defaults (MyVocabConfig())
    2. config/default.toml (bundled)
    3. ~/.config/myvocab/config.toml (user config)
    4. CLI overrides (dot-notation)
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from myvocab.core.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Typed config tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GeneralConfig:
    """Top-level general settings."""

    log_level: str = "warning"
    data_dir: str = "~/.local/share/myvocab"

    @property
    def data_path(self) -> Path:
        """``data_dir`` with ``~`` expanded."""
        return Path(self.data_dir).expanduser()


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Retry/backoff policy applied by the enrichment service."""

    max_retries: int = 3
    base_delay_ms: int = 1000
    jitter_ms: int = 500


@dataclass(frozen=True, slots=True)
class OpenAIConfig:
    """OpenAI-style chat completions endpoint."""

    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout_seconds: int = 30


@dataclass(frozen=True, slots=True)
class GeminiConfig:
    """Gemini-style generateContent endpoint."""

    base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    model: str = "gemini-2.0-flash"
    timeout_seconds: int = 30


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Response cache files, relative to ``general.data_dir`` unless absolute."""

    enabled: bool = True
    enrichment_file: str = "gpt_cache.json"
    translation_file: str = "translation_cache.json"


@dataclass(frozen=True, slots=True)
class SettingsConfig:
    """Location of the persisted settings aggregate."""

    file: str = "settings.json"


@dataclass(frozen=True, slots=True)
class MyVocabConfig:
    """Root configuration node."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    settings: SettingsConfig = field(default_factory=SettingsConfig)

    def resolve_path(self, name: str) -> Path:
        """Resolve a configured file name against the data directory."""
        path = Path(name).expanduser()
        if path.is_absolute():
            return path
        return self.general.data_path / path


# ---------------------------------------------------------------------------
# Config loading helpers
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Lists replace, dicts recurse."""
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _coerce_value(s: str) -> bool | int | float | str:
    """Coerce a CLI string value to its typed equivalent."""
    if s.lower() == "true":
        return True
    if s.lower() == "false":
        return False
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        pass
    return s


def _apply_dot_override(raw: dict[str, Any], dot_key: str, str_value: str) -> None:
    """Apply a dot-notation CLI override into the raw config dict.

    Example: _apply_dot_override(raw, "retry.max_retries", "5")
    sets raw["retry"]["max_retries"] = 5
    """
    parts = dot_key.split(".")
    target = raw
    for part in parts[:-1]:
        if part not in target:
            target[part] = {}
        target = target[part]
    target[parts[-1]] = _coerce_value(str_value)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file, returning empty dict if not found."""
    if not path.is_file():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def _load_bundled_toml(filename: str) -> dict[str, Any]:
    """Load a TOML file bundled in the config/ directory relative to project root."""
    current = Path(__file__).resolve().parent
    for _ in range(4):
        config_path = current / "config" / filename
        if config_path.is_file():
            with open(config_path, "rb") as f:
                return tomllib.load(f)
        current = current.parent
    return {}


def _section(cls: type[Any], name: str, raw: dict[str, Any]) -> Any:
    """Build one config section, reporting unknown keys as a config error."""
    try:
        return cls(**raw.get(name, {}))
    except TypeError as exc:
        raise ConfigurationError(f"Invalid [{name}] configuration: {exc}") from exc


def _build_config(raw: dict[str, Any]) -> MyVocabConfig:
    """Map a merged raw dict to the typed MyVocabConfig tree."""
    return MyVocabConfig(
        general=_section(GeneralConfig, "general", raw),
        retry=_section(RetryConfig, "retry", raw),
        openai=_section(OpenAIConfig, "openai", raw),
        gemini=_section(GeminiConfig, "gemini", raw),
        cache=_section(CacheConfig, "cache", raw),
        settings=_section(SettingsConfig, "settings", raw),
    )


def load_config(
    user_config_path: Path | None = None,
    cli_overrides: dict[str, str] | None = None,
) -> MyVocabConfig:
    """Load configuration with the 4-layer priority stack.

    Args:
        user_config_path: Path to user config TOML. Defaults to
            ~/.config/myvocab/config.toml.
        cli_overrides: Dot-notation key→value pairs from CLI flags.

    Returns:
        Fully resolved, typed MyVocabConfig.

    Raises:
        ConfigurationError: A section contains keys the config tree does not know.
    """
    # Layer 1: hardcoded defaults (implicit via dataclass defaults)
    # Layer 2: bundled default.toml
    raw = _load_bundled_toml("default.toml")

    # Layer 3: user config
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "myvocab" / "config.toml"
    raw = _deep_merge(raw, _load_toml_file(user_config_path))

    # Layer 4: CLI overrides
    if cli_overrides:
        for dot_key, str_value in cli_overrides.items():
            _apply_dot_override(raw, dot_key, str_value)

    return _build_config(raw)
