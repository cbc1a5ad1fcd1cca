"""Tests for the layered configuration system."""

from __future__ import annotations

from pathlib import Path

import pytest

from myvocab.config import (
    MyVocabConfig,
    _apply_dot_override,
    _coerce_value,
    _deep_merge,
    load_config,
)
from myvocab.core.errors import ConfigurationError


class TestDeepMerge:
    """_deep_merge behavior."""

    def test_flat_override(self) -> None:
        """Scalar values in override replace base."""
        result = _deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Nested dicts are merged recursively."""
        result = _deep_merge({"retry": {"max_retries": 3, "jitter_ms": 500}}, {"retry": {"max_retries": 5}})
        assert result == {"retry": {"max_retries": 5, "jitter_ms": 500}}

    def test_base_unmodified(self) -> None:
        """Original base dict is not mutated."""
        base = {"a": {"x": 1}}
        _deep_merge(base, {"a": {"y": 2}})
        assert base == {"a": {"x": 1}}


class TestCoerceValue:
    """_coerce_value type detection."""

    def test_booleans(self) -> None:
        assert _coerce_value("true") is True
        assert _coerce_value("False") is False

    def test_integer(self) -> None:
        assert _coerce_value("42") == 42
        assert isinstance(_coerce_value("42"), int)

    def test_float(self) -> None:
        assert _coerce_value("0.5") == 0.5

    def test_string(self) -> None:
        assert _coerce_value("gpt-4o") == "gpt-4o"


class TestDotOverride:
    """_apply_dot_override nesting."""

    def test_creates_missing_sections(self) -> None:
        raw: dict[str, object] = {}
        _apply_dot_override(raw, "openai.model", "gpt-4o")
        assert raw == {"openai": {"model": "gpt-4o"}}


class TestLoadConfig:
    """load_config layering."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Without user config the documented defaults apply."""
        cfg = load_config(user_config_path=tmp_path / "none.toml")
        assert isinstance(cfg, MyVocabConfig)
        assert cfg.retry.max_retries == 3
        assert cfg.retry.base_delay_ms == 1000
        assert cfg.retry.jitter_ms == 500
        assert cfg.openai.model == "gpt-4o-mini"
        assert cfg.gemini.model == "gemini-2.0-flash"
        assert cfg.cache.enabled is True

    def test_user_file_overrides_defaults(self, tmp_path: Path) -> None:
        user = tmp_path / "config.toml"
        user.write_text('[retry]\nmax_retries = 5\n\n[openai]\nmodel = "gpt-4o"\n')
        cfg = load_config(user_config_path=user)
        assert cfg.retry.max_retries == 5
        assert cfg.openai.model == "gpt-4o"
        assert cfg.retry.base_delay_ms == 1000

    def test_cli_overrides_win(self, tmp_path: Path) -> None:
        user = tmp_path / "config.toml"
        user.write_text("[retry]\nmax_retries = 5\n")
        cfg = load_config(user_config_path=user, cli_overrides={"retry.max_retries": "2"})
        assert cfg.retry.max_retries == 2

    def test_unknown_key_is_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match=r"\[retry\]"):
            load_config(
                user_config_path=tmp_path / "none.toml",
                cli_overrides={"retry.attempts": "4"},
            )

    def test_config_is_frozen(self, tmp_path: Path) -> None:
        cfg = load_config(user_config_path=tmp_path / "none.toml")
        with pytest.raises(AttributeError):
            cfg.retry.max_retries = 10  # type: ignore[misc]


class TestResolvePath:
    """MyVocabConfig.resolve_path."""

    def test_relative_names_resolve_under_data_dir(self, default_config: MyVocabConfig) -> None:
        path = default_config.resolve_path("gpt_cache.json")
        assert path == default_config.general.data_path / "gpt_cache.json"

    def test_absolute_paths_are_kept(self, default_config: MyVocabConfig, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere.json"
        assert default_config.resolve_path(str(target)) == target
