"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence: defaults < global yaml < repo yaml < env < kwargs
- load_config(config_file=...) replacing the repo yaml
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from docplane.config.loader import GLOBAL_CONFIG_PATH, _deep_merge, _load_yaml, load_config
from docplane.config.models import NamingConfig
from docplane.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("naming:\n  max_pairs: 10\n")
        assert _load_yaml(yaml_file) == {"naming": {"max_pairs": 10}}

    def test_returns_empty_for_yaml_null(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "null.yaml"
        yaml_file.write_text("null\n")
        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("docs:\n  base_dir: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        """A top-level list is not a config."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    def test_nested_merge(self) -> None:
        base = {"naming": {"warn_at_pairs": 8, "max_pairs": 12}}
        override = {"naming": {"max_pairs": 20}}
        assert _deep_merge(base, override) == {"naming": {"warn_at_pairs": 8, "max_pairs": 20}}

    def test_override_replaces_non_dict(self) -> None:
        base: dict[str, Any] = {"a": {"nested": 1}}
        override: dict[str, Any] = {"a": "simple"}
        assert _deep_merge(base, override) == {"a": "simple"}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        _deep_merge(base, {"b": 2})
        assert base == {"a": 1}


def _repo_config(root: Path, text: str) -> None:
    config_dir = root / ".docplane"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(text)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        with patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)
        assert config.docs.base_dir == "tasks"
        assert config.terminology.global_scope_paths == ["docs/GLOSSARY.md", "docs/terms/"]
        assert config.index.output_path == ".docplane/references.json"

    def test_loads_repo_config(self, tmp_path: Path) -> None:
        _repo_config(tmp_path, "docs:\n  base_dir: docs/tasks\n")

        with patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)
        assert config.docs.base_dir == "docs/tasks"
        assert config.docs.features == "features"

    def test_repo_config_overrides_global(self, tmp_path: Path) -> None:
        """Global and repo YAML merge key by key."""
        global_file = tmp_path / "global.yaml"
        global_file.write_text("naming:\n  warn_at_pairs: 5\n  max_pairs: 9\n")
        _repo_config(tmp_path, "naming:\n  max_pairs: 15\n")

        with patch("docplane.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)
        assert (config.naming.warn_at_pairs, config.naming.max_pairs) == (5, 15)

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        _repo_config(tmp_path, "index:\n  max_workers: 2\n")

        with (
            patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"DOCPLANE__INDEX__MAX_WORKERS": "6"}),
        ):
            config = load_config(tmp_path)
        assert config.index.max_workers == 6

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        with (
            patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"DOCPLANE__NAMING__MAX_PAIRS": "20"}),
        ):
            config = load_config(tmp_path, naming=NamingConfig(warn_at_pairs=3, max_pairs=4))
        assert config.naming.max_pairs == 4

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        _repo_config(tmp_path, "index:\n  max_workers: 0\n")

        with (
            patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)
        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert "max_workers" in exc_info.value.details["field"]

    def test_explicit_config_file_replaces_repo_config(self, tmp_path: Path) -> None:
        _repo_config(tmp_path, "index:\n  max_workers: 2\n")
        explicit = tmp_path / "ci.yaml"
        explicit.write_text("naming:\n  max_pairs: 10\n")

        with patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, config_file=explicit)
        assert config.naming.max_pairs == 10
        assert config.index.max_workers == 4

    def test_raises_file_not_found_for_missing_explicit_config(self, tmp_path: Path) -> None:
        with (
            patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path, config_file=tmp_path / "missing.yaml")
        assert exc_info.value.code is ErrorCode.CONFIG_FILE_NOT_FOUND
        assert exc_info.value.is_fatal_io

    def test_loaded_config_is_frozen(self, tmp_path: Path) -> None:
        """A run works from one immutable snapshot."""
        with patch("docplane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)
        with pytest.raises(ValueError):
            config.naming.max_pairs = 99  # type: ignore[misc]


class TestGlobalConfigPath:
    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "docplane" in str(GLOBAL_CONFIG_PATH)
