"""Tests for configuration loading and merging."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from specmint.config.init import ensure_specmint_dir, write_default_config
from specmint.config.loader import (
    MODEL_ENV_VAR,
    get_home_config_path,
    get_local_config_path,
    home_config_exists,
    load_config,
    load_yaml_config,
    local_config_exists,
    save_config,
)
from specmint.config.schema import DEFAULT_CONFIG, SpecmintConfig


class TestSpecmintConfig:
    """Tests for SpecmintConfig dataclass."""

    def test_default_config_values(self) -> None:
        """Test that DEFAULT_CONFIG has expected values."""
        assert DEFAULT_CONFIG.concurrency == 3
        assert DEFAULT_CONFIG.timeout == 30.0
        assert DEFAULT_CONFIG.extraction_depth == "standard"
        assert DEFAULT_CONFIG.output_format == "json5"
        assert DEFAULT_CONFIG.include_docs is True
        assert DEFAULT_CONFIG.author is None

    def test_merge_prefers_other_values(self) -> None:
        """Test that merge prefers values from 'other' when set."""
        base = SpecmintConfig(enrichment_model="a", concurrency=1)
        override = SpecmintConfig(enrichment_model="b", concurrency=4)
        merged = base.merge(override)

        assert merged.enrichment_model == "b"
        assert merged.concurrency == 4

    def test_merge_preserves_base_when_other_is_none(self) -> None:
        """Test that merge preserves base values when other is None."""
        base = SpecmintConfig(enrichment_model="a", author="docs-team")
        merged = base.merge(SpecmintConfig(concurrency=2))

        assert merged.enrichment_model == "a"
        assert merged.author == "docs-team"
        assert merged is not base

    def test_to_dict_excludes_none(self) -> None:
        """Test that to_dict excludes None values."""
        data = SpecmintConfig(concurrency=4).to_dict()
        assert data == {"concurrency": 4}

    def test_from_dict_coerces_and_drops(self) -> None:
        """Test that from_dict coerces types and drops invalid values."""
        config = SpecmintConfig.from_dict(
            {
                "concurrency": "4",
                "timeout": "12.5",
                "extraction_depth": "deep",
                "output_format": "yaml",
                "include_docs": 0,
                "unknown_key": "value",
            }
        )

        assert config.concurrency == 4
        assert config.timeout == 12.5
        assert config.extraction_depth is None
        assert config.output_format == "yaml"
        assert config.include_docs is False
        assert not hasattr(config, "unknown_key")


class TestConfigPaths:
    """Tests for config path functions."""

    def test_get_home_config_path(self) -> None:
        """Test that home config path is in ~/.specmint/."""
        path = get_home_config_path()
        assert path.name == "config.yaml"
        assert path.parent.name == ".specmint"
        assert path.parent.parent == Path.home()

    def test_get_local_config_path(self, tmp_path: Path) -> None:
        """Test that local config path is in ./.specmint/."""
        with patch("specmint.config.loader.Path.cwd", return_value=tmp_path):
            path = get_local_config_path()
            assert path.parent.name == ".specmint"
            assert path.parent.parent == tmp_path


class TestConfigLoading:
    """Tests for config file loading."""

    def test_load_yaml_config_returns_dict(self, tmp_path: Path) -> None:
        """Test that load_yaml_config returns a dictionary."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("concurrency: 4\nauthor: docs\n")

        assert load_yaml_config(config_file) == {"concurrency": 4, "author": "docs"}

    def test_load_yaml_config_returns_none_for_missing_empty_invalid(
        self, tmp_path: Path
    ) -> None:
        """Test that load_yaml_config returns None for unusable files."""
        assert load_yaml_config(tmp_path / "nonexistent.yaml") is None

        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        assert load_yaml_config(empty) is None

        invalid = tmp_path / "invalid.yaml"
        invalid.write_text("invalid: yaml: content: [")
        assert load_yaml_config(invalid) is None

    def test_config_exists(self, tmp_path: Path) -> None:
        """Test home_config_exists and local_config_exists."""
        config_file = tmp_path / ".specmint" / "config.yaml"

        with (
            patch("specmint.config.loader.get_home_config_path", return_value=config_file),
            patch("specmint.config.loader.get_local_config_path", return_value=config_file),
        ):
            assert home_config_exists() is False
            config_file.parent.mkdir(parents=True)
            config_file.write_text("concurrency: 4\n")
            assert home_config_exists() is True
            assert local_config_exists() is True


class TestConfigMerging:
    """Tests for config loading and merging."""

    @pytest.fixture
    def config_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        home_config = tmp_path / "home" / ".specmint" / "config.yaml"
        local_config = tmp_path / "local" / ".specmint" / "config.yaml"
        monkeypatch.delenv(MODEL_ENV_VAR, raising=False)
        with (
            patch("specmint.config.loader.get_home_config_path", return_value=home_config),
            patch("specmint.config.loader.get_local_config_path", return_value=local_config),
        ):
            yield home_config, local_config

    def test_defaults_when_no_files(self, config_paths: tuple[Path, Path]) -> None:
        """Test that load_config uses defaults when no config files exist."""
        assert load_config() == DEFAULT_CONFIG

    def test_local_overrides_home(self, config_paths: tuple[Path, Path]) -> None:
        """Test that local config overrides home config values."""
        home_config, local_config = config_paths
        home_config.parent.mkdir(parents=True)
        home_config.write_text("concurrency: 2\nauthor: home\n")
        local_config.parent.mkdir(parents=True)
        local_config.write_text("concurrency: 8\n")

        config = load_config()

        assert config.author == "home"
        assert config.concurrency == 8
        assert config.output_format == "json5"

    def test_env_overrides_files(
        self, config_paths: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the model environment variable has the highest precedence."""
        home_config, _ = config_paths
        home_config.parent.mkdir(parents=True)
        home_config.write_text("enrichment_model: from-file\n")
        monkeypatch.setenv(MODEL_ENV_VAR, "from-env")

        assert load_config().enrichment_model == "from-env"


class TestConfigSaving:
    """Tests for config file saving and initialization."""

    def test_save_config_excludes_none_values(self, tmp_path: Path) -> None:
        """Test that save_config creates parents and skips None values."""
        config_file = tmp_path / "deep" / ".specmint" / "config.yaml"
        save_config(SpecmintConfig(concurrency=4), config_file)

        with config_file.open() as f:
            data = yaml.safe_load(f)
        assert data == {"concurrency": 4}

    def test_ensure_specmint_dir_local(self, tmp_path: Path) -> None:
        """Test that the local directory and templates folder are created."""
        with patch("specmint.config.init.Path.cwd", return_value=tmp_path):
            path = ensure_specmint_dir(local=True)

        assert path == tmp_path / ".specmint"
        assert (path / "templates").is_dir()

    def test_write_default_config_respects_existing(self, tmp_path: Path) -> None:
        """Test that an existing config is kept unless overwrite is set."""
        config_file = tmp_path / ".specmint" / "config.yaml"
        with (
            patch("specmint.config.init.Path.cwd", return_value=tmp_path),
            patch("specmint.config.init.get_local_config_path", return_value=config_file),
        ):
            assert write_default_config(local=True) == config_file
            config_file.write_text("concurrency: 9\n")
            assert write_default_config(local=True) is None
            assert "concurrency: 9" in config_file.read_text()
            assert write_default_config(local=True, overwrite=True) == config_file

        assert yaml.safe_load(config_file.read_text())["concurrency"] == 3
