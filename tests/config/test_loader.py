"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- load_config() precedence: kwargs > env vars > YAML file > defaults
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lcovtrace.config.loader import DEFAULT_CONFIG_NAME, _load_yaml, load_config
from lcovtrace.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads valid YAML content."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("logging:\n  level: DEBUG\n")

        assert _load_yaml(yaml_file) == {"logging": {"level": "DEBUG"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        """Returns empty dict for empty file."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("merge: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_raises_config_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestLoadConfig:
    """Tests for load_config precedence."""

    @pytest.fixture(autouse=True)
    def _isolate(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        for var in (
            "LCOVTRACE__LOGGING__LEVEL",
            "LCOVTRACE__PARSER__ENCODING",
            "LCOVTRACE__MERGE__ORPHAN_RECORDS",
        ):
            monkeypatch.delenv(var, raising=False)

    def test_defaults_without_file(self) -> None:
        config = load_config()

        assert config.merge.orphan_records == "attribute"
        assert config.parser.encoding == "utf-8"

    def test_reads_default_file_from_cwd(self, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_NAME).write_text("merge:\n  orphan_records: ignore\n")

        assert load_config().merge.orphan_records == "ignore"

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("parser:\n  encoding: latin-1\n")

        assert load_config(path).parser.encoding == "latin-1"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("logging:\n  level: ERROR\n")
        monkeypatch.setenv("LCOVTRACE__LOGGING__LEVEL", "DEBUG")

        assert load_config(path).logging.level == "DEBUG"

    def test_kwargs_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LCOVTRACE__MERGE__ORPHAN_RECORDS", "ignore")

        config = load_config(merge={"orphan_records": "attribute"})

        assert config.merge.orphan_records == "attribute"

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("merge:\n  orphan_records: drop\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "merge" in exc_info.value.details["field"]
