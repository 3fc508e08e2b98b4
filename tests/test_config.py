"""Tests for zephyr.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from zephyr.config import CompileOptions, ConfigError, ZephyrConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ZephyrConfig)
    assert config.root == tmp_path.resolve()
    assert config.options == CompileOptions()
    assert config.options.minify_targets() == (False, False, False)


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".zephyr.yml"
    config_file.write_text(
        """
minify: true
minify_js: "no"
dev: yes
props:
  title: "Hello"
  count: 3
leakage:
  enabled: [global-selector]
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    options = config.options

    assert options.minify is True
    assert options.minify_targets() == (True, True, False)
    assert options.dev is True
    assert options.props == {"title": "Hello", "count": 3}
    assert options.leakage_checks == ["global-selector"]


def test_load_config_resolves_sibling_file(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("dev: true\n", encoding="utf-8")
    config = load_config(tmp_path / "App.zph")
    assert config.options.dev is True


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).options == CompileOptions()


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("minify: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert "Failed to parse .zephyr.yml" in str(excinfo.value)


def test_load_config_rejects_invalid_leakage_section(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("leakage: [global-selector]\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reads_logging_section(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text(
        "logging:\n  verbose: true\n  file: logs/zephyr.log\n", encoding="utf-8"
    )
    config = load_config(tmp_path)

    assert config.logging.enabled is True
    assert config.logging.verbose is True
    assert config.logging.file == tmp_path.resolve() / "logs" / "zephyr.log"


def test_load_config_without_logging_section_leaves_logging_alone(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("dev: true\n", encoding="utf-8")
    assert load_config(tmp_path).logging.enabled is False


def test_load_config_rejects_invalid_logging_section(tmp_path: Path) -> None:
    (tmp_path / ".zephyr.yml").write_text("logging: verbose\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
