"""Tests for rulesync.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from rulesync.config import (
    CONFIG_FILENAME,
    DEFAULT_AGENTS,
    EXAMPLE_CONFIG,
    ConfigError,
    RulesyncConfig,
    load_config,
    write_example_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, RulesyncConfig)
    assert config.root == tmp_path.resolve()
    assert config.source == ".rules"
    assert config.source_dir == (tmp_path / ".rules").resolve()
    assert config.agents == list(DEFAULT_AGENTS)
    assert config.outputs == {}
    assert config.parallel is False
    assert config.exists is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / CONFIG_FILENAME
    config_file.write_text(
        """
source: docs/rules
agents: [claude, cursor]
outputs:
  claude: docs/CLAUDE.md
  cursor: ""
parallel: yes
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.exists is True
    assert config.config_file == config_file.resolve()
    assert config.source_dir == (tmp_path / "docs" / "rules").resolve()
    assert config.agents == ["claude", "cursor"]
    assert config.outputs == {"claude": "docs/CLAUDE.md"}
    assert config.parallel is True


def test_load_config_accepts_comma_separated_agents(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("agents: 'claude, windsurf ,'\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.agents == ["claude", "windsurf"]


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.exists is True
    assert config.agents == list(DEFAULT_AGENTS)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("agents: [claude\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("- claude\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_write_example_config_refuses_to_overwrite(tmp_path: Path) -> None:
    target = write_example_config(tmp_path)

    assert target.read_text(encoding="utf-8") == EXAMPLE_CONFIG
    assert load_config(tmp_path).agents == list(DEFAULT_AGENTS)
    with pytest.raises(FileExistsError):
        write_example_config(tmp_path)
