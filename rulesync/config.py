"""Configuration loading for rulesync (.rulesync.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import RulesyncError

CONFIG_FILENAME = ".rulesync.yml"
DEFAULT_SOURCE = ".rules"
DEFAULT_AGENTS: tuple[str, ...] = (
    "claude",
    "cline",
    "roocode",
    "cursor",
    "windsurf",
    "codex",
    "copilot",
    "amazonq",
    "continue",
    "aider",
    "tabnine",
    "replit",
)

EXAMPLE_CONFIG = """\
# rulesync configuration
#
# Directory holding the canonical rule files (*.md, *.yaml, *.yml).
source: .rules

# Agents to build when --agents is not given. Run `rulesync agents` for the full list.
agents:
  - claude
  - cline
  - roocode
  - cursor
  - windsurf
  - codex
  - copilot
  - amazonq
  - continue
  - aider
  - tabnine
  - replit

# Optional output overrides for single-file agents.
# outputs:
#   claude: docs/CLAUDE.md

# Build agents on a thread pool.
parallel: false
"""


class ConfigError(RulesyncError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RulesyncConfig:
    """Represents the settings defined in .rulesync.yml."""

    root: Path
    source: str = DEFAULT_SOURCE
    agents: List[str] = field(default_factory=lambda: list(DEFAULT_AGENTS))
    outputs: Dict[str, str] = field(default_factory=dict)
    parallel: bool = False
    config_file: Optional[Path] = None
    exists: bool = False

    @property
    def source_dir(self) -> Path:
        return (self.root / self.source).resolve()


def load_config(config_path: Path) -> RulesyncConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RulesyncConfig(root=root, config_file=config_file)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    source = _as_str(data.get("source")) or DEFAULT_SOURCE
    agents = _as_str_list(data.get("agents")) or list(DEFAULT_AGENTS)
    outputs = {
        str(key): str(value)
        for key, value in _as_dict(data.get("outputs")).items()
        if isinstance(value, str) and value.strip()
    }
    parallel = _as_bool(data.get("parallel")) or False

    return RulesyncConfig(
        root=root,
        source=source,
        agents=agents,
        outputs=outputs,
        parallel=parallel,
        config_file=config_file,
        exists=True,
    )


def default_config(root: Path) -> RulesyncConfig:
    root = Path(root).resolve()
    return RulesyncConfig(root=root, config_file=root / CONFIG_FILENAME)


def write_example_config(root: Path) -> Path:
    """Write ``EXAMPLE_CONFIG`` to ``root``; refuse to overwrite an existing file."""
    target = Path(root) / CONFIG_FILENAME
    if target.exists():
        raise FileExistsError(f"{CONFIG_FILENAME} already exists in {Path(root).resolve()}")
    target.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    return target


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Sequence):
        return [str(item).strip() for item in value if isinstance(item, str) and item.strip()]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_AGENTS",
    "DEFAULT_SOURCE",
    "EXAMPLE_CONFIG",
    "RulesyncConfig",
    "default_config",
    "load_config",
    "write_example_config",
]
