"""Error taxonomy for rule builds."""

from __future__ import annotations

from pathlib import Path


class RulesyncError(RuntimeError):
    """Base class for rulesync failures."""


class ConfigurationError(RulesyncError):
    """Raised when the build is pointed at an invalid source location."""


class SourceNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when the rules source directory does not exist."""

    def __init__(self, source_dir: Path) -> None:
        super().__init__(f"Source directory {source_dir} does not exist")
        self.source_dir = source_dir


class EmptySourceError(RulesyncError):
    """Raised when the source directory holds no rule files."""

    def __init__(self, source_dir: Path) -> None:
        super().__init__(f"No rule files found in {source_dir}")
        self.source_dir = source_dir


class UnknownAgentError(RulesyncError, KeyError):
    """Raised when a requested agent id has no registered adapter."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Unknown agent: {agent_id}")
        self.agent_id = agent_id

    def __str__(self) -> str:
        return self.args[0]


class AdapterBuildError(RulesyncError):
    """Raised by an adapter that cannot produce its outputs."""


class SizeLimitExceeded(AdapterBuildError):
    """Raised when content reaches a strict size ceiling."""

    def __init__(self, label: str, size: int, ceiling: int) -> None:
        super().__init__(f"{label} is {size} bytes, at or above the {ceiling} byte limit")
        self.label = label
        self.size = size
        self.ceiling = ceiling


class ExistingConfigParseError(RulesyncError):
    """Raised when an existing structured config file cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path


__all__ = [
    "AdapterBuildError",
    "ConfigurationError",
    "EmptySourceError",
    "ExistingConfigParseError",
    "RulesyncError",
    "SizeLimitExceeded",
    "SourceNotFoundError",
    "UnknownAgentError",
]
