"""Shared helpers for adapter implementations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import yaml

from ..errors import ExistingConfigParseError, SizeLimitExceeded
from ..logging import get_logger
from .base import BuildContext

_LOGGER = get_logger("agents")

PARAGRAPH_SEPARATOR = "\n\n"
RULE_SEPARATOR = "\n\n---\n\n"


def concatenate(contents: Sequence[str], separator: str = PARAGRAPH_SEPARATOR) -> str:
    return separator.join(contents)


def markdown_contents(context: BuildContext) -> list[str]:
    return [content for _, content in context.read_markdown()]


@dataclass(frozen=True)
class SizeLimit:
    """Byte ceiling a downstream tool enforces on one piece of content.

    Content at or above ``warn_ratio`` of the ceiling logs one "approaching"
    warning. Content at or above the ceiling logs one "exceeding" warning and
    is still written, unless ``strict`` is set, in which case
    :class:`SizeLimitExceeded` aborts that adapter.
    """

    ceiling: int
    tool: str
    warn_ratio: float = 0.9
    strict: bool = False

    @property
    def warn_threshold(self) -> float:
        return self.ceiling * self.warn_ratio

    def check(self, label: str, content: str) -> int:
        size = len(content.encode("utf-8"))
        if size >= self.ceiling:
            if self.strict:
                raise SizeLimitExceeded(label, size, self.ceiling)
            _LOGGER.warning(
                "%s is %d bytes, exceeding %s's %d byte limit; %s will ignore the entire file",
                label,
                size,
                self.tool,
                self.ceiling,
                self.tool,
            )
        elif size >= self.warn_threshold:
            _LOGGER.warning(
                "%s is %d bytes, over %d%% of %d byte limit (approaching %d byte limit)",
                label,
                size,
                round(self.warn_ratio * 100),
                self.ceiling,
                self.ceiling,
            )
        return size


# ----------------------------------------------------------------------
# Structured documents

Document = Dict[str, Any]


@dataclass(frozen=True)
class DocumentFormat:
    """Parser/serializer pair for a structured config file."""

    name: str
    load: Callable[[str], Any]
    dump: Callable[[Document], str]


class _BlockStyleDumper(yaml.SafeDumper):
    """Safe dumper that renders multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_BlockStyleDumper.add_representer(str, _represent_str)


def _load_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def _dump_yaml(document: Document) -> str:
    return yaml.dump(
        document,
        Dumper=_BlockStyleDumper,
        sort_keys=False,
        allow_unicode=True,
        width=4096,
    )


def _dump_json(document: Document) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


YAML_FORMAT = DocumentFormat(name="yaml", load=_load_yaml, dump=_dump_yaml)
JSON_FORMAT = DocumentFormat(name="json", load=json.loads, dump=_dump_json)


def parse_document(path: Path, fmt: DocumentFormat) -> Document:
    """Parse an existing structured file into an open mapping."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ExistingConfigParseError(path, str(exc)) from exc
    if not text.strip():
        return {}
    try:
        loaded = fmt.load(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ExistingConfigParseError(path, str(exc)) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ExistingConfigParseError(path, f"expected a mapping at the root, got {type(loaded).__name__}")
    return loaded


def load_existing_document(path: Path, fmt: DocumentFormat) -> Document:
    """Return the parsed file, or an empty base when missing or malformed."""
    if not path.is_file():
        return {}
    try:
        return parse_document(path, fmt)
    except ExistingConfigParseError as exc:
        _LOGGER.warning("%s; starting from an empty document", exc)
        return {}


def get_nested(document: Document, keys: Sequence[str]) -> Any:
    current: Any = document
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def set_nested(document: Document, keys: Sequence[str], value: Any) -> None:
    current = document
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def delete_nested(document: Document, keys: Sequence[str]) -> bool:
    """Remove ``keys`` from ``document`` and prune parents left empty."""
    parents: list[Document] = []
    current: Any = document
    for key in keys[:-1]:
        if not isinstance(current, dict) or not isinstance(current.get(key), dict):
            return False
        parents.append(current)
        current = current[key]
    if not isinstance(current, dict) or keys[-1] not in current:
        return False
    del current[keys[-1]]
    for parent, key in zip(reversed(parents), reversed(keys[:-1])):
        if parent[key]:
            break
        del parent[key]
    return True


def merge_defaults(document: Document, defaults: Optional[Document]) -> None:
    """Fill in missing keys from ``defaults`` without touching existing values."""
    for key, value in (defaults or {}).items():
        if key not in document:
            document[key] = _copy(value)
        elif isinstance(value, dict) and isinstance(document[key], dict):
            merge_defaults(document[key], value)


def _copy(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value


__all__ = [
    "DocumentFormat",
    "JSON_FORMAT",
    "PARAGRAPH_SEPARATOR",
    "RULE_SEPARATOR",
    "SizeLimit",
    "YAML_FORMAT",
    "concatenate",
    "delete_nested",
    "get_nested",
    "load_existing_document",
    "markdown_contents",
    "merge_defaults",
    "parse_document",
    "set_nested",
]
