"""Discovery and loading of rule files from the source directory."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .errors import SourceNotFoundError
from .models import RuleFile, is_markdown_name

RULE_SUFFIXES = (".md", ".yaml", ".yml")

_TITLE_PATTERN = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)


def list_rule_names(source_dir: Path) -> List[str]:
    """Return rule file names directly inside ``source_dir`` in build order."""
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise SourceNotFoundError(source_dir)
    names = [
        entry.name
        for entry in source_dir.iterdir()
        if entry.is_file() and entry.name.endswith(RULE_SUFFIXES)
    ]
    return sorted(names)


def extract_title(content: str) -> Optional[str]:
    """Return the text of the first level-1 markdown heading, if any."""
    match = _TITLE_PATTERN.search(content)
    if match is None:
        return None
    return match.group(1).strip() or None


def load_rule_files(source_dir: Path) -> List[RuleFile]:
    """Load every rule file in ``source_dir``, sorted by name."""
    source_dir = Path(source_dir)
    rule_files: List[RuleFile] = []
    for name in list_rule_names(source_dir):
        path = source_dir / name
        content = path.read_text(encoding="utf-8")
        title = extract_title(content) if is_markdown_name(name) else None
        rule_files.append(RuleFile(name=name, path=path.resolve(), content=content, title=title))
    return rule_files


__all__ = ["RULE_SUFFIXES", "extract_title", "list_rule_names", "load_rule_files"]
