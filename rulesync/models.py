"""Core data models shared across rulesync components."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

MARKDOWN_SUFFIX = ".md"


def is_markdown_name(name: str) -> bool:
    return name.endswith(MARKDOWN_SUFFIX)


@dataclass(frozen=True)
class RuleFile:
    """A single source document loaded from the rules directory."""

    name: str
    path: Path
    content: str
    title: Optional[str] = None

    @property
    def is_markdown(self) -> bool:
        return is_markdown_name(self.name)
