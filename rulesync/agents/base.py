"""Contract shared by every agent adapter."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..logging import get_logger
from ..models import is_markdown_name

_LOGGER = get_logger("agents")


@dataclass
class BuildContext:
    """Inputs handed to an adapter, plus the only sanctioned way to touch disk.

    Every mutation goes through :meth:`write_text`, :meth:`make_dirs` or
    :meth:`remove`; each of them is a no-op when ``dry_run`` is set so that
    dry runs follow the exact same control flow as real builds.
    """

    files: List[str]
    source_dir: Path
    root: Path
    dry_run: bool = False
    verbose: bool = False
    output: Optional[str] = None

    def resolve(self, relative: str | Path) -> Path:
        return self.root / relative

    def markdown_files(self) -> List[str]:
        return [name for name in self.files if is_markdown_name(name)]

    def read_rule(self, name: str) -> str:
        return (self.source_dir / name).read_text(encoding="utf-8")

    def read_markdown(self) -> List[tuple[str, str]]:
        """Return ``(name, content)`` for every markdown rule, in build order."""
        return [(name, self.read_rule(name)) for name in self.markdown_files()]

    def source_reference(self, name: str) -> str:
        """Return the path of a source rule relative to the project root, posix style."""
        target = (self.source_dir / name).resolve()
        try:
            relative = os.path.relpath(target, self.root.resolve())
        except ValueError:
            relative = str(target)
        return Path(relative).as_posix()

    def progress(self, message: str, *args: object) -> None:
        if self.verbose:
            _LOGGER.info(message, *args)

    def write_text(self, relative: str | Path, content: str) -> Path:
        path = self.resolve(relative)
        if self.dry_run:
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def make_dirs(self, relative: str | Path) -> Path:
        path = self.resolve(relative)
        if not self.dry_run:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def remove(self, relative: str | Path) -> bool:
        """Remove a file or directory tree; missing paths are not an error."""
        path = self.resolve(relative)
        if self.dry_run:
            return False
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
            return True
        if path.exists() or path.is_symlink():
            path.unlink()
            return True
        return False


BuildFn = Callable[[BuildContext], None]
CleanFn = Callable[[BuildContext], None]


@dataclass(frozen=True)
class AgentSpec:
    """Capability record for one output adapter."""

    id: str
    display_name: str
    output_paths: Sequence[str]
    build: BuildFn
    clean: Optional[CleanFn] = None
    honors_output_override: bool = False
    description: str = field(default="", compare=False)

    def effective_output_paths(self, override: Optional[str] = None) -> List[str]:
        if override and self.honors_output_override:
            return [override]
        return list(self.output_paths)


def remove_output_paths(spec: AgentSpec, context: BuildContext) -> List[str]:
    """Fallback clean: delete every declared output path that exists."""
    removed: List[str] = []
    for output_path in spec.effective_output_paths(context.output):
        if context.remove(output_path.rstrip("/")):
            removed.append(output_path)
    return removed


__all__ = ["AgentSpec", "BuildContext", "BuildFn", "CleanFn", "remove_output_paths"]
