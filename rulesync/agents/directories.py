"""Adapters that copy each markdown rule into a tool-specific directory."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Callable, List, Optional, Sequence

from .base import AgentSpec, BuildContext
from .utils import PARAGRAPH_SEPARATOR, SizeLimit, concatenate

NameMapper = Callable[[str], str]
ContentMapper = Callable[[str], str]

AMAZONQ_LIMIT = SizeLimit(ceiling=32_768, tool="Amazon Q")
WINDSURF_LIMIT = SizeLimit(ceiling=6_000, tool="Windsurf")

COPILOT_FRONT_MATTER = '---\napplyTo: "**"\n---\n\n'
COPILOT_LEGACY_FILE = ".github/copilot-instructions.md"


def _same_name(name: str) -> str:
    return name


def _with_suffix(suffix: str) -> NameMapper:
    def _rename(name: str) -> str:
        return f"{PurePosixPath(name).stem}{suffix}"

    return _rename


def _unchanged(content: str) -> str:
    return content


def fan_out_agent(
    agent_id: str,
    display_name: str,
    output_dir: str,
    *,
    rename: NameMapper = _same_name,
    transform: ContentMapper = _unchanged,
    per_file_limit: Optional[SizeLimit] = None,
    legacy_file: Optional[str] = None,
    legacy_limit: Optional[SizeLimit] = None,
    stale_files: Sequence[str] = (),
    description: str = "",
) -> AgentSpec:
    """Copy each rule into ``output_dir``, optionally with a combined legacy file.

    ``stale_files`` are removed on clean but never written.
    """

    output_paths: List[str] = [f"{output_dir}/"]
    if legacy_file:
        output_paths.append(legacy_file)

    def _build(context: BuildContext) -> None:
        context.progress("Building %s rules in %s/", display_name, output_dir)
        context.make_dirs(output_dir)
        rules = context.read_markdown()
        for name, content in rules:
            if per_file_limit is not None:
                per_file_limit.check(name, content)
            target = f"{output_dir}/{rename(name)}"
            context.write_text(target, transform(content))
            context.progress("Created %s", target)

        if legacy_file:
            combined = concatenate([content for _, content in rules], PARAGRAPH_SEPARATOR)
            if legacy_limit is not None:
                legacy_limit.check(legacy_file, combined)
            context.progress("Creating %s for backward compatibility", legacy_file)
            context.write_text(legacy_file, combined)

    def _clean(context: BuildContext) -> None:
        context.remove(output_dir)
        if legacy_file:
            context.remove(legacy_file)
        for stale_file in stale_files:
            context.remove(stale_file)

    return AgentSpec(
        id=agent_id,
        display_name=display_name,
        output_paths=tuple(output_paths),
        build=_build,
        clean=_clean,
        description=description,
    )


def add_copilot_front_matter(content: str) -> str:
    if content.startswith("---"):
        return content
    return f"{COPILOT_FRONT_MATTER}{content}"


amazonq = fan_out_agent(
    "amazonq",
    "Amazon Q Developer",
    ".amazonq/rules",
    per_file_limit=AMAZONQ_LIMIT,
)
cline = fan_out_agent("cline", "Cline", ".clinerules")
copilot = fan_out_agent(
    "copilot",
    "GitHub Copilot",
    ".github/instructions",
    rename=_with_suffix(".instructions.md"),
    transform=add_copilot_front_matter,
    stale_files=(COPILOT_LEGACY_FILE,),
    description="granular .instructions.md files with applyTo front matter",
)
cursor = fan_out_agent(
    "cursor",
    "Cursor IDE",
    ".cursor/rules",
    rename=_with_suffix(".mdc"),
    legacy_file=".cursorrules",
)
jetbrains = fan_out_agent("jetbrains", "JetBrains AI Assistant", ".aiassistant/rules")
roocode = fan_out_agent("roocode", "RooCode", ".roo/rules")
windsurf = fan_out_agent(
    "windsurf",
    "Windsurf/Codeium",
    ".windsurf/rules",
    legacy_file=".windsurfrules",
    legacy_limit=WINDSURF_LIMIT,
)


__all__ = [
    "AMAZONQ_LIMIT",
    "COPILOT_FRONT_MATTER",
    "COPILOT_LEGACY_FILE",
    "WINDSURF_LIMIT",
    "add_copilot_front_matter",
    "amazonq",
    "cline",
    "copilot",
    "cursor",
    "fan_out_agent",
    "jetbrains",
    "roocode",
    "windsurf",
]
