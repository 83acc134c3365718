"""Adapters that emit a single markdown file at the project root."""

from __future__ import annotations

from typing import Callable, Tuple

from .base import AgentSpec, BuildContext
from .utils import PARAGRAPH_SEPARATOR, RULE_SEPARATOR, concatenate, markdown_contents

CLAUDE_TEMPLATE_NAMES: Tuple[str, ...] = ("CLAUDE.template.md", "CLAUDE.tempalte.md")
CLAUDE_RULES_PLACEHOLDER = "@@RULES@@"


def _single_file_cleaner(default_path: str) -> Callable[[BuildContext], None]:
    def _clean(context: BuildContext) -> None:
        context.remove(context.output or default_path)

    return _clean


def concatenated_agent(
    agent_id: str,
    display_name: str,
    output_path: str,
    *,
    separator: str = PARAGRAPH_SEPARATOR,
) -> AgentSpec:
    """Join every markdown rule into one file."""

    def _build(context: BuildContext) -> None:
        target = context.output or output_path
        context.progress("Building %s rules at %s", display_name, target)
        content = concatenate(markdown_contents(context), separator)
        context.write_text(target, content)

    return AgentSpec(
        id=agent_id,
        display_name=display_name,
        output_paths=(output_path,),
        build=_build,
        clean=_single_file_cleaner(output_path),
        honors_output_override=True,
    )


def _build_claude(context: BuildContext) -> None:
    target = context.output or "CLAUDE.md"
    context.progress("Building Claude rules at %s", target)
    rules_list = "\n".join(
        f"- @{context.source_reference(name)}" for name in context.markdown_files()
    )

    content = rules_list
    for template_name in CLAUDE_TEMPLATE_NAMES:
        template_path = context.resolve(template_name)
        if template_path.is_file():
            template = template_path.read_text(encoding="utf-8")
            content = template.replace(CLAUDE_RULES_PLACEHOLDER, rules_list, 1)
            context.progress("Using template %s", template_name)
            break

    context.write_text(target, content)


claude = AgentSpec(
    id="claude",
    display_name="Claude Code",
    output_paths=("CLAUDE.md",),
    build=_build_claude,
    clean=_single_file_cleaner("CLAUDE.md"),
    honors_output_override=True,
    description="CLAUDE.md listing @-references to each source rule",
)

agents = concatenated_agent("agents", "Universal Agents", "AGENTS.md", separator=RULE_SEPARATOR)
codex = concatenated_agent("codex", "Codex", "CODEX.md")
gemini = concatenated_agent("gemini", "Gemini CLI", "GEMINI.md")
replit = concatenated_agent("replit", "Replit AI", "replit.md")


__all__ = [
    "CLAUDE_RULES_PLACEHOLDER",
    "CLAUDE_TEMPLATE_NAMES",
    "agents",
    "claude",
    "codex",
    "concatenated_agent",
    "gemini",
    "replit",
]
