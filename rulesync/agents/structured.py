"""Adapters that place rules inside structured YAML/JSON/TOML config documents.

Merging adapters read an existing target file, keep every field they do not
own, replace their rules-bearing field wholesale and write the document back
in its original key order. A target that cannot be parsed is treated as an
empty document and overwritten.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from .base import AgentSpec, BuildContext
from .utils import (
    JSON_FORMAT,
    PARAGRAPH_SEPARATOR,
    YAML_FORMAT,
    Document,
    DocumentFormat,
    concatenate,
    delete_nested,
    load_existing_document,
    markdown_contents,
    merge_defaults,
    parse_document,
    set_nested,
)
from ..errors import ExistingConfigParseError
from ..logging import get_logger

_LOGGER = get_logger("agents.structured")

RulesValue = Callable[[BuildContext], Any]


def joined_rules(context: BuildContext) -> str:
    return concatenate(markdown_contents(context), PARAGRAPH_SEPARATOR)


def structured_agent(
    agent_id: str,
    display_name: str,
    output_path: str,
    fmt: DocumentFormat,
    rules_key: Sequence[str],
    *,
    rules_value: RulesValue = joined_rules,
    scaffold: Optional[Document] = None,
    description: str = "",
) -> AgentSpec:
    """Build an adapter that merges rules into ``rules_key`` of ``output_path``."""

    keys = tuple(rules_key)

    def _build(context: BuildContext) -> None:
        context.progress("Updating %s config at %s", display_name, output_path)
        document = load_existing_document(context.resolve(output_path), fmt)
        merge_defaults(document, scaffold)
        set_nested(document, keys, rules_value(context))
        context.write_text(output_path, fmt.dump(document))

    def _clean(context: BuildContext) -> None:
        path = context.resolve(output_path)
        if not path.is_file():
            return
        try:
            document = parse_document(path, fmt)
        except ExistingConfigParseError as exc:
            _LOGGER.debug("Leaving %s in place during clean: %s", output_path, exc)
            return
        if not delete_nested(document, keys) and document:
            return
        if not document or document == (scaffold or {}):
            context.remove(output_path)
        else:
            context.write_text(output_path, fmt.dump(document))

    return AgentSpec(
        id=agent_id,
        display_name=display_name,
        output_paths=(output_path,),
        build=_build,
        clean=_clean,
        description=description,
    )


def _aider_read_paths(context: BuildContext) -> List[str]:
    return [context.source_reference(name) for name in context.markdown_files()]


def _continue_rules(context: BuildContext) -> List[str]:
    return [joined_rules(context)]


aider = structured_agent(
    "aider",
    "Aider",
    ".aider.conf.yml",
    YAML_FORMAT,
    ("read",),
    rules_value=_aider_read_paths,
    description="read: list of source rule paths in .aider.conf.yml",
)
cody = structured_agent(
    "cody",
    "Sourcegraph Cody",
    ".cody.json",
    JSON_FORMAT,
    ("codebase", "context", "rules"),
    scaffold={"version": "1.0"},
)
continue_agent = structured_agent(
    "continue",
    "Continue.dev",
    ".continue/config.yaml",
    YAML_FORMAT,
    ("rules",),
    rules_value=_continue_rules,
    scaffold={
        "context": {"providers": []},
        "models": [],
        "prompts": [],
        "tabAutocompleteModel": {
            "apiBase": "",
            "model": "",
            "provider": "",
            "title": "Tab Autocomplete",
        },
    },
)
tabby = structured_agent(
    "tabby",
    "Tabby ML",
    "tabby.yaml",
    YAML_FORMAT,
    ("assist", "rules"),
    scaffold={"server": {"endpoint": "http://localhost:8080"}, "version": "1.0"},
)
tabnine = structured_agent(
    "tabnine",
    "Tabnine",
    ".tabnine",
    JSON_FORMAT,
    ("projectContext",),
    scaffold={
        "disableTeamLearning": False,
        "teamLearningIgnore": ["node_modules", ".git", "dist", "build"],
    },
)
workspace = structured_agent(
    "workspace",
    "GitHub Copilot Workspace",
    ".workspace/rules.yaml",
    YAML_FORMAT,
    ("context", "rules"),
    scaffold={
        "apiVersion": "workspace/v1",
        "metadata": {"name": "project-rules"},
        "workflows": [],
    },
)


# ----------------------------------------------------------------------
# Pieces (TOML, regenerated on every build)

PIECES_OUTPUT = "pieces.toml"


def toml_multiline_string(text: str) -> str:
    """Render ``text`` as a TOML multi-line basic string."""
    pieces: List[str] = []
    for char in text:
        if char == "\\":
            pieces.append("\\\\")
        elif char == '"':
            pieces.append('\\"')
        elif char == "\n" or char == "\t":
            pieces.append(char)
        elif char == "\r":
            pieces.append("\\r")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            pieces.append(f"\\u{ord(char):04X}")
        else:
            pieces.append(char)
    return '"""\n' + "".join(pieces) + '"""'


def render_pieces_config(contents: Sequence[str]) -> str:
    lines = [
        "[project]",
        'version = "1.0"',
        "",
        "# Project rules",
        "rules = [",
    ]
    lines.extend(f"  {toml_multiline_string(content)}," for content in contents)
    lines.extend(["]", "", "[context]", 'profiles = ["default"]', ""])
    return "\n".join(lines)


def _build_pieces(context: BuildContext) -> None:
    context.progress("Building Pieces for Developers config at %s", PIECES_OUTPUT)
    context.write_text(PIECES_OUTPUT, render_pieces_config(markdown_contents(context)))


def _clean_pieces(context: BuildContext) -> None:
    context.remove(PIECES_OUTPUT)


pieces = AgentSpec(
    id="pieces",
    display_name="Pieces for Developers",
    output_paths=(PIECES_OUTPUT,),
    build=_build_pieces,
    clean=_clean_pieces,
)


__all__ = [
    "aider",
    "cody",
    "continue_agent",
    "joined_rules",
    "pieces",
    "render_pieces_config",
    "structured_agent",
    "tabby",
    "tabnine",
    "toml_multiline_string",
    "workspace",
]
