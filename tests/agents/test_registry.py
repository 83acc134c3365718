"""Tests for the agent registry."""

from __future__ import annotations

import pytest

from rulesync.agents import BUILTIN_AGENTS, AgentRegistry, AgentSpec, BuildContext, default_registry
from rulesync.errors import UnknownAgentError

EXPECTED_IDS = {
    "agents",
    "aider",
    "amazonq",
    "claude",
    "cline",
    "codex",
    "cody",
    "continue",
    "copilot",
    "cursor",
    "gemini",
    "jetbrains",
    "pieces",
    "replit",
    "roocode",
    "tabby",
    "tabnine",
    "windsurf",
    "workspace",
}


def _noop(context: BuildContext) -> None:
    return None


def test_default_registry_holds_every_builtin_agent() -> None:
    registry = default_registry()

    assert set(registry.ids()) == EXPECTED_IDS
    assert len(registry) == len(BUILTIN_AGENTS) == 19
    for spec in registry:
        assert spec.display_name
        assert spec.output_paths


def test_default_registry_returns_independent_instances() -> None:
    first = default_registry()
    second = default_registry()

    first.clear()

    assert len(first) == 0
    assert "claude" in second


def test_register_replaces_existing_id() -> None:
    registry = AgentRegistry()
    registry.register(AgentSpec(id="demo", display_name="Old", output_paths=("a.md",), build=_noop))
    registry.register(AgentSpec(id="demo", display_name="New", output_paths=("b.md",), build=_noop))

    assert registry.ids() == ["demo"]
    assert registry.require("demo").display_name == "New"


def test_lookup_helpers() -> None:
    registry = default_registry()

    assert registry.has("cursor")
    assert registry.get("cursor") is registry.require("cursor")
    assert registry.get("nope") is None
    assert "nope" not in registry


def test_require_unknown_agent_raises() -> None:
    registry = default_registry()

    with pytest.raises(UnknownAgentError) as excinfo:
        registry.require("vim")

    assert excinfo.value.agent_id == "vim"
    assert str(excinfo.value) == "Unknown agent: vim"


def test_effective_output_paths_respects_override_support() -> None:
    registry = default_registry()

    assert registry.require("claude").effective_output_paths("docs/CLAUDE.md") == ["docs/CLAUDE.md"]
    assert registry.require("cursor").effective_output_paths("ignored.md") == [
        ".cursor/rules/",
        ".cursorrules",
    ]
