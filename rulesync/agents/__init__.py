"""Agent adapter implementations and the built-in registry."""

from __future__ import annotations

from typing import Tuple

from .base import AgentSpec, BuildContext, remove_output_paths
from .directories import amazonq, cline, copilot, cursor, jetbrains, roocode, windsurf
from .markdown import agents, claude, codex, gemini, replit
from .registry import AgentRegistry
from .structured import aider, cody, continue_agent, pieces, tabby, tabnine, workspace

BUILTIN_AGENTS: Tuple[AgentSpec, ...] = (
    agents,
    aider,
    amazonq,
    claude,
    cline,
    codex,
    cody,
    continue_agent,
    copilot,
    cursor,
    gemini,
    jetbrains,
    pieces,
    replit,
    roocode,
    tabby,
    tabnine,
    windsurf,
    workspace,
)


def register_builtin_agents(registry: AgentRegistry) -> AgentRegistry:
    """Register every built-in adapter on ``registry`` and return it."""
    for spec in BUILTIN_AGENTS:
        registry.register(spec)
    return registry


def default_registry() -> AgentRegistry:
    """Return a fresh registry holding the built-in adapters."""
    return register_builtin_agents(AgentRegistry())


__all__ = [
    "AgentRegistry",
    "AgentSpec",
    "BUILTIN_AGENTS",
    "BuildContext",
    "default_registry",
    "register_builtin_agents",
    "remove_output_paths",
]
