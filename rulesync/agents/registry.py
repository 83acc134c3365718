"""Registry mapping agent ids to adapters."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from ..errors import UnknownAgentError
from .base import AgentSpec


class AgentRegistry:
    """Holds the adapters available to a build.

    A registry is populated once before any build starts and treated as
    read-only while builds run. Registering an id twice keeps the last spec.
    """

    def __init__(self) -> None:
        self._agents: Dict[str, AgentSpec] = {}

    def register(self, spec: AgentSpec) -> None:
        self._agents[spec.id] = spec

    def get(self, agent_id: str) -> Optional[AgentSpec]:
        return self._agents.get(agent_id)

    def require(self, agent_id: str) -> AgentSpec:
        spec = self._agents.get(agent_id)
        if spec is None:
            raise UnknownAgentError(agent_id)
        return spec

    def list(self) -> List[AgentSpec]:
        return list(self._agents.values())

    def ids(self) -> List[str]:
        return list(self._agents)

    def has(self, agent_id: str) -> bool:
        return agent_id in self._agents

    def clear(self) -> None:
        self._agents.clear()

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[AgentSpec]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)


__all__ = ["AgentRegistry"]
