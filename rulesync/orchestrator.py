"""Build pipeline: load rules, fan out to agents, persist the fingerprint."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .agents import AgentRegistry, AgentSpec, BuildContext, default_registry, remove_output_paths
from .errors import EmptySourceError, SourceNotFoundError, UnknownAgentError
from .loader import load_rule_files
from .logging import get_logger
from .models import RuleFile
from .stores import compute_fingerprint, persist, remove_stored, stamp_metadata


@dataclass
class AgentOutcome:
    """Result of one agent's clean+build unit."""

    agent_id: str
    display_name: Optional[str] = None
    status: str = "built"
    outputs: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "built"


@dataclass
class BuildSummary:
    """What a build did, for reporting."""

    source_dir: Path
    file_count: int
    fingerprint: str
    dry_run: bool
    outcomes: List[AgentOutcome] = field(default_factory=list)
    metadata_stamped: bool = False

    @property
    def agents(self) -> List[str]:
        return [outcome.agent_id for outcome in self.outcomes if outcome.status != "unknown"]

    @property
    def failed(self) -> Dict[str, str]:
        return {
            outcome.agent_id: outcome.error or ""
            for outcome in self.outcomes
            if outcome.status == "failed"
        }

    @property
    def unknown(self) -> List[str]:
        return [outcome.agent_id for outcome in self.outcomes if outcome.status == "unknown"]

    @property
    def outputs(self) -> Dict[str, List[str]]:
        if self.dry_run:
            return {}
        return {
            outcome.agent_id: list(outcome.outputs)
            for outcome in self.outcomes
            if outcome.succeeded
        }


class BuildOrchestrator:
    """Coordinates rule builds across every selected agent."""

    def __init__(
        self,
        source_dir: Path | str,
        *,
        root: Path | str | None = None,
        agents: Optional[Sequence[str]] = None,
        registry: AgentRegistry | None = None,
        dry_run: bool = False,
        verbose: bool = False,
        outputs: Optional[Mapping[str, str]] = None,
        parallel: bool = False,
        max_workers: Optional[int] = None,
    ) -> None:
        self.root = Path(root if root is not None else Path.cwd()).resolve()
        source = Path(source_dir).expanduser()
        self.source_dir = source if source.is_absolute() else self.root / source
        self.registry = registry if registry is not None else default_registry()
        self._requested_agents = list(agents) if agents else None
        self.dry_run = dry_run
        self.verbose = verbose
        self.outputs = dict(outputs or {})
        self.parallel = parallel
        self.max_workers = max_workers
        self.logger = get_logger("orchestrator")

    @property
    def agent_ids(self) -> List[str]:
        requested = self._requested_agents if self._requested_agents is not None else self.registry.ids()
        return list(dict.fromkeys(agent_id.strip() for agent_id in requested if agent_id.strip()))

    def build(self) -> BuildSummary:
        """Run the full pipeline; only a missing or empty source is fatal."""
        self.logger.info("Building coding agent rules from %s", self.source_dir)

        if not self.source_dir.is_dir():
            raise SourceNotFoundError(self.source_dir)

        rule_files = load_rule_files(self.source_dir)
        if not rule_files:
            raise EmptySourceError(self.source_dir)
        self.logger.info("Found %d rule files", len(rule_files))
        self._log_rule_files(rule_files)

        fingerprint = compute_fingerprint(rule_files)
        metadata_stamped = False
        if not self.dry_run:
            metadata_stamped = stamp_metadata(self.source_dir, fingerprint) is not None
            if metadata_stamped:
                # The stamp rewrote a rule file; hash what is now on disk.
                rule_files = load_rule_files(self.source_dir)
                fingerprint = compute_fingerprint(rule_files)

        names = [rule_file.name for rule_file in rule_files]
        outcomes = self._run_agents(self.agent_ids, names)

        if not self.dry_run:
            persist(self.source_dir, fingerprint)
        self.logger.info("Build hash: %s...", fingerprint[:16])

        summary = BuildSummary(
            source_dir=self.source_dir,
            file_count=len(rule_files),
            fingerprint=fingerprint,
            dry_run=self.dry_run,
            outcomes=outcomes,
            metadata_stamped=metadata_stamped,
        )
        self._log_summary(summary)
        return summary

    def clean(self, *, remove_fingerprint: bool = False) -> List[str]:
        """Remove the outputs of every selected agent; return the cleaned ids."""
        cleaned: List[str] = []
        for agent_id in self.agent_ids:
            spec = self._resolve(agent_id)
            if spec is None:
                continue
            context = self._context_for(spec, [])
            if not self._has_outputs(spec, context):
                continue
            if self._clean_agent(spec, context):
                cleaned.append(agent_id)
        if remove_fingerprint and not self.dry_run and remove_stored(self.source_dir):
            self.logger.info("Removed %s/.build_hash", self.source_dir)
        return cleaned

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_agents(self, agent_ids: Sequence[str], names: List[str]) -> List[AgentOutcome]:
        if not self.parallel or len(agent_ids) < 2:
            return [self._run_agent(agent_id, names) for agent_id in agent_ids]
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="rulesync-agent"
        ) as executor:
            futures = [executor.submit(self._run_agent, agent_id, names) for agent_id in agent_ids]
            return [future.result() for future in futures]

    def _run_agent(self, agent_id: str, names: List[str]) -> AgentOutcome:
        spec = self._resolve(agent_id)
        if spec is None:
            return AgentOutcome(agent_id=agent_id, status="unknown")

        self.logger.info("Building for %s...", spec.display_name)
        context = self._context_for(spec, names)
        if not self.dry_run:
            self._clean_agent(spec, context)

        try:
            spec.build(context)
        except Exception as exc:
            self._log_exception(f"Failed to build for {spec.display_name}", exc)
            return AgentOutcome(
                agent_id=agent_id,
                display_name=spec.display_name,
                status="failed",
                error=str(exc) or exc.__class__.__name__,
            )

        outputs = spec.effective_output_paths(context.output)
        if not self.dry_run:
            for output_path in outputs:
                self.logger.info("  %s created", output_path)
        return AgentOutcome(agent_id=agent_id, display_name=spec.display_name, outputs=outputs)

    def _resolve(self, agent_id: str) -> Optional[AgentSpec]:
        try:
            return self.registry.require(agent_id)
        except UnknownAgentError as exc:
            self.logger.warning("%s; skipping", exc)
            return None

    def _context_for(self, spec: AgentSpec, names: List[str]) -> BuildContext:
        return BuildContext(
            files=list(names),
            source_dir=self.source_dir,
            root=self.root,
            dry_run=self.dry_run,
            verbose=self.verbose,
            output=self.outputs.get(spec.id),
        )

    @staticmethod
    def _has_outputs(spec: AgentSpec, context: BuildContext) -> bool:
        return any(
            context.resolve(output_path.rstrip("/")).exists()
            for output_path in spec.effective_output_paths(context.output)
        )

    def _clean_agent(self, spec: AgentSpec, context: BuildContext) -> bool:
        try:
            if spec.clean is not None:
                spec.clean(context)
            else:
                remove_output_paths(spec, context)
        except Exception as exc:
            self.logger.debug("Nothing cleaned for %s: %s", spec.display_name, exc)
            return False
        if self.verbose:
            self.logger.info("  Cleaned existing %s outputs", spec.display_name)
        return True

    def _log_rule_files(self, rule_files: Iterable[RuleFile]) -> None:
        if not self.verbose:
            return
        for rule_file in rule_files:
            if rule_file.title:
                self.logger.info("  - %s - %s", rule_file.name, rule_file.title)
            else:
                self.logger.info("  - %s", rule_file.name)

    def _log_summary(self, summary: BuildSummary) -> None:
        self.logger.info("Build summary:")
        self.logger.info("  Source: %s", summary.source_dir)
        self.logger.info("  Files: %d", summary.file_count)
        self.logger.info("  Agents: %s", ", ".join(summary.agents) or "(none)")
        if summary.unknown:
            self.logger.warning("  Skipped unknown agents: %s", ", ".join(summary.unknown))
        if summary.failed:
            self.logger.warning("  Failed agents: %s", ", ".join(summary.failed))
        if summary.dry_run:
            self.logger.info("This was a dry run. No files were written.")
            return
        for outcome in summary.outcomes:
            if not outcome.succeeded:
                continue
            for output_path in outcome.outputs:
                self.logger.info("  %s - %s", output_path, outcome.display_name)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["AgentOutcome", "BuildOrchestrator", "BuildSummary"]
