"""In-memory registry of agent definitions found under a rules directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from vibe.agents.models import AgentDefinition, ScanEvent, ScanEventKind, ScanResult, SkippedEntry
from vibe.agents.parser import agent_id_from_path, extract_metadata, is_valid_agent_id, validate_agent_id
from vibe.config import AppConfig
from vibe.constants import (
    AGENT_DEFINITION_EXT,
    DEFAULT_AGENT_TYPE,
    DEFAULT_AGENT_VERSION,
    TEMPLATE_EXT,
    TEMPLATES_DIRNAME,
)
from vibe.errors import NotFoundError, OperationError, ValidationError, VibeError
from vibe.utils import utc_now

logger = logging.getLogger(__name__)


def _clean_name(value: str) -> str:
    return " ".join(value.replace("-", " ").replace("_", " ").split()).casefold()


class AgentRegistry:
    def __init__(self, rules_dir: Path, config: Optional[AppConfig] = None, scan: bool = True) -> None:
        self.rules_dir = rules_dir
        self.config = config or AppConfig()
        self._agents: dict[str, AgentDefinition] = {}
        self.last_scan = ScanResult()
        if scan:
            self.scan()

    def iter_scan(self) -> Iterator[ScanEvent]:
        """Rebuild the registry from disk, yielding progress as it goes.

        The new map replaces the old one only once the walk completes. A
        file that cannot be used becomes a ``SKIPPED`` event and a
        ``SkippedEntry`` on ``last_scan``; it never stops the scan.
        """
        try:
            self.rules_dir.mkdir(mode=self.config.dir_permission, parents=True, exist_ok=True)
        except OSError as exc:
            raise OperationError("Scan", self.rules_dir, "failed to create rules directory", exc) from exc

        yield ScanEvent(ScanEventKind.STARTED, path=self.rules_dir)
        result = ScanResult()

        files = sorted(path for path in self.rules_dir.rglob(f"*{AGENT_DEFINITION_EXT}") if path.is_file())
        logger.info("Found agent definition files | dir=%s count=%d", self.rules_dir, len(files))

        for path in files:
            yield ScanEvent(ScanEventKind.FILE_FOUND, path=path)
            try:
                agent = self._load_definition(path)
            except (VibeError, OSError, UnicodeDecodeError) as exc:
                reason = str(exc)
                logger.warning("Skipping agent definition | path=%s reason=%s", path, reason)
                result.skipped.append(SkippedEntry(path=path, reason=reason))
                yield ScanEvent(ScanEventKind.SKIPPED, path=path, reason=reason)
                continue

            if agent.id in result.agents:
                reason = f"duplicate agent ID {agent.id} (already loaded from {result.agents[agent.id].definition_path})"
                logger.warning("Skipping agent definition | path=%s reason=%s", path, reason)
                result.skipped.append(SkippedEntry(path=path, reason=reason))
                yield ScanEvent(ScanEventKind.SKIPPED, path=path, reason=reason)
                continue

            result.agents[agent.id] = agent
            logger.debug("Added agent to registry | id=%s name=%s", agent.id, agent.name)
            yield ScanEvent(ScanEventKind.LOADED, path=path, agent=agent)

        self._agents = result.agents
        self.last_scan = result
        yield ScanEvent(ScanEventKind.COMPLETED, path=self.rules_dir, reason=f"{result.count} agents loaded")

    def scan(self) -> ScanResult:
        for _ in self.iter_scan():
            pass
        return self.last_scan

    def rescan(self) -> ScanResult:
        return self.scan()

    def _load_definition(self, path: Path) -> AgentDefinition:
        agent_id = agent_id_from_path(path)
        validate_agent_id(agent_id)

        content = path.read_text(encoding="utf-8")
        metadata = extract_metadata(content, path)
        return AgentDefinition(
            id=agent_id,
            name=metadata.name,
            description=metadata.description,
            version=metadata.version or DEFAULT_AGENT_VERSION,
            type=metadata.type or DEFAULT_AGENT_TYPE,
            templates=tuple(self.find_templates(agent_id)),
            last_updated=utc_now(),
            definition_path=path,
            content=content,
        )

    def find_templates(self, agent_id: str) -> list[str]:
        templates_dir = self.rules_dir / TEMPLATES_DIRNAME
        if not templates_dir.is_dir():
            return []
        return sorted(path.name for path in templates_dir.glob(f"{agent_id}-*{TEMPLATE_EXT}"))

    def get_agent(self, agent_id: str) -> AgentDefinition:
        validate_agent_id(agent_id)
        agent = self._agents.get(agent_id)
        if agent is None:
            raise NotFoundError("agent", agent_id)
        return agent

    def exists(self, agent_id: str) -> bool:
        return is_valid_agent_id(agent_id) and agent_id in self._agents

    def list_agents(self) -> list[AgentDefinition]:
        return [self._agents[key] for key in sorted(self._agents)]

    def find(self, query: str) -> AgentDefinition:
        """Resolve an agent by ID, then 1-based list index, then display name."""
        query = query.strip()
        if self.exists(query):
            return self._agents[query]

        agents = self.list_agents()
        if query.isdigit():
            index = int(query)
            if not 1 <= index <= len(agents):
                raise ValidationError(
                    "index", f"invalid agent index {index}, use a number between 1 and {len(agents)}"
                )
            return agents[index - 1]

        wanted = _clean_name(query)
        for agent in agents:
            if agent.id.casefold() == query.casefold() or _clean_name(agent.name) == wanted:
                return agent
        raise NotFoundError("agent", query)

    def __len__(self) -> int:
        return len(self._agents)
