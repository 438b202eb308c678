"""Agent definition and scan data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from vibe.constants import DEFAULT_AGENT_TYPE, DEFAULT_AGENT_VERSION
from vibe.utils import utc_now


@dataclass(frozen=True)
class AgentMetadata:
    name: str = ""
    description: str = ""
    version: str = ""
    type: str = ""


@dataclass(frozen=True)
class AgentDefinition:
    id: str
    name: str
    description: str = ""
    version: str = DEFAULT_AGENT_VERSION
    type: str = DEFAULT_AGENT_TYPE
    templates: tuple[str, ...] = ()
    last_updated: datetime = field(default_factory=utc_now)
    definition_path: Optional[Path] = None
    content: str = ""


class ScanEventKind(str, Enum):
    STARTED = "started"
    FILE_FOUND = "file_found"
    LOADED = "loaded"
    SKIPPED = "skipped"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ScanEvent:
    kind: ScanEventKind
    path: Optional[Path] = None
    agent: Optional[AgentDefinition] = None
    reason: str = ""


@dataclass(frozen=True)
class SkippedEntry:
    path: Path
    reason: str


@dataclass
class ScanResult:
    agents: dict[str, AgentDefinition] = field(default_factory=dict)
    skipped: list[SkippedEntry] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.agents)
