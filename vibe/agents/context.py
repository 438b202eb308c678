"""Per-agent execution context and its JSON persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from vibe.agents.models import AgentDefinition
from vibe.agents.parser import validate_agent_id
from vibe.config import AppConfig
from vibe.constants import RULE_FILE_EXT
from vibe.errors import OperationError, ParseError, ValidationError
from vibe.utils import read_json_safe, utc_now, write_json

logger = logging.getLogger(__name__)

ExtensionValue = Union[str, int, float, bool]
_EXTENSION_TYPES = (str, int, float, bool)


@dataclass
class AgentContext:
    """Well-known context fields plus a typed map for extension data.

    ``extensions`` only holds scalars. Anything else is rejected when set
    instead of being stored and lost on the next save.
    """

    agent_id: str = ""
    agent_type: str = ""
    agent_version: str = ""
    last_execution: Optional[datetime] = None
    execution_count: int = 0
    error_count: int = 0
    metadata: dict[str, str] = field(default_factory=dict)
    extensions: dict[str, ExtensionValue] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=utc_now)

    @classmethod
    def for_agent(cls, definition: AgentDefinition) -> "AgentContext":
        return cls(
            agent_id=definition.id,
            agent_type=definition.type,
            agent_version=definition.version,
        )

    def record_execution(self) -> None:
        self.execution_count += 1
        self.last_execution = utc_now()
        self.last_updated = self.last_execution

    def record_error(self) -> None:
        self.error_count += 1
        self.last_updated = utc_now()

    def set_metadata(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"metadata.{key}", f"expected str, got {type(value).__name__}")
        self.metadata[key] = value
        self.last_updated = utc_now()

    def set_extension(self, key: str, value: ExtensionValue) -> None:
        if not key:
            raise ValidationError("extensions", "extension key cannot be empty")
        if not isinstance(value, _EXTENSION_TYPES):
            raise ValidationError(
                f"extensions.{key}", f"unsupported extension type {type(value).__name__}"
            )
        self.extensions[key] = value
        self.last_updated = utc_now()

    def get_extension(self, key: str, expected: type, default: Any = None) -> Any:
        if key not in self.extensions:
            return default
        value = self.extensions[key]
        # bool is an int subclass; keep the two apart.
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValidationError(
                f"extensions.{key}", f"expected {expected.__name__}, got {type(value).__name__}"
            )
        return value

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "agent_type": self.agent_type,
            "agent_version": self.agent_version,
            "last_execution": self.last_execution.isoformat() if self.last_execution else None,
            "execution_count": self.execution_count,
            "error_count": self.error_count,
            "metadata": dict(self.metadata),
            "extensions": dict(self.extensions),
            "last_updated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Any, source: str = "context") -> "AgentContext":
        if not isinstance(payload, dict):
            raise ParseError(source, "context must be a JSON object")
        try:
            context = cls(
                agent_id=str(payload.get("agent_id", "")),
                agent_type=str(payload.get("agent_type", "")),
                agent_version=str(payload.get("agent_version", "")),
                last_execution=_optional_datetime(payload.get("last_execution")),
                execution_count=int(payload.get("execution_count", 0)),
                error_count=int(payload.get("error_count", 0)),
                last_updated=_optional_datetime(payload.get("last_updated")) or utc_now(),
            )
            for key, value in (payload.get("metadata") or {}).items():
                context.set_metadata(key, value)
            for key, value in (payload.get("extensions") or {}).items():
                context.set_extension(key, value)
        except (TypeError, ValueError, AttributeError, ValidationError) as exc:
            raise ParseError(source, f"invalid context ({exc})") from exc
        return context


def _optional_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class ContextStore:
    def __init__(self, context_dir: Path, config: Optional[AppConfig] = None) -> None:
        self.context_dir = context_dir
        self.config = config or AppConfig()

    def path_for(self, agent_id: str) -> Path:
        return self.context_dir / f"{validate_agent_id(agent_id)}{RULE_FILE_EXT}"

    def save(self, context: AgentContext) -> Path:
        path = self.path_for(context.agent_id)
        try:
            write_json(
                path,
                context.to_dict(),
                file_mode=self.config.file_permission,
                dir_mode=self.config.dir_permission,
            )
        except OSError as exc:
            raise OperationError("SaveContext", path, "failed to write context file", exc) from exc
        logger.debug("Saved agent context | agent=%s path=%s", context.agent_id, path)
        return path

    def load(self, agent_id: str) -> Optional[AgentContext]:
        path = self.path_for(agent_id)
        payload, error = read_json_safe(path)
        if error is not None:
            raise ParseError(path, f"invalid JSON ({error})")
        if payload is None:
            return None
        return AgentContext.from_dict(payload, source=str(path))
