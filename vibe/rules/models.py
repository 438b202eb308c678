"""Rule data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from jsonschema import Draft202012Validator

from vibe.constants import DEFAULT_RULE_VERSION, DEFAULT_TEMPLATE_NAME, LOCAL_AUTHOR
from vibe.errors import ParseError
from vibe.schemas import CURSOR_RULE_SCHEMA, format_schema_error
from vibe.utils import utc_now

_RULE_VALIDATOR = Draft202012Validator(CURSOR_RULE_SCHEMA)


@dataclass
class RuleMetadata:
    name: str
    description: str = ""
    version: str = ""
    author: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class Template:
    content: str
    variables: dict[str, str] = field(default_factory=dict)
    is_required: bool = False


@dataclass
class CursorRule:
    metadata: RuleMetadata
    patterns: list[str] = field(default_factory=list)
    templates: dict[str, Template] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": {
                "name": self.metadata.name,
                "description": self.metadata.description,
                "version": self.metadata.version,
                "author": self.metadata.author,
                "created_at": self.metadata.created_at.isoformat(),
                "updated_at": self.metadata.updated_at.isoformat(),
            },
            "patterns": list(self.patterns),
            "templates": {
                name: {
                    "content": template.content,
                    "variables": dict(template.variables),
                    "is_required": template.is_required,
                }
                for name, template in self.templates.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: Any, source: str = "inline-content") -> "CursorRule":
        if not isinstance(payload, dict):
            raise ParseError(source, "rule must be a JSON object")
        error = next(iter(_RULE_VALIDATOR.iter_errors(payload)), None)
        if error is not None:
            raise ParseError(source, format_schema_error(error))

        raw_meta = payload["metadata"]
        metadata = RuleMetadata(
            name=raw_meta["name"],
            description=raw_meta.get("description", ""),
            version=raw_meta.get("version", ""),
            author=raw_meta.get("author", ""),
            created_at=_parse_timestamp(raw_meta.get("created_at"), source),
            updated_at=_parse_timestamp(raw_meta.get("updated_at"), source),
        )
        templates = {
            name: Template(
                content=raw["content"],
                variables=dict(raw.get("variables") or {}),
                is_required=bool(raw.get("is_required", False)),
            )
            for name, raw in (payload.get("templates") or {}).items()
        }
        return cls(
            metadata=metadata,
            patterns=list(payload.get("patterns") or []),
            templates=templates,
        )


def _parse_timestamp(value: Any, source: str) -> datetime:
    if not value:
        return utc_now()
    try:
        # fromisoformat only accepts a "Z" suffix from 3.11 on.
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ParseError(source, f"invalid timestamp {value!r}") from exc


@dataclass(frozen=True)
class ParsedRule:
    """A loosely-typed rule as extracted from one source, before normalization."""

    name: str
    description: str
    content: str
    format: str
    source: str

    @property
    def author(self) -> str:
        parsed = urlparse(self.source)
        if parsed.scheme in ("http", "https") and parsed.hostname:
            return parsed.hostname
        return LOCAL_AUTHOR

    def to_cursor_rule(self) -> CursorRule:
        now = utc_now()
        return CursorRule(
            metadata=RuleMetadata(
                name=self.name,
                description=self.description,
                version=DEFAULT_RULE_VERSION,
                author=self.author,
                created_at=now,
                updated_at=now,
            ),
            patterns=[],
            templates={
                DEFAULT_TEMPLATE_NAME: Template(
                    content=self.content,
                    variables={},
                    is_required=True,
                )
            },
        )
