"""JSON schemas for persisted files."""

from typing import Any, Final


CONFIG_SCHEMA: Final[dict[str, Any]] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "rulesDirName": {"type": "string", "minLength": 1},
        "registryFileName": {"type": "string", "minLength": 1},
        "dirPermission": {"type": "integer", "minimum": 0, "maximum": 0o7777},
        "filePermission": {"type": "integer", "minimum": 0, "maximum": 0o7777},
        "agentsDirName": {"type": "string", "minLength": 1},
        "sourceFolder": {"type": "string"},
        "multiAgentEnabled": {"type": "boolean"},
        "lastSelectedAgent": {"type": "string"},
        "defaultRepoUrl": {"type": "string"},
    },
    "additionalProperties": True,
}


_TEMPLATE_SCHEMA: Final[dict[str, Any]] = {
    "type": "object",
    "properties": {
        "content": {"type": "string"},
        "variables": {
            "type": ["object", "null"],
            "additionalProperties": {"type": "string"},
        },
        "is_required": {"type": "boolean"},
    },
    "required": ["content"],
}


CURSOR_RULE_SCHEMA: Final[dict[str, Any]] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "metadata": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "version": {"type": "string"},
                "author": {"type": "string"},
                "created_at": {"type": "string"},
                "updated_at": {"type": "string"},
            },
            "required": ["name"],
        },
        "patterns": {"type": ["array", "null"], "items": {"type": "string"}},
        "templates": {
            "type": ["object", "null"],
            "additionalProperties": _TEMPLATE_SCHEMA,
        },
    },
    "required": ["metadata"],
}


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)
