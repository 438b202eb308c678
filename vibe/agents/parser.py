"""Agent ID validation and metadata extraction for ``.mdc`` definitions."""

from __future__ import annotations

import re
from pathlib import Path

import yaml

from vibe.agents.models import AgentMetadata
from vibe.constants import AGENT_DEFINITION_EXT, MAX_AGENT_ID_LENGTH, METADATA_SCAN_LINES, ROLE_MARKER
from vibe.errors import ParseError, ValidationError

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
_FORBIDDEN_ID_PARTS = ("/", "\\", "..", ".", " ")


def agent_id_from_path(path: Path) -> str:
    name = path.name
    if name.endswith(AGENT_DEFINITION_EXT):
        return name[: -len(AGENT_DEFINITION_EXT)]
    return path.stem


def is_valid_agent_id(agent_id: str) -> bool:
    if not agent_id or len(agent_id) > MAX_AGENT_ID_LENGTH:
        return False
    return not any(part in agent_id for part in _FORBIDDEN_ID_PARTS)


def validate_agent_id(agent_id: str) -> str:
    if not agent_id:
        raise ValidationError("agent_id", "agent ID cannot be empty")
    if len(agent_id) > MAX_AGENT_ID_LENGTH:
        raise ValidationError("agent_id", f"agent ID longer than {MAX_AGENT_ID_LENGTH} characters: {agent_id}")
    if not is_valid_agent_id(agent_id):
        raise ValidationError("agent_id", f"invalid agent ID: {agent_id}")
    return agent_id


def split_frontmatter(text: str, source: Path) -> tuple[dict, str]:
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        raw = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise ParseError(source, f"invalid frontmatter ({exc})") from exc
    if not isinstance(raw, dict):
        raise ParseError(source, "frontmatter must be a mapping")
    return raw, text[match.end() :]


def extract_metadata(text: str, source: Path) -> AgentMetadata:
    """Pull name, description, version and type out of a definition.

    Frontmatter keys win. Otherwise only the first lines are scanned: the
    first ``# `` heading is the name and the line after the role marker is
    the description.
    """
    frontmatter, body = split_frontmatter(text, source)

    name = ""
    description = ""
    lines = body.split("\n")[:METADATA_SCAN_LINES]
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not name and stripped.startswith("# "):
            name = stripped[2:].strip()
        elif not description and stripped.startswith(ROLE_MARKER) and index + 1 < len(lines):
            description = lines[index + 1].strip()

    return AgentMetadata(
        name=str(frontmatter.get("name") or name or agent_id_from_path(source)),
        description=str(frontmatter.get("description") or description),
        version=str(frontmatter.get("version") or ""),
        type=str(frontmatter.get("type") or ""),
    )
