import json
from pathlib import Path

import pytest

from vibe.agents.context import AgentContext, ContextStore
from vibe.agents.models import AgentDefinition
from vibe.errors import ParseError, ValidationError


def _definition() -> AgentDefinition:
    return AgentDefinition(id="planner", name="Planner", version="2.0", type="ai")


def test_context_for_agent_copies_identity() -> None:
    context = AgentContext.for_agent(_definition())

    assert context.agent_id == "planner"
    assert context.agent_version == "2.0"
    assert context.execution_count == 0
    assert context.last_execution is None


def test_record_execution_and_error() -> None:
    context = AgentContext.for_agent(_definition())

    context.record_execution()
    context.record_execution()
    context.record_error()

    assert context.execution_count == 2
    assert context.error_count == 1
    assert context.last_execution is not None


def test_extensions_keep_their_types() -> None:
    context = AgentContext.for_agent(_definition())
    context.set_extension("retries", 3)
    context.set_extension("verbose", True)
    context.set_extension("ratio", 0.5)

    assert context.get_extension("retries", int) == 3
    assert context.get_extension("verbose", bool) is True
    assert context.get_extension("missing", str, "fallback") == "fallback"
    with pytest.raises(ValidationError):
        context.get_extension("verbose", int)
    with pytest.raises(ValidationError):
        context.get_extension("ratio", str)


def test_unsupported_values_are_rejected() -> None:
    context = AgentContext.for_agent(_definition())

    with pytest.raises(ValidationError):
        context.set_extension("items", [1, 2])
    with pytest.raises(ValidationError):
        context.set_metadata("owner", 42)  # type: ignore[arg-type]


def test_store_round_trip(tmp_path: Path) -> None:
    store = ContextStore(tmp_path / "contexts")
    context = AgentContext.for_agent(_definition())
    context.record_execution()
    context.set_metadata("owner", "platform")
    context.set_extension("retries", 2)

    path = store.save(context)
    loaded = store.load("planner")

    assert path == tmp_path / "contexts" / "planner.json"
    assert loaded is not None
    assert loaded.execution_count == 1
    assert loaded.metadata == {"owner": "platform"}
    assert loaded.extensions == {"retries": 2}
    assert loaded.last_execution == context.last_execution


def test_store_load_missing_returns_none(tmp_path: Path) -> None:
    assert ContextStore(tmp_path).load("planner") is None


def test_store_load_corrupt_file(tmp_path: Path) -> None:
    (tmp_path / "planner.json").write_text("{broken", encoding="utf-8")

    with pytest.raises(ParseError):
        ContextStore(tmp_path).load("planner")


def test_store_rejects_nested_extension_values(tmp_path: Path) -> None:
    payload = {"agent_id": "planner", "extensions": {"nested": {"a": 1}}}
    (tmp_path / "planner.json").write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ParseError, match="invalid context"):
        ContextStore(tmp_path).load("planner")


def test_store_path_validates_agent_id(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        ContextStore(tmp_path).path_for("../evil")
