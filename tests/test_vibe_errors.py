from vibe.errors import (
    ConfigError,
    NotFoundError,
    OperationCancelledError,
    OperationError,
    ParseError,
    SetupError,
    ValidationError,
    VibeError,
    error_chain,
)


def test_operation_error_message() -> None:
    cause = OSError("disk full")

    error = OperationError("Sync", "/tmp/rules", "failed to copy", cause)

    assert str(error) == "Sync failed for /tmp/rules: failed to copy: disk full"
    assert error.cause is cause
    assert str(OperationError("Init", None, "no cwd")) == "Init failed: no cwd"


def test_error_kinds_share_base() -> None:
    errors = [
        SetupError("Setup", "url", "clone failed"),
        ValidationError("agent_id", "bad"),
        NotFoundError("agent", "ghost"),
        ParseError("file.json", "broken", line=3),
        ConfigError("dirPermission", "wrong type"),
        OperationCancelledError("import"),
    ]

    assert all(isinstance(error, VibeError) for error in errors)
    assert isinstance(errors[0], OperationError)
    assert str(errors[3]) == "parse error in file.json at line 3: broken"
    assert str(errors[2]) == "agent not found: ghost"


def test_error_chain_follows_causes() -> None:
    try:
        try:
            raise OSError("permission denied")
        except OSError as exc:
            raise OperationError("Merge", "/p", "failed to copy", exc) from exc
    except OperationError as outer:
        chain = error_chain(outer)

    assert chain[0].startswith("OperationError: Merge failed")
    assert chain[1] == "OSError: permission denied"
