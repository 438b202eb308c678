from pathlib import Path
from typing import Optional, Union


class VibeError(Exception):
    """Base user-facing application error."""


class OperationError(VibeError):
    """An action against a specific path or resource failed."""

    def __init__(
        self,
        op: str,
        path: Union[str, Path, None],
        message: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.op = op
        self.path = str(path) if path is not None else ""
        self.message = message
        self.cause = cause
        detail = f"{message}: {cause}" if cause is not None else message
        if self.path:
            super().__init__(f"{op} failed for {self.path}: {detail}")
        else:
            super().__init__(f"{op} failed: {detail}")


class SetupError(OperationError):
    """Populating the canonical store failed."""


class ValidationError(VibeError):
    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"validation failed for {field}: {message}")


class NotFoundError(VibeError):
    def __init__(self, resource: str, identifier: Union[str, Path]) -> None:
        self.resource = resource
        self.identifier = str(identifier)
        super().__init__(f"{resource} not found: {identifier}")


class ParseError(VibeError):
    def __init__(self, source: Union[str, Path], detail: str, line: Optional[int] = None) -> None:
        self.source = str(source)
        self.detail = detail
        self.line = line
        if line is not None and line > 0:
            super().__init__(f"parse error in {source} at line {line}: {detail}")
        else:
            super().__init__(f"parse error in {source}: {detail}")


class ConfigError(VibeError):
    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"configuration error for {key}: {detail}")


class OperationCancelledError(VibeError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} cancelled")


def error_chain(exc: BaseException) -> list[str]:
    """Return messages for an exception and every chained cause."""
    chain: list[str] = []
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return chain
