"""Rule source parsers: local files, web pages and inline content."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from vibe import __version__
from vibe.errors import (
    NotFoundError,
    OperationCancelledError,
    OperationError,
    ParseError,
    ValidationError,
    VibeError,
)
from vibe.rules.formats import RuleFormat, detect_format
from vibe.rules.html import extract_rules_from_html, name_from_source
from vibe.rules.models import CursorRule, ParsedRule

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
INLINE_SOURCE = "inline-content"


@dataclass(frozen=True)
class ParserConfig:
    http_timeout: float = 30.0
    max_response_size: int = 10 * MIB
    max_file_size: int = 10 * MIB
    user_agent: str = f"vibe/{__version__}"


def is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def _check_cancelled(cancel: Optional[threading.Event], operation: str) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError(operation)


def extract_rules(content: bytes, source: str, fmt: RuleFormat) -> list[ParsedRule]:
    """Dispatch ``content`` to the extraction routine for its format."""
    if fmt == RuleFormat.HTML:
        return extract_rules_from_html(content, source)

    text = content.decode("utf-8", errors="replace")
    if fmt == RuleFormat.JSON:
        return _rules_from_json(json.loads(text), text, source)
    if fmt in (RuleFormat.MARKDOWN, RuleFormat.MDX):
        return _rules_from_markdown(text, source, fmt)
    return _rules_from_text(text, source)


def _rules_from_json(payload: Any, raw: str, source: str) -> list[ParsedRule]:
    items = payload if isinstance(payload, list) else [payload]
    rules: list[ParsedRule] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        content = item.get("content")
        rules.append(
            ParsedRule(
                name=name.strip(),
                description=str(item.get("description") or ""),
                content=content if isinstance(content, str) else raw,
                format=RuleFormat.JSON.value,
                source=source,
            )
        )
    return rules


def _rules_from_markdown(text: str, source: str, fmt: RuleFormat) -> list[ParsedRule]:
    body = text.strip()
    if not body:
        return []
    name = ""
    description = ""
    for line in body.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("```"):
            continue
        if not name and stripped.startswith("# "):
            name = stripped[2:].strip()
            continue
        if not description and not stripped.startswith("#"):
            description = stripped
        if name and description:
            break
    return [
        ParsedRule(
            name=name or name_from_source(source),
            description=description or f"Imported from {source}",
            content=body,
            format=fmt.value,
            source=source,
        )
    ]


def _rules_from_text(text: str, source: str) -> list[ParsedRule]:
    body = text.strip()
    if not body:
        return []
    lines = body.split("\n")
    return [
        ParsedRule(
            name=lines[0].strip(),
            description=lines[1].strip() if len(lines) > 1 else "File-based rule",
            content=body,
            format=RuleFormat.TEXT.value,
            source=source,
        )
    ]


def _verbatim_rule(payload: Any, source: str) -> Optional[CursorRule]:
    """Return ``payload`` as a stored rule when it already has that shape."""
    if not isinstance(payload, dict) or not isinstance(payload.get("metadata"), dict):
        return None
    name = payload["metadata"].get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    try:
        return CursorRule.from_dict(payload, source=source)
    except ParseError as exc:
        logger.debug("Not a stored rule, parsing as content | source=%s error=%s", source, exc)
        return None


class FileRuleParser:
    def __init__(self, config: Optional[ParserConfig] = None) -> None:
        self.config = config or ParserConfig()

    def parse(self, path: str) -> CursorRule:
        return self.parse_all(path)[0]

    def parse_all(self, path: str) -> list[CursorRule]:
        content = self._read(path)
        fmt = detect_format(content)
        logger.debug("Parsing file rule | path=%s size=%d format=%s", path, len(content), fmt.value)

        if fmt == RuleFormat.JSON:
            try:
                verbatim = _verbatim_rule(json.loads(content), source=path)
            except ValueError as exc:
                raise ParseError(path, f"invalid JSON ({exc})") from exc
            if verbatim is not None:
                return [verbatim]

        rules = extract_rules(content, path, fmt)
        if not rules:
            raise NotFoundError("rules", path)
        return [rule.to_cursor_rule() for rule in rules]

    def parse_content(self, content: bytes) -> CursorRule:
        try:
            payload = json.loads(content)
        except ValueError:
            payload = None

        verbatim = _verbatim_rule(payload, source=INLINE_SOURCE)
        if verbatim is not None:
            return verbatim
        if isinstance(payload, dict):
            structured = _rules_from_json(payload, content.decode("utf-8", errors="replace"), INLINE_SOURCE)
            if structured:
                return structured[0].to_cursor_rule()

        text = content.decode("utf-8", errors="replace").strip()
        if not text:
            raise ValidationError("content", "rule content cannot be empty")
        lines = text.split("\n")
        rule = ParsedRule(
            name=os.path.basename(lines[0].strip()) or lines[0].strip(),
            description=lines[1].strip() if len(lines) > 1 else "File-based rule",
            content=text,
            format=RuleFormat.TEXT.value,
            source=INLINE_SOURCE,
        )
        return rule.to_cursor_rule()

    def _read(self, path: str) -> bytes:
        file_path = Path(path)
        if not file_path.is_absolute() and ".." in file_path.parts:
            raise ValidationError("path", "invalid file path: must be absolute or not contain parent references")

        try:
            size = file_path.stat().st_size
        except FileNotFoundError as exc:
            raise NotFoundError("rule file", path) from exc
        except OSError as exc:
            raise OperationError("Parse", path, "failed to stat file", exc) from exc

        if size > self.config.max_file_size:
            raise ValidationError(
                "size", f"file too large: {size} bytes (max {self.config.max_file_size})"
            )
        if file_path.is_dir():
            raise ValidationError("path", f"not a file: {path}")

        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise OperationError("Parse", path, "failed to read file", exc) from exc


class WebRuleParser:
    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self._client = client

    def parse(self, url: str, cancel: Optional[threading.Event] = None) -> CursorRule:
        return self.parse_all(url, cancel=cancel)[0]

    def parse_all(self, url: str, cancel: Optional[threading.Event] = None) -> list[CursorRule]:
        content = self.fetch(url, cancel=cancel)
        # Remote catalogs are HTML pages whatever the detector says.
        rules = extract_rules_from_html(content, url)
        return [rule.to_cursor_rule() for rule in rules]

    def parse_content(self, content: bytes) -> CursorRule:
        try:
            rules = extract_rules_from_html(content, INLINE_SOURCE)
        except NotFoundError as exc:
            raise OperationError("ParseContent", INLINE_SOURCE, "no rules in HTML content", exc) from exc
        return rules[0].to_cursor_rule()

    def fetch(self, url: str, cancel: Optional[threading.Event] = None) -> bytes:
        if not is_url(url):
            raise ValidationError("url", "invalid URL format")

        _check_cancelled(cancel, "fetch")
        logger.info("Fetching rules | url=%s", url)
        client = self._client or httpx.Client(follow_redirects=True)
        try:
            content = self._download(client, url)
        finally:
            if self._client is None:
                client.close()
        _check_cancelled(cancel, "fetch")
        logger.debug("Fetched rules page | url=%s size=%d", url, len(content))
        return content

    def _download(self, client: httpx.Client, url: str) -> bytes:
        limit = self.config.max_response_size
        headers = {"User-Agent": self.config.user_agent}
        try:
            with client.stream("GET", url, headers=headers, timeout=self.config.http_timeout) as response:
                if not response.is_success:
                    raise OperationError("Parse", url, f"failed to fetch URL (HTTP {response.status_code})")

                declared = response.headers.get("Content-Length")
                if declared is not None and declared.isdigit() and int(declared) > limit:
                    raise OperationError("Parse", url, f"response exceeds {limit} bytes")

                chunks: list[bytes] = []
                received = 0
                for chunk in response.iter_bytes():
                    received += len(chunk)
                    if received > limit:
                        raise OperationError("Parse", url, f"response exceeds {limit} bytes")
                    chunks.append(chunk)
                return b"".join(chunks)
        except httpx.HTTPError as exc:
            raise OperationError("Parse", url, "failed to fetch URL", exc) from exc


class CompositeRuleParser:
    """Try the file parser first and fall back to the web parser for URLs."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        file_parser: Optional[FileRuleParser] = None,
        web_parser: Optional[WebRuleParser] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.file_parser = file_parser or FileRuleParser(self.config)
        self.web_parser = web_parser or WebRuleParser(self.config)

    def parse(self, path: str, cancel: Optional[threading.Event] = None) -> CursorRule:
        return self.parse_all(path, cancel=cancel)[0]

    def parse_all(self, path: str, cancel: Optional[threading.Event] = None) -> list[CursorRule]:
        logger.debug("Attempting to parse rule | path=%s", path)
        if is_url(path):
            return self.web_parser.parse_all(path, cancel=cancel)

        try:
            return self.file_parser.parse_all(path)
        except VibeError as file_error:
            if "://" not in path:
                raise
            try:
                return self.web_parser.parse_all(path, cancel=cancel)
            except VibeError as web_error:
                raise OperationError(
                    "Parse",
                    path,
                    f"all parsers failed (file: {file_error}; web: {web_error})",
                ) from web_error

    def parse_content(self, content: bytes) -> CursorRule:
        logger.debug("Attempting to parse content | size=%d", len(content))
        try:
            return self.file_parser.parse_content(content)
        except VibeError as file_error:
            try:
                return self.web_parser.parse_content(content)
            except VibeError as web_error:
                raise OperationError(
                    "ParseContent",
                    "composite",
                    f"all parsers failed (file: {file_error}; web: {web_error})",
                ) from web_error
