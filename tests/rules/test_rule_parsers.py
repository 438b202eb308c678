import json
from pathlib import Path
import threading

import httpx
import pytest

from vibe.errors import (
    NotFoundError,
    OperationCancelledError,
    OperationError,
    ValidationError,
)
from vibe.rules.parser import (
    CompositeRuleParser,
    FileRuleParser,
    ParserConfig,
    WebRuleParser,
)

CATALOG_PAGE = b"""<!DOCTYPE html>
<html><body><code class="text-sm block">Prefer server components.</code></body></html>
"""


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_file_parser_markdown(tmp_path: Path) -> None:
    source = tmp_path / "notes.md"
    source.write_text("# Testing\n\nAlways write tests.\n", encoding="utf-8")

    rule = FileRuleParser().parse(str(source))

    assert rule.name == "Testing"
    assert rule.metadata.description == "Always write tests."
    assert rule.metadata.author == "local"
    assert "Always write tests." in rule.templates["default"].content


def test_file_parser_text_uses_first_two_lines(tmp_path: Path) -> None:
    source = tmp_path / "rule.txt"
    source.write_text("Naming\nUse clear names\nMore detail", encoding="utf-8")

    rule = FileRuleParser().parse(str(source))

    assert rule.name == "Naming"
    assert rule.metadata.description == "Use clear names"


def test_file_parser_loads_stored_rule_verbatim(tmp_path: Path) -> None:
    payload = {
        "metadata": {
            "name": "Stored",
            "description": "from disk",
            "version": "2.0.0",
            "author": "someone",
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-01-01T00:00:00+00:00",
        },
        "patterns": ["*.py"],
        "templates": {"default": {"content": "body", "variables": {}, "is_required": True}},
    }
    source = tmp_path / "stored.json"
    source.write_text(json.dumps(payload), encoding="utf-8")

    rule = FileRuleParser().parse(str(source))

    assert rule.metadata.version == "2.0.0"
    assert rule.metadata.author == "someone"
    assert rule.patterns == ["*.py"]


def test_file_parser_json_list(tmp_path: Path) -> None:
    source = tmp_path / "many.json"
    source.write_text(json.dumps([{"name": "a", "content": "A"}, {"name": "b"}, {"x": 1}]), encoding="utf-8")

    rules = FileRuleParser().parse_all(str(source))

    assert [rule.name for rule in rules] == ["a", "b"]
    assert rules[0].templates["default"].content == "A"


def test_file_parser_rejects_parent_references() -> None:
    with pytest.raises(ValidationError):
        FileRuleParser().parse("../outside.txt")


def test_file_parser_rejects_large_files(tmp_path: Path) -> None:
    source = tmp_path / "big.txt"
    source.write_text("x" * 64, encoding="utf-8")

    with pytest.raises(ValidationError, match="too large"):
        FileRuleParser(ParserConfig(max_file_size=10)).parse(str(source))


def test_file_parser_empty_file_has_no_rules(tmp_path: Path) -> None:
    source = tmp_path / "empty.txt"
    source.write_text("   \n", encoding="utf-8")

    with pytest.raises(NotFoundError):
        FileRuleParser().parse(str(source))


def test_parse_content_json_with_name() -> None:
    rule = FileRuleParser().parse_content(b'{"name": "Inline", "description": "d", "content": "c"}')

    assert rule.name == "Inline"
    assert rule.templates["default"].content == "c"


def test_parse_content_free_text() -> None:
    rule = FileRuleParser().parse_content(b"Title line\nsecond line\nbody")

    assert rule.name == "Title line"
    assert rule.metadata.description == "second line"


def test_parse_content_empty_is_invalid() -> None:
    with pytest.raises(ValidationError):
        FileRuleParser().parse_content(b"  ")


def test_web_parser_extracts_catalog_rules() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["agent"] = request.headers["User-Agent"]
        return httpx.Response(200, content=CATALOG_PAGE)

    parser = WebRuleParser(client=_client(handler))
    rule = parser.parse("https://cursor.directory/nextjs")

    assert rule.name == "Nextjs"
    assert rule.metadata.author == "cursor.directory"
    assert seen["agent"].startswith("vibe/")


def test_web_parser_rejects_non_http_urls() -> None:
    with pytest.raises(ValidationError):
        WebRuleParser().parse("ftp://example.com/rules")


def test_web_parser_non_2xx_is_operational_error() -> None:
    parser = WebRuleParser(client=_client(lambda request: httpx.Response(404, content=b"missing")))

    with pytest.raises(OperationError, match="HTTP 404"):
        parser.parse("https://example.com/rules")


def test_web_parser_enforces_size_cap() -> None:
    parser = WebRuleParser(
        config=ParserConfig(max_response_size=16),
        client=_client(lambda request: httpx.Response(200, content=b"<html>" + b"x" * 64)),
    )

    with pytest.raises(OperationError, match="exceeds"):
        parser.parse("https://example.com/rules")


def test_web_parser_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(OperationError, match="failed to fetch URL"):
        WebRuleParser(client=_client(handler)).parse("https://example.com/rules")


def test_web_parser_checks_cancellation_before_fetch() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, content=CATALOG_PAGE)

    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        WebRuleParser(client=_client(handler)).parse("https://example.com/rules", cancel=cancel)
    assert calls == []


def test_composite_missing_local_path_propagates_file_error() -> None:
    class ExplodingWebParser(WebRuleParser):
        def parse_all(self, url, cancel=None):
            raise AssertionError("web parser must not be used")

    parser = CompositeRuleParser(web_parser=ExplodingWebParser())

    with pytest.raises(NotFoundError) as excinfo:
        parser.parse("./notes.txt")
    assert excinfo.value.resource == "rule file"


def test_composite_routes_urls_to_web_parser() -> None:
    web = WebRuleParser(client=_client(lambda request: httpx.Response(200, content=CATALOG_PAGE)))

    rules = CompositeRuleParser(web_parser=web).parse_all("https://cursor.directory/go")

    assert rules[0].name == "Go"


def test_composite_combines_errors_for_scheme_like_paths() -> None:
    web = WebRuleParser(client=_client(lambda request: httpx.Response(500)))

    with pytest.raises(OperationError, match="all parsers failed"):
        CompositeRuleParser(web_parser=web).parse("file://missing/rules.txt")


def test_parse_content_invalid_stored_rule_falls_back_to_text() -> None:
    content = json.dumps({"metadata": {"name": "Broken"}, "patterns": "x"}).encode()

    rule = FileRuleParser().parse_content(content)

    assert rule.name == content.decode()
    assert rule.templates["default"].content == content.decode()


def test_web_parser_parse_content_extracts_html() -> None:
    rule = WebRuleParser().parse_content(CATALOG_PAGE)

    assert rule.templates["default"].content == "Prefer server components."


def test_web_parser_parse_content_without_rules() -> None:
    with pytest.raises(OperationError, match="no rules in HTML content"):
        WebRuleParser().parse_content(b"<html><body><div></div></body></html>")


class FailingFileParser(FileRuleParser):
    def parse_content(self, content: bytes):
        raise ValidationError("content", "unsupported content")


def test_composite_parse_content_falls_back_to_html() -> None:
    parser = CompositeRuleParser(file_parser=FailingFileParser())

    rule = parser.parse_content(CATALOG_PAGE)

    assert rule.templates["default"].content == "Prefer server components."


def test_composite_parse_content_combines_errors() -> None:
    with pytest.raises(OperationError) as excinfo:
        CompositeRuleParser().parse_content(b"   ")

    message = str(excinfo.value)
    assert "all parsers failed" in message
    assert "rule content cannot be empty" in message
    assert "no rules in HTML content" in message
