import pytest

from vibe.errors import NotFoundError
from vibe.rules.html import extract_rules_from_html, name_from_source, title_case


def test_catalog_blocks_named_after_url() -> None:
    html = b"""
    <html><body>
      <code class="text-sm block">First rule body</code>
      <code class="text-sm block">  </code>
      <code class="text-sm block">Second rule body</code>
    </body></html>
    """

    rules = extract_rules_from_html(html, "https://cursor.directory/nextjs-react-typescript")

    assert [rule.content for rule in rules] == ["First rule body", "Second rule body"]
    assert {rule.name for rule in rules} == {"Nextjs React Typescript"}


def test_generic_code_blocks_use_first_lines() -> None:
    html = b"<html><body><code>Rule Name\nWhat it does\nbody</code><code>x</code></body></html>"

    rules = extract_rules_from_html(html, "https://example.com/rules")

    assert rules[0].name == "Rule Name"
    assert rules[0].description == "What it does"
    assert rules[1].name == "x"


def test_content_container_prefers_title() -> None:
    html = b"""
    <html><head><title>Style Guide</title></head>
    <body><article>Write small functions.</article></body></html>
    """

    rules = extract_rules_from_html(html, "https://example.com/guide")

    assert len(rules) == 1
    assert rules[0].name == "Style Guide"
    assert rules[0].content == "Write small functions."


def test_content_container_falls_back_to_heading() -> None:
    html = b"<html><body><main><h1>Heading</h1><p>text</p></main></body></html>"

    rules = extract_rules_from_html(html, "https://example.com/page")

    assert rules[0].name == "Heading"


def test_unstructured_page_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        extract_rules_from_html(b"<html><body><div>nothing here</div></body></html>", "https://x.dev")


def test_name_helpers() -> None:
    assert title_case("hello WORLD") == "Hello World"
    assert name_from_source("/tmp/my_cool-rules.txt") == "My Cool Rules"
    assert name_from_source("https://example.com/python-best-practices/") == "Python Best Practices"
