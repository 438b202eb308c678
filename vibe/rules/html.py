"""Rule extraction from HTML pages.

The selector chain is tuned to the cursor.directory catalog. On other
pages it is best effort: it either finds at least one non-empty block or
reports that no rules were found.
"""

from __future__ import annotations

import logging
import os
from pathlib import PurePosixPath
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from vibe.errors import NotFoundError
from vibe.rules.formats import RuleFormat
from vibe.rules.models import ParsedRule

logger = logging.getLogger(__name__)

CATALOG_CODE_SELECTOR = "code.text-sm.block"
CONTENT_SELECTORS: tuple[str, ...] = (
    ".prose",
    ".markdown-body",
    ".content",
    "article",
    ".article",
    "main",
    ".rule-content",
    ".text-content",
)


def extract_rules_from_html(content: bytes, source: str) -> list[ParsedRule]:
    soup = BeautifulSoup(content, "html.parser")

    for strategy in (_catalog_code_blocks, _generic_code_blocks, _content_container):
        rules = strategy(soup, source)
        if rules:
            logger.debug(
                "HTML extraction matched | strategy=%s source=%s rules=%d",
                strategy.__name__.lstrip("_"),
                source,
                len(rules),
            )
            return rules

    raise NotFoundError("rules", source)


def _catalog_code_blocks(soup: BeautifulSoup, source: str) -> list[ParsedRule]:
    name = title_case(source_stem(source).replace("-", " "))
    rules: list[ParsedRule] = []
    for element in soup.select(CATALOG_CODE_SELECTOR):
        text = element.get_text().strip()
        if not text:
            continue
        rules.append(
            ParsedRule(
                name=name,
                description=f"Cursor rule imported from {source}",
                content=text,
                format=RuleFormat.TEXT.value,
                source=source,
            )
        )
    return rules


def _generic_code_blocks(soup: BeautifulSoup, source: str) -> list[ParsedRule]:
    rules: list[ParsedRule] = []
    for index, element in enumerate(soup.find_all("code")):
        text = element.get_text().strip()
        if not text:
            continue

        name = name_from_source(source)
        if index > 0:
            name = f"{name}-{chr(ord('a') + index % 26)}"
        description = f"Imported from {source}"

        lines = text.split("\n")
        first = lines[0].strip()
        if first:
            name = first
            if len(lines) > 1:
                description = lines[1].strip()

        rules.append(
            ParsedRule(
                name=name,
                description=description,
                content=text,
                format=RuleFormat.TEXT.value,
                source=source,
            )
        )
    return rules


def _content_container(soup: BeautifulSoup, source: str) -> list[ParsedRule]:
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text().strip()
        if not text:
            continue

        name = name_from_source(source)
        title = soup.title.get_text().strip() if soup.title else ""
        heading = soup.find("h1")
        if title:
            name = title
        elif heading is not None and heading.get_text().strip():
            name = heading.get_text().strip()

        return [
            ParsedRule(
                name=name,
                description=f"Imported from {source}",
                content=text,
                format=RuleFormat.TEXT.value,
                source=source,
            )
        ]
    return []


def source_stem(source: str) -> str:
    parsed = urlparse(source)
    if parsed.scheme in ("http", "https"):
        base = PurePosixPath(parsed.path.rstrip("/")).name or (parsed.hostname or "")
    else:
        base = os.path.basename(source.rstrip("/\\"))
    stem, _ = os.path.splitext(base)
    return stem


def name_from_source(source: str) -> str:
    return title_case(source_stem(source).replace("-", " ").replace("_", " "))


def title_case(value: str) -> str:
    words = []
    for word in value.lower().split():
        words.append(word[:1].upper() + word[1:])
    return " ".join(words)
