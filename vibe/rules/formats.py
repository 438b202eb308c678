"""Content format detection for imported rule sources."""

from __future__ import annotations

import json
from enum import Enum


class RuleFormat(str, Enum):
    JSON = "json"
    HTML = "html"
    MARKDOWN = "markdown"
    MDX = "mdx"
    TEXT = "text"


_HTML_MARKERS = ("<!doctype html>", "<html", "<body")
_HEADING_MARKERS = ("# ", "## ")
_FENCE = "```"
_MDX_FENCES = ("```jsx", "```tsx")


def detect_format(content: bytes) -> RuleFormat:
    """Classify raw content. First match wins: json, html, markdown/mdx, text.

    This is a heuristic; a JSON document whose strings contain markdown
    headings is still JSON.
    """
    text = content.decode("utf-8", errors="replace")
    trimmed = text.strip()

    if trimmed[:1] in ("{", "["):
        try:
            json.loads(trimmed)
        except ValueError:
            pass
        else:
            return RuleFormat.JSON

    lowered = text.lower()
    if any(marker in lowered for marker in _HTML_MARKERS):
        return RuleFormat.HTML

    has_fence = _FENCE in text
    if has_fence or any(marker in text for marker in _HEADING_MARKERS):
        if has_fence and any(fence in lowered for fence in _MDX_FENCES):
            return RuleFormat.MDX
        return RuleFormat.MARKDOWN

    return RuleFormat.TEXT
