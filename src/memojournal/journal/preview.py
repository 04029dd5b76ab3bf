"""Short plain-text teaser of memo content, for logs and listings."""

from __future__ import annotations

import re

_PATTERNS = [
    (re.compile(r"^>\s*\[!.*?\].*$", re.MULTILINE), ""),  # callout headers
    (re.compile(r"^>\s.*$", re.MULTILINE), ""),  # quotes
    (re.compile(r"^\s*#\s+", re.MULTILINE), ""),  # heading marks
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), ""),  # images
    (re.compile(r"\[([^\]]*)\]\([^)]*\)"), r"\1"),  # links → text
    (re.compile(r"[_*~`]"), ""),  # emphasis
    (re.compile(r"\n+"), " "),
]


def content_preview(content: str, limit: int = 50) -> str:
    """Strip markdown syntax and cut to ``limit`` characters."""
    preview = content
    for pattern, repl in _PATTERNS:
        preview = pattern.sub(repl, preview)
    preview = preview.strip()

    if not preview:
        return "Untitled"
    if len(preview) > limit:
        preview = f"{preview[:limit]}..."
    return preview
