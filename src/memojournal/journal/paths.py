"""Pure path, name and timestamp helpers. None of these touch the filesystem."""

from __future__ import annotations

import re
from datetime import datetime

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

_ILLEGAL_CHARS = r'[\\/:*?"<>|#]'
_LEADING_JUNK = re.compile(r'^[\\/:*?"<>|#\s\x00-\x1f]+')
_ILLEGAL = re.compile(_ILLEGAL_CHARS)
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RUN = re.compile(r"\s+")


def canonical_date(ts: datetime) -> str:
    """Bucket key for a timestamp: its local calendar date as ``YYYY-MM-DD``."""
    return ts.strftime("%Y-%m-%d")


def time_of_day(ts: datetime) -> str:
    return ts.strftime("%H:%M:%S")


def display_datetime(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def bucket_path(sync_dir: str, ts: datetime) -> str:
    """Slash-delimited path of the bucket file responsible for ``ts``."""
    name = f"{canonical_date(ts)}.md"
    return f"{sync_dir}/{name}" if sync_dir else name


def parent_dir(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def sanitize_name(raw: str) -> str:
    """Make a display filename safe to use on disk. Never fails.

    Leading separators, illegal characters and whitespace are stripped first,
    then whitespace runs collapse to a single space and any remaining illegal
    characters are dropped.
    """
    sanitized = _LEADING_JUNK.sub("", raw)
    sanitized = _WHITESPACE_RUN.sub(" ", sanitized)
    sanitized = _CONTROL.sub("", sanitized)
    sanitized = _ILLEGAL.sub("", sanitized).strip()
    return sanitized or "untitled"


def relative_path(from_file: str, to_file: str) -> str:
    """Shortest relative link from ``from_file``'s directory to ``to_file``."""
    from_parts = from_file.split("/")[:-1]
    to_parts = to_file.split("/")

    i = 0
    while i < len(from_parts) and i < len(to_parts) and from_parts[i] == to_parts[i]:
        i += 1

    return "/".join([".."] * (len(from_parts) - i) + to_parts[i:])


def is_image(filename: str) -> bool:
    """True if the filename's extension is in IMAGE_EXTENSIONS (case-insensitive)."""
    if "." not in filename:
        return False
    ext = "." + filename.rsplit(".", 1)[1].lower()
    return ext in IMAGE_EXTENSIONS
