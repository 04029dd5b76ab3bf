"""Memo source protocol and shared types."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp and convert it to host local time."""
    if not value:
        return None
    # fromisoformat() only accepts a trailing "Z" from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # Memos emits nanosecond fractions, datetime holds microseconds
    if "." in value:
        head, _, tail = value.partition(".")
        digits = len(tail) - len(tail.lstrip("0123456789"))
        value = f"{head}.{tail[:digits][:6].ljust(6, '0')}{tail[digits:]}"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class Resource:
    """An attachment descriptor as reported by the memo source."""

    name: str
    filename: str
    type: str = ""
    size: int = 0

    @property
    def source_fragment(self) -> str:
        """Last path segment of the source identifier, e.g. ``abc`` for ``resources/abc``."""
        return self.name.split("/")[-1]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Resource:
        return cls(
            name=data.get("name", ""),
            filename=data.get("filename", ""),
            type=data.get("type", ""),
            size=int(data.get("size") or 0),
        )


@dataclass(frozen=True)
class Memo:
    """A timestamped note. Timestamps are naive local wall-clock datetimes."""

    id: str
    create_time: datetime
    update_time: datetime
    content: str = ""
    visibility: str = "PRIVATE"
    resources: tuple[Resource, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Memo:
        """Build a memo from a Memos API payload.

        Newer servers report attachments under ``attachments`` rather than
        ``resources``; both are accepted.
        """
        create_time = parse_timestamp(data.get("createTime"))
        if create_time is None:
            raise ValueError(f"memo {data.get('name', '?')} has no createTime")
        update_time = parse_timestamp(data.get("updateTime")) or create_time
        raw_resources = data.get("resources") or data.get("attachments") or []
        return cls(
            id=data.get("name", ""),
            create_time=create_time,
            update_time=update_time,
            content=data.get("content") or "",
            visibility=data.get("visibility") or "PRIVATE",
            resources=tuple(Resource.from_api(r) for r in raw_resources),
        )


@runtime_checkable
class MemoSource(Protocol):
    """Protocol that memo backends must implement."""

    def list_memos(self) -> AsyncIterator[Memo]:
        """Yield every memo the source holds."""
        ...

    async def download_resource(self, resource: Resource) -> bytes | None:
        """Fetch attachment bytes. Returns None if the source reports it absent."""
        ...
