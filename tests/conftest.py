"""Shared fakes and fixtures for journal tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from memojournal.config import JournalConfig
from memojournal.errors import FetchError
from memojournal.journal.vault import LocalVault
from memojournal.source.base import Memo, Resource


class FakeSource:
    """In-memory memo source. Resources in ``failing`` raise FetchError."""

    def __init__(self, memos=(), blobs: dict[str, bytes] | None = None, failing=()) -> None:
        self.memos = list(memos)
        self.blobs = blobs or {}
        self.failing = set(failing)
        self.downloads: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    async def list_memos(self):
        for memo in self.memos:
            yield memo

    async def download_resource(self, resource: Resource) -> bytes | None:
        self.downloads.append(resource.name)
        if resource.name in self.failing:
            raise FetchError("connection refused", resource=resource.name)
        return self.blobs.get(resource.name)


def make_memo(
    memo_id: str = "memos/1",
    created: datetime = datetime(2025, 4, 20, 14, 30, 5),
    content: str = "hello",
    resources: tuple[Resource, ...] = (),
    visibility: str = "PRIVATE",
    updated: datetime | None = None,
) -> Memo:
    return Memo(
        id=memo_id,
        create_time=created,
        update_time=updated or created,
        content=content,
        visibility=visibility,
        resources=resources,
    )


@pytest.fixture
def vault(tmp_path: Path) -> LocalVault:
    return LocalVault(tmp_path / "vault")


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def journal_config() -> JournalConfig:
    return JournalConfig()
