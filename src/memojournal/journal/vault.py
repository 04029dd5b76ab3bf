"""Filesystem access for the journal.

All paths are slash-delimited strings relative to the vault root, so links
between journal files and attachments can be computed from the strings alone.
Blocking calls run in a worker thread so the event loop is never stalled.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class Vault(Protocol):
    """Protocol for the storage the journal is written into."""

    async def exists(self, path: str) -> bool: ...

    async def mkdir(self, path: str) -> None:
        """Create a directory. Succeeds if it already exists."""
        ...

    async def read_text(self, path: str) -> str: ...

    async def write_binary(self, path: str, data: bytes) -> None: ...

    async def create_file(self, path: str, text: str) -> None:
        """Create a new text file. Fails if something already exists at ``path``."""
        ...

    async def resolve_file(self, path: str) -> Path | None:
        """Return a handle for an existing regular file, else None."""
        ...

    async def replace_content(self, handle: Path, text: str) -> None: ...

    async def list(self, path: str) -> tuple[list[str], list[str]]:
        """Return ``(files, folders)`` directly under ``path``."""
        ...


class LocalVault:
    """Vault backed by a directory on the local disk."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _abs(self, path: str) -> Path:
        return self.root / path if path else self.root

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._abs(path).exists)

    async def mkdir(self, path: str) -> None:
        await asyncio.to_thread(self._abs(path).mkdir, parents=True, exist_ok=True)

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(self._abs(path).read_text, encoding="utf-8")

    async def write_binary(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(self._abs(path).write_bytes, data)

    async def create_file(self, path: str, text: str) -> None:
        def _create() -> None:
            with self._abs(path).open("x", encoding="utf-8") as f:
                f.write(text)

        await asyncio.to_thread(_create)

    async def resolve_file(self, path: str) -> Path | None:
        target = self._abs(path)
        return target if await asyncio.to_thread(target.is_file) else None

    async def replace_content(self, handle: Path, text: str) -> None:
        await asyncio.to_thread(_atomic_write_text, handle, text)

    async def list(self, path: str) -> tuple[list[str], list[str]]:
        def _list() -> tuple[list[str], list[str]]:
            files: list[str] = []
            folders: list[str] = []
            for entry in sorted(self._abs(path).iterdir()):
                if entry.is_dir():
                    folders.append(self._rel(entry))
                elif entry.is_file():
                    files.append(self._rel(entry))
            return files, folders

        return await asyncio.to_thread(_list)


def _atomic_write_text(target: Path, text: str) -> None:
    """Write text via a unique temp file in the same directory + rename."""
    fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, target)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
