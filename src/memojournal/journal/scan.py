"""Full-corpus walks over the journal. Not used on the write path."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from memojournal.errors import ReadError
from memojournal.journal.guard import contains_marker

if TYPE_CHECKING:
    from memojournal.journal.vault import Vault

logger = logging.getLogger(__name__)


async def iter_journal_files(vault: Vault, root: str = "") -> AsyncIterator[str]:
    """Lazily yield every ``.md`` file under ``root``, depth first.

    Each call starts a fresh walk.
    """
    if not await vault.exists(root):
        return
    pending = [root]
    while pending:
        files, folders = await vault.list(pending.pop())
        for path in files:
            if path.endswith(".md"):
                yield path
        # reversed so folders are visited in listing order
        pending.extend(reversed(folders))


async def locate_memo(vault: Vault, memo_id: str, root: str = "") -> list[str]:
    """Every journal file under ``root`` containing ``memo_id``'s marker.

    Unreadable files are skipped with a warning.
    """
    found = []
    async for path in iter_journal_files(vault, root):
        try:
            text = await vault.read_text(path)
        except (OSError, UnicodeDecodeError, ReadError) as e:
            logger.warning("Skipping unreadable journal file %s: %s", path, e)
            continue
        if contains_marker(text, memo_id):
            found.append(path)
    return found
