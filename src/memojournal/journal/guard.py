"""Detect whether a memo already has a block in its bucket."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING

from memojournal.errors import ReadError
from memojournal.journal.formatter import identity_marker
from memojournal.journal.paths import bucket_path

if TYPE_CHECKING:
    from memojournal.journal.vault import Vault


def contains_marker(text: str, memo_id: str) -> bool:
    """True if ``text`` has the identity marker line for ``memo_id``.

    Matched as a whole line so ``memos/1`` does not match ``memos/12``.
    """
    pattern = rf"^{re.escape(identity_marker(memo_id))}\r?$"
    return re.search(pattern, text, re.MULTILINE) is not None


class IdempotencyGuard:
    """Linear scan of a single bucket file for a memo's marker."""

    def __init__(
        self,
        vault: Vault,
        sync_root: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._vault = vault
        self._sync_root = sync_root
        self._logger = logger or logging.getLogger(__name__)

    async def exists(self, memo_id: str, memo_create_time: datetime) -> bool:
        """Whether ``memo_id`` is already in the bucket for ``memo_create_time``.

        Read failures count as "not present": re-writing is preferable to
        silently dropping a memo.
        """
        path = bucket_path(self._sync_root, memo_create_time)
        try:
            if not await self._vault.exists(path):
                return False
            content = await self._vault.read_text(path)
        except (OSError, UnicodeDecodeError, ReadError) as e:
            self._logger.error("Failed to check memo %s in %s: %s", memo_id, path, e)
            return False
        return contains_marker(content, memo_id)
