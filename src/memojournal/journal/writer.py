"""Journal merge writer: append one memo's block to its day bucket.

Read-modify-write on the bucket is serialized per bucket path with an
asyncio.Lock, so overlapping write() calls in one process never lose a block.
Writers in other processes are not coordinated.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from memojournal.errors import FetchError, FormatError, WriteError
from memojournal.journal.paths import bucket_path, parent_dir

if TYPE_CHECKING:
    from memojournal.journal.formatter import BlockFormatter
    from memojournal.journal.guard import IdempotencyGuard
    from memojournal.journal.vault import Vault
    from memojournal.source.base import Memo


class JournalWriter:
    """Writes memos into ``<sync_root>/<YYYY-MM-DD>.md`` buckets."""

    def __init__(
        self,
        vault: Vault,
        guard: IdempotencyGuard,
        formatter: BlockFormatter,
        sync_root: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._vault = vault
        self._guard = guard
        self._formatter = formatter
        self._sync_root = sync_root
        self._logger = logger or logging.getLogger(__name__)
        self._bucket_locks: dict[str, asyncio.Lock] = {}

    def bucket_for(self, memo: Memo) -> str:
        return bucket_path(self._sync_root, memo.create_time)

    def _get_bucket_lock(self, path: str) -> asyncio.Lock:
        if path not in self._bucket_locks:
            self._bucket_locks[path] = asyncio.Lock()
        return self._bucket_locks[path]

    async def write(self, memo: Memo) -> bool:
        """Append ``memo`` to its bucket unless it is already there.

        Returns True if a block was appended, False if the memo was skipped.
        Raises WriteError if the bucket cannot be read or persisted, and
        FetchError if an attachment fails under the abort policy.
        """
        if memo.create_time is None:
            raise FormatError(f"memo {memo.id} has no create time")
        path = self.bucket_for(memo)
        async with self._get_bucket_lock(path):
            return await self._write_locked(memo, path)

    async def _write_locked(self, memo: Memo, path: str) -> bool:
        # 1. Skip memos already present in the bucket
        if await self._guard.exists(memo.id, memo.create_time):
            self._logger.debug("Memo %s already in %s, skipping", memo.id, path)
            return False

        # 2. Bucket directory
        directory = parent_dir(path)
        try:
            if not await self._vault.exists(directory):
                await self._vault.mkdir(directory)
        except OSError as e:
            raise WriteError(f"Failed to create journal directory: {e}", directory) from e

        # 3. Build the block (downloads attachments)
        try:
            block = await self._formatter.build(memo, path)
        except FetchError as e:
            self._logger.error("Failed to build block for memo %s: %s", memo.id, e)
            raise

        # 4. Prior content + new block, computed fully before any write
        try:
            prior = await self._vault.read_text(path) if await self._vault.exists(path) else ""
        except (OSError, UnicodeDecodeError) as e:
            self._logger.error("Failed to read bucket %s: %s", path, e)
            raise WriteError(f"Failed to read existing bucket: {e}", path) from e
        final_content = prior + block

        # 5. Persist: replace in place if the file exists, else create it
        try:
            handle = await self._vault.resolve_file(path)
            if handle is not None:
                await self._vault.replace_content(handle, final_content)
            else:
                await self._vault.create_file(path, final_content)
        except OSError as e:
            self._logger.error("Failed to save memo %s to %s: %s", memo.id, path, e)
            raise WriteError(f"Failed to save memo {memo.id}: {e}", path) from e

        return True
