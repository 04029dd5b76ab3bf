"""Sync orchestrator: pull memos from a source and write them to the journal.

Responsibilities:
1. Wire the journal pipeline (materializer → formatter → guard → writer)
2. List memos from the source and order them by creation time
3. Write memos strictly one at a time
4. Record per-memo outcomes; one failing memo never aborts the batch
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from memojournal.errors import MemoJournalError
from memojournal.journal.attachments import AttachmentMaterializer
from memojournal.journal.formatter import BlockFormatter
from memojournal.journal.guard import IdempotencyGuard
from memojournal.journal.preview import content_preview
from memojournal.journal.writer import JournalWriter

if TYPE_CHECKING:
    from memojournal.config import JournalConfig
    from memojournal.journal.vault import Vault
    from memojournal.source.base import MemoSource


@dataclass
class SyncReport:
    """Counts from one sync pass."""

    written: int = 0
    skipped: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)  # (memo id, error)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def build_writer(
    config: JournalConfig,
    source: MemoSource,
    vault: Vault,
    sync_root: str = "",
) -> JournalWriter:
    """Assemble a JournalWriter, each component with its own named logger."""
    materializer = AttachmentMaterializer(
        source,
        vault,
        resource_dir=config.resource_dir,
        logger=logging.getLogger("memojournal.journal.attachments"),
    )
    formatter = BlockFormatter(
        materializer,
        policy=config.attachment_policy,
        image_heading=config.image_heading,
        file_heading=config.file_heading,
        logger=logging.getLogger("memojournal.journal.formatter"),
    )
    guard = IdempotencyGuard(
        vault, sync_root=sync_root, logger=logging.getLogger("memojournal.journal.guard")
    )
    return JournalWriter(
        vault,
        guard,
        formatter,
        sync_root=sync_root,
        logger=logging.getLogger("memojournal.journal.writer"),
    )


class MemoSync:
    """Runs sync passes from one memo source into one journal."""

    def __init__(
        self,
        config: JournalConfig,
        source: MemoSource,
        vault: Vault,
        *,
        sync_root: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.source = source
        self.vault = vault
        self.writer = build_writer(config, source, vault, sync_root=sync_root)
        self._logger = logger or logging.getLogger(__name__)

    async def run(self) -> SyncReport:
        """One full pass. Source listing failures propagate as FetchError."""
        memos = [memo async for memo in self.source.list_memos()]
        memos.sort(key=lambda m: m.create_time or datetime.min)
        self._logger.info("Fetched %d memos", len(memos))

        report = SyncReport()
        for memo in memos:
            try:
                written = await self.writer.write(memo)
            except MemoJournalError as e:
                self._logger.error("Failed to sync memo %s: %s", memo.id, e)
                report.failures.append((memo.id, str(e)))
                continue

            if written:
                report.written += 1
                self._logger.info(
                    "Wrote memo %s to %s: %s",
                    memo.id,
                    self.writer.bucket_for(memo),
                    content_preview(memo.content),
                )
            else:
                report.skipped += 1

        self._logger.info(
            "Sync finished: %d written, %d skipped, %d failed",
            report.written,
            report.skipped,
            report.failed,
        )
        return report
