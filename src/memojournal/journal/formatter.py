"""Render one memo as a self-contained journal block.

Block shape (attachment sections only when the memo has such attachments):

    - 14:30:05
    <content with #tag# rewritten to #tag>

    ### 图片附件
    ![photo.png](resources/abc_photo.png)

    ### 其他附件
    - [report.pdf](resources/def_report.pdf)

    ---
    > [!note]- Memo Properties
    > - Created: 2025-04-20 14:30:05
    > - Updated: 2025-04-20 14:31:00
    > - Type: memo
    > - Tags: [work, idea]
    > - ID: memos/123
    > - Visibility: private
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from memojournal.config import AttachmentPolicy
from memojournal.errors import FormatError
from memojournal.journal.attachments import AttachmentOutcome, OutcomeStatus
from memojournal.journal.paths import display_datetime, time_of_day

if TYPE_CHECKING:
    from memojournal.journal.attachments import AttachmentMaterializer
    from memojournal.source.base import Memo

MARKER_PREFIX = "> - ID: "

_INLINE_TAG = re.compile(r"#([^#\s]+)#")
_TAG_TOKEN = re.compile(r"#([^#\s]+)(?:#|\s|$)")


def identity_marker(memo_id: str) -> str:
    """The greppable line that identifies a memo inside its bucket."""
    return f"{MARKER_PREFIX}{memo_id}"


def rewrite_tags(content: str) -> str:
    """``#tag#`` → ``#tag``."""
    return _INLINE_TAG.sub(r"#\1", content)


def extract_tags(content: str) -> list[str]:
    """Every ``#token`` in order, duplicates kept."""
    return _TAG_TOKEN.findall(content)


class BlockFormatter:
    """Builds journal blocks, materializing attachments along the way."""

    def __init__(
        self,
        materializer: AttachmentMaterializer,
        *,
        policy: AttachmentPolicy = AttachmentPolicy.ABORT,
        image_heading: str = "图片附件",
        file_heading: str = "其他附件",
        logger: logging.Logger | None = None,
    ) -> None:
        self._materializer = materializer
        self._policy = policy
        self._image_heading = image_heading
        self._file_heading = file_heading
        self._logger = logger or logging.getLogger(__name__)

    async def build(self, memo: Memo, bucket_path: str) -> str:
        """Return the full block for ``memo``.

        Under the abort policy a failed attachment raises its FetchError once
        every attachment has been attempted, and no block is returned.
        """
        if memo.create_time is None:
            raise FormatError(f"memo {memo.id} has no create time")

        block = f"\n- {time_of_day(memo.create_time)}\n"
        block += rewrite_tags(memo.content or "")

        if memo.resources:
            outcomes = await self._materializer.materialize_all(memo.resources, bucket_path)
            failures = [o for o in outcomes if o.status is OutcomeStatus.FAILED]
            if failures and self._policy is AttachmentPolicy.ABORT:
                raise failures[0].error
            if failures:
                self._logger.warning(
                    "Memo %s: %d attachment(s) failed, writing inline markers",
                    memo.id,
                    len(failures),
                )
            block += self._render_attachments(outcomes)

        block += self._render_properties(memo)
        return block

    def _render_attachments(self, outcomes: list[AttachmentOutcome]) -> str:
        images = [o for o in outcomes if o.is_image]
        others = [o for o in outcomes if not o.is_image]

        text = ""
        if images:
            text += f"\n\n### {self._image_heading}\n"
            for outcome in images:
                text += self._render_outcome(outcome, embed=True)
        if others:
            text += f"\n\n### {self._file_heading}\n"
            for outcome in others:
                text += self._render_outcome(outcome, embed=False)
        return text

    def _render_outcome(self, outcome: AttachmentOutcome, *, embed: bool) -> str:
        filename = outcome.resource.filename
        if outcome.status is OutcomeStatus.WRITTEN:
            if embed:
                return f"![{filename}]({outcome.link})\n"
            return f"- [{filename}]({outcome.link})\n"
        if outcome.status is OutcomeStatus.FAILED:
            return f"- ⚠️ {filename} (下载失败)\n"
        return ""

    def _render_properties(self, memo: Memo) -> str:
        text = "\n\n---\n"
        text += "> [!note]- Memo Properties\n"
        text += f"> - Created: {display_datetime(memo.create_time)}\n"
        text += f"> - Updated: {display_datetime(memo.update_time or memo.create_time)}\n"
        text += "> - Type: memo\n"
        tags = extract_tags(memo.content or "")
        if tags:
            text += f"> - Tags: [{', '.join(tags)}]\n"
        text += f"{identity_marker(memo.id)}\n"
        text += f"> - Visibility: {memo.visibility.lower()}\n"
        return text
