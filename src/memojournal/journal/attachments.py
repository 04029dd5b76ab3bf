"""Attachment materialization: fetch bytes, store beside the bucket, link back."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from memojournal.errors import FetchError
from memojournal.journal.paths import is_image, parent_dir, relative_path, sanitize_name

if TYPE_CHECKING:
    from memojournal.journal.vault import Vault
    from memojournal.source.base import MemoSource, Resource


class OutcomeStatus(str, enum.Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class AttachmentOutcome:
    """Result of materializing one attachment."""

    resource: Resource
    status: OutcomeStatus
    link: str | None = None
    error: FetchError | None = None

    @property
    def is_image(self) -> bool:
        return is_image(self.resource.filename)


def local_filename(resource: Resource) -> str:
    """``<source fragment>_<sanitized display name>``, unique across memos."""
    return f"{resource.source_fragment}_{sanitize_name(resource.filename)}"


class AttachmentMaterializer:
    """Downloads attachments into ``<bucket dir>/<resource_dir>/``."""

    def __init__(
        self,
        source: MemoSource,
        vault: Vault,
        resource_dir: str = "resources",
        logger: logging.Logger | None = None,
    ) -> None:
        self._source = source
        self._vault = vault
        self._resource_dir = resource_dir
        self._logger = logger or logging.getLogger(__name__)

    def resource_dir_for(self, bucket_path: str) -> str:
        base = parent_dir(bucket_path)
        return f"{base}/{self._resource_dir}" if base else self._resource_dir

    async def ensure_directory(self, path: str) -> None:
        if not await self._vault.exists(path):
            # mkdir tolerates a concurrent create between the check and here
            await self._vault.mkdir(path)

    async def materialize(self, resource: Resource, bucket_path: str) -> str | None:
        """Fetch and store one attachment.

        Returns the link relative to ``bucket_path``, or None if the source
        reports the resource as absent. Raises FetchError if the source is
        unreachable or the file cannot be stored.
        """
        data = await self._source.download_resource(resource)
        if not data:
            return None

        resource_dir = self.resource_dir_for(bucket_path)
        local_path = f"{resource_dir}/{local_filename(resource)}"
        try:
            await self.ensure_directory(resource_dir)
            await self._vault.write_binary(local_path, data)
        except OSError as e:
            raise FetchError(
                f"Failed to store {resource.filename} at {local_path}: {e}",
                resource=resource.name,
            ) from e

        self._logger.debug("Stored attachment %s (%d bytes)", local_path, len(data))
        return relative_path(bucket_path, local_path)

    async def materialize_all(
        self, resources: Sequence[Resource], bucket_path: str
    ) -> list[AttachmentOutcome]:
        """Attempt every attachment independently, in order."""
        outcomes: list[AttachmentOutcome] = []
        for resource in resources:
            try:
                link = await self.materialize(resource, bucket_path)
            except FetchError as e:
                self._logger.warning("Attachment %s failed: %s", resource.filename, e)
                outcomes.append(AttachmentOutcome(resource, OutcomeStatus.FAILED, error=e))
                continue

            if link is None:
                self._logger.warning("Attachment %s is absent at source, skipping", resource.name)
                outcomes.append(AttachmentOutcome(resource, OutcomeStatus.SKIPPED))
            else:
                outcomes.append(AttachmentOutcome(resource, OutcomeStatus.WRITTEN, link=link))
        return outcomes
