"""Memos server client over HTTP.

Lists memos through the v1 REST API and downloads attachment bytes from the
server's file endpoint. Requires a personal access token for private memos.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from urllib.parse import quote

import aiohttp

from memojournal.errors import FetchError
from memojournal.source.base import Memo, Resource


class MemosAPIClient:
    """Async client for a Memos server, owning a single aiohttp session."""

    def __init__(
        self,
        base_url: str,
        access_token: str = "",
        *,
        page_size: int = 50,
        timeout: int = 30,
        logger: logging.Logger | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Memos base_url is not configured (set MEMOS_BASE_URL)")
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.page_size = page_size
        self.timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self._session: aiohttp.ClientSession | None = None

    @property
    def name(self) -> str:
        return "memos"

    # ── Session lifecycle ────────────────────────────────────

    async def __aenter__(self) -> MemosAPIClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # ── Listing ──────────────────────────────────────────────

    async def list_memos(self) -> AsyncIterator[Memo]:
        """Yield every memo, following ``nextPageToken`` until exhausted."""
        page_token = ""
        while True:
            payload = await self._fetch_page(page_token)
            for raw in payload.get("memos") or []:
                if not isinstance(raw, dict):
                    self._logger.warning("Skipping malformed memo: %r", raw)
                    continue
                try:
                    yield Memo.from_api(raw)
                except ValueError as e:
                    self._logger.warning("Skipping malformed memo: %s", e)
            page_token = payload.get("nextPageToken", "")
            if not page_token:
                break

    async def _fetch_page(self, page_token: str) -> dict:
        params = {"pageSize": str(self.page_size)}
        if page_token:
            params["pageToken"] = page_token
        url = f"{self.base_url}/api/v1/memos"
        try:
            async with self._get_session().get(url, params=params) as response:
                response.raise_for_status()
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise FetchError(f"Failed to list memos from {self.base_url}: {e}") from e
        if not isinstance(payload, dict):
            raise FetchError(f"Unexpected memo listing from {self.base_url}: {payload!r:.80}")
        return payload

    # ── Attachments ──────────────────────────────────────────

    def resource_url(self, resource: Resource) -> str:
        return f"{self.base_url}/file/{resource.name}/{quote(resource.filename)}"

    async def download_resource(self, resource: Resource) -> bytes | None:
        """Download attachment bytes. Returns None when the server answers 404."""
        url = self.resource_url(resource)
        try:
            async with self._get_session().get(url) as response:
                if response.status == 404:
                    self._logger.warning("Resource %s not found on server", resource.name)
                    return None
                response.raise_for_status()
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(
                f"Failed to download {resource.filename}: {e}", resource=resource.name
            ) from e
