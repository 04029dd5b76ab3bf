"""Tests for the Memos HTTP client against a local aiohttp server."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from memojournal.errors import FetchError
from memojournal.source.base import Memo, Resource, parse_timestamp
from memojournal.source.memos_api import MemosAPIClient

TOKEN = "secret-token"
PAGE_SIZES = web.AppKey("page_sizes", list)


def _memo_payload(n: int, created: str = "2025-04-20T06:30:00Z") -> dict:
    return {
        "name": f"memos/{n}",
        "createTime": created,
        "updateTime": created,
        "content": f"memo {n} #tag#",
        "visibility": "PUBLIC",
        "resources": [{"name": f"resources/r{n}", "filename": "a.png", "type": "image/png"}],
    }


async def _list_memos(request: web.Request) -> web.Response:
    if request.headers.get("Authorization") != f"Bearer {TOKEN}":
        return web.json_response({"message": "unauthenticated"}, status=401)
    request.app[PAGE_SIZES].append(request.query.get("pageSize"))
    if request.query.get("pageToken") == "page-2":
        return web.json_response({"memos": [_memo_payload(2)], "nextPageToken": ""})
    return web.json_response(
        {"memos": [_memo_payload(1), {"name": "memos/bad"}], "nextPageToken": "page-2"}
    )


async def _get_file(request: web.Request) -> web.Response:
    rid = request.match_info["rid"]
    if rid == "missing":
        return web.Response(status=404)
    if rid == "broken":
        return web.Response(status=500)
    return web.Response(body=f"bytes-{rid}-{request.match_info['filename']}".encode())


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app[PAGE_SIZES] = []
    app.router.add_get("/api/v1/memos", _list_memos)
    app.router.add_get("/file/resources/{rid}/{filename}", _get_file)
    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest_asyncio.fixture
async def client(server):
    c = MemosAPIClient(str(server.make_url("/")), TOKEN, page_size=10)
    yield c
    await c.close()


class TestParsing:
    def test_parse_utc_to_local(self):
        expected = (
            datetime(2025, 4, 20, 6, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        )
        assert parse_timestamp("2025-04-20T06:30:00Z") == expected

    def test_parse_nanoseconds(self):
        parsed = parse_timestamp("2025-04-20T06:30:00.123456789Z")
        assert parsed.microsecond == 123456

    def test_parse_short_fraction(self):
        assert parse_timestamp("2025-04-20T06:30:00.5+00:00").microsecond == 500000

    def test_parse_naive_kept(self):
        assert parse_timestamp("2025-04-20T06:30:00") == datetime(2025, 4, 20, 6, 30)

    def test_parse_empty(self):
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_memo_from_api(self):
        memo = Memo.from_api(_memo_payload(7))
        assert memo.id == "memos/7"
        assert memo.visibility == "PUBLIC"
        assert memo.resources == (Resource("resources/r7", "a.png", "image/png", 0),)

    def test_memo_attachments_key(self):
        payload = _memo_payload(3)
        payload["attachments"] = payload.pop("resources")
        assert Memo.from_api(payload).resources[0].name == "resources/r3"

    def test_memo_without_update_time(self):
        payload = _memo_payload(3)
        del payload["updateTime"]
        memo = Memo.from_api(payload)
        assert memo.update_time == memo.create_time

    def test_memo_without_create_time(self):
        with pytest.raises(ValueError):
            Memo.from_api({"name": "memos/1"})

    def test_source_fragment(self):
        assert Resource("resources/abc", "x.png").source_fragment == "abc"
        assert Resource("abc", "x.png").source_fragment == "abc"


class TestMemosAPIClient:
    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            MemosAPIClient("")

    @pytest.mark.asyncio
    async def test_list_follows_pages(self, client, server):
        memos = [m async for m in client.list_memos()]
        assert [m.id for m in memos] == ["memos/1", "memos/2"]
        assert server.app[PAGE_SIZES] == ["10", "10"]

    @pytest.mark.asyncio
    async def test_list_unauthorized(self, server):
        async with MemosAPIClient(str(server.make_url("/")), "wrong") as c:
            with pytest.raises(FetchError):
                [m async for m in c.list_memos()]

    @pytest.mark.asyncio
    async def test_download(self, client):
        data = await client.download_resource(Resource("resources/r1", "a.png"))
        assert data == b"bytes-r1-a.png"

    @pytest.mark.asyncio
    async def test_download_quotes_filename(self, client):
        data = await client.download_resource(Resource("resources/r1", "my photo.png"))
        assert data == b"bytes-r1-my photo.png"

    @pytest.mark.asyncio
    async def test_download_missing_is_none(self, client):
        assert await client.download_resource(Resource("resources/missing", "a.png")) is None

    @pytest.mark.asyncio
    async def test_download_server_error(self, client):
        with pytest.raises(FetchError) as exc_info:
            await client.download_resource(Resource("resources/broken", "a.png"))
        assert exc_info.value.resource == "resources/broken"

    @pytest.mark.asyncio
    async def test_download_unreachable(self):
        async with MemosAPIClient("http://127.0.0.1:1", timeout=2) as c:
            with pytest.raises(FetchError):
                await c.download_resource(Resource("resources/r1", "a.png"))


def _listing_server(body: str) -> TestServer:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text=body, content_type="application/json")

    app = web.Application()
    app.router.add_get("/api/v1/memos", handler)
    return TestServer(app)


class TestMalformedListing:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["{not json", "[1, 2, 3]", '"memos"'])
    async def test_bad_body_is_fetch_error(self, body):
        test_server = _listing_server(body)
        await test_server.start_server()
        try:
            async with MemosAPIClient(str(test_server.make_url("/"))) as c:
                with pytest.raises(FetchError):
                    [m async for m in c.list_memos()]
        finally:
            await test_server.close()

    @pytest.mark.asyncio
    async def test_non_dict_memo_entries_skipped(self):
        test_server = _listing_server('{"memos": ["junk", null], "nextPageToken": ""}')
        await test_server.start_server()
        try:
            async with MemosAPIClient(str(test_server.make_url("/"))) as c:
                assert [m async for m in c.list_memos()] == []
        finally:
            await test_server.close()
