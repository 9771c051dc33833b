# File: tests/test_server.py
from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from aiohttp import ClientSession

from conftest import serve_app
from link_preview.cache import MAX_AGE, TTLCache
from link_preview.config import ServiceConfig
from link_preview.models import Failure, MetaData, Metatag, Success
from link_preview.server import SERVICE_KEY, build_app
from link_preview.service import LinkPreviewService


class ScriptedService(LinkPreviewService):
    """Service whose fetch+parse step is replaced by canned outcomes."""

    OUTCOMES = {
        "https://ok.example/": Success(
            MetaData.build(title="OK", metatags=[Metatag("description", "fine")])
        ),
        "https://down.example/": Failure("error fetching https://down.example/: ClientConnectorError"),
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.computed: list[str] = []

    async def _compute(self, url: str):
        self.computed.append(url)
        return self.OUTCOMES[url]


@pytest_asyncio.fixture
async def service(basic_config):
    scripted = ScriptedService(basic_config)
    yield scripted
    await scripted.close()


@pytest.mark.asyncio()
async def test_success_is_json_with_cache_header(service, unused_tcp_port: int):
    async for base in serve_app(build_app(service=service), unused_tcp_port):
        async with ClientSession() as client:
            async with client.get(f"{base}/link_preview", params={"url": "https://ok.example/"}) as resp:
                status = resp.status
                headers = resp.headers
                body = await resp.json()

    assert status == 200
    assert headers["Cache-Control"] == f"max-age={MAX_AGE}"
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert body["title"] == "OK"
    assert body["description"] is None
    assert body["metatags"] == [{"name": "description", "content": "fine"}]


@pytest.mark.asyncio()
async def test_failure_is_500_with_error_text(service, unused_tcp_port: int):
    async for base in serve_app(build_app(service=service), unused_tcp_port):
        async with ClientSession() as client:
            for _ in range(2):
                async with client.get(f"{base}/link_preview", params={"url": "https://down.example/"}) as resp:
                    assert resp.status == 500
                    assert await resp.text() == "error fetching https://down.example/: ClientConnectorError"
                    assert "Cache-Control" not in resp.headers

    assert service.computed == ["https://down.example/"]


@pytest.mark.asyncio()
async def test_missing_url_is_bad_request(service, unused_tcp_port: int):
    async for base in serve_app(build_app(service=service), unused_tcp_port):
        async with ClientSession() as client:
            async with client.get(f"{base}/link_preview") as resp:
                status = resp.status
                cors = resp.headers.get("Access-Control-Allow-Origin")

    assert status == 400
    assert cors == "*"
    assert service.computed == []


@pytest.mark.asyncio()
async def test_cors_preflight(service, unused_tcp_port: int):
    async for base in serve_app(build_app(service=service), unused_tcp_port):
        async with ClientSession() as client:
            async with client.options(
                f"{base}/link_preview",
                headers={
                    "Origin": "https://app.example",
                    "Access-Control-Request-Method": "GET",
                    "Access-Control-Request-Headers": "x-requested-with",
                },
            ) as resp:
                status = resp.status
                headers = resp.headers

    assert status == 200
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert headers["Access-Control-Allow-Methods"] == "GET"
    assert headers["Access-Control-Allow-Headers"] == "x-requested-with"


@pytest.mark.asyncio()
async def test_app_creates_and_closes_own_service(basic_config, unused_tcp_port: int):
    app = build_app(basic_config)
    async for base in serve_app(app, unused_tcp_port):
        async with ClientSession() as client:
            async with client.get(f"{base}/link_preview", params={"url": "not a url"}) as resp:
                status = resp.status
                text = await resp.text()
        session = app[SERVICE_KEY].session

    assert status == 500
    assert text.startswith("error fetching not a url")
    assert session.closed


class RecordingCache(TTLCache):
    """TTLCache that remembers how many entries each purge dropped."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.purged: list[int] = []

    async def purge_expired(self) -> int:
        dropped = await super().purge_expired()
        self.purged.append(dropped)
        return dropped


@pytest.mark.asyncio()
async def test_background_purge_drops_expired_entries(clock, unused_tcp_port: int):
    config = ServiceConfig(purge_interval=0.01)
    cache = RecordingCache(MAX_AGE, clock=clock)
    await cache.insert("https://ok.example/", Failure("stale"))
    service = ScriptedService(config, cache=cache)

    try:
        async for _ in serve_app(build_app(config, service=service), unused_tcp_port):
            clock.advance(MAX_AGE + 1)
            for _ in range(200):
                if sum(cache.purged):
                    break
                await asyncio.sleep(0.01)
            assert sum(cache.purged) == 1
            assert len(cache) == 0

        # shutdown cancels the purge task
        calls = len(cache.purged)
        await asyncio.sleep(0.05)
        assert len(cache.purged) == calls
    finally:
        await service.close()
