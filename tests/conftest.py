# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from aiohttp import web

from link_preview.config import ServiceConfig


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def basic_config() -> ServiceConfig:
    """
    Return a ServiceConfig with a short timeout for network tests.
    """
    return ServiceConfig(timeout=2.0, user_agent="TestAgent/1.0")


@pytest.fixture()
def sample_html() -> str:
    return """<!doctype html>
<html lang="en">
<head>
  <title> Example   Domain </title>
  <meta name="description" content="An example page">
  <meta property="og:image" content="https://example.com/og.png">
  <meta name="author" content="Jane Doe">
  <meta property="article:published_time" content="2024-05-01T10:00:00Z">
  <meta name="keywords" content="a">
  <meta name="keywords" content="b">
  <link rel="canonical" href="https://example.com/">
  <link rel="alternate" type="application/rss+xml" href="https://example.com/feed.xml">
  <link rel="amphtml" href="https://example.com/amp">
</head>
<body><p>Hello</p></body>
</html>"""
