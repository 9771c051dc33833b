# link_preview/fetcher/fetcher.py
"""
Fetcher module: downloads a page as text without ever holding more than
MAX_SIZE bytes of it.

The body is consumed chunk by chunk. Once the byte budget is exhausted the
remaining body is abandoned (the connection is closed instead of being
drained), and the text handed back always ends on a whole UTF-8 character.
"""
from __future__ import annotations

import asyncio
import codecs
from typing import AsyncIterable, List

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector

from link_preview.config import ServiceConfig
from link_preview.errors import FetchError
from link_preview.logger import get_logger

__all__ = ("MAX_SIZE", "create_session", "read_limited", "fetch_text")

MAX_SIZE = 1024 * 1024  # 1 MiB

log = get_logger("fetcher")


def create_session(config: ServiceConfig) -> ClientSession:
    """Build the shared HTTP client: request timeout, per-host pool and User-Agent."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        connector=TCPConnector(limit_per_host=config.pool_per_host),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


async def read_limited(chunks: AsyncIterable[bytes], max_size: int = MAX_SIZE) -> str:
    """
    Decode UTF-8 *chunks* into text, stopping after *max_size* bytes.

    A chunk that would cross the limit contributes only the bytes that fit,
    cut back to the longest valid UTF-8 prefix. Characters split across
    chunk boundaries are reassembled by the incremental decoder. Invalid
    UTF-8 below the limit raises :class:`UnicodeDecodeError`.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    parts: List[str] = []
    total = 0
    truncated = False
    async for chunk in chunks:
        if total + len(chunk) <= max_size:
            parts.append(decoder.decode(chunk))
            total += len(chunk)
            continue
        truncated = True
        # bytes of a character left open by the previous chunk
        pending, _ = decoder.getstate()
        tail = pending + chunk[:max_size - total]
        try:
            parts.append(tail.decode("utf-8"))
        except UnicodeDecodeError as exc:
            parts.append(tail[:exc.start].decode("utf-8"))
        break
    if not truncated:
        parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


async def fetch_text(session: ClientSession, url: str, *, max_size: int = MAX_SIZE) -> str:
    """
    GET *url* and return at most *max_size* bytes of its body as text.

    Any request-level failure raises :class:`FetchError`; truncation is silent.
    """
    try:
        async with session.get(url) as resp:
            text = await read_limited(resp.content.iter_any(), max_size)
            log.debug("Fetched %s: HTTP %s, %d chars", url, resp.status, len(text))
            return text
    except UnicodeDecodeError as exc:
        raise FetchError(url, f"response body is not valid UTF-8 ({exc.reason})") from exc
    except (ClientError, asyncio.TimeoutError, ValueError) as exc:
        raise FetchError(url, _describe(exc)) from exc
