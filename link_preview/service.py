# File: link_preview/service.py
"""link_preview.service: fetch + parse behind the result cache; the one entry point the transport calls."""

from __future__ import annotations

from typing import Callable, Optional

from aiohttp import ClientSession

from link_preview.cache import MAX_AGE, TTLCache, get_or_compute
from link_preview.config import ServiceConfig
from link_preview.errors import LinkPreviewError
from link_preview.fetcher import MAX_SIZE, create_session, fetch_text
from link_preview.logger import get_logger
from link_preview.models import Failure, Outcome, Success
from link_preview.parser import ParsedDocument, parse

__all__ = ["LinkPreviewService"]

log = get_logger("service")


class LinkPreviewService:
    """Owns the shared HTTP session and result cache.

    Usable as an async context manager; a session passed in by the caller is
    left open on exit, one created here is closed.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache: Optional[TTLCache[str, Outcome]] = None,
        session: Optional[ClientSession] = None,
        parser: Callable[[str], ParsedDocument] = parse,
    ) -> None:
        self.config = config or ServiceConfig()
        self.cache: TTLCache[str, Outcome] = cache if cache is not None else TTLCache(MAX_AGE)
        self.session = session
        self._owns_session = session is None
        self._parse = parser

    async def __aenter__(self) -> LinkPreviewService:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self.session is None:
            self.session = create_session(self.config)
            self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def get_preview(self, url: str) -> Outcome:
        """Metadata for *url*, served from cache when a live entry exists."""
        return await get_or_compute(self.cache, url, lambda: self._compute(url))

    async def _compute(self, url: str) -> Outcome:
        if self.session is None:
            raise RuntimeError("Session not initialized")
        try:
            text = await fetch_text(self.session, url, max_size=MAX_SIZE)
            document = self._parse(text)
        except LinkPreviewError as exc:
            log.warning("Preview failed for %s: %s", url, exc)
            return Failure(str(exc))
        return Success(document.metadata())
