# link_preview/errors.py
"""
Exception hierarchy of the link preview pipeline.

Both concrete errors are collapsed to plain text by the service before the
outcome is cached, so only their messages reach callers.
"""
from __future__ import annotations

__all__ = ("LinkPreviewError", "FetchError", "ParseError")


class LinkPreviewError(Exception):
    """Base class for all errors raised while building a preview."""


class FetchError(LinkPreviewError):
    """Network, timeout, transport or decoding failure while downloading a page."""

    def __init__(self, url: str, reason: object) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"error fetching {url}: {reason}")


class ParseError(LinkPreviewError):
    """The downloaded text could not be interpreted as an HTML document."""
