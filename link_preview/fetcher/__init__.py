"""Bounded page fetcher."""
from link_preview.fetcher.fetcher import MAX_SIZE, create_session, fetch_text, read_limited

__all__ = ["MAX_SIZE", "create_session", "fetch_text", "read_limited"]
