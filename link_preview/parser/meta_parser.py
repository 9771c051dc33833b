# === FILE: link_preview/parser/meta_parser.py ===
"""HTML metadata extraction for LinkPreview.

The fetcher may hand over a document cut off at the size limit, so the parser
must cope with missing closing tags; ``html.parser`` does.  Extraction is
split in two steps so callers can hold on to the parsed tree:

* :func:`parse`: markup → :class:`ParsedDocument` (raises ``ParseError``).
* :meth:`ParsedDocument.metadata`: tree → :class:`~link_preview.models.MetaData`.

Field sources, first match wins:

* title      : ``<title>``, then ``og:title``.
* description: ``<meta name="description">``, then ``og:description``.
* canonical  : ``<link rel="canonical">``, then ``og:url``.
* language   : ``<html lang>``, then ``http-equiv="content-language"``.
* rss        : ``<link type="application/rss+xml">`` (or Atom).
* image      : ``og:image``, then ``twitter:image``.
* amp        : ``<link rel="amphtml">``.
* author     : ``<meta name="author">``, then ``article:author``.
* date       : ``article:published_time``, then ``<meta name="date">``.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Iterator, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_preview.errors import ParseError
from link_preview.models import MetaData, Metatag

__all__: Sequence[str] = ("ParsedDocument", "parse")

_NAME_ATTRS = ("name", "property", "itemprop", "http-equiv")
_FEED_TYPES = ("application/rss+xml", "application/atom+xml")


def _clean(value: object) -> Optional[str]:
    """Collapse whitespace; empty values count as absent."""
    if value is None:
        return None
    if isinstance(value, list):  # multi-valued attributes such as rel/class
        value = " ".join(value)
    text = " ".join(str(value).split())
    return text or None


class ParsedDocument:
    """Parsed HTML tree with lookups for the fields of :class:`MetaData`."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    # Lookup helpers --------------------------------------------------------
    def _meta_tags(self) -> Iterator[Tag]:
        for tag in self._soup.find_all("meta"):
            if isinstance(tag, Tag):
                yield tag

    def meta(self, key: str) -> Optional[str]:
        """Content of the first ``<meta>`` whose name/property equals *key* (case-insensitive)."""
        key = key.lower()
        for tag in self._meta_tags():
            for attr in _NAME_ATTRS:
                name = _clean(tag.get(attr))
                if name and name.lower() == key:
                    content = _clean(tag.get("content"))
                    if content:
                        return content
        return None

    def link(self, rel: Optional[str] = None, type_: Optional[str] = None) -> Optional[str]:
        """``href`` of the first ``<link>`` matching *rel* and/or *type_*."""
        for tag in self._soup.find_all("link", href=True):
            if not isinstance(tag, Tag):
                continue
            if rel is not None:
                rels = [r.lower() for r in (tag.get("rel") or [])]
                if rel not in rels:
                    continue
            if type_ is not None and (_clean(tag.get("type")) or "").lower() != type_:
                continue
            href = _clean(tag.get("href"))
            if href:
                return href
        return None

    # Fields ----------------------------------------------------------------
    def title(self) -> Optional[str]:
        tag = self._soup.find("title")
        title = _clean(tag.get_text()) if tag else None
        return title or self.meta("og:title")

    def language(self) -> Optional[str]:
        html = self._soup.find("html")
        lang = _clean(html.get("lang")) if isinstance(html, Tag) else None
        return lang or self.meta("content-language")

    def rss(self) -> Optional[str]:
        for feed_type in _FEED_TYPES:
            href = self.link(type_=feed_type)
            if href:
                return href
        return None

    def metatags(self) -> Optional[list[Metatag]]:
        """All named ``<meta>`` tags in document order; *None* when there are none."""
        tags: list[Metatag] = []
        for tag in self._meta_tags():
            content = _clean(tag.get("content"))
            if content is None:
                continue
            names = (_clean(tag.get(attr)) for attr in _NAME_ATTRS)
            name = next((n for n in names if n), None)
            if name:
                tags.append(Metatag(name=name, content=content))
        return tags or None

    def metadata(self) -> MetaData:
        return MetaData.build(
            title=self.title(),
            description=self.meta("description") or self.meta("og:description"),
            canonical=self.link(rel="canonical") or self.meta("og:url"),
            language=self.language(),
            rss=self.rss(),
            image=self.meta("og:image") or self.meta("twitter:image"),
            amp=self.link(rel="amphtml"),
            author=self.meta("author") or self.meta("article:author"),
            date=self.meta("article:published_time") or self.meta("date"),
            metatags=self.metatags(),
        )


def parse(text: str) -> ParsedDocument:
    """Parse HTML markup into a :class:`ParsedDocument`.

    Raises
    ------
    ParseError
        If *text* is not a string or the HTML parser rejects it.
    """
    if not isinstance(text, str):
        raise ParseError(f"expected HTML text, got {type(text).__name__}")
    try:
        soup = BeautifulSoup(text, "html.parser")
    except Exception as exc:  # html.parser raises assorted errors on broken markup
        raise ParseError(f"failed to parse HTML: {exc}") from exc
    return ParsedDocument(soup)
