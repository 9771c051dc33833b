# link_preview/models.py
"""
Data models for the link preview service.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

__all__ = ("Metatag", "MetaData", "Success", "Failure", "Outcome")

_TEXT_FIELDS: Tuple[str, ...] = (
    "title",
    "description",
    "canonical",
    "language",
    "rss",
    "image",
    "amp",
    "author",
    "date",
)


@dataclass(frozen=True, slots=True)
class Metatag:
    """A single ``<meta>`` name/content pair."""

    name: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "content": self.content}


@dataclass(frozen=True, slots=True)
class MetaData:
    """Metadata extracted from one page. Built once and never mutated."""

    title: Optional[str] = None
    description: Optional[str] = None
    canonical: Optional[str] = None
    language: Optional[str] = None
    rss: Optional[str] = None
    image: Optional[str] = None
    amp: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    # document order, duplicates kept
    metatags: Optional[Tuple[Metatag, ...]] = None

    @classmethod
    def build(cls, metatags: Optional[Iterable[Metatag]] = None, **fields: Optional[str]) -> MetaData:
        """Construct from parser output, freezing *metatags* into a tuple."""
        tags = tuple(metatags) if metatags is not None else None
        return cls(metatags=tags, **fields)

    def to_dict(self) -> Dict[str, Any]:
        """Interchange shape: nullable strings plus a nullable ``metatags`` list."""
        data: Dict[str, Any] = {name: getattr(self, name) for name in _TEXT_FIELDS}
        data["metatags"] = None if self.metatags is None else [tag.to_dict() for tag in self.metatags]
        return data


@dataclass(frozen=True, slots=True)
class Success:
    """Successful fetch + parse."""

    metadata: MetaData


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed fetch or parse; *error* is served verbatim."""

    error: str


Outcome = Union[Success, Failure]
