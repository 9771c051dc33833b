"""HTML metadata parser."""
from link_preview.parser.meta_parser import ParsedDocument, parse

__all__ = ["ParsedDocument", "parse"]
