# link_preview/__init__.py
"""
LinkPreview package initializer.
Defines package version and exposes the core entry points.
The CLI lives in :mod:`link_preview.cli`.
"""
__version__ = "0.1.0"

from link_preview.models import Failure, MetaData, Metatag, Outcome, Success
from link_preview.service import LinkPreviewService

__all__ = ["__version__", "Failure", "MetaData", "Metatag", "Outcome", "Success", "LinkPreviewService"]
