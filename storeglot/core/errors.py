"""
Exception hierarchy.

Every error raised on purpose by storeglot derives from `StoreglotError`
so callers at the edges (CLI, API) can catch one type.
"""

from __future__ import annotations


class StoreglotError(Exception):
    """Base exception for all custom errors."""


class ParserError(StoreglotError):
    """Raised when a document cannot be handled by the requested parser."""


class JobNotFoundError(StoreglotError):
    """Raised when a translation job ID is unknown."""


class ContentSourceError(StoreglotError):
    """Raised when the content source/sink reports a failure."""
