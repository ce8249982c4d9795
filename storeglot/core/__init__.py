"""
Core module - fundamental data models and infrastructure.

This module contains:
- models: Fragment, translation and memory models
- errors: Exception hierarchy
- utils: Shared utility functions

The parser registry lives in `storeglot.core.registry`; it depends on the
parsers and is imported from there directly.
"""

from storeglot.core.models import (
    ContentType,
    ExtractedText,
    FragmentType,
    MemoryEntry,
    OptimizationResult,
    Translation,
    TranslationMetadata,
    TranslationProvider,
    TranslationStatistics,
    TranslationStatus,
    ValidationResult,
)

from storeglot.core.errors import (
    ContentSourceError,
    JobNotFoundError,
    ParserError,
    StoreglotError,
)

from storeglot.core.utils import (
    generate_id,
    string_hash,
    strip_html,
    utc_now,
)

__all__ = [
    # Models
    "ContentType",
    "ExtractedText",
    "FragmentType",
    "MemoryEntry",
    "OptimizationResult",
    "Translation",
    "TranslationMetadata",
    "TranslationProvider",
    "TranslationStatistics",
    "TranslationStatus",
    "ValidationResult",
    # Errors
    "ContentSourceError",
    "JobNotFoundError",
    "ParserError",
    "StoreglotError",
    # Utils
    "generate_id",
    "string_hash",
    "strip_html",
    "utc_now",
]
