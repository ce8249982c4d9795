"""
Core data models for structured content translation.

These models represent the fundamental entities: extracted text fragments,
translation records, and translation memory entries. Every fragment carries
a structural path so that a translated value can be put back exactly where
it came from.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from storeglot.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class ContentType(str, Enum):
    """Structural encodings a document can have."""

    PLAIN_TEXT = "PLAIN_TEXT"
    HTML = "HTML"
    MARKDOWN = "MARKDOWN"
    EDITOR_JS = "EDITOR_JS"
    GRAPE_JS = "GRAPE_JS"
    JSON = "JSON"


class FragmentType(str, Enum):
    """How a fragment is substituted back (body text vs. attribute value)."""

    TEXT = "text"
    ALT = "alt"
    TITLE = "title"
    PLACEHOLDER = "placeholder"
    META = "meta"


class TranslationStatus(str, Enum):
    """Lifecycle of a translation record or job."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REVIEW_NEEDED = "REVIEW_NEEDED"
    APPROVED = "APPROVED"


class TranslationProvider(str, Enum):
    """Which backend produced a translation."""

    DEEPL = "DEEPL"
    LLM = "LLM"
    MANUAL = "MANUAL"
    ECHO = "ECHO"


# =============================================================================
# Fragments
# =============================================================================


class ExtractedText(BaseModel):
    """
    One addressable, independently translatable text span.

    The `path` is derived from the document structure and is reproducible:
    extracting the same document twice yields the same paths in the same
    order, which is what lets `rebuild` find the node again.
    """

    id: str
    original_text: str
    translated_text: str | None = None
    path: str
    context: str = ""
    type: FragmentType = FragmentType.TEXT

    @property
    def resolved_text(self) -> str:
        """The translation if there is a usable one, otherwise the source."""
        return self.translated_text or self.original_text

    def with_translation(self, translated_text: str | None) -> ExtractedText:
        """Return a copy carrying the given translation."""
        return self.model_copy(update={"translated_text": translated_text})


# =============================================================================
# Translation Records
# =============================================================================


class TranslationMetadata(BaseModel):
    """Audit trail attached to a translation record."""

    content_type: str
    entity_id: str = ""
    field: str = "content"
    original_structure: Any = None
    preserve_formatting: bool = True
    extracted_texts: list[ExtractedText] = Field(default_factory=list)
    optimizations: list[str] = Field(default_factory=list)
    error: str | None = None


class Translation(BaseModel):
    """
    One complete translation unit.

    Keeps the source document, the reconstructed target document, and the
    full fragment list so a reviewer can validate or re-edit individual
    passages later.
    """

    id: str = Field(default_factory=lambda: generate_id("trans"))
    source_text: str
    translated_text: str = ""
    source_language: str
    target_language: str
    context: str = ""
    status: TranslationStatus = TranslationStatus.PENDING
    provider: TranslationProvider = TranslationProvider.DEEPL
    content_type: ContentType = ContentType.PLAIN_TEXT
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    metadata: TranslationMetadata | None = None

    def mark(self, status: TranslationStatus) -> None:
        """Move to a new status and touch the timestamp."""
        self.status = status
        self.updated_at = utc_now()


class ValidationResult(BaseModel):
    """Outcome of checking a translation against its source."""

    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    """Content prepared for translation plus a note of what was changed."""

    optimized_content: str
    optimizations: list[str] = Field(default_factory=list)


# =============================================================================
# Translation Memory
# =============================================================================


class MemoryEntry(BaseModel):
    """A cached translation for one (normalized text, language pair)."""

    id: str
    source_text: str
    translated_text: str
    source_language: str
    target_language: str
    content_type: str = "text"
    confidence: float = 1.0
    created_at: datetime = Field(default_factory=utc_now)
    usage_count: int = 1
    last_used: datetime = Field(default_factory=utc_now)

    def touch(self) -> None:
        """Record a cache hit."""
        self.usage_count += 1
        self.last_used = utc_now()


class TranslationStatistics(BaseModel):
    """Aggregate numbers for dashboards and the stats endpoint."""

    total_translations: int = 0
    characters_translated: int = 0
    success_rate: float = 100.0
    cache_hits: int = 0
    cache_misses: int = 0
    cache_hit_rate: float = 0.0
    language_distribution: dict[str, int] = Field(default_factory=dict)
