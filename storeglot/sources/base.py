"""
Content source abstraction.

A content source is the store the translations are for: it lists entities
that still lack a translation and accepts finished translations back.
Swapping implementations (Saleor, in-memory) does not change the sync code.

The entity catalogue describes which fields of which entity types are
translatable and how they are validated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from storeglot.core.errors import ContentSourceError
from storeglot.core.models import ContentType
from storeglot.core.utils import utc_now


# =============================================================================
# Catalogue
# =============================================================================


class FieldKind(str, Enum):
    TEXT = "text"
    RICH_TEXT = "rich_text"


class EntityField(BaseModel):
    """A translatable field of an entity type."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    max_length: int | None = None

    @property
    def content_type(self) -> ContentType | None:
        """Declared content type; rich text is detected (usually Editor.js)."""
        return None if self.kind == FieldKind.RICH_TEXT else ContentType.PLAIN_TEXT

    def check(self, value: str) -> list[str]:
        """Validation problems of a translated value."""
        issues = []
        if self.required and not value.strip():
            issues.append(f"Field '{self.name}' is required")
        if self.max_length is not None and len(value) > self.max_length:
            issues.append(
                f"Field '{self.name}' must be under {self.max_length} characters (got {len(value)})"
            )
        return issues


class EntityType(BaseModel):
    """A kind of store entity (products, categories, ...)."""

    id: str
    name: str
    enabled: bool = True
    priority: str = "medium"
    estimated_characters: int = 0
    fields: list[EntityField]

    def field(self, name: str) -> EntityField | None:
        return next((f for f in self.fields if f.name == name), None)


def _name(max_length: int = 250) -> EntityField:
    return EntityField(name="name", required=True, max_length=max_length)


DESCRIPTION = EntityField(name="description", kind=FieldKind.RICH_TEXT)
SEO_TITLE = EntityField(name="seoTitle", max_length=60)
SEO_DESCRIPTION = EntityField(name="seoDescription", max_length=160)

ENTITY_TYPES: dict[str, EntityType] = {
    "product": EntityType(
        id="product",
        name="Products",
        priority="high",
        estimated_characters=500,
        fields=[_name(), DESCRIPTION, SEO_TITLE, SEO_DESCRIPTION],
    ),
    "category": EntityType(
        id="category",
        name="Categories",
        estimated_characters=200,
        fields=[_name(), DESCRIPTION, SEO_TITLE],
    ),
    "collection": EntityType(
        id="collection",
        name="Collections",
        estimated_characters=300,
        fields=[_name(), DESCRIPTION],
    ),
    "attribute": EntityType(
        id="attribute",
        name="Attributes",
        enabled=False,
        priority="low",
        estimated_characters=100,
        fields=[_name()],
    ),
}


def get_entity_type(content_type: str) -> EntityType:
    if content_type not in ENTITY_TYPES:
        raise ContentSourceError(
            f"Unknown content type '{content_type}' (expected one of: {', '.join(ENTITY_TYPES)})"
        )
    return ENTITY_TYPES[content_type]


# =============================================================================
# Entities
# =============================================================================


class TranslatableEntity(BaseModel):
    """One store entity with its source-language field values."""

    id: str
    content_type: str
    name: str = ""
    fields: dict[str, str] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def character_count(self) -> int:
        return sum(len(value) for value in self.fields.values())


class ContentSource(ABC):
    """
    Where entities come from and where translations go.

    Implementations:
        SaleorSource - Saleor GraphQL API
        InMemorySource - dict-backed, for tests and local runs
    """

    @abstractmethod
    async def list_untranslated(self, content_type: str, target_language: str) -> list[TranslatableEntity]:
        """Entities of a type that have no translation for the language yet."""
        pass

    @abstractmethod
    async def write_translation(
        self,
        entity: TranslatableEntity,
        target_language: str,
        translations: dict[str, str],
    ) -> None:
        """Store translated field values for an entity."""
        pass
