"""
Content sources - where translatable entities come from.

Implementations:
- SaleorSource: Saleor GraphQL API
- InMemorySource: dict-backed, for tests and local runs
"""

from storeglot.sources.base import (
    ENTITY_TYPES,
    ContentSource,
    EntityField,
    EntityType,
    FieldKind,
    TranslatableEntity,
    get_entity_type,
)
from storeglot.sources.memory import InMemorySource
from storeglot.sources.saleor import SaleorSource

__all__ = [
    "ENTITY_TYPES",
    "ContentSource",
    "EntityField",
    "EntityType",
    "FieldKind",
    "TranslatableEntity",
    "get_entity_type",
    "InMemorySource",
    "SaleorSource",
]
