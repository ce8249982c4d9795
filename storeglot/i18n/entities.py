"""
Entity sync.

Translates store entities field by field and writes the results back to
their content source:

    source.list_untranslated -> process_document per field -> source.write_translation

A field whose translation fails validation (e.g. an SEO title over its
length limit) is not written; the other fields of the entity still are.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from storeglot.core.errors import ContentSourceError
from storeglot.core.models import TranslationStatus
from storeglot.i18n.orchestrator import TranslationOrchestrator
from storeglot.sources.base import ContentSource, EntityType, TranslatableEntity, get_entity_type

logger = logging.getLogger(__name__)


class EntityResult(BaseModel):
    """Outcome of translating one entity into one language."""

    entity_id: str
    content_type: str
    target_language: str
    status: TranslationStatus = TranslationStatus.PENDING
    fields: dict[str, str] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    character_count: int = 0


class EntityTranslator:
    """
    Syncs translations of store entities.

    Usage:
        translator = EntityTranslator(orchestrator, SaleorSource.from_settings())
        results = await translator.translate_entities("product", "fr")
    """

    def __init__(
        self,
        orchestrator: TranslationOrchestrator,
        source: ContentSource,
        source_language: str | None = "en",
    ):
        self.orchestrator = orchestrator
        self.source = source
        self.source_language = source_language

    async def translate_entities(self, content_type: str, target_language: str) -> list[EntityResult]:
        """Translate every untranslated entity of a type and write the results back."""
        entity_type = get_entity_type(content_type)
        entities = await self.source.list_untranslated(content_type, target_language)

        results = []
        for entity in entities:
            results.append(await self.translate_entity(entity, entity_type, target_language))

        failed = sum(1 for r in results if r.status == TranslationStatus.FAILED)
        logger.info(
            "Translated %d %s entities to %s (%d failed)",
            len(results) - failed,
            content_type,
            target_language,
            failed,
        )
        return results

    async def translate_entity(
        self,
        entity: TranslatableEntity,
        entity_type: EntityType,
        target_language: str,
    ) -> EntityResult:
        result = EntityResult(
            entity_id=entity.id,
            content_type=entity.content_type,
            target_language=target_language,
            status=TranslationStatus.IN_PROGRESS,
            character_count=entity.character_count,
        )

        for field in entity_type.fields:
            text = entity.fields.get(field.name, "")
            if not text.strip():
                continue
            translation = await self.orchestrator.process_document(
                text,
                self.source_language,
                target_language,
                context=f"{entity_type.name} {field.name}",
                content_type=field.content_type,
                entity_id=entity.id,
                field=field.name,
            )
            issues = field.check(translation.translated_text)
            if issues:
                result.errors.extend(issues)
                continue
            result.fields[field.name] = translation.translated_text

        try:
            await self.source.write_translation(entity, target_language, result.fields)
        except ContentSourceError as e:
            logger.error("Failed to write translation of %s: %s", entity.id, e)
            result.errors.append(str(e))
            result.status = TranslationStatus.FAILED
            return result

        result.status = TranslationStatus.FAILED if result.errors else TranslationStatus.COMPLETED
        return result
