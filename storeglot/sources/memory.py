"""In-memory content source."""

from __future__ import annotations

from storeglot.sources.base import ContentSource, TranslatableEntity, get_entity_type


class InMemorySource(ContentSource):
    """
    Keeps entities and their translations in dicts.

    Usage:
        source = InMemorySource([TranslatableEntity(id="p1", content_type="product", ...)])
        await source.list_untranslated("product", "fr")
    """

    def __init__(self, entities: list[TranslatableEntity] | None = None):
        self._entities: dict[str, TranslatableEntity] = {}
        self._translations: dict[tuple[str, str], dict[str, str]] = {}
        for entity in entities or []:
            self.add(entity)

    def add(self, entity: TranslatableEntity) -> None:
        self._entities[entity.id] = entity

    def translation(self, entity_id: str, target_language: str) -> dict[str, str] | None:
        return self._translations.get((entity_id, target_language))

    async def list_untranslated(self, content_type: str, target_language: str) -> list[TranslatableEntity]:
        get_entity_type(content_type)
        return [
            entity
            for entity in self._entities.values()
            if entity.content_type == content_type
            and (entity.id, target_language) not in self._translations
        ]

    async def write_translation(
        self,
        entity: TranslatableEntity,
        target_language: str,
        translations: dict[str, str],
    ) -> None:
        existing = self._translations.setdefault((entity.id, target_language), {})
        existing.update(translations)
