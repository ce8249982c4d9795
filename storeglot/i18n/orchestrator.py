"""
Translation orchestrator.

Drives a document through the pipeline:

    registry picks parser -> extract -> batched translation -> rebuild

Fragments are translated in fixed-size batches. Within a batch every
fragment is translated concurrently and on its own, so one failing fragment
keeps its source text while the rest of the batch succeeds. Batches are
separated by a fixed delay to stay under provider rate limits. The
translation memory is consulted before every backend call and updated after
every batch, so repeat runs over the same content make no backend calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import BaseModel

from storeglot.backends.base import TranslationBackend, retrying
from storeglot.backends.errors import BackendError, BackendErrorKind
from storeglot.config import Settings, get_settings
from storeglot.core.models import (
    ContentType,
    ExtractedText,
    OptimizationResult,
    Translation,
    TranslationMetadata,
    TranslationStatistics,
    TranslationStatus,
    ValidationResult,
)
from storeglot.core.registry import ParserRegistry, default_registry
from storeglot.i18n.memory import TranslationMemory
from storeglot.i18n.optimize import optimize_for_content_type

logger = logging.getLogger(__name__)

STRUCTURED_TYPES = (ContentType.EDITOR_JS, ContentType.GRAPE_JS, ContentType.JSON)


class BulkItem(BaseModel):
    """One document in a bulk run."""

    content: str
    context: str = ""
    content_type: ContentType | None = None


def analyze_structure(content: str, content_type: ContentType) -> Any:
    """Snapshot of the source structure kept on the translation record."""
    if content_type in STRUCTURED_TYPES:
        try:
            return json.loads(content)
        except ValueError:
            pass
    return {"type": content_type.value, "length": len(content)}


class TranslationOrchestrator:
    """
    Coordinates parsers, the translation memory and a backend.

    Usage:
        orchestrator = TranslationOrchestrator(DeepLBackend(api_key=...))

        translation = await orchestrator.process_document(
            editorjs_json, source_language="en", target_language="de"
        )
        translation.translated_text  # same blocks, German text
    """

    def __init__(
        self,
        backend: TranslationBackend,
        memory: TranslationMemory | None = None,
        registry: ParserRegistry | None = None,
        batch_size: int = 10,
        batch_delay: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.backend = backend
        self.memory = memory if memory is not None else TranslationMemory()
        self.registry = registry or default_registry()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.translated_count = 0
        self.failed_count = 0
        self.characters_translated = 0

    @classmethod
    def from_settings(
        cls,
        backend: TranslationBackend,
        memory: TranslationMemory | None = None,
        registry: ParserRegistry | None = None,
        settings: Settings | None = None,
    ) -> TranslationOrchestrator:
        settings = settings or get_settings()
        return cls(
            backend,
            memory=memory,
            registry=registry,
            batch_size=settings.translation_batch_size,
            batch_delay=settings.batch_delay_seconds,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay_seconds,
        )

    # =========================================================================
    # Backend Calls
    # =========================================================================

    async def call_backend(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        """One backend call, retrying transient failures with exponential backoff."""
        async for attempt in retrying(self.max_retries, self.retry_delay):
            with attempt:
                translations = await self.backend.translate(
                    texts, target_language, source_language, context
                )
        if len(translations) != len(texts):
            raise BackendError(
                BackendErrorKind.UNKNOWN,
                f"Backend returned {len(translations)} translations for {len(texts)} texts",
            )
        return translations

    # =========================================================================
    # Fragments
    # =========================================================================

    async def translate_fragments(
        self,
        fragments: list[ExtractedText],
        target_language: str,
        source_language: str | None = None,
    ) -> list[ExtractedText]:
        """
        Translate fragments batch by batch.

        Returns a new list with the same length and order as `fragments`.
        Fragments that fail carry their source text as the translation.
        """
        results: list[ExtractedText] = []
        batches = [
            fragments[start:start + self.batch_size]
            for start in range(0, len(fragments), self.batch_size)
        ]

        for index, batch in enumerate(batches):
            outcomes = await asyncio.gather(
                *(self._translate_fragment(f, target_language, source_language) for f in batch)
            )

            fresh = [(fragment, translated) for fragment, (translated, is_fresh) in zip(batch, outcomes) if is_fresh]
            if fresh:
                self.memory.store(
                    [fragment.original_text for fragment, _ in fresh],
                    [translated for _, translated in fresh],
                    source_language,
                    target_language,
                )

            results.extend(
                fragment.with_translation(translated)
                for fragment, (translated, _) in zip(batch, outcomes)
            )

            if index < len(batches) - 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        return results

    async def _translate_fragment(
        self,
        fragment: ExtractedText,
        target_language: str,
        source_language: str | None,
    ) -> tuple[str, bool]:
        """Translated text and whether it came from the backend."""
        cached = self.memory.lookup(fragment.original_text, source_language, target_language)
        if cached is not None:
            return cached, False

        try:
            [translated] = await self.call_backend(
                [fragment.original_text], target_language, source_language, fragment.context
            )
        except Exception as e:
            self.failed_count += 1
            logger.error("Failed to translate fragment %s: %s", fragment.path, e)
            return fragment.original_text, False

        self.translated_count += 1
        self.characters_translated += len(fragment.original_text)
        return translated, bool(translated)

    # =========================================================================
    # Plain Text Lists
    # =========================================================================

    async def translate_texts(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        """
        Translate a list of texts in one backend call, merging memory hits.

        Unlike `translate_fragments` a failure here propagates: callers
        (jobs, entity sync) record it on their own status.
        """
        cached = self.memory.lookup_many(texts, source_language, target_language)
        missing = [i for i, hit in enumerate(cached) if hit is None and texts[i].strip()]

        results: list[str] = [hit if hit is not None else text for hit, text in zip(cached, texts)]
        if not missing:
            return results

        try:
            fresh = await self.call_backend(
                [texts[i] for i in missing], target_language, source_language, context
            )
        except BackendError:
            self.failed_count += len(missing)
            raise

        self.memory.store([texts[i] for i in missing], fresh, source_language, target_language)
        for i, translated in zip(missing, fresh):
            results[i] = translated
            self.translated_count += 1
            self.characters_translated += len(texts[i])
        return results

    # =========================================================================
    # Documents
    # =========================================================================

    async def process_document(
        self,
        content: str,
        source_language: str | None,
        target_language: str,
        context: str = "",
        content_type: ContentType | str | None = None,
        entity_id: str = "",
        field: str = "content",
    ) -> Translation:
        """
        Translate a whole document and return the translation record.

        Uses the declared content type, or detection when none is given.
        Content no parser can extract anything from is translated as plain
        text.
        """
        parser = self.registry.select(content, content_type)
        fragments = parser.extract(content)
        if not fragments and parser is not self.registry.fallback:
            logger.info("No fragments extracted as %s, translating as plain text", parser.content_type.value)
            parser = self.registry.fallback
            fragments = parser.extract(content)

        translation = Translation(
            source_text=content,
            source_language=source_language or "auto",
            target_language=target_language,
            context=context,
            provider=self.backend.provider,
            content_type=parser.content_type,
        )
        translation.mark(TranslationStatus.IN_PROGRESS)
        logger.debug(
            "Translating %d %s fragments to %s",
            len(fragments),
            parser.content_type.value,
            target_language,
        )

        translated = await self.translate_fragments(fragments, target_language, source_language)
        translation.translated_text = parser.rebuild(content, translated)
        translation.metadata = TranslationMetadata(
            content_type=parser.content_type.value,
            entity_id=entity_id or context,
            field=field,
            original_structure=analyze_structure(content, parser.content_type),
            extracted_texts=translated,
            optimizations=self.optimize_for_content_type(
                content, parser.content_type, target_language
            ).optimizations,
        )
        translation.mark(TranslationStatus.COMPLETED)
        return translation

    async def bulk_process(
        self,
        items: list[BulkItem | dict],
        source_language: str | None,
        target_languages: list[str],
    ) -> list[Translation]:
        """
        Translate every item into every target language.

        An item that fails produces a FAILED record carrying the error
        message; the run continues with the next item.
        """
        results: list[Translation] = []
        for raw in items:
            item = raw if isinstance(raw, BulkItem) else BulkItem.model_validate(raw)
            for target_language in target_languages:
                try:
                    results.append(
                        await self.process_document(
                            item.content,
                            source_language,
                            target_language,
                            context=item.context,
                            content_type=item.content_type,
                        )
                    )
                except Exception as e:
                    logger.error("Failed to process content for %s: %s", target_language, e)
                    content_type = item.content_type or ContentType.PLAIN_TEXT
                    results.append(
                        Translation(
                            source_text=item.content,
                            source_language=source_language or "auto",
                            target_language=target_language,
                            context=item.context,
                            status=TranslationStatus.FAILED,
                            provider=self.backend.provider,
                            content_type=content_type,
                            metadata=TranslationMetadata(
                                content_type=content_type.value,
                                entity_id=item.context,
                                error=str(e) or type(e).__name__,
                            ),
                        )
                    )
        return results

    # =========================================================================
    # Review Helpers
    # =========================================================================

    def validate_translation(self, translation: Translation) -> ValidationResult:
        """
        Check a finished translation for structural and obvious quality issues.

        Problems are reported as issues, never raised.
        """
        issues: list[str] = []
        suggestions: list[str] = []

        has_structure = translation.metadata is not None and translation.metadata.original_structure is not None
        if has_structure and translation.content_type != ContentType.PLAIN_TEXT:
            parser = self.registry.get(translation.content_type)

            if not parser.validate(translation.translated_text):
                issues.append(
                    f"Translated content doesn't maintain {translation.content_type.value} structure"
                )
                suggestions.append("Review the translation to ensure proper formatting is preserved")

            source_count = len(parser.extract(translation.source_text))
            translated_count = len(parser.extract(translation.translated_text))
            if source_count != translated_count:
                issues.append(
                    f"Number of translatable elements changed during translation "
                    f"({source_count} -> {translated_count})"
                )
                suggestions.append("Verify that all text elements are properly translated")

        if translation.translated_text == translation.source_text:
            issues.append("Translation appears to be identical to source text")
            suggestions.append("Verify that translation was actually performed")

        if not translation.translated_text:
            issues.append("Translation is empty")
            suggestions.append("Ensure translation service is working correctly")

        return ValidationResult(is_valid=not issues, issues=issues, suggestions=suggestions)

    def optimize_for_content_type(
        self,
        content: str,
        content_type: ContentType | str,
        target_language: str,
    ) -> OptimizationResult:
        return optimize_for_content_type(content, ContentType(content_type), target_language)

    # =========================================================================
    # Statistics
    # =========================================================================

    def statistics(self) -> TranslationStatistics:
        memory_stats = self.memory.stats()
        attempts = self.translated_count + self.failed_count
        return TranslationStatistics(
            total_translations=memory_stats["entries"],
            characters_translated=self.characters_translated,
            success_rate=round(self.translated_count / attempts * 100, 2) if attempts else 100.0,
            cache_hits=memory_stats["hits"],
            cache_misses=memory_stats["misses"],
            cache_hit_rate=memory_stats["hit_rate"],
            language_distribution=memory_stats["language_distribution"],
        )
