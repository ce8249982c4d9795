"""
Tests for the translation orchestrator.

Covers the full extract -> translate -> rebuild pipeline, the memory
round-trip, fault isolation inside a batch, and retry behaviour.
"""

import json

import pytest

from conftest import DictBackend
from storeglot.backends import BackendError, BackendErrorKind
from storeglot.config import Settings
from storeglot.core.models import (
    ContentType,
    Translation,
    TranslationMetadata,
    TranslationStatus,
)
from storeglot.core.registry import ParserRegistry, build_default_registry
from storeglot.i18n import BulkItem, TranslationMemory, TranslationOrchestrator
from storeglot.i18n.optimize import block_priority, component_priority, optimize_for_content_type
from storeglot.parsers import JsonParser


def editorjs(*texts):
    return json.dumps(
        {
            "time": 1700000000000,
            "blocks": [{"id": f"b{i}", "type": "paragraph", "data": {"text": t}} for i, t in enumerate(texts)],
            "version": "2.28.0",
        }
    )


def make_orchestrator(backend, **kwargs):
    kwargs.setdefault("batch_delay", 0)
    kwargs.setdefault("retry_delay", 0)
    return TranslationOrchestrator(
        backend,
        memory=TranslationMemory(),
        registry=build_default_registry(),
        **kwargs,
    )


# =============================================================================
# Documents
# =============================================================================


class TestProcessDocument:
    @pytest.mark.asyncio
    async def test_editorjs_end_to_end(self, orchestrator):
        translation = await orchestrator.process_document(editorjs("Hello"), "en", "es")

        blocks = json.loads(translation.translated_text)["blocks"]
        assert blocks[0]["data"]["text"] == "Hola"
        assert blocks[0]["id"] == "b0"
        assert translation.status == TranslationStatus.COMPLETED
        assert translation.content_type == ContentType.EDITOR_JS
        assert translation.metadata.extracted_texts[0].translated_text == "Hola"
        assert translation.metadata.optimizations == ["Optimized Editor.js block structure for translation"]

    @pytest.mark.asyncio
    async def test_declared_content_type(self, orchestrator):
        translation = await orchestrator.process_document(
            "<p>Hello</p>", "en", "es", content_type="HTML"
        )
        assert translation.translated_text == "<p>Hola</p>"
        assert translation.content_type == ContentType.HTML

    @pytest.mark.asyncio
    async def test_no_fragments_falls_back_to_plain_text(self, orchestrator):
        translation = await orchestrator.process_document("12345", "en", "es")

        assert translation.content_type == ContentType.PLAIN_TEXT
        assert translation.translated_text == "[es] 12345"

    @pytest.mark.asyncio
    async def test_repeat_translation_uses_memory(self, orchestrator, backend, memory):
        first = await orchestrator.process_document("Hello", "en", "es")
        second = await orchestrator.process_document("Hello", "en", "es")

        assert first.translated_text == second.translated_text == "Hola"
        assert backend.calls == [["Hello"]]
        assert memory.get_entry("Hello", "en", "es").usage_count == 2

    @pytest.mark.asyncio
    async def test_source_language_auto(self, orchestrator):
        translation = await orchestrator.process_document("Hello", None, "es")
        assert translation.source_language == "auto"


# =============================================================================
# Batches
# =============================================================================


class TestBatches:
    @pytest.mark.asyncio
    async def test_one_failure_does_not_sink_the_batch(self):
        texts = [f"Text number {i}" for i in range(10)]
        backend = DictBackend(fail_on={"Text number 3"})
        orchestrator = make_orchestrator(backend, batch_size=10)
        doc = json.dumps({f"k{i}": text for i, text in enumerate(texts)})

        translation = await orchestrator.process_document(doc, "en", "es")
        result = json.loads(translation.translated_text)

        assert result["k3"] == "Text number 3"
        assert all(result[f"k{i}"] == f"[es] Text number {i}" for i in range(10) if i != 3)
        assert orchestrator.failed_count == 1
        assert orchestrator.translated_count == 9
        assert orchestrator.memory.get_entry("Text number 3", "en", "es") is None
        assert translation.status == TranslationStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_order_is_preserved_across_batches(self):
        orchestrator = make_orchestrator(DictBackend(), batch_size=2)
        parser = orchestrator.registry.get(ContentType.JSON)
        fragments = parser.extract(json.dumps([f"Line number {i}" for i in range(5)]))

        translated = await orchestrator.translate_fragments(fragments, "fr")

        assert [f.path for f in translated] == [f.path for f in fragments]
        assert [f.translated_text for f in translated] == [f"[fr] Line number {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_translate_texts_merges_memory_hits(self, orchestrator, backend, memory):
        memory.store(["Hello"], ["Hola"], "en", "es")

        results = await orchestrator.translate_texts(["Hello", "World", "  "], "es", "en")

        assert results == ["Hola", "Mundo", "  "]
        assert backend.calls == [["World"]]

    @pytest.mark.asyncio
    async def test_translate_texts_propagates_failures(self):
        orchestrator = make_orchestrator(DictBackend(fail_on={"World"}))
        with pytest.raises(BackendError):
            await orchestrator.translate_texts(["World"], "es")
        assert orchestrator.failed_count == 1

    def test_batch_size_must_be_positive(self, backend):
        with pytest.raises(ValueError):
            TranslationOrchestrator(backend, batch_size=0)


# =============================================================================
# Retry
# =============================================================================


class TestRetry:
    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self):
        backend = DictBackend(errors=[BackendError(BackendErrorKind.RATE_LIMITED)])
        orchestrator = make_orchestrator(backend)

        assert await orchestrator.call_backend(["Hello"], "es") == ["[es] Hello"]
        assert len(backend.calls) == 2

    @pytest.mark.asyncio
    async def test_permanent_errors_are_not_retried(self):
        backend = DictBackend(errors=[BackendError(BackendErrorKind.AUTH_FAILED)])
        orchestrator = make_orchestrator(backend)

        with pytest.raises(BackendError) as exc_info:
            await orchestrator.call_backend(["Hello"], "es")
        assert exc_info.value.kind == BackendErrorKind.AUTH_FAILED
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self):
        errors = [BackendError(BackendErrorKind.SERVICE_UNAVAILABLE) for _ in range(5)]
        backend = DictBackend(errors=errors)
        orchestrator = make_orchestrator(backend, max_retries=2)

        with pytest.raises(BackendError):
            await orchestrator.call_backend(["Hello"], "es")
        assert len(backend.calls) == 3


# =============================================================================
# Bulk
# =============================================================================


class TestBulk:
    @pytest.mark.asyncio
    async def test_every_item_in_every_language(self, orchestrator):
        results = await orchestrator.bulk_process(
            [{"content": "<p>Hello</p>"}, BulkItem(content="World", context="tagline")],
            "en",
            ["es", "fr"],
        )

        assert len(results) == 4
        assert [r.target_language for r in results] == ["es", "fr", "es", "fr"]
        assert results[0].translated_text == "<p>Hola</p>"
        assert results[3].context == "tagline"

    @pytest.mark.asyncio
    async def test_failed_item_is_recorded(self, backend):
        orchestrator = TranslationOrchestrator(
            backend,
            registry=ParserRegistry([JsonParser()]),
            batch_delay=0,
            retry_delay=0,
        )
        results = await orchestrator.bulk_process(
            [{"content": "<p>Hello</p>", "content_type": "HTML"}, {"content": '{"a": "Hello"}'}],
            "en",
            ["es"],
        )

        assert results[0].status == TranslationStatus.FAILED
        assert "HTML" in results[0].metadata.error
        assert results[1].status == TranslationStatus.COMPLETED


# =============================================================================
# Validation & Optimization
# =============================================================================


class TestValidation:
    @pytest.mark.asyncio
    async def test_valid_translation(self, orchestrator):
        translation = await orchestrator.process_document(editorjs("Hello", "World"), "en", "es")
        assert orchestrator.validate_translation(translation).is_valid

    @pytest.mark.asyncio
    async def test_broken_structure(self, orchestrator):
        translation = await orchestrator.process_document(editorjs("Hello"), "en", "es")
        translation.translated_text = "Hola"

        result = orchestrator.validate_translation(translation)

        assert not result.is_valid
        assert any("EDITOR_JS structure" in issue for issue in result.issues)
        assert result.suggestions

    @pytest.mark.asyncio
    async def test_element_count_changed(self, orchestrator):
        translation = await orchestrator.process_document(editorjs("Hello", "World"), "en", "es")
        translation.translated_text = editorjs("Hola")

        result = orchestrator.validate_translation(translation)
        assert any("(2 -> 1)" in issue for issue in result.issues)

    def test_identical_and_empty(self, orchestrator):
        same = Translation(source_text="Hello", translated_text="Hello", source_language="en", target_language="es")
        empty = Translation(source_text="Hello", source_language="en", target_language="es")

        assert "Translation appears to be identical to source text" in orchestrator.validate_translation(same).issues
        assert "Translation is empty" in orchestrator.validate_translation(empty).issues

    def test_plain_text_skips_structure_checks(self, orchestrator):
        translation = Translation(
            source_text="Hello",
            translated_text="Hola",
            source_language="en",
            target_language="es",
            metadata=TranslationMetadata(content_type="text", original_structure={"type": "text"}),
        )
        assert orchestrator.validate_translation(translation).is_valid


class TestOptimization:
    def test_priorities(self):
        assert block_priority("header") == 10
        assert block_priority("paragraph") == 8
        assert block_priority("unknown") == 5
        assert component_priority({"tagName": "h1"}) == 10
        assert component_priority({"type": "image"}) == 3

    def test_editorjs_tunes(self):
        result = optimize_for_content_type(editorjs("Hello"), ContentType.EDITOR_JS, "es")
        block = json.loads(result.optimized_content)["blocks"][0]
        assert block["tunes"]["translation"] == {"translatable": True, "priority": 8}

    def test_grapejs_attributes(self):
        doc = json.dumps({"components": [{"tagName": "p", "components": [{"type": "image"}]}]})
        result = optimize_for_content_type(doc, ContentType.GRAPE_JS, "es")
        component = json.loads(result.optimized_content)["components"][0]

        assert component["attributes"]["data-translatable"] == "true"
        assert component["attributes"]["data-translation-priority"] == 8
        assert component["components"][0]["attributes"]["data-translation-priority"] == 3

    def test_html_rtl(self):
        result = optimize_for_content_type("<html><body>Hi</body></html>", ContentType.HTML, "ar")
        assert result.optimized_content.startswith('<html lang="ar" dir="rtl">')

    def test_markdown_headers(self):
        result = optimize_for_content_type("# Title\ntext", ContentType.MARKDOWN, "es")
        assert "# Title\n<!-- Translation: Header -->" in result.optimized_content

    def test_malformed_content_is_unchanged(self):
        result = optimize_for_content_type("{broken", ContentType.EDITOR_JS, "es")
        assert result.optimized_content == "{broken"
        assert result.optimizations == ["Optimized Editor.js block structure for translation"]

    def test_plain_text(self):
        result = optimize_for_content_type("Hello", ContentType.PLAIN_TEXT, "es")
        assert result.optimizations == ["No specific optimizations applied"]


# =============================================================================
# Statistics & Settings
# =============================================================================


class TestStatistics:
    @pytest.mark.asyncio
    async def test_statistics(self, orchestrator):
        await orchestrator.process_document("Hello", "en", "es")
        await orchestrator.process_document("Hello", "en", "es")

        stats = orchestrator.statistics()

        assert stats.total_translations == 1
        assert stats.characters_translated == 5
        assert stats.success_rate == 100.0
        assert stats.cache_hits == 1
        assert stats.cache_misses == 1
        assert stats.language_distribution == {"en-es": 1}

    def test_from_settings(self, backend):
        settings = Settings(translation_batch_size=4, translation_batch_delay_ms=250, retry_delay_ms=0, max_retries=1)
        orchestrator = TranslationOrchestrator.from_settings(backend, settings=settings)

        assert orchestrator.batch_size == 4
        assert orchestrator.batch_delay == 0.25
        assert orchestrator.max_retries == 1
        assert orchestrator.retry_delay == 0
