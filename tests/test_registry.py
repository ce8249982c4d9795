"""
Tests for the parser registry.
"""

import json

import pytest

from storeglot.core.errors import ParserError
from storeglot.core.models import ContentType
from storeglot.core.registry import ParserRegistry, RegistryError, build_default_registry
from storeglot.parsers import (
    EditorJsParser,
    HtmlParser,
    JsonParser,
    MarkdownParser,
    PlainTextParser,
)


@pytest.fixture
def registry():
    return build_default_registry()


class TestDetection:
    def test_order(self, registry):
        assert registry.content_types() == [
            ContentType.EDITOR_JS,
            ContentType.GRAPE_JS,
            ContentType.JSON,
            ContentType.HTML,
            ContentType.MARKDOWN,
        ]

    def test_editorjs_wins_over_json(self, registry):
        doc = json.dumps({"blocks": [{"type": "paragraph", "data": {"text": "Hi there"}}]})
        assert registry.detect(doc).content_type == ContentType.EDITOR_JS

    def test_grapejs_wins_over_json(self, registry):
        doc = json.dumps({"components": [{"content": "Hi there"}]})
        assert registry.detect(doc).content_type == ContentType.GRAPE_JS

    def test_json_with_markup_is_json(self, registry):
        doc = json.dumps({"title": "<b>Summer sale</b>"})
        assert registry.detect(doc).content_type == ContentType.JSON

    def test_html(self, registry):
        assert registry.detect("<p>Hello</p>").content_type == ContentType.HTML

    def test_markdown(self, registry):
        assert registry.detect("# Title\n\nSome text").content_type == ContentType.MARKDOWN

    def test_plain_text_falls_back(self, registry):
        assert registry.detect("Just words") is None
        assert registry.select("Just words").content_type == ContentType.PLAIN_TEXT


class TestLookup:
    def test_declared_type_wins(self, registry):
        parser = registry.select("<p>Hello</p>", ContentType.MARKDOWN)
        assert isinstance(parser, MarkdownParser)

    def test_get_by_string(self, registry):
        assert isinstance(registry.get("HTML"), HtmlParser)

    def test_plain_text_is_the_fallback(self, registry):
        assert registry.get(ContentType.PLAIN_TEXT) is registry.fallback

    def test_unregistered_type(self):
        registry = ParserRegistry([JsonParser()])
        with pytest.raises(RegistryError):
            registry.get(ContentType.HTML)

    def test_duplicate_types_rejected(self):
        with pytest.raises(RegistryError):
            ParserRegistry([JsonParser(), JsonParser()])


class TestImmutability:
    def test_with_parser_returns_new_registry(self):
        registry = ParserRegistry([JsonParser()])
        extended = registry.with_parser(EditorJsParser(), before=ContentType.JSON)

        assert registry.content_types() == [ContentType.JSON]
        assert extended.content_types() == [ContentType.EDITOR_JS, ContentType.JSON]
        assert extended.fallback is registry.fallback

    def test_with_parser_unknown_anchor(self):
        registry = ParserRegistry([JsonParser()])
        with pytest.raises(RegistryError):
            registry.with_parser(HtmlParser(), before=ContentType.MARKDOWN)

    def test_parsers_is_a_tuple(self, registry):
        assert isinstance(registry.parsers, tuple)
        assert len(registry) == 5


class TestExtract:
    def test_extract_with_detection(self, registry):
        parser, fragments = registry.extract("<p>Hello</p>")
        assert parser.content_type == ContentType.HTML
        assert [f.original_text for f in fragments] == ["Hello"]

    def test_lenient_mismatch_yields_nothing(self, registry):
        _, fragments = registry.extract("not json", ContentType.EDITOR_JS)
        assert fragments == []

    def test_strict_mismatch_raises(self, registry):
        with pytest.raises(ParserError):
            registry.extract("not json", ContentType.EDITOR_JS, strict=True)

    def test_strict_plain_text(self, registry):
        parser, fragments = registry.extract("Anything", ContentType.PLAIN_TEXT, strict=True)
        assert isinstance(parser, PlainTextParser)
        assert len(fragments) == 1
