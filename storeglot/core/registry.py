"""
Registry of content parsers.

The registry is the single place that decides which parser handles a
document. It is an ordered, immutable list: detection probes parsers in
order and the first one whose `detect` accepts the content wins, so
structure-specific formats must come before the formats they are a special
case of (every Editor.js document is also valid JSON).

Build one with `build_default_registry()` and pass it to whatever needs it.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, Iterator

from storeglot.core.errors import ParserError, StoreglotError
from storeglot.core.models import ContentType, ExtractedText
from storeglot.parsers import (
    ContentParser,
    EditorJsParser,
    GrapeJsParser,
    HtmlParser,
    JsonParser,
    MarkdownParser,
    PlainTextParser,
)

logger = logging.getLogger(__name__)


class RegistryError(StoreglotError):
    """Raised when there's an error with the registry."""
    pass


class ParserRegistry:
    """
    Ordered, immutable set of parsers plus a plain-text fallback.

    Lookups by type never fall back: asking for a type nobody handles is a
    caller error. Detection falls back to the plain-text parser.
    """

    def __init__(
        self,
        parsers: Iterable[ContentParser],
        fallback: ContentParser | None = None,
    ):
        self._parsers: tuple[ContentParser, ...] = tuple(parsers)
        self._fallback = fallback or PlainTextParser()

        seen: set[ContentType] = set()
        for parser in self._parsers:
            if parser.content_type in seen:
                raise RegistryError(f"Parser for '{parser.content_type.value}' is already registered")
            seen.add(parser.content_type)

    @property
    def parsers(self) -> tuple[ContentParser, ...]:
        return self._parsers

    @property
    def fallback(self) -> ContentParser:
        return self._fallback

    def __iter__(self) -> Iterator[ContentParser]:
        return iter(self._parsers)

    def __len__(self) -> int:
        return len(self._parsers)

    def detect(self, content: str) -> ContentParser | None:
        """First parser, in priority order, that accepts the content."""
        for parser in self._parsers:
            if parser.detect(content):
                return parser
        return None

    def get(self, content_type: ContentType | str) -> ContentParser:
        """Get the parser for a declared content type."""
        content_type = ContentType(content_type)
        if content_type == self._fallback.content_type:
            return self._fallback
        for parser in self._parsers:
            if parser.content_type == content_type:
                return parser
        raise RegistryError(f"No parser registered for '{content_type.value}'")

    def select(self, content: str, content_type: ContentType | str | None = None) -> ContentParser:
        """
        Pick the parser for a document.

        A declared type wins; otherwise detection runs, and plain text is
        used when nothing matches.
        """
        if content_type is not None:
            return self.get(content_type)
        parser = self.detect(content)
        if parser is None:
            logger.debug("No parser matched, using plain text")
            return self._fallback
        return parser

    def extract(
        self,
        content: str,
        content_type: ContentType | str | None = None,
        strict: bool = False,
    ) -> tuple[ContentParser, list[ExtractedText]]:
        """
        Select a parser and extract fragments with it.

        With `strict`, content that does not look like its declared type
        raises ParserError instead of yielding no fragments.
        """
        parser = self.select(content, content_type)
        if strict and content_type is not None and not parser.validate(content):
            raise ParserError(f"Content is not valid {parser.content_type.value}")
        return parser, parser.extract(content)

    def with_parser(self, parser: ContentParser, before: ContentType | None = None) -> ParserRegistry:
        """
        Return a new registry with an extra parser.

        The parser is appended, or inserted ahead of the parser for `before`.
        """
        parsers = list(self._parsers)
        if before is None:
            parsers.append(parser)
        else:
            index = next(
                (i for i, existing in enumerate(parsers) if existing.content_type == before),
                None,
            )
            if index is None:
                raise RegistryError(f"No parser registered for '{before.value}'")
            parsers.insert(index, parser)
        return ParserRegistry(parsers, self._fallback)

    def content_types(self) -> list[ContentType]:
        """List registered content types in detection order."""
        return [parser.content_type for parser in self._parsers]


def build_default_registry(use_dom: bool = True) -> ParserRegistry:
    """
    Build the standard registry.

    Order: Editor.js, GrapeJS, JSON, HTML, Markdown. JSON is probed before
    HTML so a JSON document with markup inside its strings is walked as JSON.
    """
    return ParserRegistry(
        [
            EditorJsParser(),
            GrapeJsParser(),
            JsonParser(),
            HtmlParser(use_dom=use_dom),
            MarkdownParser(),
        ]
    )


@lru_cache
def default_registry() -> ParserRegistry:
    """Get the shared default registry instance."""
    return build_default_registry()
