"""
Base classes for all content parsers.

A parser knows one document format. It is stateless: every method takes the
document string and returns a new value, so one instance can be shared by
any number of concurrent translations.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from storeglot.core.models import ContentType, ExtractedText, FragmentType

logger = logging.getLogger(__name__)


class ContentParser(ABC):
    """
    Base class for all content parsers.

    Parsers implement three operations over a document string:
    1. `detect` - a cheap syntactic sniff test
    2. `extract` - the flat, ordered list of translatable fragments
    3. `rebuild` - the document with translated fragments substituted

    Example:
        class CsvParser(ContentParser):
            content_type = ContentType.PLAIN_TEXT

            def detect(self, content: str) -> bool:
                return "," in content

            def extract(self, content: str) -> list[ExtractedText]:
                ...

            def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
                ...
    """

    content_type: ContentType

    @abstractmethod
    def detect(self, content: str) -> bool:
        """Return True when the content looks like this parser's format."""
        pass

    @abstractmethod
    def extract(self, content: str) -> list[ExtractedText]:
        """
        Extract translatable fragments in document order.

        Never raises on malformed input; returns an empty list instead.
        """
        pass

    @abstractmethod
    def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
        """
        Rebuild the original document with translated fragments applied.

        Fragments without a usable translation are left as they were. If the
        document cannot be re-parsed the original content is returned.
        """
        pass

    def validate(self, content: str) -> bool:
        """Check content is safe to parse (also used on rebuilt output)."""
        return self.detect(content)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(type={self.content_type.value})>"


def changed_translations(fragments: list[ExtractedText]) -> dict[str, str]:
    """Paths whose translation differs from the source text."""
    return {
        fragment.path: fragment.translated_text
        for fragment in fragments
        if fragment.translated_text and fragment.translated_text != fragment.original_text
    }


# =============================================================================
# Structural (JSON-based) Parsers
# =============================================================================


@dataclass
class Slot:
    """A translatable location inside a parsed JSON tree."""

    path: str
    text: str
    context: str
    assign: Callable[[str], None]
    type: FragmentType = FragmentType.TEXT

    def to_fragment(self) -> ExtractedText:
        return ExtractedText(
            id=self.path,
            original_text=self.text,
            path=self.path,
            context=self.context,
            type=self.type,
        )


def setter(container: Any, key: Any) -> Callable[[str], None]:
    """Build a slot assignment that writes one key or index of a container."""
    def assign(value: str) -> None:
        container[key] = value
    return assign


class StructuredParser(ContentParser):
    """
    Shared machinery for formats that are JSON documents.

    Subclasses implement `_slots`, a single walk over the parsed tree. The
    same walk drives both extraction and rebuild, so the paths produced by
    one are always the paths looked up by the other.
    """

    @abstractmethod
    def _slots(self, data: Any) -> Iterator[Slot]:
        """Yield every translatable slot in document order."""
        pass

    def _load(self, content: str) -> Any:
        return json.loads(content)

    def _dump(self, data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)

    def extract(self, content: str) -> list[ExtractedText]:
        try:
            data = self._load(content)
            return [slot.to_fragment() for slot in self._slots(data)]
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not parse %s content: %s", self.content_type.value, e)
            return []

    def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
        translations = changed_translations(fragments)
        if not translations:
            return content

        try:
            data = self._load(content)
            # Materialize first: assignments must not disturb the walk
            for slot in list(self._slots(data)):
                if slot.path in translations:
                    slot.assign(translations[slot.path])
            return self._dump(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not rebuild %s content: %s", self.content_type.value, e)
            return content
