"""Plain-text fallback: the whole document is a single fragment."""

from __future__ import annotations

from storeglot.core.models import ContentType, ExtractedText
from storeglot.parsers.base import ContentParser

PLAIN_TEXT_PATH = "text"


class PlainTextParser(ContentParser):
    """Used when no structural parser claims a document."""

    content_type = ContentType.PLAIN_TEXT

    def detect(self, content: str) -> bool:
        return True

    def extract(self, content: str) -> list[ExtractedText]:
        if not content.strip():
            return []
        return [
            ExtractedText(
                id=PLAIN_TEXT_PATH,
                original_text=content,
                path=PLAIN_TEXT_PATH,
                context="plain text",
            )
        ]

    def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
        for fragment in fragments:
            if fragment.path == PLAIN_TEXT_PATH:
                return fragment.resolved_text
        return content
