"""
HTML fragments and documents.

Extraction walks the DOM with BeautifulSoup. When DOM parsing is disabled or
fails, a regex pass over `>text<` spans and textual attributes is used
instead. Rebuild is text substitution on the original string, so markup,
whitespace and attribute order survive untouched.
"""

from __future__ import annotations

import html
import logging
import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag

from storeglot.core.models import ContentType, ExtractedText
from storeglot.parsers.base import ContentParser
from storeglot.parsers.filters import HTML_MIN_LENGTH, TEXTUAL_ATTRIBUTES, attribute_fragment_type

logger = logging.getLogger(__name__)

_ATTRIBUTE_NAMES = "|".join(re.escape(name) for name in TEXTUAL_ATTRIBUTES)

TAG_DETECT_PATTERN = re.compile(r"<[^>]+>")
TEXT_SPAN_PATTERN = re.compile(r">([^<]+)<")
ATTRIBUTE_PATTERN = re.compile(r"(?<![\w-])(" + _ATTRIBUTE_NAMES + r")=[\"']([^\"']+)[\"']")

# Elements whose text is code or styling, not copy
SKIPPED_ELEMENTS = frozenset({"script", "style", "noscript", "template"})


class HtmlParser(ContentParser):
    """
    Parser for HTML content.

    Args:
        use_dom: Walk the parsed DOM (default). When False, or when the DOM
            walk fails, use the regex extraction.
    """

    content_type = ContentType.HTML

    def __init__(self, use_dom: bool = True):
        self.use_dom = use_dom

    def detect(self, content: str) -> bool:
        return bool(TAG_DETECT_PATTERN.search(content))

    # =========================================================================
    # Extraction
    # =========================================================================

    def extract(self, content: str) -> list[ExtractedText]:
        if self.use_dom:
            try:
                soup = BeautifulSoup(content, "html.parser")
                fragments: list[ExtractedText] = []
                self._walk(soup, "", fragments)
                return fragments
            except Exception as e:
                logger.warning("DOM parsing failed, falling back to regex extraction: %s", e)
        return self.extract_with_regex(content)

    def _walk(self, element: Tag, path: str, fragments: list[ExtractedText]) -> None:
        tag_name = "element" if isinstance(element, BeautifulSoup) else element.name
        for index, node in enumerate(element.contents):
            if isinstance(node, Tag):
                child_path = f"{path}{node.name}[{index}]."
                self._attributes(node, child_path, fragments)
                if node.name not in SKIPPED_ELEMENTS:
                    self._walk(node, child_path, fragments)
            elif _is_text_node(node):
                text = str(node).strip()
                if len(text) > HTML_MIN_LENGTH:
                    fragments.append(
                        ExtractedText(
                            id=f"{path}textNode[{index}]",
                            original_text=text,
                            path=f"{path}textNode[{index}]",
                            context=f"text in {tag_name}",
                        )
                    )

    def _attributes(self, element: Tag, path: str, fragments: list[ExtractedText]) -> None:
        for name, value in element.attrs.items():
            if name not in TEXTUAL_ATTRIBUTES or not isinstance(value, str) or not value.strip():
                continue
            fragments.append(
                ExtractedText(
                    id=f"{path}@{name}",
                    original_text=value,
                    path=f"{path}@{name}",
                    context=f"{name} attribute of {element.name}",
                    type=attribute_fragment_type(name),
                )
            )

    def extract_with_regex(self, content: str) -> list[ExtractedText]:
        """Degraded extraction for content the DOM walk cannot handle."""
        fragments: list[ExtractedText] = []

        index = 0
        for match in TEXT_SPAN_PATTERN.finditer(content):
            text = match.group(1).strip()
            if len(text) > HTML_MIN_LENGTH:
                fragments.append(
                    ExtractedText(
                        id=f"regex_text_{index}",
                        original_text=text,
                        path=f"regex_text_{index}",
                        context="HTML text content",
                    )
                )
                index += 1

        index = 0
        for match in ATTRIBUTE_PATTERN.finditer(content):
            name, value = match.group(1), match.group(2).strip()
            if value:
                fragments.append(
                    ExtractedText(
                        id=f"regex_attr_{index}@{name}",
                        original_text=value,
                        path=f"regex_attr_{index}@{name}",
                        context=f"{name} attribute",
                        type=attribute_fragment_type(name),
                    )
                )
                index += 1

        return fragments

    # =========================================================================
    # Rebuild
    # =========================================================================

    def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
        """
        Substitute translated text into the original markup.

        Every occurrence of a source string between tags (or inside a
        textual attribute) is replaced, including duplicates elsewhere in
        the document. Source text the DOM decoded from entities is matched
        in its escaped form as well.
        """
        result = content
        for fragment in fragments:
            translated = fragment.translated_text
            if not translated or translated == fragment.original_text:
                continue
            for original in _spellings(fragment.original_text):
                result = replace_body_text(result, original, html.escape(translated, quote=False))
                result = replace_attribute(result, original, html.escape(translated))
        return result


def _is_text_node(node: PageElement) -> bool:
    # Comment, CData, Doctype and friends subclass NavigableString
    return isinstance(node, NavigableString) and type(node) is NavigableString


def _spellings(text: str) -> list[str]:
    """The text as written, plus its entity-escaped form when that differs."""
    spellings = [text]
    for escaped in (html.escape(text, quote=False), html.escape(text)):
        if escaped not in spellings:
            spellings.append(escaped)
    return spellings


def replace_body_text(content: str, original: str, translated: str) -> str:
    pattern = re.compile(r"((?:^|>)\s*)" + re.escape(original) + r"(\s*(?:<|$))")
    return pattern.sub(lambda m: m.group(1) + translated + m.group(2), content)


def replace_attribute(content: str, original: str, translated: str) -> str:
    pattern = re.compile(
        r"(?<![\w-])((?:" + _ATTRIBUTE_NAMES + r")=[\"'])" + re.escape(original) + r"([\"'])"
    )
    return pattern.sub(lambda m: m.group(1) + translated + m.group(2), content)
