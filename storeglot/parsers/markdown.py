"""
Markdown documents.

Markdown has no stable node addresses, so extraction is line-oriented and
fragment paths name the line (`line_4_header`, `line_7_link_0`). Fenced code
blocks are never extracted.

Rebuild substitutes text on the line a fragment came from. A string that
appears more than once on that line is replaced every time. Paragraph text
that no longer matches its line (because links or emphasis split it) is left
untouched, so markup and link targets are never lost.
"""

from __future__ import annotations

import re

from storeglot.core.models import ContentType, ExtractedText, FragmentType
from storeglot.parsers.base import ContentParser
from storeglot.parsers.filters import MARKDOWN_MIN_LENGTH

FENCE = "```"

HEADER_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\([^)]+\)")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
BLOCKQUOTE_PATTERN = re.compile(r"^>\s*(.+)$")
LIST_ITEM_PATTERN = re.compile(r"^(\s*)([-*+]|\d+\.)\s+(.+)$")

# Lines already claimed by a block construct
BLOCK_PREFIX_PATTERNS = (
    re.compile(r"^#{1,6}\s+"),
    re.compile(r"^>"),
    re.compile(r"^(\s*)([-*+]|\d+\.)\s+"),
)

# Inline syntax removed before a line is taken as paragraph text
INLINE_SYNTAX = (
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
)

DETECT_PATTERNS = (
    re.compile(r"^#{1,6}\s+", re.MULTILINE),
    re.compile(r"\*\*.*\*\*"),
    re.compile(r"\*.*\*"),
    re.compile(r"\[.*\]\(.*\)"),
    re.compile(r"^[-*+]\s+", re.MULTILINE),
    re.compile(r"^>\s+", re.MULTILINE),
    re.compile(r"```[\s\S]*```"),
)

LINE_PATH_PATTERN = re.compile(r"^line_(\d+)_")


def _fragment(path: str, text: str, context: str, type: FragmentType = FragmentType.TEXT) -> ExtractedText:
    return ExtractedText(id=path, original_text=text, path=path, context=context, type=type)


def clean_inline(line: str) -> str:
    for pattern, replacement in INLINE_SYNTAX:
        line = pattern.sub(replacement, line)
    return line.strip()


def prose_lines(content: str) -> list[tuple[int, str]]:
    """
    Number the lines outside fenced code blocks.

    A fence opens on any line whose trimmed form starts with ``` and closes
    on a line equal to the opening fence or to a bare ```. Fence lines
    themselves are never prose.
    """
    lines: list[tuple[int, str]] = []
    fence = ""
    for number, line in enumerate(content.split("\n")):
        trimmed = line.strip()
        if trimmed.startswith(FENCE):
            if not fence:
                fence = trimmed
            elif trimmed in (fence, FENCE):
                fence = ""
            continue
        if not fence:
            lines.append((number, line))
    return lines


class MarkdownParser(ContentParser):
    """Parser for Markdown documents."""

    content_type = ContentType.MARKDOWN

    def detect(self, content: str) -> bool:
        return any(pattern.search(content) for pattern in DETECT_PATTERNS)

    def extract(self, content: str) -> list[ExtractedText]:
        fragments: list[ExtractedText] = []
        for number, line in prose_lines(content):
            fragments.extend(self._line_fragments(number, line))
        return fragments

    def _line_fragments(self, number: int, line: str) -> list[ExtractedText]:
        prefix = f"line_{number}"
        found: list[ExtractedText] = []

        header = HEADER_PATTERN.match(line)
        if header:
            found.append(
                _fragment(f"{prefix}_header", header.group(2).strip(), f"H{len(header.group(1))} header")
            )

        # Links and images co-emit with whatever block construct holds them
        for index, match in enumerate(LINK_PATTERN.finditer(line)):
            found.append(_fragment(f"{prefix}_link_{index}", match.group(1), "link text"))

        for index, match in enumerate(IMAGE_PATTERN.finditer(line)):
            alt = match.group(1)
            if alt.strip():
                found.append(_fragment(f"{prefix}_image_{index}", alt, "image alt text", FragmentType.ALT))

        quote = BLOCKQUOTE_PATTERN.match(line)
        if quote:
            found.append(_fragment(f"{prefix}_blockquote", quote.group(1).strip(), "blockquote"))

        item = LIST_ITEM_PATTERN.match(line)
        if item:
            kind = "ordered" if item.group(2)[0].isdigit() else "unordered"
            found.append(_fragment(f"{prefix}_list_item", item.group(3).strip(), f"{kind} list item"))

        if not any(pattern.match(line) for pattern in BLOCK_PREFIX_PATTERNS):
            text = clean_inline(line)
            if len(text) > MARKDOWN_MIN_LENGTH:
                found.append(_fragment(f"{prefix}_text", text, "paragraph text"))

        return found

    def rebuild(self, content: str, fragments: list[ExtractedText]) -> str:
        lines = content.split("\n")
        for fragment in fragments:
            translated = fragment.translated_text
            if not translated or translated == fragment.original_text:
                continue

            line_match = LINE_PATH_PATTERN.match(fragment.path)
            number = int(line_match.group(1)) if line_match else None
            if number is not None and number < len(lines):
                # A paragraph whose inline markup split the text stays as it is
                lines[number] = substitute(lines[number], fragment, translated)
            else:
                # Fragment not addressed by line; replace across the document
                lines = substitute("\n".join(lines), fragment, translated).split("\n")
        return "\n".join(lines)


def substitute(text: str, fragment: ExtractedText, translated: str) -> str:
    """Replace a fragment's source text, scoped by its type."""
    original = re.escape(fragment.original_text)
    if fragment.type == FragmentType.ALT:
        pattern = re.compile(r"(!\[)" + original + r"(\]\([^)]+\))")
        return pattern.sub(lambda m: m.group(1) + translated + m.group(2), text)
    pattern = re.compile(r"(?<!\w)" + original + r"(?!\w)")
    return pattern.sub(lambda m: translated, text)
