"""
Textual-content filters.

Decide whether a string found inside a document is something a human would
read (and so should be translated) or machine data such as a URL, an email
address, an identifier, or a CSS value. Each format has its own floor for
the minimum length.
"""

from __future__ import annotations

import re

from storeglot.core.models import FragmentType

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ID_PATTERN = re.compile(r"^[a-f0-9-]{8,}$", re.IGNORECASE)
COLOR_PATTERN = re.compile(r"^#[0-9a-f]{3,6}$", re.IGNORECASE)
LENGTH_PATTERN = re.compile(r"^\d+(\.\d+)?(px|em|rem|%)?$", re.IGNORECASE)

# Attributes whose values are always meant for people
TEXTUAL_ATTRIBUTES = ("alt", "title", "placeholder", "aria-label", "data-text", "value")

BLOCK_NON_TEXTUAL_KEYS = frozenset({"url", "id", "file", "src", "href", "link", "embed"})
COMPONENT_NON_TEXTUAL_KEYS = frozenset(
    {"id", "class", "src", "href", "url", "link", "style", "width", "height"}
)

JSON_MIN_LENGTH = 2
BLOCK_MIN_LENGTH = 2
COMPONENT_MIN_LENGTH = 1
HTML_MIN_LENGTH = 1
MARKDOWN_MIN_LENGTH = 2


def is_url(value: str) -> bool:
    return bool(URL_PATTERN.match(value))


def is_json_text(value: str) -> bool:
    """Filter for string leaves of arbitrary JSON."""
    return (
        len(value.strip()) > JSON_MIN_LENGTH
        and not is_url(value)
        and not EMAIL_PATTERN.match(value)
        and not ID_PATTERN.match(value)
    )


def is_block_text(key: str, value: str) -> bool:
    """Filter for generic fields of unknown Editor.js block types."""
    return (
        key.lower() not in BLOCK_NON_TEXTUAL_KEYS
        and not is_url(value)
        and not EMAIL_PATTERN.match(value)
        and not ID_PATTERN.match(value)
        and len(value) > BLOCK_MIN_LENGTH
    )


def is_component_text(key: str, value: str) -> bool:
    """Filter for GrapeJS attributes and trait values."""
    return (
        key.lower() not in COMPONENT_NON_TEXTUAL_KEYS
        and not is_url(value)
        and not COLOR_PATTERN.match(value)
        and not LENGTH_PATTERN.match(value)
        and len(value) > COMPONENT_MIN_LENGTH
    )


def attribute_fragment_type(name: str) -> FragmentType:
    """Classify an attribute name; shared by every parser that reads attributes."""
    lowered = name.lower()
    if lowered == "alt":
        return FragmentType.ALT
    if lowered == "title":
        return FragmentType.TITLE
    if lowered == "placeholder":
        return FragmentType.PLACEHOLDER
    if lowered in ("aria-label", "data-text"):
        return FragmentType.META
    return FragmentType.TEXT
