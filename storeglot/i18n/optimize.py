"""
Content-type specific preparation for translation.

Tags documents so reviewers and translators can work through them in a
sensible order: Editor.js blocks get a translation tune with a priority,
GrapeJS components get `data-translatable` attributes, HTML gets `lang`
and `dir`, and Markdown headers get an annotation comment.
"""

from __future__ import annotations

import json
import re
from typing import Any

from storeglot.core.models import ContentType, OptimizationResult
from storeglot.i18n.languages import is_rtl

DEFAULT_PRIORITY = 5

BLOCK_PRIORITIES: dict[str, int] = {
    "header": 10,
    "paragraph": 8,
    "quote": 7,
    "list": 6,
    "table": 5,
    "image": 3,
    "embed": 2,
}

HTML_OPEN_TAG = re.compile(r"<html([^>]*)>", re.IGNORECASE)
MARKDOWN_HEADER = re.compile(r"^(#{1,6}\s+.+)$", re.MULTILINE)
HEADER_ANNOTATION = "<!-- Translation: Header -->"


def block_priority(block_type: str) -> int:
    """Review priority of an Editor.js block type (higher first)."""
    return BLOCK_PRIORITIES.get(block_type, DEFAULT_PRIORITY)


def component_priority(component: dict[str, Any]) -> int:
    """Review priority of a GrapeJS component."""
    tag = component.get("tagName")
    if tag in ("h1", "h2"):
        return 10
    if tag == "p":
        return 8
    if component.get("type") == "text":
        return 7
    if component.get("type") == "image":
        return 3
    return DEFAULT_PRIORITY


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def optimize_editorjs(content: str) -> str:
    data = json.loads(content)
    for block in data.get("blocks", []):
        if not isinstance(block, dict):
            continue
        tunes = block.get("tunes") if isinstance(block.get("tunes"), dict) else {}
        block["tunes"] = {
            **tunes,
            "translation": {"translatable": True, "priority": block_priority(block.get("type", ""))},
        }
    return _dump(data)


def _tag_components(components: list[Any]) -> None:
    for component in components:
        if not isinstance(component, dict):
            continue
        attributes = component.get("attributes") if isinstance(component.get("attributes"), dict) else {}
        component["attributes"] = {
            **attributes,
            "data-translatable": "true",
            "data-translation-priority": component_priority(component),
        }
        if isinstance(component.get("components"), list):
            _tag_components(component["components"])


def optimize_grapejs(content: str) -> str:
    data = json.loads(content)
    components = data if isinstance(data, list) else data.get("components") or []
    _tag_components(components)
    return _dump(data)


def optimize_html(content: str, target_language: str) -> str:
    optimized = content
    if "lang=" not in optimized:
        optimized = HTML_OPEN_TAG.sub(lambda m: f'<html{m.group(1)} lang="{target_language}">', optimized, count=1)
    if is_rtl(target_language) and "dir=" not in optimized:
        optimized = HTML_OPEN_TAG.sub(lambda m: f'<html{m.group(1)} dir="rtl">', optimized, count=1)
    return optimized


def optimize_markdown(content: str) -> str:
    return MARKDOWN_HEADER.sub(lambda m: f"{m.group(1)}\n{HEADER_ANNOTATION}\n", content)


def optimize_for_content_type(
    content: str,
    content_type: ContentType,
    target_language: str,
) -> OptimizationResult:
    """
    Prepare content of a given type for translation.

    Malformed JSON content is returned unchanged, still reporting the
    optimization that was attempted.
    """
    optimizations: list[str] = []
    optimized = content

    try:
        if content_type == ContentType.EDITOR_JS:
            optimizations.append("Optimized Editor.js block structure for translation")
            optimized = optimize_editorjs(content)
        elif content_type == ContentType.GRAPE_JS:
            optimizations.append("Optimized GrapeJS component structure for translation")
            optimized = optimize_grapejs(content)
        elif content_type == ContentType.HTML:
            optimizations.append("Added language attributes and optimized HTML structure")
            optimized = optimize_html(content, target_language)
        elif content_type == ContentType.MARKDOWN:
            optimizations.append("Optimized Markdown formatting for translation")
            optimized = optimize_markdown(content)
        else:
            optimizations.append("No specific optimizations applied")
    except (ValueError, AttributeError):
        optimized = content

    return OptimizationResult(optimized_content=optimized, optimizations=optimizations)
