"""
GrapeJS component trees.

Accepts either a bare component list or a project object with a
`components` list. Components carry text in `content`, in `attributes`, and
in `traits[].value`, and nest through `components`.
"""

from __future__ import annotations

import json
from typing import Any, Iterator

from storeglot.core.models import ContentType
from storeglot.core.utils import strip_html
from storeglot.parsers.base import Slot, StructuredParser, setter
from storeglot.parsers.filters import (
    TEXTUAL_ATTRIBUTES,
    attribute_fragment_type,
    is_component_text,
)


def component_context(component: dict[str, Any]) -> str:
    if component.get("type"):
        return f"{component['type']} component"
    if component.get("tagName"):
        return f"{component['tagName']} element"
    return "component"


def replace_inner_text(raw: str, text: str, translated: str) -> str:
    """
    Swap the visible text of a markup string, keeping its tags.

    Works when the stripped text appears contiguously in the raw string
    (e.g. `<b>Free shipping</b>`). Text broken up by inner tags cannot be
    located, so the whole value is replaced.
    """
    if raw == text:
        return translated
    position = raw.find(text)
    if position == -1:
        return translated
    return raw[:position] + translated + raw[position + len(text):]


class GrapeJsParser(StructuredParser):
    """Parser for GrapeJS page-builder component trees."""

    content_type = ContentType.GRAPE_JS

    def detect(self, content: str) -> bool:
        try:
            parsed = json.loads(content)
        except (ValueError, TypeError):
            return False
        if isinstance(parsed, list):
            return True
        return isinstance(parsed, dict) and isinstance(parsed.get("components"), list)

    def _slots(self, data: Any) -> Iterator[Slot]:
        components = data if isinstance(data, list) else data.get("components") or []
        for index, component in enumerate(components):
            if isinstance(component, dict):
                yield from self._component_slots(component, f"[{index}]")

    def _component_slots(self, component: dict[str, Any], path: str) -> Iterator[Slot]:
        context = component_context(component)

        content = component.get("content")
        if isinstance(content, str):
            text = strip_html(content)
            if text:
                def assign_content(value: str, raw: str = content, text: str = text) -> None:
                    component["content"] = replace_inner_text(raw, text, value)

                yield Slot(
                    path=f"{path}.content",
                    text=text,
                    context=context,
                    assign=assign_content,
                )

        attributes = component.get("attributes")
        if isinstance(attributes, dict):
            for key, value in attributes.items():
                if not isinstance(value, str) or not value.strip():
                    continue
                if key in TEXTUAL_ATTRIBUTES or is_component_text(key, value):
                    yield Slot(
                        path=f"{path}.attributes.{key}",
                        text=value,
                        context=f"{context} {key}",
                        assign=setter(attributes, key),
                        type=attribute_fragment_type(key),
                    )

        traits = component.get("traits")
        if isinstance(traits, list):
            for index, trait in enumerate(traits):
                if not isinstance(trait, dict):
                    continue
                name = str(trait.get("name", ""))
                value = trait.get("value")
                if isinstance(value, str) and value and is_component_text(name, value):
                    yield Slot(
                        path=f"{path}.traits[{index}].value",
                        text=value,
                        context=f"{context} {name}",
                        assign=setter(trait, "value"),
                        type=attribute_fragment_type(name),
                    )

        children = component.get("components")
        if isinstance(children, list):
            for index, child in enumerate(children):
                if isinstance(child, dict):
                    yield from self._component_slots(child, f"{path}.components[{index}]")
