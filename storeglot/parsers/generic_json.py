"""
Arbitrary JSON documents.

Every string leaf that reads as human text becomes a fragment. Object keys
become dotted path segments and array indices bracketed ones, e.g.
`product.variants[1].label`. A key that contains path syntax is quoted,
as in `specs["size.eu"]`.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator

from storeglot.core.models import ContentType
from storeglot.parsers.base import Slot, StructuredParser, setter
from storeglot.parsers.filters import is_json_text


# Keys containing these would read as nested segments
PATH_METACHARACTERS = re.compile(r"[.\[\]\"]")


def key_path(path: str, key: str) -> str:
    """Append an object key; keys that would be ambiguous are bracket-quoted."""
    if PATH_METACHARACTERS.search(key) or not key:
        return f"{path}[{json.dumps(key, ensure_ascii=False)}]"
    return f"{path}.{key}" if path else key


class JsonParser(StructuredParser):
    """Parser for generic JSON, the structural fallback."""

    content_type = ContentType.JSON

    def detect(self, content: str) -> bool:
        try:
            json.loads(content)
        except (ValueError, TypeError):
            return False
        return True

    # The document is held in a one-item list so a bare string root can be
    # assigned like any other leaf.
    def _load(self, content: str) -> Any:
        return [json.loads(content)]

    def _dump(self, data: Any) -> str:
        return super()._dump(data[0])

    def _slots(self, data: Any) -> Iterator[Slot]:
        yield from self._walk(data, 0, "", "JSON")

    def _walk(self, container: Any, key: Any, path: str, context: str) -> Iterator[Slot]:
        value = container[key]
        if isinstance(value, str):
            if is_json_text(value):
                yield Slot(path=path, text=value, context=context, assign=setter(container, key))
        elif isinstance(value, list):
            for index in range(len(value)):
                yield from self._walk(value, index, f"{path}[{index}]", f"{context} array item")
        elif isinstance(value, dict):
            for child in value:
                child_path = key_path(path, child)
                yield from self._walk(value, child, child_path, f"{context} {child}")
