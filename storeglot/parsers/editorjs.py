"""
Editor.js block documents.

Shape: {"time": ..., "blocks": [{"id": ..., "type": ..., "data": {...}}], "version": ...}
Each well-known block type maps to specific `data` fields; unknown block
types get a generic scan of their string and string-list fields.
"""

from __future__ import annotations

import json
from typing import Any, Iterator

from storeglot.core.models import ContentType
from storeglot.core.utils import strip_html
from storeglot.parsers.base import Slot, StructuredParser, setter
from storeglot.parsers.filters import BLOCK_NON_TEXTUAL_KEYS, is_block_text


class EditorJsParser(StructuredParser):
    """Parser for Editor.js output."""

    content_type = ContentType.EDITOR_JS

    def detect(self, content: str) -> bool:
        try:
            parsed = json.loads(content)
        except (ValueError, TypeError):
            return False
        return isinstance(parsed, dict) and isinstance(parsed.get("blocks"), list)

    def _slots(self, data: Any) -> Iterator[Slot]:
        for index, block in enumerate(data["blocks"]):
            if isinstance(block, dict) and isinstance(block.get("data"), dict):
                yield from self._block_slots(block, f"blocks[{index}]")

    def _block_slots(self, block: dict[str, Any], block_path: str) -> Iterator[Slot]:
        block_type = block.get("type", "")
        data = block["data"]
        base = f"{block_path}.data"

        if block_type in ("paragraph", "header"):
            yield from self._field(data, "text", base, f"{block_type} block")

        elif block_type == "list":
            style = data.get("style") or "unordered"
            yield from self._list_items(data.get("items"), f"{base}.items", f"{style} list item")

        elif block_type == "quote":
            yield from self._field(data, "text", base, "quote text")
            yield from self._field(data, "caption", base, "quote caption")

        elif block_type in ("image", "embed"):
            yield from self._field(data, "caption", base, f"{block_type} caption", strip=False)

        elif block_type == "table":
            rows = data.get("content")
            if isinstance(rows, list):
                for r, row in enumerate(rows):
                    if not isinstance(row, list):
                        continue
                    for c, cell in enumerate(row):
                        if isinstance(cell, str) and strip_html(cell):
                            yield Slot(
                                path=f"{base}.content[{r}][{c}]",
                                text=strip_html(cell),
                                context=f"table cell ({r + 1}, {c + 1})",
                                assign=setter(row, c),
                            )

        elif block_type == "checklist":
            items = data.get("items")
            if isinstance(items, list):
                for i, item in enumerate(items):
                    if isinstance(item, dict):
                        yield from self._field(item, "text", f"{base}.items[{i}]", "checklist item")

        elif block_type in ("warning", "alert"):
            yield from self._field(data, "title", base, f"{block_type} title", strip=False)
            yield from self._field(data, "message", base, f"{block_type} message", strip=False)

        else:
            yield from self._generic(data, base, block_type)

    def _field(
        self,
        container: dict[str, Any],
        key: str,
        base: str,
        context: str,
        strip: bool = True,
    ) -> Iterator[Slot]:
        value = container.get(key)
        if not isinstance(value, str):
            return
        text = strip_html(value) if strip else value
        if text.strip():
            yield Slot(
                path=f"{base}.{key}",
                text=text,
                context=context,
                assign=setter(container, key),
            )

    def _list_items(self, items: Any, base: str, context: str) -> Iterator[Slot]:
        """List items are strings, or {"content", "items"} dicts in nested lists."""
        if not isinstance(items, list):
            return
        for i, item in enumerate(items):
            if isinstance(item, str):
                if strip_html(item):
                    yield Slot(
                        path=f"{base}[{i}]",
                        text=strip_html(item),
                        context=context,
                        assign=setter(items, i),
                    )
            elif isinstance(item, dict):
                yield from self._field(item, "content", f"{base}[{i}]", context)
                yield from self._list_items(item.get("items"), f"{base}[{i}].items", f"nested {context}")

    def _generic(self, data: dict[str, Any], base: str, block_type: str) -> Iterator[Slot]:
        for key, value in data.items():
            path = f"{base}.{key}"
            if isinstance(value, str):
                if strip_html(value) and is_block_text(key, value):
                    yield Slot(
                        path=path,
                        text=strip_html(value),
                        context=f"{block_type} {key}",
                        assign=setter(data, key),
                    )
            elif isinstance(value, list) and key.lower() not in BLOCK_NON_TEXTUAL_KEYS:
                for i, item in enumerate(value):
                    if isinstance(item, str) and strip_html(item) and is_block_text(key, item):
                        yield Slot(
                            path=f"{path}[{i}]",
                            text=strip_html(item),
                            context=f"{block_type} {key} item",
                            assign=setter(value, i),
                        )
