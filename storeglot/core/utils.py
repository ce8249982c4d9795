"""
Shared utility functions.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

TAG_PATTERN = re.compile(r"<[^>]*>")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "trans", "job")

    Returns:
        A unique ID like "trans_a1b2c3d4e5f6"
    """
    uid = str(uuid.uuid4())[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def strip_html(text: str) -> str:
    """Remove markup tags and surrounding whitespace."""
    return TAG_PATTERN.sub("", text).strip()


def to_base36(number: int) -> str:
    """Render a non-negative integer in base 36."""
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def string_hash(text: str) -> str:
    """
    Stable 32-bit string hash rendered in base 36.

    Uses the classic `hash * 31 + char` rolling hash over UTF-16 code units
    with signed 32-bit wrap-around, so keys match ones exported by earlier
    tooling that used the same scheme.
    """
    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        value = (value * 31 + code) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return to_base36(abs(value))
