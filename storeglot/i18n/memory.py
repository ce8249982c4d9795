"""
Translation memory.

A content-addressed cache of finished translations. Keys are
`{source}-{target}-{hash}` where the hash is taken over the trimmed,
lower-cased source text, so "Free Shipping " and "free shipping" share one
entry. A lookup hit bumps the entry's usage counter.

The memory is process-wide shared state. All mutations are single dict
operations with no await in between, so concurrent translations on one
event loop cannot corrupt it; usage counters are advisory.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable

from storeglot.core.models import MemoryEntry
from storeglot.core.utils import string_hash

logger = logging.getLogger(__name__)

AUTO_LANGUAGE = "auto"


def memory_key(text: str, source_language: str | None, target_language: str) -> str:
    """Cache key for one text and language pair."""
    source = source_language or AUTO_LANGUAGE
    return f"{source}-{target_language}-{string_hash(text.strip().lower())}"


class TranslationMemory:
    """
    In-memory translation cache with optional JSON-file persistence.

    Args:
        path: JSON file to load on creation and save after every change
        max_entries: Evict least-recently-used entries beyond this size.
            None (default) never evicts; entries only go away on `clear()`.

    Usage:
        memory = TranslationMemory()
        memory.store(["Hello"], ["Hola"], "en", "es")
        memory.lookup("hello", "en", "es")  # -> "Hola"
    """

    def __init__(self, path: str | Path | None = None, max_entries: int | None = None):
        self._entries: dict[str, MemoryEntry] = {}
        self.path = Path(path) if path else None
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        if self.path is not None:
            self.load()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    # =========================================================================
    # Lookup & Store
    # =========================================================================

    def lookup(self, text: str, source_language: str | None, target_language: str) -> str | None:
        """Return the cached translation, recording the hit, or None."""
        entry = self._entries.get(memory_key(text, source_language, target_language))
        if entry is None:
            self.misses += 1
            return None
        entry.touch()
        self.hits += 1
        return entry.translated_text

    def lookup_many(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
    ) -> list[str | None]:
        return [self.lookup(text, source_language, target_language) for text in texts]

    def get_entry(self, text: str, source_language: str | None, target_language: str) -> MemoryEntry | None:
        """Peek at an entry without counting a hit."""
        return self._entries.get(memory_key(text, source_language, target_language))

    def store(
        self,
        source_texts: list[str],
        translated_texts: list[str],
        source_language: str | None,
        target_language: str,
        content_type: str = "text",
    ) -> None:
        """Store translations pairwise. Existing entries are replaced."""
        if len(source_texts) != len(translated_texts):
            raise ValueError(
                f"Got {len(source_texts)} source texts but {len(translated_texts)} translations"
            )
        source = source_language or AUTO_LANGUAGE
        for source_text, translated_text in zip(source_texts, translated_texts):
            key = memory_key(source_text, source, target_language)
            self._entries[key] = MemoryEntry(
                id=key,
                source_text=source_text,
                translated_text=translated_text,
                source_language=source,
                target_language=target_language,
                content_type=content_type,
            )
        self._evict()
        self._persist()

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self._persist()

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export(self) -> list[MemoryEntry]:
        return [entry.model_copy() for entry in self._entries.values()]

    def import_entries(self, entries: Iterable[MemoryEntry | dict]) -> int:
        """
        Merge entries into the memory, keyed by their `id`.

        Returns:
            Number of entries imported
        """
        count = 0
        for item in entries:
            entry = item if isinstance(item, MemoryEntry) else MemoryEntry.model_validate(item)
            self._entries[entry.id] = entry.model_copy()
            count += 1
        self._evict()
        self._persist()
        return count

    # =========================================================================
    # Statistics
    # =========================================================================

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total else 0.0

    def language_distribution(self) -> dict[str, int]:
        """Entry counts per `source-target` pair."""
        return dict(
            Counter(f"{e.source_language}-{e.target_language}" for e in self._entries.values())
        )

    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "characters": sum(len(e.source_text) for e in self._entries.values()),
            "language_distribution": self.language_distribution(),
        }

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> None:
        """Load entries from `path`; a missing file is an empty memory."""
        if self.path is None or not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to load translation memory from %s: %s", self.path, e)
            return
        for item in raw:
            entry = MemoryEntry.model_validate(item)
            self._entries[entry.id] = entry
        logger.info("Loaded %d translation memory entries from %s", len(self._entries), self.path)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [entry.model_dump(mode="json") for entry in self._entries.values()]
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def _persist(self) -> None:
        try:
            self.save()
        except OSError as e:
            logger.error("Failed to save translation memory to %s: %s", self.path, e)

    def _evict(self) -> None:
        if self.max_entries is None or len(self._entries) <= self.max_entries:
            return
        by_age = sorted(self._entries.values(), key=lambda e: e.last_used)
        for entry in by_age[: len(self._entries) - self.max_entries]:
            del self._entries[entry.id]
        logger.debug("Evicted translation memory down to %d entries", len(self._entries))
