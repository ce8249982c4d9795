"""
Tests for the translation memory.
"""

from datetime import datetime, timezone

import pytest

from storeglot.core.models import MemoryEntry
from storeglot.i18n.memory import TranslationMemory, memory_key


def entry(text, translated, used_at):
    return MemoryEntry(
        id=memory_key(text, "en", "es"),
        source_text=text,
        translated_text=translated,
        source_language="en",
        target_language="es",
        last_used=used_at,
    )


# =============================================================================
# Lookup & Store
# =============================================================================


class TestLookup:
    def test_store_and_lookup(self, memory):
        memory.store(["Free shipping"], ["Envío gratis"], "en", "es")
        assert memory.lookup("Free shipping", "en", "es") == "Envío gratis"

    def test_keys_ignore_case_and_surrounding_space(self, memory):
        memory.store(["Free Shipping "], ["Envío gratis"], "en", "es")
        assert memory.lookup("free shipping", "en", "es") == "Envío gratis"

    def test_language_pair_is_part_of_the_key(self, memory):
        memory.store(["Free shipping"], ["Envío gratis"], "en", "es")
        assert memory.lookup("Free shipping", "en", "fr") is None
        assert memory.lookup("Free shipping", None, "es") is None

    def test_auto_source(self, memory):
        memory.store(["Free shipping"], ["Livraison gratuite"], None, "fr")
        assert memory.lookup("Free shipping", None, "fr") == "Livraison gratuite"
        assert memory.get_entry("Free shipping", None, "fr").source_language == "auto"

    def test_hit_bumps_usage(self, memory):
        memory.store(["Hello"], ["Hola"], "en", "es")
        memory.lookup("Hello", "en", "es")
        memory.lookup("Hello", "en", "es")

        assert memory.get_entry("Hello", "en", "es").usage_count == 3

    def test_counts_hits_and_misses(self, memory):
        memory.store(["Hello"], ["Hola"], "en", "es")
        memory.lookup("Hello", "en", "es")
        memory.lookup("Goodbye", "en", "es")

        assert memory.hits == 1
        assert memory.misses == 1
        assert memory.hit_rate == 50.0

    def test_length_mismatch(self, memory):
        with pytest.raises(ValueError):
            memory.store(["Hello", "World"], ["Hola"], "en", "es")

    def test_clear(self, memory):
        memory.store(["Hello"], ["Hola"], "en", "es")
        memory.clear()
        assert len(memory) == 0
        assert memory.lookup("Hello", "en", "es") is None


# =============================================================================
# Statistics, Import & Export
# =============================================================================


class TestStats:
    def test_language_distribution(self, memory):
        memory.store(["Hello", "World"], ["Hola", "Mundo"], "en", "es")
        memory.store(["Hello"], ["Bonjour"], "en", "fr")

        assert memory.language_distribution() == {"en-es": 2, "en-fr": 1}
        assert memory.stats()["entries"] == 3
        assert memory.stats()["characters"] == 15

    def test_export_import(self, memory):
        memory.store(["Hello"], ["Hola"], "en", "es")
        other = TranslationMemory()

        assert other.import_entries(memory.export()) == 1
        assert other.lookup("Hello", "en", "es") == "Hola"

    def test_import_dicts(self, memory):
        data = entry("Hello", "Hola", datetime(2024, 1, 1, tzinfo=timezone.utc)).model_dump(mode="json")
        memory.import_entries([data])
        assert memory.lookup("hello", "en", "es") == "Hola"


# =============================================================================
# Eviction & Persistence
# =============================================================================


class TestEviction:
    def test_unbounded_by_default(self, memory):
        memory.store([f"Text number {i}" for i in range(50)], [f"Texto {i}" for i in range(50)], "en", "es")
        assert len(memory) == 50

    def test_least_recently_used_is_evicted(self):
        memory = TranslationMemory(max_entries=2)
        memory.import_entries(
            [
                entry("Old", "Viejo", datetime(2024, 1, 1, tzinfo=timezone.utc)),
                entry("Recent", "Reciente", datetime(2024, 6, 1, tzinfo=timezone.utc)),
            ]
        )
        memory.store(["New"], ["Nuevo"], "en", "es")

        assert len(memory) == 2
        assert memory.get_entry("Old", "en", "es") is None
        assert memory.get_entry("Recent", "en", "es") is not None
        assert memory.get_entry("New", "en", "es") is not None


class TestPersistence:
    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "memory.json"
        memory = TranslationMemory(path=path)
        memory.store(["Hello"], ["Hola"], "en", "es")

        reloaded = TranslationMemory(path=path)
        assert reloaded.lookup("Hello", "en", "es") == "Hola"

    def test_missing_file_is_empty(self, tmp_path):
        memory = TranslationMemory(path=tmp_path / "nothing.json")
        assert len(memory) == 0

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "memory.json"
        path.write_text("{broken", encoding="utf-8")
        assert len(TranslationMemory(path=path)) == 0
