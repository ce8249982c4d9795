"""
Internationalization - structure-preserving translation with a memory.

Design:
1. Parse documents into fragments (see `storeglot.parsers`)
2. Translate fragments in rate-limited batches, isolating failures
3. Cache every translation in the translation memory
4. Rebuild the document with the translated fragments

Usage:
    from storeglot.i18n import TranslationOrchestrator
    from storeglot.backends import create_backend

    orchestrator = TranslationOrchestrator(create_backend())
    translation = await orchestrator.process_document(html, "en", "fr")
"""

from storeglot.i18n.languages import (
    Language,
    LANGUAGE_NAMES,
    RTL_LANGUAGES,
    get_language_name,
    is_rtl,
    normalize_language_code,
    to_deepl_code,
)
from storeglot.i18n.memory import TranslationMemory, memory_key
from storeglot.i18n.optimize import block_priority, component_priority
from storeglot.i18n.orchestrator import BulkItem, TranslationOrchestrator
from storeglot.i18n.jobs import JobManager, JobStatus, TranslationJob
from storeglot.i18n.entities import EntityResult, EntityTranslator

__all__ = [
    # Orchestration
    "TranslationOrchestrator",
    "BulkItem",
    "block_priority",
    "component_priority",
    # Memory
    "TranslationMemory",
    "memory_key",
    # Entity sync
    "EntityTranslator",
    "EntityResult",
    # Jobs
    "JobManager",
    "JobStatus",
    "TranslationJob",
    # Language utilities
    "Language",
    "LANGUAGE_NAMES",
    "RTL_LANGUAGES",
    "get_language_name",
    "is_rtl",
    "normalize_language_code",
    "to_deepl_code",
]
