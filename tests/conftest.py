"""Shared test doubles."""

import pytest

from storeglot.backends import BackendError, BackendErrorKind, TranslationBackend
from storeglot.core.models import TranslationProvider
from storeglot.core.registry import build_default_registry
from storeglot.i18n import TranslationMemory, TranslationOrchestrator


class DictBackend(TranslationBackend):
    """Translates from a lookup table, recording every call."""

    provider = TranslationProvider.MANUAL

    def __init__(self, table=None, fail_on=(), errors=None):
        self.table = table or {}
        self.fail_on = set(fail_on)
        self.errors = list(errors or [])  # raised, in order, before any success
        self.calls = []

    async def translate(self, texts, target_language, source_language=None, context=""):
        self.calls.append(list(texts))
        if self.errors:
            raise self.errors.pop(0)
        for text in texts:
            if text in self.fail_on:
                raise BackendError(BackendErrorKind.BAD_REQUEST, f"cannot translate {text!r}")
        return [self.table.get(text, f"[{target_language}] {text}") for text in texts]


@pytest.fixture
def backend():
    return DictBackend({"Hello": "Hola", "World": "Mundo"})


@pytest.fixture
def memory():
    return TranslationMemory()


@pytest.fixture
def orchestrator(backend, memory):
    return TranslationOrchestrator(
        backend,
        memory=memory,
        registry=build_default_registry(),
        batch_delay=0,
        retry_delay=0,
    )
