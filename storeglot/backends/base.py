"""
Base class for translation backends.

A backend is the one place that talks to a machine-translation provider.
Everything above it (the orchestrator, jobs, the API) only sees
`translate(texts, target_language, source_language)` and `BackendError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from storeglot.backends.errors import is_transient
from storeglot.core.models import TranslationProvider

logger = logging.getLogger(__name__)


class TranslationBackend(ABC):
    """
    Base class for all translation backends.

    Backends must:
    1. Return exactly one translation per input text, in input order
    2. Raise `BackendError` (never a transport exception) on failure

    Example:
        class UppercaseBackend(TranslationBackend):
            provider = TranslationProvider.MANUAL

            async def translate(self, texts, target_language, source_language=None, context=""):
                return [text.upper() for text in texts]
    """

    provider: TranslationProvider

    @abstractmethod
    async def translate(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        """
        Translate texts to the target language.

        Args:
            texts: Texts to translate
            target_language: Target language code
            source_language: Source language (provider auto-detects if None)
            context: Optional hint about where the text appears

        Returns:
            Translations in the same order as `texts`
        """
        pass

    async def aclose(self) -> None:
        """Release network resources. Override if the backend holds any."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(provider={self.provider.value})>"


class EchoBackend(TranslationBackend):
    """
    Returns each text unchanged, optionally tagged with a prefix.

    For local development and for running the pipeline without an API key.
    """

    provider = TranslationProvider.ECHO

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        prefix = self.prefix.format(target=target_language) if self.prefix else ""
        return [f"{prefix}{text}" for text in texts]


def retrying(max_retries: int, retry_delay: float) -> AsyncRetrying:
    """
    Retry policy for backend calls.

    Transient errors are retried up to `max_retries` times, waiting
    `retry_delay * 2**attempt` seconds before each retry. Any other error
    propagates on the first failure.

    Usage:
        async for attempt in retrying(3, 1.0):
            with attempt:
                result = await backend.translate(texts, "es")
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_delay, max=max(retry_delay * 2 ** max_retries, 1)),
        retry=retry_if_exception(is_transient),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
