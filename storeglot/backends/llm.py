"""
LLM-powered translation backend.

Uses DSPy signatures so any provider litellm supports can translate
storefront copy. Batches are translated in one call; when the model
returns the wrong number of items each text is translated on its own.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from functools import lru_cache

import dspy

from storeglot.backends.base import TranslationBackend
from storeglot.backends.errors import BackendConfigurationError, BackendError, BackendErrorKind
from storeglot.core.models import TranslationProvider
from storeglot.i18n.languages import get_language_name

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}


# =============================================================================
# DSPy Signatures for Translation
# =============================================================================


class TranslateText(dspy.Signature):
    """Translate e-commerce copy, keeping meaning, tone, markup and product names."""

    text: str = dspy.InputField(desc="Text to translate")
    source_language: str = dspy.InputField(desc="Source language name, or 'auto'")
    target_language: str = dspy.InputField(desc="Target language name")
    context: str = dspy.InputField(desc="Where the text appears (e.g. 'header block')")

    translated_text: str = dspy.OutputField(desc="Translated text")


class TranslateBatch(dspy.Signature):
    """Translate multiple e-commerce texts efficiently."""

    texts: list[str] = dspy.InputField(desc="List of texts to translate")
    source_language: str = dspy.InputField(desc="Source language name, or 'auto'")
    target_language: str = dspy.InputField(desc="Target language name")
    context: str = dspy.InputField(desc="Shared context for all texts")

    translated_texts: list[str] = dspy.OutputField(desc="List of translated texts in same order")


# =============================================================================
# Client Configuration
# =============================================================================


@lru_cache
def get_lm(provider: str, model: str, api_key: str) -> dspy.LM:
    """
    Get configured language model.

    Args:
        provider: 'gemini' or 'openai'
        model: Model name; empty for the provider default
        api_key: Provider API key

    Returns:
        Configured DSPy LM instance.
    """
    if provider not in DEFAULT_MODELS:
        raise BackendConfigurationError(f"Unknown LLM provider: {provider}")
    if not api_key:
        raise BackendConfigurationError(f"API key for LLM provider '{provider}' not set")
    return dspy.LM(model=f"{provider}/{model or DEFAULT_MODELS[provider]}", api_key=api_key)


def _classify(error: Exception) -> BackendErrorKind:
    """Map provider exceptions (litellm names them consistently) to error kinds."""
    name = type(error).__name__
    if "RateLimit" in name:
        return BackendErrorKind.RATE_LIMITED
    if "Timeout" in name:
        return BackendErrorKind.TIMEOUT
    if "Authentication" in name:
        return BackendErrorKind.AUTH_FAILED
    if "ServiceUnavailable" in name or "APIConnection" in name:
        return BackendErrorKind.SERVICE_UNAVAILABLE
    if "BadRequest" in name or "ContextWindow" in name:
        return BackendErrorKind.BAD_REQUEST
    return BackendErrorKind.UNKNOWN


# =============================================================================
# Backend
# =============================================================================


class LlmBackend(TranslationBackend):
    """
    Translation through a large language model.

    Usage:
        backend = LlmBackend(dspy.LM("openai/gpt-4o-mini", api_key=...))
        await backend.translate(["Free shipping"], "de")
    """

    provider = TranslationProvider.LLM

    def __init__(self, lm: dspy.LM | None = None):
        self.lm = lm
        self._batch_module = dspy.Predict(TranslateBatch)
        self._translate_module = dspy.Predict(TranslateText)

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        if not texts:
            return []
        try:
            return await asyncio.to_thread(
                self._translate_sync,
                texts,
                get_language_name(target_language),
                get_language_name(source_language) if source_language else "auto",
                context or "online store content",
            )
        except BackendError:
            raise
        except Exception as e:
            kind = _classify(e)
            logger.error("LLM translation failed (%s): %s", kind.value, e)
            raise BackendError(kind, f"LLM translation failed: {e}") from e

    def _translate_sync(self, texts: list[str], target: str, source: str, context: str) -> list[str]:
        with dspy.context(lm=self.lm) if self.lm is not None else nullcontext():
            result = self._batch_module(
                texts=texts,
                source_language=source,
                target_language=target,
                context=context,
            )
            translations = [str(t).strip() for t in result.translated_texts]
            if len(translations) == len(texts):
                return translations

            logger.info(
                "LLM returned %d items for %d texts; translating individually",
                len(translations),
                len(texts),
            )
            return [
                self._translate_module(
                    text=text,
                    source_language=source,
                    target_language=target,
                    context=context,
                ).translated_text.strip()
                for text in texts
            ]
