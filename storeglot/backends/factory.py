"""Build the configured translation backend."""

from __future__ import annotations

import logging

from storeglot.backends.base import EchoBackend, TranslationBackend
from storeglot.backends.errors import BackendConfigurationError
from storeglot.config import Settings, get_settings

logger = logging.getLogger(__name__)

BACKEND_NAMES = ("deepl", "llm", "echo")


def create_backend(name: str | None = None, settings: Settings | None = None) -> TranslationBackend:
    """
    Create a backend by name ("deepl", "llm" or "echo").

    Defaults to `TRANSLATION_BACKEND` from settings.
    """
    settings = settings or get_settings()
    name = (name or settings.translation_backend).lower()

    if name == "deepl":
        from storeglot.backends.deepl import DeepLBackend

        return DeepLBackend(
            api_key=settings.deepl_api_key,
            endpoint=settings.deepl_api_endpoint,
            formality=settings.deepl_formality,
            preserve_formatting=settings.deepl_preserve_formatting,
            timeout=settings.request_timeout_seconds,
        )

    if name == "llm":
        from storeglot.backends.llm import LlmBackend, get_lm

        api_key = settings.google_api_key if settings.llm_provider == "gemini" else settings.openai_api_key
        return LlmBackend(get_lm(settings.llm_provider, settings.llm_model, api_key))

    if name == "echo":
        logger.warning("Using the echo backend: texts are returned untranslated")
        return EchoBackend()

    raise BackendConfigurationError(
        f"Unknown translation backend '{name}' (expected one of: {', '.join(BACKEND_NAMES)})"
    )
