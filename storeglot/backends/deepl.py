"""
DeepL translation backend.

Talks to the DeepL REST API (v2) over httpx. Every HTTP or transport failure
is converted into a typed `BackendError`; retrying is left to the caller.

Setup:
    DEEPL_API_KEY=...
    DEEPL_API_ENDPOINT=https://api-free.deepl.com   (free-tier keys)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from storeglot.backends.base import TranslationBackend
from storeglot.backends.errors import BackendConfigurationError, BackendError, BackendErrorKind
from storeglot.core.models import TranslationProvider
from storeglot.i18n.languages import normalize_language_code, to_deepl_code

logger = logging.getLogger(__name__)

# DeepL accepts at most 50 texts per request
MAX_TEXTS_PER_REQUEST = 50
DETECTION_SAMPLE_CHARS = 1000
USER_AGENT = "storeglot/1.0"


# =============================================================================
# Models
# =============================================================================


class DeepLLanguage(BaseModel):
    """One entry of GET /v2/languages."""

    language: str
    name: str
    supports_formality: bool = False


class SupportedLanguages(BaseModel):
    source: list[DeepLLanguage]
    target: list[DeepLLanguage]


class LanguagePair(BaseModel):
    """Whether DeepL can translate between two languages."""

    source: str
    target: str
    supported: bool
    formality_supported: bool = False


class DeepLUsage(BaseModel):
    """Character usage for the current billing period."""

    character_count: int
    character_limit: int

    @property
    def characters_remaining(self) -> int:
        return max(self.character_limit - self.character_count, 0)


# =============================================================================
# Backend
# =============================================================================


class DeepLBackend(TranslationBackend):
    """
    DeepL API client.

    Args:
        api_key: DeepL authentication key
        endpoint: API base URL (paid or free tier)
        formality: "default", "more", "less", "prefer_more" or "prefer_less"
        preserve_formatting: Ask DeepL not to correct punctuation/casing
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass `httpx.MockTransport`)
    """

    provider = TranslationProvider.DEEPL

    def __init__(
        self,
        api_key: str,
        endpoint: str = "https://api.deepl.com",
        formality: str = "default",
        preserve_formatting: bool = True,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise BackendConfigurationError("DEEPL_API_KEY not set")
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.formality = formality
        self.preserve_formatting = preserve_formatting
        self.timeout = timeout
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"DeepL-Auth-Key {self.api_key}",
            "User-Agent": USER_AGENT,
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body."""
        url = f"{self.endpoint}{path}"
        logger.debug("DeepL API request: %s %s", method, path)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self.headers, **kwargs)
        except httpx.TimeoutException as e:
            raise BackendError(BackendErrorKind.TIMEOUT) from e
        except httpx.TransportError as e:
            raise BackendError(BackendErrorKind.NETWORK_ERROR, f"Network error: {e}") from e

        if response.status_code >= 400:
            error = BackendError.from_status(response.status_code, _error_detail(response))
            logger.error("DeepL API error: %s", error.message)
            raise error
        return response.json()

    # =========================================================================
    # Translation
    # =========================================================================

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None = None,
        context: str = "",
    ) -> list[str]:
        results: list[str] = []
        for start in range(0, len(texts), MAX_TEXTS_PER_REQUEST):
            chunk = texts[start:start + MAX_TEXTS_PER_REQUEST]
            translations = await self._translate_chunk(chunk, target_language, source_language)
            results.extend(item["text"] for item in translations)
        return results

    async def _translate_chunk(
        self,
        texts: list[str],
        target_language: str,
        source_language: str | None,
    ) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {
            "text": texts,
            "target_lang": to_deepl_code(target_language),
            "preserve_formatting": self.preserve_formatting,
            "tag_handling": "html",
            "split_sentences": "1",
        }
        if source_language and normalize_language_code(source_language) != "auto":
            # Source languages never carry a region in DeepL
            payload["source_lang"] = to_deepl_code(source_language).split("-")[0]
        if self.formality != "default":
            payload["formality"] = self.formality

        data = await self._request("POST", "/v2/translate", json=payload)
        translations = data.get("translations", [])
        if len(translations) != len(texts):
            raise BackendError(
                BackendErrorKind.UNKNOWN,
                f"Expected {len(texts)} translations, got {len(translations)}",
            )
        return translations

    # =========================================================================
    # Languages & Usage
    # =========================================================================

    async def detect_language(self, text: str) -> str:
        """
        Detect the language of a text (lower-case code, or "unknown").

        DeepL has no detection endpoint; a translation to English reports
        the detected source language.
        """
        try:
            data = await self._request(
                "POST",
                "/v2/translate",
                json={"text": [text[:DETECTION_SAMPLE_CHARS]], "target_lang": "EN"},
            )
        except BackendError as e:
            logger.warning("Language detection failed: %s", e)
            return "unknown"
        translations = data.get("translations") or [{}]
        detected = translations[0].get("detected_source_language")
        return normalize_language_code(detected) if detected else "unknown"

    async def get_supported_languages(self) -> SupportedLanguages:
        source = await self._request("GET", "/v2/languages", params={"type": "source"})
        target = await self._request("GET", "/v2/languages", params={"type": "target"})
        return SupportedLanguages(
            source=[DeepLLanguage(**item) for item in source],
            target=[DeepLLanguage(**item) for item in target],
        )

    async def validate_language_pair(self, source_language: str, target_language: str) -> LanguagePair:
        """Check both languages against DeepL's lists; unsupported on any API error."""
        try:
            languages = await self.get_supported_languages()
        except BackendError as e:
            logger.warning("Language pair validation failed: %s", e)
            return LanguagePair(source=source_language, target=target_language, supported=False)

        source_code = to_deepl_code(source_language).split("-")[0]
        target_code = to_deepl_code(target_language)
        source_supported = any(lang.language.upper() == source_code for lang in languages.source)
        target = next(
            (lang for lang in languages.target if lang.language.upper() == target_code),
            None,
        )
        return LanguagePair(
            source=source_language,
            target=target_language,
            supported=source_supported and target is not None,
            formality_supported=bool(target and target.supports_formality),
        )

    async def get_usage(self) -> DeepLUsage:
        data = await self._request("GET", "/v2/usage")
        return DeepLUsage(**data)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""
