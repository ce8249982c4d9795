"""
Tests for translation backends.

The DeepL client is exercised against `httpx.MockTransport`; the LLM
backend with stand-in DSPy modules.
"""

import json
from types import SimpleNamespace

import httpx
import pytest

from storeglot.backends import (
    BackendConfigurationError,
    BackendError,
    BackendErrorKind,
    EchoBackend,
    create_backend,
    is_transient,
)
from storeglot.backends.deepl import DeepLBackend
from storeglot.backends.llm import LlmBackend, _classify
from storeglot.config import Settings


def deepl(handler, **kwargs):
    return DeepLBackend(api_key="test-key", transport=httpx.MockTransport(handler), **kwargs)


def translations_for(request):
    body = json.loads(request.content)
    return {"translations": [{"text": f"<{t}>", "detected_source_language": "EN"} for t in body["text"]]}


# =============================================================================
# Errors
# =============================================================================


class TestBackendError:
    @pytest.mark.parametrize(
        "status,kind",
        [
            (400, BackendErrorKind.BAD_REQUEST),
            (401, BackendErrorKind.AUTH_FAILED),
            (403, BackendErrorKind.FORBIDDEN),
            (413, BackendErrorKind.PAYLOAD_TOO_LARGE),
            (429, BackendErrorKind.RATE_LIMITED),
            (456, BackendErrorKind.QUOTA_EXCEEDED),
            (503, BackendErrorKind.SERVICE_UNAVAILABLE),
            (500, BackendErrorKind.UNKNOWN),
        ],
    )
    def test_from_status(self, status, kind):
        error = BackendError.from_status(status)
        assert error.kind == kind
        assert error.status_code == status

    def test_unknown_status_message(self):
        assert BackendError.from_status(500, "boom").message == "API error 500: boom"

    def test_transient_kinds(self):
        assert is_transient(BackendError(BackendErrorKind.TIMEOUT))
        assert is_transient(BackendError(BackendErrorKind.NETWORK_ERROR))
        assert not is_transient(BackendError(BackendErrorKind.QUOTA_EXCEEDED))
        assert not is_transient(ValueError("nope"))


# =============================================================================
# DeepL
# =============================================================================


class TestDeepLBackend:
    def test_requires_key(self):
        with pytest.raises(BackendConfigurationError):
            DeepLBackend(api_key="")

    @pytest.mark.asyncio
    async def test_translate_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=translations_for(request))

        backend = deepl(handler, formality="more")
        result = await backend.translate(["Hello", "World"], "de", "en-GB")

        assert result == ["<Hello>", "<World>"]
        request = seen[0]
        body = json.loads(request.content)
        assert request.url.path == "/v2/translate"
        assert request.headers["Authorization"] == "DeepL-Auth-Key test-key"
        assert body["target_lang"] == "DE"
        assert body["source_lang"] == "EN"
        assert body["formality"] == "more"
        assert body["tag_handling"] == "html"

    @pytest.mark.asyncio
    async def test_auto_source_is_omitted(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=translations_for(request))

        await deepl(handler).translate(["Hello"], "pt-br")

        assert "source_lang" not in bodies[0]
        assert "formality" not in bodies[0]
        assert bodies[0]["target_lang"] == "PT-BR"

    @pytest.mark.asyncio
    async def test_large_batches_are_chunked(self):
        sizes = []

        def handler(request):
            sizes.append(len(json.loads(request.content)["text"]))
            return httpx.Response(200, json=translations_for(request))

        texts = [f"Text {i}" for i in range(120)]
        result = await deepl(handler).translate(texts, "fr")

        assert sizes == [50, 50, 20]
        assert result[119] == "<Text 119>"

    @pytest.mark.asyncio
    async def test_http_errors_are_typed(self):
        def handler(request):
            return httpx.Response(403, json={"message": "Wrong key"})

        with pytest.raises(BackendError) as exc_info:
            await deepl(handler).translate(["Hello"], "fr")

        assert exc_info.value.kind == BackendErrorKind.FORBIDDEN
        assert "Wrong key" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(BackendError) as exc_info:
            await deepl(handler).translate(["Hello"], "fr")
        assert exc_info.value.kind == BackendErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendError) as exc_info:
            await deepl(handler).translate(["Hello"], "fr")
        assert exc_info.value.kind == BackendErrorKind.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_wrong_translation_count(self):
        def handler(request):
            return httpx.Response(200, json={"translations": []})

        with pytest.raises(BackendError):
            await deepl(handler).translate(["Hello"], "fr")

    @pytest.mark.asyncio
    async def test_detect_language(self):
        def handler(request):
            return httpx.Response(
                200, json={"translations": [{"text": "Hello", "detected_source_language": "DE"}]}
            )

        assert await deepl(handler).detect_language("Hallo Welt") == "de"

    @pytest.mark.asyncio
    async def test_detect_language_failure(self):
        def handler(request):
            return httpx.Response(503)

        assert await deepl(handler).detect_language("Hallo") == "unknown"

    @pytest.mark.asyncio
    async def test_usage(self):
        def handler(request):
            assert request.url.path == "/v2/usage"
            return httpx.Response(200, json={"character_count": 400, "character_limit": 500000})

        usage = await deepl(handler).get_usage()
        assert usage.characters_remaining == 499600

    @pytest.mark.asyncio
    async def test_validate_language_pair(self):
        def handler(request):
            if request.url.params["type"] == "source":
                return httpx.Response(200, json=[{"language": "EN", "name": "English"}])
            return httpx.Response(
                200,
                json=[
                    {"language": "DE", "name": "German", "supports_formality": True},
                    {"language": "EN-GB", "name": "English (British)"},
                ],
            )

        backend = deepl(handler)
        pair = await backend.validate_language_pair("en", "de")
        assert pair.supported
        assert pair.formality_supported

        pair = await backend.validate_language_pair("en", "ja")
        assert not pair.supported


# =============================================================================
# LLM
# =============================================================================


class TestLlmBackend:
    @pytest.mark.asyncio
    async def test_batch_translation(self):
        backend = LlmBackend()
        backend._batch_module = lambda **kwargs: SimpleNamespace(
            translated_texts=[f" {t.upper()} " for t in kwargs["texts"]]
        )

        assert await backend.translate(["hola", "mundo"], "es") == ["HOLA", "MUNDO"]

    @pytest.mark.asyncio
    async def test_count_mismatch_translates_individually(self):
        backend = LlmBackend()
        backend._batch_module = lambda **kwargs: SimpleNamespace(translated_texts=["only one"])
        backend._translate_module = lambda **kwargs: SimpleNamespace(translated_text=kwargs["text"][::-1])

        assert await backend.translate(["abc", "xyz"], "fr") == ["cba", "zyx"]

    @pytest.mark.asyncio
    async def test_provider_errors_are_classified(self):
        class RateLimitError(Exception):
            pass

        def explode(**kwargs):
            raise RateLimitError("slow down")

        backend = LlmBackend()
        backend._batch_module = explode

        with pytest.raises(BackendError) as exc_info:
            await backend.translate(["hello"], "de")
        assert exc_info.value.kind == BackendErrorKind.RATE_LIMITED

    def test_classify(self):
        class APITimeoutError(Exception):
            pass

        class AuthenticationError(Exception):
            pass

        assert _classify(APITimeoutError()) == BackendErrorKind.TIMEOUT
        assert _classify(AuthenticationError()) == BackendErrorKind.AUTH_FAILED
        assert _classify(KeyError()) == BackendErrorKind.UNKNOWN


# =============================================================================
# Echo & Factory
# =============================================================================


class TestFactory:
    @pytest.mark.asyncio
    async def test_echo(self):
        backend = EchoBackend(prefix="[{target}] ")
        assert await backend.translate(["Hello"], "fr") == ["[fr] Hello"]

    def test_create_echo(self):
        assert isinstance(create_backend("echo", Settings()), EchoBackend)

    def test_create_deepl(self):
        backend = create_backend("deepl", Settings(deepl_api_key="k", deepl_api_endpoint="https://api-free.deepl.com/"))
        assert isinstance(backend, DeepLBackend)
        assert backend.endpoint == "https://api-free.deepl.com"

    def test_deepl_without_key(self):
        with pytest.raises(BackendConfigurationError):
            create_backend("deepl", Settings(deepl_api_key=""))

    def test_unknown_backend(self):
        with pytest.raises(BackendConfigurationError):
            create_backend("babelfish", Settings())

    def test_default_from_settings(self):
        assert isinstance(create_backend(settings=Settings(translation_backend="echo")), EchoBackend)
