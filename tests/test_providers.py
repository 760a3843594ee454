"""Tests for the HTTP translation providers against a mock transport."""

import asyncio
import json

import httpx
import pytest

from sct.core.config import EngineConfig
from sct.core.errors import ProviderError, ProviderErrorKind
from sct.translation.providers.deepl import FREE_API_BASE, PRO_API_BASE, DeepLProvider
from sct.translation.providers.mtran import DEFAULT_API_BASE, MTranServerProvider


def _mtran(handler, api_base: str | None = None) -> MTranServerProvider:
    provider = MTranServerProvider("mtran", EngineConfig(kind="mtran", api_base=api_base))
    provider.transport = httpx.MockTransport(handler)
    return provider


def _deepl(handler, monkeypatch, key: str | None = "secret:fx") -> DeepLProvider:
    if key is None:
        monkeypatch.delenv("DEEPL_API_KEY", raising=False)
    else:
        monkeypatch.setenv("DEEPL_API_KEY", key)
    provider = DeepLProvider("deepl", EngineConfig(kind="deepl"))
    provider.transport = httpx.MockTransport(handler)
    return provider


def _kind(excinfo) -> ProviderErrorKind:
    assert isinstance(excinfo.value, ProviderError)
    return excinfo.value.kind


class TestMTranServer:
    def test_translate_text(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            assert request.url.path == "/translate"
            return httpx.Response(200, json={"result": "你好"})

        result = asyncio.run(_mtran(handler).translate_text("Hello", None, "zh-Hans"))

        assert result == "你好"
        assert seen == [{"text": "Hello", "from": "auto", "to": "zh"}]

    def test_batch_translates_in_order(self):
        def handler(request: httpx.Request) -> httpx.Response:
            text = json.loads(request.content)["text"]
            return httpx.Response(200, json={"result": text.upper()})

        result = asyncio.run(_mtran(handler).translate_batch(["a", "b", "c"], "en", "fr"))
        assert result == ["A", "B", "C"]

    def test_localhost_normalized(self):
        provider = _mtran(lambda r: httpx.Response(200), api_base="http://localhost:8989/")
        assert provider.api_base == "http://127.0.0.1:8989"
        assert _mtran(lambda r: httpx.Response(200)).api_base == DEFAULT_API_BASE

    @pytest.mark.parametrize(
        "status, kind",
        [
            (429, ProviderErrorKind.RATE_LIMITED),
            (500, ProviderErrorKind.TRANSLATION_FAILED),
        ],
    )
    def test_http_errors(self, status, kind):
        provider = _mtran(lambda r: httpx.Response(status, text="nope"))
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_text("Hello", "en", "fr"))
        assert _kind(excinfo) is kind

    def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(_mtran(handler).translate_text("Hello", "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.CONNECTION_FAILED

    def test_invalid_response(self):
        provider = _mtran(lambda r: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_text("Hello", "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.TRANSLATION_FAILED

    def test_empty_input(self):
        provider = _mtran(lambda r: httpx.Response(200, json={"result": "x"}))
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_text("   ", "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.EMPTY_INPUT

    def test_is_available_on_any_http_answer(self):
        provider = _mtran(lambda r: httpx.Response(404))
        assert asyncio.run(provider.is_available()) is True

    def test_unavailable_when_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert asyncio.run(_mtran(handler).is_available()) is False

    def test_availability_check_is_cached(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.path)
            return httpx.Response(200)

        provider = _mtran(handler)

        async def twice():
            return await provider.is_available(), await provider.is_available()

        assert asyncio.run(twice()) == (True, True)
        assert requests == ["/health"]

    def test_check_connection_bypasses_cache(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.path)
            return httpx.Response(200)

        provider = _mtran(handler)

        async def run():
            await provider.is_available()
            return await provider.check_connection()

        assert asyncio.run(run()) is True
        assert requests == ["/health", "/health"]

    def test_timeout_scales_with_batch_size(self):
        provider = _mtran(lambda r: httpx.Response(200))
        assert provider.timeout == 10.0
        assert provider.timeout_for(1) == 10.0
        assert provider.timeout_for(20) == 200.0
        assert provider.timeout_for(0) == 10.0


class TestDeepL:
    def test_batch_request(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"translations": [{"text": "你好"}, {"text": "世界"}]}
            )

        provider = _deepl(handler, monkeypatch)
        result = asyncio.run(provider.translate_batch(["Hello", "World"], "en", "zh-Hans"))

        assert result == ["你好", "世界"]
        assert seen["url"] == f"{FREE_API_BASE}/v2/translate"
        assert seen["auth"] == "DeepL-Auth-Key secret:fx"
        assert seen["body"] == {
            "text": ["Hello", "World"],
            "target_lang": "ZH-HANS",
            "source_lang": "EN",
        }

    def test_pro_key_uses_pro_endpoint(self, monkeypatch):
        provider = _deepl(lambda r: httpx.Response(200), monkeypatch, key="secret")
        assert provider.api_base == PRO_API_BASE

    def test_auto_source_omitted(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"translations": [{"text": "Bonjour"}]})

        asyncio.run(_deepl(handler, monkeypatch).translate_text("Hello", None, "fr"))
        assert "source_lang" not in seen
        assert seen["target_lang"] == "FR"

    def test_missing_key(self, monkeypatch):
        provider = _deepl(lambda r: httpx.Response(200), monkeypatch, key=None)
        assert asyncio.run(provider.is_available()) is False
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_batch(["Hello"], "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.INVALID_CONFIGURATION

    def test_rate_limited_with_retry_after(self, monkeypatch):
        provider = _deepl(
            lambda r: httpx.Response(429, headers={"Retry-After": "5"}), monkeypatch
        )
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_batch(["Hello"], "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.RATE_LIMITED
        assert excinfo.value.retry_after == 5.0

    def test_rejected_key(self, monkeypatch):
        provider = _deepl(lambda r: httpx.Response(403), monkeypatch)
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(provider.translate_batch(["Hello"], "en", "fr"))
        assert _kind(excinfo) is ProviderErrorKind.INVALID_CONFIGURATION

    def test_check_connection_uses_usage_endpoint(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v2/usage"
            return httpx.Response(200, json={"character_count": 0})

        assert asyncio.run(_deepl(handler, monkeypatch).check_connection()) is True
