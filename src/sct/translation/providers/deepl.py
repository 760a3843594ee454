"""DeepL provider — batch translation through the DeepL v2 REST API."""

from __future__ import annotations

import os

import httpx

from sct.core.config import EngineConfig
from sct.core.errors import ProviderErrorKind
from sct.translation.provider import TranslationProvider

PRO_API_BASE = "https://api.deepl.com"
FREE_API_BASE = "https://api-free.deepl.com"
DEFAULT_KEY_ENV = "DEEPL_API_KEY"

_TARGET_ALIASES = {"zh-Hans": "ZH-HANS", "zh-Hant": "ZH-HANT", "en": "EN-US", "pt": "PT-PT"}


def _target_code(code: str) -> str:
    return _TARGET_ALIASES.get(code, code.upper())


def _source_code(code: str | None) -> str | None:
    if not code or code == "auto":
        return None
    # Source languages take the bare code only
    return code.split("-")[0].upper()


class DeepLProvider(TranslationProvider):
    supports_batch = True
    default_timeout = 15.0

    def __init__(self, engine: str, config: EngineConfig):
        super().__init__(
            engine,
            name=config.name or "DeepL",
            local=False,
            timeout=config.timeout,
        )
        self.api_key_env = config.api_key_env or DEFAULT_KEY_ENV
        self._api_base = config.api_base
        self.transport: httpx.AsyncBaseTransport | None = None

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    @property
    def api_key(self) -> str | None:
        return os.environ.get(self.api_key_env)

    @property
    def api_base(self) -> str:
        if self._api_base:
            return self._api_base.rstrip("/")
        key = self.api_key or ""
        # Free-tier keys end with ":fx"
        return FREE_API_BASE if key.endswith(":fx") else PRO_API_BASE

    async def translate_batch(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> list[str]:
        if not texts:
            return []
        key = self.api_key
        if not key:
            raise self._fail(
                ProviderErrorKind.INVALID_CONFIGURATION, f"{self.api_key_env} is not set"
            )

        payload: dict[str, object] = {"text": texts, "target_lang": _target_code(target_language)}
        source = _source_code(source_language)
        if source:
            payload["source_lang"] = source

        try:
            async with self._client(self.timeout) as client:
                response = await client.post(
                    f"{self.api_base}/v2/translate",
                    json=payload,
                    headers={"Authorization": f"DeepL-Auth-Key {key}"},
                )
        except httpx.TimeoutException as e:
            raise self._fail(ProviderErrorKind.TIMEOUT, f"{self.timeout:g}s") from e
        except httpx.RequestError as e:
            raise self._fail(ProviderErrorKind.CONNECTION_FAILED, str(e)) from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise self._fail(
                ProviderErrorKind.RATE_LIMITED,
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code in (401, 403):
            raise self._fail(ProviderErrorKind.INVALID_CONFIGURATION, "API key rejected")
        if response.status_code != 200:
            raise self._fail(
                ProviderErrorKind.TRANSLATION_FAILED,
                f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            translations = response.json()["translations"]
            return [str(item["text"]) for item in translations]
        except (ValueError, KeyError, TypeError) as e:
            raise self._fail(ProviderErrorKind.TRANSLATION_FAILED, "invalid response") from e

    async def translate_text(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> str:
        if not text.strip():
            raise self._fail(ProviderErrorKind.EMPTY_INPUT)
        results = await self.translate_batch([text], source_language, target_language)
        if len(results) != 1:
            raise self._fail(ProviderErrorKind.LENGTH_MISMATCH, f"expected 1, got {len(results)}")
        return results[0]

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def check_connection(self) -> bool:
        key = self.api_key
        if not key:
            return False
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(
                    f"{self.api_base}/v2/usage",
                    headers={"Authorization": f"DeepL-Auth-Key {key}"},
                )
        except httpx.HTTPError:
            return False
        return response.status_code == 200
