"""MTranServer provider — self-hosted offline translation server over HTTP.

API: POST {api_base}/translate with {"text", "from", "to"}, answers
{"result": "...", "detected_language": "..."}. One text per request.
"""

from __future__ import annotations

import time

import httpx

from sct.core.config import EngineConfig
from sct.core.errors import ProviderErrorKind
from sct.translation.provider import TranslationProvider
from sct.utils.console import console

DEFAULT_API_BASE = "http://127.0.0.1:8989"
HEALTH_ENDPOINTS = ("/health", "/", "/translate")
HEALTH_TIMEOUT = 2.0
AVAILABILITY_TTL = 30.0  # Seconds a probe result is reused by is_available

# MTranServer uses bare language codes for Chinese
_LANGUAGE_ALIASES = {"zh-Hans": "zh", "zh-Hant": "zh-Hant"}


def _normalize_base(api_base: str | None) -> str:
    base = (api_base or DEFAULT_API_BASE).rstrip("/")
    # Avoid IPv6 resolution issues with localhost
    return base.replace("://localhost", "://127.0.0.1")


class MTranServerProvider(TranslationProvider):
    default_timeout = 10.0

    def __init__(self, engine: str, config: EngineConfig):
        super().__init__(
            engine,
            name=config.name or "MTranServer",
            local=config.local,
            timeout=config.timeout,
        )
        self.api_base = _normalize_base(config.api_base)
        self.transport: httpx.AsyncBaseTransport | None = None
        self._available: tuple[float, bool] | None = None

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def translate_text(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> str:
        if not text.strip():
            raise self._fail(ProviderErrorKind.EMPTY_INPUT)

        payload = {
            "text": text,
            "from": _LANGUAGE_ALIASES.get(source_language or "auto", source_language or "auto"),
            "to": _LANGUAGE_ALIASES.get(target_language, target_language),
        }
        url = f"{self.api_base}/translate"
        try:
            async with self._client(self.timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as e:
            raise self._fail(ProviderErrorKind.TIMEOUT, f"{self.timeout:g}s") from e
        except httpx.RequestError as e:
            raise self._fail(ProviderErrorKind.CONNECTION_FAILED, str(e)) from e

        if response.status_code == 429:
            raise self._fail(ProviderErrorKind.RATE_LIMITED)
        if response.status_code != 200:
            raise self._fail(
                ProviderErrorKind.TRANSLATION_FAILED,
                f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            data = response.json()
            return str(data["result"])
        except (ValueError, KeyError, TypeError) as e:
            raise self._fail(ProviderErrorKind.TRANSLATION_FAILED, "invalid response") from e

    async def _probe(self) -> str | None:
        """Return the first endpoint that answers, or None when unreachable."""
        async with self._client(HEALTH_TIMEOUT) as client:
            for endpoint in HEALTH_ENDPOINTS:
                try:
                    response = await client.get(f"{self.api_base}{endpoint}")
                except httpx.HTTPError:
                    continue
                # Any HTTP answer means the server is running
                if response.status_code > 0:
                    return endpoint
        return None

    async def is_available(self) -> bool:
        now = time.monotonic()
        if self._available is not None and now - self._available[0] < AVAILABILITY_TTL:
            return self._available[1]
        available = await self._probe() is not None
        self._available = (now, available)
        return available

    async def check_connection(self) -> bool:
        endpoint = await self._probe()
        self._available = (time.monotonic(), endpoint is not None)
        if endpoint is None:
            return False
        console.print(f"[dim]MTranServer reachable via {endpoint}[/dim]")
        return True
