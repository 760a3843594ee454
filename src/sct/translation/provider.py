"""Translation provider interface.

Concrete providers wrap one translation backend each (an LLM through LiteLLM,
a self-hosted MTranServer, DeepL, ...). The engine selector only ever talks to
this interface, looking providers up by engine id in the registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sct.core.errors import ProviderError, ProviderErrorKind

DEFAULT_TIMEOUT = 30.0


class TranslationProvider(ABC):
    """Capability contract every translation backend implements."""

    #: Whether translate_batch sends all texts in a single request.
    supports_batch: bool = False
    #: Used when the engine config does not set a timeout.
    default_timeout: float = DEFAULT_TIMEOUT

    def __init__(
        self,
        engine: str,
        name: str | None = None,
        local: bool = False,
        timeout: float | None = None,
    ):
        self.engine = engine
        self.name = name or engine
        self.local = local
        self.timeout = timeout if timeout is not None else self.default_timeout

    def timeout_for(self, count: int) -> float:
        """Time allowed for one translate_batch call over ``count`` texts.

        Providers without a batch endpoint send one request per text, so
        their per-request timeout scales with the batch size.
        """
        if self.supports_batch:
            return self.timeout
        return self.timeout * max(count, 1)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(engine={self.engine!r})"

    @abstractmethod
    async def translate_text(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> str:
        """Translate a single text."""

    async def translate_batch(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> list[str]:
        """Translate an ordered list of texts, preserving order and length.

        The default implementation translates one text at a time; providers
        with a native batch endpoint override it.
        """
        if not texts:
            return []
        results = []
        for text in texts:
            results.append(await self.translate_text(text, source_language, target_language, prompt))
        return results

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the provider is configured and usable right now."""

    async def check_connection(self) -> bool:
        """Whether the backend answers a real request."""
        try:
            result = await self.translate_text("Hello", "en", "fr")
        except Exception:
            return False
        return bool(result.strip())

    def _fail(self, kind: ProviderErrorKind, message: str = "", **kwargs: object) -> ProviderError:
        return ProviderError(kind, message, engine=self.engine, **kwargs)
