"""Concrete translation providers, keyed by the ``kind`` of an engine config."""

from __future__ import annotations

from sct.core.config import EngineConfig
from sct.core.errors import ProviderError, ProviderErrorKind
from sct.translation.provider import TranslationProvider
from sct.translation.providers.deepl import DeepLProvider
from sct.translation.providers.llm import LLMTranslationProvider
from sct.translation.providers.mtran import MTranServerProvider

PROVIDER_KINDS: dict[str, type[TranslationProvider]] = {
    "llm": LLMTranslationProvider,
    "mtran": MTranServerProvider,
    "deepl": DeepLProvider,
}


def create_provider(engine: str, config: EngineConfig) -> TranslationProvider:
    """Instantiate the provider class for an engine config."""
    provider_cls = PROVIDER_KINDS.get(config.kind)
    if provider_cls is None:
        raise ProviderError(
            ProviderErrorKind.INVALID_CONFIGURATION,
            f"unknown provider kind '{config.kind}' (expected one of {sorted(PROVIDER_KINDS)})",
            engine=engine,
        )
    return provider_cls(engine, config)
