"""Engine registry — lookup table of translation providers keyed by engine id."""

from __future__ import annotations

import asyncio

from sct.core.config import SCTConfig
from sct.translation.provider import TranslationProvider
from sct.utils.console import console


class EngineRegistry:
    """Explicitly constructed registry; the selector resolves engines through it."""

    def __init__(self, providers: list[TranslationProvider] | None = None):
        self._providers: dict[str, TranslationProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: TranslationProvider, engine: str | None = None) -> None:
        """Register a provider under its own engine id, or an explicit one."""
        self._providers[engine or provider.engine] = provider

    def unregister(self, engine: str) -> None:
        self._providers.pop(engine, None)

    def get(self, engine: str) -> TranslationProvider | None:
        return self._providers.get(engine)

    def __contains__(self, engine: object) -> bool:
        return engine in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def registered_engines(self) -> list[str]:
        """Engine ids in registration order."""
        return list(self._providers)

    def external_engines(self) -> list[str]:
        """Engines that rely on an external service, in registration order."""
        return [engine for engine, p in self._providers.items() if not p.local]

    async def available_engines(self) -> list[str]:
        """Engines whose provider currently reports itself available, sorted."""
        engines = list(self._providers)
        checks = await asyncio.gather(
            *(self._providers[e].is_available() for e in engines), return_exceptions=True
        )
        return sorted(e for e, ok in zip(engines, checks) if ok is True)

    async def check_connection(self, engine: str) -> bool:
        provider = self._providers.get(engine)
        if provider is None:
            return False
        try:
            return await provider.check_connection()
        except Exception as e:
            console.print(f"[yellow]Connection check failed for {engine}:[/yellow] {e}")
            return False


def build_registry(config: SCTConfig) -> EngineRegistry:
    """Create and register a provider for every enabled engine in the config."""
    from sct.translation.providers import create_provider

    registry = EngineRegistry()
    for engine, engine_config in config.engines.items():
        if not engine_config.enabled:
            continue
        registry.register(create_provider(engine, engine_config), engine)
    return registry
