"""Engine selector — dispatches one translation request over one or more providers.

Four selection modes:

- primary_fallback: call the primary engine, and the fallback engine only if
  the primary fails and fallback is enabled.
- parallel: call every configured engine concurrently, each with its own
  timeout, and wait for all of them.
- quick_switch: same single-call contract as primary_fallback; callers fetch
  other engines lazily with :meth:`EngineSelector.switch`.
- scene_binding: primary_fallback with the engines, fallback flag and custom
  prompt bound to the active scene.

Provider failures never escape: each one is captured into that engine's
EngineResult. Only "nothing could be dispatched" conditions raise.
"""

from __future__ import annotations

import asyncio
import time

from sct.core.config import SceneBinding, SCTConfig
from sct.core.errors import MultiEngineError, ProviderError, ProviderErrorKind
from sct.core.models import (
    BilingualSegment,
    EngineResult,
    EngineSelectionMode,
    ResultBundle,
    TranslationScene,
)
from sct.llm.prompts import default_template, render_prompt, resolve_prompt_template
from sct.translation.registry import EngineRegistry
from sct.utils.console import console

_UNUSABLE_PRIMARY = (ProviderErrorKind.NOT_REGISTERED, ProviderErrorKind.NOT_AVAILABLE)


def _dedupe(engines: list[str]) -> list[str]:
    return list(dict.fromkeys(engines))


def _source(language: str | None) -> str | None:
    if not language or language == "auto":
        return None
    return language


class EngineSelector:
    """Produces a ResultBundle for a list of texts under a selection mode."""

    def __init__(self, registry: EngineRegistry, config: SCTConfig):
        self.registry = registry
        self.config = config

    @property
    def settings(self):
        return self.config.translation

    def binding_for(self, scene: TranslationScene) -> SceneBinding:
        """Configured binding for a scene, or the default one.

        The default binds the local engine as primary and the first
        externally configured engine as fallback.
        """
        binding = self.config.binding_for(scene)
        if binding is not None:
            return binding
        external = [e for e in self.registry.external_engines() if e != self.settings.local_engine]
        return SceneBinding.default(
            scene,
            local_engine=self.settings.local_engine,
            external_engine=external[0] if external else None,
        )

    async def translate(
        self,
        texts: list[str],
        target_language: str | None = None,
        source_language: str | None = None,
        scene: TranslationScene | None = None,
        mode: EngineSelectionMode | None = None,
        engine: str | None = None,
    ) -> ResultBundle:
        """Translate an ordered list of texts.

        Args:
            texts: Source texts, in display order.
            target_language: Target language code (configured default if None).
            source_language: Source language code; None or "auto" to detect.
            scene: Active scene (configured scene if None).
            mode: Selection mode (configured mode if None).
            engine: Primary engine override for fallback-style modes.

        Returns:
            ResultBundle with one EngineResult per engine attempted.

        Raises:
            MultiEngineError: If no engines are registered or none could be dispatched.
        """
        settings = self.settings
        mode = mode or settings.mode
        scene = scene or settings.scene
        target = target_language or settings.target_language
        source = _source(source_language if source_language is not None else settings.source)

        if not texts:
            return ResultBundle(
                results=[],
                primary_engine=engine or settings.default_engine,
                selection_mode=mode,
                scene=scene,
            )

        if len(self.registry) == 0:
            raise MultiEngineError.no_engines_configured()

        match mode:
            case EngineSelectionMode.PARALLEL:
                engines = _dedupe(settings.parallel_engines or [settings.default_engine])
                if engine is not None and engine not in engines:
                    engines.insert(0, engine)
                return await self._parallel(
                    texts, engines, source, target, scene, primary=settings.default_engine
                )

            case EngineSelectionMode.SCENE_BINDING:
                binding = self.binding_for(scene)
                return await self._with_fallback(
                    texts,
                    primary=engine or binding.primary_engine,
                    fallback=binding.fallback_engine if binding.fallback_enabled else None,
                    source=source,
                    target=target,
                    scene=scene,
                    mode=mode,
                    binding_prompt=binding.custom_prompt,
                )

            case _:
                # primary_fallback and quick_switch share the single-call contract
                return await self._with_fallback(
                    texts,
                    primary=engine or settings.default_engine,
                    fallback=settings.fallback_engine if settings.fallback_enabled else None,
                    source=source,
                    target=target,
                    scene=scene,
                    mode=mode,
                )

    async def switch(
        self,
        texts: list[str],
        engine: str,
        target_language: str | None = None,
        source_language: str | None = None,
        scene: TranslationScene | None = None,
    ) -> ResultBundle:
        """Fetch one specific engine's translation on demand (quick switch)."""
        if len(self.registry) == 0:
            raise MultiEngineError.no_engines_configured()
        settings = self.settings
        return await self._with_fallback(
            texts,
            primary=engine,
            fallback=None,
            source=_source(source_language if source_language is not None else settings.source),
            target=target_language or settings.target_language,
            scene=scene or settings.scene,
            mode=EngineSelectionMode.QUICK_SWITCH,
        )

    async def translate_text(
        self,
        text: str,
        target_language: str | None = None,
        source_language: str | None = None,
        scene: TranslationScene | None = None,
        mode: EngineSelectionMode | None = None,
    ) -> str:
        """Translate a single string and return the best translation.

        Raises:
            MultiEngineError: If no engine produced a usable translation.
        """
        bundle = await self.translate(
            [text],
            target_language=target_language,
            source_language=source_language,
            scene=scene,
            mode=mode,
        )
        return self.require_usable(bundle).translated_texts[0]

    @staticmethod
    def require_usable(bundle: ResultBundle) -> EngineResult:
        """Return the bundle's best result or raise the matching selector error."""
        best = bundle.best_result
        if best is not None:
            return best

        errors = bundle.errors
        if not bundle.results or not errors:
            raise MultiEngineError.no_results()

        primary = bundle.result_for(bundle.primary_engine)
        if (
            len(bundle.results) == 1
            and primary is not None
            and isinstance(primary.error, ProviderError)
            and primary.error.kind in _UNUSABLE_PRIMARY
        ):
            raise MultiEngineError.primary_not_available(bundle.primary_engine, errors)
        raise MultiEngineError.all_engines_failed(errors)

    async def _with_fallback(
        self,
        texts: list[str],
        primary: str,
        fallback: str | None,
        source: str | None,
        target: str,
        scene: TranslationScene | None,
        mode: EngineSelectionMode,
        binding_prompt: str | None = None,
    ) -> ResultBundle:
        results = [await self._attempt(primary, texts, source, target, scene, binding_prompt)]

        if not results[0].is_success and fallback and fallback != primary:
            console.print(
                f"[yellow]Primary engine {primary} failed:[/yellow] {results[0].error} "
                f"[dim]— falling back to {fallback}[/dim]"
            )
            fallback_result = await self._attempt(
                fallback, texts, source, target, scene, binding_prompt
            )
            if fallback_result.is_success:
                console.print(f"[dim]Fallback to {fallback} succeeded[/dim]")
            else:
                console.print(
                    f"[yellow]Fallback engine {fallback} also failed:[/yellow] "
                    f"{fallback_result.error}"
                )
            results.append(fallback_result)

        return ResultBundle(results=results, primary_engine=primary, selection_mode=mode, scene=scene)

    async def _parallel(
        self,
        texts: list[str],
        engines: list[str],
        source: str | None,
        target: str,
        scene: TranslationScene | None,
        primary: str,
    ) -> ResultBundle:
        if not engines:
            raise MultiEngineError.no_engines_configured()

        # Each attempt owns its slot; gather keeps dispatch order
        results = await asyncio.gather(
            *(self._attempt(engine, texts, source, target, scene) for engine in engines)
        )
        for result in results:
            if result.error is not None:
                console.print(f"[yellow]Engine {result.engine} failed:[/yellow] {result.error}")

        return ResultBundle(
            results=list(results),
            primary_engine=primary,
            selection_mode=EngineSelectionMode.PARALLEL,
            scene=scene,
        )

    def _prompt_for(
        self,
        engine: str,
        scene: TranslationScene | None,
        source: str | None,
        target: str,
        binding_prompt: str | None,
    ) -> str | None:
        template = resolve_prompt_template(
            self.config.prompts, engine, scene, binding_prompt
        ) or default_template(scene)
        if template is None:
            return None
        return render_prompt(template, source, target)

    async def _attempt(
        self,
        engine: str,
        texts: list[str],
        source: str | None,
        target: str,
        scene: TranslationScene | None,
        binding_prompt: str | None = None,
    ) -> EngineResult:
        """Call one engine; any failure is captured into the returned result."""
        start = time.perf_counter()
        provider = self.registry.get(engine)
        if provider is None:
            return EngineResult.failed(
                engine, ProviderError(ProviderErrorKind.NOT_REGISTERED, engine=engine)
            )

        prompt = self._prompt_for(engine, scene, source, target, binding_prompt)

        async def _call() -> list[str]:
            if not await provider.is_available():
                raise ProviderError(ProviderErrorKind.NOT_AVAILABLE, engine=engine)
            return await provider.translate_batch(texts, source, target, prompt)

        timeout = provider.timeout_for(len(texts))
        try:
            translated = await asyncio.wait_for(_call(), timeout=timeout)
        except asyncio.TimeoutError:
            error = ProviderError(ProviderErrorKind.TIMEOUT, f"{timeout:g}s", engine=engine)
            return EngineResult.failed(engine, error, latency=time.perf_counter() - start)
        except Exception as e:
            return EngineResult.failed(engine, e, latency=time.perf_counter() - start)

        latency = time.perf_counter() - start
        if len(translated) != len(texts):
            error = ProviderError(
                ProviderErrorKind.LENGTH_MISMATCH,
                f"expected {len(texts)}, got {len(translated)}",
                engine=engine,
            )
            return EngineResult.failed(engine, error, latency=latency)

        segments = [
            BilingualSegment.from_text(src, dst, target_language=target, source_language=source)
            for src, dst in zip(texts, translated)
        ]
        return EngineResult(engine=engine, segments=segments, latency=latency)
