"""Flow controller — one capture-to-render run at a time.

A run moves strictly forward through analyzing → translating → rendering and
ends in completed or failed. Starting a new run cancels the one in flight;
only the run owning the current cancellation token may change the observable
state, so a superseded run's late results are dropped.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

from PIL import Image

from sct.analysis.analyzer import Analyzer
from sct.core.config import SCTConfig
from sct.core.errors import FlowError
from sct.core.events import EventCallback, FlowEvent
from sct.core.models import (
    BilingualSegment,
    EngineSelectionMode,
    FlowPhase,
    FlowResult,
    ResultBundle,
    TextSegment,
    TranslationScene,
)
from sct.render.overlay import OverlayRenderer
from sct.translation.aligner import align_bundle
from sct.translation.selector import EngineSelector


class CancellationToken:
    """Cooperative cancellation flag shared by a run and its controller."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FlowError.cancelled()


class Presenter(Protocol):
    """Receives the user-visible outcome of a run (loading, result window, alert)."""

    def show_loading(self, image: Image.Image) -> None: ...

    def show_result(self, result: FlowResult) -> None: ...

    def show_error(self, error: FlowError) -> None: ...


class FlowController:
    """Sequences analysis, engine selection, alignment and rendering.

    Every failure is classified into a single FlowError stored on
    ``last_error``; nothing is retried at this layer.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        selector: EngineSelector,
        renderer: OverlayRenderer,
        config: SCTConfig,
        presenter: Presenter | None = None,
        on_event: EventCallback | None = None,
    ):
        self.analyzer = analyzer
        self.selector = selector
        self.renderer = renderer
        self.config = config
        self.presenter = presenter
        self.on_event = on_event

        self._phase = FlowPhase.IDLE
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None
        self.last_error: FlowError | None = None
        self.last_result: FlowResult | None = None
        self.last_bundle: ResultBundle | None = None

    @property
    def phase(self) -> FlowPhase:
        return self._phase

    @property
    def progress(self) -> float:
        return self._phase.progress

    @property
    def is_processing(self) -> bool:
        return self._phase.is_processing

    def start(
        self,
        image: Image.Image,
        target_language: str | None = None,
        source_language: str | None = None,
        scene: TranslationScene | None = None,
        mode: EngineSelectionMode | None = None,
        engine: str | None = None,
        max_width: float | None = None,
    ) -> asyncio.Task:
        """Cancel any in-flight run and schedule a new one on the running loop."""
        if self._token is not None:
            self._token.cancel()

        token = CancellationToken()
        self._token = token
        self.last_error = None
        self.last_result = None
        self.last_bundle = None

        if self.presenter:
            self.presenter.show_loading(image)

        self._task = asyncio.create_task(
            self._execute(
                image,
                token,
                target_language=target_language or self.config.translation.target_language,
                source_language=source_language,
                scene=scene,
                mode=mode,
                engine=engine,
                max_width=max_width,
            )
        )
        return self._task

    async def run(self, image: Image.Image, **options) -> FlowResult | None:
        """Start a run and wait for it; returns None if it failed."""
        return await self.start(image, **options)

    def cancel(self) -> None:
        """Request cancellation; the run fails as cancelled at its next checkpoint."""
        if self._token is not None:
            self._token.cancel()

    def reset(self) -> None:
        self.cancel()
        self._token = None
        self._task = None
        self.last_error = None
        self.last_result = None
        self.last_bundle = None
        self._phase = FlowPhase.IDLE
        self._emit(FlowPhase.IDLE, "Reset")

    def _emit(self, phase: FlowPhase, message: str, data: dict | None = None) -> None:
        if self.on_event:
            self.on_event(FlowEvent(phase=phase, progress=phase.progress, message=message, data=data))

    def _transition(
        self,
        token: CancellationToken,
        phase: FlowPhase,
        message: str,
        data: dict | None = None,
    ) -> bool:
        if token is not self._token:
            return False
        self._phase = phase
        self._emit(phase, message, data)
        return True

    async def _execute(
        self,
        image: Image.Image,
        token: CancellationToken,
        target_language: str,
        source_language: str | None,
        scene: TranslationScene | None,
        mode: EngineSelectionMode | None,
        engine: str | None,
        max_width: float | None,
    ) -> FlowResult | None:
        started = time.perf_counter()
        try:
            segments = await self._analyze(image, token)
            bundle = await self._translate(
                segments, token, target_language, source_language, scene, mode, engine
            )
            aligned = self._align(segments, bundle, token, target_language)
            rendered = await self._render(image, aligned, token, max_width)
        except FlowError as e:
            self._fail(token, FlowError.cancelled() if token.cancelled else e)
            return None
        except asyncio.CancelledError:
            self._fail(token, FlowError.cancelled())
            raise

        result = FlowResult(
            original_image=image,
            rendered_image=rendered,
            segments=aligned,
            processing_time=time.perf_counter() - started,
            bundle=bundle,
        )
        if token is not self._token:
            return None
        self.last_result = result
        self._transition(
            token,
            FlowPhase.COMPLETED,
            f"Translated {len(aligned)} segments in {result.processing_time:.2f}s",
            {"segments": len(aligned)},
        )
        if self.presenter:
            self.presenter.show_result(result)
        return result

    async def _analyze(self, image: Image.Image, token: CancellationToken) -> list[TextSegment]:
        token.raise_if_cancelled()
        self._transition(token, FlowPhase.ANALYZING, "Analyzing image...")
        try:
            segments = await self.analyzer.analyze(image)
        except FlowError:
            raise
        except Exception as e:
            raise FlowError.analysis_failure(
                f"{e} ({self.config.analyzer.description})", cause=e
            ) from e
        if not segments:
            raise FlowError.no_text_found()
        return segments

    async def _translate(
        self,
        segments: list[TextSegment],
        token: CancellationToken,
        target_language: str,
        source_language: str | None,
        scene: TranslationScene | None,
        mode: EngineSelectionMode | None,
        engine: str | None,
    ) -> ResultBundle:
        token.raise_if_cancelled()
        self._transition(
            token,
            FlowPhase.TRANSLATING,
            f"Translating {len(segments)} segments...",
            {"segments": len(segments)},
        )
        try:
            bundle = await self.selector.translate(
                [segment.text for segment in segments],
                target_language=target_language,
                source_language=source_language,
                scene=scene,
                mode=mode,
                engine=engine,
            )
        except FlowError:
            raise
        except Exception as e:
            raise FlowError.translation_failure(str(e), cause=e) from e

        if token is self._token and not token.cancelled:
            self.last_bundle = bundle
        return bundle

    def _align(
        self,
        segments: list[TextSegment],
        bundle: ResultBundle,
        token: CancellationToken,
        target_language: str,
    ) -> list[BilingualSegment]:
        token.raise_if_cancelled()
        try:
            if bundle.best_result is None:
                self.selector.require_usable(bundle)
            return align_bundle(segments, bundle, target_language)
        except FlowError as e:
            e.bundle = e.bundle or bundle
            raise
        except Exception as e:
            raise FlowError.translation_failure(str(e), cause=e, bundle=bundle) from e

    async def _render(
        self,
        image: Image.Image,
        segments: list[BilingualSegment],
        token: CancellationToken,
        max_width: float | None,
    ) -> Image.Image:
        token.raise_if_cancelled()
        self._transition(token, FlowPhase.RENDERING, "Rendering overlay...")
        try:
            rendered = await asyncio.to_thread(
                self.renderer.render, image, segments, max_width=max_width
            )
        except Exception as e:
            raise FlowError.rendering_failure(str(e), cause=e) from e
        if rendered is None:
            raise FlowError.rendering_failure("renderer produced no image")
        return rendered

    def _fail(self, token: CancellationToken, error: FlowError) -> None:
        if token is not self._token:
            return
        self.last_error = error
        if error.is_cancelled:
            # A cancelled run surfaces no partial results
            self.last_bundle = None
        self._transition(token, FlowPhase.FAILED, error.description, {"error": error})
        if self.presenter and not error.is_cancelled:
            self.presenter.show_error(error)
