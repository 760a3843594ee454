"""Shared data models for screen-translate."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


def _new_id() -> str:
    return uuid.uuid4().hex


class EngineSelectionMode(str, Enum):
    """How the engine selector dispatches a translation request."""

    PRIMARY_FALLBACK = "primary_fallback"
    PARALLEL = "parallel"
    QUICK_SWITCH = "quick_switch"
    SCENE_BINDING = "scene_binding"


class TranslationScene(str, Enum):
    """Usage context used to pick scene-bound engines."""

    SCREENSHOT = "screenshot"
    TEXT_SELECTION = "text_selection"
    TRANSLATE_AND_INSERT = "translate_and_insert"


class FlowPhase(str, Enum):
    """One stage of the capture-to-render pipeline."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    TRANSLATING = "translating"
    RENDERING = "rendering"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def progress(self) -> float:
        return _PHASE_PROGRESS[self]

    @property
    def is_processing(self) -> bool:
        return self in (FlowPhase.ANALYZING, FlowPhase.TRANSLATING, FlowPhase.RENDERING)

    @property
    def is_terminal(self) -> bool:
        return self in (FlowPhase.COMPLETED, FlowPhase.FAILED)


_PHASE_PROGRESS = {
    FlowPhase.IDLE: 0.0,
    FlowPhase.ANALYZING: 0.25,
    FlowPhase.TRANSLATING: 0.50,
    FlowPhase.RENDERING: 0.75,
    FlowPhase.COMPLETED: 1.0,
    FlowPhase.FAILED: 0.0,
}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with a top-left origin.

    Used both for normalized boxes (0..1 on each axis) and pixel boxes.
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def zero(cls) -> Rect:
        return cls(0.0, 0.0, 0.0, 0.0)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2

    def to_pixels(self, width: float, height: float) -> Rect:
        """Scale a normalized box to pixel coordinates of a width x height bitmap."""
        return Rect(self.x * width, self.y * height, self.width * width, self.height * height)

    def to_normalized(self, width: float, height: float) -> Rect:
        """Inverse of :meth:`to_pixels`."""
        return Rect(self.x / width, self.y / height, self.width / width, self.height / height)

    def expanded(self, dx: float, dy: float) -> Rect:
        """Grow the rectangle by dx on the left and right, dy on the top and bottom."""
        return Rect(self.x - dx, self.y - dy, self.width + 2 * dx, self.height + 2 * dy)

    def contains(self, px: float, py: float) -> bool:
        return self.min_x <= px <= self.max_x and self.min_y <= py <= self.max_y

    def intersects(self, other: Rect) -> bool:
        return (
            self.min_x < other.max_x
            and other.min_x < self.max_x
            and self.min_y < other.max_y
            and other.min_y < self.max_y
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class TextSegment:
    """A detected piece of text with its normalized position in a captured image."""

    text: str
    bounding_box: Rect
    confidence: float = 1.0
    id: str = field(default_factory=_new_id)

    def pixel_bounding_box(self, width: float, height: float) -> Rect:
        return self.bounding_box.to_pixels(width, height)


@dataclass(frozen=True)
class BilingualSegment:
    """A text segment paired with its translation."""

    original: TextSegment
    translated_text: str
    target_language: str
    source_language: str | None = None
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_text(
        cls,
        source_text: str,
        translated_text: str,
        target_language: str,
        source_language: str | None = None,
    ) -> BilingualSegment:
        """Build a segment for provider output that has no position yet."""
        return cls(
            original=TextSegment(text=source_text, bounding_box=Rect.zero()),
            translated_text=translated_text,
            target_language=target_language,
            source_language=source_language,
        )

    @property
    def source_text(self) -> str:
        return self.original.text

    @property
    def bounding_box(self) -> Rect:
        return self.original.bounding_box

    def pixel_bounding_box(self, width: float, height: float) -> Rect:
        return self.original.pixel_bounding_box(width, height)


@dataclass
class EngineResult:
    """Outcome of one provider attempt within a translation request."""

    engine: str
    segments: list[BilingualSegment] = field(default_factory=list)
    latency: float = 0.0  # seconds
    error: BaseException | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None and bool(self.segments)

    @property
    def translated_texts(self) -> list[str]:
        return [seg.translated_text for seg in self.segments]

    @classmethod
    def failed(cls, engine: str, error: BaseException, latency: float = 0.0) -> EngineResult:
        return cls(engine=engine, segments=[], latency=latency, error=error)


@dataclass
class ResultBundle:
    """Aggregated outcome of calling one or more engines for one request."""

    results: list[EngineResult]
    primary_engine: str
    selection_mode: EngineSelectionMode
    scene: TranslationScene | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        engines = [r.engine for r in self.results]
        if len(engines) != len(set(engines)):
            raise ValueError(f"Duplicate engine results in bundle: {engines}")

    @property
    def primary_result(self) -> list[BilingualSegment]:
        """Segments of the primary engine, or empty if it did not succeed."""
        for result in self.results:
            if result.engine == self.primary_engine and result.is_success:
                return result.segments
        return []

    @property
    def best_result(self) -> EngineResult | None:
        """The primary engine's result if successful, else the first successful one."""
        for result in self.results:
            if result.engine == self.primary_engine and result.is_success:
                return result
        for result in self.results:
            if result.is_success:
                return result
        return None

    @property
    def has_errors(self) -> bool:
        return any(r.error is not None for r in self.results)

    @property
    def all_failed(self) -> bool:
        return all(r.error is not None for r in self.results)

    @property
    def successful_engines(self) -> list[str]:
        return [r.engine for r in self.results if r.is_success]

    @property
    def failed_engines(self) -> list[str]:
        return [r.engine for r in self.results if not r.is_success]

    @property
    def errors(self) -> list[BaseException]:
        return [r.error for r in self.results if r.error is not None]

    def result_for(self, engine: str) -> EngineResult | None:
        for result in self.results:
            if result.engine == engine:
                return result
        return None

    def segments_for(self, engine: str) -> list[BilingualSegment] | None:
        result = self.result_for(engine)
        return result.segments if result is not None else None

    @property
    def average_latency(self) -> float:
        """Average latency across successful engines, in seconds."""
        latencies = [r.latency for r in self.results if r.is_success]
        if not latencies:
            return 0.0
        return sum(latencies) / len(latencies)

    @classmethod
    def single(
        cls,
        engine: str,
        segments: list[BilingualSegment],
        latency: float,
        selection_mode: EngineSelectionMode = EngineSelectionMode.PRIMARY_FALLBACK,
        scene: TranslationScene | None = None,
    ) -> ResultBundle:
        return cls(
            results=[EngineResult(engine=engine, segments=segments, latency=latency)],
            primary_engine=engine,
            selection_mode=selection_mode,
            scene=scene,
        )

    @classmethod
    def failed(
        cls,
        engine: str,
        error: BaseException,
        selection_mode: EngineSelectionMode = EngineSelectionMode.PRIMARY_FALLBACK,
        scene: TranslationScene | None = None,
    ) -> ResultBundle:
        return cls(
            results=[EngineResult.failed(engine, error)],
            primary_engine=engine,
            selection_mode=selection_mode,
            scene=scene,
        )


@dataclass
class FlowResult:
    """Output of a completed capture-to-render run."""

    original_image: Any  # PIL.Image.Image
    rendered_image: Any  # PIL.Image.Image
    segments: list[BilingualSegment]
    processing_time: float  # seconds
    bundle: ResultBundle | None = None
