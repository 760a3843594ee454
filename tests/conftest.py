"""Shared test fixtures."""

import asyncio
from pathlib import Path

import pytest
from PIL import Image

from sct.core.config import SCTConfig, TranslationConfig
from sct.core.models import Rect, TextSegment
from sct.translation.provider import TranslationProvider
from sct.translation.registry import EngineRegistry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubProvider(TranslationProvider):
    """In-memory provider recording every batch it receives."""

    supports_batch = True

    def __init__(
        self,
        engine: str,
        translations: dict[str, str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        available: bool = True,
        local: bool = False,
        timeout: float | None = None,
    ):
        super().__init__(engine, local=local, timeout=timeout)
        self.translations = translations or {}
        self.error = error
        self.delay = delay
        self.available = available
        self.calls: list[list[str]] = []
        self.prompts: list[str | None] = []

    async def translate_text(self, text, source_language, target_language, prompt=None):
        (result,) = await self.translate_batch([text], source_language, target_language, prompt)
        return result

    async def translate_batch(self, texts, source_language, target_language, prompt=None):
        self.calls.append(list(texts))
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [self.translations.get(t, f"<{self.engine}> {t}") for t in texts]

    async def is_available(self):
        return self.available


class StubAnalyzer:
    def __init__(self, segments: list[TextSegment] | None = None, error: Exception | None = None):
        self.segments = segments or []
        self.error = error
        self.calls = 0

    async def analyze(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.segments)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def stub_provider():
    """Factory for StubProvider instances."""
    return StubProvider


@pytest.fixture
def stub_analyzer():
    return StubAnalyzer


@pytest.fixture
def config() -> SCTConfig:
    """Config with a primary/fallback pair and no engines or scenes from TOML."""
    return SCTConfig(
        translation=TranslationConfig(
            target_language="zh-Hans",
            default_engine="primary",
            fallback_engine="fallback",
            fallback_enabled=True,
            local_engine="primary",
            parallel_engines=["a", "b", "c"],
        )
    )


@pytest.fixture
def registry() -> EngineRegistry:
    return EngineRegistry()


@pytest.fixture
def hello_world_segments() -> list[TextSegment]:
    return [
        TextSegment(text="Hello", bounding_box=Rect(0.1, 0.1, 0.3, 0.1)),
        TextSegment(text="World", bounding_box=Rect(0.1, 0.5, 0.3, 0.1)),
    ]


@pytest.fixture
def white_image() -> Image.Image:
    return Image.new("RGB", (400, 200), (255, 255, 255))


@pytest.fixture
def dark_image() -> Image.Image:
    return Image.new("RGB", (400, 200), (20, 20, 30))


@pytest.fixture
def sample_segments_file(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_segments.json"
