"""Image analyzer contract and a segment-file adapter.

Text recognition itself is done outside this package. An analyzer only has to
turn a captured image into ordered TextSegments with normalized boxes.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Protocol

from PIL import Image

from sct.core.models import Rect, TextSegment
from sct.utils.console import console


class Analyzer(Protocol):
    async def analyze(self, image: Image.Image) -> list[TextSegment]: ...


def _parse_box(raw: object) -> Rect:
    if isinstance(raw, dict):
        return Rect(
            float(raw["x"]), float(raw["y"]), float(raw["width"]), float(raw["height"])
        )
    if isinstance(raw, (list, tuple)) and len(raw) == 4:
        x, y, w, h = (float(v) for v in raw)
        return Rect(x, y, w, h)
    raise ValueError(f"Invalid box: {raw!r}")


def parse_segments(
    data: dict, image_size: tuple[int, int], min_confidence: float = 0.0
) -> list[TextSegment]:
    """Build TextSegments from analyzer JSON output.

    Expected shape::

        {"coordinates": "normalized" | "pixels",
         "segments": [{"text": "...", "box": [x, y, w, h], "confidence": 0.98}]}

    Pixel boxes are normalized against ``image_size``. Blank texts and
    segments below ``min_confidence`` are dropped; order is preserved.
    """
    coordinates = data.get("coordinates", "normalized")
    if coordinates not in ("normalized", "pixels"):
        raise ValueError(f"Unknown coordinate space: {coordinates!r}")

    segments = []
    for item in data.get("segments", []):
        text = str(item.get("text", "")).strip()
        if not text:
            continue
        confidence = float(item.get("confidence", 1.0))
        if confidence < min_confidence:
            continue
        box = _parse_box(item.get("box"))
        if coordinates == "pixels":
            box = box.to_normalized(*image_size)
        segments.append(TextSegment(text=text, bounding_box=box, confidence=confidence))
    return segments


class SegmentFileAnalyzer:
    """Reads pre-computed analyzer output from a JSON sidecar file."""

    def __init__(self, path: Path, min_confidence: float = 0.0):
        self.path = Path(path)
        self.min_confidence = min_confidence

    async def analyze(self, image: Image.Image) -> list[TextSegment]:
        if not self.path.is_file():
            raise FileNotFoundError(f"Segment file not found: {self.path}")

        raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid segment file {self.path.name}: {e}") from e
        if isinstance(data, list):
            data = {"segments": data}

        segments = parse_segments(data, image.size, self.min_confidence)
        console.print(f"[dim]Loaded {len(segments)} segments from {self.path.name}[/dim]")
        return segments
