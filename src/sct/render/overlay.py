"""Overlay renderer — draws translated text over the original text's position.

Per segment: map the normalized box to pixels, estimate the local background
from pixels just outside the box, pick black or white text by luminance, size
the font from the box height, wrap and measure the translation, then fill an
expanded rectangle and draw the text into it.
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from sct.core.config import RenderConfig
from sct.core.models import BilingualSegment, Rect

RGB = tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)


def to_pixel_box(box: Rect, size: tuple[int, int]) -> Rect:
    """Normalized (0..1, top-left origin) box to pixel coordinates."""
    return box.to_pixels(size[0], size[1])


def to_normalized_box(box: Rect, size: tuple[int, int]) -> Rect:
    return box.to_normalized(size[0], size[1])


def luminance(color: RGB) -> float:
    """Perceived luminance, 0.299R + 0.587G + 0.114B on channels normalized to 0..1."""
    r, g, b = (c / 255.0 for c in color[:3])
    return 0.299 * r + 0.587 * g + 0.114 * b


def contrasting_color(background: RGB) -> RGB:
    """White text on dark backgrounds (L <= 0.5), black text otherwise."""
    return WHITE if luminance(background) <= 0.5 else BLACK


def hit_test(
    point: tuple[float, float],
    pixel_boxes: list[Rect],
    margin_x: float = 20.0,
    margin_y: float = 10.0,
) -> bool:
    """Whether a point falls inside any box grown by the margins.

    Used by overlay hosts to decide if a click is absorbed by a rendered
    segment or dismisses the overlay.
    """
    px, py = point
    return any(box.expanded(margin_x, margin_y).contains(px, py) for box in pixel_boxes)


@dataclass
class OverlayBlock:
    """Layout of one segment on the rendered bitmap."""

    segment: BilingualSegment
    pixel_box: Rect
    fill_rect: Rect
    text_origin: tuple[float, float]
    lines: list[str]
    font_size: float
    background: RGB
    foreground: RGB
    centered: bool = False

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class OverlayRenderer:
    """Composites bilingual segments onto a copy of the source bitmap."""

    def __init__(self, config: RenderConfig | None = None):
        self.config = config or RenderConfig()
        self._fonts: dict[int, ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}

    def font_size(self, box_height: float) -> float:
        """Scale with the original glyph height, clamped to a readable range."""
        size = box_height * self.config.font_scale
        return max(self.config.min_font_size, min(self.config.max_font_size, size))

    def font(self, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        px = max(1, round(size))
        if px not in self._fonts:
            if self.config.font_path:
                self._fonts[px] = ImageFont.truetype(self.config.font_path, px)
            else:
                self._fonts[px] = ImageFont.load_default(size=px)
        return self._fonts[px]

    def sample_background(self, image: Image.Image, pixel_box: Rect) -> RGB | None:
        """Average the pixels just outside the box's left, right, top and bottom edges.

        Returns None when the image has no readable pixel data.
        """
        width, height = image.size
        if width == 0 or height == 0:
            return None
        try:
            rgb = image if image.mode == "RGB" else image.convert("RGB")
        except (OSError, ValueError):
            return None

        offset = self.config.sample_offset
        points = [
            (pixel_box.min_x - offset, pixel_box.mid_y),
            (pixel_box.max_x + offset, pixel_box.mid_y),
            (pixel_box.mid_x, pixel_box.min_y - offset),
            (pixel_box.mid_x, pixel_box.max_y + offset),
        ]

        samples = []
        for x, y in points:
            cx = int(min(max(x, 0), width - 1))
            cy = int(min(max(y, 0), height - 1))
            samples.append(rgb.getpixel((cx, cy)))

        count = len(samples)
        return (
            round(sum(s[0] for s in samples) / count),
            round(sum(s[1] for s in samples) / count),
            round(sum(s[2] for s in samples) / count),
        )

    def wrap_text(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
        max_width: float,
    ) -> list[str]:
        """Greedy wrap: by words when the text has spaces, by characters otherwise (CJK)."""
        lines: list[str] = []
        for paragraph in text.splitlines() or [""]:
            tokens = paragraph.split(" ") if " " in paragraph else list(paragraph)
            joiner = " " if " " in paragraph else ""
            current = ""
            for token in tokens:
                candidate = f"{current}{joiner}{token}" if current else token
                if draw.textlength(candidate, font=font) <= max_width or not current:
                    current = candidate
                else:
                    lines.append(current)
                    current = token
                # A single token wider than the line is broken by characters
                while draw.textlength(current, font=font) > max_width and len(current) > 1:
                    cut = len(current) - 1
                    while cut > 1 and draw.textlength(current[:cut], font=font) > max_width:
                        cut -= 1
                    lines.append(current[:cut])
                    current = current[cut:]
            lines.append(current)
        return lines

    def _is_centered(self, pixel_box: Rect, image_width: int) -> bool:
        if image_width == 0:
            return False
        return abs(pixel_box.mid_x / image_width - 0.5) <= self.config.center_tolerance

    def layout(
        self,
        image: Image.Image,
        segments: list[BilingualSegment],
        max_width: float | None = None,
    ) -> list[OverlayBlock]:
        """Compute where and how each segment will be drawn."""
        cfg = self.config
        width, height = image.size
        measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        blocks = []

        for segment in segments:
            box = to_pixel_box(segment.bounding_box, image.size)
            background = self.sample_background(image, box) or tuple(cfg.fallback_background)
            foreground = contrasting_color(background)
            size = self.font_size(box.height)
            font = self.font(size)

            wrap_width = max(box.width, max_width if max_width is not None else cfg.min_wrap_width)
            wrap_width = min(wrap_width, max(box.width, width - 2 * cfg.padding_x))
            lines = self.wrap_text(measure, segment.translated_text, font, max(wrap_width, 1))

            left, top, right, bottom = measure.multiline_textbbox(
                (0, 0), "\n".join(lines), font=font, spacing=cfg.line_spacing
            )
            text_w, text_h = right - left, bottom - top

            fill_w = max(box.width, text_w + 2 * cfg.padding_x)
            fill_h = max(box.height, text_h + 2 * cfg.padding_y)
            centered = self._is_centered(box, width)
            x = box.mid_x - fill_w / 2 if centered else box.x
            y = box.y
            # Keep the fill inside the bitmap
            x = min(max(x, 0), max(width - fill_w, 0))
            y = min(max(y, 0), max(height - fill_h, 0))
            fill = Rect(x, y, fill_w, fill_h)

            if centered:
                text_x = fill.x + (fill_w - text_w) / 2 - left
            else:
                text_x = fill.x + cfg.padding_x - left
            text_y = fill.y + (fill_h - text_h) / 2 - top

            blocks.append(
                OverlayBlock(
                    segment=segment,
                    pixel_box=box,
                    fill_rect=fill,
                    text_origin=(text_x, text_y),
                    lines=lines,
                    font_size=size,
                    background=background,
                    foreground=foreground,
                    centered=centered,
                )
            )
        return blocks

    def render(
        self,
        image: Image.Image,
        segments: list[BilingualSegment],
        max_width: float | None = None,
    ) -> Image.Image:
        """Return a new bitmap of the same size with translations drawn in.

        With no segments the source bitmap is returned unmodified.
        """
        if not segments:
            return image

        blocks = self.layout(image, segments, max_width=max_width)
        canvas = image.copy() if image.mode in ("RGB", "RGBA") else image.convert("RGBA")
        draw = ImageDraw.Draw(canvas)

        for block in blocks:
            fill = block.fill_rect
            draw.rectangle(
                [fill.min_x, fill.min_y, fill.max_x, fill.max_y],
                fill=block.background,
            )
            draw.multiline_text(
                block.text_origin,
                block.text,
                fill=block.foreground,
                font=self.font(block.font_size),
                spacing=self.config.line_spacing,
                align="center" if block.centered else "left",
            )
        return canvas

    def hit_test(
        self,
        point: tuple[float, float],
        image_size: tuple[int, int],
        segments: list[BilingualSegment],
    ) -> bool:
        boxes = [to_pixel_box(seg.bounding_box, image_size) for seg in segments]
        return hit_test(point, boxes, self.config.hit_margin_x, self.config.hit_margin_y)
