"""sct translate command — run the full capture-to-render flow on an image."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from sct.core.config import load_config
from sct.core.models import EngineSelectionMode, TranslationScene
from sct.utils.console import console


def translate(
    image_file: Annotated[
        Path,
        typer.Argument(help="Captured image (PNG, JPEG, ...)."),
    ],
    segments: Annotated[
        Path,
        typer.Option("--segments", help="Analyzer output for the image (JSON)."),
    ],
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code (run 'sct languages' to list)."),
    ] = None,
    source: Annotated[
        Optional[str],
        typer.Option("--from", "-s", help="Source language code, or 'auto'."),
    ] = None,
    mode: Annotated[
        Optional[EngineSelectionMode],
        typer.Option("--mode", "-m", help="Engine selection mode."),
    ] = None,
    scene: Annotated[
        Optional[TranslationScene],
        typer.Option("--scene", help="Translation scene."),
    ] = None,
    engine: Annotated[
        Optional[str],
        typer.Option("--engine", "-e", help="Primary engine id (overrides config)."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output image path."),
    ] = None,
    max_width: Annotated[
        Optional[float],
        typer.Option("--max-width", help="Wrap width in pixels for translated text."),
    ] = None,
    min_confidence: Annotated[
        float,
        typer.Option("--min-confidence", help="Drop analyzer segments below this confidence."),
    ] = 0.0,
) -> None:
    """Translate the text in an image and save it with a bilingual overlay."""
    from PIL import Image

    from sct.analysis.analyzer import SegmentFileAnalyzer
    from sct.cli.presenter import ConsolePresenter, print_event
    from sct.core.flow import FlowController
    from sct.core.languages import validate_language
    from sct.render.overlay import OverlayRenderer
    from sct.translation.registry import build_registry
    from sct.translation.selector import EngineSelector

    try:
        if to is not None:
            validate_language(to)
        if source is not None:
            validate_language(source, allow_auto=True)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    for path in (image_file, segments):
        if not path.is_file():
            console.print(f"[red]File not found:[/red] {path}")
            raise typer.Exit(1)

    config = load_config(
        **{
            "translation.target_language": to,
            "translation.source_language": source,
            "translation.mode": mode.value if mode else None,
            "translation.scene": scene.value if scene else None,
        }
    )

    with Image.open(image_file) as img:
        img.load()
        image = img.copy()

    controller = FlowController(
        analyzer=SegmentFileAnalyzer(segments, min_confidence=min_confidence),
        selector=EngineSelector(build_registry(config), config),
        renderer=OverlayRenderer(config.render),
        config=config,
        presenter=ConsolePresenter(),
        on_event=print_event,
    )

    result = asyncio.run(controller.run(image, engine=engine, max_width=max_width))
    if result is None:
        raise typer.Exit(1)

    out_path = output or image_file.with_suffix(".translated.png")
    result.rendered_image.save(out_path)
    console.print(f"[green]Saved:[/green] {out_path}")
