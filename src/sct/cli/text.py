"""sct text command — translate a string with scene-bound engines."""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import typer

from sct.core.config import load_config
from sct.core.models import TranslationScene
from sct.utils.console import console


def text(
    content: Annotated[
        str,
        typer.Argument(help="Text to translate."),
    ],
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code (run 'sct languages' to list)."),
    ] = None,
    source: Annotated[
        Optional[str],
        typer.Option("--from", "-s", help="Source language code, or 'auto'."),
    ] = None,
    scene: Annotated[
        TranslationScene,
        typer.Option("--scene", help="Scene whose engine binding is used."),
    ] = TranslationScene.TEXT_SELECTION,
    plain: Annotated[
        bool,
        typer.Option("--plain", help="Print only the translation."),
    ] = False,
) -> None:
    """Translate a piece of selected text."""
    from sct.cli.presenter import bundle_table
    from sct.core.errors import FlowError
    from sct.core.languages import validate_language
    from sct.core.text_flow import TextTranslationFlow
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

    config = load_config(
        **{"translation.target_language": to, "translation.source_language": source}
    )
    flow = TextTranslationFlow(EngineSelector(build_registry(config), config), config)

    try:
        result = asyncio.run(flow.translate(content, scene=scene))
    except FlowError as e:
        console.print(f"[red]{e.description}[/red]")
        if e.bundle is not None and e.bundle.results:
            console.print(bundle_table(e.bundle))
        if e.recovery_suggestion:
            console.print(f"[dim]{e.recovery_suggestion}[/dim]")
        raise typer.Exit(1)

    if plain:
        typer.echo(result.translated_text)
        return
    console.print(f"[bold]{result.translated_text}[/bold]")
    console.print(f"[dim]via {result.engine} ({result.bundle.average_latency:.2f}s)[/dim]")
