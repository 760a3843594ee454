"""Rich console presenter for flow results and errors."""

from __future__ import annotations

from PIL import Image
from rich.table import Table

from sct.core.errors import FlowError
from sct.core.events import FlowEvent
from sct.core.models import FlowResult, ResultBundle
from sct.utils.console import console


def print_event(event: FlowEvent) -> None:
    """Flow event callback: one dim status line per phase."""
    console.print(f"[dim]{event.progress:4.0%} {event.message}[/dim]")


def bundle_table(bundle: ResultBundle) -> Table:
    table = Table(title="Engines")
    table.add_column("Engine", style="bold cyan")
    table.add_column("Status")
    table.add_column("Latency", justify="right")
    table.add_column("Detail", overflow="fold")

    for result in bundle.results:
        primary = " (primary)" if result.engine == bundle.primary_engine else ""
        if result.is_success:
            status = "[green]ok[/green]"
            detail = f"{len(result.segments)} segments"
        else:
            status = "[red]failed[/red]"
            detail = str(result.error) if result.error else "no output"
        table.add_row(f"{result.engine}{primary}", status, f"{result.latency:.2f}s", detail)
    return table


class ConsolePresenter:
    """Shows loading, results and errors on the terminal."""

    def __init__(self, show_engines: bool = True):
        self.show_engines = show_engines

    def show_loading(self, image: Image.Image) -> None:
        width, height = image.size
        console.print(f"[bold]Translating capture:[/bold] {width}x{height}")

    def show_result(self, result: FlowResult) -> None:
        table = Table(title=f"Segments ({len(result.segments)})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Original", overflow="fold")
        table.add_column("Translation", overflow="fold", style="bold")
        for i, segment in enumerate(result.segments, 1):
            table.add_row(str(i), segment.source_text, segment.translated_text)
        console.print(table)

        if self.show_engines and result.bundle is not None and result.bundle.results:
            console.print(bundle_table(result.bundle))
        console.print(f"[green]Done[/green] in {result.processing_time:.2f}s")

    def show_error(self, error: FlowError) -> None:
        console.print(f"[red]{error.description}[/red]")
        if error.bundle is not None and error.bundle.results:
            console.print(bundle_table(error.bundle))
        if error.recovery_suggestion:
            console.print(f"[dim]{error.recovery_suggestion}[/dim]")
