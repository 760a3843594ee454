"""sct languages command — list supported translation languages."""

from __future__ import annotations

from rich.table import Table

from sct.core.languages import TRANSLATION_LANGUAGES
from sct.utils.console import console


def languages() -> None:
    """List the language codes accepted by --to and --from."""
    table = Table(title=f"Supported Languages ({len(TRANSLATION_LANGUAGES)})")
    table.add_column("Code", style="bold cyan", width=8)
    table.add_column("Language", width=24)

    for code in sorted(TRANSLATION_LANGUAGES):
        table.add_row(code, TRANSLATION_LANGUAGES[code].title())

    console.print(table)
    console.print("\n[dim]Use 'auto' as the source language to let the engine detect it.[/dim]")
