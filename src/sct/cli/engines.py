"""sct engines command — list configured translation engines."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.table import Table

from sct.core.config import load_config
from sct.utils.console import console


def engines(
    check: Annotated[
        bool,
        typer.Option("--check", help="Send a test request to each engine."),
    ] = False,
) -> None:
    """Show registered engines with their availability."""
    from sct.translation.registry import build_registry

    config = load_config()
    registry = build_registry(config)
    settings = config.translation

    async def _probe() -> tuple[list[str], dict[str, bool]]:
        available = await registry.available_engines()
        connected: dict[str, bool] = {}
        if check:
            results = await asyncio.gather(
                *(registry.check_connection(e) for e in registry.registered_engines())
            )
            connected = dict(zip(registry.registered_engines(), results))
        return available, connected

    available, connected = asyncio.run(_probe())

    table = Table(title=f"Translation Engines ({len(registry)})")
    table.add_column("Engine", style="bold cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Role")
    table.add_column("Available")
    if check:
        table.add_column("Connection")

    for engine in registry.registered_engines():
        provider = registry.get(engine)
        roles = []
        if engine == settings.default_engine:
            roles.append("default")
        if engine == settings.fallback_engine:
            roles.append("fallback")
        if engine == settings.local_engine:
            roles.append("local")
        row = [
            engine,
            provider.name,
            "local" if provider.local else "external",
            ", ".join(roles) or "-",
            "[green]yes[/green]" if engine in available else "[red]no[/red]",
        ]
        if check:
            row.append("[green]ok[/green]" if connected.get(engine) else "[red]failed[/red]")
        table.add_row(*row)

    console.print(table)
    disabled = [name for name, cfg in config.engines.items() if not cfg.enabled]
    if disabled:
        console.print(f"[dim]Disabled in config: {', '.join(disabled)}[/dim]")
