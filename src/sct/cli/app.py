"""screen-translate CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from sct import __version__
from sct.cli.engines import engines
from sct.cli.languages import languages
from sct.cli.text import text
from sct.cli.translate import translate

app = typer.Typer(
    name="sct",
    help="screen-translate — Translate text in screenshots and render bilingual overlays.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sct {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """screen-translate — Translate text in screenshots and render bilingual overlays."""
    # API keys (OPENAI_API_KEY, DEEPL_API_KEY, ...) may live in a .env file;
    # shell exports take precedence
    load_dotenv(override=False)


app.command("translate")(translate)
app.command("text")(text)
app.command("engines")(engines)
app.command("languages")(languages)
