"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from mdsite.cli.commands import build_cmd, init_cmd, list_cmd, related_cmd, search_cmd, terms_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown static site builder")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show per-document progress")] = False,
    ):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="search")(search_cmd)
app.command(name="terms")(terms_cmd)
app.command(name="related")(related_cmd)
app.command(name="init")(init_cmd)
