"""hotflow: a hotfix branch workflow on top of git."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from hotflow.cli.commands import hotfix_app, init
from hotflow.cli.helpers import err_console

__version__ = "0.1.0"

app = typer.Typer(
    name="hotflow",
    help="Hotfix branch workflow on top of git",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    debug: bool = typer.Option(False, "--debug", help="Log every git command"),
) -> None:
    """Configure logging before any command runs."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


app.add_typer(hotfix_app, name="hotfix")
app.command("init")(init)


def main():
    app()


if __name__ == "__main__":
    main()
