from typing import Optional

import typer

from treesync.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import treesync

        typer.echo(f"treesync version: {treesync.__version__}")
        raise typer.Exit()


app = typer.Typer(name="treesync")


@app.callback()
def app_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to stderr.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """treesync - mirror a source directory tree onto a destination tree."""
    if verbose:  # pragma: no cover
        setup_logging(console=True, level="DEBUG")
