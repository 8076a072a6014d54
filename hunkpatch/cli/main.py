"""Main CLI callback: version flag and help when no command is given."""

import typer

from hunkpatch import __version__


def main_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the hunkpatch version and exit",
    ),
) -> None:
    """Apply diffs to text files."""
    if version:
        typer.echo(f"hunkpatch {__version__}")
        raise typer.Exit(0)

    # If a subcommand is invoked, it does the work
    if ctx.invoked_subcommand is not None:
        return

    typer.echo(ctx.get_help())
