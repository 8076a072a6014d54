"""CLI commands for configuration management."""

import typer

from hunkpatch import config as hunkpatch_config

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage hunkpatch option defaults in ~/.hunkpatch/",
    add_completion=False,
)


@config_app.command("show")
def config_show() -> None:
    """Show the option defaults in effect."""
    try:
        config = hunkpatch_config.load_config()
    except hunkpatch_config.ConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"hunkpatch configuration ({hunkpatch_config.get_config_file_path()}):")
    typer.echo()
    for key, value in config.items():
        if value is None:
            value = "detect" if key == "format" else "not set"
        typer.echo(f"  {key}: {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Option name (backup, reverse, format, verbose)"),
    value: str = typer.Argument(..., help="New default (true/false, or a format name)"),
) -> None:
    """Set the default for one option."""
    try:
        coerced = hunkpatch_config.coerce_value(key, value)
        hunkpatch_config.set_default(key, coerced)
    except hunkpatch_config.ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ {key} set to {coerced}")
