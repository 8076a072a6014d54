"""CLI entry point for hunkpatch.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from hunkpatch.cli.apply import apply_command
from hunkpatch.cli.config import config_app
from hunkpatch.cli.main import main_command

# Main application
app = typer.Typer(
    name="hunkpatch",
    help="hunkpatch: apply normal, unified, context and ed diffs",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("apply")(apply_command)

# Set the main callback (includes --version flag)
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "apply_command",
    "config_app",
    "main_command",
]
