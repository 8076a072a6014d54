"""CLI command for applying a diff."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from hunkpatch import config as hunkpatch_config
from hunkpatch.patch import PatchError, PatchOptions, parse_patch
from hunkpatch.patch.engine import backup_path_for
from hunkpatch.patch.patch_file import TEXT_ERRORS


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_patch(patch: Path) -> str:
    """Read the diff, keeping carriage returns as part of the lines."""
    if str(patch) == "-":
        return sys.stdin.buffer.read().decode("utf-8", errors=TEXT_ERRORS)
    with open(patch, "r", encoding="utf-8", errors=TEXT_ERRORS, newline="") as f:
        return f.read()


def apply_command(
    patch: Path = typer.Argument(
        ...,
        help="Diff to apply ('-' reads standard input)",
    ),
    file: Optional[Path] = typer.Argument(
        None,
        help="File to patch (required for normal and ed diffs)",
    ),
    reverse: Optional[bool] = typer.Option(
        None,
        "--reverse/--forward",
        "-R",
        help="Undo the diff: recover the original from the modified file",
    ),
    backup: Optional[bool] = typer.Option(
        None,
        "--backup/--no-backup",
        "-b",
        help="Keep a copy of the file as <name>.orig before patching",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the result here instead of over the patched file",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Never ask questions; overwrite existing backups",
    ),
    patch_format: Optional[str] = typer.Option(
        None,
        "--format",
        help="Diff format (normal, unified, context, ed); detected when omitted",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log what is being done",
    ),
) -> None:
    """Apply a diff to a file."""
    try:
        config = hunkpatch_config.load_config()
        format_ = hunkpatch_config.resolve_format(patch_format or config["format"])
    except hunkpatch_config.ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _configure_logging(verbose or config["verbose"])

    options = PatchOptions(
        reverse=config["reverse"] if reverse is None else reverse,
        backup=config["backup"] if backup is None else backup,
        force=force,
        interactive=not force,
        file=file,
        output_file=output,
    )

    try:
        text = _read_patch(patch)
        hunks = parse_patch(text, options, format_)

        hunks.check_supported()

        # Prompting is ours, not the engine's
        if options.backup and options.interactive:
            backup_path = backup_path_for(hunks.resolve_source_path())
            if backup_path.exists() and not typer.confirm(
                f"Backup {backup_path} already exists. Overwrite?", default=False
            ):
                typer.echo("Patch not applied.", err=True)
                raise typer.Exit(1)

        written = hunks.apply()
    except PatchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except (OSError, UnicodeError) as e:
        typer.echo(f"I/O error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"patching file {written}")
