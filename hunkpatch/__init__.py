"""Apply normal, unified, context and ed-script diffs to text files."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("hunkpatch")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
