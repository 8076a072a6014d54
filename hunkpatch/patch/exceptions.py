"""Patch-related exception classes.

Contains all user-facing exception classes for patch operations:
- PatchError: Base exception for patch errors
- RangeError: Raised when range text cannot be decoded
- HeaderError: Raised when a file header lacks a path or date
- PatchParseError: Raised when diff text is malformed
- DestinationError: Raised when no source/destination file can be determined
- BackupError: Raised when a backup cannot be taken
- UnsupportedOperationError: Raised for format/option combinations that cannot be applied

I/O failures are not wrapped and propagate as OSError.
"""

from typing import Optional


class PatchError(Exception):
    """Custom exception for patch-related errors."""

    pass


class RangeError(PatchError):
    """Raised when a line range could not be decoded."""

    pass


class HeaderError(PatchError):
    """Raised when a context/unified file header has no path or date."""

    pass


class PatchParseError(PatchError):
    """Raised when diff text cannot be parsed into hunks."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class DestinationError(PatchError):
    """Raised when the file to patch cannot be determined."""

    pass


class BackupError(PatchError):
    """Raised when a backup of the file to patch cannot be taken."""

    pass


class UnsupportedOperationError(PatchError):
    """Raised when options request something a format cannot do."""

    pass
