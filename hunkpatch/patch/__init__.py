"""Patch application for hunkpatch.

This package provides modular patch handling with:
- formats: PatchFormat, FileKind, NormalRangeKind, EditScriptHunkKind
- exceptions: PatchError, RangeError, HeaderError, PatchParseError,
              DestinationError, BackupError, UnsupportedOperationError
- range: Range
- range_data: NormalRangeData, EditScriptRangeData
- line: LineRole, PatchLine
- hunk: NormalHunkData, UnifiedHunkData, ContextHunkData, EditScriptHunkData, Hunk
- patch_file: PatchFile
- options: PatchOptions
- engine: Hunks
- parser: detect_format, parse_patch
"""

# Formats
from hunkpatch.patch.formats import (
    EditScriptHunkKind,
    FileKind,
    NormalRangeKind,
    PatchFormat,
)

# Exceptions
from hunkpatch.patch.exceptions import (
    BackupError,
    DestinationError,
    HeaderError,
    PatchError,
    PatchParseError,
    RangeError,
    UnsupportedOperationError,
)

# Ranges
from hunkpatch.patch.range import Range
from hunkpatch.patch.range_data import (
    EditScriptRangeData,
    NormalRangeData,
)

# Lines and hunks
from hunkpatch.patch.line import (
    LineRole,
    PatchLine,
)
from hunkpatch.patch.hunk import (
    ContextHunkData,
    EditScriptHunkData,
    Hunk,
    NormalHunkData,
    UnifiedHunkData,
)

# Files and options
from hunkpatch.patch.patch_file import PatchFile
from hunkpatch.patch.options import PatchOptions

# Engine
from hunkpatch.patch.engine import Hunks

# Parser
from hunkpatch.patch.parser import (
    detect_format,
    parse_patch,
)


__all__ = [
    # Formats
    "PatchFormat",
    "FileKind",
    "NormalRangeKind",
    "EditScriptHunkKind",
    # Exceptions
    "PatchError",
    "RangeError",
    "HeaderError",
    "PatchParseError",
    "DestinationError",
    "BackupError",
    "UnsupportedOperationError",
    # Ranges
    "Range",
    "NormalRangeData",
    "EditScriptRangeData",
    # Lines and hunks
    "LineRole",
    "PatchLine",
    "NormalHunkData",
    "UnifiedHunkData",
    "ContextHunkData",
    "EditScriptHunkData",
    "Hunk",
    # Files and options
    "PatchFile",
    "PatchOptions",
    # Engine
    "Hunks",
    # Parser
    "detect_format",
    "parse_patch",
]
