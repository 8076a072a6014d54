"""Format and role tags shared by the patch modules.

Contains:
- PatchFormat: The four diff dialects plus the NONE sentinel
- FileKind: Role of a loaded file (original or modified side)
- NormalRangeKind: Insert/change/delete kind of a normal-format header
- EditScriptHunkKind: Insert/change/delete kind of an ed-script header
"""

from enum import Enum


class PatchFormat(str, Enum):
    """Diff dialect of a range, line, hunk or hunk collection."""

    NONE = "none"
    NORMAL = "normal"
    UNIFIED = "unified"
    CONTEXT = "context"
    EDIT_SCRIPT = "ed"


class FileKind(str, Enum):
    """Which side of a diff a loaded file represents."""

    ORIGINAL = "original"
    MODIFIED = "modified"


class NormalRangeKind(str, Enum):
    """Command letter of a normal-format range header."""

    INSERT = "a"
    CHANGE = "c"
    DELETE = "d"


class EditScriptHunkKind(str, Enum):
    """Command letter of an ed-script range header."""

    INSERT = "a"
    CHANGE = "c"
    DELETE = "d"
