"""Parsed diff lines.

Contains:
- LineRole: Every role a diff line can play, grouped by dialect
- PatchLine: One parsed line of a hunk with its role and raw text
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hunkpatch.patch.formats import PatchFormat
from hunkpatch.patch.range_data import EditScriptRangeData, NormalRangeData


NO_NEWLINE_MARKER = "\\ No newline at end of file"


class LineRole(str, Enum):
    """Role of a diff line. NO_NEWLINE is shared by all dialects."""

    # Normal
    NORMAL_RANGE = "normal_range"
    NORMAL_SEPARATOR = "normal_separator"
    NORMAL_INSERT = "normal_insert"
    NORMAL_DELETE = "normal_delete"
    # Unified
    UNIFIED_HEADER = "unified_header"
    UNIFIED_DELETED = "unified_deleted"
    UNIFIED_UNCHANGED = "unified_unchanged"
    UNIFIED_INSERTED = "unified_inserted"
    # Context
    CONTEXT_RANGE = "context_range"
    CONTEXT_SEPARATOR = "context_separator"
    CONTEXT_INSERTED = "context_inserted"
    CONTEXT_DELETED = "context_deleted"
    CONTEXT_UNCHANGED = "context_unchanged"
    # Ed script
    EDIT_SCRIPT_RANGE = "edit_script_range"
    EDIT_SCRIPT_INSERT = "edit_script_insert"
    EDIT_SCRIPT_CHANGE = "edit_script_change"
    # Shared
    NO_NEWLINE = "no_newline"


_ROLE_FORMATS = {
    LineRole.NORMAL_RANGE: PatchFormat.NORMAL,
    LineRole.NORMAL_SEPARATOR: PatchFormat.NORMAL,
    LineRole.NORMAL_INSERT: PatchFormat.NORMAL,
    LineRole.NORMAL_DELETE: PatchFormat.NORMAL,
    LineRole.UNIFIED_HEADER: PatchFormat.UNIFIED,
    LineRole.UNIFIED_DELETED: PatchFormat.UNIFIED,
    LineRole.UNIFIED_UNCHANGED: PatchFormat.UNIFIED,
    LineRole.UNIFIED_INSERTED: PatchFormat.UNIFIED,
    LineRole.CONTEXT_RANGE: PatchFormat.CONTEXT,
    LineRole.CONTEXT_SEPARATOR: PatchFormat.CONTEXT,
    LineRole.CONTEXT_INSERTED: PatchFormat.CONTEXT,
    LineRole.CONTEXT_DELETED: PatchFormat.CONTEXT,
    LineRole.CONTEXT_UNCHANGED: PatchFormat.CONTEXT,
    LineRole.EDIT_SCRIPT_RANGE: PatchFormat.EDIT_SCRIPT,
    LineRole.EDIT_SCRIPT_INSERT: PatchFormat.EDIT_SCRIPT,
    LineRole.EDIT_SCRIPT_CHANGE: PatchFormat.EDIT_SCRIPT,
}

# Width of the prefix in front of file text ("> ", "+", "! ", ...)
_PREFIX_WIDTH = {
    LineRole.NORMAL_INSERT: 2,
    LineRole.NORMAL_DELETE: 2,
    LineRole.UNIFIED_DELETED: 1,
    LineRole.UNIFIED_UNCHANGED: 1,
    LineRole.UNIFIED_INSERTED: 1,
    LineRole.CONTEXT_INSERTED: 2,
    LineRole.CONTEXT_DELETED: 2,
    LineRole.CONTEXT_UNCHANGED: 2,
}


@dataclass(frozen=True)
class PatchLine:
    """One line of a hunk.

    ``line`` is the raw diff line; ``original_line`` is the file text it
    carries. ``format`` may be left as NONE for dialect-specific roles and is
    filled in from the role; NO_NEWLINE needs it spelled out.
    """

    role: LineRole
    line: str
    format: PatchFormat = PatchFormat.NONE
    is_change: bool = False
    normal_range: Optional[NormalRangeData] = None
    edit_script_range: Optional[EditScriptRangeData] = None

    def __post_init__(self) -> None:
        expected = _ROLE_FORMATS.get(self.role)

        if expected is None:
            if self.format == PatchFormat.NONE:
                raise ValueError("A no-newline marker needs a concrete format.")
        elif self.format == PatchFormat.NONE:
            object.__setattr__(self, "format", expected)
        elif self.format != expected:
            raise ValueError(
                f"PatchLine role {self.role.value} does not belong to the {self.format.value} format!"
            )

        if self.is_change and self.role not in (
            LineRole.CONTEXT_INSERTED,
            LineRole.CONTEXT_DELETED,
        ):
            raise ValueError("Only context insertions/deletions can be changes.")
        if self.role == LineRole.NORMAL_RANGE and self.normal_range is None:
            raise ValueError("A normal range line needs its decoded range.")
        if self.role == LineRole.EDIT_SCRIPT_RANGE and self.edit_script_range is None:
            raise ValueError("An ed range line needs its decoded range.")

    @property
    def kind(self) -> PatchFormat:
        """Format tag of the line."""
        return self.format

    @property
    def original_line(self) -> str:
        """File text carried by the line, without the dialect prefix."""
        width = _PREFIX_WIDTH.get(self.role, 0)
        return self.line[width:]

    @property
    def is_structural(self) -> bool:
        """True for headers and separators, which never produce output."""
        return self.role in (
            LineRole.NORMAL_RANGE,
            LineRole.NORMAL_SEPARATOR,
            LineRole.UNIFIED_HEADER,
            LineRole.CONTEXT_RANGE,
            LineRole.CONTEXT_SEPARATOR,
            LineRole.EDIT_SCRIPT_RANGE,
        )

    @classmethod
    def normal_range_header(cls, line: str) -> "PatchLine":
        """Build a normal range line, decoding ``line`` (RangeError on failure)."""
        return cls(LineRole.NORMAL_RANGE, line, normal_range=NormalRangeData.parse(line))

    @classmethod
    def edit_script_range_header(cls, line: str) -> "PatchLine":
        """Build an ed-script range line, decoding ``line`` (RangeError on failure)."""
        return cls(
            LineRole.EDIT_SCRIPT_RANGE, line, edit_script_range=EditScriptRangeData.parse(line)
        )

    @classmethod
    def no_newline(cls, format: PatchFormat, line: str = NO_NEWLINE_MARKER) -> "PatchLine":
        """Build a no-newline marker for a collection of the given format."""
        return cls(LineRole.NO_NEWLINE, line, format=format)
