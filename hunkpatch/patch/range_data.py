"""Decoded range headers of the normal and ed-script dialects.

Contains:
- NormalRangeData: A normal-format header such as ``2,3c4``
- EditScriptRangeData: An ed-script header such as ``4,6d``
"""

import re
from dataclasses import dataclass

from hunkpatch.patch.exceptions import RangeError
from hunkpatch.patch.formats import EditScriptHunkKind, NormalRangeKind
from hunkpatch.patch.range import Range


# Regex to match a normal-format header: left range, command letter, right range
NORMAL_RANGE_RE = re.compile(
    r"^(?P<left>\d+(?:,\d+)?)"       # left range (original file)
    r"(?P<kind>[acd])"                # command letter
    r"(?P<right>\d+(?:,\d+)?)$"      # right range (modified file)
)


@dataclass(frozen=True)
class NormalRangeData:
    """Range header of a normal-format hunk."""

    line: str
    left: Range
    right: Range
    kind: NormalRangeKind

    @classmethod
    def parse(cls, line: str) -> "NormalRangeData":
        """Decode a header such as ``5a6,7``, ``2,3c4`` or ``3d2``.

        Raises:
            RangeError: If the line is not a normal-format header.
        """
        match = NORMAL_RANGE_RE.match(line.strip())
        if not match:
            raise RangeError(f"Invalid normal hunk range: {line!r}")

        return cls(
            line=line,
            left=Range.from_normal(match.group("left")),
            right=Range.from_normal(match.group("right")),
            kind=NormalRangeKind(match.group("kind")),
        )


@dataclass(frozen=True)
class EditScriptRangeData:
    """Range header of an ed-script hunk.

    The kind comes from the trailing letter of the raw line, not from the
    range's own format tag.
    """

    line: str
    range: Range
    kind: EditScriptHunkKind

    @classmethod
    def parse(cls, line: str) -> "EditScriptRangeData":
        """Decode a header such as ``4,6d`` or ``10a``."""
        kind = Range.edit_script_kind(line)
        return cls(line=line, range=Range.from_edit_script(line), kind=kind)
