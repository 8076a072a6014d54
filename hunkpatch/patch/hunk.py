"""Hunks of the four diff dialects.

Contains:
- NormalHunkData: A normal-format hunk (``2,3c4`` plus ``<``/``---``/``>`` lines)
- UnifiedHunkData: A unified hunk (``@@ -a,b +c,d @@`` plus body)
- ContextHunkData: A context hunk split into original and modified sides
- EditScriptHunkData: An ed-script hunk (``4a`` plus text lines)
- Hunk: Wrapper holding exactly one of the four variants
"""

import re
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from hunkpatch.patch.exceptions import RangeError
from hunkpatch.patch.formats import EditScriptHunkKind, NormalRangeKind, PatchFormat
from hunkpatch.patch.line import LineRole, PatchLine
from hunkpatch.patch.range import Range
from hunkpatch.patch.range_data import EditScriptRangeData, NormalRangeData


# Regex to match @@ -a,b +c,d @@ with an optional section heading after it
UNIFIED_HEADER_RE = re.compile(r"^@@ (?P<f1>-\d+(?:,\d+)?) (?P<f2>\+\d+(?:,\d+)?) @@")

# Roles carrying file content (everything but headers, separators and markers)
_CONTEXT_CONTENT_ROLES = (
    LineRole.CONTEXT_INSERTED,
    LineRole.CONTEXT_DELETED,
    LineRole.CONTEXT_UNCHANGED,
)


def _check_format(patch_line: PatchLine, expected: PatchFormat) -> None:
    if patch_line.kind != expected:
        raise ValueError(
            f"Adding a {patch_line.kind.value} PatchLine to a {expected.value} hunk is not allowed!"
        )


@dataclass
class NormalHunkData:
    """A normal-format hunk, opened by its range header line."""

    kind: ClassVar[PatchFormat] = PatchFormat.NORMAL

    range_data: NormalRangeData
    lines: list[PatchLine] = field(default_factory=list)

    @property
    def range_left(self) -> Range:
        return self.range_data.left

    @property
    def range_right(self) -> Range:
        return self.range_data.right

    @property
    def range_kind(self) -> NormalRangeKind:
        return self.range_data.kind

    def add_patch_line(self, patch_line: PatchLine) -> None:
        _check_format(patch_line, self.kind)
        self.lines.append(patch_line)


@dataclass
class UnifiedHunkData:
    """A unified hunk. ``f1_range``/``f2_range`` hold start and line count."""

    kind: ClassVar[PatchFormat] = PatchFormat.UNIFIED

    f1_range: Range
    f2_range: Range
    lines: list[PatchLine] = field(default_factory=list)

    @staticmethod
    def parse_header(line: str) -> tuple[Range, Range]:
        """Decode ``@@ -a,b +c,d @@`` into the two file ranges.

        Raises:
            RangeError: If the line is not a unified hunk header.
        """
        match = UNIFIED_HEADER_RE.match(line)
        if not match:
            raise RangeError(f"Invalid unified hunk header: {line!r}")
        return Range.from_unified(match.group("f1")), Range.from_unified(match.group("f2"))

    def add_patch_line(self, patch_line: PatchLine) -> None:
        _check_format(patch_line, self.kind)
        self.lines.append(patch_line)


@dataclass
class ContextHunkData:
    """A context hunk.

    Lines up to the second range header (``--- c,d ----``) belong to the
    original side, the rest to the modified side. A side that lists no
    content lines is a placeholder: diff omits it when it holds no changes.
    """

    kind: ClassVar[PatchFormat] = PatchFormat.CONTEXT

    f1_range: Optional[Range] = None
    f2_range: Optional[Range] = None
    original_lines: list[PatchLine] = field(default_factory=list)
    modified_lines: list[PatchLine] = field(default_factory=list)

    @property
    def lines(self) -> list[PatchLine]:
        return self.original_lines + self.modified_lines

    def add_patch_line(self, patch_line: PatchLine) -> None:
        _check_format(patch_line, self.kind)

        if patch_line.role == LineRole.CONTEXT_RANGE:
            if self.f1_range is None:
                self.f1_range = Range.from_context(patch_line.line)
                self.original_lines.append(patch_line)
            elif self.f2_range is None:
                self.f2_range = Range.from_context(patch_line.line)
                self.modified_lines.append(patch_line)
            else:
                raise ValueError("A context hunk holds exactly two range lines!")
            return

        if self.f2_range is None:
            if patch_line.role == LineRole.CONTEXT_INSERTED:
                raise ValueError("Insertions belong to the modified side of a context hunk!")
            self.original_lines.append(patch_line)
        else:
            if patch_line.role == LineRole.CONTEXT_DELETED:
                raise ValueError("Deletions belong to the original side of a context hunk!")
            self.modified_lines.append(patch_line)

    def is_original_empty(self) -> bool:
        """True when the original side is only the placeholder range line."""
        return not any(line.role in _CONTEXT_CONTENT_ROLES for line in self.original_lines)

    def is_modified_empty(self) -> bool:
        """True when the modified side is only the placeholder range line."""
        return not any(line.role in _CONTEXT_CONTENT_ROLES for line in self.modified_lines)

    def effective_lines(self) -> list[PatchLine]:
        """The side that describes the whole hunk when the other is a placeholder."""
        if self.is_original_empty():
            return self.modified_lines
        return self.original_lines

    def change_by_index(self, index: int) -> PatchLine:
        """The ``index``-th changed (``!``) line on the modified side."""
        changes = [
            line
            for line in self.modified_lines
            if line.role == LineRole.CONTEXT_INSERTED and line.is_change
        ]
        return changes[index]

    def source_line_count(self, reverse: bool) -> int:
        """Number of lines the hunk covers in the file being read.

        Forward that is the original file, in reverse the modified one. A
        placeholder side covers exactly the context lines of the other side.
        """
        if reverse:
            own, other, own_empty = self.modified_lines, self.original_lines, self.is_modified_empty()
        else:
            own, other, own_empty = self.original_lines, self.modified_lines, self.is_original_empty()

        if own_empty:
            return sum(1 for line in other if line.role == LineRole.CONTEXT_UNCHANGED)
        return sum(1 for line in own if line.role in _CONTEXT_CONTENT_ROLES)


@dataclass
class EditScriptHunkData:
    """An ed-script hunk, opened by its range header line."""

    kind: ClassVar[PatchFormat] = PatchFormat.EDIT_SCRIPT

    range_data: EditScriptRangeData
    lines: list[PatchLine] = field(default_factory=list)

    @property
    def range(self) -> Range:
        return self.range_data.range

    @property
    def range_kind(self) -> EditScriptHunkKind:
        return self.range_data.kind

    def add_patch_line(self, patch_line: PatchLine) -> None:
        _check_format(patch_line, self.kind)
        self.lines.append(patch_line)


HunkData = Union[NormalHunkData, UnifiedHunkData, ContextHunkData, EditScriptHunkData]


@dataclass
class Hunk:
    """One hunk of any dialect."""

    data: HunkData

    @property
    def kind(self) -> PatchFormat:
        return self.data.kind

    @property
    def lines(self) -> list[PatchLine]:
        return self.data.lines

    def add_patch_line(self, patch_line: PatchLine) -> None:
        self.data.add_patch_line(patch_line)

    @classmethod
    def from_header(cls, patch_line: PatchLine) -> "Hunk":
        """Open a new hunk from the line that starts it.

        That line is a normal or ed-script range header, a unified ``@@``
        header, or the ``***************`` separator of a context hunk. It
        becomes the first line of the hunk.
        """
        if patch_line.role == LineRole.NORMAL_RANGE:
            hunk = cls(NormalHunkData(patch_line.normal_range))
        elif patch_line.role == LineRole.UNIFIED_HEADER:
            f1_range, f2_range = UnifiedHunkData.parse_header(patch_line.line)
            hunk = cls(UnifiedHunkData(f1_range, f2_range))
        elif patch_line.role == LineRole.CONTEXT_SEPARATOR:
            hunk = cls(ContextHunkData())
        elif patch_line.role == LineRole.EDIT_SCRIPT_RANGE:
            hunk = cls(EditScriptHunkData(patch_line.edit_script_range))
        else:
            raise ValueError(f"A hunk can not start with a {patch_line.role.value} line!")

        hunk.add_patch_line(patch_line)
        return hunk

    def normal_hunk_data(self) -> NormalHunkData:
        return self._expect(NormalHunkData)

    def unified_hunk_data(self) -> UnifiedHunkData:
        return self._expect(UnifiedHunkData)

    def context_hunk_data(self) -> ContextHunkData:
        return self._expect(ContextHunkData)

    def edit_script_hunk_data(self) -> EditScriptHunkData:
        return self._expect(EditScriptHunkData)

    def _expect(self, data_type):
        if not isinstance(self.data, data_type):
            raise ValueError(f"Expected a {data_type.kind.value} hunk, got {self.kind.value}!")
        return self.data
