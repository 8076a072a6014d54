"""Tests for hunkpatch.patch.hunk module."""

import pytest

from hunkpatch.patch import (
    ContextHunkData,
    Hunk,
    LineRole,
    NormalRangeKind,
    PatchFormat,
    PatchLine,
    RangeError,
)


def context_hunk(*lines: tuple) -> Hunk:
    """Build a context hunk from (role, raw[, is_change]) tuples after the separator."""
    hunk = Hunk.from_header(PatchLine(LineRole.CONTEXT_SEPARATOR, "***************"))
    for entry in lines:
        role, raw, *rest = entry
        hunk.add_patch_line(PatchLine(role, raw, is_change=bool(rest and rest[0])))
    return hunk


class TestHunkFromHeader:
    """Tests for Hunk.from_header."""

    def test_normal(self):
        """Test opening a normal hunk from its range header."""
        hunk = Hunk.from_header(PatchLine.normal_range_header("2,3c4"))
        data = hunk.normal_hunk_data()
        assert hunk.kind == PatchFormat.NORMAL
        assert data.range_kind == NormalRangeKind.CHANGE
        assert data.range_left.start == 2
        assert data.range_right.start == 4
        assert len(hunk.lines) == 1

    def test_unified(self):
        """Test opening a unified hunk decodes both ranges."""
        hunk = Hunk.from_header(PatchLine(LineRole.UNIFIED_HEADER, "@@ -3,4 +3,5 @@ def f():"))
        data = hunk.unified_hunk_data()
        assert (data.f1_range.start, data.f1_range.count) == (3, 4)
        assert (data.f2_range.start, data.f2_range.end) == (3, 8)

    def test_unified_bad_header(self):
        """Test a malformed unified header raises RangeError."""
        with pytest.raises(RangeError):
            Hunk.from_header(PatchLine(LineRole.UNIFIED_HEADER, "@@ -x +1 @@"))

    def test_edit_script(self):
        """Test opening an ed hunk."""
        hunk = Hunk.from_header(PatchLine.edit_script_range_header("5a"))
        assert hunk.edit_script_hunk_data().range.start == 5

    def test_content_line_cannot_open_hunk(self):
        """Test that a content line cannot start a hunk."""
        with pytest.raises(ValueError):
            Hunk.from_header(PatchLine(LineRole.UNIFIED_INSERTED, "+x"))


class TestHunkAccessors:
    """Tests for format checks on hunks."""

    def test_wrong_accessor(self):
        """Test asking for another variant's data fails."""
        hunk = Hunk.from_header(PatchLine.normal_range_header("1d0"))
        with pytest.raises(ValueError):
            hunk.unified_hunk_data()

    def test_foreign_line_rejected(self):
        """Test appending another dialect's line fails."""
        hunk = Hunk.from_header(PatchLine.normal_range_header("1d0"))
        with pytest.raises(ValueError):
            hunk.add_patch_line(PatchLine(LineRole.UNIFIED_DELETED, "-x"))

    def test_lines_keep_order(self):
        """Test lines stay in diff order."""
        hunk = Hunk.from_header(PatchLine.normal_range_header("1c1"))
        hunk.add_patch_line(PatchLine(LineRole.NORMAL_DELETE, "< a"))
        hunk.add_patch_line(PatchLine(LineRole.NORMAL_SEPARATOR, "---"))
        hunk.add_patch_line(PatchLine(LineRole.NORMAL_INSERT, "> b"))
        assert [line.line for line in hunk.lines] == ["1c1", "< a", "---", "> b"]


class TestContextHunkData:
    """Tests for the two-sided context hunk."""

    def test_sides_split_on_second_range(self):
        """Test lines are routed to the original and modified sides."""
        hunk = context_hunk(
            (LineRole.CONTEXT_RANGE, "*** 1,2 ****"),
            (LineRole.CONTEXT_UNCHANGED, "  a"),
            (LineRole.CONTEXT_DELETED, "! b", True),
            (LineRole.CONTEXT_RANGE, "--- 1,2 ----"),
            (LineRole.CONTEXT_UNCHANGED, "  a"),
            (LineRole.CONTEXT_INSERTED, "! B", True),
        )
        data = hunk.context_hunk_data()
        assert (data.f1_range.start, data.f1_range.end) == (1, 2)
        assert (data.f2_range.start, data.f2_range.end) == (1, 2)
        assert len(data.original_lines) == 4
        assert len(data.modified_lines) == 3
        assert not data.is_original_empty()
        assert not data.is_modified_empty()
        assert data.change_by_index(0).original_line == "B"
        assert data.source_line_count(reverse=False) == 2

    def test_original_placeholder(self):
        """Test a pure insertion leaves the original side a placeholder."""
        hunk = context_hunk(
            (LineRole.CONTEXT_RANGE, "*** 1,2 ****"),
            (LineRole.CONTEXT_RANGE, "--- 1,3 ----"),
            (LineRole.CONTEXT_UNCHANGED, "  a"),
            (LineRole.CONTEXT_INSERTED, "+ b"),
            (LineRole.CONTEXT_UNCHANGED, "  c"),
        )
        data = hunk.context_hunk_data()
        assert data.is_original_empty()
        assert data.effective_lines() is data.modified_lines
        assert data.source_line_count(reverse=False) == 2
        assert data.source_line_count(reverse=True) == 3

    def test_modified_placeholder(self):
        """Test a pure deletion leaves the modified side a placeholder."""
        hunk = context_hunk(
            (LineRole.CONTEXT_RANGE, "*** 1,3 ****"),
            (LineRole.CONTEXT_UNCHANGED, "  a"),
            (LineRole.CONTEXT_DELETED, "- b"),
            (LineRole.CONTEXT_UNCHANGED, "  c"),
            (LineRole.CONTEXT_RANGE, "--- 1,2 ----"),
        )
        data = hunk.context_hunk_data()
        assert data.is_modified_empty()
        assert data.effective_lines() is data.original_lines
        assert data.source_line_count(reverse=True) == 2

    def test_insertion_on_original_side_rejected(self):
        """Test '+' lines cannot appear before the modified range."""
        with pytest.raises(ValueError):
            context_hunk(
                (LineRole.CONTEXT_RANGE, "*** 1 ****"),
                (LineRole.CONTEXT_INSERTED, "+ b"),
            )

    def test_third_range_rejected(self):
        """Test a context hunk holds exactly two ranges."""
        with pytest.raises(ValueError):
            context_hunk(
                (LineRole.CONTEXT_RANGE, "*** 1 ****"),
                (LineRole.CONTEXT_RANGE, "--- 1 ----"),
                (LineRole.CONTEXT_RANGE, "--- 2 ----"),
            )

    def test_empty_data_has_no_ranges(self):
        """Test ranges are unknown until range lines arrive."""
        data = ContextHunkData()
        assert data.f1_range is None
        assert data.f2_range is None
