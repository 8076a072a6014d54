"""Tests for hunkpatch.patch.parser module."""

import pytest

from hunkpatch.patch import (
    LineRole,
    PatchFormat,
    PatchParseError,
    RangeError,
    detect_format,
    parse_patch,
)


class TestDetectFormat:
    """Tests for detect_format."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2d1\n< b\n", PatchFormat.NORMAL),
            ("diff a b\n5a6,7\n> x\n", PatchFormat.NORMAL),
            ("--- a\n+++ b\n@@ -1 +1 @@\n-a\n+b\n", PatchFormat.UNIFIED),
            ("*** a\n--- b\n***************\n*** 1 ****\n", PatchFormat.CONTEXT),
            ("3a\nx\n.\n", PatchFormat.EDIT_SCRIPT),
        ],
    )
    def test_detects(self, text, expected):
        """Test each dialect is recognised by its first decisive line."""
        assert detect_format(text) == expected

    def test_undetectable(self):
        """Test text without hunks raises PatchParseError."""
        with pytest.raises(PatchParseError):
            detect_format("hello\nworld\n")


class TestParseNormal:
    """Tests for parsing normal diffs."""

    def test_change(self):
        """Test a change hunk keeps every line in order."""
        hunks = parse_patch("2c2\n< b\n---\n> B\n")
        (hunk,) = list(hunks)
        roles = [line.role for line in hunk.lines]
        assert roles == [
            LineRole.NORMAL_RANGE,
            LineRole.NORMAL_DELETE,
            LineRole.NORMAL_SEPARATOR,
            LineRole.NORMAL_INSERT,
        ]

    def test_no_newline_marker(self):
        """Test the marker is kept inside the hunk."""
        hunks = parse_patch("1c1\n< a\n\\ No newline at end of file\n---\n> b\n")
        (hunk,) = list(hunks)
        assert hunk.lines[2].role == LineRole.NO_NEWLINE
        assert hunk.lines[2].kind == PatchFormat.NORMAL

    def test_unexpected_line(self):
        """Test a stray line reports its line number."""
        with pytest.raises(PatchParseError, match="line 3"):
            parse_patch("2d1\n< b\n? what\n", format=PatchFormat.NORMAL)


class TestParseUnified:
    """Tests for parsing unified diffs."""

    def test_headers_and_hunks(self):
        """Test headers are recorded and each @@ opens a hunk."""
        text = (
            "--- a.txt\t2024-01-31 10:00:00\n"
            "+++ b.txt\t2024-01-31 11:00:00\n"
            "@@ -1,2 +1,2 @@\n-a\n+A\n b\n"
            "@@ -9 +9 @@\n-x\n+y\n"
        )
        hunks = parse_patch(text)
        assert hunks.kind == PatchFormat.UNIFIED
        assert len(hunks) == 2
        assert hunks.file1_header.startswith("--- a.txt")
        assert hunks.file2_header.startswith("+++ b.txt")

    def test_content_starting_with_dashes(self):
        """Test a deleted line beginning '-- ' is not taken for a header."""
        hunks = parse_patch("@@ -1 +1 @@\n--- x\n+++ y\n", format=PatchFormat.UNIFIED)
        (hunk,) = list(hunks)
        assert [line.original_line for line in hunk.lines[1:]] == ["-- x", "++ y"]

    def test_trailing_marker_after_last_line(self):
        """Test a marker right after a complete hunk attaches to it."""
        hunks = parse_patch("@@ -1 +1 @@\n-a\n+b\n\\ No newline at end of file\n")
        (hunk,) = list(hunks)
        assert hunk.lines[-1].role == LineRole.NO_NEWLINE

    def test_short_hunk(self):
        """Test a hunk with fewer lines than announced fails."""
        with pytest.raises(PatchParseError):
            parse_patch("@@ -1,3 +1,3 @@\n a\n-b\n+B\n")

    def test_second_file_rejected(self):
        """Test multi-file diffs are refused."""
        text = (
            "--- a\n+++ a\n@@ -1 +1 @@\n-a\n+b\n"
            "--- c\n+++ c\n@@ -1 +1 @@\n-c\n+d\n"
        )
        with pytest.raises(PatchParseError, match="Multi-file"):
            parse_patch(text)

    def test_bad_range(self):
        """Test a malformed @@ header raises RangeError."""
        with pytest.raises(RangeError):
            parse_patch("@@ -a +1 @@\n", format=PatchFormat.UNIFIED)


class TestParseContext:
    """Tests for parsing context diffs."""

    TEXT = (
        "*** a.txt\t2024-01-31 10:00:00\n"
        "--- b.txt\t2024-01-31 11:00:00\n"
        "***************\n"
        "*** 1,3 ****\n  a\n! b\n  c\n"
        "--- 1,3 ----\n  a\n! B\n  c\n"
        "***************\n"
        "*** 8,9 ****\n- x\n  y\n"
        "--- 7 ----\n"
    )

    def test_hunks_and_sides(self):
        """Test both hunks and their sides are parsed."""
        hunks = parse_patch(self.TEXT)
        first, second = list(hunks)

        first_data = first.context_hunk_data()
        assert first_data.f1_range.end == 3
        assert first_data.change_by_index(0).original_line == "B"

        second_data = second.context_hunk_data()
        assert second_data.is_modified_empty()
        assert second_data.f2_range.start == 7
        assert hunks.file1_header.startswith("*** a.txt")

    def test_change_flag(self):
        """Test '!' lines are marked as changes."""
        first = list(parse_patch(self.TEXT))[0]
        changed = [line for line in first.lines if line.is_change]
        assert [line.role for line in changed] == [LineRole.CONTEXT_DELETED, LineRole.CONTEXT_INSERTED]

    def test_missing_modified_range(self):
        """Test a hunk cut off before '--- c,d ----' fails."""
        with pytest.raises(PatchParseError):
            parse_patch("***************\n*** 1,2 ****\n  a\n- b\n")

    def test_insert_on_original_side(self):
        """Test '+' lines before the modified range fail."""
        with pytest.raises(PatchParseError):
            parse_patch("***************\n*** 1,2 ****\n+ a\n--- 1,3 ----\n")


class TestParseEditScript:
    """Tests for parsing ed scripts."""

    def test_text_blocks(self):
        """Test text up to '.' belongs to the command."""
        hunks = parse_patch("5c\nnew\n.\n2,3d\n1a\nfirst\nsecond\n.\nw\nq\n")
        first, second, third = list(hunks)
        assert [line.line for line in first.lines] == ["5c", "new"]
        assert first.lines[1].role == LineRole.EDIT_SCRIPT_CHANGE
        assert len(second.lines) == 1
        assert [line.role for line in third.lines[1:]] == [LineRole.EDIT_SCRIPT_INSERT] * 2

    def test_unterminated_block(self):
        """Test a text block without '.' fails."""
        with pytest.raises(PatchParseError):
            parse_patch("1a\nfirst\n", format=PatchFormat.EDIT_SCRIPT)

    def test_unknown_command(self):
        """Test an unsupported ed command fails."""
        with pytest.raises(PatchParseError):
            parse_patch("1d\ns/a/b/\n", format=PatchFormat.EDIT_SCRIPT)


class TestParsePatch:
    """Tests for parse_patch in general."""

    def test_no_hunks(self):
        """Test a diff with only headers fails."""
        with pytest.raises(PatchParseError, match="No unified hunks"):
            parse_patch("--- a\n+++ b\n", format=PatchFormat.UNIFIED)

    def test_default_options(self):
        """Test parse_patch works without options."""
        hunks = parse_patch("1d0\n< a\n")
        assert hunks.options.reverse is False
