"""Tests for hunkpatch.patch.patch_file module."""

import pytest

from hunkpatch.patch import FileKind, PatchFile


class TestFromText:
    """Tests for PatchFile.from_text."""

    def test_trailing_newline(self):
        """Test a file ending with a newline."""
        f = PatchFile.from_text("a\nb\n", FileKind.ORIGINAL)
        assert f.lines == ("a", "b")
        assert f.ends_with_newline is True
        assert len(f) == 2

    def test_missing_trailing_newline(self):
        """Test a file whose last line has no newline."""
        f = PatchFile.from_text("a\nb", FileKind.MODIFIED)
        assert f.lines == ("a", "b")
        assert f.ends_with_newline is False
        assert f.kind == FileKind.MODIFIED

    def test_empty_text(self):
        """Test an empty file has no lines."""
        f = PatchFile.from_text("", FileKind.ORIGINAL)
        assert len(f) == 0

    def test_blank_last_line(self):
        """Test a final empty line is kept."""
        f = PatchFile.from_text("a\n\n", FileKind.ORIGINAL)
        assert f.lines == ("a", "")

    def test_carriage_returns_kept(self):
        """Test CRLF files keep the carriage return in the line text."""
        f = PatchFile.from_text("a\r\nb\r\n", FileKind.ORIGINAL)
        assert f.lines == ("a\r", "b\r")


class TestLine:
    """Tests for 1-based line access."""

    def test_one_based(self):
        """Test line numbers start at 1."""
        f = PatchFile.from_text("a\nb\n", FileKind.ORIGINAL)
        assert f.line(1) == "a"
        assert f.line(2) == "b"

    @pytest.mark.parametrize("number", [0, 3, -1])
    def test_out_of_range(self, number):
        """Test out-of-range access raises IndexError."""
        f = PatchFile.from_text("a\nb\n", FileKind.ORIGINAL)
        with pytest.raises(IndexError):
            f.line(number)


class TestLoad:
    """Tests for PatchFile.load."""

    def test_load(self, make_file):
        """Test loading a file from disk records its path."""
        path = make_file("a.txt", "x\r\ny")
        f = PatchFile.load(path, FileKind.ORIGINAL)
        assert f.lines == ("x\r", "y")
        assert f.ends_with_newline is False
        assert f.path == path

    def test_load_missing(self, temp_dir):
        """Test loading a missing file raises OSError."""
        with pytest.raises(OSError):
            PatchFile.load(temp_dir / "missing.txt", FileKind.ORIGINAL)

    def test_load_non_utf8(self, temp_dir):
        """Test bytes that are not UTF-8 load as surrogates instead of failing."""
        path = temp_dir / "latin1.txt"
        path.write_bytes(b"caf\xe9\n")
        f = PatchFile.load(path, FileKind.ORIGINAL)
        assert f.lines == ("caf\udce9",)
        assert f.line(1).encode("utf-8", "surrogateescape") == b"caf\xe9"
