"""Loaded text files the engine copies lines from.

Contains:
- PatchFile: An immutable, 1-indexed view of a text file
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hunkpatch.patch.formats import FileKind


# Bytes that are not valid UTF-8 round-trip unchanged through read and write
TEXT_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class PatchFile:
    """Lines of a text file plus whether its last line ended with a newline."""

    lines: tuple[str, ...]
    ends_with_newline: bool
    kind: FileKind
    path: Optional[Path] = None

    def __len__(self) -> int:
        return len(self.lines)

    def line(self, number: int) -> str:
        """Return line ``number``, counting from 1."""
        if number < 1 or number > len(self.lines):
            raise IndexError(f"Line {number} is outside 1..{len(self.lines)}")
        return self.lines[number - 1]

    @classmethod
    def from_text(cls, text: str, kind: FileKind, path: Optional[Path] = None) -> "PatchFile":
        """Split ``text`` on ``\\n``; an empty text has no lines."""
        if not text:
            return cls(lines=(), ends_with_newline=True, kind=kind, path=path)

        ends_with_newline = text.endswith("\n")
        if ends_with_newline:
            text = text[:-1]
        return cls(
            lines=tuple(text.split("\n")),
            ends_with_newline=ends_with_newline,
            kind=kind,
            path=path,
        )

    @classmethod
    def load(cls, path: Path, kind: FileKind) -> "PatchFile":
        """Read a file fully into memory.

        Newline translation is disabled so carriage returns stay part of the
        line text and are written back unchanged. Bytes that are not UTF-8
        are kept as surrogates and written back as the same bytes.

        Raises:
            OSError: If the file cannot be read.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8", errors=TEXT_ERRORS, newline="") as f:
            text = f.read()
        return cls.from_text(text, kind, path)
