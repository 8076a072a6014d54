"""Diff parser for the hunkpatch engine.

Contains functions for turning diff text into a populated Hunks collection:
- detect_format: Guess the dialect of a diff
- parse_patch: Parse diff text of any dialect into Hunks
- _parse_normal, _parse_unified, _parse_context, _parse_edit_script: Per-dialect lexers

Only single-file diffs are handled: one Hunks collection describes one file.
"""

import logging
import re
from typing import Optional

from hunkpatch.patch.engine import Hunks
from hunkpatch.patch.exceptions import PatchParseError
from hunkpatch.patch.formats import EditScriptHunkKind, PatchFormat
from hunkpatch.patch.hunk import Hunk
from hunkpatch.patch.line import LineRole, PatchLine
from hunkpatch.patch.options import PatchOptions
from hunkpatch.patch.range_data import NORMAL_RANGE_RE

logger = logging.getLogger(__name__)


CONTEXT_SEPARATOR = "***************"
CONTEXT_F1_RANGE_RE = re.compile(r"^\*\*\* \d+(?:,\d+)? \*\*\*\*$")
CONTEXT_F2_RANGE_RE = re.compile(r"^--- \d+(?:,\d+)? ----$")
EDIT_SCRIPT_RANGE_RE = re.compile(r"^\d+(?:,\d+)?[acd]$")

# Prefixes of context-format content lines, per side
_CONTEXT_ORIGINAL_PREFIXES = {"  ": (LineRole.CONTEXT_UNCHANGED, False),
                              "- ": (LineRole.CONTEXT_DELETED, False),
                              "! ": (LineRole.CONTEXT_DELETED, True)}
_CONTEXT_MODIFIED_PREFIXES = {"  ": (LineRole.CONTEXT_UNCHANGED, False),
                              "+ ": (LineRole.CONTEXT_INSERTED, False),
                              "! ": (LineRole.CONTEXT_INSERTED, True)}


def _split_lines(text: str) -> list[str]:
    """Split diff text on ``\\n`` only, so ``\\r`` stays part of line text."""
    if not text:
        return []
    if text.endswith("\n"):
        text = text[:-1]
    return text.split("\n")


def detect_format(text: str) -> PatchFormat:
    """Guess the dialect of a diff from its first decisive line.

    Raises:
        PatchParseError: If no line identifies a dialect.
    """
    for line in _split_lines(text):
        if line == CONTEXT_SEPARATOR or CONTEXT_F1_RANGE_RE.match(line):
            return PatchFormat.CONTEXT
        if line.startswith("@@ -"):
            return PatchFormat.UNIFIED
        if NORMAL_RANGE_RE.match(line):
            return PatchFormat.NORMAL
        if EDIT_SCRIPT_RANGE_RE.match(line):
            return PatchFormat.EDIT_SCRIPT

    raise PatchParseError("Could not detect the diff format.")


def parse_patch(
    text: str,
    options: Optional[PatchOptions] = None,
    format: Optional[PatchFormat] = None,
) -> Hunks:
    """Parse diff text into a Hunks collection ready to apply.

    Args:
        text: The diff
        options: Options the Hunks will be applied with
        format: Dialect of the diff, detected when omitted

    Returns:
        A populated Hunks collection

    Raises:
        PatchParseError: If the diff is malformed or holds no hunks
        RangeError: If a range header cannot be decoded
    """
    options = options or PatchOptions()
    if format is None or format == PatchFormat.NONE:
        format = detect_format(text)

    hunks = Hunks(format, options)
    lines = _split_lines(text)

    parsers = {
        PatchFormat.NORMAL: _parse_normal,
        PatchFormat.UNIFIED: _parse_unified,
        PatchFormat.CONTEXT: _parse_context,
        PatchFormat.EDIT_SCRIPT: _parse_edit_script,
    }
    parsers[format](lines, hunks)

    if hunks.has_no_hunks():
        raise PatchParseError(f"No {format.value} hunks found.")

    logger.debug("Parsed %d %s hunk(s)", len(hunks), format.value)
    return hunks


def _parse_normal(lines: list[str], hunks: Hunks) -> None:
    for number, line in enumerate(lines, start=1):
        if NORMAL_RANGE_RE.match(line):
            hunks.add_hunk(Hunk.from_header(PatchLine.normal_range_header(line)))
        elif hunks.has_no_hunks():
            # Preamble such as "diff a b"
            continue
        elif line.startswith("<"):
            hunks.add_patch_line(PatchLine(LineRole.NORMAL_DELETE, line))
        elif line.startswith(">"):
            hunks.add_patch_line(PatchLine(LineRole.NORMAL_INSERT, line))
        elif line == "---":
            hunks.add_patch_line(PatchLine(LineRole.NORMAL_SEPARATOR, line))
        elif line.startswith("\\"):
            hunks.add_patch_line(PatchLine.no_newline(PatchFormat.NORMAL, line))
        else:
            raise PatchParseError(f"Unexpected line in normal diff: {line!r}", number)


def _parse_unified(lines: list[str], hunks: Hunks) -> None:
    old_remaining = 0
    new_remaining = 0

    for number, line in enumerate(lines, start=1):
        in_hunk = old_remaining > 0 or new_remaining > 0

        if in_hunk:
            if line.startswith(" ") or line == "":
                hunks.add_patch_line(PatchLine(LineRole.UNIFIED_UNCHANGED, line))
                old_remaining -= 1
                new_remaining -= 1
            elif line.startswith("-"):
                hunks.add_patch_line(PatchLine(LineRole.UNIFIED_DELETED, line))
                old_remaining -= 1
            elif line.startswith("+"):
                hunks.add_patch_line(PatchLine(LineRole.UNIFIED_INSERTED, line))
                new_remaining -= 1
            elif line.startswith("\\"):
                hunks.add_patch_line(PatchLine.no_newline(PatchFormat.UNIFIED, line))
            else:
                raise PatchParseError(f"Unexpected line in unified hunk: {line!r}", number)

            if old_remaining < 0 or new_remaining < 0:
                raise PatchParseError("Unified hunk is longer than its header says.", number)
            continue

        if line.startswith("@@ "):
            header = PatchLine(LineRole.UNIFIED_HEADER, line)
            hunk = Hunk.from_header(header)
            hunks.add_hunk(hunk)
            data = hunk.unified_hunk_data()
            old_remaining = data.f1_range.count
            new_remaining = data.f2_range.count
        elif line.startswith("\\") and not hunks.has_no_hunks():
            hunks.add_patch_line(PatchLine.no_newline(PatchFormat.UNIFIED, line))
        elif line.startswith("--- ") or line.startswith("+++ "):
            if not hunks.has_no_hunks():
                raise PatchParseError("Multi-file diffs are not supported.", number)
            if line.startswith("--- "):
                hunks.set_f1_header(line)
            else:
                hunks.set_f2_header(line)

    if old_remaining > 0 or new_remaining > 0:
        raise PatchParseError("Unified hunk ends before its header says.", len(lines))


def _parse_context(lines: list[str], hunks: Hunks) -> None:
    # None outside hunks; "start" right after the separator, then "original" and "modified"
    side: Optional[str] = None

    for number, line in enumerate(lines, start=1):
        if line == CONTEXT_SEPARATOR:
            hunks.add_hunk(Hunk.from_header(PatchLine(LineRole.CONTEXT_SEPARATOR, line)))
            side = "start"
        elif side == "start":
            if not CONTEXT_F1_RANGE_RE.match(line):
                raise PatchParseError(f"Expected '*** N,M ****', got {line!r}", number)
            hunks.add_patch_line(PatchLine(LineRole.CONTEXT_RANGE, line))
            side = "original"
        elif side is not None and CONTEXT_F2_RANGE_RE.match(line):
            if side != "original":
                raise PatchParseError("Context hunk has more than two ranges.", number)
            hunks.add_patch_line(PatchLine(LineRole.CONTEXT_RANGE, line))
            side = "modified"
        elif side is not None and line.startswith("\\"):
            hunks.add_patch_line(PatchLine.no_newline(PatchFormat.CONTEXT, line))
        elif side is not None and line[:2] in _CONTEXT_ORIGINAL_PREFIXES.keys() | _CONTEXT_MODIFIED_PREFIXES.keys():
            prefixes = _CONTEXT_ORIGINAL_PREFIXES if side == "original" else _CONTEXT_MODIFIED_PREFIXES
            if line[:2] not in prefixes:
                raise PatchParseError(f"Unexpected line on the {side} side: {line!r}", number)
            role, is_change = prefixes[line[:2]]
            hunks.add_patch_line(PatchLine(role, line, is_change=is_change))
        elif hunks.has_no_hunks() and line.startswith("*** "):
            hunks.set_f1_header(line)
        elif hunks.has_no_hunks() and line.startswith("--- "):
            hunks.set_f2_header(line)
        elif not hunks.has_no_hunks() and (line.startswith("*** ") or line.startswith("--- ")):
            raise PatchParseError("Multi-file diffs are not supported.", number)
        else:
            if side == "original":
                raise PatchParseError("Context hunk ends before its modified range.", number)
            side = None

    if side in ("start", "original"):
        raise PatchParseError("Context hunk ends before its modified range.", len(lines))


def _parse_edit_script(lines: list[str], hunks: Hunks) -> None:
    # Role of text lines while inside an "a" or "c" block
    text_role: Optional[LineRole] = None

    for number, line in enumerate(lines, start=1):
        if text_role is not None:
            if line == ".":
                text_role = None
            else:
                hunks.add_patch_line(PatchLine(text_role, line))
            continue

        if EDIT_SCRIPT_RANGE_RE.match(line):
            header = PatchLine.edit_script_range_header(line)
            hunks.add_hunk(Hunk.from_header(header))
            kind = header.edit_script_range.kind
            if kind == EditScriptHunkKind.INSERT:
                text_role = LineRole.EDIT_SCRIPT_INSERT
            elif kind == EditScriptHunkKind.CHANGE:
                text_role = LineRole.EDIT_SCRIPT_CHANGE
        elif line.startswith("\\") and not hunks.has_no_hunks():
            hunks.add_patch_line(PatchLine.no_newline(PatchFormat.EDIT_SCRIPT, line))
        elif line in ("w", "q", "wq", ""):
            continue
        else:
            raise PatchParseError(f"Unexpected ed command: {line!r}", number)

    if text_role is not None:
        raise PatchParseError("Ed text block is missing its '.' terminator.", len(lines))
