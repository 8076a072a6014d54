"""Patch application engine.

Contains:
- Hunks: An ordered collection of same-format hunks that applies itself to a file
- HEADER_REGEX: Pattern recovering path and date from context/unified file headers

Every algorithm walks the sorted hunks once with a cursor over the 1-based
lines of the file being read, copying untouched lines through and emitting
each hunk's lines. Output lines are joined with ``\\n``; whether a final
newline follows is decided from the no-newline markers seen.
"""

import logging
import os
import re
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO

from hunkpatch.patch.exceptions import (
    BackupError,
    DestinationError,
    HeaderError,
    PatchError,
    UnsupportedOperationError,
)
from hunkpatch.patch.formats import (
    EditScriptHunkKind,
    FileKind,
    NormalRangeKind,
    PatchFormat,
)
from hunkpatch.patch.hunk import Hunk
from hunkpatch.patch.line import LineRole, PatchLine
from hunkpatch.patch.options import PatchOptions
from hunkpatch.patch.patch_file import TEXT_ERRORS, PatchFile

logger = logging.getLogger(__name__)


# Regex to match a context/unified file header: marker, path, date
HEADER_REGEX = re.compile(
    r"^(?:\*\*\*|---|\+\+\+) "
    r"(?P<path>[^\t]+?)\s+"
    r"(?P<date>"
    r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(?:\.\d+)?(?: [+-]\d{4})?"  # 2024-01-31 10:00:00.000 +0100
    r"|[A-Z][a-z]{2} [A-Z][a-z]{2} [ \d]?\d \d{2}:\d{2}:\d{2} \d{4}"  # Wed Jan 31 10:00:00 2024
    r")\s*$"
)

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_header_date(text: str) -> Optional[datetime]:
    """Convert a header date into an aware datetime, or None if unrecognised.

    Fractions beyond microseconds are truncated; dates without an offset are
    taken as UTC.
    """
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text.strip())

    for fmt in (
        "%Y-%m-%d %H:%M:%S.%f %z",
        "%Y-%m-%d %H:%M:%S %z",
        "%Y-%m-%d %H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S",
        "%a %b %d %H:%M:%S %Y",
    ):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    return None


def backup_path_for(path: Path) -> Path:
    """Where the backup of ``path`` goes: ``<name>.orig`` in the same directory."""
    return path.with_name(f"{path.name}.orig")


def parse_header(header: str) -> Optional[tuple[Path, Optional[datetime]]]:
    """Recover ``(path, date)`` from a file header, or None if it does not match."""
    match = HEADER_REGEX.match(header)
    if not match:
        return None
    return Path(match.group("path")), parse_header_date(match.group("date"))


class _LineWriter:
    """Writes lines separated by newlines; the final newline is explicit."""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self.lines_written = 0

    def write_line(self, text: str) -> None:
        if self.lines_written:
            self._stream.write("\n")
        self._stream.write(text)
        self.lines_written += 1

    def finish(self, newline: bool) -> None:
        if newline and self.lines_written:
            self._stream.write("\n")


@contextmanager
def _open_output(path: Path) -> Iterator[TextIO]:
    """Open a temporary file beside ``path`` and move it over ``path`` on success."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with open(fd, "w", encoding="utf-8", errors=TEXT_ERRORS, newline="") as stream:
            yield stream
        if path.exists():
            shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class Hunks:
    """Hunks of one format, populated by a parser and applied once."""

    def __init__(self, kind: PatchFormat, options: PatchOptions):
        if kind == PatchFormat.NONE:
            raise ValueError("Hunks:kind can not be PatchFormat.NONE")

        self.kind = kind
        self.options = options
        self._hunks: list[Hunk] = []

        self.file: Optional[PatchFile] = None
        self.output_path: Optional[Path] = None

        self.file1_header: Optional[str] = None
        self.file1_path: Optional[Path] = None
        self.file1_date: Optional[datetime] = None
        self.file2_header: Optional[str] = None
        self.file2_path: Optional[Path] = None
        self.file2_date: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._hunks)

    def __iter__(self) -> Iterator[Hunk]:
        return iter(self._hunks)

    def set_f1_header(self, header: str) -> None:
        self.file1_header = header

    def set_f2_header(self, header: str) -> None:
        self.file2_header = header

    def has_no_hunks(self) -> bool:
        return not self._hunks

    def add_hunk(self, hunk: Hunk) -> None:
        if hunk.kind != self.kind:
            raise ValueError("Only hunks with the same kind are allowed!")
        self._hunks.append(hunk)

    def add_patch_line(self, patch_line: PatchLine) -> None:
        """Append a line to the most recently added hunk."""
        if patch_line.kind != self.kind:
            raise ValueError("Adding PatchLine with different kind to Hunks is not allowed!")
        if self.has_no_hunks():
            raise ValueError("Can not add patch_line to an empty Hunks.")
        self._hunks[-1].add_patch_line(patch_line)

    def sorted_hunks(self) -> list[Hunk]:
        """Return the hunks in the order the current direction applies them."""
        reverse = self.options.reverse

        if self.kind == PatchFormat.NORMAL:
            if reverse:
                key = lambda hunk: hunk.normal_hunk_data().range_left.start
            else:
                key = lambda hunk: hunk.normal_hunk_data().range_right.start
        elif self.kind == PatchFormat.UNIFIED:
            if reverse:
                key = lambda hunk: hunk.unified_hunk_data().f2_range.end
            else:
                key = lambda hunk: hunk.unified_hunk_data().f1_range.start
        elif self.kind == PatchFormat.CONTEXT:
            key = self._context_f1_start
        else:
            key = lambda hunk: hunk.edit_script_hunk_data().range.end

        return sorted(self._hunks, key=key)

    @staticmethod
    def _context_f1_start(hunk: Hunk) -> int:
        f1_range = hunk.context_hunk_data().f1_range
        if f1_range is None:
            raise ValueError("Invalid f1_range for ContextHunkData!")
        return f1_range.start

    # ------------------------------------------------------------------
    # Applying
    # ------------------------------------------------------------------

    def check_supported(self) -> None:
        """Reject format/option combinations that cannot be applied.

        Raises:
            UnsupportedOperationError: For ed scripts applied in reverse.
        """
        if self.kind == PatchFormat.EDIT_SCRIPT and self.options.reverse:
            raise UnsupportedOperationError("ed format + reverse option is not possible!")

    def apply(self) -> Path:
        """Apply the hunks and write the result.

        Returns:
            Path of the written file.

        Raises:
            UnsupportedOperationError: For ed scripts applied in reverse.
            HeaderError: If the relevant context/unified header is malformed.
            DestinationError: If no file to patch can be determined.
            BackupError: If a backup was requested for a non-regular file.
            PatchError: If a hunk refers to lines the file does not have.
            OSError: On any file read/write failure.
        """
        self.check_supported()

        algorithms: dict[tuple[PatchFormat, bool], Callable[[_LineWriter], None]] = {
            (PatchFormat.NORMAL, False): self._apply_normal,
            (PatchFormat.NORMAL, True): self._apply_normal_reverse,
            (PatchFormat.UNIFIED, False): self._apply_unified,
            (PatchFormat.UNIFIED, True): self._apply_unified_reverse,
            (PatchFormat.CONTEXT, False): self._apply_context,
            (PatchFormat.CONTEXT, True): self._apply_context_reverse,
            (PatchFormat.EDIT_SCRIPT, False): self._apply_edit_script,
        }
        algorithm = algorithms[(self.kind, self.options.reverse)]

        self.prepare_to_apply()
        logger.debug(
            "Applying %d %s hunk(s)%s to %s",
            len(self._hunks),
            self.kind.value,
            " in reverse" if self.options.reverse else "",
            self.output_path,
        )

        with _open_output(self.output_path) as stream:
            algorithm(_LineWriter(stream))

        return self.output_path

    def _copy_through(self, writer: _LineWriter, cursor: int, boundary: int) -> int:
        """Copy source lines ``cursor .. boundary - 1``; return how many were copied."""
        if boundary - 1 > len(self.file):
            raise PatchError(
                f"Hunk refers to line {boundary - 1} but {self.file.path} has only "
                f"{len(self.file)} line(s)."
            )
        copied = 0
        while cursor + copied < boundary:
            writer.write_line(self.file.line(cursor + copied))
            copied += 1
        return copied

    def _finish(self, writer: _LineWriter, no_newline_count: int, relevant_kind: FileKind) -> None:
        """Emit the final newline according to the no-newline markers seen.

        No marker: always. One marker: only when the loaded file has the
        relevant role and itself lacks a trailing newline, since the output
        then differs from it. More: never.
        """
        if no_newline_count == 0:
            newline = True
        elif no_newline_count == 1:
            newline = self.file.kind == relevant_kind and not self.file.ends_with_newline
        else:
            newline = False
        writer.finish(newline)

    def _apply_normal(self, writer: _LineWriter) -> None:
        new_file_line = 1
        old_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.normal_hunk_data()
            left = data.range_left
            boundary = left.start + 1 if data.range_kind == NormalRangeKind.INSERT else left.start

            copied = self._copy_through(writer, old_file_line, boundary)
            old_file_line += copied
            new_file_line += copied

            for patch_line in data.lines:
                role = patch_line.role
                if role in (LineRole.NORMAL_RANGE, LineRole.NORMAL_SEPARATOR):
                    continue
                elif role == LineRole.NORMAL_INSERT:
                    writer.write_line(patch_line.original_line)
                    new_file_line += 1
                elif role == LineRole.NORMAL_DELETE:
                    old_file_line += 1
                elif role == LineRole.NO_NEWLINE:
                    no_newline_count += 1
                else:
                    raise ValueError("Invalid Normal PatchLine detected!")

            logger.debug("Normal hunk %s applied; next lines %d -> %d",
                         data.range_data.line, old_file_line, new_file_line)

        self._copy_through(writer, old_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    def _apply_normal_reverse(self, writer: _LineWriter) -> None:
        old_file_line = 1
        new_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.normal_hunk_data()
            right = data.range_right
            boundary = right.start + 1 if data.range_kind == NormalRangeKind.DELETE else right.start

            copied = self._copy_through(writer, new_file_line, boundary)
            new_file_line += copied
            old_file_line += copied

            for patch_line in data.lines:
                role = patch_line.role
                if role in (LineRole.NORMAL_RANGE, LineRole.NORMAL_SEPARATOR):
                    continue
                elif role == LineRole.NORMAL_INSERT:
                    new_file_line += 1
                elif role == LineRole.NORMAL_DELETE:
                    writer.write_line(patch_line.original_line)
                    old_file_line += 1
                elif role == LineRole.NO_NEWLINE:
                    no_newline_count += 1
                else:
                    raise ValueError("Invalid Normal PatchLine detected!")

            logger.debug("Normal hunk %s reverted; next lines %d -> %d",
                         data.range_data.line, new_file_line, old_file_line)

        self._copy_through(writer, new_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    def _apply_unified(self, writer: _LineWriter) -> None:
        new_file_line = 1
        old_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.unified_hunk_data()
            f1_range = data.f1_range
            # An empty range names the line after which lines are inserted
            boundary = f1_range.start + 1 if f1_range.count == 0 else f1_range.start

            copied = self._copy_through(writer, old_file_line, boundary)
            old_file_line += copied
            new_file_line += copied

            previous: Optional[PatchLine] = None
            for patch_line in data.lines:
                role = patch_line.role
                if role == LineRole.UNIFIED_HEADER:
                    pass
                elif role == LineRole.UNIFIED_DELETED:
                    old_file_line += 1
                elif role == LineRole.UNIFIED_UNCHANGED:
                    writer.write_line(patch_line.original_line)
                    new_file_line += 1
                    old_file_line += 1
                elif role == LineRole.UNIFIED_INSERTED:
                    writer.write_line(patch_line.original_line)
                    new_file_line += 1
                elif role == LineRole.NO_NEWLINE:
                    no_newline_count += _unified_marker_weight(previous)
                else:
                    raise ValueError("Invalid Unified PatchLine detected!")
                previous = patch_line

        self._copy_through(writer, old_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    def _apply_unified_reverse(self, writer: _LineWriter) -> None:
        new_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.unified_hunk_data()
            f2_range = data.f2_range
            boundary = f2_range.start + 1 if f2_range.count == 0 else f2_range.start

            new_file_line += self._copy_through(writer, new_file_line, boundary)

            previous: Optional[PatchLine] = None
            for patch_line in data.lines:
                role = patch_line.role
                if role == LineRole.UNIFIED_HEADER:
                    pass
                elif role == LineRole.UNIFIED_DELETED:
                    writer.write_line(patch_line.original_line)
                elif role == LineRole.UNIFIED_UNCHANGED:
                    writer.write_line(patch_line.original_line)
                    new_file_line += 1
                elif role == LineRole.UNIFIED_INSERTED:
                    new_file_line += 1
                elif role == LineRole.NO_NEWLINE:
                    no_newline_count += _unified_marker_weight(previous)
                else:
                    raise ValueError("Invalid Unified PatchLine detected!")
                previous = patch_line

        self._copy_through(writer, new_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    def _apply_context(self, writer: _LineWriter) -> None:
        original_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.context_hunk_data()
            f1_range = data.f1_range
            original_is_placeholder = data.is_original_empty()
            modified_is_placeholder = data.is_modified_empty()

            boundary = f1_range.start
            if data.source_line_count(reverse=False) == 0:
                boundary += 1

            original_file_line += self._copy_through(writer, original_file_line, boundary)

            if original_is_placeholder:
                # Nothing removed: the modified side describes the whole hunk
                no_newline_count += self._walk_context_side(
                    data.modified_lines, writer, write_roles=_CONTEXT_NEW_ROLES,
                    other_is_placeholder=True,
                )
                original_file_line += data.source_line_count(reverse=False)
                continue

            no_newline_count += self._walk_context_side(
                data.original_lines, writer,
                write_roles=(LineRole.CONTEXT_UNCHANGED,) if modified_is_placeholder else (),
                other_is_placeholder=modified_is_placeholder,
            )
            original_file_line += data.source_line_count(reverse=False)

            if not modified_is_placeholder:
                no_newline_count += self._walk_context_side(
                    data.modified_lines, writer, write_roles=_CONTEXT_NEW_ROLES,
                    other_is_placeholder=False,
                )

        self._copy_through(writer, original_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    def _apply_context_reverse(self, writer: _LineWriter) -> None:
        new_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.context_hunk_data()
            f2_range = data.f2_range
            if f2_range is None:
                raise ValueError("ContextRange is expected not to be None here!")
            original_is_placeholder = data.is_original_empty()
            modified_is_placeholder = data.is_modified_empty()

            boundary = f2_range.start
            if data.source_line_count(reverse=True) == 0:
                boundary += 1

            new_file_line += self._copy_through(writer, new_file_line, boundary)

            if modified_is_placeholder:
                # Nothing added: the original side describes the whole hunk
                no_newline_count += self._walk_context_side(
                    data.original_lines, writer, write_roles=_CONTEXT_OLD_ROLES,
                    other_is_placeholder=True,
                )
                new_file_line += data.source_line_count(reverse=True)
                continue

            no_newline_count += self._walk_context_side(
                data.modified_lines, writer,
                write_roles=(LineRole.CONTEXT_UNCHANGED,) if original_is_placeholder else (),
                other_is_placeholder=original_is_placeholder,
            )
            new_file_line += data.source_line_count(reverse=True)

            if not original_is_placeholder:
                no_newline_count += self._walk_context_side(
                    data.original_lines, writer, write_roles=_CONTEXT_OLD_ROLES,
                    other_is_placeholder=False,
                )

        self._copy_through(writer, new_file_line, len(self.file) + 1)
        self._finish(writer, no_newline_count, FileKind.MODIFIED)

    @staticmethod
    def _walk_context_side(
        lines: list[PatchLine],
        writer: _LineWriter,
        write_roles: tuple[LineRole, ...],
        other_is_placeholder: bool,
    ) -> int:
        """Write the lines of one context side whose role is in ``write_roles``.

        Returns the no-newline count contributed by the side. A marker after
        an unchanged line stands for both files when the other side is a
        placeholder.
        """
        no_newline_count = 0
        previous: Optional[PatchLine] = None

        for patch_line in lines:
            role = patch_line.role
            if role in (LineRole.CONTEXT_RANGE, LineRole.CONTEXT_SEPARATOR):
                pass
            elif role in (
                LineRole.CONTEXT_INSERTED,
                LineRole.CONTEXT_DELETED,
                LineRole.CONTEXT_UNCHANGED,
            ):
                if role in write_roles:
                    writer.write_line(patch_line.original_line)
            elif role == LineRole.NO_NEWLINE:
                shared = (
                    other_is_placeholder
                    and previous is not None
                    and previous.role == LineRole.CONTEXT_UNCHANGED
                )
                no_newline_count += 2 if shared else 1
            else:
                raise ValueError("Invalid Context PatchLine detected!")
            previous = patch_line

        return no_newline_count

    def _apply_edit_script(self, writer: _LineWriter) -> None:
        new_file_line = 1
        old_file_line = 1
        no_newline_count = 0

        for hunk in self.sorted_hunks():
            data = hunk.edit_script_hunk_data()
            range_ = data.range
            if data.range_kind == EditScriptHunkKind.INSERT:
                boundary = range_.start + 1
            else:
                boundary = range_.start

            copied = self._copy_through(writer, old_file_line, boundary)
            old_file_line += copied
            new_file_line += copied

            for patch_line in data.lines:
                role = patch_line.role
                if role == LineRole.EDIT_SCRIPT_RANGE:
                    header = patch_line.edit_script_range
                    if header.kind in (EditScriptHunkKind.DELETE, EditScriptHunkKind.CHANGE):
                        old_file_line += header.range.end - header.range.start + 1
                elif role in (LineRole.EDIT_SCRIPT_INSERT, LineRole.EDIT_SCRIPT_CHANGE):
                    writer.write_line(patch_line.original_line)
                    new_file_line += 1
                elif role == LineRole.NO_NEWLINE:
                    no_newline_count += 1
                else:
                    raise ValueError("Invalid PatchLine detected in EditScriptHunkData")

        # Drain the lines after the last hunk
        if len(self.file) >= old_file_line:
            new_file_line += self._copy_through(writer, old_file_line, len(self.file) + 1)

        self._finish(writer, no_newline_count, FileKind.ORIGINAL)

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def prepare_to_apply(self) -> None:
        """Load the file to read, take a backup if asked, and pick the output path."""
        self._load_source(self.resolve_source_path())

    def _source_kind(self) -> FileKind:
        return FileKind.MODIFIED if self.options.reverse else FileKind.ORIGINAL

    def resolve_source_path(self) -> Path:
        """Work out which file the hunks are read from and written back to.

        An explicit file always wins. Otherwise context and unified diffs
        name it in their headers (file2 in reverse, file1 otherwise); normal
        and ed diffs need the explicit file.

        Raises:
            HeaderError: If no file is given and the relevant header has no
                path and date.
            DestinationError: If a normal or ed diff comes without a file.
        """
        if self.kind in (PatchFormat.UNIFIED, PatchFormat.CONTEXT):
            return self._resolve_context_unified_path()
        if self.options.file is None:
            raise DestinationError("Could not recognize destination/output file.")
        return Path(self.options.file)

    def _resolve_context_unified_path(self) -> Path:
        if self.file1_header is not None:
            parsed = parse_header(self.file1_header)
            if parsed:
                self.file1_path, self.file1_date = parsed
        if self.file2_header is not None:
            parsed = parse_header(self.file2_header)
            if parsed:
                self.file2_path, self.file2_date = parsed

        if self.options.file is not None:
            return Path(self.options.file)

        if self.options.reverse:
            chosen_header, chosen_path = self.file2_header, self.file2_path
        else:
            chosen_header, chosen_path = self.file1_header, self.file1_path

        if chosen_path is None:
            side = "file2" if self.options.reverse else "file1"
            raise HeaderError(
                f"Could not recognize destination/output file: {side} header "
                f"{chosen_header!r} has no path and date."
            )
        return chosen_path

    def _load_source(self, source_path: Path) -> None:
        self.handle_backup(source_path)
        self.file = PatchFile.load(source_path, self._source_kind())
        self.output_path = Path(self.options.output_file) if self.options.output_file else source_path
        logger.debug("Read %d line(s) from %s as %s file",
                     len(self.file), source_path, self.file.kind.value)

    def handle_backup(self, path: Path) -> Optional[Path]:
        """Copy ``path`` to ``<name>.orig`` beside it when backups are enabled."""
        if not self.options.backup:
            return None

        if not path.is_file():
            raise BackupError(f"Path to backup is not a file: {path}")

        backup_path = backup_path_for(path)
        shutil.copyfile(path, backup_path)
        logger.debug("Backed up %s to %s", path, backup_path)
        return backup_path


_CONTEXT_NEW_ROLES = (LineRole.CONTEXT_UNCHANGED, LineRole.CONTEXT_INSERTED)
_CONTEXT_OLD_ROLES = (LineRole.CONTEXT_UNCHANGED, LineRole.CONTEXT_DELETED)


def _unified_marker_weight(previous: Optional[PatchLine]) -> int:
    """A marker after a context line means neither file ends with a newline."""
    if previous is not None and previous.role == LineRole.UNIFIED_UNCHANGED:
        return 2
    return 1
