"""Line ranges for the four diff dialects.

Contains:
- Range: A line interval whose end bound is interpreted per format
"""

from dataclasses import dataclass

from hunkpatch.patch.exceptions import RangeError
from hunkpatch.patch.formats import EditScriptHunkKind, PatchFormat


def _parse_numbers(text: str, source: str) -> list[int]:
    """Decode a comma-separated list of non-negative line numbers."""
    numbers = []
    for token in text.split(","):
        if not (token.isascii() and token.isdigit()):
            raise RangeError(f"Invalid range: {source!r}")
        numbers.append(int(token))
    return numbers


@dataclass(frozen=True)
class Range:
    """A line interval tagged with the diff format it came from.

    For unified ranges the stored ``end`` is a line count rather than an
    absolute line, so ``start <= end`` is only enforced for the other formats.
    """

    start: int
    count_or_end: int
    format: PatchFormat

    def __post_init__(self) -> None:
        if self.format != PatchFormat.UNIFIED and self.start > self.count_or_end:
            raise ValueError(
                "Range creation failed! start should be less than or equal to end."
            )

    @property
    def end(self) -> int:
        """Last line of the range in absolute terms (start + count for unified)."""
        if self.format == PatchFormat.NONE:
            raise ValueError("Range should belong to one of the four formats!")
        if self.format == PatchFormat.UNIFIED:
            return self.start + self.count_or_end
        return self.count_or_end

    @property
    def count(self) -> int:
        """Stored second bound: a count for unified ranges, an end line otherwise."""
        return self.count_or_end

    @classmethod
    def from_unified(cls, text: str) -> "Range":
        """Decode a unified range such as ``-3,5`` or ``+7``.

        A missing count means one line, as in ``@@ -3 +3 @@``.
        """
        numbers = _parse_numbers(text.strip().lstrip("+-"), text)
        if len(numbers) == 1:
            return cls(numbers[0], 1, PatchFormat.UNIFIED)
        if len(numbers) == 2:
            return cls(numbers[0], numbers[1], PatchFormat.UNIFIED)
        raise RangeError(f"Invalid unified range: {text!r}")

    @classmethod
    def from_normal(cls, text: str) -> "Range":
        """Decode one side of a normal-format header, ``N`` or ``N,M``."""
        numbers = _parse_numbers(text.strip(), text)
        if len(numbers) == 1:
            return cls(numbers[0], numbers[0], PatchFormat.NORMAL)
        if len(numbers) == 2 and numbers[0] <= numbers[1]:
            return cls(numbers[0], numbers[1], PatchFormat.NORMAL)
        raise RangeError(f"Invalid normal range: {text!r}")

    @classmethod
    def from_context(cls, line: str) -> "Range":
        """Decode a context range line such as ``*** 3,5 ****`` or ``--- 7 ----``.

        A bare ``3,5`` is accepted as well.
        """
        tokens = line.split(" ")
        if len(tokens) == 1:
            range_text = tokens[0]
        elif len(tokens) == 3:
            range_text = tokens[1]
        else:
            raise RangeError(f"Invalid context range: {line!r}")

        range_numbers = range_text.split(",")
        if len(range_numbers) not in (1, 2):
            raise RangeError(f"Invalid context range: {line!r}")

        numbers = _parse_numbers(range_text, line)
        if len(numbers) == 1:
            return cls(numbers[0], numbers[0], PatchFormat.CONTEXT)
        if numbers[0] > numbers[1]:
            raise RangeError(f"Invalid context range: {line!r}")
        return cls(numbers[0], numbers[1], PatchFormat.CONTEXT)

    @staticmethod
    def edit_script_kind(line: str) -> EditScriptHunkKind:
        """Decode the trailing command letter of an ed-script header."""
        stripped = line.strip()
        if not stripped:
            raise RangeError("Invalid ed hunk range: empty line")
        try:
            return EditScriptHunkKind(stripped[-1])
        except ValueError:
            raise RangeError(f"Invalid ed hunk range: {line!r}")

    @classmethod
    def from_edit_script(cls, line: str) -> "Range":
        """Decode an ed-script header such as ``4,6d`` or ``10a``."""
        stripped = line.strip()
        numeric_strings = stripped[:-1].split(",")

        if len(numeric_strings) not in (1, 2):
            raise RangeError(f"Invalid ed hunk range: {line!r}")

        errors = [
            f"invalid digit in {token!r}" for token in numeric_strings
            if not (token.isascii() and token.isdigit())
        ]
        if errors:
            raise RangeError(f"Invalid ed hunk range {line!r}: " + "; ".join(errors))

        numbers = [int(token) for token in numeric_strings]
        if len(numbers) == 1:
            return cls(numbers[0], numbers[0], PatchFormat.EDIT_SCRIPT)
        if numbers[0] > numbers[1]:
            raise RangeError(f"Invalid ed hunk range: {line!r}")
        return cls(numbers[0], numbers[1], PatchFormat.EDIT_SCRIPT)
