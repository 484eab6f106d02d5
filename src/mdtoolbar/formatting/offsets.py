"""Offset, line and edit bookkeeping shared by the detector and formatter."""

from dataclasses import dataclass
from typing import Iterator, Sequence

from mdtoolbar.formatting.ir import TextRange


class InvalidRangeError(ValueError):
    """Selection offsets are out of bounds or reversed."""

    def __init__(self, start: int, end: int, length: int) -> None:
        super().__init__(
            f"Invalid selection ({start}, {end}) for text of length {length}"
        )
        self.start = start
        self.end = end
        self.length = length


def validate_range(text: str, start: int, end: int) -> None:
    """Raise InvalidRangeError unless 0 <= start <= end <= len(text)."""
    if not (0 <= start <= end <= len(text)):
        raise InvalidRangeError(start, end, len(text))


def line_at(text: str, offset: int) -> TextRange:
    """Get the line containing an offset, without its newline.

    An offset sitting on a newline belongs to the line that newline ends.
    """
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return TextRange(start, end)


def iter_lines(text: str, window: TextRange) -> Iterator[TextRange]:
    """Yield the range of every line inside a window."""
    pos = window.start
    while True:
        end = text.find("\n", pos, window.end)
        if end == -1:
            yield TextRange(pos, window.end)
            return
        yield TextRange(pos, end)
        pos = end + 1


def is_blank(text: str, line: TextRange) -> bool:
    """Check if a line holds nothing but whitespace."""
    return not line.slice(text).strip()


def block_bounds(text: str, start: int, end: int) -> TextRange:
    """Get the blank-line-delimited block(s) touched by a selection.

    The block runs from the first line after the nearest blank line above
    ``start`` to the last line before the nearest blank line below ``end``.
    """
    first = line_at(text, start)
    while first.start > 0:
        previous = line_at(text, first.start - 1)
        if is_blank(text, previous):
            break
        first = previous

    last = line_at(text, end)
    while last.end < len(text):
        following = line_at(text, last.end + 1)
        if is_blank(text, following):
            break
        last = following

    return TextRange(first.start, last.end)


def trim_range(text: str, start: int, end: int) -> TextRange:
    """Shrink a range so it neither starts nor ends with whitespace.

    A range holding only whitespace is returned unchanged.
    """
    left, right = start, end
    while left < right and text[left].isspace():
        left += 1
    while right > left and text[right - 1].isspace():
        right -= 1
    if left == right:
        return TextRange(start, end)
    return TextRange(left, right)


@dataclass(frozen=True)
class Edit:
    """Replace text[start:end] with ``replacement``.

    Attributes:
        start: First replaced offset
        end: Offset just past the replaced text (== start for insertions)
        replacement: New text
        push: For insertions, move offsets sitting on ``start`` past the
            inserted text instead of leaving them in front of it
    """

    start: int
    end: int
    replacement: str = ""
    push: bool = False

    @property
    def delta(self) -> int:
        return len(self.replacement) - (self.end - self.start)

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


def _ordered(edits: Sequence[Edit]) -> list[Edit]:
    # insertions go before a deletion starting at the same offset
    return sorted(edits, key=lambda e: (e.start, not e.is_insertion))


def apply_edits(text: str, edits: Sequence[Edit]) -> str:
    """Apply non-overlapping edits to text in one pass."""
    parts: list[str] = []
    pos = 0
    for edit in _ordered(edits):
        if edit.start < pos:
            raise ValueError(f"Overlapping edit at offset {edit.start}")
        parts.append(text[pos : edit.start])
        parts.append(edit.replacement)
        pos = edit.end
    parts.append(text[pos:])
    return "".join(parts)


def map_offset(offset: int, edits: Sequence[Edit]) -> int:
    """Map an offset in the original text to the edited text.

    Offsets inside a replaced region land at the matching position of the
    replacement, clamped to its end. Offsets at an insertion point stay in
    front of it unless the insertion is marked ``push``.
    """
    delta = 0
    for edit in _ordered(edits):
        if edit.is_insertion:
            if edit.start < offset or (edit.start == offset and edit.push):
                delta += edit.delta
                continue
            break
        if edit.end <= offset:
            delta += edit.delta
            continue
        if edit.start < offset:
            inside = min(offset - edit.start, len(edit.replacement))
            return edit.start + delta + inside
        break
    return offset + delta
