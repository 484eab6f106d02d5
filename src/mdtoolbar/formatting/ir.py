"""Intermediate Representation for formatting context and edits.

This module defines the data structures shared by the context detector
and the formatter. Everything here is immutable and built per call: the
engine never keeps document state between invocations.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class FormatKind(str, Enum):
    """Formatting commands understood by the formatter."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inlineCode"
    LINK = "link"
    BULLET_LIST = "bulletList"
    NUMBERED_LIST = "numberedList"

    @property
    def is_paired(self) -> bool:
        """Check if this kind is delimited by an opening and closing marker."""
        return self in PAIRED_KINDS

    @property
    def is_list(self) -> bool:
        """Check if this kind operates on whole lines."""
        return self in (FormatKind.BULLET_LIST, FormatKind.NUMBERED_LIST)


PAIRED_KINDS = (
    FormatKind.BOLD,
    FormatKind.ITALIC,
    FormatKind.STRIKETHROUGH,
    FormatKind.INLINE_CODE,
)


class ListStyle(str, Enum):
    """Kind of list marker found on a line."""

    BULLET = "bullet"
    NUMBERED = "numbered"
    NONE = "none"


@dataclass(frozen=True)
class TextRange:
    """A half-open span of character offsets [start, end).

    Attributes:
        start: Offset of the first character
        end: Offset just past the last character
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, offset: int) -> bool:
        """Check if an offset lies within the range (edges included)."""
        return self.start <= offset <= self.end

    def covers(self, start: int, end: int) -> bool:
        """Check if [start, end] lies entirely within this range."""
        return self.start <= start and end <= self.end

    def overlaps(self, start: int, end: int) -> bool:
        """Check for a strict intersection with [start, end).

        Ranges that merely touch at an edge do not overlap.
        """
        return start < self.end and end > self.start

    def slice(self, text: str) -> str:
        """Return the text covered by this range."""
        return text[self.start : self.end]


@dataclass(frozen=True)
class MarkerSpan:
    """A matched pair of markers and the content between them.

    For links the opening marker is ``[`` and the closing marker is the
    whole ``](url)`` tail.

    Attributes:
        kind: Which construct the markers delimit
        marker: Literal opening marker text (e.g. "**", "_", "`", "[")
        opening: Range of the opening marker
        closing: Range of the closing marker
        url: Link destination (links only)
    """

    kind: FormatKind
    marker: str
    opening: TextRange
    closing: TextRange
    url: Optional[str] = None

    @property
    def inner(self) -> TextRange:
        """Range of the content between the markers."""
        return TextRange(self.opening.end, self.closing.start)

    @property
    def outer(self) -> TextRange:
        """Range of the construct including both markers."""
        return TextRange(self.opening.start, self.closing.end)

    def touches(self, start: int, end: int, adjacent: bool = False) -> bool:
        """Check if a selection is inside or overlapping this span.

        A caret counts only when strictly between the outer edges unless
        ``adjacent`` is set, in which case sitting on an edge counts too.
        A non-empty selection must strictly intersect the outer range.
        """
        outer = self.outer
        if start == end:
            if adjacent:
                return outer.start <= start <= outer.end
            return outer.start < start < outer.end
        return outer.overlaps(start, end)

    def encloses(self, start: int, end: int) -> bool:
        """Check if the selection lies entirely within the outer range."""
        return self.outer.covers(start, end)


@dataclass(frozen=True)
class ListItem:
    """A list item recognized at the start of a line.

    Attributes:
        line: Range of the whole line (newline excluded)
        indent: Width of the leading whitespace in columns (tab = 4)
        marker_start: Offset of the first marker character
        marker: Literal marker ("-", "*", "+", "1.", "3)")
        style: Bullet or numbered
        content_start: Offset where the item content begins
        number: Item number for numbered lists
        task_checked: Checkbox state, or None when the item has no box
    """

    line: TextRange
    indent: int
    marker_start: int
    marker: str
    style: ListStyle
    content_start: int
    number: Optional[int] = None
    task_checked: Optional[bool] = None

    @property
    def marker_range(self) -> TextRange:
        """Range of the marker plus the whitespace that follows it."""
        return TextRange(self.marker_start, self.content_start)

    @property
    def delimiter(self) -> Optional[str]:
        """The "." or ")" after the number of a numbered item."""
        if self.style is ListStyle.NUMBERED:
            return self.marker[-1]
        return None


@dataclass(frozen=True)
class MarkdownContext:
    """Formatting state around a cursor or selection.

    Each attribute holds the matching span (or list item) when the
    selection is inside or overlapping that construct, otherwise None.
    """

    bold: Optional[MarkerSpan] = None
    italic: Optional[MarkerSpan] = None
    strikethrough: Optional[MarkerSpan] = None
    code: Optional[MarkerSpan] = None
    link: Optional[MarkerSpan] = None
    link_text: Optional[str] = None
    list_item: Optional[ListItem] = None
    in_code_block: bool = False

    @property
    def is_bold(self) -> bool:
        return self.bold is not None

    @property
    def is_italic(self) -> bool:
        return self.italic is not None

    @property
    def is_strikethrough(self) -> bool:
        return self.strikethrough is not None

    @property
    def is_code(self) -> bool:
        return self.code is not None

    @property
    def is_link(self) -> bool:
        return self.link is not None

    @property
    def is_list(self) -> bool:
        return self.list_item is not None

    @property
    def is_task(self) -> bool:
        return self.list_item is not None and self.list_item.task_checked is not None

    @property
    def bold_range(self) -> Optional[TextRange]:
        return self.bold.inner if self.bold else None

    @property
    def italic_range(self) -> Optional[TextRange]:
        return self.italic.inner if self.italic else None

    @property
    def strikethrough_range(self) -> Optional[TextRange]:
        return self.strikethrough.inner if self.strikethrough else None

    @property
    def code_range(self) -> Optional[TextRange]:
        return self.code.inner if self.code else None

    @property
    def link_range(self) -> Optional[TextRange]:
        return self.link.inner if self.link else None

    @property
    def link_url(self) -> Optional[str]:
        return self.link.url if self.link else None

    @property
    def list_type(self) -> ListStyle:
        return self.list_item.style if self.list_item else ListStyle.NONE

    @property
    def list_marker(self) -> Optional[str]:
        return self.list_item.marker if self.list_item else None

    @property
    def list_indent(self) -> int:
        return self.list_item.indent if self.list_item else 0

    def span_for(self, kind: FormatKind) -> Optional[MarkerSpan]:
        """Get the span recorded for a paired or link kind."""
        return {
            FormatKind.BOLD: self.bold,
            FormatKind.ITALIC: self.italic,
            FormatKind.STRIKETHROUGH: self.strikethrough,
            FormatKind.INLINE_CODE: self.code,
            FormatKind.LINK: self.link,
        }.get(kind)

    def to_dict(self) -> dict:
        """Convert to plain data suitable for JSON output."""
        data = asdict(self)
        data.update(
            is_bold=self.is_bold,
            is_italic=self.is_italic,
            is_strikethrough=self.is_strikethrough,
            is_code=self.is_code,
            is_link=self.is_link,
            is_list=self.is_list,
            is_task=self.is_task,
            list_type=self.list_type.value,
        )
        return data


@dataclass(frozen=True)
class FormattingResult:
    """Outcome of a formatting command.

    Attributes:
        text: Full replacement document text
        selection_start: New selection start in ``text``
        selection_end: New selection end in ``text``
        extracted_url: URL of a removed link (link removal only)
        needs_url_input: Set when a link must be created but no URL was given
    """

    text: str
    selection_start: int
    selection_end: int
    extracted_url: Optional[str] = None
    needs_url_input: bool = False

    @property
    def selection(self) -> TextRange:
        return TextRange(self.selection_start, self.selection_end)

    @property
    def selected_text(self) -> str:
        return self.text[self.selection_start : self.selection_end]
