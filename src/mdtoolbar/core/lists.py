"""Line-oriented list toggling."""

import logging
from collections import Counter
from typing import Optional

from mdtoolbar.config import FormatOptions
from mdtoolbar.formatting.ir import FormattingResult, ListItem, ListStyle, TextRange
from mdtoolbar.formatting.offsets import (
    Edit,
    apply_edits,
    is_blank,
    iter_lines,
    line_at,
    map_offset,
)
from mdtoolbar.formatting.scanner import parse_list_line

logger = logging.getLogger(__name__)


def selected_lines(text: str, start: int, end: int) -> list[TextRange]:
    """Get every line a selection touches.

    A selection that ends at the very start of a line does not include
    that line.
    """
    first = line_at(text, start)
    if end > start and text[end - 1] == "\n":
        last = line_at(text, end - 1)
    else:
        last = line_at(text, end)
    return list(iter_lines(text, TextRange(first.start, last.end)))


def _indentation(text: str, line: TextRange) -> tuple[int, int]:
    """Return (offset of first non-blank character, indent width in columns)."""
    pos = line.start
    width = 0
    while pos < line.end and text[pos] in " \t":
        width += 4 - width % 4 if text[pos] == "\t" else 1
        pos += 1
    return pos, width


class ListFormatter:
    """Toggle bullet and numbered list markers over whole lines."""

    def toggle(
        self,
        text: str,
        selection_start: int,
        selection_end: int,
        style: ListStyle,
        options: FormatOptions,
    ) -> FormattingResult:
        """Add, normalize or remove list markers on the selected lines.

        Args:
            text: Full document text
            selection_start: Selection start offset
            selection_end: Selection end offset
            style: Requested list style (bullet or numbered)
            options: Marker preferences

        Returns:
            FormattingResult with the selection mapped onto the new text
        """
        lines = [
            line
            for line in selected_lines(text, selection_start, selection_end)
            if not is_blank(text, line)
        ]
        items = [parse_list_line(text, line) for line in lines]

        if not lines:
            # only blank lines: start a fresh item on the caret line
            lines = [line_at(text, selection_start)]
            items = [None]
            edits = self._add_markers(text, lines, items, style, options)
        elif self._is_uniform(items, style):
            logger.debug("Removing %s markers from %d line(s)", style.value, len(lines))
            edits = [
                Edit(item.marker_start, item.content_start)
                for item in items
                if item is not None
            ]
        else:
            logger.debug("Applying %s markers to %d line(s)", style.value, len(lines))
            edits = self._add_markers(text, lines, items, style, options)

        return FormattingResult(
            text=apply_edits(text, edits),
            selection_start=map_offset(selection_start, edits),
            selection_end=map_offset(selection_end, edits),
        )

    def _is_uniform(self, items: list[Optional[ListItem]], style: ListStyle) -> bool:
        """Check if every line is already an item of ``style`` with one marker."""
        if any(item is None or item.style is not style for item in items):
            return False
        if style is ListStyle.BULLET:
            return len({item.marker for item in items if item is not None}) == 1
        return True

    def _add_markers(
        self,
        text: str,
        lines: list[TextRange],
        items: list[Optional[ListItem]],
        style: ListStyle,
        options: FormatOptions,
    ) -> list[Edit]:
        delimiter = self._majority_delimiter(items)
        counters: dict[int, int] = {}
        edits: list[Edit] = []

        for line, item in zip(lines, items):
            content, indent = _indentation(text, line)
            if style is ListStyle.NUMBERED:
                # numbering restarts below each deeper indentation level
                counters = {k: v for k, v in counters.items() if k <= indent}
                counters[indent] = counters.get(indent, 0) + 1
                marker = f"{counters[indent]}{delimiter} "
            else:
                marker = f"{options.preferred_list_marker} "

            if item is None:
                edits.append(Edit(content, content, marker, push=True))
            elif text[item.marker_start : item.content_start] != marker:
                edits.append(Edit(item.marker_start, item.content_start, marker))
        return edits

    def _majority_delimiter(self, items: list[Optional[ListItem]]) -> str:
        counts = Counter(
            item.delimiter
            for item in items
            if item is not None and item.style is ListStyle.NUMBERED
        )
        if not counts:
            return "."
        return max(counts, key=lambda d: (counts[d], d == "."))


def toggle_task(line: str) -> str:
    """Toggle a ``- [ ]`` task box on a single line of text.

    - ``- [ ] item`` / ``- [x] item`` -> ``item``
    - ``- item`` -> ``- [ ] item``
    - ``item`` -> ``- [ ] item``
    Indentation is preserved.
    """
    item = parse_list_line(line, TextRange(0, len(line)))
    if item is not None and item.task_checked is not None:
        rest = line[item.content_start + 3 :].lstrip(" \t")
        return line[: item.marker_start] + rest
    if item is not None:
        prefix = line[: item.marker_start] + item.marker
        return prefix + " [ ] " + line[item.content_start :]
    indent = len(line) - len(line.lstrip(" \t"))
    return line[:indent] + "- [ ] " + line[indent:]
