"""Context detection: which constructs surround a cursor or selection."""

import logging
from typing import Optional

from mdtoolbar.formatting.ir import (
    FormatKind,
    ListItem,
    MarkdownContext,
    MarkerSpan,
    TextRange,
)
from mdtoolbar.formatting.offsets import (
    block_bounds,
    iter_lines,
    line_at,
    validate_range,
)
from mdtoolbar.formatting.scanner import (
    InlineScanner,
    advance_fence,
    fence_marker,
    open_fence_before,
    parse_list_line,
)

logger = logging.getLogger(__name__)


class ContextDetector:
    """Classify the Markdown constructs around a selection.

    The detector keeps no document state between calls.
    """

    def __init__(self, scanner: Optional[InlineScanner] = None) -> None:
        self.scanner = scanner or InlineScanner()

    def detect(self, text: str, selection_start: int, selection_end: int) -> MarkdownContext:
        """Detect formatting context for a selection.

        Args:
            text: Full document text
            selection_start: Selection start offset
            selection_end: Selection end offset (equal to start for a caret)

        Returns:
            MarkdownContext with one entry per construct kind

        Raises:
            InvalidRangeError: If the offsets do not fit the text
        """
        validate_range(text, selection_start, selection_end)

        window = block_bounds(text, selection_start, selection_end)
        fence = open_fence_before(text, window.start)
        if self._fenced_at(text, window, fence, selection_start):
            return MarkdownContext(in_code_block=True)

        spans = self._scan(text, window, fence)
        found: dict[FormatKind, MarkerSpan] = {}
        for kind in (
            FormatKind.BOLD,
            FormatKind.ITALIC,
            FormatKind.STRIKETHROUGH,
            FormatKind.INLINE_CODE,
            FormatKind.LINK,
        ):
            span = self._pick(
                self._touching(spans, kind, selection_start, selection_end),
                selection_start,
                selection_end,
            )
            if span is not None:
                found[kind] = span

        link = found.get(FormatKind.LINK)
        return MarkdownContext(
            bold=found.get(FormatKind.BOLD),
            italic=found.get(FormatKind.ITALIC),
            strikethrough=found.get(FormatKind.STRIKETHROUGH),
            code=found.get(FormatKind.INLINE_CODE),
            link=link,
            link_text=link.inner.slice(text) if link else None,
            list_item=self.list_item_at(text, selection_start),
        )

    def find_spans(
        self, text: str, selection_start: int, selection_end: int, kind: FormatKind
    ) -> list[MarkerSpan]:
        """Get every span of one kind touching the selection, in order.

        Raises:
            InvalidRangeError: If the offsets do not fit the text
        """
        validate_range(text, selection_start, selection_end)
        window = block_bounds(text, selection_start, selection_end)
        fence = open_fence_before(text, window.start)
        if self._fenced_at(text, window, fence, selection_start):
            return []
        spans = self._scan(text, window, fence)
        return self._touching(spans, kind, selection_start, selection_end)

    def scan_window(self, text: str, selection_start: int, selection_end: int) -> list[MarkerSpan]:
        """Tokenize every line of the block(s) around a selection.

        Lines inside fenced code blocks, and the fence lines themselves,
        contribute nothing.

        Raises:
            InvalidRangeError: If the offsets do not fit the text
        """
        validate_range(text, selection_start, selection_end)
        window = block_bounds(text, selection_start, selection_end)
        return self._scan(text, window, open_fence_before(text, window.start))

    def _fenced_at(
        self, text: str, window: TextRange, fence: Optional[str], offset: int
    ) -> bool:
        """Check if ``offset`` is in a fence, given the fence open at ``window.start``."""
        caret_line = line_at(text, offset)
        for line in iter_lines(text, window):
            if line.start == caret_line.start:
                return fence is not None or fence_marker(text, line) is not None
            fence = advance_fence(text, line, fence)
        return fence is not None

    def _scan(self, text: str, window: TextRange, fence: Optional[str]) -> list[MarkerSpan]:
        spans: list[MarkerSpan] = []
        for line in iter_lines(text, window):
            if fence is not None or fence_marker(text, line) is not None:
                fence = advance_fence(text, line, fence)
                continue
            item = parse_list_line(text, line)
            start = item.content_start if item else line.start
            spans.extend(self.scanner.scan_line(text, line, start))
        logger.debug(
            "Scanned window %d-%d: %d span(s)", window.start, window.end, len(spans)
        )
        return spans

    def list_item_at(self, text: str, offset: int) -> Optional[ListItem]:
        """Get the list item on the line containing ``offset``, if any."""
        return parse_list_line(text, line_at(text, offset))

    def line_at(self, text: str, offset: int) -> TextRange:
        """Get the range of the line containing ``offset``."""
        validate_range(text, offset, offset)
        return line_at(text, offset)

    def _touching(
        self, spans: list[MarkerSpan], kind: FormatKind, start: int, end: int
    ) -> list[MarkerSpan]:
        adjacent = kind is FormatKind.LINK
        return [s for s in spans if s.kind is kind and s.touches(start, end, adjacent)]

    def _pick(self, candidates: list[MarkerSpan], start: int, end: int) -> Optional[MarkerSpan]:
        """Prefer the innermost span enclosing the selection, else the first."""
        if not candidates:
            return None
        enclosing = [s for s in candidates if s.encloses(start, end)]
        if enclosing:
            return min(enclosing, key=lambda s: s.outer.length)
        return candidates[0]
