"""Toggle Markdown formatting over a selection."""

import logging
from typing import Optional, Union
from urllib.parse import urlparse

from mdtoolbar.config import FormatOptions
from mdtoolbar.core.detector import ContextDetector
from mdtoolbar.core.lists import ListFormatter
from mdtoolbar.formatting.ir import (
    FormatKind,
    FormattingResult,
    ListStyle,
    MarkerSpan,
    TextRange,
)
from mdtoolbar.formatting.offsets import (
    Edit,
    apply_edits,
    line_at,
    map_offset,
    trim_range,
    validate_range,
)

logger = logging.getLogger(__name__)

# Every marker the formatter recognizes when removing formatting
MARKER_VARIANTS: dict[FormatKind, tuple[str, ...]] = {
    FormatKind.BOLD: ("**", "__"),
    FormatKind.ITALIC: ("*", "_"),
    FormatKind.STRIKETHROUGH: ("~~",),
    FormatKind.INLINE_CODE: ("`",),
}


class MarkdownFormatter:
    """Apply or remove Markdown formatting and track the selection.

    Each call is a pure function of its arguments: the formatter derives
    context afresh from the text it is given and never edits in place.

    Paired kinds follow one of three paths:
    1. selection inside an existing construct -> remove its markers
    2. selection partially overlapping constructs -> re-wrap the union
    3. no overlap -> wrap the selection (or insert an empty pair)
    """

    def __init__(
        self,
        options: Optional[FormatOptions] = None,
        detector: Optional[ContextDetector] = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            options: Marker preferences for new markup (defaults used if None)
            detector: Context detector to share (a new one if None)
        """
        self.options = options or FormatOptions()
        self.detector = detector or ContextDetector()
        self.lists = ListFormatter()

    def apply(
        self,
        text: str,
        selection_start: int,
        selection_end: int,
        kind: Union[FormatKind, str],
        url: Optional[str] = None,
        options: Optional[FormatOptions] = None,
    ) -> FormattingResult:
        """Toggle one kind of formatting over a selection.

        Args:
            text: Full document text
            selection_start: Selection start offset
            selection_end: Selection end offset
            kind: Formatting to toggle (FormatKind or its string value)
            url: Link destination when creating a link
            options: Per-call marker preferences overriding the instance's

        Returns:
            FormattingResult with the full new text and selection

        Raises:
            InvalidRangeError: If the offsets do not fit the text
            ValueError: If ``kind`` is not a known formatting kind
        """
        validate_range(text, selection_start, selection_end)
        kind = FormatKind(kind)
        opts = options or self.options

        if kind is FormatKind.BULLET_LIST:
            return self.lists.toggle(text, selection_start, selection_end, ListStyle.BULLET, opts)
        if kind is FormatKind.NUMBERED_LIST:
            return self.lists.toggle(text, selection_start, selection_end, ListStyle.NUMBERED, opts)
        if kind is FormatKind.LINK:
            return self._toggle_link(text, selection_start, selection_end, url)
        if "\n" in text[selection_start:selection_end]:
            return self._toggle_lines(text, selection_start, selection_end, kind, opts)
        return self._toggle_paired(text, selection_start, selection_end, kind, opts)

    def format_bold(self, text: str, selection_start: int, selection_end: int) -> FormattingResult:
        return self.apply(text, selection_start, selection_end, FormatKind.BOLD)

    def format_italic(self, text: str, selection_start: int, selection_end: int) -> FormattingResult:
        return self.apply(text, selection_start, selection_end, FormatKind.ITALIC)

    def format_strikethrough(self, text: str, selection_start: int, selection_end: int) -> FormattingResult:
        return self.apply(text, selection_start, selection_end, FormatKind.STRIKETHROUGH)

    def format_code(self, text: str, selection_start: int, selection_end: int) -> FormattingResult:
        return self.apply(text, selection_start, selection_end, FormatKind.INLINE_CODE)

    def format_link(
        self,
        text: str,
        selection_start: int,
        selection_end: int,
        url: Optional[str] = None,
    ) -> FormattingResult:
        return self.apply(text, selection_start, selection_end, FormatKind.LINK, url=url)

    def format_list(
        self,
        text: str,
        selection_start: int,
        selection_end: int,
        list_type: str = "bullet",
    ) -> FormattingResult:
        """Toggle a bullet ("bullet") or numbered ("numbered") list."""
        kind = FormatKind.NUMBERED_LIST if list_type == "numbered" else FormatKind.BULLET_LIST
        return self.apply(text, selection_start, selection_end, kind)

    # ------------------------------------------------------------------
    # Paired markers
    # ------------------------------------------------------------------

    def _toggle_paired(
        self,
        text: str,
        start: int,
        end: int,
        kind: FormatKind,
        opts: FormatOptions,
    ) -> FormattingResult:
        spans = self.detector.find_spans(text, start, end, kind)
        enclosing = [s for s in spans if s.encloses(start, end)]

        if enclosing:
            span = min(enclosing, key=lambda s: s.outer.length)
            logger.debug(
                "Removing %s markers at %d-%d", kind.value, span.outer.start, span.outer.end
            )
            edits = self._unwrap_edits(span)
            return self._result(text, edits, start, end)

        if spans:
            logger.debug("Extending %s over %d span(s)", kind.value, len(spans))
            edits, bounds = self._union_edits(text, start, end, spans, kind, opts)
            return self._result(text, edits, bounds.start, bounds.end)

        hugging = self._hugging_pair(text, start, end, kind)
        if hugging is not None:
            logger.debug("Removing empty %s pair at %d", kind.value, hugging.opening.start)
            return self._result(text, self._unwrap_edits(hugging), start, end)

        bounds = trim_range(text, start, end)
        logger.debug("Wrapping %d-%d in %s", bounds.start, bounds.end, kind.value)
        edits = self._wrap_edits(bounds, self._marker_for(text, bounds, kind, opts))
        return self._result(text, edits, bounds.start, bounds.end)

    def _toggle_lines(
        self,
        text: str,
        start: int,
        end: int,
        kind: FormatKind,
        opts: FormatOptions,
    ) -> FormattingResult:
        """Toggle a paired kind over a selection spanning several lines.

        Markers never cross a newline, so each line's share of the
        selection is handled on its own. If every share already lies
        inside the formatting it is removed everywhere; otherwise each share is
        wrapped or extended.
        """
        segments: list[TextRange] = []
        pos = start
        while pos <= end:
            line = line_at(text, pos)
            segment = trim_range(text, max(start, line.start), min(end, line.end))
            if segment.slice(text).strip():
                segments.append(segment)
            pos = line.end + 1

        if not segments:
            return self._toggle_paired(text, start, end, kind, opts)

        spans = self.detector.scan_window(text, start, end)
        touched = [
            [s for s in spans if s.kind is kind and s.touches(seg.start, seg.end)]
            for seg in segments
        ]
        edits: list[Edit] = []

        if all(
            any(s.encloses(seg.start, seg.end) for s in found)
            for seg, found in zip(segments, touched)
        ):
            logger.debug("Removing %s markers across %d line(s)", kind.value, len(segments))
            for found in touched:
                for span in found:
                    edits.extend(self._unwrap_edits(span))
            return self._result(text, edits, start, end)

        logger.debug("Applying %s across %d line(s)", kind.value, len(segments))
        for segment, found in zip(segments, touched):
            if not found:
                marker = self._marker_for(text, segment, kind, opts)
                edits.extend(self._wrap_edits(segment, marker))
            elif not any(s.encloses(segment.start, segment.end) for s in found):
                edits.extend(self._union_edits(text, segment.start, segment.end, found, kind, opts)[0])
        return self._result(text, edits, segments[0].start, segments[-1].end)

    def _unwrap_edits(self, span: MarkerSpan) -> list[Edit]:
        return [
            Edit(span.opening.start, span.opening.end),
            Edit(span.closing.start, span.closing.end),
        ]

    def _wrap_edits(self, bounds: TextRange, marker: str) -> list[Edit]:
        return [
            Edit(bounds.start, bounds.start, marker, push=True),
            Edit(bounds.end, bounds.end, marker),
        ]

    def _union_edits(
        self,
        text: str,
        start: int,
        end: int,
        spans: list[MarkerSpan],
        kind: FormatKind,
        opts: FormatOptions,
    ) -> tuple[list[Edit], TextRange]:
        """Replace several overlapping spans by one covering their union.

        The union keeps the marker style of the first existing span.
        """
        union_start = min([start] + [s.outer.start for s in spans])
        union_end = max([end] + [s.outer.end for s in spans])
        bounds = trim_range(text, union_start, union_end)
        marker = spans[0].marker
        if marker[0] == "_" and self._is_intraword(text, bounds):
            marker = "*" * len(marker)

        edits: list[Edit] = []
        for span in spans:
            edits.extend(self._unwrap_edits(span))
        edits.extend(self._wrap_edits(bounds, marker))
        return edits, bounds

    def _hugging_pair(self, text: str, start: int, end: int, kind: FormatKind) -> Optional[MarkerSpan]:
        """Find an empty or blank pair of markers sitting right around the selection.

        Such pairs (e.g. ``****`` after inserting bold at a caret) are not
        emphasis to the scanner but still need to toggle back off. The runs
        on both sides must match in width; a single-character marker only
        hugs an odd run, so italic inside ``****`` nests instead of
        splitting the bold pair.
        """
        if text[start:end].strip():
            return None
        for marker in MARKER_VARIANTS[kind]:
            width = len(marker)
            char = marker[0]
            left = start
            while left > 0 and text[left - 1] == char:
                left -= 1
            right = end
            while right < len(text) and text[right] == char:
                right += 1
            run = start - left
            if run < width or run != right - end:
                continue
            if width == 1 and run % 2 == 0:
                continue
            return MarkerSpan(
                kind=kind,
                marker=marker,
                opening=TextRange(start - width, start),
                closing=TextRange(end, end + width),
            )
        return None

    def _marker_for(self, text: str, bounds: TextRange, kind: FormatKind, opts: FormatOptions) -> str:
        """Pick the marker for new markup; ``_`` never goes intraword."""
        if kind is FormatKind.BOLD:
            marker = opts.bold_marker
        elif kind is FormatKind.ITALIC:
            marker = opts.italic_marker
        else:
            return MARKER_VARIANTS[kind][0]
        if marker[0] == "_" and self._is_intraword(text, bounds):
            return "*" * len(marker)
        return marker

    def _is_intraword(self, text: str, bounds: TextRange) -> bool:
        before = text[bounds.start - 1] if bounds.start > 0 else " "
        after = text[bounds.end] if bounds.end < len(text) else " "
        return before.isalnum() or after.isalnum()

    def _result(self, text: str, edits: list[Edit], start: int, end: int) -> FormattingResult:
        return FormattingResult(
            text=apply_edits(text, edits),
            selection_start=map_offset(start, edits),
            selection_end=map_offset(end, edits),
        )

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _toggle_link(
        self, text: str, start: int, end: int, url: Optional[str]
    ) -> FormattingResult:
        spans = self.detector.find_spans(text, start, end, FormatKind.LINK)
        if spans:
            enclosing = [s for s in spans if s.encloses(start, end)]
            span = enclosing[0] if enclosing else spans[0]
            logger.debug("Removing link to %s", span.url)
            edits = self._unwrap_edits(span)
            inner = span.inner
            return FormattingResult(
                text=apply_edits(text, edits),
                selection_start=map_offset(inner.start, edits),
                selection_end=map_offset(inner.end, edits),
                extracted_url=span.url,
            )

        url = (url or "").strip()
        if not url:
            return FormattingResult(
                text=text,
                selection_start=start,
                selection_end=end,
                needs_url_input=True,
            )

        # link text cannot span lines
        end = min(end, line_at(text, start).end)
        bounds = trim_range(text, start, end)
        edits = [
            Edit(bounds.start, bounds.start, "[", push=True),
            Edit(bounds.end, bounds.end, f"]({url})"),
        ]
        return self._result(text, edits, bounds.start, bounds.end)

    # ------------------------------------------------------------------
    # Snippet helpers
    # ------------------------------------------------------------------

    def is_valid_url(self, url: str) -> bool:
        """Check if a URL is usable as a link destination.

        Accepts absolute URLs, relative paths and anchors, and bare
        host-like strings such as ``example.com``.
        """
        url = url.strip()
        if not url or any(c.isspace() for c in url):
            return False
        parsed = urlparse(url)
        if parsed.scheme and (parsed.netloc or parsed.scheme in ("mailto", "tel")):
            return True
        return url[0] in "/#." or url[0].isalnum()

    def create_link(self, text: str, url: str) -> str:
        return f"[{text}]({url})"

    def create_image(self, alt_text: str, url: str) -> str:
        return f"![{alt_text}]({url})"

    def create_code_block(self, language: str = "") -> str:
        return f"```{language}\n\n```"

    def wrap_in_code_block(self, text: str, language: str = "") -> str:
        return f"```{language}\n{text}\n```"
