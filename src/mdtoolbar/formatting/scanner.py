"""Explicit scanners for inline markers, list lines and code fences.

Every scan works on a single line and walks it character by character.
"""

from dataclasses import dataclass
from typing import Optional

from mdtoolbar.formatting.ir import (
    FormatKind,
    ListItem,
    ListStyle,
    MarkerSpan,
    TextRange,
)
from mdtoolbar.formatting.offsets import iter_lines, line_at

DIGITS = "0123456789"
BULLET_MARKERS = "-*+"
EMPHASIS_CHARS = "*_~"
ASCII_PUNCTUATION = "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"

# Stand-in for characters hidden by an earlier pass (code spans, link tails).
# It is neither whitespace nor alphanumeric, so it flanks like punctuation.
OPAQUE = "\x00"


def is_thematic_break(line_text: str) -> bool:
    """Check if a line is a horizontal rule such as ``---`` or ``* * *``."""
    chars = line_text.replace(" ", "").replace("\t", "")
    return len(chars) >= 3 and chars[0] in "-*_" and chars == chars[0] * len(chars)


def parse_list_line(text: str, line: TextRange) -> Optional[ListItem]:
    """Recognize a list item at the start of a line.

    Args:
        text: Full document text
        line: Range of the line to inspect

    Returns:
        ListItem describing the marker, or None if the line is not an item
    """
    pos = line.start
    indent = 0
    while pos < line.end and text[pos] in " \t":
        indent += 4 - indent % 4 if text[pos] == "\t" else 1
        pos += 1

    if pos >= line.end or is_thematic_break(line.slice(text)):
        return None

    first = text[pos]
    number: Optional[int] = None
    if first in BULLET_MARKERS:
        marker_end = pos + 1
        style = ListStyle.BULLET
    elif first in DIGITS:
        end = pos
        while end < line.end and text[end] in DIGITS:
            end += 1
        if end - pos > 9 or end >= line.end or text[end] not in ".)":
            return None
        number = int(text[pos:end])
        marker_end = end + 1
        style = ListStyle.NUMBERED
    else:
        return None

    if marker_end < line.end and text[marker_end] not in " \t":
        return None

    content = marker_end
    while content < line.end and text[content] in " \t":
        content += 1

    task_checked: Optional[bool] = None
    box = text[content : content + 3]
    if box in ("[ ]", "[x]", "[X]") and (
        content + 3 == line.end or text[content + 3] in " \t"
    ):
        task_checked = box != "[ ]"

    return ListItem(
        line=line,
        indent=indent,
        marker_start=pos,
        marker=text[pos:marker_end],
        style=style,
        content_start=content,
        number=number,
        task_checked=task_checked,
    )


def fence_marker(text: str, line: TextRange) -> Optional[str]:
    """Get the ``` or ~~~ run opening a fence line, or None."""
    raw = line.slice(text)
    stripped = raw.lstrip(" ")
    if len(raw) - len(stripped) > 3 or not stripped:
        return None
    char = stripped[0]
    if char not in "`~":
        return None
    count = len(stripped) - len(stripped.lstrip(char))
    if count < 3:
        return None
    if char == "`" and "`" in stripped[count:]:
        return None
    return char * count


def _closes_fence(text: str, line: TextRange, fence: str) -> bool:
    marker = fence_marker(text, line)
    if marker is None or marker[0] != fence[0] or len(marker) < len(fence):
        return False
    rest = line.slice(text).strip()[len(marker):]
    return not rest.strip()


def advance_fence(text: str, line: TextRange, fence: Optional[str]) -> Optional[str]:
    """Return the fence state after a line, given the state before it."""
    if fence is None:
        return fence_marker(text, line)
    if _closes_fence(text, line, fence):
        return None
    return fence


def open_fence_before(text: str, offset: int) -> Optional[str]:
    """Get the fence left open by all lines before the line at ``offset``."""
    line_start = line_at(text, offset).start
    if line_start == 0:
        return None
    fence: Optional[str] = None
    for line in iter_lines(text, TextRange(0, line_start - 1)):
        fence = advance_fence(text, line, fence)
    return fence


@dataclass
class _Delimiter:
    """A run of emphasis characters; start/end shrink as pairs consume it.

    ``length`` keeps the width of the run as written.
    """

    char: str
    start: int
    end: int
    can_open: bool
    can_close: bool
    scope: int
    length: int

    @property
    def remaining(self) -> int:
        return self.end - self.start

    def pairs_with(self, closer: "_Delimiter") -> bool:
        """Check if this opener may close against ``closer``.

        When either run can both open and close, ``*`` and ``_`` runs whose
        widths add up to a multiple of 3 do not pair unless both widths are
        multiples of 3 (so ``**a*b**`` stays bold around ``a*b``).
        """
        if self.char != closer.char:
            return False
        if self.char == "~" or not (self.can_close or closer.can_open):
            return True
        if (self.length + closer.length) % 3:
            return True
        return self.length % 3 == 0 and closer.length % 3 == 0


class InlineScanner:
    """Tokenize the paired inline constructs of a line into MarkerSpans.

    Passes, in order of precedence:
    - code spans (a backtick run closes at the next run of equal length)
    - links ``[text](url)``, images excluded
    - emphasis delimiter runs for ``*``, ``_`` and ``~~``
    """

    def scan_line(self, text: str, line: TextRange, start: Optional[int] = None) -> list[MarkerSpan]:
        """Find every matched marker pair on a line.

        Args:
            text: Full document text
            line: Range of the line
            start: Offset to begin scanning at (used to skip a list marker)

        Returns:
            Spans sorted by the position of their opening marker
        """
        begin = line.start if start is None else start
        masked: set[int] = set()
        escaped: set[int] = set()

        spans = self._code_spans(text, begin, line.end, masked, escaped)
        links = self._links(text, begin, line.end, masked, escaped)
        spans.extend(links)
        spans.extend(self._emphasis(text, begin, line.end, masked, escaped, links))

        spans.sort(key=lambda s: (s.opening.start, -s.outer.length))
        return spans

    def _run_end(self, text: str, pos: int, end: int, char: str, escaped: set[int]) -> int:
        while pos < end and text[pos] == char and pos not in escaped:
            pos += 1
        return pos

    def _code_spans(
        self,
        text: str,
        start: int,
        end: int,
        masked: set[int],
        escaped: set[int],
    ) -> list[MarkerSpan]:
        spans: list[MarkerSpan] = []
        pos = start
        while pos < end:
            char = text[pos]
            if char == "\\" and pos + 1 < end and text[pos + 1] in ASCII_PUNCTUATION:
                escaped.add(pos + 1)
                pos += 2
                continue
            if char != "`":
                pos += 1
                continue

            run_end = self._run_end(text, pos, end, "`", escaped)
            width = run_end - pos
            close = -1
            cursor = run_end
            while cursor < end:
                if text[cursor] != "`":
                    cursor += 1
                    continue
                cursor_end = self._run_end(text, cursor, end, "`", set())
                if cursor_end - cursor == width:
                    close = cursor
                    break
                cursor = cursor_end

            if close == -1:
                pos = run_end
                continue

            spans.append(
                MarkerSpan(
                    kind=FormatKind.INLINE_CODE,
                    marker="`" * width,
                    opening=TextRange(pos, run_end),
                    closing=TextRange(close, close + width),
                )
            )
            masked.update(range(pos, close + width))
            pos = close + width
        return spans

    def _links(
        self,
        text: str,
        start: int,
        end: int,
        masked: set[int],
        escaped: set[int],
    ) -> list[MarkerSpan]:
        spans: list[MarkerSpan] = []
        pos = start
        while pos < end:
            if text[pos] != "[" or pos in masked or pos in escaped:
                pos += 1
                continue
            # ![alt](src) is an image, not a link
            if pos > start and text[pos - 1] == "!" and (pos - 1) not in escaped:
                pos += 1
                continue

            close = self._find_unmasked(text, pos + 1, end, "]", masked, escaped, stop="[")
            if close == -1 or close + 1 >= end or text[close + 1] != "(":
                pos += 1
                continue
            paren = self._closing_paren(text, close + 2, end, escaped)
            if paren == -1 or any(p in masked for p in range(close + 2, paren)):
                pos += 1
                continue
            url = text[close + 2 : paren].strip()
            if not url:
                pos += 1
                continue

            spans.append(
                MarkerSpan(
                    kind=FormatKind.LINK,
                    marker="[",
                    opening=TextRange(pos, pos + 1),
                    closing=TextRange(close, paren + 1),
                    url=url,
                )
            )
            masked.add(pos)
            masked.update(range(close, paren + 1))
            pos = paren + 1
        return spans

    def _find_unmasked(
        self,
        text: str,
        pos: int,
        end: int,
        target: str,
        masked: set[int],
        escaped: set[int],
        stop: str,
    ) -> int:
        while pos < end:
            if pos in masked or pos in escaped:
                pos += 1
                continue
            char = text[pos]
            if char == target:
                return pos
            if char == stop:
                return -1
            pos += 1
        return -1

    def _closing_paren(self, text: str, pos: int, end: int, escaped: set[int]) -> int:
        """Find the ``)`` ending a link destination; inner parens must balance."""
        depth = 0
        while pos < end:
            char = text[pos]
            if char == "(" and pos not in escaped:
                depth += 1
            elif char == ")" and pos not in escaped:
                if depth == 0:
                    return pos
                depth -= 1
            pos += 1
        return -1

    def _flank_char(self, text: str, pos: int, start: int, end: int, masked: set[int]) -> str:
        if pos < start or pos >= end:
            return " "
        if pos in masked:
            return OPAQUE
        return text[pos]

    def _emphasis(
        self,
        text: str,
        start: int,
        end: int,
        masked: set[int],
        escaped: set[int],
        links: list[MarkerSpan],
    ) -> list[MarkerSpan]:
        delimiters: list[_Delimiter] = []
        pos = start
        while pos < end:
            char = text[pos]
            if char not in EMPHASIS_CHARS or pos in masked or pos in escaped:
                pos += 1
                continue
            run_end = pos
            while (
                run_end < end
                and text[run_end] == char
                and run_end not in masked
                and run_end not in escaped
            ):
                run_end += 1

            if char == "~" and run_end - pos != 2:
                pos = run_end
                continue

            before = self._flank_char(text, pos - 1, start, end, masked)
            after = self._flank_char(text, run_end, start, end, masked)
            can_open = not after.isspace()
            can_close = not before.isspace()
            if char == "_":
                can_open = can_open and not before.isalnum()
                can_close = can_close and not after.isalnum()

            if can_open or can_close:
                scope = -1
                for index, link in enumerate(links):
                    if link.inner.start <= pos < link.inner.end:
                        scope = index
                        break
                delimiters.append(
                    _Delimiter(char, pos, run_end, can_open, can_close, scope, run_end - pos)
                )
            pos = run_end

        spans: list[MarkerSpan] = []
        for scope in {d.scope for d in delimiters}:
            spans.extend(self._match([d for d in delimiters if d.scope == scope]))
        return spans

    def _match(self, delimiters: list[_Delimiter]) -> list[MarkerSpan]:
        """Pair closers with the nearest compatible opener on a stack.

        A pair consumes two characters from each side when both have at
        least two left (strong emphasis), otherwise one (emphasis). The
        opener gives up its innermost characters and the closer its
        leading ones, so ``***x***`` nests bold inside italic.
        """
        spans: list[MarkerSpan] = []
        stack: list[_Delimiter] = []

        for closer in delimiters:
            if closer.can_close:
                while closer.remaining > 0:
                    index = len(stack) - 1
                    while index >= 0 and not stack[index].pairs_with(closer):
                        index -= 1
                    if index < 0:
                        break
                    opener = stack[index]
                    del stack[index + 1 :]

                    if closer.char == "~":
                        use = 2
                        kind = FormatKind.STRIKETHROUGH
                    elif opener.remaining >= 2 and closer.remaining >= 2:
                        use = 2
                        kind = FormatKind.BOLD
                    else:
                        use = 1
                        kind = FormatKind.ITALIC

                    spans.append(
                        MarkerSpan(
                            kind=kind,
                            marker=closer.char * use,
                            opening=TextRange(opener.end - use, opener.end),
                            closing=TextRange(closer.start, closer.start + use),
                        )
                    )
                    opener.end -= use
                    closer.start += use
                    if opener.remaining == 0:
                        stack.pop()

            if closer.can_open and closer.remaining > 0:
                stack.append(closer)

        return spans
