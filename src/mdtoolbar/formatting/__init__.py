"""Data model, offset bookkeeping and scanners for Markdown markers."""

from mdtoolbar.formatting.ir import (
    FormatKind,
    ListStyle,
    TextRange,
    MarkerSpan,
    ListItem,
    MarkdownContext,
    FormattingResult,
)
from mdtoolbar.formatting.offsets import (
    Edit,
    InvalidRangeError,
    apply_edits,
    map_offset,
)
from mdtoolbar.formatting.scanner import InlineScanner, parse_list_line

__all__ = [
    "FormatKind",
    "ListStyle",
    "TextRange",
    "MarkerSpan",
    "ListItem",
    "MarkdownContext",
    "FormattingResult",
    "Edit",
    "InvalidRangeError",
    "apply_edits",
    "map_offset",
    "InlineScanner",
    "parse_list_line",
]
