"""mdtoolbar - context-aware Markdown formatting engine."""

from mdtoolbar.core.detector import ContextDetector
from mdtoolbar.core.formatter import MarkdownFormatter
from mdtoolbar.formatting.ir import FormatKind, FormattingResult, MarkdownContext
from mdtoolbar.formatting.offsets import InvalidRangeError

__version__ = "0.1.0"

__all__ = [
    "ContextDetector",
    "MarkdownFormatter",
    "FormatKind",
    "FormattingResult",
    "MarkdownContext",
    "InvalidRangeError",
    "__version__",
]
