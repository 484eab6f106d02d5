"""Core detection and formatting logic for mdtoolbar."""

from mdtoolbar.core.detector import ContextDetector
from mdtoolbar.core.formatter import MarkdownFormatter
from mdtoolbar.core.lists import ListFormatter, toggle_task

__all__ = [
    "ContextDetector",
    "MarkdownFormatter",
    "ListFormatter",
    "toggle_task",
]
