"""Pytest fixtures for mdtoolbar tests."""

import pytest
from pathlib import Path

from mdtoolbar.config import FormatOptions
from mdtoolbar.core.detector import ContextDetector
from mdtoolbar.core.formatter import MarkdownFormatter


@pytest.fixture
def detector() -> ContextDetector:
    """Create a detector instance."""
    return ContextDetector()


@pytest.fixture
def formatter() -> MarkdownFormatter:
    """Create a formatter with default marker options."""
    return MarkdownFormatter()


@pytest.fixture
def underscore_formatter() -> MarkdownFormatter:
    """Create a formatter that writes _italic_ and + bullets."""
    return MarkdownFormatter(
        options=FormatOptions(italic_marker="_", preferred_list_marker="+")
    )


@pytest.fixture
def sample_document() -> str:
    """A small document mixing every construct the engine knows."""
    return (
        "# Notes\n"
        "\n"
        "Some **bold** and *italic* and `code` text.\n"
        "See [GitHub](https://github.com) for ~~old~~ details.\n"
        "\n"
        "- first item\n"
        "- [x] done item\n"
        "\n"
        "```python\n"
        "x = **not bold**\n"
        "```\n"
    )


@pytest.fixture
def tmp_markdown_file(tmp_path: Path) -> Path:
    """Create a temporary Markdown file."""
    file_path = tmp_path / "notes.md"
    file_path.write_text("hello world", encoding="utf-8")
    return file_path
