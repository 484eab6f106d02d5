"""Behavioral guarantees checked over a small corpus of selections."""

import pytest

from mdtoolbar.formatting.ir import PAIRED_KINDS, FormatKind

SELECTIONS = [
    ("hello world", 0, 5),
    ("hello world", 6, 11),
    ("hello world", 0, 11),
    ("hello world", 3, 8),
    ("hello world", 2, 3),
    ("hello world", 5, 6),
    ("alpha beta gamma", 6, 10),
    ("line one\nline two", 0, 17),
    ("line one\nline two", 5, 13),
]

# selections with visible content; an empty or blank pair is not emphasis
WRAPPABLE = [s for s in SELECTIONS if s[0][s[1] : s[2]].strip()]

MARKER_CHARS = {
    FormatKind.BOLD: "*",
    FormatKind.ITALIC: "*",
    FormatKind.STRIKETHROUGH: "~",
    FormatKind.INLINE_CODE: "`",
}


@pytest.mark.parametrize("kind", PAIRED_KINDS)
@pytest.mark.parametrize("text,start,end", SELECTIONS)
class TestToggleSymmetry:
    """Applying a kind twice restores the document and selection."""

    def test_toggle_twice(self, formatter, kind, text, start, end):
        """Test that the returned selection toggles straight back."""
        once = formatter.apply(text, start, end, kind)
        twice = formatter.apply(once.text, once.selection_start, once.selection_end, kind)

        assert once.text != text
        assert twice.text == text
        assert (twice.selection_start, twice.selection_end) == (start, end)

    def test_markers_balanced(self, formatter, kind, text, start, end):
        """Test that wrapping adds markers in pairs."""
        result = formatter.apply(text, start, end, kind)
        char = MARKER_CHARS[kind]

        assert (result.text.count(char) - text.count(char)) % 2 == 0
        assert result.text.count(char) > text.count(char)


@pytest.mark.parametrize("kind", PAIRED_KINDS)
@pytest.mark.parametrize("text,start,end", WRAPPABLE)
def test_detection_after_wrap(detector, formatter, kind, text, start, end):
    """Test that the new selection is reported as formatted."""
    result = formatter.apply(text, start, end, kind)
    context = detector.detect(result.text, result.selection_start, result.selection_end)

    assert context.span_for(kind) is not None


class TestLinkSymmetry:
    """Link creation and removal."""

    @pytest.mark.parametrize("text,start,end", [("see docs", 4, 8), ("a b c", 2, 3)])
    def test_toggle_twice(self, formatter, text, start, end):
        """Test that creating then removing a link restores the text."""
        once = formatter.format_link(text, start, end, url="https://x.io")
        twice = formatter.format_link(once.text, once.selection_start, once.selection_end)

        assert twice.text == text
        assert (twice.selection_start, twice.selection_end) == (start, end)
        assert twice.extracted_url == "https://x.io"


class TestListSymmetry:
    """List toggles on plain lines."""

    @pytest.mark.parametrize("kind", [FormatKind.BULLET_LIST, FormatKind.NUMBERED_LIST])
    @pytest.mark.parametrize("text", ["a", "a\nb\nc", "one\n\ntwo"])
    def test_toggle_twice(self, formatter, kind, text):
        """Test that adding then removing markers restores the text."""
        once = formatter.apply(text, 0, len(text), kind)
        twice = formatter.apply(once.text, once.selection_start, once.selection_end, kind)

        assert twice.text == text


class TestDetectionIsPure:
    """Detection never depends on earlier calls."""

    def test_repeated_detection(self, detector, sample_document):
        """Test every caret position twice."""
        for offset in range(len(sample_document) + 1):
            first = detector.detect(sample_document, offset, offset)

            assert detector.detect(sample_document, offset, offset) == first
