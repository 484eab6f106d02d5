"""Tests for the inline, list and fence scanners."""

import pytest

from mdtoolbar.formatting.ir import FormatKind, ListStyle, TextRange
from mdtoolbar.formatting.scanner import (
    InlineScanner,
    fence_marker,
    is_thematic_break,
    open_fence_before,
    parse_list_line,
)


def scan(text: str):
    return InlineScanner().scan_line(text, TextRange(0, len(text)))


def whole(text: str) -> TextRange:
    return TextRange(0, len(text))


class TestCodeSpans:
    """Tests for backtick code spans."""

    def test_single_backticks(self):
        """Test a simple code span."""
        spans = scan("a `x` b")

        assert len(spans) == 1
        assert spans[0].kind is FormatKind.INLINE_CODE
        assert spans[0].opening == TextRange(2, 3)
        assert spans[0].closing == TextRange(4, 5)

    def test_double_backticks_skip_shorter_runs(self):
        """Test that a run closes only at a run of equal length."""
        spans = scan("``a ` b``")

        assert len(spans) == 1
        assert spans[0].marker == "``"
        assert spans[0].opening == TextRange(0, 2)
        assert spans[0].closing == TextRange(7, 9)

    def test_unmatched_backtick(self):
        """Test that a lone backtick is literal text."""
        assert scan("a ` b") == []

    def test_code_hides_emphasis(self):
        """Test that markers inside code are not emphasis."""
        spans = scan("`**not bold**`")

        assert [s.kind for s in spans] == [FormatKind.INLINE_CODE]


class TestLinks:
    """Tests for link recognition."""

    def test_simple_link(self):
        """Test a link with text and URL."""
        spans = scan("[t](u)")

        assert len(spans) == 1
        assert spans[0].kind is FormatKind.LINK
        assert spans[0].url == "u"
        assert spans[0].opening == TextRange(0, 1)
        assert spans[0].closing == TextRange(2, 6)

    def test_empty_link_text_allowed(self):
        """Test that [](url) is still a link."""
        spans = scan("[](u)")

        assert len(spans) == 1
        assert spans[0].inner.is_empty

    def test_empty_url_rejected(self):
        """Test that [text]() is not a link."""
        assert scan("[t]()") == []

    def test_image_is_not_link(self):
        """Test that image syntax is skipped."""
        assert scan("![alt](img.png)") == []

    def test_nested_bracket_restarts(self):
        """Test that an unclosed bracket does not swallow a later link."""
        spans = scan("[a [b](u)")

        assert len(spans) == 1
        assert spans[0].opening == TextRange(3, 4)

    def test_url_underscores_are_not_emphasis(self):
        """Test that the URL part is opaque to emphasis scanning."""
        spans = scan("[a](http://x.com/a_b_c)")

        assert [s.kind for s in spans] == [FormatKind.LINK]

    def test_balanced_parens_in_url(self):
        """Test that a URL may hold a balanced pair of parentheses."""
        spans = scan("[a](https://x.org/f_(b))")

        assert [s.kind for s in spans] == [FormatKind.LINK]
        assert spans[0].url == "https://x.org/f_(b)"
        assert spans[0].closing == TextRange(2, 24)

    def test_unbalanced_parens_in_url(self):
        """Test that an unclosed inner paren leaves no link."""
        assert scan("[a](x(y)") == []


class TestEmphasis:
    """Tests for delimiter-run matching."""

    def test_bold_containing_italic(self):
        """Test italic nested inside bold."""
        spans = scan("**a *b* c**")

        assert [s.kind for s in spans] == [FormatKind.BOLD, FormatKind.ITALIC]
        assert spans[1].opening == TextRange(4, 5)

    def test_italic_containing_bold(self):
        """Test bold nested inside italic."""
        spans = scan("*a **b** c*")

        assert [s.kind for s in spans] == [FormatKind.ITALIC, FormatKind.BOLD]
        assert spans[1].opening == TextRange(3, 5)

    def test_triple_markers_split(self):
        """Test that *** resolves to bold inside italic."""
        spans = scan("***x***")
        kinds = {s.kind: s for s in spans}

        assert kinds[FormatKind.BOLD].opening == TextRange(1, 3)
        assert kinds[FormatKind.BOLD].closing == TextRange(4, 6)
        assert kinds[FormatKind.ITALIC].opening == TextRange(0, 1)
        assert kinds[FormatKind.ITALIC].closing == TextRange(6, 7)

    def test_rule_of_three_keeps_outer_bold(self):
        """Test that a lone star between bold markers does not pair with them."""
        spans = scan("**a*b**")

        assert [s.kind for s in spans] == [FormatKind.BOLD]
        assert spans[0].opening == TextRange(0, 2)
        assert spans[0].closing == TextRange(5, 7)

    def test_rule_of_three_keeps_outer_italic(self):
        """Test that an inner double star does not pair with italic markers."""
        spans = scan("*a**b* c")

        assert [s.kind for s in spans] == [FormatKind.ITALIC]
        assert spans[0].opening == TextRange(0, 1)
        assert spans[0].closing == TextRange(5, 6)

    def test_spaced_asterisks_are_not_emphasis(self):
        """Test that arithmetic is left alone."""
        assert scan("2 * 3 * 4") == []

    def test_intraword_underscores_ignored(self):
        """Test that snake_case is not italic."""
        assert scan("snake_case_name") == []

    def test_strikethrough(self):
        """Test a ~~ pair."""
        spans = scan("~~gone~~")

        assert len(spans) == 1
        assert spans[0].kind is FormatKind.STRIKETHROUGH
        assert spans[0].closing == TextRange(6, 8)

    @pytest.mark.parametrize("text", ["~~~x~~~", "a~b~c"])
    def test_other_tilde_runs_ignored(self, text: str):
        """Test that only double tildes delimit strikethrough."""
        assert scan(text) == []

    def test_escaped_markers(self):
        """Test that backslash-escaped asterisks are literal."""
        assert scan("\\*not italic\\*") == []

    def test_emphasis_inside_link_text(self):
        """Test bold inside link text."""
        kinds = [s.kind for s in scan("[**a**](u)")]

        assert FormatKind.LINK in kinds
        assert FormatKind.BOLD in kinds

    def test_scan_start_skips_bullet(self):
        """Test that a bullet star does not open emphasis."""
        text = "* item with *emph*"
        spans = InlineScanner().scan_line(text, whole(text), start=2)

        assert len(spans) == 1
        assert spans[0].inner == TextRange(13, 17)


class TestListLines:
    """Tests for list line recognition."""

    def test_bullet(self):
        """Test a dash bullet."""
        item = parse_list_line("- item", whole("- item"))

        assert item is not None
        assert item.style is ListStyle.BULLET
        assert item.marker == "-"
        assert item.content_start == 2
        assert item.task_checked is None

    def test_numbered(self):
        """Test a multi-digit numbered item."""
        item = parse_list_line("10. ten", whole("10. ten"))

        assert item is not None
        assert item.style is ListStyle.NUMBERED
        assert item.marker == "10."
        assert item.number == 10
        assert item.delimiter == "."

    def test_paren_delimiter_and_indent(self):
        """Test an indented 3) item."""
        item = parse_list_line("  3) item", whole("  3) item"))

        assert item is not None
        assert item.indent == 2
        assert item.marker_start == 2
        assert item.marker == "3)"

    def test_tab_indent_counts_four_columns(self):
        """Test that a tab expands to the next multiple of four."""
        item = parse_list_line("\t- x", whole("\t- x"))

        assert item is not None
        assert item.indent == 4

    def test_bare_marker_is_empty_item(self):
        """Test a marker with no content."""
        item = parse_list_line("-", whole("-"))

        assert item is not None
        assert item.content_start == 1

    @pytest.mark.parametrize(
        "line", ["-item", "1234567890. x", "***", "* * *", "---", "#1. x", "1.5 x", "plain"]
    )
    def test_not_list_items(self, line: str):
        """Test lines that only look like list items."""
        assert parse_list_line(line, whole(line)) is None

    def test_task_boxes(self):
        """Test open and checked task boxes."""
        open_item = parse_list_line("- [ ] todo", whole("- [ ] todo"))
        done_item = parse_list_line("- [x] done", whole("- [x] done"))

        assert open_item is not None and open_item.task_checked is False
        assert done_item is not None and done_item.task_checked is True

    def test_thematic_break(self):
        """Test horizontal rule detection."""
        assert is_thematic_break("- - -") is True
        assert is_thematic_break("___") is True
        assert is_thematic_break("--") is False
        assert is_thematic_break("-*-") is False


class TestFences:
    """Tests for fenced code block tracking."""

    TEXT = "```\ncode\n```\nafter"

    def test_inside_fence(self):
        """Test an offset on a line within the fence."""
        assert open_fence_before(self.TEXT, 5) == "```"

    def test_fence_line_itself(self):
        """Test that the closing fence line is recognized."""
        assert fence_marker(self.TEXT, TextRange(9, 12)) == "```"

    def test_after_closed_fence(self):
        """Test that text after the closing fence is outside."""
        assert open_fence_before(self.TEXT, 14) is None

    def test_tilde_fence_left_open(self):
        """Test that an unclosed ~~~ fence runs to the end."""
        text = "~~~~\none\n~~~\ntwo"

        assert open_fence_before(text, len(text)) == "~~~~"

    def test_backtick_fence_needs_matching_char(self):
        """Test that ~~~ does not close a ``` fence."""
        text = "```\n~~~\nstill code"

        assert open_fence_before(text, len(text)) == "```"
