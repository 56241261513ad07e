from docgen.utils.images import fit_within, parse_hex_color
from docgen.utils.text import (
    format_date, format_datetime, latin1, strip_number_prefix, truncate, wrap_text,
)


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("Replace faucet", 45) == "Replace faucet"

    def test_long_text_gets_ellipsis(self):
        text = "x" * 60
        result = truncate(text, 45)
        assert len(result) == 45
        assert result.endswith("...")

    def test_none_is_empty(self):
        assert truncate(None, 10) == ""


class TestWrapText:
    def test_lines_never_exceed_width(self):
        text = "lorem ipsum dolor sit amet " * 20
        lines = wrap_text(text, 90)
        assert len(lines) > 1
        assert all(len(line) <= 90 for line in lines)

    def test_long_word_is_split(self):
        assert wrap_text("a" * 25, 10) == ["a" * 10, "a" * 10, "a" * 5]

    def test_blank_lines_kept_but_trailing_dropped(self):
        assert wrap_text("one\n\ntwo\n\n", 20) == ["one", "", "two"]

    def test_empty(self):
        assert wrap_text(None, 90) == []


class TestNumbers:
    def test_prefix_and_separator_stripped(self):
        assert strip_number_prefix("INV-2024-0042", "INV") == "2024-0042"

    def test_other_prefix_kept(self):
        assert strip_number_prefix("Q-1001", "INV") == "Q-1001"

    def test_bare_prefix_not_emptied(self):
        assert strip_number_prefix("INV", "INV") == "INV"


class TestDates:
    def test_format_date(self):
        assert format_date("2025-01-05T14:30:00Z") == "January 5, 2025"
        assert format_date("2025-02-05") == "February 5, 2025"

    def test_format_datetime(self):
        assert format_datetime("2025-01-05T14:30:00Z") == "Jan 5, 2025, 02:30 PM"

    def test_missing_date(self):
        assert format_date(None) == "N/A"
        assert format_date("garbage") == "N/A"


class TestHelpers:
    def test_latin1_replaces_unsupported(self):
        assert latin1("café ✓") == "café ?"

    def test_fit_within_preserves_aspect(self):
        assert fit_within(300, 100, 150, 60) == (150, 50)
        assert fit_within(100, 100, 150, 60) == (60, 60)

    def test_parse_hex_color(self):
        assert parse_hex_color("#ff0000", (0, 0, 0)) == (255, 0, 0)
        assert parse_hex_color("0f0", (0, 0, 0)) == (0, 255, 0)
        assert parse_hex_color("nope", (1, 2, 3)) == (1, 2, 3)
