"""Unit tests for separators and patterns in syntax.py."""

import re

import pytest

from wheelzoom.syntax import (
    ATTRIBUTE_SUFFIX_RE,
    LOCAL_NAME_RE,
    PLAIN_SEPARATOR,
    TABLE_SEPARATOR,
    SeparatorDef,
    escape_regex,
    separator_for,
    table_line_re,
)


# ---------------------------------------------------------------------------
# escape_regex
# ---------------------------------------------------------------------------


class TestEscapeRegex:
    """Tests for escape_regex()."""

    def test_dot(self):
        assert escape_regex("example.png") == r"example\.png"

    def test_all_specials(self):
        specials = "-/\\^$*+?.()|[]{}"
        escaped = escape_regex(specials)
        assert re.fullmatch(escaped, specials) is not None

    def test_spaces_untouched(self):
        assert escape_regex("my image.png") == r"my image\.png"

    @pytest.mark.parametrize("name", ["a(b)c.png", "a+b.png", "x[1].png", "{a}|b$.png"])
    def test_matches_only_literal(self, name):
        pattern = re.compile(escape_regex(name))
        m = pattern.search(f"before {name} after")
        assert m is not None
        assert m.group(0) == name

    def test_parenthesized_name_does_not_match_plain(self):
        pattern = re.compile(escape_regex("a(b)c.png"))
        assert pattern.search("abc.png") is None
        assert pattern.search("a(b)cXpng") is None


# ---------------------------------------------------------------------------
# SeparatorDef
# ---------------------------------------------------------------------------


class TestSeparatorDef:
    """Tests for the plain and table separators."""

    def test_plain_literal(self):
        assert PLAIN_SEPARATOR.literal == "|"

    def test_table_literal(self):
        assert TABLE_SEPARATOR.literal == "\\|"

    def test_plain_pattern(self):
        assert PLAIN_SEPARATOR.pattern == "\\|"

    def test_table_pattern(self):
        assert TABLE_SEPARATOR.pattern == "\\\\\\|"

    def test_format(self):
        assert PLAIN_SEPARATOR.format("a.png", 100) == "a.png|100"
        assert TABLE_SEPARATOR.format("a.png", 100) == "a.png\\|100"

    def test_format_empty_prefix(self):
        assert PLAIN_SEPARATOR.format("", 25) == "|25"

    def test_pattern_matches_literal(self):
        for sep in (PLAIN_SEPARATOR, TABLE_SEPARATOR):
            assert re.fullmatch(sep.pattern, sep.literal)

    def test_separator_for(self):
        assert separator_for(True) is TABLE_SEPARATOR
        assert separator_for(False) is PLAIN_SEPARATOR

    def test_frozen(self):
        with pytest.raises(AttributeError):
            SeparatorDef("|").literal = "x"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# table_line_re
# ---------------------------------------------------------------------------


class TestTableLineRe:
    """Tests for the pipe-framed line heuristic."""

    def test_row_matches(self):
        text = "| fruit | quantity |\n|-------|----------|\n| apple | 10       |"
        assert table_line_re("apple").search(text)

    def test_prose_does_not_match(self):
        assert not table_line_re("apple").search("An apple, not in a table")

    def test_case_sensitive(self):
        assert not table_line_re("apple").search("| Apple | 10 |")

    def test_needle_is_escaped(self):
        assert not table_line_re("a.png").search("| aXpng |")
        assert table_line_re("a.png").search("| a.png |")

    def test_unframed_line(self):
        assert not table_line_re("apple").search("| apple | 10")

    def test_crlf_row(self):
        text = "| fruit | quantity |\r\n|---|---|\r\n| apple | 10 |\r\n"
        assert table_line_re("apple").search(text)
        assert not table_line_re("apple").search("An apple\r\n")


# ---------------------------------------------------------------------------
# ATTRIBUTE_SUFFIX_RE and LOCAL_NAME_RE
# ---------------------------------------------------------------------------


class TestAttributeSuffixRe:
    """Tests for modifiers recovered after a wiki-embedded name."""

    @pytest.mark.parametrize(
        "after, expected",
        [
            ("]] text", ""),
            ("|ctr]] text", "|ctr"),
            ("|ctr|100]] text", "|ctr"),
            ("|100]] text", ""),
            ("\\|ctr]] |", "\\|ctr"),
            ("\\|ctr\\|100]] |", "\\|ctr"),
        ],
    )
    def test_suffix(self, after, expected):
        m = ATTRIBUTE_SUFFIX_RE.match(after)
        assert m is not None
        assert (m.group(1) or m.group(2) or "") == expected

    def test_does_not_cross_lines(self):
        assert ATTRIBUTE_SUFFIX_RE.match(")\nlater ![[other.png]]") is None


class TestLocalNameRe:
    """Tests for isolating a file name before the query marker."""

    def test_last_segment(self):
        m = LOCAL_NAME_RE.search("app://local/C:/path/to/image.png?123")
        assert m is not None
        assert m.group(1) == "image.png"

    def test_no_query(self):
        assert LOCAL_NAME_RE.search("app://local/C:/path/to/image.png") is None
