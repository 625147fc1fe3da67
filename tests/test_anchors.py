"""Unit tests for anchor parsing."""

import pytest

from hashline_tools.anchors import AnchorRef, format_anchor, parse_anchor, require_anchor
from hashline_tools.errors import EditParseError


class TestParseAnchor:
    """Tests for parse_anchor."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("12#ZPMQ", AnchorRef(12, "ZPMQ")),
            ("5:a3b1", AnchorRef(5, "a3b1")),
            ("  7#QVRW  ", AnchorRef(7, "QVRW")),
            ("3#ZPMQ:x = compute()", AnchorRef(3, "ZPMQ")),
            ("4:k2m9|return value", AnchorRef(4, "k2m9")),
            (">>> 9#SNKT:line", AnchorRef(9, "SNKT")),
            ("+ 2#BYHZ:added", AnchorRef(2, "BYHZ")),
            ("- 4#KTXJ:removed", AnchorRef(4, "KTXJ")),
            (">>>6#WSNK", AnchorRef(6, "WSNK")),
        ],
    )
    def test_valid_forms(self, text, expected):
        assert parse_anchor(text) == expected

    def test_hash_form_wins_when_line_part_is_numeric(self):
        assert parse_anchor("3#ABCD:5") == AnchorRef(3, "ABCD")

    def test_falls_back_to_colon_form(self):
        """A '#' inside copied content doesn't block the legacy form."""
        assert parse_anchor("6:ab12|x # comment") == AnchorRef(6, "ab12")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "abc",
            "ZPMQ",
            "0#ZPMQ",
            "3#",
            "3#  ",
            "x#ZPMQ",
            "²#ZPMQ",
            "3.5#ZPMQ",
            "-1#ZPMQ",
            "-3#ZPMQ",
            "+3#ZPMQ",
            "-3:a1b2",
        ],
    )
    def test_invalid_forms(self, text):
        assert parse_anchor(text) is None

    def test_non_string(self):
        assert parse_anchor(12) is None


class TestRequireAnchor:
    """Tests for require_anchor."""

    def test_returns_anchor(self):
        assert require_anchor("2#ZPMQ", 0, "pos") == AnchorRef(2, "ZPMQ")

    def test_missing(self):
        with pytest.raises(EditParseError, match="missing required field 'pos'") as exc_info:
            require_anchor(None, 3, "pos")
        assert exc_info.value.edit_index == 3

    def test_wrong_type(self):
        with pytest.raises(EditParseError, match="must be a string"):
            require_anchor(5, 0, "anchor")

    def test_unparseable(self):
        with pytest.raises(EditParseError, match="invalid anchor 'nope'"):
            require_anchor("nope", 0, "anchor")


class TestFormatAnchor:
    def test_default_separator(self):
        assert format_anchor(3, "ZPMQ") == "3#ZPMQ"
        assert str(AnchorRef(3, "ZPMQ")) == "3#ZPMQ"

    def test_legacy_separator(self):
        assert format_anchor(3, "a1b2", ":") == "3:a1b2"
