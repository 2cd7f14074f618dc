"""Tests for Go-compatible quoting helpers."""
from __future__ import annotations

import pytest

from itpl.core.utils.text import go_quote, go_unquote


class TestGoQuote:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("A", '"A"'),
            ('a"b', '"a\\"b"'),
            ("a\\b", '"a\\\\b"'),
            ("a\nb\tc", '"a\\nb\\tc"'),
            ("\x00", '"\\x00"'),
            ("\x7f", '"\\x7f"'),
            ("é", '"é"'),
            ("\u200b", '"\\u200b"'),
        ],
    )
    def test_quote(self, value: str, expected: str) -> None:
        assert go_quote(value) == expected


class TestGoUnquote:
    @pytest.mark.parametrize(
        "literal, expected",
        [
            ('"abc"', "abc"),
            ('"a\\tb"', "a\tb"),
            ('"\\x41\\101"', "AA"),
            ('"\\u00e9"', "é"),
            ('"\\U0001F600"', "\U0001F600"),
            ('"it\'s"', "it's"),
            ("`a\\n`", "a\\n"),
            ("`a\r\nb`", "a\nb"),
            ("'x'", "x"),
            ("'\\n'", "\n"),
        ],
    )
    def test_unquote(self, literal: str, expected: str) -> None:
        assert go_unquote(literal) == expected

    @pytest.mark.parametrize(
        "literal",
        ['"abc', '"\\q"', "'ab'", '"a\nb"', "x", '"\\x4"', '"\\400"', '"a"b"'],
    )
    def test_invalid(self, literal: str) -> None:
        with pytest.raises(ValueError, match="invalid syntax"):
            go_unquote(literal)

    def test_round_trip_of_quoted_name(self) -> None:
        name = 'we"ird\nname'
        assert go_unquote(go_quote(name)) == name
