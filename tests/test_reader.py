"""Tests for TokenReader."""

from __future__ import annotations

import sys

import pytest

from tally import MalformedInputError, TokenReader


class TestTokenReader:
    def test_tokens_span_lines(self, reader_for):
        reader = reader_for("1 apple\n5\n")
        assert reader.next_int() == 1
        assert reader.next_word() == "apple"
        assert reader.next_int() == 5

    def test_extra_whitespace_ignored(self, reader_for):
        reader = reader_for("   \n\t 7   \n\n")
        assert reader.next_int() == 7

    def test_signed_integers(self, reader_for):
        reader = reader_for("-4 +6")
        assert reader.next_int() == -4
        assert reader.next_int() == 6

    def test_position_tracks_consumed_tokens(self, reader_for):
        reader = reader_for("a b c")
        assert reader.position == 0
        reader.next_word()
        reader.next_word()
        assert reader.position == 2

    def test_non_integer_raises(self, reader_for):
        reader = reader_for("x")
        with pytest.raises(MalformedInputError) as exc_info:
            reader.next_int("command count")
        err = exc_info.value
        assert err.expected == "command count"
        assert err.token == "x"
        assert err.position == 1
        assert "command count" in str(err)

    def test_end_of_input_raises(self, reader_for):
        reader = reader_for("")
        with pytest.raises(MalformedInputError) as exc_info:
            reader.next_word("key")
        assert exc_info.value.token is None
        assert exc_info.value.position is None
        assert "end of input" in str(exc_info.value)

    def test_reads_lazily_from_iterable(self):
        def lines():
            yield "2\n"
            raise AssertionError("read past what was needed")

        reader = TokenReader(lines())
        assert reader.next_int() == 2

    @pytest.mark.parametrize("token", ["1_000", "١٢", "５", "1.5", "0x10", "--3", "+"])
    def test_only_ascii_decimal_integers(self, token):
        reader = TokenReader([f"{token} "])
        with pytest.raises(MalformedInputError):
            reader.next_int("amount")

    def test_leading_zeros_accepted(self, reader_for):
        assert reader_for("007").next_int() == 7

    def test_integer_over_digit_limit(self, reader_for):
        limit = sys.get_int_max_str_digits()
        if limit == 0:
            pytest.skip("int_max_str_digits limit disabled")
        token = "9" * (limit + 1)
        reader = reader_for(token)
        with pytest.raises(MalformedInputError) as exc_info:
            reader.next_int("amount")
        assert f"at most {limit} digits" in str(exc_info.value)
        assert exc_info.value.token == token
        assert len(str(exc_info.value)) < 200
