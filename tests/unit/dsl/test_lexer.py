"""
Unit tests for the specification tokenizer.
"""

import pytest

from spikespec.dsl.lexer import EOF, NAME, NUMBER, OP, STRING, tokenize
from spikespec.errors import SpecificationError


@pytest.mark.unit
class TestTokenize:
    """Token kinds, operators and locations."""

    def test_kinds_and_final_eof(self):
        tokens = tokenize("v @= 0.04 * v")
        kinds = [token.kind for token in tokens]
        assert kinds == [NAME, OP, NUMBER, OP, NAME, EOF]

    def test_derivative_operator_is_one_token(self):
        tokens = tokenize("v @= k")
        assert tokens[1].text == "@="
        assert tokens[1].is_op("@=")

    def test_spaced_derivative_operator_is_two_tokens(self):
        tokens = tokenize("v @ = k")
        assert [t.text for t in tokens[1:3]] == ["@", "="]

    def test_longest_operator_wins(self):
        texts = [t.text for t in tokenize("a >= b ** 2 // c") if t.kind == OP]
        assert texts == [">=", "**", "//"]

    def test_numbers(self):
        texts = [t.text for t in tokenize("1 2.5 .5 1e-3 3.0E+2") if t.kind == NUMBER]
        assert texts == ["1", "2.5", ".5", "1e-3", "3.0E+2"]

    def test_strings(self):
        tokens = tokenize("'abc' \"d\"")
        assert [t.kind for t in tokens[:2]] == [STRING, STRING]

    def test_comments_and_whitespace_dropped(self):
        tokens = tokenize("a  # trailing comment\n\tb")
        assert [t.text for t in tokens if t.kind == NAME] == ["a", "b"]

    def test_locations_track_lines_and_columns(self):
        tokens = tokenize("ab\n  cd")
        assert (tokens[0].location.line, tokens[0].location.column) == (1, 0)
        assert (tokens[1].location.line, tokens[1].location.column) == (2, 2)
        assert tokens[1].start == 5
        assert tokens[1].end == 7

    def test_eof_describe(self):
        assert tokenize("")[-1].describe() == "end of input"
        assert tokenize("x")[0].describe() == "`x`"

    def test_unexpected_character(self):
        with pytest.raises(SpecificationError) as exc_info:
            tokenize("a\n  $b")
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 2
        assert "line 2, column 2" in str(exc_info.value)
