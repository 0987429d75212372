"""
Tests for tokenizing and splitting equations.
"""

import pytest

from euclid.core.rules import MalformedRuleError
from euclid.tokens import tokenize, elide, split_equation, parse_equation


class TestTokenize:
    def test_whitespace_split(self):
        assert tokenize("{ a }  plus\t{ b }") == ["{", "a", "}", "plus", "{", "b", "}"]

    def test_empty(self):
        assert tokenize("   ") == []


class TestElide:
    def test_nested_curly(self):
        tokens = tokenize("{ { { 1 } } + { { 1 } } } = { { 2 } }")
        assert elide(tokens) == tokenize("{ 1 } + { 1 } = { 2 }")

    def test_other_brackets_untouched(self):
        tokens = tokenize("{ ( a ) }")
        assert elide(tokens) == tokenize("{ ( a ) }")

    def test_square(self):
        assert elide(tokenize("[ [ x ] ]"), "[", "]") == ["[", "x", "]"]

    def test_no_brackets(self):
        assert elide(["a", "b"]) == ["a", "b"]


class TestSplitEquation:
    def test_split(self):
        assert split_equation(["1", "+", "1", "=", "2"]) == (["1", "+", "1"], ["2"])

    def test_no_separator(self):
        with pytest.raises(MalformedRuleError):
            split_equation(["1", "+", "1"])

    def test_two_separators(self):
        with pytest.raises(MalformedRuleError):
            split_equation(["a", "=", "b", "=", "c"])


class TestParseEquation:
    def test_plain(self):
        assert parse_equation("1 + 1 = 2") == (["1", "+", "1"], ["2"])

    def test_with_elision(self):
        lhs, rhs = parse_equation("{ { a } } = { b }", bracket="curly")
        assert lhs == ["{", "a", "}"]
        assert rhs == ["{", "b", "}"]

    def test_unknown_bracket(self):
        with pytest.raises(ValueError):
            parse_equation("a = b", bracket="angle")
