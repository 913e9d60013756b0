import pytest

from picaplus.matcher.common import (
    BooleanOp,
    ComparisonOp,
    InvalidMatcher,
    MatcherFlags,
    parse_comparison_op_bstring,
    parse_comparison_op_usize,
    parse_string,
    skip_ws,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("==", ComparisonOp.EQ),
        ("!=", ComparisonOp.NE),
        ("=^", ComparisonOp.STARTS_WITH),
        ("=$", ComparisonOp.ENDS_WITH),
        ("=*", ComparisonOp.SIMILAR),
    ],
)
def test_parse_comparison_op_bstring(text, expected):
    assert parse_comparison_op_bstring(text, 0) == (expected, 2)


@pytest.mark.parametrize("text", [">=", ">", "<=", "<"])
def test_parse_comparison_op_bstring_invalid(text):
    with pytest.raises(InvalidMatcher):
        parse_comparison_op_bstring(text, 0)


@pytest.mark.parametrize(
    "text, expected, end",
    [
        ("==", ComparisonOp.EQ, 2),
        ("!=", ComparisonOp.NE, 2),
        (">=", ComparisonOp.GE, 2),
        (">", ComparisonOp.GT, 1),
        ("<=", ComparisonOp.LE, 2),
        ("<", ComparisonOp.LT, 1),
    ],
)
def test_parse_comparison_op_usize(text, expected, end):
    assert parse_comparison_op_usize(text, 0) == (expected, end)


@pytest.mark.parametrize("text", ["=^", "=$", "=~", "=*"])
def test_parse_comparison_op_usize_invalid(text):
    with pytest.raises(InvalidMatcher):
        parse_comparison_op_usize(text, 0)


def test_parse_comparison_op_at_offset():
    assert parse_comparison_op_usize("0 >= 2", 2) == (ComparisonOp.GE, 4)


def test_boolean_op_symbols():
    assert BooleanOp("&&") is BooleanOp.AND
    assert BooleanOp("||") is BooleanOp.OR


def test_parse_string_single_quoted():
    assert parse_string("'abc' rest", 0) == ("abc", 5)


def test_parse_string_double_quoted():
    assert parse_string('x "a b"', 2) == ("a b", 7)


def test_parse_string_escaped_quote():
    assert parse_string("'a\\'b'", 0) == ("a'b", 6)


def test_parse_string_keeps_unknown_escape():
    assert parse_string("'\\d+'", 0) == ("\\d+", 5)


@pytest.mark.parametrize("text", ["'abc", "abc", "", "'abc\\"])
def test_parse_string_invalid(text):
    with pytest.raises(InvalidMatcher):
        parse_string(text, 0)


def test_skip_ws():
    assert skip_ws(" \t\n x", 0) == 4
    assert skip_ws("x", 0) == 0
    assert skip_ws("   ", 1) == 3


def test_matcher_flags_defaults():
    flags = MatcherFlags()
    assert flags.ignore_case is False
    assert flags.strsim_threshold == 0.8


def test_matcher_flags_builders_return_copies():
    flags = MatcherFlags()
    changed = flags.with_ignore_case(True).with_strsim_threshold(0.7)
    assert changed.ignore_case is True
    assert changed.strsim_threshold == 0.7
    assert flags == MatcherFlags(False, 0.8)


def test_invalid_matcher_fatal_flag():
    assert InvalidMatcher("x").fatal is False
    assert InvalidMatcher("x", fatal=True).fatal is True