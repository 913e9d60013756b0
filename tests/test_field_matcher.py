import pytest

from picaplus.field import Field
from picaplus.matcher.common import InvalidMatcher, MatcherFlags
from picaplus.matcher.field_matcher import (
    FieldMatcher,
    parse_field_matcher,
    parse_field_matcher_exists,
)

FLAGS = MatcherFlags()


def test_field_matcher_invalid():
    with pytest.raises(InvalidMatcher):
        FieldMatcher.parse("012A§?")


def test_field_matcher_invalid_occurrence():
    with pytest.raises(InvalidMatcher):
        FieldMatcher.parse("012A/!{0 == 'abc'}")


def test_field_matcher_braced_valid():
    matcher = FieldMatcher.parse("012A/*{0? && 0 == 'abc'}")
    field = Field.from_str("012A/01 \x1f0abc\x1e")
    assert matcher.is_match(field, FLAGS)


@pytest.mark.parametrize(
    "expr, data, expected",
    [
        ("012A?", "012A \x1f0abc\x1e", True),
        ("013A?", "012A \x1f0abc\x1e", False),
        ("012A/00?", "012A \x1f0abc\x1e", True),
        ("012A/01?", "012A/01 \x1f0abc\x1e", True),
        ("012A/01?", "012A/02 \x1f0abc\x1e", False),
    ],
)
def test_field_matcher_exists(expr, data, expected):
    matcher = FieldMatcher.parse(expr)
    assert matcher.subfields is None
    assert matcher.is_match(Field.from_str(data), FLAGS) is expected


@pytest.mark.parametrize(
    "expr, data",
    [
        ("012A.0 == 'abc'", "012A \x1f0abc\x1e"),
        ("012A{0 == 'abc'}", "012A \x1f0abc\x1e"),
        ("012A/01{0 == 'abc'}", "012A/01 \x1f0abc\x1e"),
        ("012A{0 == 'abc' && 9?}", "012A \x1f0abc\x1f9123\x1e"),
    ],
)
def test_field_matcher_subfield_dot(expr, data):
    assert FieldMatcher.parse(expr).is_match(Field.from_str(data), FLAGS) is True


def test_field_matcher_space_before_dot_is_invalid():
    with pytest.raises(InvalidMatcher):
        FieldMatcher.parse("012A .0 == 'abc'")


def test_field_matcher_subfield_dollar():
    field = Field.from_str("012A \x1f0abc\x1e")
    assert FieldMatcher.parse("012A$0 == 'abc'").is_match(field, FLAGS)
    assert FieldMatcher.parse("012A $0 != 'def'").is_match(field, FLAGS)


def test_field_matcher_subfield_lazy(capsys):
    field = Field.from_str("012A \x1f0abc\x1e")
    assert FieldMatcher.parse("012A0 == 'abc'").is_match(field, FLAGS)
    assert FieldMatcher.parse("012Aa0 == 'abc'").is_match(field, FLAGS)
    err = capsys.readouterr().err
    assert err == "Don't use lazy syntax!\n" * 2


def test_field_matcher_prefixed_does_not_warn(capsys):
    FieldMatcher.parse("012A.0 == 'abc'")
    assert capsys.readouterr().err == ""


def test_field_matcher_wrong_tag_or_value():
    field = Field.from_str("012A \x1f0abc\x1e")
    assert FieldMatcher.parse("013A.0 == 'abc'").is_match(field, FLAGS) is False
    assert FieldMatcher.parse("012A.0 == 'abd'").is_match(field, FLAGS) is False


def test_field_matcher_ignore_case():
    field = Field.from_str("012A \x1f0abc\x1e")
    matcher = FieldMatcher.parse("012A.0 == 'ABC'")
    assert matcher.is_match(field, FLAGS) is False
    assert matcher.is_match(field, MatcherFlags(ignore_case=True)) is True


def test_field_matcher_default_flags():
    field = Field.from_str("012A \x1f0abc\x1e")
    assert FieldMatcher.parse("012A.0 == 'abc'").is_match(field) is True


def test_unclosed_brace_is_invalid():
    with pytest.raises(InvalidMatcher):
        FieldMatcher.parse("012A{0 == 'abc'")


def test_parse_field_matcher_returns_position():
    matcher, end = parse_field_matcher("012A? rest", 0)
    assert end == 6
    assert matcher.subfields is None


def test_parse_field_matcher_exists_requires_question_mark():
    with pytest.raises(InvalidMatcher):
        parse_field_matcher_exists("012A", 0)
    _, end = parse_field_matcher_exists("  012A/01 ?", 0)
    assert end == 11