import pytest
from hypothesis import given, strategies as st

from picaplus.field import Tag
from picaplus.matcher.common import InvalidMatcher
from picaplus.matcher.tag_matcher import TagMatcher, parse_tag_matcher


def test_literal_tag():
    matcher = TagMatcher.parse("012A")
    assert matcher.is_match(Tag("012A"))
    assert not matcher.is_match(Tag("012@"))


def test_character_classes():
    matcher = TagMatcher.parse("[01][34][56][AB]")
    assert matcher.is_match(Tag("035A"))
    assert matcher.is_match(Tag("146B"))
    assert not matcher.is_match(Tag("236A"))


def test_alternatives_doc_example():
    matcher = TagMatcher.parse("012[A@]")
    assert matcher.is_match(Tag("012A"))
    assert matcher.is_match(Tag("012@"))
    assert not matcher.is_match(Tag("012B"))


@pytest.mark.parametrize("tag", ["012A", "112A", "212A"])
def test_wildcard_first(tag):
    assert TagMatcher.parse(".12A").is_match(Tag(tag))


@pytest.mark.parametrize("digit", "0123456789")
def test_wildcard_second(digit):
    assert TagMatcher.parse("0.2A").is_match(Tag(f"0{digit}2A"))


@pytest.mark.parametrize("digit", "0123456789")
def test_wildcard_third(digit):
    assert TagMatcher.parse("01.A").is_match(Tag(f"01{digit}A"))


@pytest.mark.parametrize("tag", ["012A", "012B", "012C", "012@"])
def test_wildcard_fourth(tag):
    assert TagMatcher.parse("012.").is_match(Tag(tag))


def test_many_wildcards():
    matcher = TagMatcher.parse("0...")
    assert matcher.is_match(Tag("012A"))
    assert matcher.is_match(Tag("023B"))
    assert not matcher.is_match(Tag("123B"))


@pytest.mark.parametrize("text", ["412A", "0A2A", "01AA", "0123", "023!", "012A ", ""])
def test_invalid(text):
    with pytest.raises(InvalidMatcher):
        TagMatcher.parse(text)


def test_parse_error_message():
    with pytest.raises(InvalidMatcher, match="Expected valid tag matcher, got '412A'"):
        TagMatcher.parse("412A")


def test_bad_class_is_fatal():
    with pytest.raises(InvalidMatcher) as info:
        parse_tag_matcher("0[A]2A", 0)
    assert info.value.fatal is True


def test_parse_tag_matcher_returns_end():
    matcher, end = parse_tag_matcher("012A/01", 0)
    assert end == 4
    assert matcher == TagMatcher.from_tag(Tag("012A"))


def test_parse_pattern_positions():
    matcher, end = parse_tag_matcher("0[12].@", 0)
    assert end == 7
    assert matcher.positions == ("0", "12", "0123456789", "@")


@given(st.from_regex(r"[0-2][0-9]{2}[A-Z@]", fullmatch=True))
def test_from_tag_matches_itself(value):
    tag = Tag(value)
    assert TagMatcher.from_tag(tag).is_match(tag)