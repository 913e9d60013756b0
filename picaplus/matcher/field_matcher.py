"""Matching whole fields by tag, occurrence and subfield conditions."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, TypeVar

from picaplus.field import Field
from picaplus.matcher.common import InvalidMatcher, MatcherFlags, skip_ws
from picaplus.matcher.occurrence_matcher import (
    OccurrenceMatcher,
    parse_occurrence_matcher,
)
from picaplus.matcher.subfield_list_matcher import (
    SubfieldListMatcher,
    parse_subfield_list_matcher,
    parse_subfield_list_matcher_singleton,
)
from picaplus.matcher.tag_matcher import TagMatcher, parse_tag_matcher

T = TypeVar("T")


@dataclass(frozen=True)
class FieldMatcher:
    """A predicate over one field.

    Without ``subfields`` the matcher only checks that tag and occurrence match.
    """

    tag: TagMatcher
    occurrence: OccurrenceMatcher = OccurrenceMatcher.NONE
    subfields: SubfieldListMatcher | None = None

    @classmethod
    def parse(cls, data: str) -> FieldMatcher:
        """Parse a complete field matcher such as ``012A/*{0? && 0 == 'abc'}``."""
        try:
            matcher, end = parse_field_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(f"Expected valid field matcher, got '{data}'")
        return matcher

    def is_match(self, field: Field, flags: MatcherFlags | None = None) -> bool:
        """Return True if the field satisfies this matcher."""
        if flags is None:
            flags = MatcherFlags()
        if not self.tag.is_match(field.tag):
            return False
        if not self.occurrence.is_match(field.occurrence):
            return False
        if self.subfields is None:
            return True
        return self.subfields.is_match(field.subfields, flags)


def _ws(parser: Callable[[str, int], tuple[T, int]]) -> Callable[[str, int], tuple[T, int]]:
    def wrapped(text: str, pos: int) -> tuple[T, int]:
        result, pos = parser(text, skip_ws(text, pos))
        return result, skip_ws(text, pos)

    return wrapped


def _cut(parser: Callable[[str, int], tuple[T, int]]) -> Callable[[str, int], tuple[T, int]]:
    def wrapped(text: str, pos: int) -> tuple[T, int]:
        try:
            return parser(text, pos)
        except InvalidMatcher as exc:
            if exc.fatal:
                raise
            raise InvalidMatcher(str(exc), fatal=True) from exc

    return wrapped


def _alt(*parsers: Callable[[str, int], tuple[T, int]]) -> Callable[[str, int], tuple[T, int]]:
    def wrapped(text: str, pos: int) -> tuple[T, int]:
        for parser in parsers:
            try:
                return parser(text, pos)
            except InvalidMatcher as exc:
                if exc.fatal:
                    raise
        raise InvalidMatcher(f"no alternative matched at position {pos}")

    return wrapped


def _literal(word: str) -> Callable[[str, int], tuple[str, int]]:
    def parser(text: str, pos: int) -> tuple[str, int]:
        if not text.startswith(word, pos):
            raise InvalidMatcher(f"expected '{word}' at position {pos}")
        return word, pos + len(word)

    return parser


def _parse_single_condition(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    prefixed = True
    if text[pos:pos + 1] == ".":
        pos += 1
    else:
        after = skip_ws(text, pos)
        if text[after:after + 1] == "$":
            pos = skip_ws(text, after + 1)
        else:
            prefixed = False
    matcher, pos = parse_subfield_list_matcher_singleton(text, pos)
    if not prefixed:
        print("Don't use lazy syntax!", file=sys.stderr)
    return matcher, pos


def _parse_braced_conditions(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    _, pos = _ws(_literal("{"))(text, pos)

    def body(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
        matcher, pos = parse_subfield_list_matcher(text, pos)
        _, pos = _ws(_literal("}"))(text, pos)
        return matcher, pos

    return _cut(body)(text, pos)


def _parse_subfield_conditions(text: str, pos: int) -> tuple[FieldMatcher, int]:
    tag, pos = parse_tag_matcher(text, pos)
    occurrence, pos = parse_occurrence_matcher(text, pos)
    subfields, pos = _alt(_parse_single_condition, _parse_braced_conditions)(text, pos)
    return FieldMatcher(tag, occurrence, subfields), pos


def parse_field_matcher_exists(text: str, pos: int) -> tuple[FieldMatcher, int]:
    """Read an existence matcher such as ``012A/01?``."""
    tag, pos = _ws(parse_tag_matcher)(text, pos)
    occurrence, pos = parse_occurrence_matcher(text, pos)
    _, pos = _ws(_literal("?"))(text, pos)
    return FieldMatcher(tag, occurrence), pos


def parse_field_matcher(text: str, pos: int) -> tuple[FieldMatcher, int]:
    """Read a field matcher at ``pos``; return it and the end position."""
    return _alt(_parse_subfield_conditions, parse_field_matcher_exists)(text, pos)