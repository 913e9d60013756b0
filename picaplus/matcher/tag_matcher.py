"""Matching field tags against literal tags or per-position character classes."""

from __future__ import annotations

import re
from dataclasses import dataclass

from picaplus.field import Tag
from picaplus.matcher.common import InvalidMatcher

_TAG = re.compile(r"[0-2][0-9]{2}[A-Z@]")

_CLASSES = (
    "012",
    "0123456789",
    "0123456789",
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ@",
)


@dataclass(frozen=True)
class TagMatcher:
    """For each of the four tag positions, the characters allowed there."""

    positions: tuple[str, str, str, str]

    @classmethod
    def parse(cls, data: str) -> TagMatcher:
        """Parse a complete tag matcher expression such as ``0[12]3A``."""
        try:
            matcher, end = parse_tag_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(f"Expected valid tag matcher, got '{data}'")
        return matcher

    @classmethod
    def from_tag(cls, tag: Tag) -> TagMatcher:
        """A matcher that accepts exactly the given tag."""
        return cls(tuple(tag.value))

    def is_match(self, tag: Tag) -> bool:
        return all(
            char in allowed for char, allowed in zip(tag.value, self.positions)
        )


def _parse_position(text: str, pos: int, allowed: str) -> tuple[str, int]:
    char = text[pos:pos + 1]
    if char == ".":
        return allowed, pos + 1
    if char == "[":
        end = pos + 1
        while end < len(text) and text[end] in allowed:
            end += 1
        if end == pos + 1 or text[end:end + 1] != "]":
            raise InvalidMatcher(
                f"invalid character class at position {pos}", fatal=True
            )
        return text[pos + 1:end], end + 1
    if char and char in allowed:
        return char, pos + 1
    raise InvalidMatcher(f"unexpected character at position {pos}")


def parse_tag_matcher(text: str, pos: int) -> tuple[TagMatcher, int]:
    """Read a tag matcher at ``pos``; return it and the end position."""
    match = _TAG.match(text, pos)
    if match is not None:
        return TagMatcher.from_tag(Tag(match.group())), match.end()

    positions = []
    for allowed in _CLASSES:
        part, pos = _parse_position(text, pos, allowed)
        positions.append(part)
    return TagMatcher(tuple(positions)), pos