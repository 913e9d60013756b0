"""Matching field occurrences: exact, ranges, any, or none."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar

from picaplus.matcher.common import InvalidMatcher
from picaplus.occurrence import (
    InvalidOccurrence,
    Occurrence,
    parse_occurrence_digits,
)


@dataclass(frozen=True)
class OccurrenceMatcher:
    """Accepts occurrences between ``low`` and ``high`` inclusive.

    Without bounds the matcher accepts a missing occurrence or ``00``;
    with ``wildcard`` set it accepts every occurrence.
    """

    low: Occurrence | None = None
    high: Occurrence | None = None
    wildcard: bool = False

    ANY: ClassVar[OccurrenceMatcher]
    NONE: ClassVar[OccurrenceMatcher]

    def __post_init__(self) -> None:
        if (self.low is None) != (self.high is None):
            raise ValueError("both bounds or neither must be given")

    @classmethod
    def parse(cls, data: str) -> OccurrenceMatcher:
        """Parse a complete occurrence matcher such as ``/01-09`` or ``/*``."""
        try:
            matcher, end = parse_occurrence_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(
                f"Expected valid occurrence matcher, got '{data}'"
            )
        return matcher

    @classmethod
    def from_occurrence(cls, occurrence: Occurrence) -> OccurrenceMatcher:
        """A matcher that accepts exactly the given occurrence."""
        return cls(occurrence, occurrence)

    def is_match(self, occurrence: Occurrence | None) -> bool:
        if occurrence is None:
            return self.wildcard or self.low is None
        if self.wildcard:
            return True
        if self.low is None or self.high is None:
            return occurrence.value == "00"
        return self.low <= occurrence <= self.high


OccurrenceMatcher.ANY = OccurrenceMatcher(wildcard=True)
OccurrenceMatcher.NONE = OccurrenceMatcher()


def _parse_range(text: str, pos: int) -> tuple[OccurrenceMatcher, int]:
    low, pos = parse_occurrence_digits(text, pos)
    if text[pos:pos + 1] != "-":
        raise InvalidMatcher(f"expected '-' at position {pos}")
    high, pos = parse_occurrence_digits(text, pos + 1)
    if len(low) != len(high) or not low < high:
        raise InvalidMatcher(f"invalid occurrence range {low}-{high}")
    return OccurrenceMatcher(Occurrence(low), Occurrence(high)), pos


def _parse_single(text: str, pos: int) -> tuple[OccurrenceMatcher, int]:
    digits, end = parse_occurrence_digits(text, pos)
    if digits == "00":
        raise InvalidMatcher("occurrence 00 is not a single occurrence")
    return OccurrenceMatcher.from_occurrence(Occurrence(digits)), end


def _parse_zero(text: str, pos: int) -> tuple[OccurrenceMatcher, int]:
    if not text.startswith("00", pos):
        raise InvalidMatcher(f"expected '00' at position {pos}")
    return OccurrenceMatcher.NONE, pos + 2


def _parse_any(text: str, pos: int) -> tuple[OccurrenceMatcher, int]:
    if text[pos:pos + 1] != "*":
        raise InvalidMatcher(f"expected '*' at position {pos}")
    return OccurrenceMatcher.ANY, pos + 1


_ALTERNATIVES: tuple[Callable[[str, int], tuple[OccurrenceMatcher, int]], ...] = (
    _parse_range,
    _parse_single,
    _parse_zero,
    _parse_any,
)


def parse_occurrence_matcher(text: str, pos: int) -> tuple[OccurrenceMatcher, int]:
    """Read an occurrence matcher at ``pos``; without ``/`` it is NONE."""
    if text[pos:pos + 1] != "/":
        return OccurrenceMatcher.NONE, pos
    pos += 1
    for alternative in _ALTERNATIVES:
        try:
            return alternative(text, pos)
        except (InvalidMatcher, InvalidOccurrence):
            continue
    raise InvalidMatcher(f"invalid occurrence matcher at position {pos}", fatal=True)