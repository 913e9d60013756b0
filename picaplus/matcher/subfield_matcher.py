"""Matching single subfields by code and value."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, TypeVar

from picaplus.field import Subfield
from picaplus.matcher.common import (
    ComparisonOp,
    InvalidMatcher,
    MatcherFlags,
    parse_comparison_op_bstring,
    parse_string,
    skip_ws,
)

_ALL_CODES = tuple("0123456789abcdefghijklmnopqrstuvwxyz")

T = TypeVar("T")
Parser = Callable[[str, int], "tuple[T, int]"]


class _Kind(Enum):
    COMPARISON = "comparison"
    EXISTS = "exists"
    IN = "in"
    REGEX = "regex"


def _lower(value: bytes) -> bytes:
    return value.decode("utf-8", "surrogateescape").lower().encode("utf-8", "surrogateescape")


@lru_cache(maxsize=256)
def _compile(pattern: str, ignore_case: bool) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


def normalized_levenshtein(lhs: str, rhs: str) -> float:
    """Similarity in [0, 1]: one minus the edit distance over the longer length."""
    if not lhs and not rhs:
        return 1.0
    previous = list(range(len(rhs) + 1))
    for i, left in enumerate(lhs, start=1):
        current = [i]
        for j, right in enumerate(rhs, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (left != right),
                )
            )
        previous = current
    return 1.0 - previous[-1] / max(len(lhs), len(rhs))


@dataclass(frozen=True)
class SubfieldMatcher:
    """A predicate over one subfield: comparison, existence, membership or regex."""

    kind: _Kind
    codes: tuple[str, ...]
    op: ComparisonOp | None = None
    value: bytes = b""
    values: tuple[bytes, ...] = ()
    pattern: str | None = None
    invert: bool = False

    @classmethod
    def parse(cls, data: str) -> SubfieldMatcher:
        """Parse a complete subfield matcher such as ``0 == 'abc'``."""
        try:
            matcher, end = parse_subfield_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(f"Expected valid subfield matcher, got '{data}'")
        return matcher

    def is_match(self, subfield: Subfield, flags: MatcherFlags) -> bool:
        """Return True if the subfield satisfies this matcher."""
        has_code = subfield.code in self.codes

        def equal(lhs: bytes, rhs: bytes) -> bool:
            if flags.ignore_case:
                return _lower(lhs) == _lower(rhs)
            return lhs == rhs

        match self.kind:
            case _Kind.EXISTS:
                return has_code
            case _Kind.IN:
                result = has_code and any(equal(subfield.value, v) for v in self.values)
                return result != self.invert
            case _Kind.REGEX:
                regex = _compile(self.pattern or "", flags.ignore_case)
                text = subfield.value.decode("utf-8", errors="replace")
                result = has_code and regex.search(text) is not None
                return result != self.invert
        return self._compare(subfield.value, has_code, flags, equal)

    def _compare(
        self,
        actual: bytes,
        has_code: bool,
        flags: MatcherFlags,
        equal: Callable[[bytes, bytes], bool],
    ) -> bool:
        expected = self.value
        if self.op is ComparisonOp.NE:
            return not has_code or not equal(actual, expected)
        if not has_code:
            return False
        if self.op is ComparisonOp.EQ:
            return equal(actual, expected)
        if self.op is ComparisonOp.SIMILAR:
            lhs = actual.decode("utf-8", errors="replace")
            rhs = expected.decode("utf-8", errors="replace")
            if flags.ignore_case:
                lhs, rhs = lhs.lower(), rhs.lower()
            return normalized_levenshtein(lhs, rhs) > flags.strsim_threshold
        if flags.ignore_case:
            actual, expected = _lower(actual), _lower(expected)
        if self.op is ComparisonOp.STARTS_WITH:
            return actual.startswith(expected)
        if self.op is ComparisonOp.ENDS_WITH:
            return actual.endswith(expected)
        raise InvalidMatcher(f"operator {self.op} cannot compare subfield values")


def _ws(parser: Callable[[str, int], tuple[T, int]]) -> Callable[[str, int], tuple[T, int]]:
    def wrapped(text: str, pos: int) -> tuple[T, int]:
        result, pos = parser(text, skip_ws(text, pos))
        return result, skip_ws(text, pos)

    return wrapped


def _literal(word: str) -> Callable[[str, int], tuple[str, int]]:
    def parser(text: str, pos: int) -> tuple[str, int]:
        if not text.startswith(word, pos):
            raise InvalidMatcher(f"expected '{word}' at position {pos}")
        return word, pos + len(word)

    return parser


def _is_code(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalnum()


def _read_codes(text: str, pos: int) -> tuple[tuple[str, ...], int]:
    end = pos
    while end < len(text) and _is_code(text[end]):
        end += 1
    return tuple(text[pos:end]), end


def parse_subfield_codes(text: str, pos: int) -> tuple[tuple[str, ...], int]:
    """Read ``[abc]``, ``*`` or a run of subfield codes at ``pos``."""
    char = text[pos:pos + 1]
    if char == "[":
        codes, end = _read_codes(text, pos + 1)
        if not codes or text[end:end + 1] != "]":
            raise InvalidMatcher(f"invalid subfield code list at position {pos}", fatal=True)
        return codes, end + 1
    if char == "*":
        return _ALL_CODES, pos + 1
    codes, end = _read_codes(text, pos)
    if not codes:
        raise InvalidMatcher(f"expected subfield code at position {pos}")
    return codes, end


def _parse_comparison(text: str, pos: int) -> tuple[SubfieldMatcher, int]:
    codes, pos = _ws(parse_subfield_codes)(text, pos)
    op, pos = _ws(parse_comparison_op_bstring)(text, pos)
    value, pos = _ws(parse_string)(text, pos)
    return SubfieldMatcher(_Kind.COMPARISON, codes, op=op, value=value.encode("utf-8")), pos


def _parse_regex(text: str, pos: int) -> tuple[SubfieldMatcher, int]:
    codes, pos = parse_subfield_codes(text, pos)
    try:
        _, pos = _ws(_literal("=~"))(text, pos)
        invert = False
    except InvalidMatcher:
        _, pos = _ws(_literal("!~"))(text, pos)
        invert = True
    start = pos
    pattern, pos = parse_string(text, pos)
    try:
        re.compile(pattern)
    except re.error as exc:
        raise InvalidMatcher(f"invalid regular expression at position {start}") from exc
    return SubfieldMatcher(_Kind.REGEX, codes, pattern=pattern, invert=invert), pos


def _parse_in(text: str, pos: int) -> tuple[SubfieldMatcher, int]:
    codes, pos = parse_subfield_codes(text, pos)
    invert = False
    try:
        _, pos = _ws(_literal("not"))(text, pos)
        invert = True
    except InvalidMatcher:
        pass
    _, pos = _ws(_literal("in"))(text, pos)
    _, pos = _ws(_literal("["))(text, pos)
    try:
        value, pos = parse_string(text, pos)
        values = [value.encode("utf-8")]
        while True:
            try:
                _, after_comma = _ws(_literal(","))(text, pos)
                value, after_value = parse_string(text, after_comma)
            except InvalidMatcher:
                break
            values.append(value.encode("utf-8"))
            pos = after_value
        _, pos = _ws(_literal("]"))(text, pos)
    except InvalidMatcher as exc:
        raise InvalidMatcher(f"invalid value list at position {pos}", fatal=True) from exc
    return SubfieldMatcher(_Kind.IN, codes, values=tuple(values), invert=invert), pos


def parse_subfield_matcher_exists(text: str, pos: int) -> tuple[SubfieldMatcher, int]:
    """Read an existence matcher such as ``0?`` or ``[ab]?``."""
    codes, pos = _ws(parse_subfield_codes)(text, pos)
    if text[pos:pos + 1] != "?":
        raise InvalidMatcher(f"expected '?' at position {pos}")
    return SubfieldMatcher(_Kind.EXISTS, codes), pos + 1


_ALTERNATIVES = (
    _ws(_parse_comparison),
    _ws(_parse_regex),
    _ws(_parse_in),
    _ws(parse_subfield_matcher_exists),
)


def parse_subfield_matcher(text: str, pos: int) -> tuple[SubfieldMatcher, int]:
    """Read any subfield matcher at ``pos``; return it and the end position."""
    for alternative in _ALTERNATIVES:
        try:
            return alternative(text, pos)
        except InvalidMatcher as exc:
            if exc.fatal:
                raise
    raise InvalidMatcher(f"invalid subfield matcher at position {pos}")