"""Matching lists of subfields with boolean combinations and cardinalities."""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, TypeVar

from picaplus.field import Subfield
from picaplus.matcher.common import (
    BooleanOp,
    ComparisonOp,
    InvalidMatcher,
    MatcherFlags,
    parse_comparison_op_usize,
    skip_ws,
)
from picaplus.matcher.subfield_matcher import (
    SubfieldMatcher,
    parse_subfield_matcher,
    parse_subfield_matcher_exists,
)

T = TypeVar("T")

_DIGITS = re.compile(r"[0-9]+")

_COMPARE: dict[ComparisonOp, Callable[[int, int], bool]] = {
    ComparisonOp.EQ: operator.eq,
    ComparisonOp.NE: operator.ne,
    ComparisonOp.GT: operator.gt,
    ComparisonOp.GE: operator.ge,
    ComparisonOp.LT: operator.lt,
    ComparisonOp.LE: operator.le,
}


class _Kind(Enum):
    SINGLETON = "singleton"
    GROUP = "group"
    NOT = "not"
    COMPOSITE = "composite"
    CARDINALITY = "cardinality"


@dataclass(frozen=True)
class SubfieldListMatcher:
    """A predicate over the subfields of one field."""

    kind: _Kind
    matcher: SubfieldMatcher | None = None
    children: tuple[SubfieldListMatcher, ...] = ()
    op: BooleanOp | None = None
    code: str | None = None
    comparison: ComparisonOp | None = None
    count: int = 0

    @classmethod
    def parse(cls, data: str) -> SubfieldListMatcher:
        """Parse a complete subfield list matcher such as ``0 == 'abc' && 9?``."""
        try:
            matcher, end = parse_subfield_list_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(
                f"Expected valid subfield list matcher, got '{data}'"
            )
        return matcher

    def is_match(self, subfields: Iterable[Subfield], flags: MatcherFlags) -> bool:
        """Return True if the subfield list satisfies this matcher."""
        subfields = list(subfields)
        match self.kind:
            case _Kind.SINGLETON:
                assert self.matcher is not None
                return any(self.matcher.is_match(s, flags) for s in subfields)
            case _Kind.GROUP:
                return self.children[0].is_match(subfields, flags)
            case _Kind.NOT:
                return not self.children[0].is_match(subfields, flags)
            case _Kind.COMPOSITE:
                lhs, rhs = self.children
                if self.op is BooleanOp.AND:
                    return lhs.is_match(subfields, flags) and rhs.is_match(subfields, flags)
                return lhs.is_match(subfields, flags) or rhs.is_match(subfields, flags)
        cardinality = sum(1 for s in subfields if s.code == self.code)
        return _COMPARE[self.comparison](cardinality, self.count)

    def __and__(self, other: object) -> SubfieldListMatcher:
        if not isinstance(other, SubfieldListMatcher):
            return NotImplemented
        return SubfieldListMatcher(
            _Kind.COMPOSITE, children=(self, other), op=BooleanOp.AND
        )

    def __or__(self, other: object) -> SubfieldListMatcher:
        if not isinstance(other, SubfieldListMatcher):
            return NotImplemented
        return SubfieldListMatcher(
            _Kind.COMPOSITE, children=(self, other), op=BooleanOp.OR
        )


Parser = Callable[[str, int], "tuple[T, int]"]


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


def _parse_code(text: str, pos: int) -> tuple[str, int]:
    char = text[pos:pos + 1]
    if not (char and char.isascii() and char.isalnum()):
        raise InvalidMatcher(f"expected subfield code at position {pos}")
    return char, pos + 1


def _parse_count(text: str, pos: int) -> tuple[int, int]:
    match = _DIGITS.match(text, pos)
    if match is None:
        raise InvalidMatcher(f"expected unsigned integer at position {pos}")
    return int(match.group()), match.end()


def parse_subfield_list_matcher_singleton(
    text: str, pos: int
) -> tuple[SubfieldListMatcher, int]:
    """Read a single subfield matcher and wrap it as a list matcher."""
    matcher, pos = _ws(parse_subfield_matcher)(text, pos)
    return SubfieldListMatcher(_Kind.SINGLETON, matcher=matcher), pos


def _parse_exists(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    matcher, pos = _ws(parse_subfield_matcher_exists)(text, pos)
    return SubfieldListMatcher(_Kind.SINGLETON, matcher=matcher), pos


def _parse_cardinality(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    _, pos = _literal("#")(text, pos)

    def body(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
        code, pos = _ws(_parse_code)(text, pos)
        comparison, pos = _ws(parse_comparison_op_usize)(text, pos)
        count, pos = _parse_count(text, pos)
        return (
            SubfieldListMatcher(
                _Kind.CARDINALITY, code=code, comparison=comparison, count=count
            ),
            pos,
        )

    return _cut(body)(text, pos)


def _parse_group(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    _, pos = _ws(_literal("("))(text, pos)

    def body(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
        inner, pos = _alt(
            _parse_composite,
            parse_subfield_list_matcher_singleton,
            _parse_not,
            _parse_group,
        )(text, pos)
        _, pos = _ws(_literal(")"))(text, pos)
        return SubfieldListMatcher(_Kind.GROUP, children=(inner,)), pos

    return _cut(body)(text, pos)


def _parse_not(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    _, pos = _ws(_literal("!"))(text, pos)
    inner, pos = _cut(_alt(_parse_group, _parse_exists, _parse_not))(text, pos)
    return SubfieldListMatcher(_Kind.NOT, children=(inner,)), pos


def _parse_and_operand(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    return _alt(
        _ws(_parse_group),
        _ws(parse_subfield_list_matcher_singleton),
        _ws(_parse_not),
    )(text, pos)


def _parse_and(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    result, pos = _parse_and_operand(text, pos)
    while True:
        try:
            _, after = _ws(_literal("&&"))(text, pos)
            operand, after = _parse_and_operand(text, after)
        except InvalidMatcher as exc:
            if exc.fatal:
                raise
            break
        result = result & operand
        pos = after
    return result, pos


def _parse_or_operand(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    return _alt(
        _ws(_parse_group),
        _ws(_parse_and),
        _ws(parse_subfield_list_matcher_singleton),
        _ws(_parse_not),
    )(text, pos)


def _parse_or(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    result, pos = _parse_or_operand(text, pos)
    while True:
        try:
            _, after = _ws(_literal("||"))(text, pos)
        except InvalidMatcher:
            break
        operand, pos = _cut(_parse_or_operand)(text, after)
        result = result | operand
    return result, pos


def _parse_composite(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    return _alt(_parse_or, _parse_and)(text, pos)


def parse_subfield_list_matcher(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    """Read a subfield list matcher at ``pos``; return it and the end position."""
    return _alt(
        _parse_group,
        _parse_not,
        _parse_composite,
        parse_subfield_list_matcher_singleton,
        _parse_cardinality,
    )(text, pos)