"""Matching whole records: boolean combinations of field conditions and counts."""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Iterable, TypeVar

from picaplus.field import Field
from picaplus.matcher.common import (
    BooleanOp,
    ComparisonOp,
    InvalidMatcher,
    MatcherFlags,
    parse_comparison_op_usize,
    skip_ws,
)
from picaplus.matcher.field_matcher import (
    FieldMatcher,
    parse_field_matcher,
    parse_field_matcher_exists,
)
from picaplus.matcher.occurrence_matcher import (
    OccurrenceMatcher,
    parse_occurrence_matcher,
)
from picaplus.matcher.subfield_list_matcher import (
    SubfieldListMatcher,
    _Kind as _ListKind,
    parse_subfield_list_matcher,
)
from picaplus.matcher.subfield_matcher import parse_subfield_matcher_exists
from picaplus.matcher.tag_matcher import TagMatcher, parse_tag_matcher

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
    TRUE = "true"


@dataclass(frozen=True)
class RecordMatcher:
    """A predicate over the fields of one record."""

    kind: _Kind
    field: FieldMatcher | None = None
    children: tuple[RecordMatcher, ...] = ()
    op: BooleanOp | None = None
    tag: TagMatcher | None = None
    occurrence: OccurrenceMatcher | None = None
    subfields: SubfieldListMatcher | None = None
    comparison: ComparisonOp | None = None
    count: int = 0

    TRUE: ClassVar[RecordMatcher]

    @classmethod
    def parse(cls, data: str) -> RecordMatcher:
        """Parse a complete record matcher such as ``013A? && 012A.0 == 'abc'``."""
        try:
            matcher, end = parse_record_matcher(data, 0)
        except InvalidMatcher:
            end = -1
        if end != len(data):
            raise InvalidMatcher(f"Expected valid record matcher, got '{data}'")
        return matcher

    def is_match(self, fields: Iterable[Field], flags: MatcherFlags | None = None) -> bool:
        """Return True if the record's fields satisfy this matcher."""
        if flags is None:
            flags = MatcherFlags()
        fields = list(fields)
        match self.kind:
            case _Kind.TRUE:
                return True
            case _Kind.SINGLETON:
                assert self.field is not None
                return any(self.field.is_match(f, flags) for f in fields)
            case _Kind.GROUP:
                return self.children[0].is_match(fields, flags)
            case _Kind.NOT:
                return not self.children[0].is_match(fields, flags)
            case _Kind.COMPOSITE:
                lhs, rhs = self.children
                if self.op is BooleanOp.AND:
                    return lhs.is_match(fields, flags) and rhs.is_match(fields, flags)
                return lhs.is_match(fields, flags) or rhs.is_match(fields, flags)
        return _COMPARE[self.comparison](self._cardinality(fields, flags), self.count)

    def _cardinality(self, fields: list[Field], flags: MatcherFlags) -> int:
        assert self.tag is not None and self.occurrence is not None
        return sum(
            1
            for f in fields
            if self.tag.is_match(f.tag)
            and self.occurrence.is_match(f.occurrence)
            and (self.subfields is None or self.subfields.is_match(f.subfields, flags))
        )

    def __and__(self, other: object) -> RecordMatcher:
        if not isinstance(other, RecordMatcher):
            return NotImplemented
        return RecordMatcher(_Kind.COMPOSITE, children=(self, other), op=BooleanOp.AND)

    def __or__(self, other: object) -> RecordMatcher:
        if not isinstance(other, RecordMatcher):
            return NotImplemented
        return RecordMatcher(_Kind.COMPOSITE, children=(self, other), op=BooleanOp.OR)


RecordMatcher.TRUE = RecordMatcher(_Kind.TRUE)


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


def _parse_count(text: str, pos: int) -> tuple[int, int]:
    match = _DIGITS.match(text, pos)
    if match is None:
        raise InvalidMatcher(f"expected unsigned integer at position {pos}")
    return int(match.group()), match.end()


def _parse_singleton(text: str, pos: int) -> tuple[RecordMatcher, int]:
    matcher, pos = _ws(parse_field_matcher)(text, pos)
    return RecordMatcher(_Kind.SINGLETON, field=matcher), pos


def _parse_dotted_exists(text: str, pos: int) -> tuple[FieldMatcher, int]:
    tag, pos = parse_tag_matcher(text, pos)
    occurrence, pos = parse_occurrence_matcher(text, pos)
    _, pos = _literal(".")(text, pos)
    matcher, pos = _cut(parse_subfield_matcher_exists)(text, pos)
    subfields = SubfieldListMatcher(_ListKind.SINGLETON, matcher=matcher)
    return FieldMatcher(tag, occurrence, subfields), pos


def _parse_exists(text: str, pos: int) -> tuple[RecordMatcher, int]:
    matcher, pos = _alt(_ws(parse_field_matcher_exists), _parse_dotted_exists)(text, pos)
    return RecordMatcher(_Kind.SINGLETON, field=matcher), pos


def _parse_group(text: str, pos: int) -> tuple[RecordMatcher, int]:
    _, pos = _ws(_literal("("))(text, pos)

    def body(text: str, pos: int) -> tuple[RecordMatcher, int]:
        inner, pos = _alt(
            _parse_composite,
            _parse_singleton,
            _parse_not,
            _parse_cardinality,
            _parse_group,
        )(text, pos)
        _, pos = _ws(_literal(")"))(text, pos)
        return RecordMatcher(_Kind.GROUP, children=(inner,)), pos

    return _cut(body)(text, pos)


def _parse_not(text: str, pos: int) -> tuple[RecordMatcher, int]:
    _, pos = _ws(_literal("!"))(text, pos)
    inner, pos = _cut(_alt(_parse_group, _parse_exists, _parse_not))(text, pos)
    return RecordMatcher(_Kind.NOT, children=(inner,)), pos


def _parse_and_operand(text: str, pos: int) -> tuple[RecordMatcher, int]:
    return _alt(
        _ws(_parse_group),
        _ws(_parse_cardinality),
        _ws(_parse_singleton),
        _ws(_parse_not),
    )(text, pos)


def _parse_and(text: str, pos: int) -> tuple[RecordMatcher, int]:
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


def _parse_or_operand(text: str, pos: int) -> tuple[RecordMatcher, int]:
    return _alt(
        _ws(_parse_group),
        _ws(_parse_and),
        _ws(_parse_cardinality),
        _ws(_parse_singleton),
        _ws(_parse_not),
    )(text, pos)


def _parse_or(text: str, pos: int) -> tuple[RecordMatcher, int]:
    result, pos = _parse_or_operand(text, pos)
    while True:
        try:
            _, after = _ws(_literal("||"))(text, pos)
        except InvalidMatcher:
            break
        operand, pos = _cut(_parse_or_operand)(text, after)
        result = result | operand
    return result, pos


def _parse_composite(text: str, pos: int) -> tuple[RecordMatcher, int]:
    return _alt(_parse_or, _parse_and)(text, pos)


def _parse_braced(text: str, pos: int) -> tuple[SubfieldListMatcher, int]:
    matcher, pos = parse_subfield_list_matcher(text, pos)
    _, pos = _ws(_literal("}"))(text, pos)
    return matcher, pos


def _parse_cardinality(text: str, pos: int) -> tuple[RecordMatcher, int]:
    _, pos = _ws(_literal("#"))(text, pos)

    def body(text: str, pos: int) -> tuple[RecordMatcher, int]:
        tag, pos = _ws(parse_tag_matcher)(text, pos)
        occurrence, pos = _ws(parse_occurrence_matcher)(text, pos)
        subfields = None
        try:
            _, after = _ws(_literal("{"))(text, pos)
        except InvalidMatcher:
            pass
        else:
            subfields, pos = _cut(_parse_braced)(text, after)
        comparison, pos = _ws(parse_comparison_op_usize)(text, pos)
        count, pos = _parse_count(text, pos)
        return (
            RecordMatcher(
                _Kind.CARDINALITY,
                tag=tag,
                occurrence=occurrence,
                subfields=subfields,
                comparison=comparison,
                count=count,
            ),
            pos,
        )

    return _cut(body)(text, pos)


def parse_record_matcher(text: str, pos: int) -> tuple[RecordMatcher, int]:
    """Read a record matcher at ``pos``; return it and the end position."""
    return _alt(
        _ws(_parse_group),
        _ws(_parse_not),
        _ws(_parse_composite),
        _ws(_parse_singleton),
        _ws(_parse_cardinality),
    )(text, pos)