"""Operators, flags and small parsing helpers shared by the matchers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from picaplus.occurrence import PicaError

_WHITESPACE = " \t\r\n"

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "/": "/",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


class InvalidMatcher(PicaError, ValueError):
    """Raised when a matcher expression cannot be parsed.

    ``fatal`` marks an error after which no other alternative may be tried.
    """

    def __init__(self, message: str, fatal: bool = False) -> None:
        super().__init__(message)
        self.fatal = fatal


class BooleanOp(Enum):
    """Boolean connectives between matchers."""

    AND = "&&"
    OR = "||"


class ComparisonOp(Enum):
    """Comparison operators used by subfield and cardinality matchers."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    STARTS_WITH = "=^"
    ENDS_WITH = "=$"
    SIMILAR = "=*"


_BSTRING_OPS = (
    ComparisonOp.EQ,
    ComparisonOp.NE,
    ComparisonOp.STARTS_WITH,
    ComparisonOp.ENDS_WITH,
    ComparisonOp.SIMILAR,
)

_USIZE_OPS = (
    ComparisonOp.EQ,
    ComparisonOp.NE,
    ComparisonOp.GE,
    ComparisonOp.GT,
    ComparisonOp.LE,
    ComparisonOp.LT,
)


@dataclass(frozen=True)
class MatcherFlags:
    """Options that change how values are compared."""

    ignore_case: bool = False
    strsim_threshold: float = 0.8

    def with_ignore_case(self, yes: bool) -> MatcherFlags:
        """Return a copy with ``ignore_case`` set to ``yes``."""
        return dataclasses.replace(self, ignore_case=yes)

    def with_strsim_threshold(self, threshold: float) -> MatcherFlags:
        """Return a copy with the given similarity threshold."""
        return dataclasses.replace(self, strsim_threshold=threshold)


def skip_ws(text: str, pos: int) -> int:
    """Return the first position at or after ``pos`` that is not whitespace."""
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def parse_string(text: str, pos: int) -> tuple[str, int]:
    """Read a single- or double-quoted string literal starting at ``pos``."""
    quote = text[pos:pos + 1]
    if quote not in ("'", '"'):
        raise InvalidMatcher(f"expected string literal at position {pos}")

    chars: list[str] = []
    i = pos + 1
    while i < len(text):
        char = text[i]
        if char == quote:
            return "".join(chars), i + 1
        if char == "\\":
            if i + 1 >= len(text):
                break
            escaped = text[i + 1]
            chars.append(_ESCAPES.get(escaped, "\\" + escaped))
            i += 2
            continue
        chars.append(char)
        i += 1
    raise InvalidMatcher(f"unterminated string literal at position {pos}")


def _parse_op(
    text: str, pos: int, ops: tuple[ComparisonOp, ...]
) -> tuple[ComparisonOp, int]:
    for op in ops:
        if text.startswith(op.value, pos):
            return op, pos + len(op.value)
    raise InvalidMatcher(f"expected comparison operator at position {pos}")


def parse_comparison_op_bstring(text: str, pos: int) -> tuple[ComparisonOp, int]:
    """Read a comparison operator valid between strings."""
    return _parse_op(text, pos, _BSTRING_OPS)


def parse_comparison_op_usize(text: str, pos: int) -> tuple[ComparisonOp, int]:
    """Read a comparison operator valid between counts."""
    return _parse_op(text, pos, _USIZE_OPS)