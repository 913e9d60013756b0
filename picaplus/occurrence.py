"""PICA+ occurrences: the optional two or three digit suffix of a field tag."""

from __future__ import annotations

import re
from dataclasses import dataclass

_DIGITS_STR = re.compile(r"[0-9]{2,3}")
_DIGITS_BYTES = re.compile(rb"[0-9]{2,3}")


class PicaError(Exception):
    """Base class of all errors raised by this package."""


class InvalidOccurrence(PicaError, ValueError):
    """Raised when an occurrence is not two or three ASCII digits."""


@dataclass(frozen=True, order=True)
class Occurrence:
    """A PICA+ occurrence such as ``01`` or ``001``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _DIGITS_STR.fullmatch(self.value):
            raise InvalidOccurrence("Invalid occurrence")

    def __str__(self) -> str:
        return self.value


def parse_occurrence_digits(text: str | bytes, pos: int) -> tuple[str, int]:
    """Read two or three digits at ``pos``; return them and the end position."""
    pattern = _DIGITS_BYTES if isinstance(text, (bytes, bytearray)) else _DIGITS_STR
    match = pattern.match(text, pos)
    if match is None:
        raise InvalidOccurrence(f"expected occurrence digits at position {pos}")
    digits = match.group()
    if isinstance(digits, (bytes, bytearray)):
        digits = digits.decode("ascii")
    return digits, match.end()


def parse_occurrence(text: str | bytes, pos: int) -> tuple[Occurrence, int]:
    """Read ``/`` followed by occurrence digits; return the occurrence and end position."""
    slash = b"/" if isinstance(text, (bytes, bytearray)) else "/"
    if text[pos:pos + 1] != slash:
        raise InvalidOccurrence(f"expected '/' at position {pos}")
    digits, end = parse_occurrence_digits(text, pos + 1)
    return Occurrence(digits), end