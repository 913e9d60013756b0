"""PICA+ tags, subfields and fields, with parsing and serialisation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field as dc_field
from typing import BinaryIO, Iterator

from picaplus.occurrence import (
    InvalidOccurrence,
    Occurrence,
    PicaError,
    parse_occurrence,
)

RS = b"\x1e"
US = b"\x1f"
SP = b" "

_TAG_STR = re.compile(r"[0-2][0-9]{2}[A-Z@]")
_TAG_BYTES = re.compile(rb"[0-2][0-9]{2}[A-Z@]")
_SUBFIELD_BYTES = re.compile(rb"\x1f([0-9A-Za-z])([^\x1e\x1f]*)")


class InvalidTag(PicaError, ValueError):
    """Raised when a tag is not a valid PICA+ tag."""


class InvalidSubfield(PicaError, ValueError):
    """Raised when a subfield code or value is invalid."""


class InvalidField(PicaError, ValueError):
    """Raised when data cannot be parsed as a PICA+ field."""


@dataclass(frozen=True)
class Tag:
    """A four character PICA+ tag such as ``003@``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _TAG_STR.fullmatch(self.value):
            raise InvalidTag(f"invalid tag {self.value!r}")

    def __str__(self) -> str:
        return self.value


class Subfield:
    """A subfield: a one character code and a byte string value."""

    __slots__ = ("code", "value")

    def __init__(self, code: str, value: str | bytes) -> None:
        if not (isinstance(code, str) and len(code) == 1 and code.isascii() and code.isalnum()):
            raise InvalidSubfield(f"invalid subfield code {code!r}")
        if isinstance(value, str):
            value = value.encode("utf-8")
        value = bytes(value)
        if RS in value or US in value:
            raise InvalidSubfield("subfield value contains a separator")
        self.code = code
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subfield):
            return NotImplemented
        return self.code == other.code and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.code, self.value))

    def __repr__(self) -> str:
        return f"Subfield({self.code!r}, {self.value!r})"

    def validate(self) -> None:
        """Raise InvalidSubfield unless the value is valid UTF-8."""
        try:
            self.value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidSubfield(f"subfield ${self.code} is not valid UTF-8") from exc

    def write(self, stream: BinaryIO) -> None:
        """Write the subfield in PICA+ format to a binary stream."""
        stream.write(US + self.code.encode("ascii") + self.value)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "value": self.value.decode("utf-8", errors="replace")}

    def __str__(self) -> str:
        return f"${self.code}{self.value.decode('utf-8', errors='replace')}"


@dataclass
class Field:
    """A PICA+ field: tag, optional occurrence and a list of subfields."""

    tag: Tag
    occurrence: Occurrence | None = None
    subfields: list[Subfield] = dc_field(default_factory=list)

    @classmethod
    def from_str(cls, data: str) -> Field:
        """Parse a complete field, including the trailing record separator."""
        try:
            result, rest = parse_field(data.encode("utf-8"))
        except InvalidField:
            raise InvalidField("invalid field!") from None
        if rest:
            raise InvalidField("invalid field!")
        return result

    def __iter__(self) -> Iterator[Subfield]:
        return iter(self.subfields)

    def __len__(self) -> int:
        return len(self.subfields)

    def contains_code(self, code: str) -> bool:
        return any(subfield.code == code for subfield in self.subfields)

    def get(self, code: str) -> list[Subfield] | None:
        """All subfields with the given code, or None if there are none."""
        found = [subfield for subfield in self.subfields if subfield.code == code]
        return found or None

    def first(self, code: str) -> bytes | None:
        """The value of the first subfield with the given code."""
        return next((s.value for s in self.subfields if s.code == code), None)

    def all(self, code: str) -> list[bytes] | None:
        """All values of subfields with the given code, or None if there are none."""
        values = [s.value for s in self.subfields if s.code == code]
        return values or None

    def validate(self) -> None:
        """Raise InvalidSubfield unless every subfield value is valid UTF-8."""
        for subfield in self.subfields:
            subfield.validate()

    def write(self, stream: BinaryIO) -> None:
        """Write the field in PICA+ format to a binary stream."""
        stream.write(self.tag.value.encode("ascii"))
        if self.occurrence is not None:
            stream.write(b"/" + self.occurrence.value.encode("ascii"))
        stream.write(SP)
        for subfield in self.subfields:
            subfield.write(stream)
        stream.write(RS)

    def to_dict(self) -> dict:
        result: dict = {"tag": self.tag.value}
        if self.occurrence is not None:
            result["occurrence"] = self.occurrence.value
        result["subfields"] = [subfield.to_dict() for subfield in self.subfields]
        return result

    def __str__(self) -> str:
        text = self.tag.value
        if self.occurrence is not None:
            text += f"/{self.occurrence}"
        if self.subfields:
            text += " " + "".join(str(subfield) for subfield in self.subfields)
        return text


def parse_field(data: bytes) -> tuple[Field, bytes]:
    """Parse one field from the start of ``data``; return it and the remaining bytes."""
    match = _TAG_BYTES.match(data)
    if match is None:
        raise InvalidField("expected tag")
    tag = Tag(match.group().decode("ascii"))
    pos = match.end()

    occurrence: Occurrence | None = None
    if data.startswith(b"/00", pos):
        pos += 3
    elif data[pos:pos + 1] == b"/":
        try:
            occurrence, pos = parse_occurrence(data, pos)
        except InvalidOccurrence as exc:
            raise InvalidField("invalid occurrence") from exc

    if data[pos:pos + 1] != SP:
        raise InvalidField("expected space after tag")
    pos += 1

    subfields = []
    while (sub := _SUBFIELD_BYTES.match(data, pos)) is not None:
        subfields.append(Subfield(sub.group(1).decode("ascii"), sub.group(2)))
        pos = sub.end()

    if data[pos:pos + 1] != RS:
        raise InvalidField("expected record separator")
    return Field(tag, occurrence, subfields), data[pos + 1:]