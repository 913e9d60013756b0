import pytest
from hypothesis import given, strategies as st

from picaplus.occurrence import (
    InvalidOccurrence,
    Occurrence,
    PicaError,
    parse_occurrence,
    parse_occurrence_digits,
)


@pytest.mark.parametrize("digits", ["00", "01", "99", "000", "001"])
def test_parse_occurrence_digits(digits):
    assert parse_occurrence_digits(digits.encode(), 0) == (digits, len(digits))
    assert parse_occurrence_digits(digits, 0) == (digits, len(digits))


@pytest.mark.parametrize("data", [b"/00", b"a0", b"0a"])
def test_parse_occurrence_digits_invalid(data):
    with pytest.raises(InvalidOccurrence):
        parse_occurrence_digits(data, 0)


def test_parse_occurrence_digits_stops_after_three():
    assert parse_occurrence_digits(b"0123", 0) == ("012", 3)


def test_parse_occurrence():
    assert parse_occurrence(b"/00", 0) == (Occurrence("00"), 3)
    assert parse_occurrence(b"/001", 0) == (Occurrence("001"), 4)
    assert parse_occurrence("x/12 ", 1) == (Occurrence("12"), 4)


@pytest.mark.parametrize("data", [b"//00", b"00"])
def test_parse_occurrence_invalid(data):
    with pytest.raises(InvalidOccurrence):
        parse_occurrence(data, 0)


def test_occurrence_new():
    assert Occurrence("00").value == "00"
    assert Occurrence("001").value == "001"
    assert str(Occurrence("07")) == "07"


@pytest.mark.parametrize("data", ["/00", "a0", "0a", "0", "0000", ""])
def test_occurrence_new_invalid(data):
    with pytest.raises(InvalidOccurrence):
        Occurrence(data)


def test_invalid_occurrence_is_pica_error():
    with pytest.raises(PicaError):
        Occurrence("x")


def test_occurrence_ordering():
    assert Occurrence("03") < Occurrence("05")
    assert Occurrence("05") <= Occurrence("05")
    assert not Occurrence("06") <= Occurrence("05")


@given(st.from_regex(r"\A[0-9]{2,3}\Z"))
def test_occurrence_roundtrip(digits):
    occurrence, end = parse_occurrence("/" + digits, 0)
    assert occurrence == Occurrence(digits)
    assert str(occurrence) == digits
    assert end == len(digits) + 1