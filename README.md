# picaplus

Parse PICA+ fields and test them against a small query language.

PICA+ is the record format used by many library catalogues. A record is a
sequence of fields. Each field has a four-character tag (such as `003@`), an
optional occurrence (such as `/01`), and a list of subfields. Each subfield is
a single-character code followed by a value.

## Installation

```
pip install picaplus
```

The package needs only the Python standard library (Python 3.10 or later).
The tests use `pytest` and `hypothesis`, available through the `test` extra.

## Fields

```python
from picaplus.field import Field, Subfield, Tag
from picaplus.occurrence import Occurrence

field = Field.from_str("012A/01 \x1f0123456789X\x1fafoo\x1e")

str(field)                # '012A/01 $0123456789X$afoo'
field.contains_code("0")  # True
field.first("a")          # b'foo'
field.all("0")            # [b'123456789X']
field.get("x")            # None: no subfield with that code
field.to_dict()           # {'tag': '012A', 'occurrence': '01', 'subfields': [...]}
len(field)                # 2, and iterating a field yields its subfields

built = Field(Tag("003@"), None, [Subfield("0", "123456789X")])
```

- `Field.from_str` needs the complete field, including the trailing record
  separator `\x1e`. An occurrence of `/00` is read as "no occurrence".
- Subfield values are stored as `bytes`; a `str` value is encoded as UTF-8.
- `Field.write(stream)` and `Subfield.write(stream)` write the binary PICA+
  form to a byte stream.
- `Field.validate()` raises `InvalidSubfield` if any subfield value is not
  valid UTF-8.
- `picaplus.field.parse_field(data)` reads one field from the start of a byte
  string and returns the field and the bytes that follow it.

Tags must match `[0-2][0-9][0-9][A-Z@]`. Occurrences are two or three digits.
Subfield codes are single ASCII letters or digits.

Invalid input raises a subclass of `picaplus.occurrence.PicaError`:
`InvalidOccurrence`, `InvalidTag`, `InvalidSubfield`, `InvalidField`, or
`picaplus.matcher.common.InvalidMatcher`. Each of these is also a
`ValueError`.

## Matchers

The `picaplus.matcher` package holds matchers that you build from query text.
Each matcher class has a `parse` class method and an `is_match` method.

| Class                 | Module                                   | `is_match` takes                 |
|-----------------------|------------------------------------------|----------------------------------|
| `TagMatcher`          | `picaplus.matcher.tag_matcher`           | a `Tag`                          |
| `OccurrenceMatcher`   | `picaplus.matcher.occurrence_matcher`    | an `Occurrence` or `None`        |
| `SubfieldMatcher`     | `picaplus.matcher.subfield_matcher`      | a `Subfield` and flags           |
| `SubfieldListMatcher` | `picaplus.matcher.subfield_list_matcher` | an iterable of subfields, flags  |
| `FieldMatcher`        | `picaplus.matcher.field_matcher`         | a `Field` and optional flags     |
| `RecordMatcher`       | `picaplus.matcher.record_matcher`        | an iterable of fields, optional flags |

`MatcherFlags` (in `picaplus.matcher.common`) is a frozen dataclass with
`ignore_case` (default `False`) and `strsim_threshold` (default `0.8`).
`with_ignore_case(yes)` and `with_strsim_threshold(threshold)` return changed
copies.

```python
from picaplus.field import Field
from picaplus.matcher.common import MatcherFlags
from picaplus.matcher.field_matcher import FieldMatcher
from picaplus.matcher.record_matcher import RecordMatcher

flags = MatcherFlags()

matcher = FieldMatcher.parse("012A/*{0? && 0 == 'abc'}")
matcher.is_match(Field.from_str("012A/01 \x1f0abc\x1e"), flags)  # True

record = [
    Field.from_str("003@ \x1f0123456789X\x1e"),
    Field.from_str("002@ \x1f0Tp1\x1e"),
]
query = RecordMatcher.parse("003@? && 002@.0 =^ 'Tp' && #003@ == 1")
query.is_match(record, flags)  # True

query.is_match(record, MatcherFlags().with_ignore_case(True))
```

`SubfieldListMatcher` and `RecordMatcher` can be combined in code with `&`
and `|`. `RecordMatcher.TRUE` matches every record. `OccurrenceMatcher.ANY`
and `OccurrenceMatcher.NONE` are the `/*` and "no occurrence" matchers;
`TagMatcher.from_tag` and `OccurrenceMatcher.from_occurrence` build exact
matchers.

### Query language

| Syntax                                        | Meaning                                                          |
|-----------------------------------------------|------------------------------------------------------------------|
| `003@`, `0[12]3A`, `01.A`                     | tag; `[..]` is a character class, `.` is any allowed character   |
| `/01`, `/01-09`, `/*`, `/00`, nothing         | occurrence: exact, range, any, none, none                        |
| `0 == 'x'`, `!=`, `=^`, `=$`, `=*`            | equal, not equal, starts with, ends with, similar                |
| `0 =~ '^re'`, `0 !~ 're'`                     | regular expression (Python `re` syntax) matches or does not      |
| `0 in ['a', 'b']`, `0 not in [...]`           | membership                                                       |
| `0?`, `[ab]?`, `ab?`, `*?`                    | subfield exists; `*` stands for all digits and lower-case letters |
| `#0 >= 2`                                     | number of subfields with a code (`==`, `!=`, `>`, `>=`, `<`, `<=`) |
| `#012A > 1`, `#012A{0 == 'x'} == 1`           | number of fields in a record                                     |
| `&&`, `\|\|`, `!`, `( ... )`                  | and, or, not, grouping (`&&` binds tighter than `\|\|`)          |
| `012A.0 == 'x'`, `012A $0 == 'x'`, `012A{...}` | a field condition on its subfields                              |
| `012A?`                                       | the field exists                                                 |

Strings may use single or double quotes, with backslash escapes. `=*` compares
with normalised Levenshtein similarity and matches when the score is greater
than `strsim_threshold`. A condition written directly after the tag, without
`.` or `$` (as in `012A0 == 'x'`), is accepted but prints
`Don't use lazy syntax!` to standard error. A query that cannot be parsed
raises `InvalidMatcher`.

## What this package does not do

The package works on fields and lists of fields already in memory. It has no
reader for record files or compressed dumps, no writer for whole records, no
path or selector expressions for extracting values into tables, and no
command-line program. To match a record, split it into fields yourself (for
example with `parse_field`) and pass the list to `RecordMatcher.is_match`.