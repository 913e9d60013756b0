"""PICA+ tags, occurrences, subfields and fields, with matchers for filtering them."""

__version__ = "0.1.0"