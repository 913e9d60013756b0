"""Query language for matching PICA+ tags, occurrences, subfields, fields and records."""