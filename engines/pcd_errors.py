"""
Error kinds shared by the record contract, dynamic records and the writer.

Every failure is raised to the immediate caller; nothing is retried or
downgraded. Encode-side errors are raised before any byte of the failing
record reaches the sink.
"""

from __future__ import annotations

from typing import Optional, Sequence


class PcdError(Exception):
    """Base class for all codec failures."""


class ParseError(PcdError):
    """A literal failed to parse as the expected numeric kind."""

    def __init__(self, line: Optional[int], desc: str):
        self.line = line
        self.desc = desc
        where = f"line {line}" if line is not None else "unknown line"
        super().__init__(f"Failed to parse PCD data at {where}: {desc}")


class SchemaMismatchError(PcdError):
    def __init__(self, expect: Sequence, found: Sequence):
        self.expect = list(expect)
        self.found = list(found)
        super().__init__(
            f"File schema and record schema mismatch. Expect {self.expect!r}, but found {self.found!r}"
        )


class FieldSizeMismatchError(PcdError):
    def __init__(self, field_name: str, expect: int, found: int):
        self.field_name = field_name
        self.expect = expect
        self.found = found
        super().__init__(
            f'Expects {expect} elements in "{field_name}", but found {found} elements in record'
        )


class TokenCountMismatchError(PcdError):
    def __init__(self, expect: int, found: int):
        self.expect = expect
        self.found = found
        super().__init__(f"Record has {expect} fields, but the line has {found} tokens")


class InvalidArgumentError(PcdError, ValueError):
    def __init__(self, desc: str):
        self.desc = desc
        super().__init__(f"Invalid argument: {desc}")


class TruncatedInputError(PcdError, EOFError):
    """Short read: the stream ended inside a chunk or before a line."""

    def __init__(self, expect: int, found: int):
        self.expect = expect
        self.found = found
        super().__init__(f"Unexpected end of PCD data: wanted {expect} bytes, got {found}")
