"""
Record contract for PCD points.

Anything read from a PCD body implements Decodable; anything written by
SeqWriter implements Encodable. A point is a fixed-size chunk in binary data
and a single line of literals in ASCII data.

Two variants exist:
- static records: the shape is fixed by the type (read_spec / write_spec);
- the dynamic record (engines.dyn_record.DynRecord): the shape comes from a
  Schema at runtime, so it has no static spec.

Conforming static types are supplied by callers; this module only consumes
them. The eight numeric kinds are provided as single-field records so bare
scalar columns can be scanned with the same contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterator, List, Optional, Sequence

from engines.pcd_errors import (
    FieldSizeMismatchError,
    ParseError,
    SchemaMismatchError,
    TokenCountMismatchError,
)
from engines.pcd_meta import DataKind, FieldDef, Schema, SpecEntry, ValueKind, schema_shape
from engines.scalar_codec import parse_token, read_line_tokens, read_values


class Decodable(ABC):
    @classmethod
    @abstractmethod
    def is_dynamic(cls) -> bool:
        ...

    @classmethod
    @abstractmethod
    def read_spec(cls) -> Optional[List[SpecEntry]]:
        """
        Static shape as (name, kind, count) entries. A None count means the
        count is supplied by the file schema. Dynamic records return None.
        """

    @classmethod
    @abstractmethod
    def decode_chunk(cls, stream, schema: Schema):
        ...

    @classmethod
    @abstractmethod
    def decode_line(cls, stream, schema: Schema):
        ...


class Encodable(ABC):
    @classmethod
    @abstractmethod
    def is_dynamic(cls) -> bool:
        ...

    @classmethod
    @abstractmethod
    def write_spec(cls) -> Schema:
        """Static shape with every name and count fixed."""

    @abstractmethod
    def encode_chunk(self, sink, schema: Schema) -> None:
        ...

    @abstractmethod
    def encode_line(self, sink, schema: Schema) -> None:
        ...


class ScalarRecord(Decodable):
    """A bare numeric value read as a one-field point."""

    KIND: ClassVar[ValueKind]

    @classmethod
    def is_dynamic(cls) -> bool:
        return False

    @classmethod
    def read_spec(cls) -> List[SpecEntry]:
        return [(None, cls.KIND, 1)]

    @classmethod
    def decode_chunk(cls, stream, schema: Schema):
        value = read_values(stream, cls.KIND, 1)[0]
        return cls(value.item())

    @classmethod
    def decode_line(cls, stream, schema: Schema):
        tokens = read_line_tokens(stream)
        if len(tokens) != 1:
            raise TokenCountMismatchError(1, len(tokens))
        return cls(parse_token(cls.KIND, tokens[0]))


class _IntScalar(ScalarRecord, int):
    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class _FloatScalar(ScalarRecord, float):
    def __repr__(self) -> str:
        return f"{type(self).__name__}({float(self)!r})"


class I8(_IntScalar):
    KIND = ValueKind.I8


class I16(_IntScalar):
    KIND = ValueKind.I16


class I32(_IntScalar):
    KIND = ValueKind.I32


class U8(_IntScalar):
    KIND = ValueKind.U8


class U16(_IntScalar):
    KIND = ValueKind.U16


class U32(_IntScalar):
    KIND = ValueKind.U32


class F32(_FloatScalar):
    KIND = ValueKind.F32


class F64(_FloatScalar):
    KIND = ValueKind.F64


SCALAR_RECORDS = {cls.KIND: cls for cls in (I8, I16, I32, U8, U16, U32, F32, F64)}


def validate_read_spec(record_type, schema: Sequence[FieldDef]) -> None:
    """
    Check that a file schema can be decoded into `record_type`.
    Dynamic types accept any schema.
    """
    if record_type.is_dynamic():
        return
    spec = record_type.read_spec()
    found = schema_shape(schema)
    if len(spec) != len(schema):
        raise SchemaMismatchError(spec, found)
    for (name, kind, count), d in zip(spec, schema):
        if kind is not d.kind:
            raise SchemaMismatchError(spec, found)
        if name is not None and d.name is not None and name != d.name:
            raise SchemaMismatchError(spec, found)
        if count is not None and count != d.count:
            raise FieldSizeMismatchError(d.name or name or "", count, d.count)


def iter_records(
    stream,
    record_type,
    schema: Schema,
    data_kind: DataKind,
    num_points: int,
) -> Iterator:
    """
    Decode `num_points` records from a body stream positioned after DATA.
    ParseErrors in ASCII data are re-raised with the 1-based body line.
    """
    validate_read_spec(record_type, schema)
    for idx in range(num_points):
        if data_kind is DataKind.BINARY:
            yield record_type.decode_chunk(stream, schema)
            continue
        try:
            yield record_type.decode_line(stream, schema)
        except ParseError as e:
            if e.line is not None:
                raise
            raise ParseError(idx + 1, e.desc) from e
