"""
Schema-driven points for tools that do not know the point shape up front.

A DynRecord holds one Field per schema entry; each Field is a tagged union
over the eight value kinds (tag = ValueKind, payload = 1-D numpy array of that
kind). Nothing ties a DynRecord to a schema at construction time, so the
kind/count sequence is checked against the target schema before every encode.
"""

from __future__ import annotations

import io
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from engines.pcd_errors import InvalidArgumentError, SchemaMismatchError, TokenCountMismatchError
from engines.pcd_meta import FieldDef, Schema, SpecEntry, ValueKind, make_schema, schema_shape, total_count
from engines.record import Decodable, Encodable
from engines.scalar_codec import (
    convert_exact,
    encode_values,
    format_value,
    parse_token,
    read_line_tokens,
    read_values,
)


def _coerce_values(kind: ValueKind, values) -> np.ndarray:
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{kind.name} field values must be 1-D, got shape {arr.shape}")
    if arr.size == 0:
        out = np.empty(0, dtype=kind.dtype)
    elif kind.is_float:
        if arr.dtype.kind not in "iuf":
            raise InvalidArgumentError(f"cannot store {arr.dtype} values in a {kind.name} field")
        with np.errstate(over="ignore"):
            out = arr.astype(kind.dtype)
        if np.any(np.isfinite(arr) & ~np.isfinite(out)):
            raise InvalidArgumentError(f"values out of range for a {kind.name} field")
    else:
        if arr.dtype.kind not in "iu":
            raise InvalidArgumentError(f"cannot store {arr.dtype} values in a {kind.name} field")
        info = np.iinfo(kind.dtype)
        if int(arr.min()) < info.min or int(arr.max()) > info.max:
            raise InvalidArgumentError(f"values out of range for a {kind.name} field")
        out = arr.astype(kind.dtype)
    out.flags.writeable = False
    return out


class Field:
    """Typed element array of one point field."""

    __slots__ = ("_kind", "_values")

    def __init__(self, kind: ValueKind, values: Iterable = ()):
        kind = ValueKind(kind)
        if not isinstance(values, np.ndarray):
            values = list(values)
        self._kind = kind
        self._values = _coerce_values(kind, values)

    def kind(self) -> ValueKind:
        return self._kind

    def count(self) -> int:
        return int(self._values.shape[0])

    @property
    def values(self) -> np.ndarray:
        return self._values

    def tolist(self) -> list:
        return self._values.tolist()

    def __len__(self) -> int:
        return self.count()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return self._kind is other._kind and np.array_equal(
            self._values, other._values, equal_nan=self._kind.is_float
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Field({self._kind.name}, {self.tolist()!r})"


class DynRecord(Decodable, Encodable):
    """One point as an ordered list of Fields, in schema order."""

    def __init__(self, fields: Iterable[Field] = ()):
        fields = list(fields)
        for f in fields:
            if not isinstance(f, Field):
                raise InvalidArgumentError(f"DynRecord entries must be Field, got {type(f).__name__}")
        self.fields: List[Field] = fields

    # ---------- sequence ----------
    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, idx):
        return self.fields[idx]

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __eq__(self, other) -> bool:
        if not isinstance(other, DynRecord):
            return NotImplemented
        return self.fields == other.fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.fields!r})"

    # ---------- schema ----------
    def shape(self) -> List[Tuple[ValueKind, int]]:
        return [(f.kind(), f.count()) for f in self.fields]

    def is_schema_consistent(self, schema: Sequence[FieldDef]) -> bool:
        if len(self.fields) != len(schema):
            return False
        return all(
            f.kind() is d.kind and f.count() == d.count
            for f, d in zip(self.fields, schema)
        )

    def _check_schema(self, schema: Sequence[FieldDef]) -> None:
        if not self.is_schema_consistent(schema):
            raise SchemaMismatchError(schema_shape(schema), self.shape())

    def xyz(self, dtype=np.float64) -> Optional[Tuple[np.generic, np.generic, np.generic]]:
        """
        First element of the first three fields, converted to `dtype`.
        Returns None if any of the three values is not exactly representable.
        """
        if isinstance(dtype, ValueKind):
            dtype = dtype.dtype
        if len(self.fields) < 3:
            raise InvalidArgumentError(f"xyz needs at least 3 fields, record has {len(self.fields)}")
        x, y, z = self.fields[:3]
        if not (x.kind() is y.kind() is z.kind()):
            raise InvalidArgumentError(
                f"xyz fields must share one kind, got {x.kind().name} {y.kind().name} {z.kind().name}"
            )
        if min(x.count(), y.count(), z.count()) < 1:
            raise InvalidArgumentError("xyz fields must hold at least one element")

        out = tuple(convert_exact(f.values[0], dtype) for f in (x, y, z))
        if any(v is None for v in out):
            return None
        return out  # type: ignore[return-value]

    # ---------- contract ----------
    @classmethod
    def is_dynamic(cls) -> bool:
        return True

    @classmethod
    def read_spec(cls) -> Optional[List[SpecEntry]]:
        return None

    @classmethod
    def write_spec(cls) -> Schema:
        raise InvalidArgumentError("a dynamic record has no static write spec; use bind_schema()")

    @classmethod
    def decode_chunk(cls, stream, schema: Schema):
        return cls(Field(d.kind, read_values(stream, d.kind, d.count)) for d in schema)

    @classmethod
    def decode_line(cls, stream, schema: Schema):
        tokens = read_line_tokens(stream)
        expect = total_count(schema)
        if len(tokens) != expect:
            raise TokenCountMismatchError(expect, len(tokens))

        fields = []
        pos = 0
        for d in schema:
            values = [parse_token(d.kind, tok) for tok in tokens[pos : pos + d.count]]
            pos += d.count
            fields.append(Field(d.kind, np.array(values, dtype=d.kind.dtype)))
        return cls(fields)

    def encode_chunk(self, sink, schema: Schema) -> None:
        self._check_schema(schema)
        buf = io.BytesIO()
        for f in self.fields:
            buf.write(encode_values(f.kind(), f.values))
        sink.write(buf.getvalue())

    def encode_line(self, sink, schema: Schema) -> None:
        self._check_schema(schema)
        tokens = [format_value(f.kind(), v) for f in self.fields for v in f.values]
        sink.write((" ".join(tokens) + "\n").encode("ascii"))


def bind_schema(schema: Iterable) -> type:
    """
    Return a static DynRecord type fixed to `schema`.

    SeqWriter refuses dynamic record types; a bound type supplies the write
    spec so plain DynRecord instances can be pushed.
    """
    fixed = make_schema(schema)

    class SchemaBoundRecord(DynRecord):
        SCHEMA = fixed

        @classmethod
        def is_dynamic(cls) -> bool:
            return False

        @classmethod
        def read_spec(cls) -> List[SpecEntry]:
            return [(d.name, d.kind, d.count) for d in fixed]

        @classmethod
        def write_spec(cls) -> Schema:
            return fixed

    return SchemaBoundRecord
