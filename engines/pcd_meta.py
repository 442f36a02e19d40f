"""
PCD header metadata: value kinds, field descriptors, schemas, viewpoint.

Layout contract:
- Kinds: I8 I16 I32 U8 U16 U32 F32 F64
- SIZE per kind (bytes): 1 2 4 1 2 4 4 8
- TYPE letter: I (signed), U (unsigned), F (float)
- Binary body is little-endian, fields consecutive in schema order, no padding.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Optional, Sequence, Tuple

import numpy as np

from engines.pcd_errors import InvalidArgumentError


class ValueKind(Enum):
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    F32 = "f32"
    F64 = "f64"

    @property
    def size(self) -> int:
        return _KIND_LAYOUT[self][1]

    @property
    def type_char(self) -> str:
        return _KIND_LAYOUT[self][0]

    @property
    def dtype(self) -> np.dtype:
        """Little-endian numpy dtype used for both storage and the binary body."""
        return _KIND_DTYPES[self]

    @property
    def is_float(self) -> bool:
        return self.type_char == "F"

    @classmethod
    def from_type_size(cls, type_char: str, size: int) -> "ValueKind":
        """Map a header TYPE/SIZE pair back to a kind."""
        kind = _TYPE_SIZE_TO_KIND.get((str(type_char).upper(), int(size)))
        if kind is None:
            raise InvalidArgumentError(f"unsupported TYPE/SIZE pair: {type_char} {size}")
        return kind


_KIND_LAYOUT: Final[dict] = {
    ValueKind.I8: ("I", 1),
    ValueKind.I16: ("I", 2),
    ValueKind.I32: ("I", 4),
    ValueKind.U8: ("U", 1),
    ValueKind.U16: ("U", 2),
    ValueKind.U32: ("U", 4),
    ValueKind.F32: ("F", 4),
    ValueKind.F64: ("F", 8),
}

_KIND_DTYPES: Final[dict] = {
    ValueKind.I8: np.dtype("<i1"),
    ValueKind.I16: np.dtype("<i2"),
    ValueKind.I32: np.dtype("<i4"),
    ValueKind.U8: np.dtype("<u1"),
    ValueKind.U16: np.dtype("<u2"),
    ValueKind.U32: np.dtype("<u4"),
    ValueKind.F32: np.dtype("<f4"),
    ValueKind.F64: np.dtype("<f8"),
}

_TYPE_SIZE_TO_KIND: Final[dict] = {layout: kind for kind, layout in _KIND_LAYOUT.items()}

for _kind in ValueKind:
    assert _KIND_DTYPES[_kind].itemsize == _kind.size, f"{_kind.name} dtype width mismatch"


class DataKind(Enum):
    ASCII = "ascii"
    BINARY = "binary"

    @classmethod
    def parse(cls, text: str) -> "DataKind":
        try:
            return cls(str(text).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"unknown DATA kind: {text!r} (expected ascii or binary)") from None


@dataclass(frozen=True)
class FieldDef:
    name: Optional[str]
    kind: ValueKind
    count: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ValueKind):
            object.__setattr__(self, "kind", ValueKind(self.kind))
        if int(self.count) < 0:
            raise InvalidArgumentError(f"field count must be >= 0, got {self.count}")
        object.__setattr__(self, "count", int(self.count))


Schema = Tuple[FieldDef, ...]

# Entry of a read spec: (name or None, kind, count or None when schema-supplied).
SpecEntry = Tuple[Optional[str], ValueKind, Optional[int]]


def make_schema(fields: Iterable) -> Schema:
    """
    Build a Schema from FieldDefs or (name, kind, count) tuples.
    """
    out = []
    for f in fields:
        if isinstance(f, FieldDef):
            out.append(f)
        else:
            name, kind, count = f
            out.append(FieldDef(name, kind, count))
    return tuple(out)


def total_count(schema: Sequence[FieldDef]) -> int:
    """Scalar elements per point, i.e. the token count of one ASCII line."""
    return sum(d.count for d in schema)


def chunk_size(schema: Sequence[FieldDef]) -> int:
    """Bytes per point in the binary body."""
    return sum(d.kind.size * d.count for d in schema)


def schema_shape(schema: Sequence[FieldDef]) -> list:
    return [(d.name, d.kind, d.count) for d in schema]


@dataclass(frozen=True)
class ViewPoint:
    """Sensor pose carried verbatim in the VIEWPOINT header line."""

    tx: float = 0.0
    ty: float = 0.0
    tz: float = 0.0
    qw: float = 1.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float, float, float, float, float]:
        return (self.tx, self.ty, self.tz, self.qw, self.qx, self.qy, self.qz)
