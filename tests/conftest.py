"""
Pytest configuration and fixtures
Provides in-memory sinks and a hand-written static point type
"""
import io
import struct
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engines.pcd_errors import TokenCountMismatchError
from engines.pcd_meta import FieldDef, ValueKind, make_schema
from engines.record import Decodable, Encodable
from engines.scalar_codec import format_value, parse_token, read_exact, read_line_tokens


class Point(Decodable, Encodable):
    """x y z as f32 plus a u32 timestamp; a conforming static record."""

    SPEC = (
        FieldDef("x", ValueKind.F32, 1),
        FieldDef("y", ValueKind.F32, 1),
        FieldDef("z", ValueKind.F32, 1),
        FieldDef("timestamp", ValueKind.U32, 1),
    )
    _STRUCT = struct.Struct("<fffI")

    def __init__(self, x: float, y: float, z: float, timestamp: int = 0):
        self.x = x
        self.y = y
        self.z = z
        self.timestamp = timestamp

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return (self.x, self.y, self.z, self.timestamp) == (other.x, other.y, other.z, other.timestamp)

    @classmethod
    def is_dynamic(cls):
        return False

    @classmethod
    def read_spec(cls):
        return [(d.name, d.kind, d.count) for d in cls.SPEC]

    @classmethod
    def write_spec(cls):
        return make_schema(cls.SPEC)

    @classmethod
    def decode_chunk(cls, stream, schema):
        return cls(*cls._STRUCT.unpack(read_exact(stream, cls._STRUCT.size)))

    @classmethod
    def decode_line(cls, stream, schema):
        tokens = read_line_tokens(stream)
        if len(tokens) != len(cls.SPEC):
            raise TokenCountMismatchError(len(cls.SPEC), len(tokens))
        return cls(*(parse_token(d.kind, tok) for d, tok in zip(cls.SPEC, tokens)))

    def encode_chunk(self, sink, schema):
        sink.write(self._STRUCT.pack(self.x, self.y, self.z, self.timestamp))

    def encode_line(self, sink, schema):
        values = (self.x, self.y, self.z, self.timestamp)
        tokens = [format_value(d.kind, v) for d, v in zip(self.SPEC, values)]
        sink.write((" ".join(tokens) + "\n").encode("ascii"))


class XYZ(Point):
    """Three f32 fields named x y z."""

    SPEC = (
        FieldDef("x", ValueKind.F32, 1),
        FieldDef("y", ValueKind.F32, 1),
        FieldDef("z", ValueKind.F32, 1),
    )
    _STRUCT = struct.Struct("<fff")

    def __init__(self, x: float, y: float, z: float):
        super().__init__(x, y, z)

    def encode_chunk(self, sink, schema):
        sink.write(self._STRUCT.pack(self.x, self.y, self.z))

    def encode_line(self, sink, schema):
        tokens = [format_value(ValueKind.F32, v) for v in (self.x, self.y, self.z)]
        sink.write((" ".join(tokens) + "\n").encode("ascii"))


class NonSeekableSink(io.RawIOBase):
    """Append-only sink (pipe-like)."""

    def __init__(self):
        self.data = bytearray()

    def writable(self):
        return True

    def seekable(self):
        return False

    def write(self, b):
        self.data.extend(b)
        return len(b)


@pytest.fixture
def sink() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def point_type():
    return Point


@pytest.fixture
def xyz_type():
    return XYZ
