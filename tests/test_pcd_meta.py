import numpy as np
import pytest

from engines.pcd_errors import InvalidArgumentError
from engines.pcd_meta import (
    DataKind,
    FieldDef,
    ValueKind,
    ViewPoint,
    chunk_size,
    make_schema,
    total_count,
)


def test_kind_sizes_match_header_contract() -> None:
    sizes = {k.name: k.size for k in ValueKind}
    assert sizes == {"I8": 1, "I16": 2, "I32": 4, "U8": 1, "U16": 2, "U32": 4, "F32": 4, "F64": 8}


def test_kind_type_letters() -> None:
    assert [k.type_char for k in (ValueKind.I8, ValueKind.I16, ValueKind.I32)] == ["I", "I", "I"]
    assert [k.type_char for k in (ValueKind.U8, ValueKind.U16, ValueKind.U32)] == ["U", "U", "U"]
    assert [k.type_char for k in (ValueKind.F32, ValueKind.F64)] == ["F", "F"]
    assert ValueKind.F64.is_float and not ValueKind.U32.is_float


def test_kind_dtypes_are_little_endian() -> None:
    for k in ValueKind:
        assert k.dtype.itemsize == k.size
        assert k.dtype.byteorder in ("<", "|", "=")
        assert k.dtype.newbyteorder("<") == k.dtype
    assert ValueKind.F32.dtype == np.dtype("<f4")


def test_from_type_size_roundtrip_and_rejects_unknown() -> None:
    for k in ValueKind:
        assert ValueKind.from_type_size(k.type_char, k.size) is k
    assert ValueKind.from_type_size("f", 8) is ValueKind.F64
    with pytest.raises(InvalidArgumentError):
        ValueKind.from_type_size("U", 8)
    with pytest.raises(InvalidArgumentError):
        ValueKind.from_type_size("I", 3)


def test_data_kind_parse() -> None:
    assert DataKind.parse("ascii") is DataKind.ASCII
    assert DataKind.parse(" BINARY ") is DataKind.BINARY
    with pytest.raises(InvalidArgumentError):
        DataKind.parse("binary_compressed")


def test_field_def_rejects_negative_count() -> None:
    with pytest.raises(InvalidArgumentError):
        FieldDef("x", ValueKind.F32, -1)
    assert FieldDef("rgb", "u8", 3).kind is ValueKind.U8


def test_schema_helpers() -> None:
    schema = make_schema([("x", ValueKind.F32, 1), ("normal", ValueKind.F64, 3), FieldDef("label", ValueKind.U16, 1)])
    assert isinstance(schema, tuple)
    assert [d.name for d in schema] == ["x", "normal", "label"]
    assert total_count(schema) == 5
    assert chunk_size(schema) == 4 + 24 + 2


def test_viewpoint_default_is_identity_pose() -> None:
    assert ViewPoint().as_tuple() == (0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0)
