"""
PCD record codec: value kinds, record contract, dynamic records.
Binary chunks are little-endian; ASCII lines are space-separated literals.
"""

from .pcd_errors import (
    FieldSizeMismatchError,
    InvalidArgumentError,
    ParseError,
    PcdError,
    SchemaMismatchError,
    TokenCountMismatchError,
    TruncatedInputError,
)
from .pcd_meta import DataKind, FieldDef, Schema, ValueKind, ViewPoint, make_schema
from .record import Decodable, Encodable, iter_records, validate_read_spec
from .dyn_record import DynRecord, Field, bind_schema

__all__ = [
    'PcdError', 'ParseError', 'SchemaMismatchError', 'FieldSizeMismatchError',
    'TokenCountMismatchError', 'InvalidArgumentError', 'TruncatedInputError',
    'DataKind', 'FieldDef', 'Schema', 'ValueKind', 'ViewPoint', 'make_schema',
    'Decodable', 'Encodable', 'iter_records', 'validate_read_spec',
    'DynRecord', 'Field', 'bind_schema',
]
