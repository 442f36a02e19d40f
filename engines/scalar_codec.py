"""
Scalar encode/decode helpers for both body encodings.

Binary: little-endian, kind width, no padding.
ASCII:  decimal literals separated by ASCII whitespace; floats are written in
        the shortest positional form that round-trips at the kind's width.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional, Union

import numpy as np

from engines.pcd_errors import ParseError, TruncatedInputError
from engines.pcd_meta import ValueKind

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")
_UINT_LITERAL = re.compile(r"\+?[0-9]+")


def read_exact(stream, size: int) -> bytes:
    data = stream.read(size) or b""
    if len(data) != size:
        raise TruncatedInputError(size, len(data))
    return data


def read_values(stream, kind: ValueKind, count: int) -> np.ndarray:
    """Read `count` little-endian scalars of `kind`."""
    if count == 0:
        return np.empty(0, dtype=kind.dtype)
    data = read_exact(stream, kind.size * count)
    return np.frombuffer(data, dtype=kind.dtype, count=count).copy()


def read_line_tokens(stream) -> List[str]:
    """
    Read one line and split it on ASCII whitespace.
    Raises TruncatedInputError when the stream is already exhausted.
    """
    line = stream.readline()
    if not line:
        raise TruncatedInputError(1, 0)
    if isinstance(line, str):
        try:
            line = line.encode("ascii")
        except UnicodeEncodeError as e:
            raise ParseError(None, f"non-ASCII text in line: {e}") from None
    try:
        return [tok.decode("ascii") for tok in line.split()]
    except UnicodeDecodeError as e:
        raise ParseError(None, f"non-ASCII text in line: {e}") from None


def parse_token(kind: ValueKind, token: str) -> Union[int, float]:
    if not kind.is_float:
        pattern = _UINT_LITERAL if kind.type_char == "U" else _INT_LITERAL
        if not pattern.fullmatch(token):
            raise ParseError(None, f"{token!r} is not a valid {kind.name} literal")
        value = int(token)
        info = np.iinfo(kind.dtype)
        if value < info.min or value > info.max:
            raise ParseError(None, f"{token!r} is out of range for {kind.name}")
        return value

    if "_" in token:
        raise ParseError(None, f"{token!r} is not a valid {kind.name} literal")
    try:
        value = float(token)
    except ValueError:
        raise ParseError(None, f"{token!r} is not a valid {kind.name} literal") from None
    if kind is ValueKind.F32:
        with np.errstate(over="ignore"):
            value = float(np.float32(value))
    return value


def format_value(kind: ValueKind, value) -> str:
    if not kind.is_float:
        return str(int(value))
    return np.format_float_positional(kind.dtype.type(value), trim="-")


def encode_values(kind: ValueKind, values: np.ndarray) -> bytes:
    return np.asarray(values).astype(kind.dtype, copy=False).tobytes()


def convert_exact(value, dtype) -> Optional[np.generic]:
    """
    Convert a scalar to `dtype`, returning None unless the result equals the
    input exactly (NaN and infinities survive float targets only).
    """
    dtype = np.dtype(dtype)
    v = value.item() if isinstance(value, np.generic) else value

    if dtype.kind in "iu":
        if isinstance(v, float):
            if not math.isfinite(v) or not v.is_integer():
                return None
            v = int(v)
        info = np.iinfo(dtype)
        if v < info.min or v > info.max:
            return None
        return dtype.type(v)

    if dtype.kind == "f":
        if isinstance(v, float) and not math.isfinite(v):
            return dtype.type(v)
        with np.errstate(over="ignore"):
            out = dtype.type(v)
        if not np.isfinite(out):
            return None
        back = out.item()
        return out if back == v else None

    raise TypeError(f"unsupported target dtype: {dtype}")
