"""
Sequential PCD writer.

Streams points to a seekable sink without knowing the point count up front:
the POINTS header value is reserved as a fixed-width blank field, and after
every successful push the running count is written into it in place
(seek to reservation -> write -> seek back to the append position).

The writer must own the sink exclusively for its whole lifetime.
"""

from __future__ import annotations

import io
import logging
import sys
from typing import Optional

from config import settings
from engines.dyn_record import DynRecord
from engines.pcd_errors import InvalidArgumentError
from engines.pcd_meta import DataKind, Schema, ValueKind, ViewPoint, make_schema
from engines.scalar_codec import format_value

logger = logging.getLogger(__name__)

HEADER_BANNER = "# .PCD v.7 - Point Cloud Data file format"
PCD_VERSION = ".7"

# Enough digits for the largest point count the platform can address.
POINTS_ARG_WIDTH = len(str(sys.maxsize))


class SeqWriter:
    """
    Writes points of one record type to PCD data, in push order.
    """

    def __init__(
        self,
        sink,
        record_type,
        width: int,
        height: int,
        viewpoint: Optional[ViewPoint] = None,
        data_kind: Optional[DataKind] = None,
    ):
        if record_type.is_dynamic():
            raise InvalidArgumentError(
                f"{record_type.__name__} is dynamic and has no static write spec; wrap it with bind_schema()"
            )
        if int(width) < 0 or int(height) < 0:
            raise InvalidArgumentError(f"width and height must be >= 0, got {width}x{height}")
        if not _is_seekable(sink):
            raise InvalidArgumentError("sink must support seek(); append-only sinks cannot be patched")

        self._schema: Schema = make_schema(record_type.write_spec())
        _check_write_spec(self._schema)

        if data_kind is None:
            data_kind = DataKind.parse(settings.PCD_DATA_KIND)
        elif not isinstance(data_kind, DataKind):
            data_kind = DataKind.parse(data_kind)

        self._sink = sink
        self._owns_sink = False
        self._record_type = record_type
        self._width = int(width)
        self._height = int(height)
        self._viewpoint = viewpoint if viewpoint is not None else ViewPoint()
        self._data_kind = data_kind
        self._num_records = 0
        self._closed = False
        self._points_arg_begin = self._write_meta()

    @classmethod
    def create(
        cls,
        path,
        record_type,
        width: int,
        height: int,
        viewpoint: Optional[ViewPoint] = None,
        data_kind: Optional[DataKind] = None,
    ) -> "SeqWriter":
        """Create (truncate) a PCD file at `path`; the writer owns and closes it."""
        f = open(path, "wb", buffering=settings.PCD_WRITE_BUFFER_SIZE)
        try:
            writer = cls(f, record_type, width, height, viewpoint=viewpoint, data_kind=data_kind)
        except BaseException:
            f.close()
            raise
        writer._owns_sink = True
        return writer

    # ---------- accessors ----------
    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def data_kind(self) -> DataKind:
        return self._data_kind

    @property
    def num_records(self) -> int:
        return self._num_records

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------- header ----------
    def _write_meta(self) -> int:
        schema = self._schema
        fields_args = " ".join(d.name for d in schema)
        size_args = " ".join(str(d.kind.size) for d in schema)
        type_args = " ".join(d.kind.type_char for d in schema)
        count_args = " ".join(str(d.count) for d in schema)
        viewpoint_args = " ".join(format_value(ValueKind.F64, v) for v in self._viewpoint.as_tuple())

        w = self._sink
        w.write(
            (
                f"{HEADER_BANNER}\n"
                f"VERSION {PCD_VERSION}\n"
                f"FIELDS {fields_args}\n"
                f"SIZE {size_args}\n"
                f"TYPE {type_args}\n"
                f"COUNT {count_args}\n"
                f"WIDTH {self._width}\n"
                f"HEIGHT {self._height}\n"
                f"VIEWPOINT {viewpoint_args}\n"
                "POINTS "
            ).encode("ascii")
        )
        points_arg_begin = w.tell()
        w.write((" " * POINTS_ARG_WIDTH + "\n").encode("ascii"))
        w.write(f"DATA {self._data_kind.value}\n".encode("ascii"))

        logger.debug(
            f"PCD header written: fields={fields_args!r} data={self._data_kind.value} "
            f"points_arg_begin={points_arg_begin} width={POINTS_ARG_WIDTH}"
        )
        return points_arg_begin

    def _patch_points(self) -> None:
        w = self._sink
        eof_pos = w.tell()
        w.seek(self._points_arg_begin)
        w.write(f"{self._num_records:<{POINTS_ARG_WIDTH}}".encode("ascii"))
        w.seek(eof_pos)

    # ---------- body ----------
    def push(self, record) -> None:
        """
        Append one point. On encode failure nothing is written, the count is
        unchanged and the record's error propagates.
        """
        if self._closed:
            raise InvalidArgumentError("push on a closed SeqWriter")
        if not self._accepts(record):
            raise InvalidArgumentError(
                f"cannot push {type(record).__name__} into a writer for {self._record_type.__name__}"
            )

        buf = io.BytesIO()
        try:
            if self._data_kind is DataKind.BINARY:
                record.encode_chunk(buf, self._schema)
            else:
                record.encode_line(buf, self._schema)
        except Exception as e:
            logger.warning(f"PCD push rejected after {self._num_records} points: {e}")
            raise

        self._sink.write(buf.getvalue())
        self._num_records += 1
        self._patch_points()

    def _accepts(self, record) -> bool:
        if isinstance(record, self._record_type):
            return True
        # schema-bound types take plain DynRecords; encode checks the shape
        return issubclass(self._record_type, DynRecord) and isinstance(record, DynRecord)

    def flush(self) -> None:
        self._sink.flush()

    def close(self) -> None:
        """Write the final count and flush; closes the sink only if owned."""
        if self._closed:
            return
        self._closed = True
        try:
            self._patch_points()
            self._sink.flush()
        finally:
            if self._owns_sink:
                self._sink.close()
        logger.info(f"PCD writer closed: {self._num_records} points ({self._data_kind.value})")

    def __enter__(self) -> "SeqWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _is_seekable(sink) -> bool:
    seekable = getattr(sink, "seekable", None)
    if seekable is None:
        return hasattr(sink, "seek") and hasattr(sink, "tell")
    try:
        return bool(seekable())
    except ValueError:
        return False


def _check_write_spec(schema: Schema) -> None:
    if not schema:
        raise InvalidArgumentError("write spec has no fields")
    for d in schema:
        if not d.name or any(ch.isspace() for ch in d.name):
            raise InvalidArgumentError(f"field name {d.name!r} cannot appear in a FIELDS header")
        if d.count < 1:
            raise InvalidArgumentError(f'field "{d.name}" must have count >= 1, got {d.count}')
