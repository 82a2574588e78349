# src/orcbridge/engine/readers/arrow_orc.py
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

import pyarrow as pa
import pyarrow.orc as orc

from orcbridge.connectors.filesystem import open_input
from orcbridge.connectors.handle import DatasetHandle
from orcbridge.errors import ReaderOperationFailedError
from orcbridge.logging import get_logger
from orcbridge.types.native import NativeTypeNode, from_arrow_schema
from orcbridge.vectors import (
    BytesVector,
    ColumnBatch,
    ColumnVector,
    DecimalVector,
    DoubleVector,
    ListVector,
    LongVector,
    MapVector,
    StructVector,
    TimestampVector,
    UnionVector,
)

from .base import BaseColumnarReader
from .registry import register_reader

_logger = get_logger(__name__)

_NANOS_PER_UNIT = {"s": 1_000_000_000, "ms": 1_000_000, "us": 1_000, "ns": 1}


@register_reader("arrow-orc")
class ArrowOrcReader(BaseColumnarReader):
    """
    ORC reader on top of pyarrow's bundled Apache ORC library.

    Each stripe is read as one Arrow record batch and converted into ORC-style
    column vectors, so downstream decoding sees the same shapes the ORC batch
    API produces (null flags, offsets/lengths, union tags).
    """

    def __init__(self, handle: DatasetHandle):
        super().__init__(handle)
        self._file: Optional[pa.NativeFile] = None
        self._orc: Optional[orc.ORCFile] = None

    def open(self) -> NativeTypeNode:
        if self._schema is not None:
            return self._schema
        try:
            self._file = open_input(self.handle)
            self._orc = orc.ORCFile(self._file)
            self._schema = from_arrow_schema(self._orc.schema)
        except (OSError, pa.ArrowException) as e:
            self.close()
            raise ReaderOperationFailedError(
                "create orc reader for this file failed", path=self.handle.uri
            ) from e
        except Exception:
            self.close()
            raise
        _logger.debug(
            "opened %s: %d stripes, %d rows", self.handle.uri, self._orc.nstripes, self._orc.nrows
        )
        return self._schema

    def batches(self, columns: Sequence[str]) -> Iterator[ColumnBatch]:
        self.open()
        names = list(columns)
        for stripe in range(self._orc.nstripes):
            try:
                record_batch = self._orc.read_stripe(stripe, columns=names or None)
            except (OSError, pa.ArrowException) as e:
                raise ReaderOperationFailedError(
                    "read orc stripe failed", path=self.handle.uri, stripe=stripe
                ) from e
            if record_batch.num_rows == 0:
                continue
            yield to_column_batch(record_batch, names)

    def close(self) -> None:
        self._orc = None
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None


# ---------------------------------------------------------------------------
# Arrow → ORC vector adapter
# ---------------------------------------------------------------------------


def to_column_batch(record_batch: pa.RecordBatch, names: Sequence[str]) -> ColumnBatch:
    """Convert a record batch, ordering columns as `names` (the projection)."""
    cols: List[ColumnVector] = []
    for name in names:
        index = record_batch.schema.get_field_index(name)
        cols.append(vector_from_arrow(record_batch.column(index)))
    return ColumnBatch(size=record_batch.num_rows, cols=cols)


def _null_flags(arr: pa.Array):
    if arr.null_count == 0:
        return [False] * len(arr), True
    return arr.is_null().to_pylist(), False


def _filled(values: list, fill):
    return [fill if v is None else v for v in values]


def vector_from_arrow(arr: pa.Array) -> ColumnVector:
    dtype = arr.type
    is_null, no_nulls = _null_flags(arr)

    if pa.types.is_boolean(dtype) or pa.types.is_integer(dtype):
        values = [int(v) for v in _filled(arr.to_pylist(), 0)]
        return LongVector(is_null=is_null, no_nulls=no_nulls, vector=values)

    if pa.types.is_date32(dtype):
        # Epoch days, as ORC stores them.
        values = _filled(arr.cast(pa.int32()).to_pylist(), 0)
        return LongVector(is_null=is_null, no_nulls=no_nulls, vector=values)

    if pa.types.is_floating(dtype):
        values = [float(v) for v in _filled(arr.to_pylist(), 0.0)]
        return DoubleVector(is_null=is_null, no_nulls=no_nulls, vector=values)

    if pa.types.is_string(dtype) or pa.types.is_binary(dtype):
        values = _filled(arr.cast(pa.binary()).to_pylist(), b"")
        return BytesVector(is_null=is_null, no_nulls=no_nulls, vector=values)

    if pa.types.is_large_string(dtype) or pa.types.is_large_binary(dtype):
        values = _filled(arr.cast(pa.large_binary()).to_pylist(), b"")
        return BytesVector(is_null=is_null, no_nulls=no_nulls, vector=values)

    if pa.types.is_decimal(dtype):
        return DecimalVector(is_null=is_null, no_nulls=no_nulls, vector=arr.to_pylist())

    if pa.types.is_timestamp(dtype):
        factor = _NANOS_PER_UNIT[dtype.unit]
        millis: List[int] = []
        nanos: List[int] = []
        for raw in _filled(arr.cast(pa.int64()).to_pylist(), 0):
            seconds, sub = divmod(raw * factor, 1_000_000_000)
            millis.append(seconds * 1000 + sub // 1_000_000)
            nanos.append(sub)
        return TimestampVector(is_null=is_null, no_nulls=no_nulls, time=millis, nanos=nanos)

    if pa.types.is_map(dtype):
        offsets, lengths = _offsets_and_lengths(arr)
        entries = arr.values
        return MapVector(
            is_null=is_null,
            no_nulls=no_nulls,
            offsets=offsets,
            lengths=lengths,
            keys=vector_from_arrow(entries.field(0)),
            values=vector_from_arrow(entries.field(1)),
        )

    if pa.types.is_list(dtype) or pa.types.is_large_list(dtype):
        offsets, lengths = _offsets_and_lengths(arr)
        return ListVector(
            is_null=is_null,
            no_nulls=no_nulls,
            offsets=offsets,
            lengths=lengths,
            child=vector_from_arrow(arr.values),
        )

    if pa.types.is_struct(dtype):
        return StructVector(
            is_null=is_null,
            no_nulls=no_nulls,
            fields=[vector_from_arrow(arr.field(i)) for i in range(dtype.num_fields)],
        )

    if pa.types.is_union(dtype):
        codes = list(dtype.type_codes)
        tags = [codes.index(c) for c in arr.type_codes.to_pylist()]
        offsets = arr.offsets.to_pylist() if dtype.mode == "dense" else None
        return UnionVector(
            is_null=is_null,
            no_nulls=no_nulls,
            tags=tags,
            offsets=offsets,
            fields=[vector_from_arrow(arr.field(i)) for i in range(dtype.num_fields)],
        )

    # Unreachable for schemas accepted by from_arrow_schema.
    raise ReaderOperationFailedError("no column vector for arrow type", category=str(dtype))


def _offsets_and_lengths(arr: pa.Array):
    bounds = arr.offsets.to_pylist()
    offsets = bounds[:-1]
    lengths = [end - start for start, end in zip(bounds[:-1], bounds[1:])]
    return offsets, lengths
