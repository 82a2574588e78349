# src/orcbridge/sinks.py
"""
Row collectors.

A collector accepts one Row at a time through ``collect(row)``. Backpressure
is the collector's business; the materializer just calls it in file order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

import polars as pl

from orcbridge.rows import Row
from orcbridge.types.unified import ArrayType, DecimalType, MapType, RowType, SqlType, UnifiedType


class Collector(Protocol):
    def collect(self, row: Row) -> None:
        ...


class ListCollector:
    """Keeps every row in memory, in arrival order."""

    def __init__(self) -> None:
        self.rows: List[Row] = []

    def collect(self, row: Row) -> None:
        self.rows.append(row)

    def __len__(self) -> int:
        return len(self.rows)


_BASIC_DTYPES: Dict[SqlType, Any] = {
    SqlType.BOOLEAN: pl.Boolean,
    SqlType.TINYINT: pl.Int8,
    SqlType.SMALLINT: pl.Int16,
    SqlType.INT: pl.Int32,
    SqlType.BIGINT: pl.Int64,
    SqlType.FLOAT: pl.Float32,
    SqlType.DOUBLE: pl.Float64,
    SqlType.STRING: pl.Utf8,
    SqlType.BYTES: pl.Binary,
    SqlType.DATE: pl.Date,
    SqlType.TIME: pl.Time,
    SqlType.TIMESTAMP: pl.Datetime("us"),
}


def to_polars_dtype(t: UnifiedType):
    """Polars dtype for a unified type. Maps become lists of key/value structs."""
    if isinstance(t, DecimalType):
        return pl.Decimal(precision=t.precision, scale=t.scale)
    if isinstance(t, ArrayType):
        return pl.List(to_polars_dtype(t.element))
    if isinstance(t, MapType):
        return pl.List(
            pl.Struct([pl.Field("key", to_polars_dtype(t.key)), pl.Field("value", to_polars_dtype(t.value))])
        )
    if isinstance(t, RowType):
        return pl.Struct([pl.Field(n, to_polars_dtype(ft)) for n, ft in t.fields()])
    return _BASIC_DTYPES[t.sql_type]


def _to_polars_value(value: Any, t: UnifiedType) -> Any:
    if value is None:
        return None
    if isinstance(t, RowType) and isinstance(value, Row):
        return {n: _to_polars_value(v, ft) for n, ft, v in zip(t.names, t.types, value.fields)}
    if isinstance(t, MapType) and isinstance(value, dict):
        return [
            {"key": _to_polars_value(k, t.key), "value": _to_polars_value(v, t.value)}
            for k, v in value.items()
        ]
    return value


class PolarsCollector:
    """Buffers rows and turns them into a polars DataFrame typed by `schema`."""

    def __init__(self, schema: RowType):
        self.schema = schema
        self._columns: List[List[Any]] = [[] for _ in schema.names]

    def collect(self, row: Row) -> None:
        if len(row) != len(self.schema):
            raise ValueError(
                f"row has {len(row)} fields, schema has {len(self.schema)}"
            )
        for column, ftype, value in zip(self._columns, self.schema.types, row.fields):
            column.append(_to_polars_value(value, ftype))

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            [
                pl.Series(name, values, dtype=to_polars_dtype(ftype))
                for name, ftype, values in zip(self.schema.names, self.schema.types, self._columns)
            ]
        )
