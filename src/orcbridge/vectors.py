# src/orcbridge/vectors.py
"""
Column vectors in the ORC batch model.

A ColumnBatch holds one vector per projected column; all vectors share the
batch's row count. Each vector carries per-row null flags and an
``is_repeating`` flag (every row shares row 0's value). Leaf vectors keep a
typed backing list; composite vectors point at child vectors:

  - ListVector / MapVector: ``offsets`` and ``lengths`` into child vector(s)
  - StructVector:           parallel field vectors indexed by row
  - UnionVector:            a tag per row + one vector per branch

The decoder never mutates vectors; they are transient and owned by the reader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence


class VectorKind(str, Enum):
    LONG = "LONG"
    DOUBLE = "DOUBLE"
    BYTES = "BYTES"
    DECIMAL = "DECIMAL"
    TIMESTAMP = "TIMESTAMP"
    STRUCT = "STRUCT"
    LIST = "LIST"
    MAP = "MAP"
    UNION = "UNION"

    def __str__(self) -> str:
        return self.value


@dataclass
class ColumnVector:
    is_null: List[bool] = field(default_factory=list)
    no_nulls: bool = True
    is_repeating: bool = False

    kind = None  # set by subclasses

    def index(self, row: int) -> int:
        return 0 if self.is_repeating else row

    def null_at(self, row: int) -> bool:
        if self.no_nulls:
            return False
        return bool(self.is_null[self.index(row)])


@dataclass
class LongVector(ColumnVector):
    vector: List[int] = field(default_factory=list)
    kind = VectorKind.LONG


@dataclass
class DoubleVector(ColumnVector):
    vector: List[float] = field(default_factory=list)
    kind = VectorKind.DOUBLE


@dataclass
class BytesVector(ColumnVector):
    vector: List[bytes] = field(default_factory=list)
    kind = VectorKind.BYTES


@dataclass
class DecimalVector(ColumnVector):
    vector: List[Optional[Decimal]] = field(default_factory=list)
    kind = VectorKind.DECIMAL


@dataclass
class TimestampVector(ColumnVector):
    # Milliseconds since the epoch, and nanoseconds within the second.
    time: List[int] = field(default_factory=list)
    nanos: List[int] = field(default_factory=list)
    kind = VectorKind.TIMESTAMP


@dataclass
class ListVector(ColumnVector):
    offsets: List[int] = field(default_factory=list)
    lengths: List[int] = field(default_factory=list)
    child: Optional[ColumnVector] = None
    kind = VectorKind.LIST


@dataclass
class MapVector(ColumnVector):
    offsets: List[int] = field(default_factory=list)
    lengths: List[int] = field(default_factory=list)
    keys: Optional[ColumnVector] = None
    values: Optional[ColumnVector] = None
    kind = VectorKind.MAP


@dataclass
class StructVector(ColumnVector):
    fields: List[ColumnVector] = field(default_factory=list)
    kind = VectorKind.STRUCT


@dataclass
class UnionVector(ColumnVector):
    tags: List[int] = field(default_factory=list)
    fields: List[ColumnVector] = field(default_factory=list)
    # Dense unions address the branch vector through per-row offsets;
    # sparse ones (offsets is None) use the row index directly.
    offsets: Optional[List[int]] = None
    kind = VectorKind.UNION

    def branch_row(self, row: int) -> int:
        idx = self.index(row)
        return self.offsets[idx] if self.offsets is not None else idx


@dataclass
class ColumnBatch:
    size: int
    cols: List[Optional[ColumnVector]]

    @property
    def num_cols(self) -> int:
        return len(self.cols)


def null_flags(values: Sequence[object]) -> List[bool]:
    """Null flags for a plain python sequence (None means null)."""
    return [v is None for v in values]
