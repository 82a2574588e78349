# src/orcbridge/types/native.py
"""
Native (file-declared) type descriptors.

pyarrow reports an ORC file's schema as Arrow types. We fold those back into
ORC categories so the mapper and decoder can reason in the file's own terms.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pyarrow as pa

from orcbridge.errors import UnsupportedDataTypeError


class NativeCategory(str, Enum):
    BOOLEAN = "boolean"
    BYTE = "tinyint"
    SHORT = "smallint"
    INT = "int"
    LONG = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    VARCHAR = "varchar"
    CHAR = "char"
    BINARY = "binary"
    DATE = "date"
    TIMESTAMP = "timestamp"
    DECIMAL = "decimal"
    LIST = "array"
    MAP = "map"
    STRUCT = "struct"
    UNION = "uniontype"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NativeTypeNode:
    category: NativeCategory
    children: Tuple["NativeTypeNode", ...] = ()
    field_names: Tuple[str, ...] = ()
    precision: Optional[int] = None
    scale: Optional[int] = None

    def child(self, index: int) -> "NativeTypeNode":
        return self.children[index]

    def __str__(self) -> str:
        c = self.category
        if c is NativeCategory.DECIMAL:
            return f"decimal({self.precision},{self.scale})"
        if c is NativeCategory.LIST:
            return f"array<{self.children[0]}>"
        if c is NativeCategory.MAP:
            return f"map<{self.children[0]},{self.children[1]}>"
        if c is NativeCategory.STRUCT:
            inner = ",".join(f"{n}:{t}" for n, t in zip(self.field_names, self.children))
            return f"struct<{inner}>"
        if c is NativeCategory.UNION:
            return f"uniontype<{','.join(str(t) for t in self.children)}>"
        return c.value


def primitive(category: NativeCategory) -> NativeTypeNode:
    return NativeTypeNode(category)


def list_of(element: NativeTypeNode) -> NativeTypeNode:
    return NativeTypeNode(NativeCategory.LIST, (element,))


def map_of(key: NativeTypeNode, value: NativeTypeNode) -> NativeTypeNode:
    return NativeTypeNode(NativeCategory.MAP, (key, value))


def struct_of(fields: List[Tuple[str, NativeTypeNode]]) -> NativeTypeNode:
    return NativeTypeNode(
        NativeCategory.STRUCT,
        tuple(t for _, t in fields),
        tuple(n for n, _ in fields),
    )


def union_of(branches: List[NativeTypeNode]) -> NativeTypeNode:
    return NativeTypeNode(NativeCategory.UNION, tuple(branches))


def decimal(precision: int, scale: int) -> NativeTypeNode:
    return NativeTypeNode(NativeCategory.DECIMAL, precision=precision, scale=scale)


_SIMPLE = (
    (pa.types.is_boolean, NativeCategory.BOOLEAN),
    (pa.types.is_int8, NativeCategory.BYTE),
    (pa.types.is_int16, NativeCategory.SHORT),
    (pa.types.is_int32, NativeCategory.INT),
    (pa.types.is_int64, NativeCategory.LONG),
    (pa.types.is_float32, NativeCategory.FLOAT),
    (pa.types.is_float64, NativeCategory.DOUBLE),
    (pa.types.is_string, NativeCategory.STRING),
    (pa.types.is_large_string, NativeCategory.STRING),
    (pa.types.is_binary, NativeCategory.BINARY),
    (pa.types.is_large_binary, NativeCategory.BINARY),
    (pa.types.is_date32, NativeCategory.DATE),
    (pa.types.is_timestamp, NativeCategory.TIMESTAMP),
)


def from_arrow_type(dtype: pa.DataType) -> NativeTypeNode:
    """Translate one Arrow type (as reported by the ORC reader) into a native node."""
    for check, category in _SIMPLE:
        if check(dtype):
            return NativeTypeNode(category)
    if pa.types.is_decimal(dtype):
        return decimal(dtype.precision, dtype.scale)
    # Map must be tested before list: a map type is also list-like in Arrow.
    if pa.types.is_map(dtype):
        return map_of(from_arrow_type(dtype.key_type), from_arrow_type(dtype.item_type))
    if pa.types.is_list(dtype) or pa.types.is_large_list(dtype):
        return list_of(from_arrow_type(dtype.value_type))
    if pa.types.is_struct(dtype):
        return struct_of(
            [(dtype.field(i).name, from_arrow_type(dtype.field(i).type)) for i in range(dtype.num_fields)]
        )
    if pa.types.is_union(dtype):
        return union_of([from_arrow_type(dtype.field(i).type) for i in range(dtype.num_fields)])
    raise UnsupportedDataTypeError(
        "arrow type has no ORC category", category=str(dtype)
    )


def from_arrow_schema(schema: pa.Schema) -> NativeTypeNode:
    """The root of an ORC file is a struct of its top-level columns."""
    return struct_of([(f.name, from_arrow_type(f.type)) for f in schema])
