# src/orcbridge/types/unified.py
"""
Unified type system.

Every native ORC type is normalized into one of these immutable values. Leaf
types are singletons (``INT_TYPE``, ``STRING_TYPE`` ...); composites are
frozen dataclasses, so two structurally equal types compare equal and hash
the same.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Sequence, Tuple, Union

from orcbridge.errors import IllegalArgumentError


class SqlType(str, Enum):
    BOOLEAN = "BOOLEAN"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    BYTES = "BYTES"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    DECIMAL = "DECIMAL"
    ARRAY = "ARRAY"
    MAP = "MAP"
    ROW = "ROW"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BasicType:
    sql_type: SqlType

    def __str__(self) -> str:
        return self.sql_type.value


@dataclass(frozen=True)
class DecimalType:
    precision: int
    scale: int
    sql_type: SqlType = field(default=SqlType.DECIMAL, init=False)

    def __str__(self) -> str:
        return f"DECIMAL({self.precision}, {self.scale})"


@dataclass(frozen=True)
class ArrayType:
    element: "UnifiedType"
    sql_type: SqlType = field(default=SqlType.ARRAY, init=False)

    def __str__(self) -> str:
        return f"ARRAY<{self.element}>"


@dataclass(frozen=True)
class MapType:
    key: "UnifiedType"
    value: "UnifiedType"
    sql_type: SqlType = field(default=SqlType.MAP, init=False)

    def __str__(self) -> str:
        return f"MAP<{self.key}, {self.value}>"


@dataclass(frozen=True)
class RowType:
    """
    Ordered named fields. Used both for nested structs and as the
    schema of a whole file (the UnifiedSchema).
    """

    names: Tuple[str, ...]
    types: Tuple["UnifiedType", ...]
    sql_type: SqlType = field(default=SqlType.ROW, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(self, "types", tuple(self.types))
        if len(self.names) != len(self.types):
            raise IllegalArgumentError(
                "row type needs one type per field name",
                names=len(self.names),
                types=len(self.types),
            )
        if len(set(self.names)) != len(self.names):
            raise IllegalArgumentError("duplicate field names in row type", names=list(self.names))

    @classmethod
    def of(cls, fields: Union[Sequence[Tuple[str, "UnifiedType"]], Dict[str, "UnifiedType"]]) -> "RowType":
        items = list(fields.items()) if isinstance(fields, dict) else list(fields)
        return cls(tuple(n for n, _ in items), tuple(t for _, t in items))

    def field_type(self, index: int) -> "UnifiedType":
        return self.types[index]

    def fields(self) -> Iterator[Tuple[str, "UnifiedType"]]:
        return iter(zip(self.names, self.types))

    def with_partitions(self, partition_names: Sequence[str]) -> "RowType":
        """Append one String field per partition column, in declaration order."""
        for name in partition_names:
            if name in self.names:
                raise IllegalArgumentError(
                    "partition column collides with a file column", column=name
                )
        return RowType(
            self.names + tuple(partition_names),
            self.types + tuple(STRING_TYPE for _ in partition_names),
        )

    def __len__(self) -> int:
        return len(self.names)

    def __str__(self) -> str:
        inner = ", ".join(f"{n}: {t}" for n, t in zip(self.names, self.types))
        return f"ROW<{inner}>"


UnifiedType = Union[BasicType, DecimalType, ArrayType, MapType, RowType]
# The schema of a file is a RowType; the alias keeps call sites readable.
UnifiedSchema = RowType

BOOLEAN_TYPE = BasicType(SqlType.BOOLEAN)
BYTE_TYPE = BasicType(SqlType.TINYINT)
SHORT_TYPE = BasicType(SqlType.SMALLINT)
INT_TYPE = BasicType(SqlType.INT)
LONG_TYPE = BasicType(SqlType.BIGINT)
FLOAT_TYPE = BasicType(SqlType.FLOAT)
DOUBLE_TYPE = BasicType(SqlType.DOUBLE)
STRING_TYPE = BasicType(SqlType.STRING)
BYTES_TYPE = BasicType(SqlType.BYTES)
DATE_TYPE = BasicType(SqlType.DATE)
TIME_TYPE = BasicType(SqlType.TIME)
DATETIME_TYPE = BasicType(SqlType.TIMESTAMP)

# Element types an ArrayType may carry.
ARRAY_ELEMENT_TYPES = frozenset(
    {
        SqlType.STRING,
        SqlType.BOOLEAN,
        SqlType.TINYINT,
        SqlType.SMALLINT,
        SqlType.INT,
        SqlType.BIGINT,
        SqlType.FLOAT,
        SqlType.DOUBLE,
    }
)

# Lossless widenings between leaf types.
_WIDENINGS: Dict[SqlType, frozenset] = {
    SqlType.TINYINT: frozenset(
        {SqlType.SMALLINT, SqlType.INT, SqlType.BIGINT, SqlType.FLOAT, SqlType.DOUBLE}
    ),
    SqlType.SMALLINT: frozenset({SqlType.INT, SqlType.BIGINT, SqlType.FLOAT, SqlType.DOUBLE}),
    SqlType.INT: frozenset({SqlType.BIGINT, SqlType.FLOAT, SqlType.DOUBLE}),
    SqlType.BIGINT: frozenset({SqlType.FLOAT, SqlType.DOUBLE}),
    SqlType.FLOAT: frozenset({SqlType.DOUBLE}),
    SqlType.DATE: frozenset({SqlType.TIMESTAMP}),
}


def can_convert(from_type: UnifiedType, to_type: UnifiedType) -> bool:
    """
    True if a value of ``from_type`` may be presented as ``to_type``.

    Any type converts to String; numeric types widen; decimals widen when
    neither integer digits nor scale shrink; composites convert when their
    parts do.
    """
    if from_type == to_type or to_type.sql_type is SqlType.STRING:
        return True

    if isinstance(from_type, BasicType) and isinstance(to_type, BasicType):
        return to_type.sql_type in _WIDENINGS.get(from_type.sql_type, frozenset())

    if isinstance(from_type, DecimalType) and isinstance(to_type, DecimalType):
        return (
            to_type.scale >= from_type.scale
            and to_type.precision - to_type.scale >= from_type.precision - from_type.scale
        )

    if isinstance(from_type, ArrayType) and isinstance(to_type, ArrayType):
        return can_convert(from_type.element, to_type.element)

    if isinstance(from_type, MapType) and isinstance(to_type, MapType):
        return can_convert(from_type.key, to_type.key) and can_convert(
            from_type.value, to_type.value
        )

    if isinstance(from_type, RowType) and isinstance(to_type, RowType):
        return len(from_type) == len(to_type) and all(
            can_convert(f, t) for f, t in zip(from_type.types, to_type.types)
        )

    return False


def is_string(t: object) -> bool:
    return getattr(t, "sql_type", None) is SqlType.STRING


def describe(schema: RowType) -> List[Dict[str, str]]:
    """Flat ``[{"name", "type"}]`` view, handy for reporting."""
    return [{"name": n, "type": str(t)} for n, t in schema.fields()]
