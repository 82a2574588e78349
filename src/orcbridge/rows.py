# src/orcbridge/rows.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from orcbridge.types.native import NativeTypeNode
from orcbridge.types.unified import RowType


@dataclass
class Row:
    """
    One materialized record: values in schema order plus the source table id.

    Nested struct values are Rows too (with no table id).
    """

    fields: List[Any]
    table_id: Optional[str] = None

    @property
    def arity(self) -> int:
        return len(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, index: int) -> Any:
        return self.fields[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.fields)

    def as_dict(self, schema: RowType) -> Dict[str, Any]:
        """Name the values using ``schema``; nested Rows become dicts as well."""
        out: Dict[str, Any] = {}
        for name, ftype, value in zip(schema.names, schema.types, self.fields):
            if isinstance(value, Row) and isinstance(ftype, RowType):
                value = value.as_dict(ftype)
            out[name] = value
        return out


class UnionValue(NamedTuple):
    """A decoded union cell: the active branch, its native type, and its value."""

    tag: int
    type: NativeTypeNode
    value: Any
