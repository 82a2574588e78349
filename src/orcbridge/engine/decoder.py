# src/orcbridge/engine/decoder.py
"""
Cell decoder.

``decode_cell`` turns one row of one column vector into a python value:

  LONG       → bool | int | datetime.date   (narrowed by native category)
  DOUBLE     → float                         (float32 precision for FLOAT)
  BYTES      → str | bytes
  DECIMAL    → decimal.Decimal               (never rounded)
  TIMESTAMP  → datetime | date | time
  STRUCT     → Row
  LIST       → list
  MAP        → dict
  UNION      → UnionValue

Leaf values are then presented as the resolved unified type: stringified
under String, widened under a wider target type.
Decoding is pure: it reads vectors, never mutates them, and keeps no state
between calls.
"""

from __future__ import annotations

import math
import struct
from datetime import date, datetime, time, timedelta
from decimal import Context, Decimal
from typing import Any, Callable, Dict, List, Optional

from orcbridge.config.models import ReaderOptions
from orcbridge.errors import IllegalArgumentError, UnsupportedDataTypeError
from orcbridge.rows import Row, UnionValue
from orcbridge.types.native import NativeCategory, NativeTypeNode
from orcbridge.types.unified import ArrayType, DecimalType, MapType, RowType, SqlType, UnifiedType
from orcbridge.vectors import ColumnVector, VectorKind

DEFAULT_OPTIONS = ReaderOptions()

_EPOCH = datetime(1970, 1, 1)
_EPOCH_DAY = date(1970, 1, 1)

_JPEG_SIGNATURE = b"\xff\xd8"
_PNG_SIGNATURE = b"\x89PNG"

# Composite vectors must line up with a native type of the same shape.
_COMPOSITE_CATEGORIES = {
    VectorKind.STRUCT: NativeCategory.STRUCT,
    VectorKind.LIST: NativeCategory.LIST,
    VectorKind.MAP: NativeCategory.MAP,
    VectorKind.UNION: NativeCategory.UNION,
}

_MAP_CHILD_KINDS = frozenset(
    {VectorKind.BYTES, VectorKind.LONG, VectorKind.DOUBLE, VectorKind.DECIMAL, VectorKind.TIMESTAMP}
)

Leaf = Callable[[ColumnVector, NativeTypeNode, Optional[UnifiedType], int, ReaderOptions], Any]


def decode_cell(
    vector: ColumnVector,
    native: NativeTypeNode,
    unified: Optional[UnifiedType],
    row: int,
    options: Optional[ReaderOptions] = None,
) -> Any:
    """Decode ``vector`` at ``row``; None for a null cell."""
    if vector.null_at(row):
        return None
    options = options or DEFAULT_OPTIONS
    kind = vector.kind

    expected = _COMPOSITE_CATEGORIES.get(kind)
    if expected is not None and native.category is not expected:
        raise IllegalArgumentError(
            "column vector does not match its type",
            vector_kind=str(kind),
            category=str(native.category),
            row=row,
        )

    if kind in _LEAVES:
        value = _LEAVES[kind](vector, native, unified, vector.index(row), options)
        return _finish(value, native, unified, options)
    if kind is VectorKind.STRUCT:
        return _read_struct(vector, native, unified, row, options)
    if kind is VectorKind.LIST:
        return _read_list(vector, native, unified, row, options)
    if kind is VectorKind.MAP:
        return _read_map(vector, native, unified, row, options)
    if kind is VectorKind.UNION:
        return _read_union(vector, native, row, options)
    raise IllegalArgumentError(
        "unsupported ORC column vector type", vector_kind=str(kind), row=row
    )


def stringify(value: Any, options: ReaderOptions) -> Any:
    """Unified string form of a decoded leaf value."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(options.text_encoding, errors="replace")
    return str(value)


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def float32_str(value: float) -> str:
    """Shortest decimal form that reads back as the same float32."""
    if not math.isfinite(value):
        return str(value)
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _float32(candidate) == value:
            return repr(candidate)
    return repr(value)


def _finish(
    value: Any, native: NativeTypeNode, unified: Optional[UnifiedType], options: ReaderOptions
) -> Any:
    """Present a decoded leaf as the resolved unified type."""
    if unified is None:
        return value
    sql_type = unified.sql_type
    if sql_type is SqlType.STRING:
        if native.category is NativeCategory.FLOAT and isinstance(value, float):
            return float32_str(value)
        return stringify(value, options)
    if sql_type in (SqlType.FLOAT, SqlType.DOUBLE):
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
            return _float32(value) if sql_type is SqlType.FLOAT else value
        return value
    if sql_type is SqlType.TIMESTAMP:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time())
        return value
    if isinstance(unified, DecimalType) and isinstance(value, Decimal):
        context = Context(prec=max(unified.precision, 28))
        return value.quantize(Decimal(1).scaleb(-unified.scale), context=context)
    return value


# ---------------------------------------------------------------------------
# Leaf values (index already resolved, cell known to be non-null)
# ---------------------------------------------------------------------------


def _wrap(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    return value - (1 << bits) if value >> (bits - 1) else value


def _long_value(vector, native, unified, idx, options) -> Any:
    value = int(vector.vector[idx])
    category = native.category
    if category is NativeCategory.BOOLEAN:
        return value != 0
    if category is NativeCategory.INT:
        return _wrap(value, 32)
    if category is NativeCategory.BYTE:
        return _wrap(value, 8)
    if category is NativeCategory.SHORT:
        return _wrap(value, 16)
    if category is NativeCategory.DATE:
        try:
            return _EPOCH_DAY + timedelta(days=value)
        except OverflowError:
            raise UnsupportedDataTypeError(
                "date value out of range", category=str(category), value=value
            ) from None
    return value


def _double_value(vector, native, unified, idx, options) -> float:
    value = float(vector.vector[idx])
    if native.category is NativeCategory.FLOAT:
        return _float32(value)
    return value


def has_image_signature(raw: bytes) -> bool:
    return raw.startswith(_JPEG_SIGNATURE) or raw.startswith(_PNG_SIGNATURE)


def _bytes_value(vector, native, unified, idx, options) -> Any:
    raw = bytes(vector.vector[idx])
    if native.category is NativeCategory.BINARY:
        return raw
    if options.binary_signature_passthrough and has_image_signature(raw):
        return raw
    return raw.decode(options.text_encoding, errors="replace")


def _decimal_value(vector, native, unified, idx, options) -> Decimal:
    value = vector.vector[idx]
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _timestamp_value(vector, native, unified, idx, options) -> Any:
    millis = int(vector.time[idx])
    nanos = int(vector.nanos[idx])
    # time[] already carries the millisecond part; nanos[] is the full
    # sub-second value, so only whole seconds are taken from time[].
    try:
        value = _EPOCH + timedelta(seconds=millis // 1000, microseconds=nanos // 1000)
    except OverflowError:
        raise UnsupportedDataTypeError(
            "timestamp value out of range", category=str(native.category), millis=millis
        ) from None
    if native.category is NativeCategory.DATE:
        return value.date()
    if unified is not None and unified.sql_type is SqlType.TIME:
        return value.time()
    return value


_LEAVES: Dict[VectorKind, Leaf] = {
    VectorKind.LONG: _long_value,
    VectorKind.DOUBLE: _double_value,
    VectorKind.BYTES: _bytes_value,
    VectorKind.DECIMAL: _decimal_value,
    VectorKind.TIMESTAMP: _timestamp_value,
}


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------


def _read_struct(vector, native, unified, row, options) -> Row:
    if len(vector.fields) > len(native.children):
        raise IllegalArgumentError(
            "struct vector has more fields than its type",
            vectors=len(vector.fields),
            fields=len(native.children),
            row=row,
        )
    row_type = unified if isinstance(unified, RowType) else None
    values = []
    for i, child in enumerate(vector.fields):
        field_type = row_type.field_type(i) if row_type is not None and i < len(row_type) else None
        values.append(decode_cell(child, native.child(i), field_type, row, options))
    return Row(values)


def _read_elements(
    child: ColumnVector,
    native: NativeTypeNode,
    unified: Optional[UnifiedType],
    offset: int,
    length: int,
    options: ReaderOptions,
    container: str,
) -> List[Any]:
    leaf = _LEAVES.get(child.kind)
    if leaf is None:
        raise UnsupportedDataTypeError(
            f"{child.kind} is not supported for {container} vectors", category=str(native)
        )
    out: List[Any] = []
    for pos in range(offset, offset + length):
        if child.null_at(pos):
            out.append(None)
            continue
        value = leaf(child, native, unified, child.index(pos), options)
        out.append(_finish(value, native, unified, options))
    return out


def _read_list(vector, native, unified, row, options) -> List[Any]:
    if vector.child is None:
        raise IllegalArgumentError("list vector has no child vector", row=row)
    idx = vector.index(row)
    element_type = unified.element if isinstance(unified, ArrayType) else None
    return _read_elements(
        vector.child,
        native.child(0),
        element_type,
        int(vector.offsets[idx]),
        int(vector.lengths[idx]),
        options,
        "list",
    )


def _read_map(vector, native, unified, row, options) -> Dict[Any, Any]:
    keys, values = vector.keys, vector.values
    key_kind = getattr(keys, "kind", None)
    value_kind = getattr(values, "kind", None)
    if key_kind not in _MAP_CHILD_KINDS or value_kind not in _MAP_CHILD_KINDS:
        raise UnsupportedDataTypeError(
            "unsupported map key or value type",
            key_kind=str(key_kind),
            value_kind=str(value_kind),
            category=str(native),
        )
    idx = vector.index(row)
    offset, length = int(vector.offsets[idx]), int(vector.lengths[idx])
    key_type = unified.key if isinstance(unified, MapType) else None
    value_type = unified.value if isinstance(unified, MapType) else None
    key_list = _read_elements(keys, native.child(0), key_type, offset, length, options, "map")
    value_list = _read_elements(values, native.child(1), value_type, offset, length, options, "map")
    # Duplicate keys are passed through as-is: the last one wins.
    return dict(zip(key_list, value_list))


def _read_union(vector, native, row, options) -> UnionValue:
    tag = int(vector.tags[vector.index(row)])
    if tag < 0 or tag >= len(native.children):
        raise IllegalArgumentError(
            "union tag value out of range for union types",
            tag=tag,
            branches=len(native.children),
            row=row,
        )
    if tag >= len(vector.fields):
        raise IllegalArgumentError(
            "union tag value out of range for union column vectors",
            tag=tag,
            vectors=len(vector.fields),
            row=row,
        )
    branch = native.child(tag)
    value = decode_cell(vector.fields[tag], branch, None, vector.branch_row(row), options)
    return UnionValue(tag, branch, value)
