# src/orcbridge/types/mapper.py
"""
Native → unified type mapping.

``map_type`` walks a native type tree and returns the unified type the
decoder will produce, optionally steered toward a caller's target type.
``final_type`` is the coercion policy: the target wins only when the file
type converts to it.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from orcbridge.errors import SchemaColumnMissingError, UnsupportedDataTypeError
from orcbridge.types.native import NativeCategory, NativeTypeNode
from orcbridge.types.unified import (
    ARRAY_ELEMENT_TYPES,
    BOOLEAN_TYPE,
    BYTE_TYPE,
    BYTES_TYPE,
    DATE_TYPE,
    DATETIME_TYPE,
    DOUBLE_TYPE,
    FLOAT_TYPE,
    INT_TYPE,
    LONG_TYPE,
    SHORT_TYPE,
    STRING_TYPE,
    TIME_TYPE,
    ArrayType,
    DecimalType,
    MapType,
    RowType,
    SqlType,
    UnifiedType,
    can_convert,
)

_PRIMITIVES: Dict[NativeCategory, UnifiedType] = {
    NativeCategory.BOOLEAN: BOOLEAN_TYPE,
    NativeCategory.INT: INT_TYPE,
    NativeCategory.BYTE: BYTE_TYPE,
    NativeCategory.SHORT: SHORT_TYPE,
    NativeCategory.LONG: LONG_TYPE,
    NativeCategory.FLOAT: FLOAT_TYPE,
    NativeCategory.DOUBLE: DOUBLE_TYPE,
    NativeCategory.BINARY: BYTES_TYPE,
    NativeCategory.STRING: STRING_TYPE,
    NativeCategory.VARCHAR: STRING_TYPE,
    NativeCategory.CHAR: STRING_TYPE,
    NativeCategory.DATE: DATE_TYPE,
}


def final_type(file_type: UnifiedType, config_type: Optional[UnifiedType]) -> UnifiedType:
    if config_type is None:
        return file_type
    return config_type if can_convert(file_type, config_type) else file_type


def map_type(native: NativeTypeNode, target: Optional[UnifiedType] = None) -> UnifiedType:
    category = native.category

    if category in _PRIMITIVES:
        return final_type(_PRIMITIVES[category], target)

    if category is NativeCategory.TIMESTAMP:
        # Time is only produced on explicit request.
        if target is not None and target.sql_type is SqlType.TIME:
            return TIME_TYPE
        return final_type(DATETIME_TYPE, target)

    if category is NativeCategory.DECIMAL:
        return final_type(DecimalType(native.precision, native.scale), target)

    if category is NativeCategory.LIST:
        element_target = target.element if isinstance(target, ArrayType) else None
        element = map_type(native.child(0), element_target)
        if element.sql_type not in ARRAY_ELEMENT_TYPES:
            raise UnsupportedDataTypeError(
                "array element type not supported", category=str(native), element=str(element)
            )
        return ArrayType(element)

    if category is NativeCategory.MAP:
        if isinstance(target, MapType):
            return MapType(
                map_type(native.child(0), target.key),
                map_type(native.child(1), target.value),
            )
        return MapType(map_type(native.child(0)), map_type(native.child(1)))

    if category is NativeCategory.STRUCT:
        if isinstance(target, RowType):
            types = [
                map_type(child, target.field_type(i) if i < len(target) else None)
                for i, child in enumerate(native.children)
            ]
        else:
            types = [map_type(child) for child in native.children]
        return RowType(native.field_names, tuple(types))

    raise UnsupportedDataTypeError("ORC type not supported", category=str(category))


def infer_schema(
    native_schema: NativeTypeNode,
    target: Optional[RowType] = None,
    selected_columns: Optional[Sequence[str]] = None,
) -> RowType:
    """
    Build the unified schema for the selected columns of a file.

    Column ``i`` of the selection is paired with field ``i`` of ``target``
    when the target declares that many fields.
    """
    file_names: List[str] = list(native_schema.field_names)
    columns = list(selected_columns) if selected_columns else file_names

    types: List[UnifiedType] = []
    for i, name in enumerate(columns):
        try:
            index = file_names.index(name)
        except ValueError:
            raise SchemaColumnMissingError(
                "column does not exist in file schema",
                column=name,
                available=",".join(file_names),
            ) from None
        config_type = target.field_type(i) if target is not None and len(target) > i else None
        try:
            types.append(map_type(native_schema.child(index), config_type))
        except UnsupportedDataTypeError as e:
            raise e.add_context(column=name)
    return RowType(tuple(columns), tuple(types))
