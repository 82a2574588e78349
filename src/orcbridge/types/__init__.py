from orcbridge.types.mapper import final_type, infer_schema, map_type
from orcbridge.types.native import NativeCategory, NativeTypeNode
from orcbridge.types.unified import (
    ArrayType,
    BasicType,
    DecimalType,
    MapType,
    RowType,
    SqlType,
    UnifiedSchema,
    UnifiedType,
    can_convert,
)

__all__ = [
    "ArrayType",
    "BasicType",
    "DecimalType",
    "MapType",
    "NativeCategory",
    "NativeTypeNode",
    "RowType",
    "SqlType",
    "UnifiedSchema",
    "UnifiedType",
    "can_convert",
    "final_type",
    "infer_schema",
    "map_type",
]
