# tests/test_arrow_adapter.py
"""Arrow arrays / types → ORC-style vectors and native type nodes."""

from datetime import date, datetime
from decimal import Decimal

import pyarrow as pa
import pytest

from orcbridge.engine.readers.arrow_orc import to_column_batch, vector_from_arrow
from orcbridge.errors import UnsupportedDataTypeError
from orcbridge.types import native as nt
from orcbridge.types.native import NativeCategory, from_arrow_schema, from_arrow_type
from orcbridge.vectors import (
    BytesVector,
    DecimalVector,
    DoubleVector,
    ListVector,
    LongVector,
    MapVector,
    StructVector,
    TimestampVector,
    UnionVector,
    VectorKind,
)


class TestFromArrowType:
    """Tests for mapping arrow types to native type nodes."""

    @pytest.mark.parametrize(
        "dtype,category",
        [
            (pa.bool_(), NativeCategory.BOOLEAN),
            (pa.int8(), NativeCategory.BYTE),
            (pa.int16(), NativeCategory.SHORT),
            (pa.int32(), NativeCategory.INT),
            (pa.int64(), NativeCategory.LONG),
            (pa.float32(), NativeCategory.FLOAT),
            (pa.float64(), NativeCategory.DOUBLE),
            (pa.string(), NativeCategory.STRING),
            (pa.large_string(), NativeCategory.STRING),
            (pa.binary(), NativeCategory.BINARY),
            (pa.date32(), NativeCategory.DATE),
            (pa.timestamp("ns"), NativeCategory.TIMESTAMP),
        ],
    )
    def test_leaves(self, dtype, category):
        """Test each arrow leaf type maps to its ORC category."""
        assert from_arrow_type(dtype).category is category

    def test_decimal(self):
        """Test decimal nodes keep precision and scale."""
        node = from_arrow_type(pa.decimal128(20, 4))
        assert (node.precision, node.scale) == (20, 4)

    def test_map_before_list(self):
        """Test arrow maps are not mistaken for lists."""
        node = from_arrow_type(pa.map_(pa.string(), pa.int64()))
        assert node == nt.map_of(nt.primitive(NativeCategory.STRING), nt.primitive(NativeCategory.LONG))

    def test_nested(self):
        """Test nested types render in ORC type-string form."""
        dtype = pa.struct([("a", pa.list_(pa.int32())), ("b", pa.string())])
        assert str(from_arrow_type(dtype)) == "struct<a:array<int>,b:string>"

    def test_union(self):
        """Test dense unions map to uniontype."""
        dtype = pa.dense_union([pa.field("0", pa.int32()), pa.field("1", pa.string())])
        assert str(from_arrow_type(dtype)) == "uniontype<int,string>"

    def test_unsupported(self):
        """Test arrow types with no ORC counterpart are rejected."""
        with pytest.raises(UnsupportedDataTypeError):
            from_arrow_type(pa.duration("s"))

    def test_schema_root_is_struct(self):
        """Test a schema becomes a root struct node."""
        schema = pa.schema([("id", pa.int32()), ("name", pa.string())])
        root = from_arrow_schema(schema)
        assert root.category is NativeCategory.STRUCT
        assert root.field_names == ("id", "name")


class TestLeafVectors:
    """Tests for converting leaf arrays to column vectors."""

    def test_ints_with_nulls(self):
        """Test integer arrays fill null slots and flag them."""
        vec = vector_from_arrow(pa.array([1, None, 3], type=pa.int16()))
        assert isinstance(vec, LongVector)
        assert vec.vector == [1, 0, 3]
        assert vec.is_null == [False, True, False]
        assert vec.no_nulls is False

    def test_no_nulls(self):
        """Test booleans become a long vector with no nulls."""
        vec = vector_from_arrow(pa.array([True, False]))
        assert vec.kind is VectorKind.LONG
        assert vec.vector == [1, 0]
        assert vec.no_nulls is True

    def test_date_is_epoch_days(self):
        """Test dates are stored as days since the epoch."""
        vec = vector_from_arrow(pa.array([date(1970, 1, 2), date(1969, 12, 31)], type=pa.date32()))
        assert vec.vector == [1, -1]

    def test_double(self):
        """Test floating arrays become double vectors."""
        vec = vector_from_arrow(pa.array([0.5, None], type=pa.float32()))
        assert isinstance(vec, DoubleVector)
        assert vec.vector == [0.5, 0.0]

    def test_strings_become_bytes(self):
        """Test strings are stored as encoded bytes."""
        vec = vector_from_arrow(pa.array(["a", None, "βeta"]))
        assert isinstance(vec, BytesVector)
        assert vec.vector == [b"a", b"", "βeta".encode("utf-8")]

    def test_decimal(self):
        """Test decimal arrays keep exact values."""
        vec = vector_from_arrow(pa.array([Decimal("1.25")], type=pa.decimal128(5, 2)))
        assert isinstance(vec, DecimalVector)
        assert vec.vector == [Decimal("1.25")]

    def test_timestamp_split(self):
        """Test timestamps split into millis and sub-second nanos."""
        arr = pa.array(
            [datetime(1970, 1, 1, 0, 0, 1, 250000), datetime(1969, 12, 31, 23, 59, 58, 500000)],
            type=pa.timestamp("us"),
        )
        vec = vector_from_arrow(arr)
        assert isinstance(vec, TimestampVector)
        assert vec.time == [1250, -1500]
        assert vec.nanos == [250_000_000, 500_000_000]


class TestCompositeVectors:
    """Tests for converting nested arrays to column vectors."""

    def test_list(self):
        """Test lists carry offsets, lengths and a child vector."""
        vec = vector_from_arrow(pa.array([["a", "b"], None, []], type=pa.list_(pa.string())))
        assert isinstance(vec, ListVector)
        assert vec.lengths == [2, 0, 0]
        assert vec.offsets[0] == 0
        assert vec.is_null == [False, True, False]
        assert vec.child.vector == [b"a", b"b"]

    def test_map(self):
        """Test maps carry flattened key and value vectors."""
        arr = pa.array(
            [[("k", 1)], [("x", 2), ("y", 3)]], type=pa.map_(pa.string(), pa.int64())
        )
        vec = vector_from_arrow(arr)
        assert isinstance(vec, MapVector)
        assert vec.offsets == [0, 1]
        assert vec.lengths == [1, 2]
        assert vec.keys.vector == [b"k", b"x", b"y"]
        assert vec.values.vector == [1, 2, 3]

    def test_struct(self):
        """Test structs carry one vector per field."""
        arr = pa.array([{"a": 1, "b": "x"}], type=pa.struct([("a", pa.int32()), ("b", pa.string())]))
        vec = vector_from_arrow(arr)
        assert isinstance(vec, StructVector)
        assert [f.kind for f in vec.fields] == [VectorKind.LONG, VectorKind.BYTES]

    def test_dense_union(self):
        """Test dense unions keep per-row branch offsets."""
        types = pa.array([0, 1, 0], type=pa.int8())
        offsets = pa.array([0, 0, 1], type=pa.int32())
        arr = pa.UnionArray.from_dense(
            types, offsets, [pa.array([10, 11], type=pa.int32()), pa.array(["s"])]
        )
        vec = vector_from_arrow(arr)
        assert isinstance(vec, UnionVector)
        assert vec.tags == [0, 1, 0]
        assert vec.offsets == [0, 0, 1]
        assert [vec.branch_row(r) for r in range(3)] == [0, 0, 1]

    def test_sparse_union(self):
        """Test sparse unions index branches by row."""
        types = pa.array([1, 0], type=pa.int8())
        arr = pa.UnionArray.from_sparse(
            types, [pa.array([1, 2], type=pa.int32()), pa.array(["a", "b"])]
        )
        vec = vector_from_arrow(arr)
        assert vec.offsets is None
        assert [vec.branch_row(r) for r in range(2)] == [0, 1]


def test_batch_follows_projection_order():
    """Test batch columns follow the requested order."""
    batch = pa.record_batch(
        [pa.array([1, 2], type=pa.int32()), pa.array(["a", "b"])], names=["id", "name"]
    )
    cols = to_column_batch(batch, ["name", "id"])
    assert cols.size == 2
    assert [c.kind for c in cols.cols] == [VectorKind.BYTES, VectorKind.LONG]
