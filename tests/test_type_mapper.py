# tests/test_type_mapper.py
"""Tests for native → unified type mapping and the coercion policy."""

import pytest

from orcbridge.errors import (
    IllegalArgumentError,
    SchemaColumnMissingError,
    UnsupportedDataTypeError,
)
from orcbridge.types import native as nt
from orcbridge.types.mapper import final_type, infer_schema, map_type
from orcbridge.types.native import NativeCategory
from orcbridge.types.unified import (
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
    can_convert,
)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "category,expected",
    [
        (NativeCategory.BOOLEAN, BOOLEAN_TYPE),
        (NativeCategory.INT, INT_TYPE),
        (NativeCategory.BYTE, BYTE_TYPE),
        (NativeCategory.SHORT, SHORT_TYPE),
        (NativeCategory.LONG, LONG_TYPE),
        (NativeCategory.FLOAT, FLOAT_TYPE),
        (NativeCategory.DOUBLE, DOUBLE_TYPE),
        (NativeCategory.BINARY, BYTES_TYPE),
        (NativeCategory.STRING, STRING_TYPE),
        (NativeCategory.VARCHAR, STRING_TYPE),
        (NativeCategory.CHAR, STRING_TYPE),
        (NativeCategory.DATE, DATE_TYPE),
        (NativeCategory.TIMESTAMP, DATETIME_TYPE),
    ],
)
def test_primitive_without_target(category, expected):
    """Test each primitive category maps to its unified type."""
    assert map_type(nt.primitive(category)) == expected


def test_decimal_keeps_precision_and_scale():
    """Test decimals keep precision and scale."""
    assert map_type(nt.decimal(38, 9)) == DecimalType(38, 9)


class TestTimestamp:
    """Tests for timestamp mapping."""

    def test_time_only_on_request(self):
        """Test TIME is used only when targeted."""
        ts = nt.primitive(NativeCategory.TIMESTAMP)
        assert map_type(ts, TIME_TYPE) == TIME_TYPE
        assert map_type(ts, None) == DATETIME_TYPE

    def test_string_target(self):
        """Test a String target wins for timestamps."""
        assert map_type(nt.primitive(NativeCategory.TIMESTAMP), STRING_TYPE) == STRING_TYPE

    def test_date_target_is_not_a_narrowing(self):
        """DateTime → Date is not a conversion, so the file type wins."""
        assert map_type(nt.primitive(NativeCategory.TIMESTAMP), DATE_TYPE) == DATETIME_TYPE


# ---------------------------------------------------------------------------
# Coercion policy
# ---------------------------------------------------------------------------


class TestFinalType:
    """Tests for final_type."""

    def test_no_target_uses_file_type(self):
        """Test the file type is used without a target."""
        assert final_type(INT_TYPE, None) == INT_TYPE

    def test_widening_target_wins(self):
        """Test a widening target is used."""
        assert final_type(INT_TYPE, LONG_TYPE) == LONG_TYPE
        assert final_type(FLOAT_TYPE, DOUBLE_TYPE) == DOUBLE_TYPE

    def test_any_leaf_to_string(self):
        """Test every leaf converts to String."""
        for t in (INT_TYPE, DOUBLE_TYPE, DATE_TYPE, BYTES_TYPE, DecimalType(10, 2)):
            assert final_type(t, STRING_TYPE) == STRING_TYPE

    def test_narrowing_falls_back_to_file_type(self):
        """Test a narrowing target falls back to the file type."""
        assert final_type(LONG_TYPE, INT_TYPE) == LONG_TYPE
        assert final_type(STRING_TYPE, INT_TYPE) == STRING_TYPE

    def test_deterministic(self):
        """Test the result depends only on the inputs."""
        assert final_type(SHORT_TYPE, LONG_TYPE) == final_type(SHORT_TYPE, LONG_TYPE)


class TestCanConvert:
    """Tests for can_convert."""

    def test_decimal_widening(self):
        """Test decimals widen only without losing digits."""
        assert can_convert(DecimalType(10, 2), DecimalType(12, 2))
        assert can_convert(DecimalType(10, 2), DecimalType(12, 4))
        assert not can_convert(DecimalType(10, 2), DecimalType(10, 4))
        assert not can_convert(DecimalType(10, 2), DecimalType(10, 1))

    def test_composites(self):
        """Test composites convert when their parts do."""
        assert can_convert(ArrayType(INT_TYPE), ArrayType(STRING_TYPE))
        assert not can_convert(ArrayType(LONG_TYPE), ArrayType(INT_TYPE))
        assert can_convert(MapType(STRING_TYPE, INT_TYPE), MapType(STRING_TYPE, LONG_TYPE))
        a = RowType(("x",), (INT_TYPE,))
        assert can_convert(a, RowType(("y",), (LONG_TYPE,)))
        assert not can_convert(a, RowType(("x", "y"), (INT_TYPE, INT_TYPE)))

    def test_date_to_datetime(self):
        """Test dates widen to timestamps but not back."""
        assert can_convert(DATE_TYPE, DATETIME_TYPE)
        assert not can_convert(DATETIME_TYPE, DATE_TYPE)


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------


class TestList:
    """Tests for list mapping."""

    def test_list_of_string(self):
        """Test a list of strings maps to ARRAY<STRING>."""
        assert map_type(nt.list_of(nt.primitive(NativeCategory.STRING))) == ArrayType(STRING_TYPE)

    def test_list_of_int_with_string_target(self):
        """Test an ARRAY<STRING> target applies to elements."""
        native = nt.list_of(nt.primitive(NativeCategory.INT))
        assert map_type(native, ArrayType(STRING_TYPE)) == ArrayType(STRING_TYPE)

    def test_non_array_target_is_ignored_for_elements(self):
        """Test a non-array target leaves elements alone."""
        native = nt.list_of(nt.primitive(NativeCategory.INT))
        assert map_type(native, STRING_TYPE) == ArrayType(INT_TYPE)

    def test_list_of_struct_is_unsupported(self):
        """Test lists of structs are rejected."""
        native = nt.list_of(nt.struct_of([("a", nt.primitive(NativeCategory.INT))]))
        with pytest.raises(UnsupportedDataTypeError) as exc:
            map_type(native)
        assert "array" in str(exc.value)

    def test_list_of_list_is_unsupported(self):
        """Test lists of lists are rejected."""
        native = nt.list_of(nt.list_of(nt.primitive(NativeCategory.INT)))
        with pytest.raises(UnsupportedDataTypeError):
            map_type(native)

    def test_list_of_decimal_needs_string_target(self):
        """Test decimal lists need an ARRAY<STRING> target."""
        native = nt.list_of(nt.decimal(10, 2))
        with pytest.raises(UnsupportedDataTypeError):
            map_type(native)
        assert map_type(native, ArrayType(STRING_TYPE)) == ArrayType(STRING_TYPE)


class TestMap:
    """Tests for map mapping."""

    def test_infers_without_target(self):
        """Test key and value types are inferred."""
        native = nt.map_of(nt.primitive(NativeCategory.STRING), nt.primitive(NativeCategory.LONG))
        assert map_type(native) == MapType(STRING_TYPE, LONG_TYPE)

    def test_uses_target_key_and_value(self):
        """Test target key and value types are applied."""
        native = nt.map_of(nt.primitive(NativeCategory.INT), nt.primitive(NativeCategory.LONG))
        assert map_type(native, MapType(STRING_TYPE, STRING_TYPE)) == MapType(STRING_TYPE, STRING_TYPE)


class TestStruct:
    """Tests for struct mapping."""

    def test_infers_fields(self):
        """Test struct fields map by name."""
        native = nt.struct_of(
            [("a", nt.primitive(NativeCategory.INT)), ("b", nt.primitive(NativeCategory.STRING))]
        )
        assert map_type(native) == RowType(("a", "b"), (INT_TYPE, STRING_TYPE))

    def test_pairs_target_fields_positionally(self):
        """Test target fields pair by position."""
        native = nt.struct_of(
            [("a", nt.primitive(NativeCategory.INT)), ("b", nt.primitive(NativeCategory.INT))]
        )
        target = RowType(("whatever",), (STRING_TYPE,))
        assert map_type(native, target) == RowType(("a", "b"), (STRING_TYPE, INT_TYPE))


def test_union_is_unsupported():
    """Test unions are rejected."""
    native = nt.union_of([nt.primitive(NativeCategory.INT), nt.primitive(NativeCategory.STRING)])
    with pytest.raises(UnsupportedDataTypeError) as exc:
        map_type(native)
    assert exc.value.context["category"] == "uniontype"


# ---------------------------------------------------------------------------
# Schema inference
# ---------------------------------------------------------------------------


@pytest.fixture
def file_schema():
    return nt.struct_of(
        [
            ("id", nt.primitive(NativeCategory.INT)),
            ("name", nt.primitive(NativeCategory.STRING)),
            ("amount", nt.decimal(12, 3)),
        ]
    )


class TestInferSchema:
    """Tests for schema inference."""

    def test_all_columns_in_file_order(self, file_schema):
        """Test all columns are kept in file order."""
        schema = infer_schema(file_schema)
        assert schema.names == ("id", "name", "amount")
        assert schema.types == (INT_TYPE, STRING_TYPE, DecimalType(12, 3))

    def test_selection_defines_order(self, file_schema):
        """Test the selection defines the column order."""
        schema = infer_schema(file_schema, selected_columns=["amount", "id"])
        assert schema.names == ("amount", "id")
        assert schema.types == (DecimalType(12, 3), INT_TYPE)

    def test_target_pairs_with_selection_position(self, file_schema):
        """Test target types pair with selected positions."""
        target = RowType(("id", "name"), (STRING_TYPE, STRING_TYPE))
        schema = infer_schema(file_schema, target)
        assert schema.types == (STRING_TYPE, STRING_TYPE, DecimalType(12, 3))

    def test_missing_column(self, file_schema):
        """Test an unknown column lists the available ones."""
        with pytest.raises(SchemaColumnMissingError) as exc:
            infer_schema(file_schema, selected_columns=["id", "nope"])
        assert exc.value.context["column"] == "nope"
        assert "id,name,amount" in str(exc.value)

    def test_idempotent(self, file_schema):
        """Test inference is repeatable."""
        assert infer_schema(file_schema) == infer_schema(file_schema)

    def test_unsupported_column_is_named(self):
        """Test an unsupported column names itself."""
        native = nt.struct_of(
            [("u", nt.union_of([nt.primitive(NativeCategory.INT)]))]
        )
        with pytest.raises(UnsupportedDataTypeError) as exc:
            infer_schema(native)
        assert exc.value.context["column"] == "u"


class TestRowType:
    """Tests for RowType."""

    def test_with_partitions_appends_strings(self):
        """Test partitions append String fields."""
        schema = RowType(("id",), (INT_TYPE,)).with_partitions(["year", "month"])
        assert schema.names == ("id", "year", "month")
        assert schema.types == (INT_TYPE, STRING_TYPE, STRING_TYPE)

    def test_partition_collision(self):
        """Test a partition named like a column is rejected."""
        with pytest.raises(IllegalArgumentError):
            RowType(("year",), (INT_TYPE,)).with_partitions(["year"])

    def test_duplicate_names_rejected(self):
        """Test duplicate field names are rejected."""
        with pytest.raises(IllegalArgumentError):
            RowType(("a", "a"), (INT_TYPE, INT_TYPE))

    def test_str(self):
        """Test the row type renders as ROW<...>."""
        schema = RowType.of([("id", INT_TYPE), ("tags", ArrayType(STRING_TYPE))])
        assert str(schema) == "ROW<id: INT, tags: ARRAY<STRING>>"
