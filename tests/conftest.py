# tests/conftest.py
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pyarrow as pa
import pyarrow.orc as orc
import pytest


def _write(table: pa.Table, path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    orc.write_table(table, str(path))
    return str(path)


@pytest.fixture()
def write_orc(tmp_path):
    """
    Write an Arrow table as ORC under tmp_path.
    Usage:
        path = write_orc(table, "year=2023/part-0.orc")
    """

    def _writer(table: pa.Table, relpath: str = "data.orc") -> str:
        return _write(table, tmp_path / relpath)

    return _writer


@pytest.fixture()
def events_table() -> pa.Table:
    """{id: int, tags: list<string>, meta: map<string, bigint>}; row 2 has no tags."""
    return pa.table(
        {
            "id": pa.array([1, 2, 3], type=pa.int32()),
            "tags": pa.array([["a", "b"], None, []], type=pa.list_(pa.string())),
            "meta": pa.array(
                [[("clicks", 10)], [("clicks", 20), ("views", 7)], []],
                type=pa.map_(pa.string(), pa.int64()),
            ),
        }
    )


@pytest.fixture()
def events_orc(write_orc, events_table) -> str:
    return write_orc(events_table, "events.orc")


@pytest.fixture()
def typed_table() -> pa.Table:
    """One column per leaf type the reader supports."""
    return pa.table(
        {
            "flag": pa.array([True, False, None], type=pa.bool_()),
            "tiny": pa.array([-1, 7, None], type=pa.int8()),
            "small": pa.array([-300, 300, None], type=pa.int16()),
            "big": pa.array([2**40, -(2**40), None], type=pa.int64()),
            "ratio": pa.array([0.5, 1.25, None], type=pa.float32()),
            "score": pa.array([0.1, -2.5, None], type=pa.float64()),
            "name": pa.array(["alpha", "βeta", None], type=pa.string()),
            "blob": pa.array([b"\x00\x01", b"", None], type=pa.binary()),
            "day": pa.array(
                [datetime(2023, 1, 2).date(), datetime(1969, 12, 31).date(), None], type=pa.date32()
            ),
            "ts": pa.array(
                [datetime(2023, 5, 6, 7, 8, 9, 123456), datetime(1970, 1, 1), None],
                type=pa.timestamp("us"),
            ),
            "amount": pa.array(
                [Decimal("12345678.90"), Decimal("-0.01"), None], type=pa.decimal128(10, 2)
            ),
        }
    )


@pytest.fixture()
def typed_orc(write_orc, typed_table) -> str:
    return write_orc(typed_table, "typed.orc")


@pytest.fixture()
def not_orc(tmp_path) -> str:
    path = tmp_path / "notes.orc"
    path.write_bytes(b"this is plainly not an orc file\n" * 10)
    return str(path)
