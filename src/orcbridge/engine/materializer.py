# src/orcbridge/engine/materializer.py
from __future__ import annotations

"""
Batch materializer: ORC column batches → Rows.

One OrcMaterializer owns one FileSession. The session holds everything that
is fixed for a file (handle, options, native schema, unified schema,
partition values) and is computed at most once; nothing is shared between
sessions, so files can be read concurrently by independent materializers.

Flow of `rows()`:
  sniff → infer schema → open reader projected to the selected columns →
  for each batch, for each row: decode every column, append partitions →
  yield Row

The returned RowStream is lazy and forward-only. The reader is released when
the stream is exhausted, closed, left through `with`, garbage-collected, or
when decoding fails.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Iterator, List, Mapping, Optional, Union

from orcbridge.config.models import ReaderOptions
from orcbridge.connectors.handle import DatasetHandle
from orcbridge.engine.decoder import decode_cell
from orcbridge.engine.partitions import PartitionMap, parse_partitions, partition_values
from orcbridge.engine.readers.registry import pick_reader
from orcbridge.errors import FileTypeInvalidError, IllegalArgumentError, OrcBridgeError
from orcbridge.io.sniffer import is_recognized_format
from orcbridge.logging import get_logger, log_exception
from orcbridge.rows import Row
from orcbridge.types.mapper import infer_schema
from orcbridge.types.native import NativeTypeNode
from orcbridge.types.unified import RowType
from orcbridge.vectors import ColumnBatch

_logger = get_logger(__name__)

Sink = Union[Callable[[Row], Any], Any]


@dataclass
class FileSession:
    """Per-file state, filled lazily and then fixed for the file's lifetime."""

    handle: DatasetHandle
    options: ReaderOptions
    target_schema: Optional[RowType] = None
    explicit_partitions: Optional[PartitionMap] = None

    native_schema: Optional[NativeTypeNode] = None
    file_schema: Optional[RowType] = None
    partition_names: List[str] = field(default_factory=list)
    partitions: PartitionMap = field(default_factory=dict)
    _partitions_resolved: bool = False

    @property
    def uri(self) -> str:
        return self.handle.uri

    def resolve_partitions(self) -> None:
        if self._partitions_resolved:
            return
        if self.explicit_partitions is not None:
            self.partitions = dict(self.explicit_partitions)
            self.partition_names = list(self.partitions)
        elif self.options.merge_partitions:
            self.partition_names = self.options.partition_names()
            self.partitions = parse_partitions(self.uri, self.options.partition_definitions)
        self._partitions_resolved = True


class RowStream(Iterator[Row]):
    """Forward-only row iterator that owns the underlying reader."""

    def __init__(self, rows: Generator[Row, None, None]):
        self._rows = rows

    def __iter__(self) -> "RowStream":
        return self

    def __next__(self) -> Row:
        return next(self._rows)

    def close(self) -> None:
        self._rows.close()

    def __enter__(self) -> "RowStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class OrcMaterializer:
    def __init__(
        self,
        source: Union[str, DatasetHandle],
        options: Optional[ReaderOptions] = None,
        target_schema: Optional[RowType] = None,
        partitions: Optional[Mapping[str, Optional[str]]] = None,
        reader_name: Optional[str] = None,
    ):
        handle = source if isinstance(source, DatasetHandle) else DatasetHandle.from_uri(source)
        self.session = FileSession(
            handle=handle,
            options=options or ReaderOptions(),
            target_schema=target_schema,
            explicit_partitions=dict(partitions) if partitions is not None else None,
        )
        self._reader_name = reader_name

    # ---------- Schema ----------

    def detect_format(self) -> bool:
        return is_recognized_format(self.session.handle)

    def native_schema(self) -> NativeTypeNode:
        s = self.session
        if s.native_schema is None:
            reader = pick_reader(s.handle, self._reader_name)
            try:
                s.native_schema = reader.open()
            except OrcBridgeError as e:
                raise e.add_context(path=s.uri)
            finally:
                reader.close()
        return s.native_schema

    def file_schema(self) -> RowType:
        """Unified schema of the selected file columns (no partition fields)."""
        s = self.session
        if s.file_schema is None:
            native = self.native_schema()
            try:
                s.file_schema = infer_schema(native, s.target_schema, s.options.selected_columns)
            except OrcBridgeError as e:
                raise e.add_context(path=s.uri)
            _logger.debug("inferred schema for %s: %s", s.uri, s.file_schema)
        return s.file_schema

    def schema(self) -> RowType:
        """The schema of emitted rows, partition fields included."""
        self.session.resolve_partitions()
        return self.file_schema().with_partitions(self.session.partition_names)

    # ---------- Rows ----------

    def rows(self, table_id: Optional[str] = None) -> RowStream:
        s = self.session
        if not self.detect_format():
            raise FileTypeInvalidError(
                "this file is not an orc file, please check the format of this file",
                path=s.uri,
            )
        # Resolve everything that can fail before the first row is requested.
        file_schema = self.file_schema()
        output_schema = self.schema()
        tail = partition_values(s.partitions, s.partition_names)
        native = self.native_schema()
        natives = [native.child(native.field_names.index(n)) for n in file_schema.names]
        _logger.debug("reading %s as %s", s.uri, output_schema)
        return RowStream(self._generate(table_id, file_schema, natives, tail))

    def read(self, table_id: Optional[str], sink: Sink) -> int:
        """Push every row into `sink` (a `.collect(row)` object or a callable)."""
        collect = getattr(sink, "collect", sink)
        count = 0
        with self.rows(table_id) as stream:
            for row in stream:
                collect(row)
                count += 1
        return count

    def _generate(
        self,
        table_id: Optional[str],
        file_schema: RowType,
        natives: List[NativeTypeNode],
        tail: List[Optional[str]],
    ) -> Generator[Row, None, None]:
        s = self.session
        reader = pick_reader(s.handle, self._reader_name)
        emitted = 0
        batches = 0
        t0 = time.perf_counter()
        try:
            reader.open()
            for batch in reader.batches(file_schema.names):
                batches += 1
                if batch.num_cols != len(natives):
                    raise IllegalArgumentError(
                        "batch column count does not match schema",
                        path=s.uri,
                        columns=batch.num_cols,
                        expected=len(natives),
                    )
                for i in range(batch.size):
                    values = self._decode_row(batch, i, file_schema, natives, emitted)
                    values.extend(tail)
                    emitted += 1
                    yield Row(values, table_id)
        except OrcBridgeError as e:
            log_exception(_logger, f"read of {s.uri} aborted after {emitted} rows", e)
            raise e.add_context(path=s.uri)
        finally:
            reader.close()
            _logger.debug(
                "closed %s after %d rows in %d batches (%d ms)",
                s.uri,
                emitted,
                batches,
                int((time.perf_counter() - t0) * 1000),
            )

    def _decode_row(
        self,
        batch: ColumnBatch,
        index: int,
        file_schema: RowType,
        natives: List[NativeTypeNode],
        file_row: int,
    ) -> List[Any]:
        options = self.session.options
        values: List[Any] = []
        for j, vector in enumerate(batch.cols):
            if vector is None:
                values.append(None)
                continue
            try:
                values.append(decode_cell(vector, natives[j], file_schema.types[j], index, options))
            except OrcBridgeError as e:
                raise e.add_context(column=file_schema.names[j], file_row=file_row)
        return values
