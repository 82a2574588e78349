# src/orcbridge/__init__.py
"""
orcbridge - read ORC files as self-describing rows

Usage:
    import orcbridge

    # Is this really an ORC file?
    orcbridge.detect_format("data/events.orc")

    # Unified schema, optionally steered by a target schema
    schema = orcbridge.infer_schema("data/events.orc")

    # Lazy rows
    with orcbridge.read("data/events.orc", "events") as rows:
        for row in rows:
            print(row.fields)

    # Push rows into a collector
    from orcbridge.sinks import ListCollector
    sink = ListCollector()
    orcbridge.read("data/events.orc", "events", sink)
"""

from orcbridge.version import VERSION as __version__

from typing import Any, Mapping, Optional, Union

from orcbridge.config.models import PartitionDefinition, ReaderOptions
from orcbridge.connectors.handle import DatasetHandle
from orcbridge.engine.materializer import OrcMaterializer, RowStream, Sink
from orcbridge.errors import (
    ConfigError,
    ErrorKind,
    FileTypeInvalidError,
    IllegalArgumentError,
    OrcBridgeError,
    ReaderOperationFailedError,
    SchemaColumnMissingError,
    UnsupportedDataTypeError,
)
from orcbridge.logging import get_logger
from orcbridge.rows import Row, UnionValue
from orcbridge.types.unified import RowType, UnifiedSchema

_logger = get_logger(__name__)

Options = Union[ReaderOptions, Mapping[str, Any], None]


def _options(options: Options) -> ReaderOptions:
    if isinstance(options, ReaderOptions):
        return options
    return ReaderOptions.from_mapping(options)


def detect_format(path: Union[str, DatasetHandle], options: Options = None) -> bool:
    """
    True if `path` is an ORC file (magic in the postscript or the header).

    Raises FileTypeInvalidError if the file cannot be read.
    """
    return OrcMaterializer(path, _options(options)).detect_format()


def infer_schema(
    path: Union[str, DatasetHandle],
    target_schema: Optional[RowType] = None,
    options: Options = None,
) -> RowType:
    """
    Unified schema of the rows `read()` would emit for `path`.

    Partition fields are included when `merge_partitions` is enabled.
    Calling this twice on the same file yields equal schemas.
    """
    return OrcMaterializer(path, _options(options), target_schema).schema()


def read(
    path: Union[str, DatasetHandle],
    table_id: Optional[str] = None,
    sink: Optional[Sink] = None,
    *,
    options: Options = None,
    target_schema: Optional[RowType] = None,
    partitions: Optional[Mapping[str, Optional[str]]] = None,
) -> Union[RowStream, int]:
    """
    Read an ORC file as Rows tagged with `table_id`.

    Args:
        path: Local path or URI (file://, s3://).
        table_id: Opaque identifier copied onto every Row.
        sink: Optional collector (`.collect(row)`) or callable. When given,
            every row is pushed into it and the row count is returned.
        options: ReaderOptions or a mapping of option names.
        target_schema: Caller-declared schema to coerce toward.
        partitions: Already-parsed partition values; appended to every row
            in mapping order. Overrides `partition_definitions`.

    Returns:
        A RowStream (lazy, forward-only; use it as a context manager to
        release the file early) when no sink is given, else the row count.
    """
    materializer = OrcMaterializer(
        path, _options(options), target_schema=target_schema, partitions=partitions
    )
    if sink is None:
        return materializer.rows(table_id)
    return materializer.read(table_id, sink)


__all__ = [
    "__version__",
    "ConfigError",
    "DatasetHandle",
    "ErrorKind",
    "FileTypeInvalidError",
    "IllegalArgumentError",
    "OrcBridgeError",
    "OrcMaterializer",
    "PartitionDefinition",
    "ReaderOperationFailedError",
    "ReaderOptions",
    "Row",
    "RowStream",
    "RowType",
    "SchemaColumnMissingError",
    "UnifiedSchema",
    "UnionValue",
    "UnsupportedDataTypeError",
    "detect_format",
    "infer_schema",
    "read",
]
