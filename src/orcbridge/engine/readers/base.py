from __future__ import annotations

"""
Columnar reader interface.

A reader is the boundary to the library that actually decompresses the file:

  open()            → native schema (read once, cached)
  batches(columns)  → ColumnBatch iterator, projected to `columns`, file order
  close()           → release the file handle (idempotent)

Readers are single-use and single-threaded; one session owns one reader.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional, Sequence

from orcbridge.connectors.handle import DatasetHandle
from orcbridge.types.native import NativeTypeNode
from orcbridge.vectors import ColumnBatch


class BaseColumnarReader(ABC):
    reader_name: str = "unknown"

    def __init__(self, handle: DatasetHandle):
        self.handle = handle
        self._schema: Optional[NativeTypeNode] = None

    @abstractmethod
    def open(self) -> NativeTypeNode:
        """Open the file and return its native schema (a struct of columns)."""
        ...

    @abstractmethod
    def batches(self, columns: Sequence[str]) -> Iterator[ColumnBatch]:
        """Yield batches whose `cols` follow the order of `columns`."""
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> "BaseColumnarReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
