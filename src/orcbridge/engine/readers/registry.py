# src/orcbridge/engine/readers/registry.py
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from orcbridge.connectors.handle import DatasetHandle
from orcbridge.errors import IllegalArgumentError

if TYPE_CHECKING:
    from .base import BaseColumnarReader as ColumnarReader


# Registry: reader_name -> ctor(handle) function
_READERS: Dict[str, Callable[[DatasetHandle], "ColumnarReader"]] = {}
# Registration order; the first entry is the default
_ORDER: List[str] = []

DEFAULT_READER = "arrow-orc"


def register_reader(name: str):
    """
    Decorator to register a reader class under a stable name.
    The class must implement BaseColumnarReader.
    """

    def deco(cls):
        if name in _READERS:
            raise ValueError(f"Reader '{name}' is already registered.")
        _READERS[name] = cls
        if name not in _ORDER:
            _ORDER.append(name)
        cls.reader_name = name
        return cls

    return deco


def pick_reader(handle: DatasetHandle, name: Optional[str] = None) -> "ColumnarReader":
    """
    Build the reader for `handle`.

    An explicit `name` wins; otherwise the pyarrow-backed ORC reader is used.
    """
    register_default_readers()
    key = name or DEFAULT_READER
    ctor = _READERS.get(key)
    if ctor is None:
        raise IllegalArgumentError(
            "no reader registered under this name", reader=key, known=list(_ORDER)
        )
    return ctor(handle)


def registered_readers() -> List[str]:
    return list(_ORDER)


def register_default_readers() -> None:
    """
    Import built-in readers so their @register_reader decorators run
    and populate the registry.
    """
    from . import arrow_orc  # noqa: F401
