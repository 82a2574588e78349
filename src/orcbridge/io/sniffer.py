# src/orcbridge/io/sniffer.py
"""
ORC format sniffing.

An ORC file ends with ``... postscript | postscript length (1 byte)`` and the
postscript itself ends with the magic ``ORC``. Files written by ORC 0.11 may
lack it in the tail but always start with the magic, so the header is the
fallback. Only bytes are inspected; the schema is never parsed.
"""

from __future__ import annotations

from typing import Union

from orcbridge.connectors.filesystem import open_input
from orcbridge.connectors.handle import DatasetHandle
from orcbridge.errors import FileTypeInvalidError
from orcbridge.logging import get_logger

_logger = get_logger(__name__)

MAGIC = b"ORC"
SNIFF_WINDOW = 16 * 1024


def _tail_has_magic(tail: bytes) -> bool:
    ps_len = tail[-1]
    # The postscript must be long enough to hold the magic itself.
    if ps_len < len(MAGIC) + 1 or len(tail) < len(MAGIC) + 1:
        return False
    return tail[-1 - len(MAGIC):-1] == MAGIC


def is_recognized_format(
    source: Union[str, DatasetHandle], *, window: int = SNIFF_WINDOW
) -> bool:
    """
    True if the file carries the ORC magic in its postscript or header.

    Raises FileTypeInvalidError when the bytes cannot be read at all; a file
    that simply isn't ORC returns False.
    """
    handle = source if isinstance(source, DatasetHandle) else DatasetHandle.from_uri(source)
    try:
        f = open_input(handle)
        try:
            size = f.size()
            read_size = min(size, window)
            if read_size <= 0:
                _logger.debug("empty file, not ORC: %s", handle.uri)
                return False
            f.seek(size - read_size)
            tail = f.read(read_size)
            if _tail_has_magic(tail):
                return True
            # ORC 0.11 files only carry the magic in the header.
            f.seek(0)
            header = f.read(len(MAGIC))
            recognized = header == MAGIC
            if recognized:
                _logger.debug("ORC magic found in header only: %s", handle.uri)
            return recognized
        finally:
            f.close()
    except OSError as e:
        raise FileTypeInvalidError("check orc file failed", path=handle.uri) from e
