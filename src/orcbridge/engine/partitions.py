# src/orcbridge/engine/partitions.py
"""
Partition columns derived from a file path.

Given ``s3://bucket/events/year=2023/month=07/part-0.orc`` and definitions
``year, month`` the PartitionMap is ``{"year": "2023", "month": "07"}``.
Values are constant for a file and are appended, as strings and in
declaration order, to every row read from it.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from orcbridge.config.models import PartitionDefinition
from orcbridge.logging import get_logger

_logger = get_logger(__name__)

PartitionMap = Dict[str, Optional[str]]


def _directory_segments(path: str) -> List[str]:
    parsed = urlparse(path)
    raw = parsed.path if parsed.scheme and len(parsed.scheme) > 1 else path
    segments = [s for s in raw.replace("\\", "/").split("/") if s]
    # The last segment is the file name, not a partition directory.
    return segments[:-1]


def parse_partitions(path: str, definitions: Sequence[PartitionDefinition]) -> PartitionMap:
    """
    Extract one value per definition from the directory segments of ``path``.

    When a segment matches more than once the deepest one wins. A definition
    that matches nothing yields None.
    """
    segments = _directory_segments(path)
    out: PartitionMap = {}
    for definition in definitions:
        regex = definition.regex()
        value: Optional[str] = None
        for segment in segments:
            m = regex.match(segment)
            if m:
                value = unquote(m.group(1))
        if value is None:
            _logger.warning("partition %r not found in path %s", definition.name, path)
        out[definition.name] = value
    return out


def partition_values(partitions: PartitionMap, names: Sequence[str]) -> List[Optional[str]]:
    """Values in declaration order; names missing from the map are None."""
    return [partitions.get(name) for name in names]
