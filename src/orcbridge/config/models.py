# src/orcbridge/config/models.py
from __future__ import annotations

import codecs
import re
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from orcbridge.errors import ConfigError


class PartitionDefinition(BaseModel):
    """
    How to pull one partition value out of a file path.

    With no ``pattern`` the value comes from a Hive-style ``name=value``
    directory segment. A custom ``pattern`` is a regular expression matched
    against each directory segment; its first capture group is the value.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Partition column name.")
    pattern: Optional[str] = Field(
        default=None, description="Regex with one capture group, applied per path segment."
    )

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            compiled = re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid partition pattern {v!r}: {e}") from e
        if compiled.groups < 1:
            raise ValueError(f"partition pattern {v!r} needs one capture group")
        return v

    def regex(self) -> "re.Pattern[str]":
        if self.pattern is not None:
            return re.compile(self.pattern)
        return re.compile(rf"^{re.escape(self.name)}=(.*)$")


class ReaderOptions(BaseModel):
    """
    Recognized read options. Unknown keys are rejected.

    Both snake_case names and the camelCase job-config names
    (``textEncoding``, ``selectedColumns``, ``mergePartitions``,
    ``partitionDefinitions``) are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    text_encoding: str = Field(default="utf-8", alias="textEncoding")
    selected_columns: Optional[List[str]] = Field(default=None, alias="selectedColumns")
    merge_partitions: bool = Field(default=False, alias="mergePartitions")
    partition_definitions: List[PartitionDefinition] = Field(
        default_factory=list, alias="partitionDefinitions"
    )
    # JPEG/PNG payloads in string columns come back as raw bytes when enabled.
    binary_signature_passthrough: bool = Field(
        default=False, alias="binarySignaturePassthrough"
    )

    @field_validator("text_encoding")
    @classmethod
    def _check_encoding(cls, v: str) -> str:
        try:
            return codecs.lookup(v).name
        except LookupError as e:
            raise ValueError(f"unknown text encoding {v!r}") from e

    @field_validator("selected_columns")
    @classmethod
    def _check_columns(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        seen = set()
        for name in v:
            if name in seen:
                raise ValueError(f"column {name!r} selected more than once")
            seen.add(name)
        return v

    @field_validator("partition_definitions", mode="before")
    @classmethod
    def _coerce_partitions(cls, v: Any) -> Any:
        # Accept bare names as shorthand for Hive-style definitions.
        if isinstance(v, (list, tuple)):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode="after")
    def _check_merge(self) -> "ReaderOptions":
        if self.merge_partitions and not self.partition_definitions:
            raise ValueError("merge_partitions requires partition_definitions")
        names = [d.name for d in self.partition_definitions]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate partition definitions: {names}")
        return self

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "ReaderOptions":
        """Build options from a plain mapping, raising ConfigError on bad input."""
        try:
            return cls.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ConfigError(f"invalid reader options: {e}") from e

    def partition_names(self) -> List[str]:
        return [d.name for d in self.partition_definitions]
