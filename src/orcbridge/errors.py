# src/orcbridge/errors.py
"""
Error taxonomy for orcbridge.

Every failure aborts the read of the current file. Errors carry a stable
``kind`` so callers can turn them into outcome reports, plus a ``context``
dict (path, column, row, offending category ...) that is rendered into the
message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    """Stable error identifiers."""

    FILE_TYPE_INVALID = "file_type_invalid"  # not an ORC file, or sniffing I/O failed
    SCHEMA_COLUMN_MISSING = "schema_column_missing"  # selected column absent from file
    UNSUPPORTED_DATA_TYPE = "unsupported_data_type"  # no unified mapping / decoder
    ILLEGAL_ARGUMENT = "illegal_argument"  # malformed union tag or vector pairing
    READER_OPERATION_FAILED = "reader_operation_failed"  # reader construction failed
    CONFIG_INVALID = "config_invalid"  # unusable reader options

    def __str__(self) -> str:
        return self.value


class OrcBridgeError(Exception):
    """Base class for all orcbridge errors."""

    kind: ErrorKind = ErrorKind.ILLEGAL_ARGUMENT

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def add_context(self, **context: Any) -> "OrcBridgeError":
        """Attach extra context without overwriting what is already known."""
        for key, value in context.items():
            if value is not None and key not in self.context:
                self.context[key] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.context}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class FileTypeInvalidError(OrcBridgeError):
    kind = ErrorKind.FILE_TYPE_INVALID


class SchemaColumnMissingError(OrcBridgeError):
    kind = ErrorKind.SCHEMA_COLUMN_MISSING


class UnsupportedDataTypeError(OrcBridgeError):
    kind = ErrorKind.UNSUPPORTED_DATA_TYPE


class IllegalArgumentError(OrcBridgeError):
    kind = ErrorKind.ILLEGAL_ARGUMENT


class ReaderOperationFailedError(OrcBridgeError):
    kind = ErrorKind.READER_OPERATION_FAILED


class ConfigError(OrcBridgeError):
    kind = ErrorKind.CONFIG_INVALID


def format_error_for_cli(exc: BaseException) -> str:
    """One-line rendering for terminal output."""
    if isinstance(exc, OrcBridgeError):
        return f"[{exc.kind}] {exc}"
    return f"{type(exc).__name__}: {exc}"
