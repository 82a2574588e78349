from __future__ import annotations

import os
from typing import Tuple
from urllib.parse import urlparse

import pyarrow as pa
from pyarrow import fs as pafs

from .handle import DatasetHandle


def _s3_filesystem(handle: DatasetHandle) -> pafs.FileSystem:
    opts = handle.fs_opts
    kwargs = {}
    if "s3_access_key_id" in opts:
        kwargs["access_key"] = opts["s3_access_key_id"]
    if "s3_secret_access_key" in opts:
        kwargs["secret_key"] = opts["s3_secret_access_key"]
    if "s3_session_token" in opts:
        kwargs["session_token"] = opts["s3_session_token"]
    if "s3_region" in opts:
        kwargs["region"] = opts["s3_region"]
    if "s3_endpoint" in opts:
        # Accept both "http://minio:9000" and bare "minio:9000".
        endpoint = urlparse(opts["s3_endpoint"])
        if endpoint.scheme and endpoint.netloc:
            kwargs["endpoint_override"] = endpoint.netloc
            kwargs["scheme"] = endpoint.scheme
        else:
            kwargs["endpoint_override"] = opts["s3_endpoint"]
    return pafs.S3FileSystem(**kwargs)


def resolve_filesystem(handle: DatasetHandle) -> Tuple[pafs.FileSystem, str]:
    """Filesystem and in-filesystem path for a handle."""
    if handle.scheme == "s3":
        return _s3_filesystem(handle), handle.path
    if handle.scheme in ("", "file"):
        return pafs.LocalFileSystem(), os.path.abspath(handle.path)
    # Anything else (gs://, hdfs://, ...) goes through pyarrow's own resolver.
    return pafs.FileSystem.from_uri(handle.uri)


def open_input(handle: DatasetHandle) -> pa.NativeFile:
    """Open a random-access, byte-range-readable file. Caller closes it."""
    filesystem, path = resolve_filesystem(handle)
    return filesystem.open_input_file(path)
