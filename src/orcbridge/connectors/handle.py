from __future__ import annotations

"""
DatasetHandle: a normalized view of where an ORC file lives.

Readers and the sniffer shouldn't have to parse URIs or chase environment
variables. This small value object centralizes that logic:

  - `uri`:     the original string you passed (e.g., "s3://bucket/key.orc")
  - `scheme`:  parsed scheme: "s3", "file", "" (bare local), ...
  - `path`:    the path handed to the filesystem (bucket/key for s3, a local
               path otherwise)
  - `format`:  best-effort format from the extension: "orc" | "unknown".
               Only a hint; the sniffer decides what a file really is.
  - `fs_opts`: normalized filesystem options pulled from env (S3 creds,
               region, endpoint).

The handle is immutable and safe to share between sessions.
"""

from dataclasses import dataclass, field
from typing import Dict
import os
from urllib.parse import unquote, urlparse


@dataclass(frozen=True)
class DatasetHandle:
    uri: str
    scheme: str
    path: str
    format: str
    fs_opts: Dict[str, str] = field(default_factory=dict)

    # ------------------------------ Constructors ------------------------------

    @staticmethod
    def from_uri(uri: str) -> "DatasetHandle":
        """
        Create a DatasetHandle from a user-provided URI or path.

        Examples:
          - "s3://my-bucket/warehouse/year=2023/part-0.orc"
          - "/data/events.orc"            (scheme = "")
          - "file:///data/events.orc"     (scheme = "file")
        """
        uri = os.fspath(uri)
        parsed = urlparse(uri)
        scheme = (parsed.scheme or "").lower()

        # Windows drive letters parse as a one-letter scheme.
        if len(scheme) == 1:
            scheme = ""

        fmt = "orc" if uri.lower().endswith(".orc") else "unknown"

        fs_opts: Dict[str, str] = {}
        if scheme == "s3":
            path = f"{parsed.netloc}{parsed.path}"
            _inject_s3_env(fs_opts)
        elif scheme == "file":
            path = unquote(parsed.path)
        else:
            path = uri

        return DatasetHandle(uri=uri, scheme=scheme, path=path, format=fmt, fs_opts=fs_opts)

    @property
    def is_remote(self) -> bool:
        return self.scheme not in ("", "file")


# ------------------------------ Helpers ---------------------------------------


def _inject_s3_env(opts: Dict[str, str]) -> None:
    """
    Read S3/MinIO-related environment variables and copy them into `opts`
    using the keys `connectors.filesystem` expects.

    We *don't* log or print these values anywhere. All keys are optional.
    """
    ak = os.getenv("AWS_ACCESS_KEY_ID")
    sk = os.getenv("AWS_SECRET_ACCESS_KEY")
    st = os.getenv("AWS_SESSION_TOKEN")
    region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
    endpoint = os.getenv("AWS_ENDPOINT_URL")

    if ak:
        opts["s3_access_key_id"] = ak
    if sk:
        opts["s3_secret_access_key"] = sk
    if st:
        opts["s3_session_token"] = st
    if region:
        opts["s3_region"] = region
    if endpoint:
        opts["s3_endpoint"] = endpoint
