# src/orcbridge/logging.py
"""
Logging helpers.

All loggers live under the ``orcbridge`` namespace so applications can tune
them in one place. Set ``ORCBRIDGE_VERBOSE=1`` to get DEBUG output on stderr
without configuring logging yourself.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_ROOT = "orcbridge"
_configured = False


def _verbose() -> bool:
    return os.getenv("ORCBRIDGE_VERBOSE", "").lower() in ("1", "true", "yes")


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger(_ROOT)
    if _verbose():
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)
    else:
        # Library default: stay silent unless the application configures logging.
        root.addHandler(logging.NullHandler())
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the orcbridge namespace."""
    _configure_root()
    if not name or name == _ROOT:
        return logging.getLogger(_ROOT)
    if not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, exc: BaseException) -> None:
    """
    Log a handled exception at WARNING.

    The traceback is only attached in verbose mode; otherwise the message
    carries the exception type and text.
    """
    if _verbose():
        logger.warning("%s: %s", msg, exc, exc_info=exc)
    else:
        logger.warning("%s: %s: %s", msg, type(exc).__name__, exc)
