"""Central level-based logger (standard library `logging`).

Env:
- LIVEFILE_LOG_LEVEL, else LOG_LEVEL: DEBUG|INFO|WARNING|ERROR|CRITICAL (default: INFO)
- LOG_FORMAT: optional override of the record format
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_CONFIGURED_FLAG = "_livefile_configured"


def _env_level() -> int:
    raw = os.getenv("LIVEFILE_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO"
    return getattr(logging, raw.upper().strip(), logging.INFO)


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Configure the root logger once; later calls only re-apply the level."""
    if level is None:
        resolved = _env_level()
    elif isinstance(level, str):
        resolved = getattr(logging, level.upper().strip(), logging.INFO)
    else:
        resolved = level
    root = logging.getLogger()
    if not getattr(root, _CONFIGURED_FLAG, False):
        logging.basicConfig(level=resolved, format=os.getenv("LOG_FORMAT") or DEFAULT_FORMAT)
        setattr(root, _CONFIGURED_FLAG, True)
    root.setLevel(resolved)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the configured root (configuring it on first use)."""
    configure_logging()
    return logging.getLogger(name or "livefile")
