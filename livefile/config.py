"""Store options and their environment-backed defaults.

Env (a `.env` file in the working directory is honoured):
- LIVEFILE_FLUSH_INTERVAL_MS: debounce interval, 0 = write-through (default: 5000)
- LIVEFILE_ENCODING: text encoding for JSON/YAML files (default: utf-8)
- LIVEFILE_INDENT: JSON pretty-print indent (default: compact)
- LIVEFILE_PASSWORD: password for `.enc` files
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from os import getenv
from typing import Any, Mapping, Optional, Union

from dotenv import load_dotenv

from livefile.base import CodecBase, FilesystemBase

load_dotenv()

DEFAULT_FLUSH_INTERVAL_MS = 5000
DEFAULT_ENCODING = "utf-8"


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = (getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class StoreOptions:
    """Immutable per-store settings."""

    encoding: str = DEFAULT_ENCODING
    flush_interval_ms: int = DEFAULT_FLUSH_INTERVAL_MS
    filesystem: Optional[FilesystemBase] = None
    codec: Optional[CodecBase] = None
    indent: Optional[int] = None
    password: Optional[str] = dataclasses.field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.flush_interval_ms < 0:
            raise ValueError(
                f"flush_interval_ms must be >= 0, got {self.flush_interval_ms}"
            )

    @property
    def write_through(self) -> bool:
        return self.flush_interval_ms == 0

    @property
    def flush_interval(self) -> float:
        """Debounce interval in seconds."""
        return self.flush_interval_ms / 1000.0

    @classmethod
    def from_env(cls, **overrides: Any) -> "StoreOptions":
        values: dict[str, Any] = {
            "encoding": getenv("LIVEFILE_ENCODING") or DEFAULT_ENCODING,
            "flush_interval_ms": _int_from_env(
                "LIVEFILE_FLUSH_INTERVAL_MS", DEFAULT_FLUSH_INTERVAL_MS
            ),
            "indent": _int_from_env("LIVEFILE_INDENT", None),
            "password": getenv("LIVEFILE_PASSWORD"),
        }
        values.update(overrides)
        return cls(**values)


OptionsLike = Union[None, str, StoreOptions, Mapping[str, Any]]


def normalize_options(options: OptionsLike = None) -> StoreOptions:
    """Turn the accepted option shapes into a StoreOptions.

    - None: environment defaults
    - str: the text encoding
    - mapping: StoreOptions fields layered over environment defaults
    """
    if isinstance(options, StoreOptions):
        return options
    if options is None:
        return StoreOptions.from_env()
    if isinstance(options, str):
        return StoreOptions.from_env(encoding=options)
    if isinstance(options, Mapping):
        known = {f.name for f in dataclasses.fields(StoreOptions)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown store option(s): {', '.join(unknown)}")
        return StoreOptions.from_env(**dict(options))
    raise TypeError(f"options must be None, str, mapping or StoreOptions, not {type(options).__name__}")
