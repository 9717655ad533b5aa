"""Open a file as a live store: read, pick a codec, decode, register.

If `path` does not exist, `path + ".json"` is tried once and used from then
on, so callers can omit the extension of JSON files.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from common.logger import get_logger
from livefile import registry
from livefile.base import FilesystemBase
from livefile.codec_registry import CodecRegistry, default_registry
from livefile.config import OptionsLike, StoreOptions, normalize_options
from livefile.errors import StoreError
from livefile.filesystem import DEFAULT_FILESYSTEM
from livefile.store import AsyncStore, Store

FALLBACK_SUFFIX = ".json"


def _filesystem(options: StoreOptions) -> FilesystemBase:
    return options.filesystem or DEFAULT_FILESYSTEM


def _as_document(path: str, decoded: Any) -> dict:
    if not decoded:
        return {}
    if isinstance(decoded, dict):
        return decoded
    if isinstance(decoded, Mapping):
        return dict(decoded)
    raise StoreError(
        f"{path}: top-level document must be a mapping, got {type(decoded).__name__}"
    )


def read_sync(
    path: str,
    options: OptionsLike = None,
    codecs: Optional[CodecRegistry] = None,
) -> Store:
    """Open path as a blocking store."""
    log = get_logger(__name__)
    opts = normalize_options(options)
    fs = _filesystem(opts)
    try:
        raw = fs.read_bytes(path)
    except FileNotFoundError:
        log.debug("loader: missing, trying fallback path=%s", path + FALLBACK_SUFFIX)
        raw = fs.read_bytes(path + FALLBACK_SUFFIX)
        path = path + FALLBACK_SUFFIX

    codec = (codecs or default_registry).resolve(path, opts.codec)
    data = _as_document(path, codec.decode(raw, opts))

    store = Store(path, data, codec, fs, opts)
    registry.register(store)
    log.info(
        "loader: read ok path=%s codec=%s keys=%d flush_interval_ms=%d",
        path,
        codec.name,
        len(data),
        opts.flush_interval_ms,
    )
    return store


async def read(
    path: str,
    options: OptionsLike = None,
    codecs: Optional[CodecRegistry] = None,
) -> AsyncStore:
    """Open path as an event-loop store (must be awaited inside a running loop)."""
    log = get_logger(__name__)
    opts = normalize_options(options)
    fs = _filesystem(opts)
    try:
        raw = await fs.read_bytes_async(path)
    except FileNotFoundError:
        log.debug("loader: missing, trying fallback path=%s", path + FALLBACK_SUFFIX)
        raw = await fs.read_bytes_async(path + FALLBACK_SUFFIX)
        path = path + FALLBACK_SUFFIX

    codec = (codecs or default_registry).resolve(path, opts.codec)
    data = _as_document(path, await codec.decode_async(raw, opts))

    store = AsyncStore(path, data, codec, fs, opts)
    registry.register(store)
    log.info(
        "loader: async read ok path=%s codec=%s keys=%d flush_interval_ms=%d",
        path,
        codec.name,
        len(data),
        opts.flush_interval_ms,
    )
    return store
