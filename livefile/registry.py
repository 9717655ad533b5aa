"""Process-wide table of open stores and the shutdown flush.

Stores are keyed by path. Opening the same path twice is not supported: the
most recently registered (or most recently mutated) store wins, and a
warning is logged when that happens.
"""

from __future__ import annotations

import atexit
import threading
from typing import TYPE_CHECKING, Optional

from common.logger import get_logger
from livefile.errors import FlushError

if TYPE_CHECKING:
    from livefile.store import Store

_stores: dict[str, "Store"] = {}
_lock = threading.Lock()


def register(store: "Store") -> None:
    """Add or refresh the entry for store.path."""
    with _lock:
        previous = _stores.get(store.path)
        _stores[store.path] = store
    if previous is not None and previous is not store:
        get_logger(__name__).warning(
            "registry: path opened by more than one store, last one wins path=%s",
            store.path,
        )


def get(path: str) -> Optional["Store"]:
    with _lock:
        return _stores.get(path)


def stores() -> dict[str, "Store"]:
    """Snapshot of the registered stores keyed by path."""
    with _lock:
        return dict(_stores)


def unregister(path: str) -> Optional["Store"]:
    with _lock:
        return _stores.pop(path, None)


def flush_all() -> int:
    """Write every registered store now, dirty or not.

    Every store is attempted; failures are logged and then raised together as
    FlushError. Returns the number of stores written.
    """
    log = get_logger(__name__)
    failures: dict[str, BaseException] = {}
    written = 0
    for path, store in stores().items():
        try:
            store.flush_sync(force=True)
            written += 1
        except Exception as e:
            log.error("registry: shutdown flush failed path=%s err=%s", path, e)
            failures[path] = e
    log.debug("registry: flush_all done written=%d failed=%d", written, len(failures))
    if failures:
        raise FlushError(failures)
    return written


atexit.register(flush_all)
