"""Mutation-tracked mapping mirrored to one file.

A Store wraps the decoded document. Every key assignment or deletion goes
through a single hook that bumps a mutation counter, refreshes the process
registry entry and applies the flush policy:

- write-through (flush_interval_ms == 0): flush on every mutation
- debounced: a background timer flushes at the interval when dirty

The store is dirty while the mutation counter is ahead of the counter
captured by the last successful flush. At most one flush per store is in
flight; mutations that land during a flush are picked up by a follow-up
write, so the file never goes back to an older state.

Values mutated in place (nested dicts/lists) are not observed; call
`touch()` after changing them.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import MutableMapping
from typing import Any, Iterator, Optional

from common.logger import get_logger
from livefile import registry
from livefile.base import CodecBase, FilesystemBase
from livefile.config import StoreOptions


class Store(MutableMapping):
    """Blocking store: flushes run on the calling thread.

    In debounced mode a daemon thread wakes every interval and flushes when
    dirty; it never keeps the process alive. A failed timed flush is logged
    and raised out of that thread (threading.excepthook), which stops the
    timer.
    """

    def __init__(
        self,
        path: str,
        data: dict,
        codec: CodecBase,
        filesystem: FilesystemBase,
        options: StoreOptions,
    ):
        self._path = path
        self._data = data
        self._codec = codec
        self._fs = filesystem
        self._options = options
        self._version = 0
        self._flushed_version = 0
        self._lock = threading.RLock()
        self._flush_lock = threading.Lock()
        if not options.write_through:
            self._start_timer()

    # ---------- read-only state ----------

    @property
    def path(self) -> str:
        return self._path

    @property
    def codec(self) -> CodecBase:
        return self._codec

    @property
    def filesystem(self) -> FilesystemBase:
        return self._fs

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def dirty(self) -> bool:
        return self._version != self._flushed_version

    def to_dict(self) -> dict:
        """Shallow copy of the live data."""
        with self._lock:
            return dict(self._data)

    # ---------- mapping protocol ----------

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Any) -> None:
        self.delete(key)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Store):
            return self._data == other._data
        return self._data == other

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} path={self._path!r} codec={self._codec.name} keys={len(self._data)}>"

    # ---------- mutations ----------

    def set(self, key: Any, value: Any):
        """Assign one key and apply the flush policy.

        Returns whatever the policy returns: None for blocking stores, the
        pending flush for async write-through stores.
        """
        with self._lock:
            self._data[key] = value
            self._version += 1
        return self._mutated()

    def delete(self, key: Any):
        """Remove one key (KeyError if missing) and apply the flush policy."""
        with self._lock:
            del self._data[key]
            self._version += 1
        return self._mutated()

    def update(self, *args: Any, **kwargs: Any):  # type: ignore[override]
        """Merge several keys as a single mutation."""
        with self._lock:
            self._data.update(*args, **kwargs)
            self._version += 1
        return self._mutated()

    def clear(self):  # type: ignore[override]
        with self._lock:
            self._data.clear()
            self._version += 1
        return self._mutated()

    def touch(self):
        """Mark dirty after an in-place change to a nested value."""
        with self._lock:
            self._version += 1
        return self._mutated()

    def _mutated(self):
        registry.register(self)
        if self._options.write_through:
            self.flush_sync()
        return None

    # ---------- flushing ----------

    def _encode_current(self) -> tuple[int, bytes]:
        with self._lock:
            return self._version, self._codec.encode(self._data, self._options)

    def flush_sync(self, force: bool = False) -> bool:
        """Write the full current state now if dirty (always when forced).

        Returns True if a write happened.
        """
        log = get_logger(__name__)
        with self._flush_lock:
            if not force and not self.dirty:
                return False
            version, payload = self._encode_current()
            self._fs.write_bytes(self._path, payload)
            self._flushed_version = version
        log.debug(
            "store: flush ok path=%s codec=%s bytes=%d",
            self._path,
            self._codec.name,
            len(payload),
        )
        return True

    def _start_timer(self) -> None:
        thread = threading.Thread(
            target=self._run_timer,
            name=f"livefile-flush:{self._path}",
            daemon=True,
        )
        thread.start()

    def _run_timer(self) -> None:
        interval = self._options.flush_interval
        while True:
            time.sleep(interval)
            try:
                self.flush_sync()
            except Exception:
                get_logger(__name__).critical(
                    "store: timed flush failed, timer stopped path=%s",
                    self._path,
                    exc_info=True,
                )
                raise


class AsyncStore(Store):
    """Event-loop store: flushes run as tasks on the loop that created it.

    Write-through mutations dispatch a flush without waiting for it;
    `set`/`delete`/`update` return the pending task so a caller can await
    it. Every failed write-through flush is also reported to the loop's
    exception handler, whether or not the caller awaits the task. In
    debounced mode a loop task flushes at the interval; a failure there is
    logged, raised out of the task and reported the same way, and the timer
    stops. If the loop shuts down while the store is still in use, the next
    mutation moves debounced flushing to a daemon thread.
    """

    def __init__(
        self,
        path: str,
        data: dict,
        codec: CodecBase,
        filesystem: FilesystemBase,
        options: StoreOptions,
    ):
        self._loop = asyncio.get_running_loop()
        self._drain_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        super().__init__(path, data, codec, filesystem, options)

    def _mutated(self):
        registry.register(self)
        if self._options.write_through:
            return self._schedule_flush(report=True)
        self._ensure_timer()
        return None

    def _ensure_timer(self) -> None:
        """Keep the debounce timer alive after its loop has shut down."""
        task = self._timer_task
        if task is None or not task.cancelled():
            return
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            get_logger(__name__).warning(
                "store: event loop gone, debounced flushing moved to a thread path=%s",
                self._path,
            )
            self._timer_task = None
            Store._start_timer(self)
            return
        get_logger(__name__).info("store: restarting flush timer on new loop path=%s", self._path)
        self._start_timer()

    def _flush_running(self) -> bool:
        return self._drain_task is not None and not self._drain_task.done()

    def _schedule_flush(self, report: bool) -> Optional[asyncio.Task]:
        if self._flush_running():
            return self._drain_task
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop running (e.g. mutated after asyncio.run returned)
            get_logger(__name__).debug(
                "store: no running loop, flushing inline path=%s", self._path
            )
            self.flush_sync()
            return None
        task = loop.create_task(self._drain())
        if report:
            task.add_done_callback(self._report_failure)
        self._drain_task = task
        return task

    async def _drain(self) -> bool:
        """Write until the file holds the latest state. Single flight."""
        log = get_logger(__name__)
        wrote = False
        while self.dirty:
            version = self._version
            payload = await self._codec.encode_async(self._data, self._options)
            await self._fs.write_bytes_async(self._path, payload)
            self._flushed_version = version
            wrote = True
            log.debug(
                "store: async flush ok path=%s codec=%s bytes=%d",
                self._path,
                self._codec.name,
                len(payload),
            )
        return wrote

    async def flush(self, force: bool = False) -> bool:
        """Write the full current state now if dirty (always when forced)."""
        if force:
            self._version += 1
        if not self.dirty and not self._flush_running():
            return False
        return await asyncio.shield(self._schedule_flush(report=False))

    def _start_timer(self) -> None:
        self._timer_task = self._loop.create_task(self._run_timer_async())
        self._timer_task.add_done_callback(self._report_failure)

    async def _run_timer_async(self) -> None:
        interval = self._options.flush_interval
        while True:
            await asyncio.sleep(interval)
            if not self.dirty and not self._flush_running():
                continue
            try:
                await asyncio.shield(self._schedule_flush(report=False))
            except Exception:
                get_logger(__name__).critical(
                    "store: timed flush failed, timer stopped path=%s",
                    self._path,
                    exc_info=True,
                )
                raise

    def _report_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        get_logger(__name__).error("store: flush failed path=%s err=%s", self._path, exc)
        task.get_loop().call_exception_handler(
            {
                "message": f"livefile: flush of {self._path} failed",
                "exception": exc,
                "task": task,
            }
        )
