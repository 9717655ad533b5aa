"""Filesystem capabilities: local disk (default) and in-memory."""

from __future__ import annotations

import contextlib
import os
import threading
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from common.logger import get_logger
from livefile.base import FilesystemBase


class LocalFilesystem(FilesystemBase):
    """Local disk. Writes are atomic via tmp+rename."""

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise
        get_logger(__name__).debug("fs: write ok path=%s bytes=%d", path, len(data))

    async def read_bytes_async(self, path: str) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def write_bytes_async(self, path: str, data: bytes) -> None:
        parent = os.path.dirname(path)
        if parent:
            await aiofiles.os.makedirs(parent, exist_ok=True)
        tmp_path = path + ".tmp"
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                await aiofiles.os.remove(tmp_path)
            raise
        get_logger(__name__).debug("fs: async write ok path=%s bytes=%d", path, len(data))


class MemoryFilesystem(FilesystemBase):
    """Dict-backed filesystem for tests and ephemeral stores.

    Every write is also appended to `writes` as a (path, data) pair.
    """

    def __init__(self, files: Optional[dict[str, bytes]] = None):
        self.files: dict[str, bytes] = dict(files or {})
        self.writes: list[tuple[str, bytes]] = []
        self._lock = threading.Lock()

    def read_bytes(self, path: str) -> bytes:
        with self._lock:
            if path not in self.files:
                raise FileNotFoundError(2, "No such file or directory", path)
            return self.files[path]

    def write_bytes(self, path: str, data: bytes) -> None:
        with self._lock:
            self.files[path] = bytes(data)
            self.writes.append((path, bytes(data)))

    async def read_bytes_async(self, path: str) -> bytes:
        return self.read_bytes(path)

    async def write_bytes_async(self, path: str, data: bytes) -> None:
        self.write_bytes(path, data)

    def writes_to(self, path: str) -> list[bytes]:
        with self._lock:
            return [data for p, data in self.writes if p == path]


DEFAULT_FILESYSTEM = LocalFilesystem()
