"""Codec and filesystem base classes (abstract).

Stores depend on these types, so you can inject alternative codecs or
filesystems (memory/remote/etc.) without changing store logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from livefile.config import StoreOptions


class CodecBase(ABC):
    """Encode/decode pair for one on-disk format.

    Codecs are stateless and safe to share across stores. The async variants
    default to the blocking ones; override them when the work can leave the
    event loop.
    """

    name: str = "codec"

    @abstractmethod
    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        """Serialize the full value to bytes."""
        ...

    @abstractmethod
    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        """Deserialize bytes produced by encode()."""
        ...

    async def encode_async(self, value: Any, options: "StoreOptions") -> bytes:
        return self.encode(value, options)

    async def decode_async(self, data: bytes, options: "StoreOptions") -> Any:
        return self.decode(data, options)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FilesystemBase(ABC):
    """Raw byte I/O for a single path, blocking and async."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Read the whole file; raise FileNotFoundError when missing."""
        ...

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        """Replace the whole file content."""
        ...

    @abstractmethod
    async def read_bytes_async(self, path: str) -> bytes:
        ...

    @abstractmethod
    async def write_bytes_async(self, path: str, data: bytes) -> None:
        ...
