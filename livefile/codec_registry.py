"""Codec resolution by file extension.

`.gz` is a wrapper suffix: it wraps whatever codec the rest of the name
resolves to, so `state.yaml.gz` is zlib around YAML. Extensions match
exactly (`CONF.YML` is not YAML). Encryption is opt-in: pass
`codec=EncryptedCodec(...)` or register `.enc` on a custom CodecRegistry.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from common.logger import get_logger
from livefile.base import CodecBase
from livefile.codecs import BSON, JSON, MSGPACK, TERM, YAML, CompressionCodec

WrapperFactory = Callable[[CodecBase], CodecBase]


class CodecRegistry:
    def __init__(self, default: CodecBase = JSON):
        self.default = default
        self._codecs: dict[str, CodecBase] = {}
        self._wrappers: dict[str, WrapperFactory] = {}

    def register(self, extension: str, codec: CodecBase) -> None:
        """Map an extension (with or without the leading dot) to a codec."""
        self._codecs[_normalize_ext(extension)] = codec

    def register_wrapper(self, extension: str, factory: WrapperFactory) -> None:
        self._wrappers[_normalize_ext(extension)] = factory

    def resolve(self, path: str, override: Optional[CodecBase] = None) -> CodecBase:
        """Pick the codec for path; an explicit override always wins."""
        if override is not None:
            return override
        stem, ext = os.path.splitext(path)
        if ext in self._wrappers:
            return self._wrappers[ext](self.resolve(stem))
        codec = self._codecs.get(ext, self.default)
        get_logger(__name__).debug("codec: resolved path=%s codec=%s", path, codec.name)
        return codec


def _normalize_ext(extension: str) -> str:
    return extension if extension.startswith(".") else "." + extension


default_registry = CodecRegistry()
default_registry.register(".yaml", YAML)
default_registry.register(".yml", YAML)
default_registry.register(".bson", BSON)
default_registry.register(".mp", MSGPACK)
default_registry.register(".etf", TERM)
default_registry.register_wrapper(".gz", CompressionCodec)


def resolve(path: str, override: Optional[CodecBase] = None) -> CodecBase:
    return default_registry.resolve(path, override)
