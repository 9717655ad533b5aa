"""Wire-format codecs: JSON, YAML, BSON, MessagePack, Erlang term format, zlib."""

from __future__ import annotations

import asyncio
import json
import zlib
from typing import TYPE_CHECKING, Any

import bson
import msgpack
import yaml

from livefile.base import CodecBase
from livefile.errors import UnsupportedCodecError

if TYPE_CHECKING:
    from livefile.config import StoreOptions

# Optional native backend, probed once. Using the codec without it raises
# UnsupportedCodecError; registering it never fails.
try:
    import erlpack
except ImportError:
    erlpack = None

# zlib header or gzip header, detected automatically on inflate
_INFLATE_WBITS = zlib.MAX_WBITS | 32


class JsonCodec(CodecBase):
    name = "json"

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        text = json.dumps(value, indent=options.indent, ensure_ascii=False)
        return text.encode(options.encoding)

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return json.loads(data.decode(options.encoding))


class YamlCodec(CodecBase):
    name = "yaml"

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        text = yaml.safe_dump(value, allow_unicode=True, sort_keys=False)
        return text.encode(options.encoding)

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return yaml.safe_load(data.decode(options.encoding))


class BsonCodec(CodecBase):
    """Binary JSON document (top-level value must be a mapping)."""

    name = "bson"

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        return bson.encode(value)

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return bson.decode(data)


class MsgpackCodec(CodecBase):
    name = "msgpack"

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return msgpack.unpackb(data, raw=False, strict_map_key=False)


class TermCodec(CodecBase):
    """Erlang external term format, backed by `erlpack` when installed."""

    name = "etf"

    @property
    def available(self) -> bool:
        return erlpack is not None

    def _backend(self):
        if erlpack is None:
            raise UnsupportedCodecError(self.name, "erlpack")
        return erlpack

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        return self._backend().pack(value)

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return self._backend().unpack(data)


class CompressionCodec(CodecBase):
    """Deflates the inner codec's output; inflates before decoding."""

    def __init__(self, inner: CodecBase):
        self.inner = inner
        self.name = f"{inner.name}+zlib"

    def encode(self, value: Any, options: "StoreOptions") -> bytes:
        return zlib.compress(self.inner.encode(value, options))

    def decode(self, data: bytes, options: "StoreOptions") -> Any:
        return self.inner.decode(zlib.decompress(data, _INFLATE_WBITS), options)

    async def encode_async(self, value: Any, options: "StoreOptions") -> bytes:
        raw = await self.inner.encode_async(value, options)
        return await asyncio.to_thread(zlib.compress, raw)

    async def decode_async(self, data: bytes, options: "StoreOptions") -> Any:
        raw = await asyncio.to_thread(zlib.decompress, data, _INFLATE_WBITS)
        return await self.inner.decode_async(raw, options)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CompressionCodec) and other.inner == self.inner

    def __hash__(self) -> int:
        return hash((CompressionCodec, self.inner))


JSON = JsonCodec()
YAML = YamlCodec()
BSON = BsonCodec()
MSGPACK = MsgpackCodec()
TERM = TermCodec()
