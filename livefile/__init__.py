from livefile.base import CodecBase, FilesystemBase
from livefile.codec_crypto import EncryptedCodec
from livefile.codec_registry import CodecRegistry, default_registry, resolve
from livefile.codecs import (
    BSON,
    JSON,
    MSGPACK,
    TERM,
    YAML,
    BsonCodec,
    CompressionCodec,
    JsonCodec,
    MsgpackCodec,
    TermCodec,
    YamlCodec,
)
from livefile.config import StoreOptions, normalize_options
from livefile.errors import FlushError, StoreError, UnsupportedCodecError
from livefile.filesystem import LocalFilesystem, MemoryFilesystem
from livefile.loader import read, read_sync
from livefile.registry import flush_all
from livefile.store import AsyncStore, Store

__all__ = [
    "read",
    "read_sync",
    "flush_all",
    "Store",
    "AsyncStore",
    "StoreOptions",
    "normalize_options",
    "CodecBase",
    "FilesystemBase",
    "LocalFilesystem",
    "MemoryFilesystem",
    "CodecRegistry",
    "default_registry",
    "resolve",
    "JsonCodec",
    "YamlCodec",
    "BsonCodec",
    "MsgpackCodec",
    "TermCodec",
    "CompressionCodec",
    "EncryptedCodec",
    "JSON",
    "YAML",
    "BSON",
    "MSGPACK",
    "TERM",
    "StoreError",
    "UnsupportedCodecError",
    "FlushError",
]
