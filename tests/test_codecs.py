import json
import zlib
import gzip

import pytest

from livefile import codecs
from livefile.codec_crypto import EncryptedCodec, decrypt, encrypt, is_encrypted_payload
from livefile.codecs import BSON, JSON, MSGPACK, TERM, YAML, CompressionCodec
from livefile.config import StoreOptions
from livefile.errors import UnsupportedCodecError

OPTS = StoreOptions()

DOC = {
    "name": "livefile",
    "count": 3,
    "ratio": 1.5,
    "enabled": True,
    "missing": None,
    "tags": ["a", "b", 7],
    "nested": {"inner": {"empty": []}},
}


# ============================================================
# Plain codecs
# ============================================================

class TestRoundTrip:
    @pytest.mark.parametrize("codec", [JSON, YAML, BSON, MSGPACK], ids=lambda c: c.name)
    def test_decode_encode(self, codec):
        assert codec.decode(codec.encode(DOC, OPTS), OPTS) == DOC

    @pytest.mark.asyncio
    @pytest.mark.parametrize("codec", [JSON, YAML, BSON, MSGPACK], ids=lambda c: c.name)
    async def test_async_variants(self, codec):
        data = await codec.encode_async(DOC, OPTS)
        assert data == codec.encode(DOC, OPTS)
        assert await codec.decode_async(data, OPTS) == DOC

    def test_unicode_text(self):
        doc = {"note": "hello \U0001f600", "key": "éèê"}
        assert JSON.decode(JSON.encode(doc, OPTS), OPTS) == doc
        assert YAML.decode(YAML.encode(doc, OPTS), OPTS) == doc


class TestJson:
    def test_compact_by_default(self):
        assert JSON.encode({"a": 1}, OPTS) == b'{"a": 1}'

    def test_indent(self):
        out = JSON.encode({"a": 1}, StoreOptions(indent=2))
        assert out == b'{\n  "a": 1\n}'

    def test_encoding_option(self):
        opts = StoreOptions(encoding="utf-16")
        raw = JSON.encode({"k": "é"}, opts)
        assert raw.decode("utf-16") == '{"k": "é"}'
        assert JSON.decode(raw, opts) == {"k": "é"}

    def test_malformed_raises(self):
        with pytest.raises(json.JSONDecodeError):
            JSON.decode(b"{not json", OPTS)


class TestYaml:
    def test_output_is_yaml_text(self):
        assert YAML.encode({"a": 1, "b": [1, 2]}, OPTS) == b"a: 1\nb:\n- 1\n- 2\n"

    def test_empty_document_is_none(self):
        assert YAML.decode(b"", OPTS) is None


class TestBinaryFormats:
    def test_bson_is_binary(self):
        raw = BSON.encode({"a": 1}, OPTS)
        # int32 document length prefix
        assert int.from_bytes(raw[:4], "little") == len(raw)

    def test_msgpack_keeps_bytes(self):
        doc = {"blob": b"\x00\x01", "s": "text"}
        assert MSGPACK.decode(MSGPACK.encode(doc, OPTS), OPTS) == doc


# ============================================================
# Erlang term format (optional backend)
# ============================================================

class TestTermCodec:
    def test_unavailable_fails_on_use(self, monkeypatch):
        monkeypatch.setattr(codecs, "erlpack", None)
        assert TERM.available is False
        with pytest.raises(UnsupportedCodecError, match="erlpack"):
            TERM.encode({"a": 1}, OPTS)
        with pytest.raises(UnsupportedCodecError):
            TERM.decode(b"\x83", OPTS)

    def test_delegates_to_backend(self, monkeypatch, mocker):
        backend = mocker.MagicMock()
        backend.pack.return_value = b"\x83packed"
        backend.unpack.return_value = {"a": 1}
        monkeypatch.setattr(codecs, "erlpack", backend)

        assert TERM.available is True
        assert TERM.encode({"a": 1}, OPTS) == b"\x83packed"
        backend.pack.assert_called_once_with({"a": 1})
        assert TERM.decode(b"\x83packed", OPTS) == {"a": 1}


# ============================================================
# Compression wrapper
# ============================================================

class TestCompression:
    def test_roundtrip_over_each_codec(self):
        for inner in (JSON, YAML, BSON, MSGPACK):
            codec = CompressionCodec(inner)
            assert codec.decode(codec.encode(DOC, OPTS), OPTS) == DOC

    def test_output_is_deflated_inner_output(self):
        codec = CompressionCodec(JSON)
        raw = codec.encode(DOC, OPTS)
        assert zlib.decompress(raw) == JSON.encode(DOC, OPTS)

    def test_decodes_gzip_framing(self):
        codec = CompressionCodec(JSON)
        assert codec.decode(gzip.compress(b'{"g": 1}'), OPTS) == {"g": 1}

    @pytest.mark.asyncio
    async def test_async_roundtrip(self):
        codec = CompressionCodec(YAML)
        raw = await codec.encode_async(DOC, OPTS)
        assert await codec.decode_async(raw, OPTS) == DOC

    def test_equality_follows_inner(self):
        assert CompressionCodec(JSON) == CompressionCodec(JSON)
        assert CompressionCodec(JSON) != CompressionCodec(YAML)
        assert CompressionCodec(JSON).name == "json+zlib"


# ============================================================
# Encryption wrapper
# ============================================================

class TestCrypto:
    def test_encrypt_decrypt_roundtrip(self):
        payload = encrypt(b"hello world", "test-password")
        assert is_encrypted_payload(payload)
        assert payload["version"] == 1
        assert decrypt(payload, "test-password") == b"hello world"

    def test_wrong_password_fails(self):
        payload = encrypt(b"secret", "correct-password")
        with pytest.raises(Exception):
            decrypt(payload, "wrong-password")

    def test_different_ciphertext_for_same_input(self):
        a = encrypt(b"same input", "pw")
        b = encrypt(b"same input", "pw")
        assert a["salt"] != b["salt"]
        assert a["iv"] != b["iv"]

    def test_is_encrypted_payload_rejects_non_payloads(self):
        assert is_encrypted_payload(None) is False
        assert is_encrypted_payload({}) is False
        assert is_encrypted_payload({"version": 2, "salt": "", "iv": "", "tag": "", "data": ""}) is False
        assert is_encrypted_payload({"version": 1, "salt": "a", "iv": "b", "tag": "c", "data": "d"}) is True

    def test_decrypt_rejects_bad_lengths(self):
        payload = encrypt(b"x", "pw")
        payload["iv"] = "00"
        with pytest.raises(ValueError, match="Invalid iv length"):
            decrypt(payload, "pw")

    def test_codec_roundtrip(self):
        codec = EncryptedCodec(MSGPACK)
        opts = StoreOptions(password="pw")
        raw = codec.encode(DOC, opts)
        assert is_encrypted_payload(json.loads(raw))
        assert codec.decode(raw, opts) == DOC

    def test_codec_without_password(self):
        codec = EncryptedCodec(JSON)
        with pytest.raises(ValueError, match="no password provided"):
            codec.encode({"a": 1}, OPTS)
