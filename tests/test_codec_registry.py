import pytest

from livefile.codec_crypto import EncryptedCodec
from livefile.codec_registry import CodecRegistry, resolve
from livefile.codecs import BSON, JSON, MSGPACK, TERM, YAML, CompressionCodec, JsonCodec


class TestExtensionResolution:
    @pytest.mark.parametrize(
        "path, codec",
        [
            ("config.yaml", YAML),
            ("config.yml", YAML),
            ("data/state.bson", BSON),
            ("cache.mp", MSGPACK),
            ("terms.etf", TERM),
            ("plain.json", JSON),
            ("notes.txt", JSON),
            ("no_extension", JSON),
            ("dir.v2/no_extension", JSON),
        ],
    )
    def test_table(self, path, codec):
        assert resolve(path) is codec

    def test_extension_case_is_exact(self):
        assert resolve("CONFIG.YAML") is JSON
        assert resolve("CONF.YML") is JSON
        assert resolve("state.json.GZ") is JSON

    def test_enc_is_plain_json_by_default(self):
        assert resolve("notes.enc") is JSON

    def test_term_codec_registers_without_backend(self, monkeypatch):
        from livefile import codecs

        monkeypatch.setattr(codecs, "erlpack", None)
        assert resolve("x.etf") is TERM


class TestWrappers:
    def test_gz_wraps_stripped_name(self):
        codec = resolve("state.yaml.gz")
        assert isinstance(codec, CompressionCodec)
        assert codec.inner is YAML

    def test_bare_gz_defaults_to_json(self):
        codec = resolve("state.gz")
        assert isinstance(codec, CompressionCodec)
        assert codec.inner is JSON

    def test_chained_wrappers_on_custom_registry(self):
        reg = CodecRegistry()
        reg.register(".mp", MSGPACK)
        reg.register_wrapper(".gz", CompressionCodec)
        reg.register_wrapper("enc", EncryptedCodec)
        codec = reg.resolve("secrets.mp.gz.enc")
        assert isinstance(codec, EncryptedCodec)
        assert isinstance(codec.inner, CompressionCodec)
        assert codec.inner.inner is MSGPACK


class TestOverride:
    def test_override_wins(self):
        assert resolve("config.yaml", override=MSGPACK) is MSGPACK
        assert resolve("state.json.gz", override=BSON) is BSON


class TestCustomRegistry:
    def test_register_new_extension(self):
        reg = CodecRegistry()
        custom = JsonCodec()
        reg.register("cfg", custom)
        assert reg.resolve("app.cfg") is custom
        assert reg.resolve("app.yaml") is JSON

    def test_custom_default(self):
        reg = CodecRegistry(default=YAML)
        assert reg.resolve("anything") is YAML
