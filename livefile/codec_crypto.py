"""Encrypted codec: scrypt + AES-256-GCM around an inner codec.

The file holds a JSON payload (version, salt, iv, tag, data) where `data` is
the base64 of the inner codec's ciphertext.
"""
import base64
import hashlib
import json
import os
from typing import Any

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from livefile.base import CodecBase

KEY_LEN = 32
SALT_LEN = 16
IV_LEN = 12
TAG_LEN = 16
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
PAYLOAD_VERSION = 1


def _derive_key(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LEN,
    )


def encrypt(plain: bytes, password: str) -> dict[str, Any]:
    """Encrypt bytes with password. Returns payload (version, salt, iv, tag, data)."""
    salt = os.urandom(SALT_LEN)
    iv = os.urandom(IV_LEN)
    aes = AESGCM(_derive_key(password, salt))
    ct_with_tag = aes.encrypt(iv, plain, None)
    return {
        "version": PAYLOAD_VERSION,
        "salt": salt.hex(),
        "iv": iv.hex(),
        "tag": ct_with_tag[-TAG_LEN:].hex(),
        "data": base64.b64encode(ct_with_tag[:-TAG_LEN]).decode("ascii"),
    }


def decrypt(payload: dict[str, Any], password: str) -> bytes:
    """Decrypt payload with password. Returns the plain bytes."""
    if not is_encrypted_payload(payload):
        raise ValueError("Not an encrypted payload")
    salt = bytes.fromhex(payload["salt"])
    iv = bytes.fromhex(payload["iv"])
    tag = bytes.fromhex(payload["tag"])
    if len(salt) != SALT_LEN:
        raise ValueError(f"Invalid salt length: expected {SALT_LEN}, got {len(salt)}")
    if len(iv) != IV_LEN:
        raise ValueError(f"Invalid iv length: expected {IV_LEN}, got {len(iv)}")
    if len(tag) != TAG_LEN:
        raise ValueError(f"Invalid tag length: expected {TAG_LEN}, got {len(tag)}")
    ciphertext = base64.b64decode(payload["data"]) + tag
    aes = AESGCM(_derive_key(password, salt))
    return aes.decrypt(iv, ciphertext, None)


def is_encrypted_payload(obj: Any) -> bool:
    """Return True if obj looks like an encrypted payload (version, salt, iv, tag, data)."""
    if not isinstance(obj, dict):
        return False
    return (
        obj.get("version") == PAYLOAD_VERSION
        and isinstance(obj.get("salt"), str)
        and isinstance(obj.get("iv"), str)
        and isinstance(obj.get("tag"), str)
        and isinstance(obj.get("data"), str)
    )


class EncryptedCodec(CodecBase):
    """Wraps an inner codec; the password comes from StoreOptions.password."""

    def __init__(self, inner: CodecBase):
        self.inner = inner
        self.name = f"{inner.name}+aesgcm"

    @staticmethod
    def _password(options) -> str:
        if not options.password:
            raise ValueError(
                "File is encrypted but no password provided (LIVEFILE_PASSWORD or password=)"
            )
        return options.password

    def encode(self, value: Any, options) -> bytes:
        payload = encrypt(self.inner.encode(value, options), self._password(options))
        return json.dumps(payload, indent=2).encode("utf-8")

    def decode(self, data: bytes, options) -> Any:
        payload = json.loads(data.decode("utf-8"))
        return self.inner.decode(decrypt(payload, self._password(options)), options)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EncryptedCodec) and other.inner == self.inner

    def __hash__(self) -> int:
        return hash((EncryptedCodec, self.inner))
