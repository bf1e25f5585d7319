"""
Key material consumed by the file cipher adapter.

The adapter only needs an object satisfying KeyMaterial. KeyObject is
the stock implementation; the cipher math itself is pycryptodome's.
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple, runtime_checkable

from Crypto.Cipher import AES, PKCS1_OAEP
from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from .config import (
    AES_BLOCK_SIZE,
    AES_KEY_SIZE,
    AES_NONCE_SIZE,
    AES_TAG_SIZE,
    load_encryption_key,
    load_rsa_key,
)
from .errors import ConfigError, CryptoError, DecryptError, EncryptError


@runtime_checkable
class KeyMaterial(Protocol):
    def encrypt_cbc(self, plaintext: bytes) -> Tuple[bytes, bytes]: ...

    def decrypt_cbc(self, iv: bytes, ciphertext: bytes) -> bytes: ...

    def encrypt_gcm(self, plaintext: bytes, ad: bytes) -> Tuple[bytes, bytes]: ...

    def decrypt_gcm(self, nonce: bytes, ciphertext: bytes, ad: bytes) -> bytes: ...

    def encrypt_oaep(self, plaintext: bytes, label: bytes) -> bytes: ...

    def decrypt_oaep(self, ciphertext: bytes, label: bytes) -> bytes: ...


class KeyObject:
    """
    AES-256 and RSA key pair holder backed by pycryptodome.

    Either key may be absent; calling an operation whose key is missing
    raises CryptoError. OAEP uses SHA-256 for both the hash and MGF1.
    """

    def __init__(self, aes_key: Optional[bytes] = None, rsa_key: Optional[RSA.RsaKey] = None):
        if aes_key is not None and len(aes_key) != AES_KEY_SIZE:
            raise ConfigError(f"AES key must be {AES_KEY_SIZE} bytes, got {len(aes_key)}")
        self._aes_key = aes_key
        self._rsa_key = rsa_key

    @classmethod
    def from_environment(cls) -> "KeyObject":
        """Build from ENCRYPTION_KEY and, when set, ENCRYPTOR_RSA_KEY."""
        return cls(aes_key=load_encryption_key(), rsa_key=load_rsa_key())

    def __repr__(self) -> str:
        return (
            f"KeyObject(aes={'yes' if self._aes_key else 'no'}, "
            f"rsa={self.modulus_size if self._rsa_key else 'no'})"
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def modulus_size(self) -> int:
        """RSA modulus length in bytes (= OAEP record length)."""
        return self._require_rsa().size_in_bytes()

    @property
    def max_oaep_message(self) -> int:
        return self.modulus_size - 2 * SHA256.digest_size - 2

    # ------------------------------------------------------------------
    # AES-CBC
    # ------------------------------------------------------------------

    def encrypt_cbc(self, plaintext: bytes) -> Tuple[bytes, bytes]:
        iv = get_random_bytes(AES_BLOCK_SIZE)
        cipher = AES.new(self._require_aes(), AES.MODE_CBC, iv=iv)
        return iv, cipher.encrypt(pad(plaintext, AES_BLOCK_SIZE))

    def decrypt_cbc(self, iv: bytes, ciphertext: bytes) -> bytes:
        try:
            cipher = AES.new(self._require_aes(), AES.MODE_CBC, iv=iv)
            return unpad(cipher.decrypt(ciphertext), AES_BLOCK_SIZE)
        except ValueError as exc:
            raise DecryptError(f"CBC decryption failed ({exc})") from exc

    # ------------------------------------------------------------------
    # AES-GCM
    # ------------------------------------------------------------------

    def encrypt_gcm(self, plaintext: bytes, ad: bytes) -> Tuple[bytes, bytes]:
        nonce = get_random_bytes(AES_NONCE_SIZE)
        cipher = AES.new(self._require_aes(), AES.MODE_GCM, nonce=nonce, mac_len=AES_TAG_SIZE)
        cipher.update(ad)
        ciphertext, tag = cipher.encrypt_and_digest(plaintext)
        return nonce, ciphertext + tag

    def decrypt_gcm(self, nonce: bytes, ciphertext: bytes, ad: bytes) -> bytes:
        if len(ciphertext) < AES_TAG_SIZE:
            raise DecryptError("GCM ciphertext shorter than the authentication tag")

        body, tag = ciphertext[:-AES_TAG_SIZE], ciphertext[-AES_TAG_SIZE:]
        try:
            cipher = AES.new(self._require_aes(), AES.MODE_GCM, nonce=nonce, mac_len=AES_TAG_SIZE)
            cipher.update(ad)
            return cipher.decrypt_and_verify(body, tag)
        except ValueError as exc:
            raise DecryptError(f"GCM authentication failed ({exc})") from exc

    # ------------------------------------------------------------------
    # RSA-OAEP
    # ------------------------------------------------------------------

    def encrypt_oaep(self, plaintext: bytes, label: bytes) -> bytes:
        cipher = PKCS1_OAEP.new(self._require_rsa(), hashAlgo=SHA256, label=label)
        try:
            return cipher.encrypt(plaintext)
        except ValueError as exc:
            raise EncryptError(f"OAEP encryption failed ({exc})") from exc

    def decrypt_oaep(self, ciphertext: bytes, label: bytes) -> bytes:
        key = self._require_rsa()
        if not key.has_private():
            raise DecryptError("OAEP decryption needs a private RSA key")

        cipher = PKCS1_OAEP.new(key, hashAlgo=SHA256, label=label)
        try:
            return cipher.decrypt(ciphertext)
        except ValueError as exc:
            raise DecryptError(f"OAEP decryption failed ({exc})") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_aes(self) -> bytes:
        if self._aes_key is None:
            raise CryptoError("No AES key loaded")
        return self._aes_key

    def _require_rsa(self) -> RSA.RsaKey:
        if self._rsa_key is None:
            raise CryptoError("No RSA key loaded")
        return self._rsa_key
