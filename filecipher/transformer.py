"""
Content transformation: in-place encryption and decryption.

This module rewrites single files using a KeyMaterial object. It is
intentionally dumb about policy and filesystem traversal.

On-disk records:
    CBC   IV (16 bytes) || ciphertext
    GCM   nonce (12 bytes) || ciphertext || tag
    OAEP  ciphertext (modulus-sized)

Nothing in the file says which scheme produced it; decrypting with the
wrong scheme fails or yields garbage.
"""

from __future__ import annotations

import enum
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Union

from .config import AES_BLOCK_SIZE, AES_NONCE_SIZE, DEFAULT_ATOMIC_WRITES
from .errors import (
    CreateError,
    CryptoError,
    DecryptError,
    EncryptError,
    ReadError,
    WriteError,
)
from .file_scanner import FileEntry
from .keys import KeyMaterial
from .utils import split_record

logger = logging.getLogger(__name__)

Target = Union[FileEntry, str, Path]


class Scheme(str, enum.Enum):
    CBC = "cbc"
    GCM = "gcm"
    OAEP = "oaep"

    @classmethod
    def parse(cls, value: Union[str, "Scheme"]) -> "Scheme":
        try:
            return cls(str(value.value if isinstance(value, Scheme) else value).lower())
        except ValueError:
            raise ValueError(f"Unknown scheme: {value}") from None


class Transformer:
    """
    Rewrites files in place with a KeyMaterial.

    With ``atomic`` (the default) the new content is written to a
    temporary file next to the target and renamed over it, so a crash
    leaves either the old or the new bytes. With ``atomic=False`` the
    target is truncated and rewritten; an interruption can leave it
    empty or partial.

    Concurrent operations on the same path are not coordinated.
    """

    def __init__(self, key: KeyMaterial, atomic: bool = DEFAULT_ATOMIC_WRITES):
        self.key = key
        self.atomic = atomic

    # ------------------------------------------------------------------
    # AES-CBC
    # ------------------------------------------------------------------

    def encrypt_cbc(self, file: Target) -> None:
        path = _as_path(file)
        pt = self._read(path)
        iv, ct = self._encrypt(path, lambda: self.key.encrypt_cbc(pt))
        self._write(path, iv + ct)

    def decrypt_cbc(self, file: Target) -> None:
        path = _as_path(file)
        data = self._read(path)
        if len(data) < AES_BLOCK_SIZE:
            raise DecryptError("Record shorter than the CBC IV", path)

        iv, ct = split_record(data, AES_BLOCK_SIZE)
        pt = self._decrypt(path, lambda: self.key.decrypt_cbc(iv, ct))
        self._write(path, pt)

    # ------------------------------------------------------------------
    # AES-GCM
    # ------------------------------------------------------------------

    def encrypt_gcm(self, file: Target, ad: bytes = b"") -> None:
        path = _as_path(file)
        pt = self._read(path)
        nonce, ct = self._encrypt(path, lambda: self.key.encrypt_gcm(pt, ad))
        self._write(path, nonce + ct)

    def decrypt_gcm(self, file: Target, ad: bytes = b"") -> None:
        path = _as_path(file)
        data = self._read(path)
        if len(data) < AES_NONCE_SIZE:
            raise DecryptError("Record shorter than the GCM nonce", path)

        nonce, ct = split_record(data, AES_NONCE_SIZE)
        pt = self._decrypt(path, lambda: self.key.decrypt_gcm(nonce, ct, ad))
        self._write(path, pt)

    # ------------------------------------------------------------------
    # RSA-OAEP
    # ------------------------------------------------------------------

    def encrypt_oaep(self, file: Target, label: bytes = b"") -> None:
        path = _as_path(file)
        pt = self._read(path)
        ct = self._encrypt(path, lambda: self.key.encrypt_oaep(pt, label))
        self._write(path, ct)

    def decrypt_oaep(self, file: Target, label: bytes = b"") -> None:
        path = _as_path(file)
        ct = self._read(path)
        pt = self._decrypt(path, lambda: self.key.decrypt_oaep(ct, label))
        self._write(path, pt)

    # ------------------------------------------------------------------
    # Scheme dispatch
    # ------------------------------------------------------------------

    def encrypt(self, file: Target, scheme: Union[str, Scheme], context: bytes = b"") -> None:
        """
        Encrypt with ``scheme``. ``context`` is the GCM associated data or
        the OAEP label; CBC ignores it.
        """

        scheme = Scheme.parse(scheme)
        logger.debug("Encrypting %s (%s)", _as_path(file), scheme.value)
        if scheme is Scheme.CBC:
            self.encrypt_cbc(file)
        elif scheme is Scheme.GCM:
            self.encrypt_gcm(file, context)
        else:
            self.encrypt_oaep(file, context)

    def decrypt(self, file: Target, scheme: Union[str, Scheme], context: bytes = b"") -> None:
        scheme = Scheme.parse(scheme)
        logger.debug("Decrypting %s (%s)", _as_path(file), scheme.value)
        if scheme is Scheme.CBC:
            self.decrypt_cbc(file)
        elif scheme is Scheme.GCM:
            self.decrypt_gcm(file, context)
        else:
            self.decrypt_oaep(file, context)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ReadError("Cannot read file", path) from exc

    @staticmethod
    def _encrypt(path: Path, op: Callable):
        try:
            return op()
        except (CryptoError, ValueError) as exc:
            raise EncryptError(f"Encryption failed ({exc})", path) from exc

    @staticmethod
    def _decrypt(path: Path, op: Callable) -> bytes:
        try:
            return op()
        except (CryptoError, ValueError) as exc:
            raise DecryptError(f"Decryption failed ({exc})", path) from exc

    def _write(self, path: Path, data: bytes) -> None:
        if self.atomic:
            self._replace(path, data)
        else:
            self._overwrite(path, data)
        logger.debug("Wrote %d bytes to %s", len(data), path)

    @staticmethod
    def _overwrite(path: Path, data: bytes) -> None:
        try:
            fh = path.open("wb")
        except OSError as exc:
            raise CreateError("Cannot create file", path) from exc

        with fh:
            try:
                fh.write(data)
            except OSError as exc:
                raise WriteError("Cannot write file", path) from exc

    @staticmethod
    def _replace(path: Path, data: bytes) -> None:
        # Replace the file a symlink points at, never the link itself
        dest = path.resolve()
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent
            )
        except OSError as exc:
            raise CreateError("Cannot create temporary file", path) from exc

        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp, dest.stat().st_mode & 0o7777)
            os.replace(tmp, dest)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise WriteError("Cannot write file", path) from exc


def _as_path(file: Target) -> Path:
    return file.path if isinstance(file, FileEntry) else Path(file)


# ---------------------------------------------------------------------------
# Convenience wrappers
# ---------------------------------------------------------------------------


def encrypt_file(
    path: Target,
    key: KeyMaterial,
    scheme: Union[str, Scheme] = Scheme.GCM,
    context: bytes = b"",
    atomic: bool = DEFAULT_ATOMIC_WRITES,
) -> None:
    """Encrypt one file in place."""
    Transformer(key, atomic=atomic).encrypt(path, scheme, context)


def decrypt_file(
    path: Target,
    key: KeyMaterial,
    scheme: Union[str, Scheme] = Scheme.GCM,
    context: bytes = b"",
    atomic: bool = DEFAULT_ATOMIC_WRITES,
) -> None:
    """Decrypt one file in place."""
    Transformer(key, atomic=atomic).decrypt(path, scheme, context)
