"""
Error taxonomy.

Every failure surfaced by the package derives from FileCipherError.
I/O failures (ReadError, CreateError, WriteError) and cryptographic
failures (CryptoError) are separate branches so callers can tell
"disk problem" apart from "wrong key or corrupt data".
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class FileCipherError(Exception):
    """Base class for all filecipher errors."""

    def __init__(self, message: str, path: Optional[str | Path] = None):
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{message}: {self.path}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class DiscoveryError(FileCipherError):
    """The directory walk aborted."""


class WalkReadError(DiscoveryError):
    """An entry could not be stat'ed or a directory could not be listed."""


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


class ReadError(FileCipherError):
    """Target file could not be opened or read."""


class CreateError(FileCipherError):
    """Target file could not be created or truncated for rewrite."""


class WriteError(FileCipherError):
    """Transformed bytes could not be written."""


# ---------------------------------------------------------------------------
# Cryptography
# ---------------------------------------------------------------------------


class CryptoError(FileCipherError):
    """The cipher primitive rejected the operation."""


class EncryptError(CryptoError):
    pass


class DecryptError(CryptoError):
    pass


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(FileCipherError):
    """Invalid environment or manifest configuration."""
