"""
Global configuration and environment handling.

This module is responsible for:
- Loading key material (AES key, RSA key) from the environment
- Defining global constants and defaults
- Providing normalized, ready-to-use configuration values

Nothing in this file should depend on:
- the filesystem layout being scanned
- the manifest structure
- cipher record layouts

If something here changes, the *entire tool* behavior changes.
"""

from __future__ import annotations

import binascii
import logging
import os
from pathlib import Path
from typing import Final

from Crypto.PublicKey import RSA

from .errors import ConfigError

# ---------------------------------------------------------------------------
# Tool / format versioning
# ---------------------------------------------------------------------------

SUPPORTED_MANIFEST_VERSION: Final[int] = 1

# ---------------------------------------------------------------------------
# Default behavior
# ---------------------------------------------------------------------------

DEFAULT_PROFILE: Final[str] = "default"
DEFAULT_SCHEME: Final[str] = "gcm"
DEFAULT_ATOMIC_WRITES: Final[bool] = True
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

# AES defaults
AES_KEY_SIZE: Final[int] = 32
AES_BLOCK_SIZE: Final[int] = 16
AES_NONCE_SIZE: Final[int] = 12
AES_TAG_SIZE: Final[int] = 16

# ---------------------------------------------------------------------------
# Environment variable names
# ---------------------------------------------------------------------------

ENV_ENCRYPTION_KEY: Final[str] = "ENCRYPTION_KEY"
ENV_RSA_KEY: Final[str] = "ENCRYPTOR_RSA_KEY"
ENV_LOG_LEVEL: Final[str] = "ENCRYPTOR_LOG_LEVEL"

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_encryption_key() -> bytes:
    """
    Load the AES-256 key from the environment.

    The variable must hold the raw key as 64 hexadecimal characters.
    No derivation is applied.

    Raises:
        ConfigError: if the key is missing or malformed

    Returns:
        bytes: 32-byte key
    """

    raw = os.getenv(ENV_ENCRYPTION_KEY)
    if not raw:
        raise ConfigError(
            f"Missing required environment variable: {ENV_ENCRYPTION_KEY}"
        )

    try:
        key = binascii.unhexlify(raw.strip())
    except (binascii.Error, ValueError) as exc:
        raise ConfigError(f"{ENV_ENCRYPTION_KEY} is not valid hex") from exc

    if len(key) != AES_KEY_SIZE:
        raise ConfigError(
            f"{ENV_ENCRYPTION_KEY} must decode to {AES_KEY_SIZE} bytes, got {len(key)}"
        )
    return key


def load_rsa_key() -> RSA.RsaKey | None:
    """
    Load the RSA key named by ENCRYPTOR_RSA_KEY, if set.

    A public key is enough for OAEP encryption; decryption needs the
    private key.

    Raises:
        ConfigError: if the file cannot be read or parsed

    Returns:
        RsaKey or None when the variable is unset
    """

    raw = os.getenv(ENV_RSA_KEY)
    if not raw:
        return None

    path = Path(raw).expanduser()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigError("Cannot read RSA key file", path) from exc

    try:
        return RSA.import_key(data)
    except (ValueError, IndexError, TypeError) as exc:
        raise ConfigError("Cannot parse RSA key file", path) from exc


def get_log_level() -> int:
    """Return the configured log level, falling back to WARNING."""
    name = os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level in {ENV_LOG_LEVEL}: {name}")
    return level
