"""
filecipher

Discovers files in a directory tree and encrypts or decrypts them in
place with AES-256-CBC, AES-256-GCM or RSA-OAEP, storing the IV or
nonce in front of the ciphertext.
"""

__version__ = "0.1.0"

from .config import load_encryption_key, load_rsa_key, DEFAULT_PROFILE
from .errors import (
    FileCipherError,
    DiscoveryError,
    WalkReadError,
    ReadError,
    CreateError,
    WriteError,
    CryptoError,
    EncryptError,
    DecryptError,
    ConfigError,
)
from .file_scanner import (
    FileEntry,
    FileList,
    FileScanner,
    discover_files_in_directory,
    find_file_in_directory,
    find_files_by_type_in_directory,
)
from .keys import KeyMaterial, KeyObject
from .log import configure_logging
from .manifest import Manifest
from .pipeline import Action, PipelineResult, run_profile, select_files
from .transformer import Scheme, Transformer, encrypt_file, decrypt_file

__all__ = [
    "load_encryption_key",
    "load_rsa_key",
    "DEFAULT_PROFILE",
    "FileCipherError",
    "DiscoveryError",
    "WalkReadError",
    "ReadError",
    "CreateError",
    "WriteError",
    "CryptoError",
    "EncryptError",
    "DecryptError",
    "ConfigError",
    "FileEntry",
    "FileList",
    "FileScanner",
    "discover_files_in_directory",
    "find_file_in_directory",
    "find_files_by_type_in_directory",
    "KeyMaterial",
    "KeyObject",
    "configure_logging",
    "Manifest",
    "Action",
    "PipelineResult",
    "run_profile",
    "select_files",
    "Scheme",
    "Transformer",
    "encrypt_file",
    "decrypt_file",
]
