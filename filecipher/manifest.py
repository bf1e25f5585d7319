"""
Manifest loading, validation, and normalization.

This module answers one question:
    "Which files should be transformed, and how?"

Responsibilities:
- Load the manifest YAML file
- Validate structure and version
- Normalize defaults
- Expose a clean Python representation

This module does NOT:
- Walk the filesystem
- Encrypt or decrypt data
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config import (
    DEFAULT_ATOMIC_WRITES,
    DEFAULT_PROFILE,
    DEFAULT_SCHEME,
    SUPPORTED_MANIFEST_VERSION,
)
from .errors import ConfigError
from .transformer import Scheme


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass
class ProfileConfig:
    name: str
    directory: Path
    exclude: str = ""
    filename: Optional[str] = None
    file_type: Optional[str] = None


@dataclass
class CipherConfig:
    scheme: Scheme = Scheme(DEFAULT_SCHEME)
    atomic_writes: bool = DEFAULT_ATOMIC_WRITES
    context: bytes = b""


@dataclass
class Manifest:
    version: int
    cipher: CipherConfig
    profiles: Dict[str, ProfileConfig]
    path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Loading API
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> "Manifest":
        """
        Load and validate a manifest file.

        Relative profile directories are resolved against the
        manifest's own directory.

        Raises:
            ConfigError: if the manifest is missing or invalid
        """

        path = Path(path)
        if not path.exists():
            raise ConfigError("Manifest file not found", path)

        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Manifest is not valid YAML ({exc})", path) from exc
        except UnicodeDecodeError as exc:
            raise ConfigError("Manifest is not UTF-8 text", path) from exc
        except OSError as exc:
            raise ConfigError("Cannot read manifest", path) from exc

        if not isinstance(raw, dict):
            raise ConfigError("Manifest must be a mapping", path)

        manifest = cls.from_dict(raw, base_dir=path.parent)
        manifest.path = path
        return manifest

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: str | Path = ".") -> "Manifest":
        version = data.get("version")
        if version != SUPPORTED_MANIFEST_VERSION:
            raise ConfigError(f"Unsupported manifest version: {version}")

        cipher_cfg = cls._parse_cipher(data.get("cipher") or {})
        profiles_cfg = cls._parse_profiles(data.get("profiles") or {}, Path(base_dir))

        if DEFAULT_PROFILE not in profiles_cfg:
            raise ConfigError(
                f"Default profile '{DEFAULT_PROFILE}' not defined in manifest"
            )

        return cls(version=version, cipher=cipher_cfg, profiles=profiles_cfg)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_cipher(data: Dict[str, Any]) -> CipherConfig:
        try:
            scheme = Scheme.parse(data.get("scheme", DEFAULT_SCHEME))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        context = data.get("context")
        if context is None:
            context = b""
        elif isinstance(context, str):
            context = context.encode("utf-8")
        elif not isinstance(context, bytes):
            raise ConfigError(
                f"Cipher context must be a string, got {type(context).__name__}"
            )

        return CipherConfig(
            scheme=scheme,
            atomic_writes=bool(data.get("atomic_writes", DEFAULT_ATOMIC_WRITES)),
            context=context,
        )

    @staticmethod
    def _parse_profiles(data: Dict[str, Any], base_dir: Path) -> Dict[str, ProfileConfig]:
        profiles: Dict[str, ProfileConfig] = {}

        for name, profile_data in data.items():
            profile_data = profile_data or {}
            if "directory" not in profile_data:
                raise ConfigError(f"Profile '{name}' missing 'directory'")

            filename = profile_data.get("name")
            file_type = profile_data.get("type")
            if filename and file_type:
                raise ConfigError(
                    f"Profile '{name}' sets both 'name' and 'type'"
                )

            directory = base_dir / Path(profile_data["directory"]).expanduser()
            exclude = profile_data.get("exclude") or ""
            if exclude:
                exclude = str(base_dir / Path(exclude).expanduser())

            profiles[name] = ProfileConfig(
                name=name,
                directory=directory,
                exclude=exclude,
                filename=filename,
                file_type=file_type,
            )

        return profiles

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def get_profile(self, name: Optional[str] = None) -> ProfileConfig:
        """
        Return a profile by name, falling back to default.
        """

        name = name or DEFAULT_PROFILE
        try:
            return self.profiles[name]
        except KeyError:
            raise ConfigError(f"Profile not found: {name}") from None
