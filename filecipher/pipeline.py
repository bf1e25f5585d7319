"""
Batch processing: discover a profile's files, then transform each one.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import FileCipherError
from .file_scanner import FileList, FileScanner, first_named, of_type, without_path
from .keys import KeyMaterial
from .manifest import Manifest, ProfileConfig
from .transformer import Transformer

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


@dataclass
class PipelineResult:
    action: Action
    processed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


def select_files(
    profile: ProfileConfig,
    self_path: Optional[str] = None,
    manifest_path: Optional[str | Path] = None,
) -> FileList:
    """
    Apply a profile's exclusion and name/type filters.

    ``manifest_path`` is always left out so a profile covering the
    manifest's own directory cannot lock itself out.
    """

    files = FileScanner(profile.directory, profile.exclude, self_path).scan()
    if manifest_path:
        files = without_path(files, manifest_path)

    if profile.filename:
        entry = first_named(files, profile.filename)
        return FileList([entry] if entry is not None else [])

    if profile.file_type:
        return of_type(files, profile.file_type)

    return files


def run_profile(
    manifest: Manifest,
    key: KeyMaterial,
    action: Action | str,
    profile: Optional[str] = None,
    dry_run: bool = False,
    stop_on_error: bool = True,
    self_path: Optional[str] = None,
) -> PipelineResult:
    """
    Encrypt or decrypt every file a profile selects.

    Args:
        manifest: loaded manifest
        key: key material for the manifest's scheme
        action: "encrypt" or "decrypt"
        profile: profile name (default profile when None)
        dry_run: list the files without touching them
        stop_on_error: re-raise the first failure instead of collecting it
        self_path: override for the running program's path

    Raises:
        FileCipherError: discovery failures always, per-file failures
            when stop_on_error is set
    """

    action = Action(action)
    profile_cfg = manifest.get_profile(profile)
    cipher = manifest.cipher
    result = PipelineResult(action=action, dry_run=dry_run)

    files = select_files(profile_cfg, self_path, manifest.path)
    logger.info(
        "%s %d file(s) in %s with %s",
        action.value, len(files), profile_cfg.directory, cipher.scheme.value,
    )

    transformer = Transformer(key, atomic=cipher.atomic_writes)
    for entry in files:
        if dry_run:
            result.processed.append(entry.name)
            continue

        try:
            if action is Action.ENCRYPT:
                transformer.encrypt(entry, cipher.scheme, cipher.context)
            else:
                transformer.decrypt(entry, cipher.scheme, cipher.context)
        except FileCipherError as exc:
            if stop_on_error:
                raise
            logger.warning("Failed to %s %s: %s", action.value, entry.name, exc)
            result.failed.append(entry.name)
            continue

        result.processed.append(entry.name)

    logger.info(
        "%s done: %d processed, %d failed",
        action.value, len(result.processed), len(result.failed),
    )
    return result
