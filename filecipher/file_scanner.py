"""
Filesystem discovery and filtering.

This module is responsible for:
- walking a directory tree in a stable, sorted depth-first order
- keeping the running program and an explicit exclusion out of the result
- selecting files by exact name or by type token

This module does NOT:
- encrypt or decrypt data
- modify files
- load configuration or manifest files
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .errors import DiscoveryError, WalkReadError
from .utils import canonical_path, current_executable_path, last_segment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileEntry:
    name: str

    @property
    def path(self) -> Path:
        return Path(self.name)

    def __fspath__(self) -> str:
        return self.name


@dataclass
class FileList:
    """Discovered files in walk order."""

    files: List[FileEntry] = field(default_factory=list)

    def add_file(self, name: str) -> None:
        self.files.append(FileEntry(name))

    def names(self) -> List[str]:
        return [f.name for f in self.files]

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def __getitem__(self, index: int) -> FileEntry:
        return self.files[index]


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------


def _walk(root: str) -> Iterator[Tuple[str, os.stat_result]]:
    """
    Yield (path, lstat) for root and everything below it.

    Names inside a directory are visited in sorted order and a
    directory's contents come right after the directory itself.
    Symlinks are reported, never followed.
    """

    stack = [root]
    while stack:
        path = stack.pop()
        try:
            info = os.lstat(path)
        except OSError as exc:
            raise WalkReadError("Cannot stat entry", path) from exc

        yield path, info

        if stat.S_ISDIR(info.st_mode):
            try:
                names = sorted(os.listdir(path))
            except OSError as exc:
                raise WalkReadError("Cannot list directory", path) from exc
            stack.extend(os.path.join(path, name) for name in reversed(names))


def discover_files_in_directory(
    directory: str | Path,
    exclude: str | Path = "",
    self_path: Optional[str] = None,
) -> FileList:
    """
    Walk ``directory`` and return every non-directory entry.

    Args:
        directory: root of the walk
        exclude: a path that must never appear in the result ("" disables)
        self_path: path of the running program; resolved from sys.argv
            when omitted, "" disables the check

    Raises:
        WalkReadError: an entry could not be stat'ed or listed
        DiscoveryError: the walk failed otherwise

    Returns:
        FileList in walk order (empty for an empty directory)
    """

    fl = FileList()
    root = os.fspath(directory)

    if self_path is None:
        self_path = current_executable_path()
    skip_self = canonical_path(self_path) if self_path else None
    skip_exclude = canonical_path(exclude) if os.fspath(exclude) else None

    try:
        for path, info in _walk(root):
            if stat.S_ISDIR(info.st_mode):
                continue

            resolved = canonical_path(path)
            if resolved == skip_self:
                logger.debug("Skipping running program: %s", path)
                continue
            if resolved == skip_exclude:
                logger.debug("Skipping excluded path: %s", path)
                continue

            fl.add_file(path)
    except DiscoveryError:
        raise
    except OSError as exc:
        raise DiscoveryError("Directory walk failed", root) from exc

    logger.debug("Discovered %d file(s) under %s", len(fl), root)
    return fl


def find_file_in_directory(directory: str | Path, filename: str) -> str:
    """
    Return the path of the first file named exactly ``filename``.

    The first match in walk order wins. An empty string means no match;
    it is not an error.
    """

    entry = first_named(discover_files_in_directory(directory), filename)
    return entry.name if entry is not None else ""


def find_files_by_type_in_directory(directory: str | Path, extension: str) -> FileList:
    """Return every file whose type token equals ``extension``."""
    return of_type(discover_files_in_directory(directory), extension)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def first_named(files: FileList, filename: str) -> Optional[FileEntry]:
    """First entry whose final path segment equals ``filename``."""
    for entry in files:
        if last_segment(entry.name) == filename:
            return entry
    return None


def of_type(files: FileList, extension: str) -> FileList:
    """
    Entries whose type token equals ``extension``.

    The type token is the last separator-delimited piece of the file's
    final path segment, which is the whole filename.
    """

    result = FileList()
    for entry in files:
        token = last_segment(entry.name).split(os.sep)[-1]
        if token == extension:
            result.add_file(entry.name)
    return result


def without_path(files: FileList, path: str | Path) -> FileList:
    """Entries that do not resolve to ``path``."""
    skip = canonical_path(path)
    return FileList([f for f in files if canonical_path(f.name) != skip])


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class FileScanner:
    """A discovery root bound to its exclusion settings."""

    def __init__(
        self,
        root: str | Path,
        exclude: str | Path = "",
        self_path: Optional[str] = None,
    ):
        self.root = Path(root)
        self.exclude = exclude
        self.self_path = self_path

    def scan(self) -> FileList:
        return discover_files_in_directory(self.root, self.exclude, self.self_path)

    def find(self, filename: str) -> Optional[FileEntry]:
        return first_named(self.scan(), filename)

    def find_by_type(self, extension: str) -> FileList:
        return of_type(self.scan(), extension)
