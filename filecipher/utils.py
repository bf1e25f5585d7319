"""
Shared utility helpers.

This module contains small, reusable helpers that do not belong
to discovery policy or cipher orchestration.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def canonical_path(path: str | Path) -> str:
    """Return an absolute, symlink-resolved, case-normalized path string."""
    return os.path.normcase(os.path.realpath(os.fspath(path)))


def last_segment(path: str) -> str:
    """Return the final separator-delimited segment of a path."""
    return path.split(os.sep)[-1]


def current_executable_path() -> Optional[str]:
    """
    Canonical path of the running program, or None.

    This is the script named by ``sys.argv[0]``; interactive sessions
    and ``-c`` invocations have no such file.
    """

    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0 or not os.path.isfile(argv0):
        return None
    return canonical_path(argv0)


# ---------------------------------------------------------------------------
# Byte helpers
# ---------------------------------------------------------------------------


def split_record(data: bytes, prefix_size: int) -> tuple[bytes, bytes]:
    """Split an on-disk record into (prefix, body)."""
    return data[:prefix_size], data[prefix_size:]
