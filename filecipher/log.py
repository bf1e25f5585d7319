"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module only
wires a handler onto the package logger and keeps key material out of
the output.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Final, Optional, Pattern

from .config import get_log_level

PACKAGE_LOGGER: Final[str] = "filecipher"

# Long hex runs are most likely raw key bytes
_HEX_SECRET: Final[Pattern[str]] = re.compile(r"(?i)(?:0x)?[a-f0-9]{32,}")
_REDACTED_TEXT: Final[str] = "[REDACTED]"


class RedactingFilter(logging.Filter):
    """Replace anything that looks like key material with [REDACTED]."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = _HEX_SECRET.sub(_REDACTED_TEXT, record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(
                _HEX_SECRET.sub(_REDACTED_TEXT, arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Args:
        level: log level; defaults to ENCRYPTOR_LOG_LEVEL

    Returns:
        the configured package logger
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level if level is not None else get_log_level())

    # Idempotent: reuse our handler on repeated calls
    for handler in logger.handlers:
        if getattr(handler, "_filecipher", False):
            return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    handler.addFilter(RedactingFilter())
    handler._filecipher = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
