"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from Crypto.PublicKey import RSA
from Crypto.Random import get_random_bytes

from filecipher.keys import KeyObject


@pytest.fixture(scope="session")
def rsa_key() -> RSA.RsaKey:
    return RSA.generate(2048)


@pytest.fixture
def aes_key() -> bytes:
    return get_random_bytes(32)


@pytest.fixture
def key(aes_key, rsa_key) -> KeyObject:
    return KeyObject(aes_key=aes_key, rsa_key=rsa_key)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """
    tmp/
        a.txt
        b/
            c.bin
            report.txt
        report.txt
    """

    (tmp_path / "a.txt").write_bytes(b"alpha")
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "c.bin").write_bytes(b"\x00\x01\x02")
    (tmp_path / "b" / "report.txt").write_bytes(b"nested report")
    (tmp_path / "report.txt").write_bytes(b"top report")
    return tmp_path
