from __future__ import annotations

from pathlib import Path

import pytest

from filecipher.errors import ConfigError
from filecipher.manifest import Manifest
from filecipher.transformer import Scheme

MANIFEST = """\
version: 1
cipher:
  scheme: cbc
  atomic_writes: false
  context: build-42
profiles:
  default:
    directory: data
    exclude: data/keep.txt
  reports:
    directory: /srv/reports
    name: report.txt
"""


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "manifest.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_manifest(tmp_path):
    manifest = Manifest.load(write(tmp_path, MANIFEST))

    assert manifest.version == 1
    assert manifest.cipher.scheme is Scheme.CBC
    assert manifest.cipher.atomic_writes is False
    assert manifest.cipher.context == b"build-42"

    default = manifest.get_profile()
    assert default.directory == tmp_path / "data"
    assert default.exclude == str(tmp_path / "data" / "keep.txt")
    assert default.filename is None

    reports = manifest.get_profile("reports")
    assert reports.directory == Path("/srv/reports")
    assert reports.filename == "report.txt"


def test_cipher_defaults(tmp_path):
    manifest = Manifest.load(write(tmp_path, "version: 1\nprofiles:\n  default:\n    directory: .\n"))

    assert manifest.cipher.scheme is Scheme.GCM
    assert manifest.cipher.atomic_writes is True
    assert manifest.cipher.context == b""


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        Manifest.load(tmp_path / "nope.yml")


def test_invalid_yaml(tmp_path):
    with pytest.raises(ConfigError, match="YAML"):
        Manifest.load(write(tmp_path, "version: [1\n"))


@pytest.mark.parametrize(
    "data, message",
    [
        ({"version": 2}, "Unsupported manifest version"),
        ({"version": 1, "cipher": {"scheme": "ecb"}, "profiles": {"default": {"directory": "."}}}, "Unknown scheme"),
        ({"version": 1, "profiles": {"other": {"directory": "."}}}, "Default profile"),
        ({"version": 1, "profiles": {"default": {}}}, "missing 'directory'"),
        ({"version": 1, "profiles": {"default": {"directory": ".", "name": "a", "type": "b"}}}, "both"),
    ],
)
def test_validation(data, message):
    with pytest.raises(ConfigError, match=message):
        Manifest.from_dict(data)


def test_unknown_profile(tmp_path):
    manifest = Manifest.load(write(tmp_path, MANIFEST))
    with pytest.raises(ConfigError, match="Profile not found"):
        manifest.get_profile("missing")


def test_load_records_path(tmp_path):
    path = write(tmp_path, MANIFEST)
    assert Manifest.load(path).path == path
    assert Manifest.from_dict({"version": 1, "profiles": {"default": {"directory": "."}}}).path is None


def test_non_utf8_manifest(tmp_path):
    path = tmp_path / "manifest.yml"
    path.write_bytes(b"version: 1\n\xff\xfe\x00garbage")
    with pytest.raises(ConfigError, match="UTF-8"):
        Manifest.load(path)


def test_unreadable_manifest(tmp_path):
    path = tmp_path / "manifest.yml"
    path.mkdir()
    with pytest.raises(ConfigError, match="Cannot read"):
        Manifest.load(path)


@pytest.mark.parametrize("context", [42, ["a"], {"k": "v"}])
def test_context_must_be_text(context):
    data = {"version": 1, "cipher": {"context": context}, "profiles": {"default": {"directory": "."}}}
    with pytest.raises(ConfigError, match="context"):
        Manifest.from_dict(data)
