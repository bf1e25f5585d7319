from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from filecipher.errors import DiscoveryError, WalkReadError
from filecipher.file_scanner import (
    FileEntry,
    FileScanner,
    discover_files_in_directory,
    find_file_in_directory,
    find_files_by_type_in_directory,
    first_named,
    of_type,
    without_path,
)


def rel(tree: Path, names):
    return [os.path.relpath(n, tree) for n in names]


def test_discover_walk_order(tree):
    fl = discover_files_in_directory(tree, self_path="")

    assert rel(tree, fl.names()) == [
        "a.txt",
        os.path.join("b", "c.bin"),
        os.path.join("b", "report.txt"),
        "report.txt",
    ]
    assert all(isinstance(f, FileEntry) for f in fl)


def test_discover_skips_directories(tree):
    (tree / "empty").mkdir()
    names = discover_files_in_directory(tree, self_path="").names()

    assert str(tree / "b") not in names
    assert str(tree / "empty") not in names


def test_discover_empty_directory(tmp_path):
    fl = discover_files_in_directory(tmp_path, self_path="")
    assert len(fl) == 0
    assert list(fl) == []


def test_discover_excludes_path(tree):
    excluded = tree / "b" / "c.bin"
    names = discover_files_in_directory(tree, exclude=excluded, self_path="").names()

    assert str(excluded) not in names
    assert len(names) == 3


def test_exclude_is_compared_canonically(tree, monkeypatch):
    monkeypatch.chdir(tree)
    names = discover_files_in_directory(".", exclude="a.txt", self_path="").names()

    assert os.path.join(".", "a.txt") not in names
    assert os.path.join(".", "report.txt") in names


def test_discover_skips_explicit_self_path(tree):
    names = discover_files_in_directory(tree, self_path=str(tree / "report.txt")).names()
    assert str(tree / "report.txt") not in names


def test_discover_skips_running_program(tree, monkeypatch):
    monkeypatch.setattr(sys, "argv", [str(tree / "b" / "report.txt")])
    names = discover_files_in_directory(tree).names()

    assert str(tree / "b" / "report.txt") not in names
    assert str(tree / "report.txt") in names


def test_discover_missing_directory_raises(tmp_path):
    with pytest.raises(WalkReadError) as info:
        discover_files_in_directory(tmp_path / "nope")

    assert isinstance(info.value, DiscoveryError)
    assert info.value.path == str(tmp_path / "nope")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinked_directory_is_listed_not_followed(tree):
    link = tree / "z-link"
    try:
        os.symlink(tree / "b", link, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks")

    names = discover_files_in_directory(tree, self_path="").names()

    assert str(link) in names
    assert str(link / "c.bin") not in names


def test_find_file_returns_first_match(tree):
    assert find_file_in_directory(tree, "report.txt") == str(tree / "b" / "report.txt")


def test_find_file_missing_returns_empty_string(tree):
    assert find_file_in_directory(tree, "missing.txt") == ""


def test_find_file_propagates_discovery_error(tmp_path):
    with pytest.raises(DiscoveryError):
        find_file_in_directory(tmp_path / "nope", "a.txt")


def test_find_by_type_matches_whole_filename(tree):
    fl = find_files_by_type_in_directory(tree, "report.txt")
    assert fl.names() == [str(tree / "b" / "report.txt"), str(tree / "report.txt")]


def test_find_by_type_does_not_split_on_dot(tree):
    assert len(find_files_by_type_in_directory(tree, "txt")) == 0
    assert len(find_files_by_type_in_directory(tree, ".bin")) == 0


def test_scanner_binds_settings(tree):
    scanner = FileScanner(tree, exclude=tree / "a.txt", self_path="")

    assert str(tree / "a.txt") not in scanner.scan().names()
    assert scanner.find("a.txt") is None
    assert scanner.find("c.bin") == FileEntry(str(tree / "b" / "c.bin"))
    assert scanner.find_by_type("c.bin").names() == [str(tree / "b" / "c.bin")]


def test_scanner_and_functions_share_matching(tree):
    scanner = FileScanner(tree)

    assert scanner.find("report.txt").name == find_file_in_directory(tree, "report.txt")
    assert scanner.find("missing.txt") is None
    assert scanner.find_by_type("report.txt") == find_files_by_type_in_directory(tree, "report.txt")


def test_matchers_on_scan_result(tree):
    files = discover_files_in_directory(tree, self_path="")

    assert first_named(files, "c.bin") == FileEntry(str(tree / "b" / "c.bin"))
    assert of_type(files, "a.txt").names() == [str(tree / "a.txt")]
    assert str(tree / "a.txt") not in without_path(files, tree / "a.txt").names()
    assert len(files) == 4
