"""Tests for per-entry metadata reading."""

import os

import pytest

from storage_monitor.core.metadata import extension_of, read_entry_metadata, read_metadata
from storage_monitor.core.models import UNKNOWN_EXTENSION

from .conftest import write_file


@pytest.mark.parametrize("name, expected", [
    ("archive.tar.gz", "gz"),
    ("photo.JPG", "jpg"),
    ("README", UNKNOWN_EXTENSION),
    ("trailing.", UNKNOWN_EXTENSION),
    (".bashrc", "bashrc"),
    ("a.b.c.Txt", "txt"),
])
def test_extension_of(name, expected):
    assert extension_of(name) == expected


def test_read_metadata_for_file(tmp_path):
    path = write_file(str(tmp_path / "data.bin"), 123)
    os.utime(path, (1_600_000_000, 1_600_000_000))

    metadata = read_metadata(path)

    assert metadata.size == 123
    assert metadata.modified_at == 1_600_000_000
    assert not metadata.is_directory
    assert not metadata.is_symlink


def test_read_metadata_for_directory_has_no_size(tmp_path):
    metadata = read_metadata(str(tmp_path))

    assert metadata.is_directory
    assert metadata.size == 0


def test_read_metadata_does_not_follow_symlinks(tmp_path):
    target = write_file(str(tmp_path / "target.txt"), 50)
    link = tmp_path / "link.txt"
    link.symlink_to(target)

    metadata = read_metadata(str(link))

    assert metadata.is_symlink
    assert not metadata.is_directory
    assert metadata.size == 0


def test_read_metadata_missing_entry_returns_none(tmp_path):
    assert read_metadata(str(tmp_path / "gone")) is None


def test_zero_timestamp_falls_back_to_zero(tmp_path):
    path = write_file(str(tmp_path / "old.txt"), 1)
    os.utime(path, (0, 0))

    assert read_metadata(path).modified_at == 0


def test_read_entry_metadata_matches_read_metadata(tmp_path):
    write_file(str(tmp_path / "one.txt"), 7)

    with os.scandir(str(tmp_path)) as entries:
        entry = next(iter(entries))
        metadata = read_entry_metadata(entry)

    assert metadata == read_metadata(str(tmp_path / "one.txt"))


@pytest.mark.skipif(os.name == "nt", reason="stat results are cached by scandir on Windows")
def test_read_entry_metadata_race_deleted_entry(tmp_path):
    path = write_file(str(tmp_path / "short-lived.txt"), 7)

    with os.scandir(str(tmp_path)) as entries:
        entry = next(iter(entries))
        os.remove(path)
        assert read_entry_metadata(entry) is None
