"""Shared fixtures for storage monitor tests."""

import logging
import os

import pytest


def write_file(path, size):
    """Create a file of exactly size bytes, creating parent directories."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(b'x' * size)
    return path


@pytest.fixture
def sample_tree(tmp_path):
    """A small directory tree with known sizes.

    root/
        README            10
        notes.TXT         20
        docs/
            a.txt         100
            b.md          50
            deep/
                archive.tar.gz  300
        empty/
    """
    root = tmp_path / "root"
    root.mkdir()
    write_file(str(root / "README"), 10)
    write_file(str(root / "notes.TXT"), 20)
    write_file(str(root / "docs" / "a.txt"), 100)
    write_file(str(root / "docs" / "b.md"), 50)
    write_file(str(root / "docs" / "deep" / "archive.tar.gz"), 300)
    (root / "empty").mkdir()
    return root


@pytest.fixture
def block_directory(monkeypatch):
    """Make os.scandir raise PermissionError for chosen directories."""
    blocked = set()
    real_scandir = os.scandir

    def fake_scandir(path='.'):
        if os.fspath(path) in blocked:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def block(path):
        blocked.add(str(path))

    return block


@pytest.fixture
def restore_logging():
    """Restore root logger handlers replaced by the CLI's setup_logging."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
