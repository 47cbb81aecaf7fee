"""Tests for volume listing and mount point resolution."""

from collections import namedtuple

import pytest

from storage_monitor.core import volumes as volumes_module
from storage_monitor.core.models import VolumeInfo
from storage_monitor.core.volumes import list_volumes, resolve_volume

ROOT = VolumeInfo("/", 500, 100)
DATA = VolumeInfo("/mnt/data", 2000, 1500)
VAR = VolumeInfo("/var", 300, 30)


def test_most_specific_mount_wins():
    assert resolve_volume("/mnt/data/sub/file", [ROOT, DATA]) == DATA
    assert resolve_volume("/mnt/data/sub/file", [DATA, ROOT]) == DATA


def test_mount_point_itself_resolves_to_its_volume():
    assert resolve_volume("/mnt/data", [ROOT, DATA]) == DATA


def test_prefix_match_is_component_wise():
    assert resolve_volume("/var2/log", [ROOT, VAR]) == ROOT
    assert resolve_volume("/var/log", [ROOT, VAR]) == VAR


def test_unrelated_path_falls_back_to_root():
    assert resolve_volume("/home/user", [ROOT, DATA, VAR]) == ROOT


def test_ties_keep_first_volume():
    first = VolumeInfo("/mnt/data", 1, 1)
    second = VolumeInfo("/mnt/data", 2, 2)

    assert resolve_volume("/mnt/data/x", [first, second]) is first


def test_no_match_returns_none():
    assert resolve_volume("/srv/x", [DATA, VAR]) is None
    assert resolve_volume("/srv/x", []) is None


def test_explicit_fallback_to_first_volume():
    assert resolve_volume("/srv/x", [DATA, VAR], fallback_to_first=True) == DATA
    assert resolve_volume("/srv/x", [], fallback_to_first=True) is None


Partition = namedtuple("Partition", "device mountpoint fstype opts")
Usage = namedtuple("Usage", "total used free percent")


def test_list_volumes_reads_psutil(monkeypatch):
    partitions = [
        Partition("/dev/sda1", "/", "ext4", "rw"),
        Partition("/dev/sdb1", "/mnt/stale", "nfs", "rw"),
        Partition("/dev/sdc1", "/mnt/data", "xfs", "rw"),
    ]
    usages = {
        "/": Usage(500, 400, 100, 80.0),
        "/mnt/data": Usage(2000, 500, 1500, 25.0),
    }

    def disk_usage(mountpoint):
        if mountpoint not in usages:
            raise PermissionError(13, "Permission denied")
        return usages[mountpoint]

    monkeypatch.setattr(volumes_module.psutil, "disk_partitions", lambda all=False: partitions)
    monkeypatch.setattr(volumes_module.psutil, "disk_usage", disk_usage)

    assert list_volumes() == [ROOT, DATA]


def test_used_bytes():
    assert ROOT.used_bytes == 400
    assert VolumeInfo("/", 10, 20).used_bytes == 0


@pytest.mark.parametrize("path", ["/", "/tmp"])
def test_real_volumes_resolve(path):
    volumes = list_volumes()
    if not volumes:
        pytest.skip("no volumes visible in this environment")

    assert resolve_volume(path, volumes, fallback_to_first=True) is not None
