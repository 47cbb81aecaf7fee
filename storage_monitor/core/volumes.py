"""Storage volume listing and mount point resolution."""

import logging
from pathlib import PurePath
from typing import List, Optional, Sequence

import psutil

from .models import VolumeInfo

logger = logging.getLogger(__name__)


def list_volumes() -> List[VolumeInfo]:
    """List mounted volumes with their current capacity.

    Partitions whose usage cannot be read (stale network mounts, permission
    denied) are left out.

    Returns:
        List of VolumeInfo in the order reported by the operating system.
    """
    volumes = []

    for partition in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as e:
            logger.debug(f"Skipping volume {partition.mountpoint}: {e}")
            continue

        volumes.append(VolumeInfo(
            mount_point=partition.mountpoint,
            total_bytes=usage.total,
            available_bytes=usage.free,
        ))

    return volumes


def resolve_volume(path: str, volumes: Sequence[VolumeInfo],
                   fallback_to_first: bool = False) -> Optional[VolumeInfo]:
    """Find the volume a path lives on.

    The volume whose mount point is the longest component-wise prefix of the
    path wins, so ``/mnt/data/x`` resolves to ``/mnt/data`` rather than ``/``
    and ``/var2`` never matches a mount at ``/var``. Ties keep the first
    volume encountered.

    Args:
        path: Absolute path to resolve.
        volumes: Known volumes.
        fallback_to_first: Return the first volume when none matches instead
            of None.

    Returns:
        The matching VolumeInfo, or None.
    """
    path_parts = PurePath(path).parts
    best = None

    for volume in volumes:
        mount_parts = PurePath(volume.mount_point).parts
        if path_parts[:len(mount_parts)] != mount_parts:
            continue
        if best is None or len(volume.mount_point) > len(best.mount_point):
            best = volume

    if best is None and fallback_to_first and volumes:
        logger.debug(f"No volume matches {path}, using {volumes[0].mount_point}")
        return volumes[0]

    return best
