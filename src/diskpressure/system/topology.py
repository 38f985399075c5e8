"""
Disk topology lookup.

Enumerates physical block devices from sysfs and maps their partitions to
mount points with psutil, to enrich alert messages. Also maps the device
numbers reported by kernel tracers back to device names.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List

import psutil

from ..models.runtime import DiskInfo

logger = logging.getLogger(__name__)

SYS_BLOCK = Path("/sys/block")
SYS_DEV_BLOCK = Path("/sys/dev/block")

_DEVICE_NUMBER_RE = re.compile(r"^\d+:\d+$")

_SKIPPED_PREFIXES = ("loop", "ram", "zram")


def _read_attr(path: Path, default: str = "") -> str:
    try:
        return path.read_text().strip()
    except OSError:
        return default


def _guess_interface(disk: str, disk_dir: Path) -> str:
    if disk.startswith("nvme"):
        return "NVMe"
    if disk.startswith("vd"):
        return "VirtIO"
    if disk.startswith("xvd"):
        return "Xen"
    if disk.startswith("md"):
        return "MD-RAID"
    if disk.startswith("dm-"):
        return "DeviceMapper"
    if _read_attr(disk_dir / "removable") == "1":
        return "USB"
    if disk.startswith(("sd", "hd")):
        return "SCSI"
    return "Unknown"


def _mount_points_by_device() -> Dict[str, List[str]]:
    """Map device basenames (``sda1``) to their mount points."""
    mounts: Dict[str, List[str]] = {}
    try:
        partitions = psutil.disk_partitions(all=False)
    except OSError as e:
        logger.warning(f"Could not list mounted partitions: {e}")
        return mounts
    for part in partitions:
        name = Path(part.device).name
        mounts.setdefault(name, []).append(part.mountpoint)
    return mounts


def disk_info(sys_block: Path = SYS_BLOCK) -> List[DiskInfo]:
    """
    Describe every physical disk on the host.

    Args:
        sys_block: The sysfs block directory, overridable for tests.

    Returns:
        One ``DiskInfo`` per disk, sorted by disk name. ``drive_letter`` holds
        the comma-separated mount points of the disk and its partitions.
    """
    if not sys_block.is_dir():
        logger.debug(f"{sys_block} not present, no topology available")
        return []

    mounts = _mount_points_by_device()
    disks = []
    for disk_dir in sorted(sys_block.iterdir()):
        disk = disk_dir.name
        if disk.startswith(_SKIPPED_PREFIXES):
            continue

        devices = [disk] + sorted(
            child.name for child in disk_dir.iterdir()
            if child.is_dir() and child.name.startswith(disk)
        )
        mount_points = [m for device in devices for m in mounts.get(device, [])]

        disks.append(
            DiskInfo(
                disk=disk,
                model=_read_attr(disk_dir / "device" / "model", "unknown"),
                interface=_guess_interface(disk, disk_dir),
                drive_letter=",".join(mount_points),
            )
        )
    return disks


def describe_instances(instances: List[str], disks: List[DiskInfo]) -> List[str]:
    """Render one line per alerting instance, with topology when known."""
    by_name = {d.disk: d for d in disks}
    lines = []
    for instance in instances:
        info = by_name.get(instance)
        if info is None:
            lines.append(instance)
            continue
        mounted = f" mounted at {info.drive_letter}" if info.drive_letter else ""
        lines.append(f"{instance} ({info.model}, {info.interface}){mounted}")
    return lines


def resolve_disk_name(disk: str, sys_dev_block: Path = SYS_DEV_BLOCK) -> str:
    """
    Translate a ``major:minor`` device number into its kernel name.

    Kernel tracers report devices by number (``8:0``) while the counter
    source reports names (``sda``). Anything that is not a device number, or
    a number sysfs does not know, is returned unchanged.
    """
    if not _DEVICE_NUMBER_RE.match(disk):
        return disk
    try:
        return (sys_dev_block / disk).resolve(strict=True).name
    except (OSError, RuntimeError):
        logger.debug(f"No block device {disk} under {sys_dev_block}")
        return disk
