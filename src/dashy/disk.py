"""Disk I/O sampling.

Each platform exposes aggregate disk counters differently, so sampling is
done through a DiskIOSource chosen once at startup by select_disk_source().
All sources report cumulative (read_bytes, write_bytes) since boot and
degrade to zeros instead of raising.
"""

import string
import sys
from pathlib import Path
from typing import Protocol

from dashy.logging import get_logger
from dashy.tools import DEFAULT_TIMEOUT, run_tool

log = get_logger(__name__)

SECTOR_SIZE = 512
DISK_PREFIXES = ("sd", "vd", "nvme")

# /proc/diskstats column positions (after major, minor)
_NAME_FIELD = 2
_SECTORS_READ_FIELD = 5
_SECTORS_WRITTEN_FIELD = 9
_MIN_FIELDS = 14

IOREG_COMMAND = ["ioreg", "-c", "IOBlockStorageDriver", "-r", "-d", "1"]
_IOREG_MARKER = "Statistics"
_IOREG_READ_LABEL = '"Bytes (Read)"='
_IOREG_WRITE_LABEL = '"Bytes (Write)"='


class DiskIOSource(Protocol):
    """Capability: report cumulative disk read/write bytes."""

    def read(self) -> tuple[int, int]: ...


def is_whole_disk(name: str) -> bool:
    """
    Check whether a block device name is a physical disk worth counting.

    sda, vda and nvme0n1 qualify; sda1 is a partition and does not. NVMe
    partitions (nvme0n1p1) are still counted because the namespace device
    name itself ends in a digit.
    """
    if not name.startswith(DISK_PREFIXES):
        return False
    if name.startswith("nvme"):
        return True
    return not name[-1].isdigit()


def parse_diskstats(text: str) -> tuple[int, int]:
    """Sum sectors read/written over whole disks in /proc/diskstats text."""
    read_bytes = 0
    write_bytes = 0
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < _MIN_FIELDS:
            continue
        if not is_whole_disk(parts[_NAME_FIELD]):
            continue
        try:
            sectors_read = int(parts[_SECTORS_READ_FIELD])
            sectors_written = int(parts[_SECTORS_WRITTEN_FIELD])
        except ValueError:
            continue
        read_bytes += sectors_read * SECTOR_SIZE
        write_bytes += sectors_written * SECTOR_SIZE
    return read_bytes, write_bytes


def _labeled_number(line: str, label: str) -> int | None:
    """Read the run of digits directly after label, or None if absent."""
    start = line.find(label)
    if start < 0:
        return None
    rest = line[start + len(label) :]
    end = 0
    while end < len(rest) and rest[end] in string.digits:
        end += 1
    if end == 0:
        return None
    return int(rest[:end])


def parse_ioreg(text: str) -> tuple[int, int]:
    """Sum "Bytes (Read)" and "Bytes (Write)" over ioreg Statistics lines."""
    total_read = 0
    total_write = 0
    for line in text.splitlines():
        if _IOREG_MARKER not in line:
            continue
        read = _labeled_number(line, _IOREG_READ_LABEL)
        if read is not None:
            total_read += read
        written = _labeled_number(line, _IOREG_WRITE_LABEL)
        if written is not None:
            total_write += written
    return total_read, total_write


class DiskstatsSource:
    """Linux: line-per-device counters from /proc/diskstats."""

    def __init__(self, path: Path | str = "/proc/diskstats") -> None:
        self._path = Path(path)

    def read(self) -> tuple[int, int]:
        try:
            text = self._path.read_text()
        except OSError as e:
            log.debug("disk_source_unavailable", source=str(self._path), error=str(e))
            return 0, 0
        return parse_diskstats(text)


class IoregSource:
    """macOS: IOBlockStorageDriver statistics reported by ioreg."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    def read(self) -> tuple[int, int]:
        output = run_tool(IOREG_COMMAND, timeout=self._timeout)
        if output is None:
            log.debug("disk_source_unavailable", source="ioreg")
            return 0, 0
        return parse_ioreg(output)


class NullDiskSource:
    """Platforms without a supported disk counter source."""

    def read(self) -> tuple[int, int]:
        return 0, 0


def select_disk_source(
    platform: str | None = None, timeout: float = DEFAULT_TIMEOUT
) -> DiskIOSource:
    """Pick the disk source for the given (default: running) platform."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return DiskstatsSource()
    if platform == "darwin":
        return IoregSource(timeout=timeout)
    return NullDiskSource()
