"""
Counter source reading current queue length from ``/proc/diskstats``.

The ninth statistics field of each diskstats line is the number of I/Os
currently in flight on the device, which is the kernel's instantaneous queue
length. Each call reads the file once and returns a reading per device that
matches the configured device pattern.
"""

import logging
import re
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..models.samples import CounterReading
from ..validation import TransientSampleError
from .base import AbstractCounterSource

logger = logging.getLogger(__name__)

# Column of "I/Os currently in progress": major, minor, name, then 11+ stat fields.
_IN_FLIGHT_COLUMN = 11
_NAME_COLUMN = 2


class DiskstatsCounterSource(AbstractCounterSource):
    """
    Samples in-flight I/O counts per block device.

    Attributes:
        diskstats_path: File to read, normally ``/proc/diskstats``.
        device_pattern: Compiled regex a device name must fully match.
    """

    counter_name = "current queue length"

    def __init__(
        self,
        diskstats_path: Path = Path("/proc/diskstats"),
        device_pattern: str = r"^(sd[a-z]+|nvme\d+n\d+|vd[a-z]+|xvd[a-z]+|hd[a-z]+|md\d+)$",
        clock: Optional[Callable[[], float]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.diskstats_path = Path(diskstats_path)
        try:
            self.device_pattern: re.Pattern = re.compile(device_pattern)
        except re.error as e:
            raise ValueError(f"Invalid device pattern: {device_pattern}") from e
        self._clock = clock or time.time

    def sample(self) -> List[CounterReading]:
        try:
            content = self.diskstats_path.read_text()
        except OSError as e:
            raise TransientSampleError(
                f"Cannot read {self.diskstats_path}: {e}"
            ) from e

        timestamp = self._clock()
        readings = []
        for line in content.splitlines():
            reading = self._parse_line(line, timestamp)
            if reading is not None:
                readings.append(reading)

        if not readings:
            logger.debug(f"No devices matching {self.device_pattern.pattern!r} in {self.diskstats_path}")
        return readings

    def _parse_line(self, line: str, timestamp: float) -> Optional[CounterReading]:
        parts = line.split()
        if len(parts) <= _IN_FLIGHT_COLUMN:
            return None

        device = parts[_NAME_COLUMN]
        if not self.device_pattern.fullmatch(device):
            return None

        try:
            in_flight = float(parts[_IN_FLIGHT_COLUMN])
        except ValueError:
            logger.debug(f"Skipping unparsable diskstats line for {device}: {line!r}")
            return None

        return CounterReading(instance=device, value=in_flight, timestamp=timestamp)
