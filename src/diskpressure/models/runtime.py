"""
Runtime data models.

This module contains data structures produced while the monitoring loop runs:
disk topology entries used to enrich alerts, and the per-cycle outcome record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .samples import CounterSample
from .trace import TraceSummary


@dataclass(frozen=True)
class DiskInfo:
    """Static description of one physical disk, for alert messages."""

    disk: str
    model: str
    interface: str
    # Mount point(s) of the disk's partitions; plays the role of a drive letter.
    drive_letter: str


class CycleResult(Enum):
    """What a single monitoring cycle ended up doing."""

    SAMPLED = "sampled"
    SAMPLE_FAILED = "sample_failed"
    CAPTURE_DENIED = "capture_denied"
    CAPTURE_FAILED = "capture_failed"
    AGGREGATION_FAILED = "aggregation_failed"
    REPORTED = "reported"


@dataclass
class CycleOutcome:
    """
    Summary of one pass through the control loop.

    Returned by ``MonitoringLoop.run_cycle`` so the driver and tests can
    observe decisions without inspecting logs.
    """

    result: CycleResult
    samples: List[CounterSample] = field(default_factory=list)
    qualifying_instances: List[str] = field(default_factory=list)
    # Seconds since the last capture when the gate denied one.
    gate_elapsed: Optional[float] = None
    summary: Optional[TraceSummary] = None
    error: Optional[str] = None
