"""
Trace capture and aggregation models.

``TraceRecord`` is one parsed per-I/O event from the external trace tool.
``SummaryRow`` is one aggregation group, and ``TraceSummary`` is the ranked
result of one capture, which is what gets published and optionally archived.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class IoType(str, Enum):
    """Kind of disk I/O reported by the trace tool."""

    READ = "Read"
    WRITE = "Write"
    FLUSH = "Flush"


GroupKey = Tuple[str, str, str, str]


@dataclass(frozen=True)
class TraceRecord:
    """One raw disk I/O event, with its textual fields parsed."""

    io_type: IoType
    start_time: float
    end_time: float
    io_time_micros: float
    disk_service_time_micros: float
    queue_depth_at_init: int
    io_size_bytes: int
    process_name: str
    process_id: int
    disk: str
    filename: str

    @property
    def process_name_id(self) -> str:
        """Composite ``name:pid`` identifier used for grouping."""
        return f"{self.process_name}:{self.process_id}"

    @property
    def group_key(self) -> GroupKey:
        return (self.disk, self.process_name_id, self.io_type.value, self.filename)


@dataclass(frozen=True)
class SummaryRow:
    """Aggregated statistics for one (disk, process, I/O type, file) group."""

    disk: str
    process_name_id: str
    io_type: str
    filename: str
    sum_io_time: float
    sum_io_size_bytes: int
    io_count: int

    @property
    def group_key(self) -> GroupKey:
        return (self.disk, self.process_name_id, self.io_type, self.filename)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TraceSummary:
    """
    The ranked outcome of aggregating a single capture.

    Produced fresh for every capture and never merged with earlier ones.
    """

    # Ranked rows, largest sum_io_size_bytes first.
    rows: List[SummaryRow]
    # Raw rows returned by the capture adapter.
    total_records: int = 0
    # Rows dropped because a field could not be parsed.
    malformed_records: int = 0
    # Parsed records removed by the process exclusion filter.
    excluded_records: int = 0
    # Epoch seconds at which the capture started.
    captured_at: float = 0.0
    # Configured capture duration in seconds.
    capture_duration: float = 0.0
    # Instances whose alert triggered this capture.
    instances: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "captured_at": self.captured_at,
            "capture_duration": self.capture_duration,
            "instances": list(self.instances),
            "total_records": self.total_records,
            "malformed_records": self.malformed_records,
            "excluded_records": self.excluded_records,
            "rows": [row.to_dict() for row in self.rows],
        }
