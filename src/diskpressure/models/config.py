"""
Configuration data models.

This module contains the configuration structures for sampling, alerting,
trace capture and reporting, as loaded from ``config.toml``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.storage_config import StorageConfig


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.

    All values are process-lifetime constants.
    """

    # [monitor.sampling]
    sample_frequency_seconds: float
    # [monitor.alert]
    alert_sample_value_threshold: float
    alert_required_recurrence: int
    # [monitor.trace]
    trace_capture_duration: float
    min_time_between_traces: float
    trace_start_command: List[str]
    trace_stop_command: List[str]
    # [monitor.report]
    log_name: str
    source_name: str

    # [monitor.general]
    log_level: str = "INFO"
    output_dir: Path = Path("logs")

    # [monitor.sampling] - optional
    counter_source: str = "diskstats"
    diskstats_path: Path = Path("/proc/diskstats")
    device_pattern: str = r"^(sd[a-z]+|nvme\d+n\d+|vd[a-z]+|xvd[a-z]+|hd[a-z]+|md\d+)$"
    excluded_instances: List[str] = field(default_factory=lambda: ["_total"])

    # [monitor.trace] - optional
    trace_work_dir: Optional[Path] = None
    trace_keep_artifacts: bool = False
    trace_require_root: bool = True

    # [monitor.report] - optional
    sink: str = "console"
    jsonl_path: Path = Path("logs/events.jsonl")
    syslog_address: str = "/dev/log"
    top_k: int = 5
    excluded_processes: List[str] = field(default_factory=list)

    # [monitor.storage]
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    # The global monitor configuration.
    monitor: MonitorConfig
    # The file the configuration was loaded from, if any.
    source_path: Optional[Path] = None
