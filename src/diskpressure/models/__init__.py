"""
Data models and structures for the monitoring system.

Configuration Models:
- Sampling, alerting, trace and reporting settings

Sample Models:
- Raw counter readings and classified samples

Trace Models:
- Parsed per-I/O trace records, aggregated summary rows and summaries

Runtime Models:
- Disk topology entries and per-cycle outcomes
"""

# Configuration models
from .config import AppConfig, MonitorConfig

# Sample models
from .samples import CounterReading, CounterSample, SampleStatus

# Trace models
from .trace import IoType, SummaryRow, TraceRecord, TraceSummary

# Runtime models
from .runtime import CycleOutcome, CycleResult, DiskInfo

__all__ = [
    # Configuration
    "AppConfig",
    "MonitorConfig",
    # Samples
    "CounterReading",
    "CounterSample",
    "SampleStatus",
    # Trace
    "IoType",
    "SummaryRow",
    "TraceRecord",
    "TraceSummary",
    # Runtime
    "CycleOutcome",
    "CycleResult",
    "DiskInfo",
]
