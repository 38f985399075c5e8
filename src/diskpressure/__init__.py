"""
diskpressure: disk queue pressure monitor with on-demand I/O tracing.

The monitor samples the queue length of every disk at a fixed interval. When
a disk stays at or above a threshold for a configured number of consecutive
samples, it captures a short kernel I/O trace (rate limited by a cooldown),
ranks the (disk, process, I/O type, file) groups by bytes transferred and
publishes the top groups to a notification sink.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error taxonomy
- collectors: Counter sources and the sampler
- alerting: Per-instance alert windows and the trace gate
- tracing: Trace capture adapters and trace-row parsing
- aggregation: Ranking of trace records into summaries
- reporting: Notification sinks and the reporter
- storage: Optional archive of published summaries
- system: Command execution and disk topology
- monitoring: The control loop
- cli: Command-line interface

Usage:
    From command line:
        diskpressure --config conf/config.toml

    Programmatically:
        from diskpressure import MonitorRunner, get_config
        runner = MonitorRunner(get_config().monitor)
        runner.check_preconditions()
        runner.run(shutdown_event)
"""

# Configuration must be imported before models (models.config uses StorageConfig)
from .config import clear_config_cache, get_config, set_config_path

# Model classes for external use
from .models import (
    AppConfig,
    CounterSample,
    CycleOutcome,
    CycleResult,
    MonitorConfig,
    SampleStatus,
    SummaryRow,
    TraceRecord,
    TraceSummary,
)

# Core decision logic
from .alerting import AlertWindowSet, TraceGate, evaluate_qualification, try_acquire_gate, update_window
from .aggregation import Aggregator, aggregate
from .collectors import Sampler, classify

# Validation utilities
from .validation import (
    CaptureError,
    StartupPreconditionError,
    TransientSampleError,
    ValidationError,
)

from .monitoring import MonitoringLoop, MonitorState
from .cli import MonitorRunner, main_cli

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "MonitorRunner",
    "MonitoringLoop",
    "MonitorState",
    "main_cli",
    # Models
    "AppConfig",
    "MonitorConfig",
    "CounterSample",
    "SampleStatus",
    "TraceRecord",
    "SummaryRow",
    "TraceSummary",
    "CycleOutcome",
    "CycleResult",
    # Core logic
    "AlertWindowSet",
    "TraceGate",
    "Sampler",
    "Aggregator",
    "classify",
    "update_window",
    "evaluate_qualification",
    "try_acquire_gate",
    "aggregate",
    # Errors
    "ValidationError",
    "StartupPreconditionError",
    "TransientSampleError",
    "CaptureError",
]
