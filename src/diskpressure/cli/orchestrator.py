"""
Monitor runner for CLI integration.

Wires the configured counter source, capture adapter, aggregator, sink and
archive into a MonitoringLoop, after checking the startup preconditions.
"""

import logging
import threading
from typing import Optional

from ..aggregation import Aggregator
from ..collectors import Sampler, create_counter_source
from ..models.config import MonitorConfig
from ..monitoring import MonitoringLoop
from ..reporting import NotificationSink, Reporter, create_sink
from ..storage import SummaryArchive
from ..system.commands import check_tool_installed, has_root_privileges
from ..system.topology import resolve_disk_name
from ..tracing import create_capture_adapter
from ..validation import StartupPreconditionError

logger = logging.getLogger(__name__)


class MonitorRunner:
    """
    Builds and runs the disk pressure monitor from a MonitorConfig.

    Call ``check_preconditions`` first; it registers the notification sink,
    which ``run`` then publishes to.
    """

    def __init__(self, config: MonitorConfig):
        self.config = config
        self.sink: Optional[NotificationSink] = None
        self.loop: Optional[MonitoringLoop] = None

    def check_preconditions(self) -> None:
        """
        Verify the trace tool, privileges and sink.

        Raises:
            StartupPreconditionError: If any precondition is not met.
        """
        tool = self.config.trace_start_command[0]
        if not check_tool_installed(tool):
            raise StartupPreconditionError(
                f"Trace tool '{tool}' is not installed or not executable",
                precondition="trace_tool",
            )
        stop_tool = self.config.trace_stop_command[0]
        if stop_tool != tool and not check_tool_installed(stop_tool):
            raise StartupPreconditionError(
                f"Trace stop tool '{stop_tool}' is not installed or not executable",
                precondition="trace_tool",
            )

        if self.config.trace_require_root and not has_root_privileges():
            raise StartupPreconditionError(
                "Kernel I/O tracing requires root privileges "
                "(run as root or set monitor.trace.require_root = false)",
                precondition="privilege",
            )

        sink = create_sink(self.config)
        sink.register()
        self.sink = sink
        logger.info(f"Startup checks passed, events go to the '{self.config.sink}' sink")

    def build(self) -> MonitoringLoop:
        """Create the monitoring loop and its collaborators."""
        if self.sink is None:
            raise RuntimeError("check_preconditions() must succeed before build()")

        config = self.config
        sampler = Sampler(
            create_counter_source(config),
            threshold=config.alert_sample_value_threshold,
            excluded_instances=config.excluded_instances,
        )
        archive = None
        if config.storage.archive_summaries:
            archive = SummaryArchive(config.output_dir, config.storage)
        reporter = Reporter(self.sink, archive=archive)

        self.loop = MonitoringLoop(
            config=config,
            sampler=sampler,
            capture_adapter=create_capture_adapter(config),
            aggregator=Aggregator(
                config.top_k, config.excluded_processes, disk_names=resolve_disk_name
            ),
            reporter=reporter,
        )
        return self.loop

    def run(self, shutdown_event: threading.Event, once: bool = False) -> int:
        """
        Run the loop until shutdown (or for a single cycle).

        Returns:
            Number of cycles run.
        """
        loop = self.loop or self.build()
        loop.reporter.publish_started(self.config)
        return loop.run_forever(shutdown_event, max_cycles=1 if once else None)

    def close(self) -> None:
        if self.sink is not None:
            self.sink.close()
