"""
The disk pressure control loop.

Each cycle samples every monitored instance, pushes the samples into the
per-instance alert windows and, when any window is qualified, asks the trace
gate for a capture. A granted capture runs synchronously (no sampling happens
meanwhile), is aggregated into a ranked summary and published.

All mutable state lives in ``MonitorState``; the decision logic itself is the
pure functions in ``alerting``, ``collectors.sampler`` and ``aggregation``.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..aggregation import Aggregator
from ..alerting import AlertWindowSet, TraceGate
from ..collectors.sampler import Sampler
from ..models.config import MonitorConfig
from ..models.runtime import CycleOutcome, CycleResult, DiskInfo
from ..reporting import Reporter
from ..system.topology import disk_info
from ..tracing import AbstractCaptureAdapter
from ..validation import CaptureError, ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


@dataclass
class MonitorState:
    """Mutable state owned by one MonitoringLoop."""

    windows: AlertWindowSet
    gate: TraceGate
    cycles: int = 0
    captures: int = 0
    failed_captures: int = 0
    crashed_cycles: int = 0

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "MonitorState":
        return cls(
            windows=AlertWindowSet(config.alert_required_recurrence),
            gate=TraceGate(config.min_time_between_traces),
        )


class MonitoringLoop:
    """
    Drives sampling, alert evaluation, capture and reporting.

    Args:
        config: Validated monitor configuration.
        sampler: Produces classified samples each cycle.
        capture_adapter: Runs trace captures.
        aggregator: Turns raw capture rows into a ranked summary.
        reporter: Publishes events and summaries.
        state: Alert windows and trace gate; built from config if omitted.
        topology: Returns disk descriptions used to enrich alert events.
        clock: Monotonic clock driving the trace gate.
        wall_clock: Epoch clock used to timestamp summaries.
    """

    def __init__(
        self,
        config: MonitorConfig,
        sampler: Sampler,
        capture_adapter: AbstractCaptureAdapter,
        aggregator: Aggregator,
        reporter: Reporter,
        state: Optional[MonitorState] = None,
        topology: Callable[[], List[DiskInfo]] = disk_info,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.sampler = sampler
        self.capture_adapter = capture_adapter
        self.aggregator = aggregator
        self.reporter = reporter
        self.state = state or MonitorState.from_config(config)
        self.topology = topology
        self.clock = clock
        self.wall_clock = wall_clock
        # Last capture time for which a denial event was already published.
        self._denial_reported_for: Optional[float] = None

    def _describe_disks(self) -> List[DiskInfo]:
        try:
            return self.topology()
        except OSError as e:
            handle_error(e, "reading disk topology", severity=ErrorSeverity.WARNING,
                         reraise=False, logger=logger)
            return []

    def run_cycle(self, now: Optional[float] = None) -> CycleOutcome:
        """
        Run one sample/evaluate/capture cycle.

        Args:
            now: Gate clock reading for this cycle; ``clock()`` if omitted.

        Returns:
            CycleOutcome describing what the cycle did.
        """
        self.state.cycles += 1

        failed_before = self.sampler.failed_ticks
        samples = self.sampler.tick()
        if self.sampler.failed_ticks != failed_before:
            return CycleOutcome(result=CycleResult.SAMPLE_FAILED)

        windows = self.state.windows
        windows.update_all(samples)

        qualifying = windows.qualifying_instances()
        if not qualifying:
            return CycleOutcome(result=CycleResult.SAMPLED, samples=samples)

        now = self.clock() if now is None else now
        decision = self.state.gate.try_acquire(now)
        if not decision.granted:
            logger.info(
                f"Pressure on {', '.join(qualifying)} but last trace was "
                f"{decision.elapsed:.0f}s ago, skipping capture"
            )
            last = self.state.gate.last_capture_time
            if self._denial_reported_for != last:
                self.reporter.publish_capture_denied(qualifying, decision)
                self._denial_reported_for = last
            return CycleOutcome(
                result=CycleResult.CAPTURE_DENIED,
                samples=samples,
                qualifying_instances=qualifying,
                gate_elapsed=decision.elapsed,
            )

        return self._capture_and_report(samples, qualifying)

    def _capture_and_report(self, samples, qualifying: List[str]) -> CycleOutcome:
        logger.warning(f"Sustained disk queue pressure on {', '.join(qualifying)}")
        self.reporter.publish_alert(qualifying, self._describe_disks())

        captured_at = self.wall_clock()
        duration = self.config.trace_capture_duration
        self.state.captures += 1
        try:
            raw_rows = self.capture_adapter.capture(duration)
        except CaptureError as e:
            self.state.failed_captures += 1
            handle_error(e, "trace capture", severity=ErrorSeverity.ERROR,
                         reraise=False, logger=logger)
            self.reporter.publish_capture_failed(qualifying, e)
            return CycleOutcome(
                result=CycleResult.CAPTURE_FAILED,
                samples=samples,
                qualifying_instances=qualifying,
                error=str(e),
            )
        finally:
            # Windows restart after every granted capture, failed or not.
            self.state.windows.reset()

        try:
            summary = self.aggregator.summarize(
                raw_rows,
                captured_at=captured_at,
                capture_duration=duration,
                instances=list(qualifying),
            )
        except Exception as e:
            handle_error(e, "aggregating trace rows", severity=ErrorSeverity.ERROR,
                         reraise=False, logger=logger)
            return CycleOutcome(
                result=CycleResult.AGGREGATION_FAILED,
                samples=samples,
                qualifying_instances=qualifying,
                error=str(e),
            )
        self.reporter.publish(summary)
        return CycleOutcome(
            result=CycleResult.REPORTED,
            samples=samples,
            qualifying_instances=qualifying,
            summary=summary,
        )

    def run_forever(
        self, shutdown_event: threading.Event, max_cycles: Optional[int] = None
    ) -> int:
        """
        Run cycles until ``shutdown_event`` is set.

        The event is checked between cycles only; a capture in progress
        always runs to completion.

        Args:
            shutdown_event: Set to request a graceful stop.
            max_cycles: Stop after this many cycles (None = unbounded).

        Returns:
            Number of cycles run.
        """
        interval = self.config.sample_frequency_seconds
        cycles = 0
        logger.info(f"Monitoring loop started, sampling every {interval:g}s")
        while not shutdown_event.is_set():
            started = self.clock()
            cycles += 1
            try:
                outcome = self.run_cycle(now=started)
                logger.debug(f"Cycle {cycles}: {outcome.result.value}")
            except Exception as e:
                self.state.crashed_cycles += 1
                handle_error(e, f"monitoring cycle {cycles}", severity=ErrorSeverity.ERROR,
                             reraise=False, logger=logger)
            if max_cycles is not None and cycles >= max_cycles:
                break
            # A capture can take longer than the interval; never wait negative.
            wait = max(0.0, interval - (self.clock() - started))
            shutdown_event.wait(wait)

        logger.info(
            f"Monitoring loop stopped after {cycles} cycles, "
            f"{self.state.captures} captures ({self.state.failed_captures} failed)"
        )
        return cycles
