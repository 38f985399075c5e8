"""
Reporter: turns monitor decisions and trace summaries into sink events.

Every ``publish_*`` method swallows sink failures after logging them; a broken
sink must never stop the monitoring loop. There is no retry.
"""

import json
import logging
from enum import IntEnum
from typing import List, Optional

from ..alerting.gate import GateDecision
from ..models.config import MonitorConfig
from ..models.runtime import DiskInfo
from ..models.trace import TraceSummary
from ..storage.archive import SummaryArchive
from ..system.topology import describe_instances
from ..validation import ErrorSeverity, handle_error
from .sinks import EventSeverity, NotificationSink

logger = logging.getLogger(__name__)


class EventId(IntEnum):
    MONITOR_STARTED = 1000
    ALERT_QUALIFIED = 1001
    CAPTURE_DENIED = 1002
    CAPTURE_FAILED = 1003
    TRACE_SUMMARY = 1004


def serialize_summary(summary: TraceSummary) -> str:
    """Compact JSON form of a summary, one object per ranked row."""
    return json.dumps(summary.to_dict(), separators=(",", ":"), ensure_ascii=False)


class Reporter:
    """
    Publishes events to a notification sink, optionally archiving summaries.

    Attributes:
        sink: The registered notification sink.
        archive: Summary archive, or None when archiving is disabled.
        failed_publishes: Count of events the sink failed to store.
    """

    def __init__(self, sink: NotificationSink, archive: Optional[SummaryArchive] = None):
        self.sink = sink
        self.archive = archive
        self.failed_publishes = 0

    def _write(self, event_id: EventId, severity: EventSeverity, message: str) -> bool:
        try:
            self.sink.write(int(event_id), severity, message)
            return True
        except Exception as e:
            self.failed_publishes += 1
            handle_error(
                e,
                f"publishing event {event_id.name}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return False

    def publish(self, summary: TraceSummary) -> bool:
        """
        Publish a ranked trace summary.

        Returns:
            True if the sink accepted the event.
        """
        published = self._write(
            EventId.TRACE_SUMMARY, EventSeverity.WARNING, serialize_summary(summary)
        )
        if self.archive is not None:
            try:
                self.archive.append(summary)
            except Exception as e:
                handle_error(
                    e, "archiving trace summary", severity=ErrorSeverity.WARNING,
                    reraise=False, logger=logger,
                )
        return published

    def publish_started(self, config: MonitorConfig) -> bool:
        message = (
            f"Disk queue monitor started: threshold {config.alert_sample_value_threshold:g}, "
            f"{config.alert_required_recurrence} consecutive samples every "
            f"{config.sample_frequency_seconds:g}s, {config.trace_capture_duration:g}s traces "
            f"at most every {config.min_time_between_traces:g}s"
        )
        return self._write(EventId.MONITOR_STARTED, EventSeverity.INFORMATION, message)

    def publish_alert(self, instances: List[str], disks: List[DiskInfo]) -> bool:
        described = "; ".join(describe_instances(instances, disks))
        message = f"Sustained disk queue pressure on {described}; capturing I/O trace"
        return self._write(EventId.ALERT_QUALIFIED, EventSeverity.WARNING, message)

    def publish_capture_denied(self, instances: List[str], decision: GateDecision) -> bool:
        message = (
            f"Disk queue pressure on {', '.join(instances)}; trace skipped, last capture "
            f"{decision.elapsed:.0f}s ago ({decision.remaining:.0f}s of cooldown left)"
        )
        return self._write(EventId.CAPTURE_DENIED, EventSeverity.INFORMATION, message)

    def publish_capture_failed(self, instances: List[str], error: Exception) -> bool:
        message = f"Trace capture for {', '.join(instances)} failed: {error}"
        return self._write(EventId.CAPTURE_FAILED, EventSeverity.ERROR, message)
