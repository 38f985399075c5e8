"""
Reporting: notification sinks and the reporter that writes events to them.
"""

from .reporter import EventId, Reporter, serialize_summary
from .sinks import (
    ConsoleSink,
    EventSeverity,
    JsonLinesSink,
    NotificationSink,
    SyslogSink,
    create_sink,
)

__all__ = [
    "ConsoleSink",
    "EventId",
    "EventSeverity",
    "JsonLinesSink",
    "NotificationSink",
    "Reporter",
    "SyslogSink",
    "create_sink",
    "serialize_summary",
]
