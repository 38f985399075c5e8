"""
Notification sinks.

A sink is an append-only destination for monitor events, identified by a log
name and a source name. ``register`` is called once at startup and raises
``StartupPreconditionError`` if the destination cannot be used; ``write``
appends one event.

Available sinks:

- ``console``: a dedicated logger, printed through the process log handlers
- ``syslog``: the local syslog daemon, via ``logging.handlers.SysLogHandler``
- ``jsonl``: one JSON object per line in a file
"""

import json
import logging
import logging.handlers
import socket
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Optional

from ..models.config import MonitorConfig
from ..validation import PublishError, StartupPreconditionError

logger = logging.getLogger(__name__)


class EventSeverity(Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return {
            EventSeverity.INFORMATION: logging.INFO,
            EventSeverity.WARNING: logging.WARNING,
            EventSeverity.ERROR: logging.ERROR,
        }[self]


class NotificationSink(ABC):
    """Abstract append-only event destination."""

    def __init__(self, log_name: str, source_name: str):
        self.log_name = log_name
        self.source_name = source_name

    def register(self) -> None:
        """Prepare the destination. Raises StartupPreconditionError on failure."""

    @abstractmethod
    def write(self, event_id: int, severity: EventSeverity, message: str) -> None:
        """
        Append one event.

        Raises:
            PublishError: If the event could not be stored.
        """
        pass

    def close(self) -> None:
        """Release any resources held by the sink."""


class ConsoleSink(NotificationSink):
    """Writes events to the ``diskpressure.events.<log>.<source>`` logger."""

    def __init__(self, log_name: str, source_name: str):
        super().__init__(log_name, source_name)
        self._logger = logging.getLogger(f"diskpressure.events.{log_name}.{source_name}")

    def write(self, event_id: int, severity: EventSeverity, message: str) -> None:
        self._logger.log(severity.log_level, f"[event {event_id}] {message}")


class SyslogSink(NotificationSink):
    """Sends events to syslog, tagged with the source name."""

    def __init__(self, log_name: str, source_name: str, address: str = "/dev/log"):
        super().__init__(log_name, source_name)
        self.address = address
        self._handler: Optional[logging.handlers.SysLogHandler] = None
        # Private logger outside the logging hierarchy, so events are not
        # duplicated through the root handlers.
        self._logger = logging.Logger(f"{log_name}.{source_name}")
        self._logger.propagate = False

    def _parse_address(self):
        if ":" in self.address and not self.address.startswith("/"):
            host, port = self.address.rsplit(":", 1)
            return host, int(port)
        return self.address

    def register(self) -> None:
        try:
            handler = logging.handlers.SysLogHandler(
                address=self._parse_address(),
                facility=logging.handlers.SysLogHandler.LOG_USER,
                socktype=socket.SOCK_DGRAM,
            )
        except (OSError, ValueError) as e:
            raise StartupPreconditionError(
                f"Cannot register syslog sink at {self.address}: {e}",
                precondition="sink",
            ) from e
        handler.ident = f"{self.source_name}: "
        handler.setFormatter(logging.Formatter(f"{self.log_name} %(message)s"))
        self._logger.addHandler(handler)
        self._handler = handler

    def write(self, event_id: int, severity: EventSeverity, message: str) -> None:
        if self._handler is None:
            raise PublishError("Syslog sink used before register()")
        self._logger.log(severity.log_level, f"[event {event_id}] {message}")

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None


class JsonLinesSink(NotificationSink):
    """Appends events as JSON lines to a file."""

    def __init__(self, log_name: str, source_name: str, path: Path):
        super().__init__(log_name, source_name)
        self.path = Path(path)

    def register(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            raise StartupPreconditionError(
                f"Cannot register event file {self.path}: {e}",
                precondition="sink",
            ) from e

    def write(self, event_id: int, severity: EventSeverity, message: str) -> None:
        event = {
            "time": time.time(),
            "log": self.log_name,
            "source": self.source_name,
            "event_id": event_id,
            "severity": severity.value,
            "message": message,
        }
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event, ensure_ascii=False) + "\n")
        except OSError as e:
            raise PublishError(f"Cannot append event to {self.path}: {e}") from e


def create_sink(config: MonitorConfig) -> NotificationSink:
    """Create the sink named by ``monitor.report.sink``."""
    if config.sink == "console":
        return ConsoleSink(config.log_name, config.source_name)
    if config.sink == "syslog":
        return SyslogSink(config.log_name, config.source_name, config.syslog_address)
    if config.sink == "jsonl":
        return JsonLinesSink(config.log_name, config.source_name, config.jsonl_path)
    raise ValueError(f"Unknown sink type: {config.sink}")
