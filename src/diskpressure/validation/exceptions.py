"""
Exception hierarchy and error handling helpers.

Besides the configuration ``ValidationError``, this module defines the runtime
error taxonomy of the monitor. Only ``StartupPreconditionError`` is fatal; the
other errors are recovered locally by the component that catches them:

- ``TransientSampleError``: a counter query failed, the tick is skipped.
- ``CaptureError``: the trace tool failed, the cycle skips aggregation.
- ``MalformedRecordError``: one trace row could not be parsed and is dropped.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class DiskPressureError(Exception):
    """Base class for all errors raised by the diskpressure package."""


class ValidationError(DiskPressureError):
    """
    Exception raised when configuration or argument validation fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class StartupPreconditionError(DiskPressureError):
    """A requirement for running the monitor is not met (tool, privilege, sink)."""

    def __init__(self, message: str, precondition: str = "unknown"):
        super().__init__(message)
        self.precondition = precondition


class TransientSampleError(DiskPressureError):
    """The counter source could not be queried for this tick."""


class CaptureError(DiskPressureError):
    """The external trace tool failed or produced an unusable export."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedRecordError(DiskPressureError):
    """A raw trace row has a field that cannot be parsed."""

    def __init__(self, message: str, field_name: str, raw_value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.raw_value = raw_value


class PublishError(DiskPressureError):
    """The notification sink rejected or failed to store an event."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Log a CLI-level error and exit the process."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
