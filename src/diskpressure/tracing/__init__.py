"""
Trace capture and trace-row parsing.

This package provides the capture adapter interface, the command-driven
adapter for external trace tools, and the parser that turns raw exported
rows into typed trace records.
"""

from ..models.config import MonitorConfig
from .base import AbstractCaptureAdapter
from .command_capture import CommandCaptureAdapter
from .parser import ParseResult, canonicalize_row, parse_trace_record, parse_trace_rows


def create_capture_adapter(config: MonitorConfig) -> AbstractCaptureAdapter:
    """Create the capture adapter described by ``[monitor.trace]``."""
    return CommandCaptureAdapter(
        start_command=config.trace_start_command,
        stop_command=config.trace_stop_command,
        duration_seconds=config.trace_capture_duration,
        work_dir=config.trace_work_dir,
        keep_artifacts=config.trace_keep_artifacts,
    )


__all__ = [
    "AbstractCaptureAdapter",
    "CommandCaptureAdapter",
    "ParseResult",
    "canonicalize_row",
    "create_capture_adapter",
    "parse_trace_record",
    "parse_trace_rows",
]
