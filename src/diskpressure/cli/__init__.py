"""
Command-line interface for the diskpressure package.

This module provides the main CLI entry point for the monitor.
"""

from .main import main_cli
from .orchestrator import MonitorRunner

__all__ = [
    "MonitorRunner",
    "main_cli",
]
