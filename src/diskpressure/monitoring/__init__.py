"""
Monitoring loop and its shutdown handling.
"""

from .loop import MonitoringLoop, MonitorState
from .signals import SignalHandler

__all__ = ["MonitorState", "MonitoringLoop", "SignalHandler"]
