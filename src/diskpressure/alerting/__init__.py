"""
Alerting: per-instance alert windows and the trace cooldown gate.
"""

from .gate import GateDecision, TraceGate, TraceGateState, try_acquire_gate
from .window import (
    AlertWindow,
    AlertWindowSet,
    WindowState,
    evaluate_qualification,
    update_window,
)

__all__ = [
    "AlertWindow",
    "AlertWindowSet",
    "WindowState",
    "evaluate_qualification",
    "update_window",
    "GateDecision",
    "TraceGate",
    "TraceGateState",
    "try_acquire_gate",
]
