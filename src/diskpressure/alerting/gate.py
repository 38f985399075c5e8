"""
Cooldown gate for trace captures.

A capture may start only if none has started before, or if at least
``min_time_between_traces`` seconds have passed since the last one started.
The gate records the start time when it grants, before the capture runs, so a
second request can never be granted while a capture is in flight.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceGateState:
    """Time (in the gate's clock) at which the last capture started, if any."""

    last_capture_time: Optional[float] = None


@dataclass(frozen=True)
class GateDecision:
    """Outcome of one acquire attempt."""

    granted: bool
    # Seconds since the previous capture started; None if there was none.
    elapsed: Optional[float] = None
    # Seconds left until the gate would grant; 0.0 when granted.
    remaining: float = 0.0


def try_acquire_gate(
    state: TraceGateState, now: float, min_time_between_traces: float
) -> Tuple[GateDecision, TraceGateState]:
    """
    Decide whether a capture may start at ``now``.

    Args:
        state: Current gate state
        now: Current time, in the same clock as ``state``
        min_time_between_traces: Cooldown in seconds

    Returns:
        The decision and the state to keep. On grant the new state has
        ``last_capture_time == now``; on denial the state is unchanged.
    """
    if state.last_capture_time is None:
        return GateDecision(granted=True), TraceGateState(last_capture_time=now)

    elapsed = now - state.last_capture_time
    if elapsed >= min_time_between_traces:
        return (
            GateDecision(granted=True, elapsed=elapsed),
            TraceGateState(last_capture_time=now),
        )

    remaining = min_time_between_traces - elapsed
    return GateDecision(granted=False, elapsed=elapsed, remaining=remaining), state


class TraceGate:
    """
    Single-flight gate in front of the capture adapter.

    The check-and-mark step runs under a lock so the gate stays single-flight
    even if captures are ever requested from more than one thread.
    """

    def __init__(self, min_time_between_traces: float):
        if min_time_between_traces < 0:
            raise ValueError(
                f"min_time_between_traces must be >= 0, got {min_time_between_traces}"
            )
        self.min_time_between_traces = min_time_between_traces
        self._state = TraceGateState()
        self._lock = threading.Lock()

    def try_acquire(self, now: float) -> GateDecision:
        with self._lock:
            decision, self._state = try_acquire_gate(
                self._state, now, self.min_time_between_traces
            )

        if decision.granted:
            logger.debug(f"Trace gate granted at {now:.3f}")
        else:
            logger.debug(
                f"Trace gate denied: {decision.elapsed:.1f}s since last capture, "
                f"{decision.remaining:.1f}s of cooldown left"
            )
        return decision

    @property
    def last_capture_time(self) -> Optional[float]:
        return self._state.last_capture_time

    @property
    def state(self) -> TraceGateState:
        return self._state
