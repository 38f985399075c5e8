"""
Sliding-window alert state machine.

Each monitored instance owns a bounded window holding its most recent
``capacity`` classified samples, newest first. An instance is QUALIFIED when
its window is full and every sample in it is over threshold; otherwise it is
BUILDING. Qualification is level-triggered: it is recomputed from the window
contents on every update, so a saturated instance keeps reporting QUALIFIED
until a NORMAL sample enters or the window is reset.

The pure functions ``update_window`` and ``evaluate_qualification`` hold the
logic; ``AlertWindow`` and ``AlertWindowSet`` are thin stateful wrappers used
by the monitoring loop.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from ..models.samples import CounterSample

logger = logging.getLogger(__name__)

Window = Tuple[CounterSample, ...]


class WindowState(Enum):
    BUILDING = "building"
    QUALIFIED = "qualified"


def update_window(window: Window, sample: CounterSample, capacity: int) -> Window:
    """
    Push a sample onto the front of a window, evicting the oldest beyond capacity.

    Args:
        window: Current samples, newest first
        sample: The new sample for the same instance
        capacity: Maximum window length (the required recurrence)

    Returns:
        The new window, newest first, with at most ``capacity`` samples

    Raises:
        ValueError: If capacity is not positive, the sample belongs to another
            instance, or it is older than the newest sample in the window
    """
    if capacity < 1:
        raise ValueError(f"Window capacity must be >= 1, got {capacity}")
    if window:
        newest = window[0]
        if sample.instance != newest.instance:
            raise ValueError(
                f"Sample for '{sample.instance}' pushed onto window of '{newest.instance}'"
            )
        if sample.timestamp < newest.timestamp:
            raise ValueError(
                f"Out-of-order sample for '{sample.instance}': "
                f"{sample.timestamp} < {newest.timestamp}"
            )
    return ((sample,) + window)[:capacity]


def evaluate_qualification(window: Window, capacity: int) -> bool:
    """Return True iff the window is full and every sample is over threshold."""
    return len(window) == capacity and all(s.is_over_threshold for s in window)


class AlertWindow:
    """Bounded, newest-first sample history for a single instance."""

    def __init__(self, instance: str, capacity: int):
        if capacity < 1:
            raise ValueError(f"Window capacity must be >= 1, got {capacity}")
        self.instance = instance
        self.capacity = capacity
        self._samples: Window = ()

    def update(self, sample: CounterSample) -> WindowState:
        if sample.instance != self.instance:
            raise ValueError(
                f"Sample for '{sample.instance}' pushed onto window of '{self.instance}'"
            )
        self._samples = update_window(self._samples, sample, self.capacity)
        return self.state

    def clear(self) -> None:
        self._samples = ()

    @property
    def samples(self) -> Window:
        return self._samples

    @property
    def qualified(self) -> bool:
        return evaluate_qualification(self._samples, self.capacity)

    @property
    def state(self) -> WindowState:
        return WindowState.QUALIFIED if self.qualified else WindowState.BUILDING

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        values = ", ".join(f"{s.value:g}" for s in self._samples)
        return f"AlertWindow({self.instance!r}, {self.state.value}, [{values}])"


class AlertWindowSet:
    """
    The collection of alert windows, one per instance name.

    Windows are created lazily on the first sample for an instance. Instances
    that miss a tick keep their window unchanged.
    """

    def __init__(self, required_recurrence: int):
        if required_recurrence < 1:
            raise ValueError(
                f"required_recurrence must be >= 1, got {required_recurrence}"
            )
        self.required_recurrence = required_recurrence
        self._windows: Dict[str, AlertWindow] = {}

    def update(self, instance: str, sample: CounterSample) -> WindowState:
        """
        Record a sample for an instance and return the instance's new state.

        Out-of-order samples are dropped and leave the window untouched.
        """
        window = self._windows.get(instance)
        if window is None:
            window = AlertWindow(instance, self.required_recurrence)
            self._windows[instance] = window

        previous = window.state
        try:
            state = window.update(sample)
        except ValueError as e:
            logger.warning(f"Dropping sample for '{instance}': {e}")
            return previous

        if state is not previous:
            logger.info(
                f"Instance '{instance}' {previous.value} -> {state.value} "
                f"(latest value {sample.value:g})"
            )
        return state

    def update_all(self, samples: Iterable[CounterSample]) -> None:
        for sample in samples:
            self.update(sample.instance, sample)

    def qualifying_instances(self) -> List[str]:
        """Instances currently QUALIFIED, in the order they were first seen."""
        return [name for name, window in self._windows.items() if window.qualified]

    def reset(self) -> None:
        """Clear every window, e.g. after a capture has run."""
        for window in self._windows.values():
            window.clear()
        logger.debug(f"Cleared {len(self._windows)} alert windows")

    def window(self, instance: str) -> AlertWindow:
        return self._windows[instance]

    def instances(self) -> List[str]:
        return list(self._windows)

    def __contains__(self, instance: str) -> bool:
        return instance in self._windows

    def __len__(self) -> int:
        return len(self._windows)
