"""
Counter sample models.

A counter source produces raw ``CounterReading`` tuples; the sampler turns each
one into an immutable, classified ``CounterSample``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class SampleStatus(Enum):
    """Classification of one counter reading against the alert threshold."""

    OVER_THRESHOLD = "over_threshold"
    NORMAL = "normal"


class CounterReading(NamedTuple):
    """An unclassified reading as returned by a counter source."""

    instance: str
    value: float
    timestamp: float


@dataclass(frozen=True)
class CounterSample:
    """
    One classified counter reading for a monitored instance.

    Attributes:
        instance: Instance identifier, e.g. a block device name.
        timestamp: Epoch seconds at which the value was read.
        value: The instantaneous counter value (current queue length).
        status: OVER_THRESHOLD or NORMAL, derived when the sample is created.
    """

    instance: str
    timestamp: float
    value: float
    status: SampleStatus

    @property
    def is_over_threshold(self) -> bool:
        return self.status is SampleStatus.OVER_THRESHOLD
