"""
Sampler: turns raw counter readings into classified samples.

``classify`` is the pure threshold rule; ``Sampler.tick`` queries the counter
source once, drops excluded pseudo-instances such as ``_total`` and classifies
the rest. A failed query yields no samples for the tick instead of raising.
"""

import logging
from typing import Iterable, List

from ..models.samples import CounterReading, CounterSample, SampleStatus
from ..validation import TransientSampleError
from .base import AbstractCounterSource

logger = logging.getLogger(__name__)


def classify(value: float, threshold: float) -> SampleStatus:
    """OVER_THRESHOLD iff ``value >= threshold``."""
    return SampleStatus.OVER_THRESHOLD if value >= threshold else SampleStatus.NORMAL


def to_sample(reading: CounterReading, threshold: float) -> CounterSample:
    return CounterSample(
        instance=reading.instance,
        timestamp=reading.timestamp,
        value=reading.value,
        status=classify(reading.value, threshold),
    )


class Sampler:
    """
    Pulls one reading per instance from a counter source and classifies it.

    Attributes:
        source: The counter source queried on every tick.
        threshold: Minimum value classified as OVER_THRESHOLD.
        excluded_instances: Lower-cased instance names never sampled.
        failed_ticks: Number of ticks lost to transient query failures.
    """

    def __init__(
        self,
        source: AbstractCounterSource,
        threshold: float,
        excluded_instances: Iterable[str] = ("_total",),
    ):
        self.source = source
        self.threshold = threshold
        self.excluded_instances = {name.lower() for name in excluded_instances}
        self.failed_ticks = 0

    def tick(self) -> List[CounterSample]:
        """
        Take one sample per monitored instance.

        Returns:
            Classified samples, or an empty list if the counter source failed.
        """
        try:
            readings = self.source.sample()
        except TransientSampleError as e:
            self.failed_ticks += 1
            logger.warning(f"Skipping tick, {self.source.counter_name} unavailable: {e}")
            return []

        samples = [
            to_sample(reading, self.threshold)
            for reading in readings
            if reading.instance.lower() not in self.excluded_instances
        ]
        logger.debug(
            "Sampled " + ", ".join(f"{s.instance}={s.value:g}" for s in samples)
        )
        return samples
