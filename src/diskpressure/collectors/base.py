"""
Defines the abstract counter source interface.

A counter source returns one instantaneous reading per monitored instance
each time it is asked. It knows nothing about thresholds or windows; the
``Sampler`` classifies what it returns.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..models.samples import CounterReading

logger = logging.getLogger(__name__)


class AbstractCounterSource(ABC):
    """
    Abstract base class for counter sources.

    Implementations must raise ``TransientSampleError`` when the counter cannot
    be queried at all. If only some instances fail, they are simply left out of
    the returned list.
    """

    #: Human-readable name of the counter being sampled, used in log lines.
    counter_name: str = "counter"

    def __init__(self, **kwargs):
        self.source_kwargs = kwargs
        logger.info(f"Initializing {self.__class__.__name__} with extra_args: {kwargs}")

    @abstractmethod
    def sample(self) -> List[CounterReading]:
        """
        Read the current counter value for every instance.

        Returns:
            One ``CounterReading`` per instance. Aggregate pseudo-instances may
            be included; the sampler filters them.

        Raises:
            TransientSampleError: If the counter is unavailable this tick.
        """
        pass
