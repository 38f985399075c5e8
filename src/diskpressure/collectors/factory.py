"""
Counter source factory.

Creates the configured counter source for the monitoring loop.
"""

import logging

from ..models.config import MonitorConfig
from .base import AbstractCounterSource

logger = logging.getLogger(__name__)


def create_counter_source(config: MonitorConfig) -> AbstractCounterSource:
    """
    Create the counter source named by ``monitor.sampling.counter_source``.

    Args:
        config: Validated monitor configuration

    Returns:
        Counter source instance

    Raises:
        ValueError: If the counter source type is unknown
    """
    if config.counter_source == "diskstats":
        from .diskstats import DiskstatsCounterSource

        logger.debug(f"Creating DiskstatsCounterSource on {config.diskstats_path}")
        return DiskstatsCounterSource(
            diskstats_path=config.diskstats_path,
            device_pattern=config.device_pattern,
        )
    raise ValueError(f"Unknown counter source: {config.counter_source}")
