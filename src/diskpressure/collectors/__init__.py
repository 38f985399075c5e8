"""
Counter collection for disk queue monitoring.

This package provides:

- The abstract counter source interface
- A ``/proc/diskstats`` implementation reading per-device queue length
- The sampler that classifies readings against the alert threshold
- A factory selecting the configured counter source
"""

from .base import AbstractCounterSource
from .diskstats import DiskstatsCounterSource
from .factory import create_counter_source
from .sampler import Sampler, classify, to_sample

__all__ = [
    "AbstractCounterSource",
    "DiskstatsCounterSource",
    "Sampler",
    "classify",
    "create_counter_source",
    "to_sample",
]
