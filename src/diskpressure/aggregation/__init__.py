"""
Aggregation of trace records into ranked summaries.
"""

from .aggregator import (
    DEFAULT_TOP_K,
    GROUP_COLUMNS,
    Aggregator,
    aggregate,
    exclude_processes,
)

__all__ = [
    "DEFAULT_TOP_K",
    "GROUP_COLUMNS",
    "Aggregator",
    "aggregate",
    "exclude_processes",
]
