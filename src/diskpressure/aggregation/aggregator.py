"""
Aggregation of trace records into a ranked summary.

Records are grouped by (disk, process name:pid, I/O type, file). Each group
gets the sum of its I/O times, the sum of its I/O sizes and its record count.
Groups are ranked by total bytes, largest first; groups with equal totals
keep the order in which they were first encountered, so the ranking is
deterministic for a given input order and the set of rows does not depend on
input order at all.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import polars as pl

from ..models.trace import SummaryRow, TraceRecord, TraceSummary
from ..tracing.parser import RawRow, parse_trace_rows

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5

GROUP_COLUMNS = ["disk", "process_name_id", "io_type", "filename"]

_SCHEMA = {
    "disk": pl.Utf8,
    "process_name_id": pl.Utf8,
    "io_type": pl.Utf8,
    "filename": pl.Utf8,
    "io_time_micros": pl.Float64,
    "size_high": pl.UInt64,
    "size_low": pl.UInt64,
}

# Sizes are summed as two 32-bit halves so the UInt64 column sums cannot wrap.
_HALF_BITS = 32
_LOW_MASK = (1 << _HALF_BITS) - 1

RecordPredicate = Callable[[TraceRecord], bool]


def exclude_processes(process_names: Iterable[str]) -> RecordPredicate:
    """
    Build a predicate that rejects records from the named processes.

    Matching is on process name only, case-insensitively, so ``System``
    excludes every ``System:<pid>``.
    """
    excluded = {name.lower() for name in process_names}

    def include(record: TraceRecord) -> bool:
        return record.process_name.lower() not in excluded

    return include


def _records_frame(records: Sequence[TraceRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "disk": [r.disk for r in records],
            "process_name_id": [r.process_name_id for r in records],
            "io_type": [r.io_type.value for r in records],
            "filename": [r.filename for r in records],
            "io_time_micros": [r.io_time_micros for r in records],
            "size_high": [r.io_size_bytes >> _HALF_BITS for r in records],
            "size_low": [r.io_size_bytes & _LOW_MASK for r in records],
        },
        schema=_SCHEMA,
    )


def aggregate(
    records: Sequence[TraceRecord],
    top_k: int = DEFAULT_TOP_K,
    include: Optional[RecordPredicate] = None,
) -> List[SummaryRow]:
    """
    Group, sum and rank trace records.

    Args:
        records: Parsed trace records, in capture order
        top_k: Maximum number of rows to return
        include: Optional predicate applied before grouping; records for
            which it returns False are ignored

    Returns:
        At most ``top_k`` SummaryRows, sorted by ``sum_io_size_bytes``
        descending with first-encountered order breaking ties
    """
    if top_k < 1:
        raise ValueError(f"top_k must be >= 1, got {top_k}")

    if include is not None:
        records = [r for r in records if include(r)]
    if not records:
        return []

    grouped = (
        _records_frame(records)
        .group_by(GROUP_COLUMNS, maintain_order=True)
        .agg(
            pl.col("io_time_micros").sum().alias("sum_io_time"),
            pl.col("size_high").sum(),
            pl.col("size_low").sum(),
            pl.len().alias("io_count"),
        )
    )

    rows = [
        SummaryRow(
            disk=row["disk"],
            process_name_id=row["process_name_id"],
            io_type=row["io_type"],
            filename=row["filename"],
            sum_io_time=row["sum_io_time"],
            sum_io_size_bytes=(int(row["size_high"]) << _HALF_BITS) + int(row["size_low"]),
            io_count=int(row["io_count"]),
        )
        for row in grouped.iter_rows(named=True)
    ]
    # Groups are in first-seen order and sorted() is stable, which breaks ties.
    rows = sorted(rows, key=lambda r: r.sum_io_size_bytes, reverse=True)
    return rows[:top_k]


class Aggregator:
    """
    Turns the raw rows of one capture into a ``TraceSummary``.

    Attributes:
        top_k: Number of ranked rows kept.
        excluded_processes: Process names dropped before grouping.
        disk_names: Optional mapping applied to each record's disk before
            grouping, e.g. device number to device name.
    """

    def __init__(
        self,
        top_k: int = DEFAULT_TOP_K,
        excluded_processes: Iterable[str] = (),
        disk_names: Optional[Callable[[str], str]] = None,
    ):
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        self.top_k = top_k
        self.excluded_processes = list(excluded_processes)
        self._include = (
            exclude_processes(self.excluded_processes) if self.excluded_processes else None
        )
        self.disk_names = disk_names

    def _rename_disks(self, records: List[TraceRecord]) -> List[TraceRecord]:
        names: Dict[str, str] = {}
        renamed = []
        for record in records:
            if record.disk not in names:
                names[record.disk] = self.disk_names(record.disk)
            renamed.append(replace(record, disk=names[record.disk]))
        return renamed

    def summarize(self, raw_rows: Iterable[RawRow], **summary_fields) -> TraceSummary:
        """
        Parse, filter and aggregate one capture's rows.

        Malformed rows are dropped and counted, never aborting the batch.
        Extra keyword arguments (``captured_at``, ``instances``, ...) are
        stored on the returned summary.
        """
        parsed = parse_trace_rows(raw_rows)

        records = parsed.records
        excluded = 0
        if self._include is not None:
            kept = [r for r in records if self._include(r)]
            excluded = len(records) - len(kept)
            records = kept
        if self.disk_names is not None:
            records = self._rename_disks(records)

        rows = aggregate(records, top_k=self.top_k)
        logger.info(
            f"Aggregated {len(records)} records into {len(rows)} ranked rows "
            f"({parsed.malformed} malformed, {excluded} excluded)"
        )
        return TraceSummary(
            rows=rows,
            total_records=parsed.total,
            malformed_records=parsed.malformed,
            excluded_records=excluded,
            **summary_fields,
        )
