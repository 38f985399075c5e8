"""
Archive of published trace summaries.

Each published summary is flattened to one row per ranked SummaryRow, tagged
with the capture time and the alerting instances, and appended to a single
archive under the output directory. Only summaries are kept; raw counter
samples never outlive their alert window.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import polars as pl

from ..config.storage_config import StorageConfig
from ..models.trace import TraceSummary
from .factory import create_storage

logger = logging.getLogger(__name__)

_ARCHIVE_SCHEMA = {
    "captured_at": pl.Float64,
    "rank": pl.UInt32,
    "instances": pl.Utf8,
    "disk": pl.Utf8,
    "process_name_id": pl.Utf8,
    "io_type": pl.Utf8,
    "filename": pl.Utf8,
    "sum_io_time": pl.Float64,
    "sum_io_size_bytes": pl.UInt64,
    "io_count": pl.UInt32,
}


class SummaryArchive:
    """
    Appends trace summaries to ``summaries.parquet`` or ``summaries.json``.
    """

    def __init__(self, output_dir: Path, storage_config: StorageConfig):
        self.output_dir = Path(output_dir)
        self.storage_format = storage_config.format
        self.storage = create_storage(storage_config.format, storage_config.compression)

        extension = "parquet" if self.storage_format == "parquet" else "json"
        self.archive_path = self.output_dir / f"summaries.{extension}"
        logger.debug(f"Initialized SummaryArchive at {self.archive_path}")

    @staticmethod
    def flatten(summary: TraceSummary) -> List[Dict[str, Any]]:
        instances = ",".join(summary.instances)
        return [
            {
                "captured_at": summary.captured_at,
                "rank": rank,
                "instances": instances,
                **row.to_dict(),
            }
            for rank, row in enumerate(summary.rows, start=1)
        ]

    def append(self, summary: TraceSummary) -> None:
        """Append one summary; empty summaries are skipped."""
        if not summary.rows:
            logger.debug("Summary has no rows, nothing to archive")
            return

        path = str(self.archive_path)
        if self.storage_format == "parquet":
            df = pl.from_dicts(self.flatten(summary), schema=_ARCHIVE_SCHEMA)
            self.storage.append_dataframe(df, path)
        else:
            document = (
                self.storage.load_dict(path)
                if self.storage.file_exists(path)
                else {"summaries": []}
            )
            document["summaries"].append(summary.to_dict())
            self.storage.save_dict(document, path)

        logger.info(f"Archived {len(summary.rows)} summary rows to {self.archive_path}")

    def load(self) -> pl.DataFrame:
        """Load every archived row as a DataFrame (empty if nothing archived)."""
        path = str(self.archive_path)
        if not self.storage.file_exists(path):
            return pl.DataFrame(schema=_ARCHIVE_SCHEMA)
        if self.storage_format == "parquet":
            return self.storage.load_dataframe(path)

        rows = []
        for entry in self.storage.load_dict(path).get("summaries", []):
            summary_rows = entry.get("rows", [])
            for rank, row in enumerate(summary_rows, start=1):
                rows.append(
                    {
                        "captured_at": entry.get("captured_at", 0.0),
                        "rank": rank,
                        "instances": ",".join(entry.get("instances", [])),
                        **row,
                    }
                )
        return pl.from_dicts(rows, schema=_ARCHIVE_SCHEMA)
