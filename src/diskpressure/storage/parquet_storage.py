"""
Parquet storage for the summary archive, using Polars.

Parquet cannot be appended in place, so every write rewrites the whole file.
Writes go to a sibling temporary file that is then renamed over the target,
so an interrupted write never leaves a truncated archive behind.
"""

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional

import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


@contextmanager
def _replace_on_success(path: str) -> Iterator[Path]:
    """Yield a temporary path that replaces ``path`` if the block succeeds."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    staging = target.with_name(f".{target.name}.tmp")
    try:
        yield staging
        os.replace(staging, target)
    finally:
        staging.unlink(missing_ok=True)


class ParquetStorage(DataStorage):
    """
    Stores DataFrames as compressed Parquet and dictionaries as JSON.

    Args:
        compression: Parquet compression codec.
    """

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        try:
            with _replace_on_success(path) as staging:
                df.write_parquet(staging, compression=self.compression)
        except Exception as e:
            logger.error(f"Failed to write {len(df)} rows to {path}: {e}")
            raise
        logger.debug(f"Wrote {len(df)} rows to {path}")

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        try:
            df = pl.read_parquet(path, columns=columns) if columns else pl.read_parquet(path)
        except Exception as e:
            logger.error(f"Failed to read {path}: {e}")
            raise
        logger.debug(f"Read {len(df)} rows from {path}")
        return df

    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        if self.file_exists(path):
            df = pl.concat([self.load_dataframe(path), df], how="vertical_relaxed")
        self.save_dataframe(df, path)

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        try:
            with _replace_on_success(path) as staging:
                staging.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except Exception as e:
            logger.error(f"Failed to write JSON document {path}: {e}")
            raise

    def load_dict(self, path: str) -> Dict[str, Any]:
        try:
            return json.loads(Path(path).read_text(encoding="utf-8"))
        except Exception as e:
            logger.error(f"Failed to read JSON document {path}: {e}")
            raise

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()
