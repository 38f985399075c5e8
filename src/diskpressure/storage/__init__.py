"""
Storage for archived trace summaries.

Summaries can be archived as compressed Parquet (via Polars) or as a JSON
document. Raw counter samples are never stored.
"""

from .archive import SummaryArchive
from .base import DataStorage
from .factory import create_storage
from .parquet_storage import ParquetStorage

__all__ = ["DataStorage", "ParquetStorage", "SummaryArchive", "create_storage"]
