"""
Storage configuration model and validation.

This module defines the StorageConfig dataclass which controls whether
published trace summaries are archived, and in which format.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass


@dataclass
class StorageConfig:
    """
    The `[monitor.storage]` table.

    Attributes:
        archive_summaries: Append every published summary to
            `<output_dir>/summaries.<format>`.
        format: `parquet` (one row per ranked SummaryRow) or `json` (one
            document holding every summary).
        compression: Parquet codec; ignored for `json`.
    """

    archive_summaries: bool = False
    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Args:
            config_dict: Dictionary containing storage configuration

        Returns:
            StorageConfig instance

        Raises:
            ValueError: If invalid configuration values are provided
        """
        archive_summaries = config_dict.get("archive_summaries", False)
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")

        if not isinstance(archive_summaries, bool):
            raise ValueError("archive_summaries must be a boolean")

        if format_type not in ("parquet", "json"):
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in (
            "snappy",
            "gzip",
            "brotli",
            "lz4",
            "zstd",
        ):
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(
            archive_summaries=archive_summaries,
            format=format_type,
            compression=compression,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "archive_summaries": self.archive_summaries,
            "format": self.format,
            "compression": self.compression,
        }
