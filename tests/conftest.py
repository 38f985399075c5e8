"""
Pytest configuration and shared fixtures for the diskpressure test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the diskpressure project.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_monitor_data() -> Dict[str, Any]:
    """Sample ``[monitor]`` table for testing."""
    return {
        "general": {
            "log_level": "INFO",
            "output_dir": "logs",
        },
        "sampling": {
            "sample_frequency_seconds": 1.0,
            "counter_source": "diskstats",
            "device_pattern": r"^sd[a-z]+$",
            "excluded_instances": ["_total"],
        },
        "alert": {
            "sample_value_threshold": 2.0,
            "required_recurrence": 3,
        },
        "trace": {
            "capture_duration": 3.0,
            "min_time_between_traces": 60.0,
            "start_command": ["true"],
            "stop_command": ["cp", "{work_dir}/events.csv", "{output}"],
            "keep_artifacts": False,
            "require_root": False,
        },
        "report": {
            "log_name": "Application",
            "source_name": "diskpressure-test",
            "sink": "console",
            "top_k": 5,
            "excluded_processes": ["System"],
        },
        "storage": {
            "archive_summaries": False,
            "format": "parquet",
            "compression": "snappy",
        },
    }


@pytest.fixture
def monitor_config(sample_monitor_data, temp_dir):
    """A validated MonitorConfig built from the sample data."""
    from diskpressure.config.validators import validate_monitor_config

    return validate_monitor_config(sample_monitor_data, base_dir=temp_dir)


@pytest.fixture
def config_files(temp_dir, sample_monitor_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_monitor_data}, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture
def diskstats_file(temp_dir):
    """A /proc/diskstats snapshot: sda has 4 I/Os in flight, sdb 0."""
    content = (
        "   7       0 loop0 51 0 2156 13 0 0 0 0 0 28 13 0 0 0 0 0 0\n"
        "   8       0 sda 91827 2331 5203421 40122 77321 51233 3301288 90211 4 91210 130333 0 0 0 0 1021 2210\n"
        "   8       1 sda1 91012 2331 5190232 40001 77011 51233 3301200 90100 4 91000 130101 0 0 0 0 0 0\n"
        "   8      16 sdb 1201 0 40332 881 22 0 176 12 0 900 893 0 0 0 0 0 0\n"
        " 259       0 nvme0n1 4433 12 331221 1021 3311 441 90122 2210 0 3100 3231 0 0 0 0 0 0\n"
    )
    path = temp_dir / "diskstats"
    path.write_text(content)
    return path


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def create_sample(instance: str, timestamp: float, value: float, threshold: float = 2.0):
        """Create a classified counter sample."""
        from diskpressure.collectors.sampler import to_sample
        from diskpressure.models.samples import CounterReading

        return to_sample(CounterReading(instance, value, timestamp), threshold)

    @staticmethod
    def create_trace_row(
        io_time: str = "100",
        size: str = "4096",
        process: str = "sqlservr.exe",
        pid: str = "1234",
        disk: str = "0",
        io_type: str = "Write",
        filename: str = r"C:\data\db.mdf",
    ) -> Dict[str, str]:
        """Create a raw trace row as exported by a trace tool."""
        return {
            "IO Type": io_type,
            "Start Time": "1000",
            "End Time": "1100",
            "IO Time": io_time,
            "Disk Service Time": "80",
            "QD/I": "1",
            "Size": size,
            "Process Name": process,
            "Process ID": pid,
            "Disk": disk,
            "FileName": filename,
        }

    @staticmethod
    def create_trace_rows(count: int, **kwargs) -> List[Dict[str, str]]:
        return [TestUtils.create_trace_row(**kwargs) for _ in range(count)]


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from diskpressure.config import clear_config_cache, set_config_path

    clear_config_cache()
    # Always reset to original config path
    set_config_path(original_config_path)
