"""
Unit tests for trace-row parsing.
"""

import pytest

from diskpressure.models.trace import IoType
from diskpressure.tracing.parser import (
    canonicalize_row,
    parse_trace_record,
    parse_trace_rows,
    parse_unsigned,
)
from diskpressure.validation import MalformedRecordError


@pytest.mark.unit
class TestParseUnsigned:
    """Test cases for unsigned integer parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [("4096", 4096), ("0x1000", 4096), ("0X10", 16), ("1,024", 1024), (" 7 ", 7), ("0", 0),
         (str(2**64 - 1), 2**64 - 1), ("0xffffffffffffffff", 2**64 - 1)],
    )
    def test_valid(self, text, expected):
        assert parse_unsigned(text, "size") == expected

    @pytest.mark.parametrize("text", ["", "N/A", "-1", "12.5", "0xZZ", str(2**64), "0x10000000000000000"])
    def test_invalid(self, text):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_unsigned(text, "io_size_bytes")

        assert exc_info.value.field_name == "io_size_bytes"
        assert exc_info.value.raw_value == text


@pytest.mark.unit
class TestCanonicalizeRow:
    """Test cases for loose header matching."""

    def test_header_spellings(self):
        row = {"IO Type": "Read", "io_size_bytes": "1", "Disk Svc Time (us)": "3", "Other": "x"}

        fields = canonicalize_row(row)

        assert fields == {
            "io_type": "Read",
            "io_size_bytes": "1",
            "disk_service_time_micros": "3",
        }

    def test_none_values_become_empty(self):
        assert canonicalize_row({"Disk": None}) == {"disk": ""}

    def test_first_alias_wins(self):
        assert canonicalize_row({"Size": "1", "IO Size": "2"}) == {"io_size_bytes": "1"}


@pytest.mark.unit
class TestParseTraceRecord:
    """Test cases for single-row parsing."""

    def test_full_row(self, test_utils):
        record = parse_trace_record(test_utils.create_trace_row())

        assert record.io_type is IoType.WRITE
        assert record.io_time_micros == 100.0
        assert record.io_size_bytes == 4096
        assert record.process_name == "sqlservr.exe"
        assert record.process_id == 1234
        assert record.process_name_id == "sqlservr.exe:1234"
        assert record.disk == "0"
        assert record.filename == r"C:\data\db.mdf"
        assert record.queue_depth_at_init == 1

    def test_combined_process_column(self):
        row = {
            "IO Type": "read",
            "IO Time": "10",
            "Size": "512",
            "Process Name (PID)": "postgres (4711)",
            "Disk": "sda",
        }

        record = parse_trace_record(row)

        assert record.process_name == "postgres"
        assert record.process_id == 4711
        assert record.io_type is IoType.READ
        assert record.filename == ""

    def test_flush_type(self, test_utils):
        assert parse_trace_record(test_utils.create_trace_row(io_type="Flush")).io_type is IoType.FLUSH

    def test_unknown_io_type(self, test_utils):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_trace_record(test_utils.create_trace_row(io_type="Trim"))
        assert exc_info.value.field_name == "io_type"

    def test_missing_io_time(self, test_utils):
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_trace_record(test_utils.create_trace_row(io_time=""))
        assert exc_info.value.field_name == "io_time_micros"

    def test_missing_disk(self, test_utils):
        with pytest.raises(MalformedRecordError):
            parse_trace_record(test_utils.create_trace_row(disk=""))

    def test_missing_process(self):
        row = {"IO Type": "Read", "IO Time": "1", "Size": "1", "Disk": "0"}

        with pytest.raises(MalformedRecordError) as exc_info:
            parse_trace_record(row)
        assert exc_info.value.field_name == "process"


@pytest.mark.unit
class TestParseTraceRows:
    """Test cases for batch parsing."""

    def test_malformed_rows_are_counted(self, test_utils):
        rows = [
            test_utils.create_trace_row(),
            test_utils.create_trace_row(size="N/A"),
            test_utils.create_trace_row(io_type="?"),
            test_utils.create_trace_row(),
        ]

        result = parse_trace_rows(rows)

        assert len(result.records) == 2
        assert result.malformed == 2
        assert result.total == 4
        assert result.malformed_by_field == {"io_size_bytes": 1, "io_type": 1}

    def test_empty(self):
        result = parse_trace_rows([])

        assert result.records == []
        assert result.total == 0
