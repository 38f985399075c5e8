"""
Unit tests for configuration validation functionality.

Tests the validation of every ``[monitor]`` section, default values, path
resolution and error reporting.
"""

from pathlib import Path

import pytest

from diskpressure.config.validators import validate_monitor_config
from diskpressure.validation import (
    ValidationError,
    validate_command_argv,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
    validate_string_list,
)


def minimal_monitor_data():
    return {
        "trace": {
            "start_command": ["tracer", "start"],
            "stop_command": ["tracer", "stop", "-o", "{output}"],
        }
    }


@pytest.mark.unit
class TestMonitorConfigValidation:
    """Test cases for monitor configuration validation."""

    def test_validate_monitor_config_success(self, sample_monitor_data, temp_dir):
        config = validate_monitor_config(sample_monitor_data, base_dir=temp_dir)

        assert config.sample_frequency_seconds == 1.0
        assert config.alert_sample_value_threshold == 2.0
        assert config.alert_required_recurrence == 3
        assert config.min_time_between_traces == 60.0
        assert config.log_name == "Application"
        assert config.source_name == "diskpressure-test"
        assert config.excluded_processes == ["System"]
        assert config.output_dir == temp_dir / "logs"

    def test_defaults(self):
        config = validate_monitor_config(minimal_monitor_data())

        assert config.sample_frequency_seconds == 1.0
        assert config.alert_sample_value_threshold == 2.0
        assert config.alert_required_recurrence == 5
        assert config.trace_capture_duration == 3.0
        assert config.min_time_between_traces == 300.0
        assert config.excluded_instances == ["_total"]
        assert config.sink == "console"
        assert config.top_k == 5
        assert config.trace_require_root is True
        assert config.storage.archive_summaries is False

    def test_missing_trace_commands(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config({"trace": {"start_command": ["tracer"]}})

        assert exc_info.value.field_name == "monitor.trace"

    def test_stop_command_needs_output_placeholder(self):
        data = minimal_monitor_data()
        data["trace"]["stop_command"] = ["tracer", "stop"]

        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(data)

        assert "{output}" in str(exc_info.value)

    def test_config_dir_placeholder(self, temp_dir):
        data = minimal_monitor_data()
        data["trace"]["start_command"] = ["bpftrace", "{config_dir}/biotrace.bt"]

        config = validate_monitor_config(data, base_dir=temp_dir)

        assert config.trace_start_command == ["bpftrace", f"{temp_dir}/biotrace.bt"]

    @pytest.mark.parametrize(
        "section, key, value",
        [
            ("sampling", "sample_frequency_seconds", 0),
            ("sampling", "sample_frequency_seconds", "fast"),
            ("sampling", "counter_source", "perfmon"),
            ("sampling", "device_pattern", "(unclosed"),
            ("alert", "required_recurrence", 0),
            ("alert", "required_recurrence", 2.5),
            ("alert", "sample_value_threshold", -1),
            ("trace", "capture_duration", 0),
            ("trace", "keep_artifacts", "yes"),
            ("report", "sink", "eventlog"),
            ("report", "top_k", 0),
            ("report", "log_name", ""),
            ("general", "log_level", "LOUD"),
        ],
    )
    def test_invalid_values(self, section, key, value):
        data = minimal_monitor_data()
        data.setdefault(section, {})[key] = value

        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(data)

        assert exc_info.value.field_name == f"monitor.{section}.{key}"

    def test_log_level_case_insensitive(self):
        data = minimal_monitor_data()
        data["general"] = {"log_level": "debug"}

        assert validate_monitor_config(data).log_level == "DEBUG"

    def test_section_must_be_table(self):
        data = minimal_monitor_data()
        data["alert"] = 5

        with pytest.raises(ValidationError):
            validate_monitor_config(data)

    def test_invalid_storage(self):
        data = minimal_monitor_data()
        data["storage"] = {"format": "csv"}

        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(data)

        assert exc_info.value.field_name == "monitor.storage"

    def test_absolute_paths_kept(self, temp_dir):
        data = minimal_monitor_data()
        data["report"] = {"jsonl_path": "/var/log/diskpressure.jsonl"}

        config = validate_monitor_config(data, base_dir=temp_dir)

        assert config.jsonl_path == Path("/var/log/diskpressure.jsonl")

    def test_short_cooldown_warns(self, caplog):
        data = minimal_monitor_data()
        data["trace"]["capture_duration"] = 10.0
        data["trace"]["min_time_between_traces"] = 5.0

        validate_monitor_config(data)

        assert "shorter than the capture duration" in caplog.text


@pytest.mark.unit
class TestValueValidators:
    """Test cases for the individual value validators."""

    def test_positive_integer_rejects_bool(self):
        with pytest.raises(ValidationError):
            validate_positive_integer(True, field_name="n")

    def test_positive_integer_range(self):
        assert validate_positive_integer(5, min_value=1, max_value=10) == 5
        with pytest.raises(ValidationError):
            validate_positive_integer(11, min_value=1, max_value=10)

    def test_positive_float_accepts_int(self):
        assert validate_positive_float(3, min_value=0.0) == 3.0

    def test_enum_choice_returns_declared_case(self):
        assert validate_enum_choice("warning", ["DEBUG", "WARNING"], case_sensitive=False) == "WARNING"

    def test_regex_pattern(self):
        assert validate_regex_pattern(r"^sd[a-z]+$") == r"^sd[a-z]+$"
        with pytest.raises(ValidationError):
            validate_regex_pattern("[")

    def test_string_list(self):
        assert validate_string_list(["a", "b"]) == ["a", "b"]
        with pytest.raises(ValidationError):
            validate_string_list("a")
        with pytest.raises(ValidationError):
            validate_string_list([1])

    def test_command_argv(self):
        assert validate_command_argv(["cp", "{output}"], required_placeholder="{output}") == [
            "cp",
            "{output}",
        ]
        with pytest.raises(ValidationError):
            validate_command_argv([])
