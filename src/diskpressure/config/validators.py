"""
Configuration validation utilities.

This module turns the raw ``[monitor]`` table of config.toml into a validated
``MonitorConfig``. Each section is validated by its own helper so error
messages can name the dotted field (e.g. ``monitor.alert.required_recurrence``).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.config import MonitorConfig
from ..validation import (
    ValidationError,
    validate_command_argv,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
    validate_string_list,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

SINK_TYPES = ["console", "syslog", "jsonl"]
COUNTER_SOURCES = ["diskstats"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _resolve_path(value: Any, base_dir: Optional[Path], field_name: str) -> Path:
    """Resolve a configured path relative to the config file's directory."""
    path = Path(validate_non_empty_string(value, field_name=field_name))
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


def _validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean",
            field_name=field_name,
            value=value,
        )
    return value


def _validate_section(monitor_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = monitor_data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(
            f"monitor.{name} must be a table",
            field_name=f"monitor.{name}",
            value=section,
        )
    return section


def _validate_sampling_settings(
    sampling: Dict[str, Any], base_dir: Optional[Path]
) -> Dict[str, Any]:
    return {
        "sample_frequency_seconds": validate_positive_float(
            sampling.get("sample_frequency_seconds", 1.0),
            min_value=0.05,
            max_value=3600.0,
            field_name="monitor.sampling.sample_frequency_seconds",
        ),
        "counter_source": validate_enum_choice(
            sampling.get("counter_source", "diskstats"),
            choices=COUNTER_SOURCES,
            field_name="monitor.sampling.counter_source",
        ),
        "diskstats_path": _resolve_path(
            sampling.get("diskstats_path", "/proc/diskstats"),
            base_dir,
            "monitor.sampling.diskstats_path",
        ),
        "device_pattern": validate_regex_pattern(
            sampling.get("device_pattern", MonitorConfig.device_pattern),
            field_name="monitor.sampling.device_pattern",
        ),
        "excluded_instances": validate_string_list(
            sampling.get("excluded_instances", ["_total"]),
            field_name="monitor.sampling.excluded_instances",
        ),
    }


def _validate_alert_settings(alert: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "alert_sample_value_threshold": validate_positive_float(
            alert.get("sample_value_threshold", 2.0),
            min_value=0.0,
            field_name="monitor.alert.sample_value_threshold",
        ),
        "alert_required_recurrence": validate_positive_integer(
            alert.get("required_recurrence", 5),
            min_value=1,
            max_value=10000,
            field_name="monitor.alert.required_recurrence",
        ),
    }


def _expand_config_dir(argv: List[str], base_dir: Optional[Path]) -> List[str]:
    """Replace ``{config_dir}`` so commands can reference files shipped beside config.toml."""
    if base_dir is None:
        return argv
    return [arg.replace("{config_dir}", str(base_dir)) for arg in argv]


def _validate_trace_settings(
    trace: Dict[str, Any], base_dir: Optional[Path]
) -> Dict[str, Any]:
    if "start_command" not in trace or "stop_command" not in trace:
        raise ValidationError(
            "monitor.trace.start_command and monitor.trace.stop_command are required",
            field_name="monitor.trace",
        )

    work_dir = trace.get("work_dir")
    return {
        "trace_capture_duration": validate_positive_float(
            trace.get("capture_duration", 3.0),
            min_value=0.1,
            max_value=3600.0,
            field_name="monitor.trace.capture_duration",
        ),
        "min_time_between_traces": validate_positive_float(
            trace.get("min_time_between_traces", 300.0),
            min_value=0.0,
            field_name="monitor.trace.min_time_between_traces",
        ),
        "trace_start_command": _expand_config_dir(
            validate_command_argv(
                trace["start_command"],
                field_name="monitor.trace.start_command",
            ),
            base_dir,
        ),
        "trace_stop_command": _expand_config_dir(
            validate_command_argv(
                trace["stop_command"],
                field_name="monitor.trace.stop_command",
                required_placeholder="{output}",
            ),
            base_dir,
        ),
        "trace_work_dir": (
            _resolve_path(work_dir, base_dir, "monitor.trace.work_dir")
            if work_dir is not None
            else None
        ),
        "trace_keep_artifacts": _validate_bool(
            trace.get("keep_artifacts", False), "monitor.trace.keep_artifacts"
        ),
        "trace_require_root": _validate_bool(
            trace.get("require_root", True), "monitor.trace.require_root"
        ),
    }


def _validate_report_settings(
    report: Dict[str, Any], base_dir: Optional[Path]
) -> Dict[str, Any]:
    return {
        "log_name": validate_non_empty_string(
            report.get("log_name", "Application"),
            field_name="monitor.report.log_name",
        ),
        "source_name": validate_non_empty_string(
            report.get("source_name", "diskpressure"),
            field_name="monitor.report.source_name",
        ),
        "sink": validate_enum_choice(
            report.get("sink", "console"),
            choices=SINK_TYPES,
            field_name="monitor.report.sink",
        ),
        "jsonl_path": _resolve_path(
            report.get("jsonl_path", "logs/events.jsonl"),
            base_dir,
            "monitor.report.jsonl_path",
        ),
        "syslog_address": validate_non_empty_string(
            report.get("syslog_address", "/dev/log"),
            field_name="monitor.report.syslog_address",
        ),
        "top_k": validate_positive_integer(
            report.get("top_k", 5),
            min_value=1,
            max_value=1000,
            field_name="monitor.report.top_k",
        ),
        "excluded_processes": validate_string_list(
            report.get("excluded_processes", []),
            field_name="monitor.report.excluded_processes",
        ),
    }


def _validate_general_settings(
    general: Dict[str, Any], base_dir: Optional[Path]
) -> Dict[str, Any]:
    return {
        "log_level": validate_enum_choice(
            general.get("log_level", "INFO"),
            choices=LOG_LEVELS,
            field_name="monitor.general.log_level",
            case_sensitive=False,
        ),
        "output_dir": _resolve_path(
            general.get("output_dir", "logs"),
            base_dir,
            "monitor.general.output_dir",
        ),
    }


def validate_monitor_config(
    monitor_data: Dict[str, Any], base_dir: Optional[Path] = None
) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw ``[monitor]`` table from TOML
        base_dir: Directory relative paths are resolved against, normally
            the directory holding config.toml

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    settings: Dict[str, Any] = {}
    settings.update(
        _validate_general_settings(_validate_section(monitor_data, "general"), base_dir)
    )
    settings.update(
        _validate_sampling_settings(_validate_section(monitor_data, "sampling"), base_dir)
    )
    settings.update(_validate_alert_settings(_validate_section(monitor_data, "alert")))
    settings.update(
        _validate_trace_settings(_validate_section(monitor_data, "trace"), base_dir)
    )
    settings.update(
        _validate_report_settings(_validate_section(monitor_data, "report"), base_dir)
    )

    try:
        settings["storage"] = StorageConfig.from_dict(
            _validate_section(monitor_data, "storage")
        )
    except ValueError as e:
        raise ValidationError(
            f"Invalid storage configuration: {e}", field_name="monitor.storage"
        )

    config = MonitorConfig(**settings)

    if config.min_time_between_traces < config.trace_capture_duration:
        logger.warning(
            f"monitor.trace.min_time_between_traces ({config.min_time_between_traces}s) "
            f"is shorter than the capture duration ({config.trace_capture_duration}s); "
            "captures may run back to back"
        )

    return config
