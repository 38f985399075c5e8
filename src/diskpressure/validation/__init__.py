"""
Validation and error handling for the diskpressure package.

This module provides input validation for configuration values and the
exception taxonomy shared by the monitoring loop and its collaborators.
"""

from .exceptions import (
    CaptureError,
    DiskPressureError,
    ErrorSeverity,
    MalformedRecordError,
    PublishError,
    StartupPreconditionError,
    TransientSampleError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

from .validators import (
    validate_command_argv,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
    validate_string_list,
)

__all__ = [
    # Exceptions
    "CaptureError",
    "DiskPressureError",
    "ErrorSeverity",
    "MalformedRecordError",
    "PublishError",
    "StartupPreconditionError",
    "TransientSampleError",
    "ValidationError",
    # Handlers
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "validate_command_argv",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_regex_pattern",
    "validate_string_list",
]
