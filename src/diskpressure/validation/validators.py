"""
Simplified validation functions.

This module provides the small set of validators used when turning raw TOML
values into typed configuration: numeric bounds, enum choices, regex patterns,
string lists and external command argument vectors.
"""

import re
from typing import Any, List, Optional

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    # bool is an int subclass; "true" is never a valid recurrence count
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if isinstance(value, float) and value != int_value:
        raise ValidationError(
            f"{field_name} must be a whole number, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_regex_pattern(pattern: str, field_name: str = "regex_pattern") -> str:
    """
    Validate regex pattern format.

    Args:
        pattern: Regex pattern to validate
        field_name: Name of the field being validated

    Returns:
        Validated pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if not pattern or not isinstance(pattern, str):
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=pattern
        )

    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            f"{field_name} is not a valid regex pattern: {e}",
            field_name=field_name,
            value=pattern
        )

    return pattern


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        choices: List of allowed choices
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive

    Returns:
        The matching choice, in the case it is declared with

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {choices}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    if str_value.lower() not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(str_value.lower())]


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a string with visible content."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value.strip()


def validate_string_list(
    value: Any,
    field_name: str = "value",
    allow_empty: bool = True
) -> List[str]:
    """
    Validate a list of strings, e.g. excluded instance or process names.

    Args:
        value: Value to validate
        field_name: Name of the field being validated
        allow_empty: Whether an empty list is acceptable

    Returns:
        The list with surrounding whitespace stripped from each item

    Raises:
        ValidationError: If value is not a list of strings
    """
    if not isinstance(value, list):
        raise ValidationError(
            f"{field_name} must be a list of strings, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )
    if not value and not allow_empty:
        raise ValidationError(
            f"{field_name} must not be empty",
            field_name=field_name,
            value=value
        )

    validated = []
    for i, item in enumerate(value):
        validated.append(validate_non_empty_string(item, field_name=f"{field_name}[{i}]"))
    return validated


def validate_command_argv(
    value: Any,
    field_name: str = "command",
    required_placeholder: Optional[str] = None
) -> List[str]:
    """
    Validate an external command given as an argument vector.

    Args:
        value: The argv list from configuration
        field_name: Name of the field being validated
        required_placeholder: A ``{name}`` placeholder that must appear in
            at least one argument, if any

    Returns:
        Validated argv list

    Raises:
        ValidationError: If the command is empty or misses the placeholder
    """
    argv = validate_string_list(value, field_name=field_name, allow_empty=False)

    if required_placeholder and not any(required_placeholder in arg for arg in argv):
        raise ValidationError(
            f"{field_name} must contain the '{required_placeholder}' placeholder",
            field_name=field_name,
            value=value
        )

    return argv
