"""Validation of raw command-line values against declared data types."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from .data_types import (
    AnyUriType,
    BooleanType,
    ChoiceType,
    DataType,
    DirUriType,
    FileUriType,
    IntegerType,
    PatternType,
    StringType,
    ValueType,
    domain_describe_data_type,
)
from .errors import UriResolutionError, ValueValidationError
from .uri_resolution import UriResolutionMode, domain_resolve_uri

_TRUE_LITERALS: Final[frozenset[str]] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS: Final[frozenset[str]] = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_LEGACY_OCTAL_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?0[0-7]+(?:_?[0-7]+)*")
_INTEGER_MIN: Final[int] = -(2**63)
_INTEGER_MAX: Final[int] = 2**63 - 1


def domain_validate_value(
    value: str,
    data_type: DataType,
    mode: UriResolutionMode,
    base_directory: Path | None = None,
) -> str:
    """Validate one raw value and return its normalized form.

    Args:
        value: Raw value from the command line.
        data_type: Declared data type.
        mode: URI resolution mode used by file and directory types.
        base_directory: Optional base directory for local path resolution.

    Returns:
        str: Normalized value that replaces the raw input.

    Raises:
        ValueValidationError: Raised when the value is outside the declared type.
        TypeError: Raised when `data_type` is not a known data type.
    """

    if isinstance(data_type, BooleanType):
        if value in _TRUE_LITERALS:
            return "true"
        if value in _FALSE_LITERALS:
            return "false"
        raise ValueValidationError("does not match boolean")

    if isinstance(data_type, IntegerType):
        _domain_parse_integer(value)
        return value

    if isinstance(data_type, (AnyUriType, StringType)):
        return value

    if isinstance(data_type, (FileUriType, DirUriType)):
        try:
            return domain_resolve_uri(
                value,
                mode,
                base_directory=base_directory,
                expect_directory=isinstance(data_type, DirUriType),
            )
        except UriResolutionError as error:
            raise ValueValidationError(f"does not match {domain_describe_data_type(data_type)}: {error}") from error

    if isinstance(data_type, PatternType):
        try:
            matched = re.fullmatch(f"(?:{data_type.pattern})", value) is not None
        except re.error as error:
            raise ValueValidationError(f"does not match /{data_type.pattern}/: invalid pattern ({error})") from error
        if not matched:
            raise ValueValidationError(f"does not match /{data_type.pattern}/")
        return value

    if isinstance(data_type, ChoiceType):
        for variant in data_type.variants:
            try:
                return domain_validate_value(value, variant, mode, base_directory=base_directory)
            except ValueValidationError:
                continue
        raise ValueValidationError(f"does not match {domain_describe_data_type(data_type)}")

    if isinstance(data_type, ValueType):
        if value != data_type.value:
            raise ValueValidationError(f"does not match '{data_type.value}'")
        return value

    raise TypeError(f"unsupported data type: {data_type!r}")


def domain_validate_sequence(
    value: str,
    data_type: DataType,
    mode: UriResolutionMode,
    base_directory: Path | None = None,
) -> list[str]:
    """Validate every element of a comma-delimited value.

    All elements are validated before any result is returned, so callers
    never observe a partially validated list.

    Args:
        value: Raw comma-delimited value.
        data_type: Declared element data type.
        mode: URI resolution mode used by file and directory types.
        base_directory: Optional base directory for local path resolution.

    Returns:
        list[str]: Normalized elements in input order.

    Raises:
        ValueValidationError: Raised for the first element outside the declared type;
            its `value` attribute names that element.
    """

    validated_elements: list[str] = []
    for element in value.split(","):
        try:
            validated_elements.append(domain_validate_value(element, data_type, mode, base_directory=base_directory))
        except ValueValidationError as error:
            raise ValueValidationError(str(error), value=element) from error
    return validated_elements


def domain_format_option_error(option_name: str, value: str, cause: Exception | None) -> str:
    """Build the user-facing message for a rejected option value.

    Args:
        option_name: Declared option name.
        value: Rejected raw value.
        cause: Underlying validation failure.

    Returns:
        str: Message naming the value, the option and the expected shape.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    message = f"'{value}' is not allowed as the value for option --{option_name}"
    if cause is not None:
        message += f": {cause}"
    return message


def _domain_parse_integer(value: str) -> int:
    if value != value.strip() or not value:
        raise ValueValidationError(f"does not match integer: invalid syntax '{value}'")
    try:
        parsed_value = int(value, 0)
    except ValueError as error:
        if _LEGACY_OCTAL_PATTERN.fullmatch(value) is None:
            raise ValueValidationError(f"does not match integer: invalid syntax '{value}'") from error
        parsed_value = int(value.replace("_", ""), 8)
    if parsed_value < _INTEGER_MIN or parsed_value > _INTEGER_MAX:
        raise ValueValidationError(f"does not match integer: value out of range '{value}'")
    return parsed_value
