"""Closed set of value-shape constraints declared by script inputs and options.

A data type is one of the frozen dataclasses below. `ChoiceType` is the only
recursive case: it holds other data types and accepts a value when any of them
does. Every consumer dispatches on the concrete class with one exhaustive
`isinstance` chain instead of per-class behavior.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class BooleanType:
    """Boolean value with canonical textual form `true` or `false`."""


@dataclass(frozen=True)
class IntegerType:
    """Signed whole number in any conventional base notation."""


@dataclass(frozen=True)
class AnyUriType:
    """Unconstrained URI string."""


@dataclass(frozen=True)
class StringType:
    """Unconstrained text value."""


@dataclass(frozen=True)
class FileUriType:
    """Path that must resolve to an existing file."""


@dataclass(frozen=True)
class DirUriType:
    """Path that must resolve to an existing directory."""


@dataclass(frozen=True)
class PatternType:
    """Text that must fully match a regular expression.

    Attributes:
        pattern: Regular expression without anchors.
    """

    pattern: str


@dataclass(frozen=True)
class ChoiceType:
    """Value accepted by at least one of the listed variants.

    Attributes:
        variants: Candidate data types in declaration order.
    """

    variants: tuple[DataType, ...]


@dataclass(frozen=True)
class ValueType:
    """Literal value that must be matched exactly.

    Attributes:
        value: Expected literal.
    """

    value: str


DataType = Union[
    BooleanType,
    IntegerType,
    AnyUriType,
    StringType,
    FileUriType,
    DirUriType,
    PatternType,
    ChoiceType,
    ValueType,
]


def domain_describe_data_type(data_type: DataType) -> str:
    """Render a data type as short text for help output and error messages.

    Args:
        data_type: Data type to describe.

    Returns:
        str: Description such as `boolean`, `/[a-z]+/`, `'html'` or `('a'|'b')`.

    Raises:
        TypeError: Raised when the value is not a known data type.
    """

    if isinstance(data_type, BooleanType):
        return "boolean"
    if isinstance(data_type, IntegerType):
        return "integer"
    if isinstance(data_type, AnyUriType):
        return "anyURI"
    if isinstance(data_type, StringType):
        return "string"
    if isinstance(data_type, FileUriType):
        return "anyFileURI"
    if isinstance(data_type, DirUriType):
        return "anyDirURI"
    if isinstance(data_type, PatternType):
        return f"/{data_type.pattern}/"
    if isinstance(data_type, ValueType):
        return f"'{data_type.value}'"
    if isinstance(data_type, ChoiceType):
        return "(" + "|".join(domain_describe_data_type(variant) for variant in data_type.variants) + ")"
    raise TypeError(f"unsupported data type: {data_type!r}")
