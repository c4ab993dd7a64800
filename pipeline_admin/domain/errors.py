"""Project-native typed exceptions for value validation and path resolution."""

from __future__ import annotations


class ValueValidationError(ValueError):
    """Value does not belong to the declared data type.

    Attributes:
        value: Rejected element when the failure comes from one element of a sequence.
    """

    def __init__(self, message: str, value: str | None = None):
        super().__init__(message)
        self.value = value


class UriResolutionError(ValueError):
    """Path could not be turned into a usable URI reference.

    Attributes:
        path: User-supplied path that failed to resolve.
    """

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class UriNotFoundError(UriResolutionError):
    """Local path is well formed but does not exist on the file system."""
