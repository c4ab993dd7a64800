"""Typed exceptions raised by job-layer workflows."""

from __future__ import annotations


class JobPreconditionError(ValueError):
    """Job cannot start because a required execution setting is missing."""


class LastJobIdError(RuntimeError):
    """Last submitted job identifier cannot be stored or read back."""
