"""Exception types raised by extension-registry.

Validators themselves never raise; they return a ``ValidationResult``.
These exceptions are what fail-fast callers get when they unwrap a
result, and what the selection engine raises on misuse.
"""
from __future__ import annotations


class ExtregError(Exception):
    """Base class for all extension-registry errors."""


class SchemaError(ExtregError, ValueError):
    """A source-of-truth file is structurally invalid.

    Parameters
    ----------
    message:
        Human-readable description of the first (or only) problem.
    errors:
        Every error message collected for the file, in report order.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = list(errors) if errors is not None else [message]


class SelectionError(ExtregError, LookupError):
    """The selection engine was asked for something it cannot answer."""
