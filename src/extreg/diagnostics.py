"""Diagnostic types shared by every validator.

A ``Diagnostic`` is a single finding about one source-of-truth file.  A
``ValidationResult`` bundles the findings of one validation run and is
the only thing validators return: callers that want fail-fast behaviour
call ``raise_for_errors()`` and get a ``SchemaError``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from extreg.errors import SchemaError


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostics."""

    ERROR = auto()
    WARNING = auto()


@dataclass(frozen=True)
class Diagnostic:
    """A single validation finding.

    Parameters
    ----------
    severity:
        How serious this finding is.
    code:
        A short machine-readable identifier, e.g. ``"GIT002"``.
    message:
        Human-readable description of the problem.
    line:
        1-based line number in the source file, when known.
    subject:
        The extension id or submodule name the finding is about.
    suggestion:
        Optional human-readable fix suggestion.
    """

    severity: DiagnosticSeverity
    code: str
    message: str
    line: int | None = field(default=None)
    subject: str | None = field(default=None)
    suggestion: str | None = field(default=None)

    def __str__(self) -> str:
        prefix = f"[{self.code}] {self.severity.name}"
        loc = f" at line {self.line}" if self.line is not None else ""
        suggestion_part = f" (hint: {self.suggestion})" if self.suggestion else ""
        return f"{prefix}{loc}: {self.message}{suggestion_part}"

    @property
    def is_error(self) -> bool:
        """Return True if this diagnostic should block a successful validation."""
        return self.severity == DiagnosticSeverity.ERROR


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one artifact.

    A result with no ERROR-level diagnostics is valid; warnings are
    reported but never make a result invalid.
    """

    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> list[str]:
        """Return the messages of all ERROR-level diagnostics, in order."""
        return [d.message for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics if not d.is_error]

    def raise_for_errors(self) -> None:
        """Raise ``SchemaError`` naming the first error, if there is one."""
        errors = self.errors
        if not errors:
            return
        message = errors[0]
        if len(errors) > 1:
            message = f"{message} (and {len(errors) - 1} more error(s))"
        raise SchemaError(message, errors)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Return a result holding the diagnostics of both ``self`` and ``other``."""
        return ValidationResult(diagnostics=self.diagnostics + other.diagnostics)
