"""Schema validators.

Exports the three validation entry points, the result and diagnostic
types they return, and the url policy used for ``.gitmodules``.
"""
from __future__ import annotations

from extreg.diagnostics import Diagnostic, DiagnosticSeverity, ValidationResult
from extreg.validator.rules import EXTENSION_ID_PATTERN, SEMVER_PATTERN, UrlPolicy
from extreg.validator.validator import (
    GitmodulesValidationResult,
    parse_registry,
    require_valid_registry,
    validate_gitmodules,
    validate_manifest,
    validate_registry,
)

__all__ = [
    "parse_registry",
    "validate_registry",
    "require_valid_registry",
    "validate_manifest",
    "validate_gitmodules",
    "Diagnostic",
    "DiagnosticSeverity",
    "ValidationResult",
    "GitmodulesValidationResult",
    "UrlPolicy",
    "EXTENSION_ID_PATTERN",
    "SEMVER_PATTERN",
]
