"""Individual validation rules.

Each rule inspects one aspect of one artifact and returns a list of
``Diagnostic`` objects.  The entry points in ``extreg.validator.validator``
compose them and wrap the findings in a ``ValidationResult``.

Rule codes:

    REG001  Registry is not a table
    REG002  Extension id has invalid characters
    REG003  Entry is not a table
    REG004  Entry missing or invalid ``version``
    REG005  Entry missing or invalid ``source``
    REG006  Optional entry field has the wrong type

    MAN001  Manifest is not an object
    MAN002  Required field missing or not a string
    MAN003  Name is not a valid extension id
    MAN004  Version is not semantic
    MAN005  Optional field has the wrong type

    GIT000  Input is not text
    GIT001  Invalid section header           (parser)
    GIT002  Invalid property                 (parser)
    GIT003  Content outside a section        (parser)
    GIT004  Submodule missing ``path``
    GIT005  Submodule missing ``url``
    GIT006  Submodule url uses a disallowed scheme
    GIT007  Duplicate submodule path
    GIT008  Section name does not match path (warning)
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Final

from extreg.diagnostics import Diagnostic, DiagnosticSeverity
from extreg.model.nodes import SubmoduleEntry

EXTENSION_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9-]+$")
SEMVER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d+\.\d+\.\d+(-[A-Za-z0-9.-]+)?$")

_OPTIONAL_ENTRY_FIELDS: Final[tuple[str, ...]] = ("submodule", "path")
_REQUIRED_MANIFEST_FIELDS: Final[tuple[str, ...]] = ("name", "version", "description")


class UrlPolicy(Enum):
    """Which submodule url schemes are accepted."""

    HTTPS_ONLY = ("https://",)
    PERMISSIVE = ("http://", "https://", "git@", "ssh://")

    @property
    def schemes(self) -> tuple[str, ...]:
        return self.value

    def allows(self, url: str) -> bool:
        return url.startswith(self.schemes)


def make_diagnostic(
    code: str,
    message: str,
    *,
    subject: str | None = None,
    line: int | None = None,
    suggestion: str | None = None,
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR,
) -> Diagnostic:
    return Diagnostic(
        severity=severity,
        code=code,
        message=message,
        line=line,
        subject=subject,
        suggestion=suggestion,
    )


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def rule_registry_ids(registry: Mapping[str, Any]) -> list[Diagnostic]:
    """REG002: every key must be a valid extension id."""
    return [
        make_diagnostic(
            "REG002",
            "Extension IDs must only consist of lowercase letters, numbers, "
            f"and hyphens ('-'): \"{extension_id}\".",
            subject=str(extension_id),
            suggestion="Rename the extension using only [a-z0-9-]",
        )
        for extension_id in registry
        if not isinstance(extension_id, str) or not EXTENSION_ID_PATTERN.match(extension_id)
    ]


def rule_registry_entries(registry: Mapping[str, Any]) -> list[Diagnostic]:
    """REG003–REG006: each entry is a table with the required fields."""
    diagnostics: list[Diagnostic] = []
    for extension_id, entry in registry.items():
        if not isinstance(entry, Mapping):
            diagnostics.append(make_diagnostic(
                "REG003",
                f"Extension {extension_id} must be a table, got {type(entry).__name__}",
                subject=extension_id,
            ))
            continue

        if not _is_non_empty_str(entry.get("version")):
            diagnostics.append(make_diagnostic(
                "REG004",
                f"Extension {extension_id} missing or invalid version: {entry.get('version')!r}",
                subject=extension_id,
                suggestion='Set version = "<major>.<minor>.<patch>"',
            ))
        if not _is_non_empty_str(entry.get("source")):
            diagnostics.append(make_diagnostic(
                "REG005",
                f"Extension {extension_id} missing or invalid source: {entry.get('source')!r}",
                subject=extension_id,
            ))
        for key in _OPTIONAL_ENTRY_FIELDS:
            if key in entry and not isinstance(entry[key], str):
                diagnostics.append(make_diagnostic(
                    "REG006",
                    f"Extension {extension_id} field {key!r} must be a string, "
                    f"got {type(entry[key]).__name__}",
                    subject=extension_id,
                ))
    return diagnostics


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


def rule_manifest_required(manifest: Mapping[str, Any]) -> list[Diagnostic]:
    """MAN002: name, version and description are required strings."""
    return [
        make_diagnostic("MAN002", f"Missing or invalid required field: {name}", subject=name)
        for name in _REQUIRED_MANIFEST_FIELDS
        if not _is_non_empty_str(manifest.get(name))
    ]


def rule_manifest_formats(manifest: Mapping[str, Any]) -> list[Diagnostic]:
    """MAN003/MAN004: name is an extension id and version is semantic."""
    diagnostics: list[Diagnostic] = []
    name = manifest.get("name")
    if _is_non_empty_str(name) and not EXTENSION_ID_PATTERN.match(name):
        diagnostics.append(make_diagnostic(
            "MAN003",
            f"Manifest name must contain only lowercase letters, numbers, and hyphens: {name!r}",
            subject="name",
        ))
    version = manifest.get("version")
    if _is_non_empty_str(version) and not SEMVER_PATTERN.match(version):
        diagnostics.append(make_diagnostic(
            "MAN004",
            "Version must follow semantic versioning format "
            f"(e.g., 1.0.0 or 1.0.0-beta.1): {version!r}",
            subject="version",
        ))
    return diagnostics


def rule_manifest_optional(manifest: Mapping[str, Any]) -> list[Diagnostic]:
    """MAN005: optional fields have the right types when present."""
    diagnostics: list[Diagnostic] = []
    for name in ("license", "repository"):
        value = manifest.get(name)
        if value is not None and not isinstance(value, str):
            diagnostics.append(make_diagnostic(
                "MAN005", f"{name.capitalize()} must be a string", subject=name
            ))
    for name in ("authors", "keywords"):
        value = manifest.get(name)
        if value is not None and not _is_str_list(value):
            diagnostics.append(make_diagnostic(
                "MAN005", f"{name.capitalize()} must be an array of strings", subject=name
            ))
    return diagnostics


# ---------------------------------------------------------------------------
# .gitmodules
# ---------------------------------------------------------------------------


def rule_submodule_fields(
    submodules: Sequence[SubmoduleEntry], policy: UrlPolicy
) -> list[Diagnostic]:
    """GIT004–GIT006: every block has a path and an allowed url."""
    diagnostics: list[Diagnostic] = []
    for submodule in submodules:
        if not submodule.path:
            diagnostics.append(make_diagnostic(
                "GIT004",
                f'Submodule "{submodule.name}" missing path property',
                subject=submodule.name,
                line=submodule.line_number,
            ))
        if not submodule.url:
            diagnostics.append(make_diagnostic(
                "GIT005",
                f'Submodule "{submodule.name}" missing url property',
                subject=submodule.name,
                line=submodule.line_number,
            ))
        elif not policy.allows(submodule.url):
            if policy is UrlPolicy.HTTPS_ONLY:
                message = f'Submodule "{submodule.name}" must use "https://" scheme: {submodule.url}'
            else:
                message = f'Submodule "{submodule.name}" has invalid URL format: {submodule.url}'
            diagnostics.append(make_diagnostic(
                "GIT006",
                message,
                subject=submodule.name,
                line=submodule.line_number,
                suggestion="Allowed schemes: " + ", ".join(policy.schemes),
            ))
    return diagnostics


def rule_duplicate_paths(submodules: Sequence[SubmoduleEntry]) -> list[Diagnostic]:
    """GIT007: two blocks must not check out into the same path."""
    diagnostics: list[Diagnostic] = []
    seen: dict[str, SubmoduleEntry] = {}
    for submodule in submodules:
        if not submodule.path:
            continue
        first = seen.get(submodule.path)
        if first is not None:
            diagnostics.append(make_diagnostic(
                "GIT007",
                f'Submodule "{submodule.name}" reuses path {submodule.path!r}; '
                f'first declared by "{first.name}" at line {first.line_number}',
                subject=submodule.name,
                line=submodule.line_number,
            ))
        else:
            seen[submodule.path] = submodule
    return diagnostics


def rule_name_matches_path(submodules: Sequence[SubmoduleEntry]) -> list[Diagnostic]:
    """GIT008: section names conventionally mirror the checkout path."""
    return [
        make_diagnostic(
            "GIT008",
            f'Submodule "{s.name}" is checked out at {s.path!r}',
            subject=s.name,
            line=s.line_number,
            suggestion=f'Rename the section to [submodule "{s.path}"]',
            severity=DiagnosticSeverity.WARNING,
        )
        for s in submodules
        if s.path and s.name != s.path
    ]
