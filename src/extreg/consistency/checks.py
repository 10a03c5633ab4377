"""Cross-file consistency checks.

Each check relates two artifacts that are validated separately and
returns a ``ValidationResult``; the orchestrator decides whether the
findings abort the run.

Rule codes:
    XRF001  Registry entry has no matching submodule
    XRF002  Submodule is not referenced by any registry entry (warning)
    XRF003  Manifest version differs from the registry version
    XRF004  ``extension.toml`` id differs from the registry id
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from extreg.diagnostics import DiagnosticSeverity, ValidationResult
from extreg.model.nodes import Manifest, Registry, RegistryEntry, SubmoduleEntry
from extreg.validator.rules import make_diagnostic


def check_registry_submodules(
    registry: Registry, submodules: Iterable[SubmoduleEntry]
) -> ValidationResult:
    """Check that every entry is backed by exactly one declared submodule."""
    by_path = {s.path: s for s in submodules if s.path}
    diagnostics = [
        make_diagnostic(
            "XRF001",
            f"Extension {entry.id} has no submodule at {entry.checkout_path!r}",
            subject=entry.id,
            suggestion=f"Add a [submodule \"{entry.checkout_path}\"] block to .gitmodules",
        )
        for entry in registry
        if entry.checkout_path not in by_path
    ]

    referenced = {entry.checkout_path for entry in registry}
    diagnostics.extend(
        make_diagnostic(
            "XRF002",
            f'Submodule "{submodule.name}" at {path!r} is not used by any extension',
            subject=submodule.name,
            line=submodule.line_number,
            severity=DiagnosticSeverity.WARNING,
        )
        for path, submodule in by_path.items()
        if path not in referenced
    )
    return ValidationResult(diagnostics=tuple(diagnostics))


def check_manifest_matches_entry(entry: RegistryEntry, manifest: Manifest) -> ValidationResult:
    """Check that a built manifest carries the version the registry declares."""
    if manifest.version == entry.version:
        return ValidationResult()
    return ValidationResult(diagnostics=(
        make_diagnostic(
            "XRF003",
            f"Incorrect version for extension {entry.id} ({manifest.name}): "
            f"expected version {entry.version}, actual version {manifest.version}",
            subject=entry.id,
        ),
    ))


def check_extension_toml_id(
    entry: RegistryEntry, extension_toml: Mapping[str, Any]
) -> ValidationResult:
    """Check that an extension's own ``extension.toml`` uses the registry id."""
    declared = extension_toml.get("id")
    if declared == entry.id:
        return ValidationResult()
    return ValidationResult(diagnostics=(
        make_diagnostic(
            "XRF004",
            "IDs in `extensions.toml` and `extension.toml` do not match: "
            f"extensions.toml: {entry.id}, extension.toml: {declared}",
            subject=entry.id,
        ),
    ))
