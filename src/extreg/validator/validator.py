"""Schema validators for the registry, the manifest and ``.gitmodules``.

All three entry points return a ``ValidationResult`` and never raise on
bad input.  Callers that want fail-fast behaviour unwrap the result::

    from extreg.validator import validate_registry

    validate_registry(data).raise_for_errors()   # SchemaError on failure

``validate_gitmodules`` takes the raw file text and returns a
``GitmodulesValidationResult`` that also carries the parsed submodules,
so the file does not need to be parsed twice.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from extreg.diagnostics import Diagnostic, ValidationResult
from extreg.gitmodules.parser import GitmodulesDocument, parse_gitmodules
from extreg.model.nodes import Registry, SubmoduleEntry
from extreg.model.serializer import loads_toml
from extreg.validator.rules import (
    UrlPolicy,
    make_diagnostic,
    rule_duplicate_paths,
    rule_manifest_formats,
    rule_manifest_optional,
    rule_manifest_required,
    rule_name_matches_path,
    rule_registry_entries,
    rule_registry_ids,
    rule_submodule_fields,
)


@dataclass(frozen=True)
class GitmodulesValidationResult(ValidationResult):
    """``ValidationResult`` plus the parsed ``.gitmodules`` content."""

    document: GitmodulesDocument = GitmodulesDocument(submodules=())

    @property
    def submodules(self) -> tuple[SubmoduleEntry, ...]:
        return self.document.submodules


def validate_registry(registry: Any) -> ValidationResult:
    """Validate parsed ``extensions.toml`` data.

    Parameters
    ----------
    registry:
        The decoded TOML document: a mapping of extension id to entry
        table.

    Returns
    -------
    ValidationResult
        One error per invalid id and per missing or mistyped field.
    """
    if not isinstance(registry, Mapping):
        return ValidationResult(diagnostics=(
            make_diagnostic(
                "REG001",
                f"extensions.toml must be a table, got {type(registry).__name__}",
            ),
        ))
    diagnostics: list[Diagnostic] = []
    diagnostics.extend(rule_registry_ids(registry))
    diagnostics.extend(rule_registry_entries(registry))
    return ValidationResult(diagnostics=tuple(diagnostics))


def require_valid_registry(registry: Any) -> None:
    """Raise ``SchemaError`` unless ``registry`` passes ``validate_registry``."""
    validate_registry(registry).raise_for_errors()


def validate_manifest(manifest: Any) -> ValidationResult:
    """Validate a decoded ``manifest.json`` object.

    Every violation is reported; validation does not stop at the first.

    Parameters
    ----------
    manifest:
        The decoded JSON document.

    Returns
    -------
    ValidationResult
        Findings for required fields, name/version formats and optional
        field types.
    """
    if not isinstance(manifest, Mapping):
        return ValidationResult(
            diagnostics=(make_diagnostic("MAN001", "Manifest must be an object"),)
        )
    diagnostics: list[Diagnostic] = []
    diagnostics.extend(rule_manifest_required(manifest))
    diagnostics.extend(rule_manifest_formats(manifest))
    diagnostics.extend(rule_manifest_optional(manifest))
    return ValidationResult(diagnostics=tuple(diagnostics))


def validate_gitmodules(
    text: str, policy: UrlPolicy = UrlPolicy.HTTPS_ONLY
) -> GitmodulesValidationResult:
    """Parse and validate ``.gitmodules`` text.

    Parameters
    ----------
    text:
        Raw file content.
    policy:
        Which url schemes submodules may use.  Defaults to https only.

    Returns
    -------
    GitmodulesValidationResult
        Parser diagnostics followed by per-submodule findings, sorted by
        line number.
    """
    if not isinstance(text, str):
        return GitmodulesValidationResult(
            diagnostics=(make_diagnostic("GIT000", "Gitmodules must be a string"),)
        )
    document = parse_gitmodules(text)
    diagnostics: list[Diagnostic] = list(document.diagnostics)
    diagnostics.extend(rule_submodule_fields(document.submodules, policy))
    diagnostics.extend(rule_duplicate_paths(document.submodules))
    diagnostics.extend(rule_name_matches_path(document.submodules))
    # Stable sort keeps rule order for findings on the same line
    diagnostics.sort(key=lambda d: d.line if d.line is not None else 0)
    return GitmodulesValidationResult(diagnostics=tuple(diagnostics), document=document)


def parse_registry(text: str, source: str = "extensions.toml") -> Registry:
    """Decode, validate and load ``extensions.toml`` text.

    Used for both the working-tree registry and reference snapshots taken
    from an earlier revision, so that both go through the same checks.

    Raises
    ------
    SchemaError
        If the text is not valid TOML or fails ``validate_registry``.
    """
    data = loads_toml(text, source)
    require_valid_registry(data)
    return Registry.from_mapping(data)
