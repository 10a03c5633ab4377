"""extension-registry: consistency and diff engine for an extension registry.

Checks and canonicalizes the two source-of-truth files of an extension
registry (``extensions.toml`` and ``.gitmodules``) and the manifest
produced by packaging, then decides which extensions must be
(re)packaged.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import extreg

    registry = extreg.parse_registry(Path("extensions.toml").read_text())
    result = extreg.validate_gitmodules(Path(".gitmodules").read_text())
    result.raise_for_errors()

    extreg.sort_registry("extensions.toml")
    extreg.sort_gitmodules(".gitmodules")

    reference = extreg.parse_registry(main_branch_text)
    ids = extreg.changed_extension_ids(registry, reference)

    extreg.__version__
    '0.1.0'
"""
from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from extreg.diagnostics import ValidationResult
    from extreg.model.nodes import PublishedIndex, Registry
    from extreg.validator.rules import UrlPolicy
    from extreg.validator.validator import GitmodulesValidationResult


def parse_registry(text: str) -> "Registry":
    """Decode and validate ``extensions.toml`` text into a ``Registry``.

    Raises
    ------
    extreg.errors.SchemaError
        If the text is not valid TOML or the registry is invalid.
    """
    from extreg.validator.validator import parse_registry as _parse_registry

    return _parse_registry(text)


def validate_registry(registry: Any) -> "ValidationResult":
    """Validate decoded ``extensions.toml`` data."""
    from extreg.validator.validator import validate_registry as _validate_registry

    return _validate_registry(registry)


def validate_manifest(manifest: Any) -> "ValidationResult":
    """Validate a decoded ``manifest.json`` object, reporting every problem."""
    from extreg.validator.validator import validate_manifest as _validate_manifest

    return _validate_manifest(manifest)


def validate_gitmodules(
    text: str, policy: "UrlPolicy | None" = None
) -> "GitmodulesValidationResult":
    """Parse and validate ``.gitmodules`` text.

    Parameters
    ----------
    text:
        Raw file content.
    policy:
        Url scheme policy; https only when omitted.
    """
    from extreg.validator.rules import UrlPolicy
    from extreg.validator.validator import validate_gitmodules as _validate_gitmodules

    return _validate_gitmodules(text, policy if policy is not None else UrlPolicy.HTTPS_ONLY)


def sort_registry(path: str | os.PathLike[str]) -> bool:
    """Sort ``extensions.toml`` in place; return ``True`` if it changed."""
    from extreg.formatter.sorter import sort_registry as _sort_registry

    return _sort_registry(path)


def sort_gitmodules(path: str | os.PathLike[str], policy: "UrlPolicy | None" = None) -> bool:
    """Sort ``.gitmodules`` in place; return ``True`` if it changed."""
    from extreg.formatter.sorter import sort_gitmodules as _sort_gitmodules
    from extreg.validator.rules import UrlPolicy

    return _sort_gitmodules(path, policy if policy is not None else UrlPolicy.HTTPS_ONLY)


def unpublished_extension_ids(registry: "Registry", published: "PublishedIndex") -> list[str]:
    """Return ids whose current version is not in the published index."""
    from extreg.selection.selector import unpublished_extension_ids as _unpublished

    return _unpublished(registry, published)


def changed_extension_ids(registry: "Registry", reference: "Registry") -> list[str]:
    """Return ids that are new, or whose version changed, relative to ``reference``."""
    from extreg.selection.selector import changed_extension_ids as _changed

    return _changed(registry, reference)


__all__ = [
    "__version__",
    "parse_registry",
    "validate_registry",
    "validate_manifest",
    "validate_gitmodules",
    "sort_registry",
    "sort_gitmodules",
    "unpublished_extension_ids",
    "changed_extension_ids",
]
