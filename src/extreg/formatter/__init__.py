"""Canonical sorter module.

Exports the pure ``canonical_*`` functions and the in-place
``sort_registry`` / ``sort_gitmodules`` rewriters.
"""
from __future__ import annotations

from extreg.formatter.sorter import (
    canonical_gitmodules_text,
    canonical_registry_text,
    sort_gitmodules,
    sort_registry,
    write_atomic,
)

__all__ = [
    "canonical_registry_text",
    "canonical_gitmodules_text",
    "sort_registry",
    "sort_gitmodules",
    "write_atomic",
]
