"""Cross-file consistency checks between registry, submodules and manifests."""
from __future__ import annotations

from extreg.consistency.checks import (
    check_extension_toml_id,
    check_manifest_matches_entry,
    check_registry_submodules,
)

__all__ = [
    "check_registry_submodules",
    "check_manifest_matches_entry",
    "check_extension_toml_id",
]
