"""Data model for extension-registry.

Exports the registry, submodule and manifest records and the TOML/YAML
serialization helpers.
"""
from __future__ import annotations

from extreg.model.nodes import (
    ENTRY_KEYS,
    Manifest,
    PublishedIndex,
    Registry,
    RegistryEntry,
    SubmoduleEntry,
)
from extreg.model.serializer import dumps_registry, loads_published_index, loads_toml

__all__ = [
    "ENTRY_KEYS",
    "Manifest",
    "PublishedIndex",
    "Registry",
    "RegistryEntry",
    "SubmoduleEntry",
    "dumps_registry",
    "loads_published_index",
    "loads_toml",
]
