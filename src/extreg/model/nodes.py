"""Data model for the extension registry.

Every record is a frozen dataclass so that snapshots read from disk cannot
be mutated mid-run.  ``Registry`` keeps the on-disk order of its entries;
canonical ordering is the sorter's job, not the model's.

The model is populated only from data that already passed validation:
``Registry.from_mapping`` and ``Manifest.from_dict`` assume their input
is well-formed and do not re-check it.
"""
from __future__ import annotations

import posixpath
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import AbstractSet, Any

#: Extension id → versions already present in the blob store.
PublishedIndex = Mapping[str, AbstractSet[str]]

# TOML keys of a registry entry, in canonical emission order.
ENTRY_KEYS: tuple[str, ...] = ("version", "source", "submodule", "path")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistryEntry:
    """One ``[<id>]`` table of ``extensions.toml``.

    Parameters
    ----------
    id:
        Extension id, unique within the registry.
    version:
        Semantic version string of the extension to package.
    source:
        Where the extension's sources live.
    submodule_path:
        Path of the git submodule checkout, if declared.
    sub_path:
        Directory of the extension inside the submodule, if not its root.
    extra:
        Unrecognised keys, carried through rewrites untouched.
    """

    id: str
    version: str
    source: str
    submodule_path: str | None = None
    sub_path: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def checkout_path(self) -> str:
        """Return the submodule path that provides this extension."""
        return self.submodule_path if self.submodule_path else self.source

    @property
    def extension_path(self) -> str:
        """Return the directory holding the extension's own sources."""
        if self.sub_path:
            return posixpath.join(self.checkout_path, self.sub_path)
        return self.checkout_path

    def to_table(self) -> dict[str, Any]:
        """Return the TOML table for this entry in canonical key order."""
        table: dict[str, Any] = {"version": self.version, "source": self.source}
        if self.submodule_path is not None:
            table["submodule"] = self.submodule_path
        if self.sub_path is not None:
            table["path"] = self.sub_path
        for key in sorted(self.extra):
            table[key] = self.extra[key]
        return table

    @classmethod
    def from_table(cls, extension_id: str, table: Mapping[str, Any]) -> "RegistryEntry":
        """Build an entry from a validated TOML table."""
        return cls(
            id=extension_id,
            version=table["version"],
            source=table["source"],
            submodule_path=table.get("submodule"),
            sub_path=table.get("path"),
            extra={k: v for k, v in table.items() if k not in ENTRY_KEYS},
        )


@dataclass(frozen=True)
class Registry:
    """Ordered collection of ``RegistryEntry`` keyed by id."""

    entries: tuple[RegistryEntry, ...] = ()

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, extension_id: object) -> bool:
        return any(entry.id == extension_id for entry in self.entries)

    def get(self, extension_id: str) -> RegistryEntry | None:
        """Return the entry for ``extension_id``, or ``None``."""
        for entry in self.entries:
            if entry.id == extension_id:
                return entry
        return None

    @property
    def ids(self) -> list[str]:
        """Return extension ids in registry order."""
        return [entry.id for entry in self.entries]

    def sorted(self) -> "Registry":
        """Return a copy with entries in canonical (id) order."""
        return Registry(entries=tuple(sorted(self.entries, key=lambda e: e.id)))

    def to_mapping(self) -> dict[str, dict[str, Any]]:
        """Return the registry as a plain ``{id: table}`` dict."""
        return {entry.id: entry.to_table() for entry in self.entries}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "Registry":
        """Build a registry from validated ``extensions.toml`` data."""
        return cls(
            entries=tuple(
                RegistryEntry.from_table(extension_id, table)
                for extension_id, table in data.items()
            )
        )


# ---------------------------------------------------------------------------
# .gitmodules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubmoduleEntry:
    """One ``[submodule "<name>"]`` block of ``.gitmodules``.

    ``path`` and ``url`` are ``None`` when the block does not declare them;
    the validator reports that as an error.  ``comments`` holds the comment
    lines that preceded the block and ``body_comments`` those between its
    own properties, so both move with it when sorting.
    """

    name: str
    path: str | None
    url: str | None
    line_number: int
    comments: tuple[str, ...] = ()
    body_comments: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Manifest:
    """Metadata written by the packaging tool next to a built extension."""

    name: str
    version: str
    description: str
    authors: tuple[str, ...] | None = None
    license: str | None = None
    repository: str | None = None
    keywords: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Manifest":
        """Build a manifest from a dict that passed ``validate_manifest``."""
        authors = data.get("authors")
        keywords = data.get("keywords")
        return cls(
            name=data["name"],
            version=data["version"],
            description=data["description"],
            authors=tuple(authors) if authors is not None else None,
            license=data.get("license"),
            repository=data.get("repository"),
            keywords=tuple(keywords) if keywords is not None else None,
        )
