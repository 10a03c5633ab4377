"""Text (de)serialization for the registry and the published index.

``extensions.toml`` is decoded with ``tomli`` and encoded with
``tomli_w``; this module only adds the registry-specific shape on top.
Published-index snapshots handed over by the blob-store collaborator are
read as YAML, which also accepts the JSON form.

Usage
-----
::

    from extreg.model.serializer import dumps_registry, loads_toml

    data = loads_toml(text)
    registry = Registry.from_mapping(data)
    canonical = dumps_registry(registry.sorted())
"""
from __future__ import annotations

from typing import Any

import tomli
import tomli_w
import yaml

from extreg.errors import SchemaError
from extreg.model.nodes import PublishedIndex, Registry


def loads_toml(text: str, source: str = "extensions.toml") -> dict[str, Any]:
    """Decode TOML text, converting decode failures into ``SchemaError``.

    Parameters
    ----------
    text:
        TOML document text.
    source:
        File name used in the error message.
    """
    try:
        return tomli.loads(text)
    except tomli.TOMLDecodeError as exc:
        raise SchemaError(f"Failed to parse TOML file '{source}': {exc}") from exc


def dumps_registry(registry: Registry) -> str:
    """Encode ``registry`` as ``extensions.toml`` text, in its current order."""
    return tomli_w.dumps(registry.to_mapping())


def loads_published_index(text: str) -> PublishedIndex:
    """Decode a published-index snapshot.

    The snapshot is a mapping of extension id to a list of published
    version strings, in YAML or JSON form.  An empty document is an
    empty index.

    Raises
    ------
    SchemaError
        If the document is not a mapping of ids to version lists.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Failed to parse published index: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SchemaError("Published index must be a mapping of extension id to versions")

    index: dict[str, frozenset[str]] = {}
    for extension_id, versions in data.items():
        if not isinstance(versions, list) or not all(isinstance(v, str) for v in versions):
            raise SchemaError(
                f"Published versions for {extension_id!r} must be a list of strings, "
                f"got {versions!r}"
            )
        index[str(extension_id)] = frozenset(versions)
    return index
