"""Selection engine: which extensions must be (re)packaged.

Two mutually exclusive policies:

``SelectionMode.PUBLISH``
    Select every extension whose current ``(id, version)`` pair is not in
    the blob store yet.  A published id with a new version is selected.

``SelectionMode.CHANGED``
    Select every extension whose version differs from a reference
    snapshot of the registry (typically the main branch), plus every
    extension the reference does not have.  Extensions that only exist
    in the reference are removals and are never selected.

Both return ids in registry order, since packaging runs sequentially
and logs should be reproducible.  An empty registry selects nothing.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from enum import Enum

from extreg.errors import SelectionError
from extreg.model.nodes import PublishedIndex, Registry

logger = logging.getLogger(__name__)


class SelectionMode(Enum):
    """Policy used to pick the extensions to package."""

    PUBLISH = "publish"
    CHANGED = "changed"


def unpublished_extension_ids(registry: Registry, published: PublishedIndex) -> list[str]:
    """Return ids whose current version is missing from ``published``.

    Parameters
    ----------
    registry:
        The current registry.
    published:
        Extension id → versions already in the blob store.

    Returns
    -------
    list[str]
        Selected ids in registry order.
    """
    result = [
        entry.id
        for entry in registry
        if entry.version not in published.get(entry.id, frozenset())
    ]
    logger.info("Extensions needing to be published: %s", ", ".join(result))
    return result


def changed_extension_ids(registry: Registry, reference: Registry) -> list[str]:
    """Return ids that are new or whose version differs from ``reference``.

    Parameters
    ----------
    registry:
        The current registry.
    reference:
        The same registry at an earlier revision.

    Returns
    -------
    list[str]
        Selected ids in registry order.
    """
    result: list[str] = []
    for entry in registry:
        previous = reference.get(entry.id)
        if previous is not None and previous.version == entry.version:
            continue
        result.append(entry.id)
    logger.info("Extensions changed from reference: %s", ", ".join(result))
    return result


def published_index_from_keys(
    keys: Iterable[str], prefix: str = "extensions"
) -> dict[str, frozenset[str]]:
    """Build a published index from blob-store object keys.

    Keys have the shape ``<prefix>/<extension id>/<version>/<filename>``;
    anything else in the bucket is ignored.

    Parameters
    ----------
    keys:
        Object keys as listed from the store.
    prefix:
        Key prefix under which extensions are published.
    """
    pattern = re.compile(rf"^{re.escape(prefix.strip('/'))}/([^/]+)/([^/]+)/[^/]+$")
    versions: dict[str, set[str]] = {}
    for key in keys:
        match = pattern.match(key)
        if match:
            extension_id, version = match.groups()
            versions.setdefault(extension_id, set()).add(version)
    return {extension_id: frozenset(v) for extension_id, v in versions.items()}


def select_extension_ids(
    registry: Registry,
    mode: SelectionMode,
    *,
    published: PublishedIndex | None = None,
    reference: Registry | None = None,
    only: str | None = None,
) -> list[str]:
    """Run the selection policy for ``mode``, optionally narrowed to one id.

    Parameters
    ----------
    registry:
        The current registry.
    mode:
        Which policy to apply.
    published:
        Required for ``SelectionMode.PUBLISH``.
    reference:
        Required for ``SelectionMode.CHANGED``.
    only:
        If given, restrict the selection to this extension id.

    Raises
    ------
    SelectionError
        If the input the mode needs is missing, or ``only`` is not an
        extension in the registry.
    """
    if only is not None and only not in registry:
        raise SelectionError(f"No such extension: {only}")

    if mode is SelectionMode.PUBLISH:
        if published is None:
            raise SelectionError("Publish mode needs a published index")
        selected = unpublished_extension_ids(registry, published)
    else:
        if reference is None:
            raise SelectionError("Changed mode needs a reference registry")
        selected = changed_extension_ids(registry, reference)

    if only is not None:
        selected = [extension_id for extension_id in selected if extension_id == only]
    return selected
