"""Selection engine module."""
from __future__ import annotations

from extreg.selection.selector import (
    SelectionMode,
    changed_extension_ids,
    published_index_from_keys,
    select_extension_ids,
    unpublished_extension_ids,
)

__all__ = [
    "SelectionMode",
    "changed_extension_ids",
    "published_index_from_keys",
    "select_extension_ids",
    "unpublished_extension_ids",
]
