"""Serializer for ``.gitmodules``: submodule blocks → file text.

The inverse of ``parse_gitmodules``.  Each block is written as::

    [submodule "<name>"]
      path = <path>
      url = <url>

with comments that preceded the block emitted verbatim above it, and
comments from inside the block emitted right after its header.
Output produced here re-parses to the same blocks, so serializing it a
second time yields identical text.
"""
from __future__ import annotations

from collections.abc import Iterable

from extreg.gitmodules.parser import GitmodulesDocument
from extreg.model.nodes import SubmoduleEntry

_INDENT = "  "


def _format_block(submodule: SubmoduleEntry) -> list[str]:
    lines = list(submodule.comments)
    lines.append(f'[submodule "{submodule.name}"]')
    lines.extend(submodule.body_comments)
    if submodule.path is not None:
        lines.append(f"{_INDENT}path = {submodule.path}")
    if submodule.url is not None:
        lines.append(f"{_INDENT}url = {submodule.url}")
    return lines


def format_gitmodules(
    submodules: Iterable[SubmoduleEntry],
    trailing_comments: Iterable[str] = (),
) -> str:
    """Render submodule blocks as ``.gitmodules`` text.

    Parameters
    ----------
    submodules:
        Blocks to emit, in the order given.
    trailing_comments:
        Comment lines to emit after the last block.

    Returns
    -------
    str
        File text ending with a newline, or ``""`` when there is nothing
        to write.
    """
    lines: list[str] = []
    for submodule in submodules:
        lines.extend(_format_block(submodule))
    lines.extend(trailing_comments)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def format_document(document: GitmodulesDocument) -> str:
    """Render a parsed document back to text."""
    return format_gitmodules(document.submodules, document.trailing_comments)
