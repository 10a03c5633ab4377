"""Canonical sorter for ``extensions.toml`` and ``.gitmodules``.

Both source-of-truth files are kept in one deterministic order so that
diffs stay small and concurrent additions rarely conflict:

- ``extensions.toml``: entries ordered by extension id.
- ``.gitmodules``: submodule blocks ordered by checkout path, then name.

The ``canonical_*`` functions are pure: text in, canonical text out.
``sort_registry`` and ``sort_gitmodules`` apply them to a file and
rewrite it only when the canonical text differs from what is on disk.
The rewrite goes through a temporary file in the same directory and
``os.replace``, so a reader never sees a half-written file.

Invalid input is never reordered: validation failures surface as
``SchemaError`` before anything is written.

Usage
-----
::

    from extreg.formatter import sort_gitmodules, sort_registry

    changed = sort_registry("extensions.toml")
    changed |= sort_gitmodules(".gitmodules")
"""
from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from extreg.gitmodules.serializer import format_gitmodules
from extreg.model.serializer import dumps_registry
from extreg.validator.rules import UrlPolicy
from extreg.validator.validator import parse_registry, validate_gitmodules

logger = logging.getLogger(__name__)


def canonical_registry_text(text: str, source: str = "extensions.toml") -> str:
    """Return ``extensions.toml`` text with entries sorted by id.

    Raises
    ------
    SchemaError
        If the registry does not parse or validate.
    """
    return dumps_registry(parse_registry(text, source).sorted())


def canonical_gitmodules_text(text: str, policy: UrlPolicy = UrlPolicy.HTTPS_ONLY) -> str:
    """Return ``.gitmodules`` text with blocks sorted by path.

    Raises
    ------
    SchemaError
        If the file has any ERROR-level validation finding.
    """
    result = validate_gitmodules(text, policy)
    result.raise_for_errors()
    ordered = sorted(result.submodules, key=lambda s: (s.path or "", s.name))
    return format_gitmodules(ordered, result.document.trailing_comments)


def write_atomic(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in a single filesystem operation.

    The new file keeps the permission bits of the file it replaces; a
    file that did not exist yet gets the umask default.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _rewrite_if_changed(path: Path, current: str, canonical: str) -> bool:
    if canonical == current:
        logger.debug("%s is already in canonical order", path)
        return False
    write_atomic(path, canonical)
    logger.debug("Rewrote %s in canonical order", path)
    return True


def sort_registry(path: str | os.PathLike[str]) -> bool:
    """Sort ``extensions.toml`` in place.

    Parameters
    ----------
    path:
        Location of the registry file.

    Returns
    -------
    bool
        ``True`` if the file was rewritten, ``False`` if it was already
        canonical.
    """
    file_path = Path(path)
    current = file_path.read_text(encoding="utf-8")
    return _rewrite_if_changed(
        file_path, current, canonical_registry_text(current, file_path.name)
    )


def sort_gitmodules(
    path: str | os.PathLike[str], policy: UrlPolicy = UrlPolicy.HTTPS_ONLY
) -> bool:
    """Sort ``.gitmodules`` in place.

    Parameters
    ----------
    path:
        Location of the ``.gitmodules`` file.
    policy:
        Url scheme policy the file must satisfy before it is sorted.

    Returns
    -------
    bool
        ``True`` if the file was rewritten, ``False`` if it was already
        canonical.
    """
    file_path = Path(path)
    current = file_path.read_text(encoding="utf-8")
    return _rewrite_if_changed(file_path, current, canonical_gitmodules_text(current, policy))
