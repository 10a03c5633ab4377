"""Line-oriented parser for ``.gitmodules``.

This is deliberately not an INI parser.  It recognises exactly the line
shapes the registry's ``.gitmodules`` uses and reports everything else:

    [submodule "<name>"]      opens a new submodule block
    path = <value>            sets the block's path
    url = <value>             sets the block's url
    # ... / ; ...             comment, kept with the block it belongs to

A comment followed by another line of the open block belongs to that
block; one followed by a header, or by the end of the file, belongs to the
next block (or to the trailing comments).  Lines are trimmed and blank
lines ignored.  Line numbers in diagnostics are 1-based physical line
numbers of the input text.

The parser never raises: problems are returned as ``Diagnostic`` objects
on the resulting ``GitmodulesDocument`` so that a caller can report all
of them at once.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from extreg.diagnostics import Diagnostic, DiagnosticSeverity
from extreg.model.nodes import SubmoduleEntry

_SECTION_RE: Final[re.Pattern[str]] = re.compile(r'^\[submodule "(.+)"\]$')
_PATH_RE: Final[re.Pattern[str]] = re.compile(r"^path\s*=\s*(.+)$")
_URL_RE: Final[re.Pattern[str]] = re.compile(r"^url\s*=\s*(.+)$")
_COMMENT_PREFIXES: Final[tuple[str, ...]] = ("#", ";")


@dataclass(frozen=True)
class GitmodulesDocument:
    """The parsed content of a ``.gitmodules`` file.

    Parameters
    ----------
    submodules:
        Submodule blocks in file order.
    trailing_comments:
        Comment lines after the last block (or in a file with no blocks).
    diagnostics:
        Line-level problems found while parsing.
    """

    submodules: tuple[SubmoduleEntry, ...]
    trailing_comments: tuple[str, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()


class _OpenSection:
    """Mutable builder for the block currently being parsed."""

    __slots__ = ("name", "line_number", "path", "url", "comments", "body_comments")

    def __init__(self, name: str, line_number: int, comments: list[str]) -> None:
        self.name = name
        self.line_number = line_number
        self.path: str | None = None
        self.url: str | None = None
        self.comments = tuple(comments)
        self.body_comments: list[str] = []

    def close(self) -> SubmoduleEntry:
        return SubmoduleEntry(
            name=self.name,
            path=self.path,
            url=self.url,
            line_number=self.line_number,
            comments=self.comments,
            body_comments=tuple(self.body_comments),
        )


def _error(code: str, message: str, line: int, suggestion: str) -> Diagnostic:
    return Diagnostic(
        severity=DiagnosticSeverity.ERROR,
        code=code,
        message=message,
        line=line,
        suggestion=suggestion,
    )


def parse_gitmodules(text: str) -> GitmodulesDocument:
    """Parse ``.gitmodules`` text into a ``GitmodulesDocument``.

    Parameters
    ----------
    text:
        Raw file content.

    Returns
    -------
    GitmodulesDocument
        Parsed blocks plus any line-level diagnostics.
    """
    submodules: list[SubmoduleEntry] = []
    diagnostics: list[Diagnostic] = []
    pending_comments: list[str] = []
    current: _OpenSection | None = None

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(_COMMENT_PREFIXES):
            pending_comments.append(line)
            continue

        section = _SECTION_RE.match(line)
        if section:
            if current is not None:
                submodules.append(current.close())
            current = _OpenSection(section.group(1), line_number, pending_comments)
            pending_comments = []
            continue

        if line.startswith("["):
            diagnostics.append(_error(
                "GIT001",
                f"Invalid section header at line {line_number}: {line}",
                line_number,
                'Only [submodule "<name>"] sections are allowed',
            ))
            continue

        path_match = _PATH_RE.match(line)
        url_match = _URL_RE.match(line)

        if current is None:
            diagnostics.append(_error(
                "GIT003",
                f"Unexpected content outside a submodule section at line {line_number}: {line}",
                line_number,
                'Move this line under a [submodule "<name>"] header',
            ))
            continue

        current.body_comments.extend(pending_comments)
        pending_comments = []

        if path_match:
            current.path = path_match.group(1).strip()
        elif url_match:
            current.url = url_match.group(1).strip()
        else:
            diagnostics.append(_error(
                "GIT002",
                f"Invalid property at line {line_number}: {line}",
                line_number,
                "Submodule sections may only set 'path' and 'url'",
            ))

    if current is not None:
        submodules.append(current.close())

    return GitmodulesDocument(
        submodules=tuple(submodules),
        trailing_comments=tuple(pending_comments),
        diagnostics=tuple(diagnostics),
    )
