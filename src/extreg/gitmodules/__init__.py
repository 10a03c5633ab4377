"""Gitmodules text model.

Exports the line-oriented ``parse_gitmodules`` parser and the matching
``format_gitmodules`` serializer.
"""
from __future__ import annotations

from extreg.gitmodules.parser import GitmodulesDocument, parse_gitmodules
from extreg.gitmodules.serializer import format_document, format_gitmodules

__all__ = [
    "GitmodulesDocument",
    "parse_gitmodules",
    "format_gitmodules",
    "format_document",
]
