"""CLI package.

The ``cli`` sub-package contains the Click application and all command
implementations.  Commands import library code lazily so that
``extreg --help`` stays fast.
"""
from __future__ import annotations
