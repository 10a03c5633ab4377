"""Shared test fixtures for extension-registry.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import os
from pathlib import Path

import pytest

# Rich consoles are created at import time and wrap at 80 columns when no
# terminal is attached; long tmp_path names would otherwise split messages.
os.environ.setdefault("COLUMNS", "200")

UNSORTED_REGISTRY = """\
[zed-theme]
version = "0.2.0"
source = "extensions/zed-theme"
submodule = "extensions/zed-theme"

[base16]
version = "1.0.0"
source = "extensions/base16"
submodule = "extensions/base16"
path = "themes"
"""

UNSORTED_GITMODULES = """\
[submodule "extensions/zed-theme"]
  path = extensions/zed-theme
  url = https://github.com/example/zed-theme.git
[submodule "extensions/base16"]
  path = extensions/base16
  url = https://github.com/example/base16.git
"""


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "extreg"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def registry_text() -> str:
    """A valid registry whose entries are not in canonical order."""
    return UNSORTED_REGISTRY


@pytest.fixture()
def gitmodules_text() -> str:
    """A valid ``.gitmodules`` whose blocks are not in canonical order."""
    return UNSORTED_GITMODULES


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """A directory holding an unsorted registry and ``.gitmodules``."""
    (tmp_path / "extensions.toml").write_text(UNSORTED_REGISTRY, encoding="utf-8")
    (tmp_path / ".gitmodules").write_text(UNSORTED_GITMODULES, encoding="utf-8")
    return tmp_path
