"""Unit tests for extreg.formatter.sorter: canonical ordering and in-place rewrites."""
from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import pytest

from extreg.errors import SchemaError
from extreg.formatter.sorter import (
    canonical_gitmodules_text,
    canonical_registry_text,
    sort_gitmodules,
    sort_registry,
    write_atomic,
)
from extreg.validator.rules import UrlPolicy

SORTED_REGISTRY = """\
[base16]
version = "1.0.0"
source = "extensions/base16"
submodule = "extensions/base16"
path = "themes"

[zed-theme]
version = "0.2.0"
source = "extensions/zed-theme"
submodule = "extensions/zed-theme"
"""

SORTED_GITMODULES = """\
[submodule "extensions/base16"]
  path = extensions/base16
  url = https://github.com/example/base16.git
[submodule "extensions/zed-theme"]
  path = extensions/zed-theme
  url = https://github.com/example/zed-theme.git
"""


# ===========================================================================
# canonical_registry_text
# ===========================================================================


class TestCanonicalRegistryText:
    def test_sorts_entries_by_id(self, registry_text: str) -> None:
        assert canonical_registry_text(registry_text) == SORTED_REGISTRY

    def test_is_idempotent(self, registry_text: str) -> None:
        once = canonical_registry_text(registry_text)
        assert canonical_registry_text(once) == once

    def test_orders_fields_canonically(self) -> None:
        text = '[a]\npath = "p"\nsubmodule = "s"\nsource = "src"\nversion = "1.0.0"\n'
        assert canonical_registry_text(text) == (
            '[a]\nversion = "1.0.0"\nsource = "src"\nsubmodule = "s"\npath = "p"\n'
        )

    def test_preserves_unknown_keys(self) -> None:
        text = '[a]\nversion = "1.0.0"\nsource = "s"\nhomepage = "https://example.com"\n'
        assert 'homepage = "https://example.com"' in canonical_registry_text(text)

    def test_byte_order_for_digits_and_hyphens(self) -> None:
        text = "".join(
            f'[{name}]\nversion = "1.0.0"\nsource = "s"\n\n' for name in ("b", "a-b", "ab", "0a")
        )
        canonical = canonical_registry_text(text)
        headers = [line for line in canonical.splitlines() if line.startswith("[")]
        assert headers == ["[0a]", "[a-b]", "[ab]", "[b]"]

    def test_comments_are_not_kept(self) -> None:
        text = (
            '# header\n[b]\nversion = "1.0.0"\nsource = "b"  # inline\n\n'
            '[a]\nversion = "1.0.0"\nsource = "a"\n'
        )
        canonical = canonical_registry_text(text)
        assert "#" not in canonical
        assert canonical.startswith("[a]\n")

    def test_invalid_registry_is_not_sorted(self) -> None:
        with pytest.raises(SchemaError, match='"Zed"'):
            canonical_registry_text('[Zed]\nversion = "1.0.0"\nsource = "s"\n')

    def test_empty_registry(self) -> None:
        assert canonical_registry_text("") == ""


# ===========================================================================
# canonical_gitmodules_text
# ===========================================================================


class TestCanonicalGitmodulesText:
    def test_sorts_blocks_by_path(self, gitmodules_text: str) -> None:
        assert canonical_gitmodules_text(gitmodules_text) == SORTED_GITMODULES

    def test_is_idempotent(self, gitmodules_text: str) -> None:
        once = canonical_gitmodules_text(gitmodules_text)
        assert canonical_gitmodules_text(once) == once

    def test_normalizes_layout(self) -> None:
        text = '\n[submodule "a"]\n\turl=https://x/a.git\n\tpath=a\n\n'
        assert canonical_gitmodules_text(text) == (
            '[submodule "a"]\n  path = a\n  url = https://x/a.git\n'
        )

    def test_comments_travel_with_their_block(self) -> None:
        text = (
            '# about b\n[submodule "b"]\n  path = b\n  url = https://x/b\n'
            '[submodule "a"]\n  path = a\n  url = https://x/a\n# eof\n'
        )
        assert canonical_gitmodules_text(text) == (
            '[submodule "a"]\n  path = a\n  url = https://x/a\n'
            '# about b\n[submodule "b"]\n  path = b\n  url = https://x/b\n'
            "# eof\n"
        )

    def test_comment_inside_block_stays_with_it(self) -> None:
        text = (
            '[submodule "b"]\n  path = b\n  # pinned fork of b\n  url = https://x/b\n'
            '[submodule "a"]\n  path = a\n  url = https://x/a\n'
        )
        canonical = canonical_gitmodules_text(text)
        assert canonical == (
            '[submodule "a"]\n  path = a\n  url = https://x/a\n'
            '[submodule "b"]\n# pinned fork of b\n  path = b\n  url = https://x/b\n'
        )
        assert canonical_gitmodules_text(canonical) == canonical

    def test_comment_at_end_of_block_goes_with_next_block(self) -> None:
        text = (
            '[submodule "b"]\n  path = b\n  url = https://x/b\n# about a\n'
            '[submodule "a"]\n  path = a\n  url = https://x/a\n'
        )
        assert canonical_gitmodules_text(text) == (
            '# about a\n[submodule "a"]\n  path = a\n  url = https://x/a\n'
            '[submodule "b"]\n  path = b\n  url = https://x/b\n'
        )

    def test_invalid_file_is_not_sorted(self) -> None:
        text = '[submodule "a"]\n  path = a\n  url = git@host:x/y.git\n'
        with pytest.raises(SchemaError, match='"a" must use "https://"'):
            canonical_gitmodules_text(text)

    def test_policy_is_honoured(self) -> None:
        text = '[submodule "a"]\n  path = a\n  url = git@host:x/y.git\n'
        assert canonical_gitmodules_text(text, UrlPolicy.PERMISSIVE) == text


# ===========================================================================
# In-place rewrites
# ===========================================================================


class TestSortFiles:
    def test_sort_registry_rewrites_unsorted_file(self, workspace: Path) -> None:
        path = workspace / "extensions.toml"
        assert sort_registry(path) is True
        assert path.read_text(encoding="utf-8") == SORTED_REGISTRY

    def test_sort_gitmodules_rewrites_unsorted_file(self, workspace: Path) -> None:
        path = workspace / ".gitmodules"
        assert sort_gitmodules(path) is True
        assert path.read_text(encoding="utf-8") == SORTED_GITMODULES

    def test_second_sort_is_a_no_op(self, workspace: Path) -> None:
        path = workspace / "extensions.toml"
        sort_registry(path)
        before = path.stat().st_mtime_ns
        assert sort_registry(path) is False
        assert path.stat().st_mtime_ns == before

    def test_already_sorted_file_is_not_touched(self, tmp_path: Path) -> None:
        path = tmp_path / ".gitmodules"
        path.write_text(SORTED_GITMODULES, encoding="utf-8")
        os.utime(path, ns=(1_000_000_000, 1_000_000_000))
        assert sort_gitmodules(path) is False
        assert path.stat().st_mtime_ns == 1_000_000_000

    def test_invalid_file_left_unchanged(self, tmp_path: Path) -> None:
        path = tmp_path / "extensions.toml"
        original = '[b]\nversion = "1.0.0"\n\n[a]\nversion = "1.0.0"\nsource = "s"\n'
        path.write_text(original, encoding="utf-8")
        with pytest.raises(SchemaError, match="Extension b missing or invalid source"):
            sort_registry(path)
        assert path.read_text(encoding="utf-8") == original

    def test_no_temporary_files_left_behind(self, workspace: Path) -> None:
        sort_registry(workspace / "extensions.toml")
        sort_gitmodules(workspace / ".gitmodules")
        assert sorted(p.name for p in workspace.iterdir()) == [".gitmodules", "extensions.toml"]

    @pytest.mark.parametrize("name", ["extensions.toml", ".gitmodules"])
    def test_file_mode_survives_sort(self, workspace: Path, name: str) -> None:
        path = workspace / name
        path.chmod(0o644)
        sorter = sort_registry if name == "extensions.toml" else sort_gitmodules
        assert sorter(path) is True
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_logs_rewrite(self, workspace: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="extreg.formatter.sorter"):
            sort_registry(workspace / "extensions.toml")
        assert "Rewrote" in caplog.text


class TestWriteAtomic:
    def test_replaces_content(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_text("old", encoding="utf-8")
        write_atomic(path, "new\n")
        assert path.read_text(encoding="utf-8") == "new\n"

    def test_keeps_mode_of_replaced_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_text("old", encoding="utf-8")
        path.chmod(0o640)
        write_atomic(path, "new\n")
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_new_file_follows_umask(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        previous = os.umask(0o022)
        try:
            write_atomic(path, "new\n")
        finally:
            os.umask(previous)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_failed_replace_keeps_original_and_cleans_up(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "f.txt"
        path.write_text("old", encoding="utf-8")

        def _boom(src: object, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", _boom)
        with pytest.raises(OSError, match="disk full"):
            write_atomic(path, "new")
        assert path.read_text(encoding="utf-8") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["f.txt"]
